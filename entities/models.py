"""Wire snapshots for Trello entities.

Every field is optional: a snapshot may be a full fetch, a partial fetch
limited by the field selection, an update payload, or a bare id.
"""

from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class TrelloJson(BaseModel):
    """Base snapshot; keys use the API's camelCase aliases."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None


class ImagePreviewJson(BaseModel):
    """Scaled preview image of an attachment or sticker."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = Field(None, alias="bytes")
    scaled: Optional[bool] = None


class MemberJson(TrelloJson):
    full_name: Optional[str] = Field(None, alias="fullName")
    username: Optional[str] = None
    initials: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")


class AttachmentJson(TrelloJson):
    size: Optional[int] = Field(None, alias="bytes")
    date: Optional[datetime] = None
    edge_color: Optional[str] = Field(None, alias="edgeColor")
    id_member: Optional[str] = Field(None, alias="idMember")
    is_upload: Optional[bool] = Field(None, alias="isUpload")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    name: Optional[str] = None
    previews: Optional[list[ImagePreviewJson]] = None
    url: Optional[str] = None
    pos: Optional[Union[float, str]] = None


class ActionDataJson(BaseModel):
    """The ``data`` sub-resource of an action."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    text: Optional[str] = None


class ActionJson(TrelloJson):
    id_member_creator: Optional[str] = Field(None, alias="idMemberCreator")
    member_creator: Optional[MemberJson] = Field(None, alias="memberCreator")
    date: Optional[datetime] = None
    type: Optional[str] = None
    data: Optional[ActionDataJson] = None
    # Only sent on update; reads come from data.text
    text: Optional[str] = None


class StickerJson(TrelloJson):
    image: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    image_scaled: Optional[list[ImagePreviewJson]] = Field(None, alias="imageScaled")
    left: Optional[float] = None
    top: Optional[float] = None
    rotation: Optional[int] = None
    z_index: Optional[int] = Field(None, alias="zIndex")
