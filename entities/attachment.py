"""Card attachments."""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from entities.base import RemoteContext, TrelloEntity
from entities.field_mapper import AttachmentFields, all_fields
from entities.member import Member
from entities.models import AttachmentJson, ImagePreviewJson
from sync.field import Field
from sync.identity_cache import IdentityCache
from sync.properties import Property, PropertyRegistry
from sync.validation import NOT_EMPTY, POSITION, MaxLengthRule
from trello import TrelloClient

NAME_MAX_LENGTH = 256


class AttachmentContext(RemoteContext[AttachmentJson]):
    downloaded_fields = all_fields(AttachmentFields)
    properties = PropertyRegistry(AttachmentJson, {
        "bytes": Property.attribute("size", field=AttachmentFields.BYTES),
        "date": Property.attribute("date", field=AttachmentFields.DATE),
        "edge_color": Property.attribute("edge_color", field=AttachmentFields.EDGE_COLOR),
        "is_upload": Property.attribute("is_upload", field=AttachmentFields.IS_UPLOAD),
        "member": Property.attribute("id_member", field=AttachmentFields.MEMBER,
                                     resolver=Member.resolve_reference),
        "mime_type": Property.attribute("mime_type", field=AttachmentFields.MIME_TYPE),
        "name": Property.attribute("name", field=AttachmentFields.NAME),
        "previews": Property.attribute("previews", field=AttachmentFields.PREVIEWS),
        "url": Property.attribute("url", field=AttachmentFields.URL),
        "position": Property.attribute("pos", field=AttachmentFields.POSITION),
    })

    def __init__(self, attachment_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(attachment_id, client, cache, **options)
        self.card_id = card_id

    def _path(self) -> str:
        return f"/cards/{self.card_id}/attachments/{self.data.id}"


class Attachment(TrelloEntity):
    """A file or link attached to a card."""

    Fields = AttachmentFields
    _context_type = AttachmentContext

    def __init__(self, attachment_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(AttachmentContext(attachment_id, card_id, client, cache, **options))
        self.card_id = card_id
        self._creation: Optional[datetime] = None

        self.bytes: Field[int] = Field(self._context, "bytes")
        self.date: Field[datetime] = Field(self._context, "date")
        self.edge_color: Field[str] = Field(self._context, "edge_color")
        self.is_upload: Field[bool] = Field(self._context, "is_upload")
        self.member: Field[Member] = Field(self._context, "member")
        self.mime_type: Field[str] = Field(self._context, "mime_type")
        self.name: Field[str] = (
            Field(self._context, "name")
            .add_rule(NOT_EMPTY)
            .add_rule(MaxLengthRule(NAME_MAX_LENGTH))
        )
        self.previews: Field[list[ImagePreviewJson]] = Field(self._context, "previews")
        self.url: Field[str] = Field(self._context, "url")
        self.position: Field[Union[float, str]] = Field(self._context, "position").add_rule(POSITION)

    @classmethod
    def from_json(
        cls, json: AttachmentJson, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any
    ) -> "Attachment":
        return cls._cached(json, cache, lambda: cls(json.id, card_id, client, cache, **options))

    @classmethod
    def from_id(
        cls, attachment_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any
    ) -> "Attachment":
        return cls.from_json(AttachmentJson(id=attachment_id), card_id, client, cache, **options)

    @property
    def creation_date(self) -> datetime:
        """When the attachment was created, read from the timestamp in its id."""
        if self._creation is None:
            self._creation = datetime.fromtimestamp(int(self.id[:8], 16), tz=timezone.utc)
        return self._creation

    def __str__(self) -> str:
        return self.name.current or self.id
