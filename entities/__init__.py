"""Trello domain entities."""

from .models import (
    TrelloJson, ImagePreviewJson, MemberJson, AttachmentJson,
    ActionJson, ActionDataJson, StickerJson
)
from .field_mapper import MemberFields, AttachmentFields, ActionFields, StickerFields, all_fields
from .base import RemoteContext, TrelloEntity
from .member import Member, MemberContext
from .attachment import Attachment, AttachmentContext
from .action import Action, ActionContext, ActionDataContext
from .sticker import Sticker, StickerContext
from .collections import CardMemberCollection
from .service import EntityService, get_entity_service

__all__ = [
    "TrelloJson", "ImagePreviewJson", "MemberJson", "AttachmentJson",
    "ActionJson", "ActionDataJson", "StickerJson",
    "MemberFields", "AttachmentFields", "ActionFields", "StickerFields", "all_fields",
    "RemoteContext", "TrelloEntity",
    "Member", "MemberContext", "Attachment", "AttachmentContext",
    "Action", "ActionContext", "ActionDataContext", "Sticker", "StickerContext",
    "CardMemberCollection",
    "EntityService", "get_entity_service",
]
