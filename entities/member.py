"""Trello members."""

from typing import Any, Optional

from entities.base import RemoteContext, TrelloEntity
from entities.field_mapper import MemberFields, all_fields
from entities.models import MemberJson
from sync.field import Field
from sync.identity_cache import IdentityCache
from sync.properties import Property, PropertyRegistry
from sync.validation import NOT_EMPTY
from trello import TrelloClient


class MemberContext(RemoteContext[MemberJson]):
    downloaded_fields = all_fields(MemberFields)
    properties = PropertyRegistry(MemberJson, {
        "full_name": Property.attribute("full_name", field=MemberFields.FULL_NAME),
        "username": Property.attribute("username", field=MemberFields.USERNAME),
        "initials": Property.attribute("initials", field=MemberFields.INITIALS),
        "bio": Property.attribute("bio", field=MemberFields.BIO),
        "avatar_url": Property.attribute("avatar_url", field=MemberFields.AVATAR_URL),
    })

    def _path(self) -> str:
        return f"/members/{self.data.id}"


class Member(TrelloEntity):
    """A Trello user."""

    Fields = MemberFields
    _context_type = MemberContext

    def __init__(self, member_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(MemberContext(member_id, client, cache, **options))
        self.full_name: Field[str] = Field(self._context, "full_name").add_rule(NOT_EMPTY)
        self.username: Field[str] = Field(self._context, "username")
        self.initials: Field[str] = Field(self._context, "initials")
        self.bio: Field[str] = Field(self._context, "bio")
        self.avatar_url: Field[str] = Field(self._context, "avatar_url")

    @classmethod
    def from_json(cls, json: MemberJson, client: TrelloClient, cache: IdentityCache, **options: Any) -> "Member":
        return cls._cached(json, cache, lambda: cls(json.id, client, cache, **options))

    @classmethod
    def from_id(cls, member_id: str, client: TrelloClient, cache: IdentityCache, **options: Any) -> "Member":
        return cls.from_json(MemberJson(id=member_id), client, cache, **options)

    @classmethod
    def resolve_reference(cls, raw: Any, context: RemoteContext) -> Optional["Member"]:
        """Resolve an id or nested member snapshot found in another entity."""
        if raw is None:
            return None
        json = raw if isinstance(raw, MemberJson) else MemberJson(id=raw)
        return cls.from_json(json, context.client, context.cache, **context.options)

    def __str__(self) -> str:
        return self.full_name.current or self.id
