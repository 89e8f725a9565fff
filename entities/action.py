"""Board and card actions (comments and history entries)."""

from datetime import datetime
from typing import Any, Optional

from entities.base import RemoteContext, TrelloEntity
from entities.field_mapper import ActionFields, all_fields
from entities.member import Member
from entities.models import ActionDataJson, ActionJson
from sync.context import DependentContext
from sync.field import Field
from sync.identity_cache import IdentityCache
from sync.properties import Property, PropertyRegistry
from sync.validation import NOT_EMPTY, MaxLengthRule
from trello import TrelloClient

TEXT_MAX_LENGTH = 16384


class ActionDataContext(DependentContext[ActionDataJson]):
    """The ``data`` block of an action, synchronized through its action."""

    properties = PropertyRegistry(ActionDataJson, {
        "text": Property.attribute("text"),
    })


class ActionContext(RemoteContext[ActionJson]):
    downloaded_fields = all_fields(ActionFields)
    properties = PropertyRegistry(ActionJson, {
        "creator": Property.attribute("member_creator", field=ActionFields.CREATOR,
                                      include="memberCreator", resolver=Member.resolve_reference),
        "date": Property.attribute("date", field=ActionFields.DATE),
        "type": Property.attribute("type", field=ActionFields.TYPE),
    })

    def __init__(self, action_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(action_id, client, cache, **options)
        self.action_data = ActionDataContext(self.ensure_fresh, self.request_submit, **options)
        self.add_dependent("data", self.action_data)

    def _path(self) -> str:
        return f"/actions/{self.data.id}"

    def _fetch_params(self) -> dict[str, str]:
        params = super()._fetch_params()
        if ActionFields.DATA & type(self).downloaded_fields:
            params["fields"] = ",".join(filter(None, [params["fields"], "data"]))
        return params

    def _apply_dependent_changes(self, payload: ActionJson, dependent_changes: dict[str, dict[str, Any]]) -> None:
        # Comment edits are accepted as a top-level text field
        data_changes = dependent_changes.get("data") or {}
        if "text" in data_changes:
            payload.text = data_changes["text"]


class Action(TrelloEntity):
    """Something a member did; comment actions have editable text."""

    Fields = ActionFields
    _context_type = ActionContext

    def __init__(self, action_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(ActionContext(action_id, client, cache, **options))
        self.creator: Field[Member] = Field(self._context, "creator")
        self.date: Field[datetime] = Field(self._context, "date")
        self.type: Field[str] = Field(self._context, "type")
        self.text: Field[str] = (
            Field(self._context.action_data, "text")
            .add_rule(NOT_EMPTY)
            .add_rule(MaxLengthRule(TEXT_MAX_LENGTH))
        )

    @classmethod
    def from_json(cls, json: ActionJson, client: TrelloClient, cache: IdentityCache, **options: Any) -> "Action":
        return cls._cached(json, cache, lambda: cls(json.id, client, cache, **options))

    @classmethod
    def from_id(cls, action_id: str, client: TrelloClient, cache: IdentityCache, **options: Any) -> "Action":
        return cls.from_json(ActionJson(id=action_id), client, cache, **options)

    def __str__(self) -> str:
        text: Optional[str] = self.text.current
        return text or f"{self.type.current} action {self.id}"
