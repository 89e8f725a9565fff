"""Entity collections owned by a card."""

from typing import Any, Iterator

import structlog

from entities.member import Member, MemberContext
from entities.models import MemberJson
from sync.errors import ValidationFault
from sync.identity_cache import IdentityCache
from sync.validation import VALID_ID
from trello import TrelloClient

logger = structlog.get_logger()


class CardMemberCollection:
    """Members assigned to a card.

    Iteration yields the members seen by the last ``refresh()``. Every
    downloaded snapshot is merged into the cached Member, so subscribers of a
    member hear about changes the collection picked up.
    """

    def __init__(self, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        self.card_id = card_id
        self._client = client
        self._cache = cache
        self._options = options
        self._members: list[Member] = []

    def __iter__(self) -> Iterator[Member]:
        return iter(list(self._members))

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member: object) -> bool:
        return any(existing is member for existing in self._members)

    async def refresh(self) -> list[Member]:
        """Download the card's members with the Member field selection."""
        params = MemberContext.properties.fetch_params(Member.get_downloaded_fields())
        payload = await self._client.get_json(f"/cards/{self.card_id}/members", params=params)
        self._members = [
            Member.from_json(MemberJson.model_validate(item), self._client, self._cache, **self._options)
            for item in payload
        ]
        logger.debug("card_members_fetched", card_id=self.card_id, count=len(self._members))
        return list(self._members)

    async def add(self, member: Member) -> None:
        """Assign ``member`` to the card."""
        self._check(member)
        await self._client.post_json(f"/cards/{self.card_id}/idMembers", {"value": member.id})
        if member not in self:
            self._members.append(member)
        logger.info("card_member_added", card_id=self.card_id, member_id=member.id)

    async def remove(self, member: Member) -> None:
        """Unassign ``member`` from the card."""
        self._check(member)
        await self._client.delete(f"/cards/{self.card_id}/idMembers/{member.id}")
        self._members = [existing for existing in self._members if existing is not member]
        logger.info("card_member_removed", card_id=self.card_id, member_id=member.id)

    @staticmethod
    def _check(member: Member) -> None:
        message = VALID_ID.validate(None, member.id)
        if message is not None:
            raise ValidationFault(VALID_ID.code.value, message, field="member")
