"""Entity service wiring the Trello client to the identity cache."""

from typing import Any, Optional, Union
import structlog

from config import Settings, get_settings
from trello import TrelloClient, get_trello_client
from sync.identity_cache import IdentityCache
from entities.action import Action
from entities.attachment import Attachment
from entities.collections import CardMemberCollection
from entities.member import Member
from entities.models import ActionJson, AttachmentJson, MemberJson, StickerJson
from entities.sticker import Sticker

logger = structlog.get_logger()


class EntityService:
    """Builds entities that share one client and one identity cache."""

    def __init__(
        self,
        client: TrelloClient,
        cache: Optional[IdentityCache] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.cache = cache if cache is not None else IdentityCache()
        self.options: dict[str, Any] = {
            "submit_delay": settings.submit_delay_seconds,
            "refresh_throttle": settings.refresh_throttle_seconds,
        }

    def member(self, member: Union[str, MemberJson]) -> Member:
        """Get the member instance for an id or snapshot."""
        json = MemberJson(id=member) if isinstance(member, str) else member
        return Member.from_json(json, self.client, self.cache, **self.options)

    def attachment(self, card_id: str, attachment: Union[str, AttachmentJson]) -> Attachment:
        json = AttachmentJson(id=attachment) if isinstance(attachment, str) else attachment
        return Attachment.from_json(json, card_id, self.client, self.cache, **self.options)

    def action(self, action: Union[str, ActionJson]) -> Action:
        json = ActionJson(id=action) if isinstance(action, str) else action
        return Action.from_json(json, self.client, self.cache, **self.options)

    def sticker(self, card_id: str, sticker: Union[str, StickerJson]) -> Sticker:
        json = StickerJson(id=sticker) if isinstance(sticker, str) else sticker
        return Sticker.from_json(json, card_id, self.client, self.cache, **self.options)

    def card_members(self, card_id: str) -> CardMemberCollection:
        """Members assigned to a card; call ``refresh()`` to load them."""
        return CardMemberCollection(card_id, self.client, self.cache, **self.options)

    async def get_member(self, member_id: str) -> Member:
        """Get a member and make sure its data is loaded."""
        member = self.member(member_id)
        await member.refresh()
        return member

    async def get_attachment(self, card_id: str, attachment_id: str) -> Attachment:
        attachment = self.attachment(card_id, attachment_id)
        await attachment.refresh()
        return attachment

    async def get_action(self, action_id: str) -> Action:
        action = self.action(action_id)
        await action.refresh()
        return action

    async def get_sticker(self, card_id: str, sticker_id: str) -> Sticker:
        sticker = self.sticker(card_id, sticker_id)
        await sticker.refresh()
        return sticker

    async def close(self) -> None:
        """Forget every cached entity and close the client."""
        self.cache.clear()
        await self.client.close()
        logger.info("entity_service_closed")


# Dependency injection helper
async def get_entity_service() -> EntityService:
    """Yield an EntityService with a fresh identity cache."""
    async for client in get_trello_client():
        service = EntityService(client)
        try:
            yield service
        finally:
            service.cache.clear()
