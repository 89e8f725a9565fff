"""Pytest configuration and fixtures."""

from typing import Optional
import pytest
from unittest.mock import AsyncMock, MagicMock
from pydantic import BaseModel

from config import Settings
from trello import TrelloClient
from sync.context import DependentContext, SynchronizationContext
from sync.identity_cache import IdentityCache
from sync.properties import Property, PropertyRegistry
from entities import Action, Attachment, Member, Sticker
from entities.service import EntityService

ATTACHMENT_ID = "5f1a2b3c4d5e6f7a8b9c0d1e"
CARD_ID = "5f1a2b3c4d5e6f7a8b9c0d99"
MEMBER_ID = "5e0000000000000000000001"
ACTION_ID = "5f2000000000000000000abc"
STICKER_ID = "5f3000000000000000000def"


class DetailJson(BaseModel):
    note: Optional[str] = None


class WidgetJson(BaseModel):
    id: Optional[str] = None
    a: Optional[int] = None
    b: Optional[int] = None
    name: Optional[str] = None
    position: Optional[float] = None
    detail: Optional[DetailJson] = None


class DetailContext(DependentContext[DetailJson]):
    properties = PropertyRegistry(DetailJson, {"note": Property.attribute("note")})


class WidgetContext(SynchronizationContext[WidgetJson]):
    """Minimal context backed by a mock gateway."""

    properties = PropertyRegistry(WidgetJson, {
        "a": Property.attribute("a"),
        "b": Property.attribute("b"),
        "name": Property.attribute("name"),
        "position": Property.attribute("position"),
    })

    def __init__(self, widget_id, gateway, **kwargs):
        super().__init__(**kwargs)
        self.gateway = gateway
        self.data.id = widget_id
        self.detail = DetailContext(self.ensure_fresh, self.request_submit)
        self.add_dependent("detail", self.detail)

    async def _get_data(self):
        return WidgetJson.model_validate(await self.gateway.fetch(self.data.id))

    async def _submit_data(self, payload):
        response = await self.gateway.update(self.data.id, payload.model_dump(exclude_unset=True))
        return WidgetJson.model_validate(response)

    async def _delete_data(self):
        await self.gateway.delete(self.data.id)


@pytest.fixture
def gateway():
    """Mock fetch/update/delete collaborator; update echoes the payload."""
    gateway = MagicMock()
    gateway.fetch = AsyncMock(return_value={"id": "w1", "a": 1, "b": 2, "name": "Widget", "position": 1.0})
    gateway.update = AsyncMock(side_effect=lambda widget_id, payload: {"id": widget_id, **payload})
    gateway.delete = AsyncMock()
    return gateway


@pytest.fixture
def make_widget(gateway):
    """Build WidgetContext instances bound to the mock gateway."""
    def _make(widget_id="w1", **kwargs):
        return WidgetContext(widget_id, gateway, **kwargs)
    return _make


@pytest.fixture
def settings():
    """Settings with coalescing delay disabled and no .env lookup."""
    return Settings(_env_file=None, submit_delay_seconds=0.0)


@pytest.fixture
def mock_trello_client():
    """Mock TrelloClient for testing."""
    client = MagicMock(spec=TrelloClient)

    # Mock async methods
    client.get_json = AsyncMock(return_value={})
    client.put_json = AsyncMock(side_effect=lambda path, payload: payload)
    client.post_json = AsyncMock(return_value=[])
    client.delete = AsyncMock()
    client.close = AsyncMock()

    return client


@pytest.fixture
def identity_cache():
    cache = IdentityCache()
    yield cache
    cache.clear()


@pytest.fixture
def entity_service(mock_trello_client, identity_cache, settings):
    """EntityService with mock TrelloClient."""
    return EntityService(mock_trello_client, identity_cache, settings)


@pytest.fixture(autouse=True)
def restore_downloaded_fields():
    """Undo per-type field selection changes made by a test."""
    original = {cls: cls.get_downloaded_fields() for cls in (Action, Attachment, Member, Sticker)}
    yield
    for cls, selection in original.items():
        cls.set_downloaded_fields(selection)


@pytest.fixture
def sample_attachment_data():
    """Sample attachment payload as returned by the API."""
    return {
        "id": ATTACHMENT_ID,
        "bytes": 2048,
        "date": "2024-01-15T10:30:00.000Z",
        "edgeColor": "#aabbcc",
        "idMember": MEMBER_ID,
        "isUpload": True,
        "mimeType": "image/png",
        "name": "diagram.png",
        "previews": [{"id": "p1", "url": "https://example.com/p1.png", "width": 70, "height": 50}],
        "url": "https://example.com/diagram.png",
        "pos": 16384.0,
    }


@pytest.fixture
def sample_action_data():
    """Sample comment action payload as returned by the API."""
    return {
        "id": ACTION_ID,
        "idMemberCreator": MEMBER_ID,
        "memberCreator": {"id": MEMBER_ID, "fullName": "Test User", "username": "testuser"},
        "date": "2024-02-01T08:00:00.000Z",
        "type": "commentCard",
        "data": {"text": "Looks good", "card": {"id": CARD_ID}},
    }


@pytest.fixture
def sample_sticker_data():
    """Sample sticker payload as returned by the API."""
    return {
        "id": STICKER_ID,
        "image": "thumbsup",
        "imageUrl": "https://example.com/thumbsup.png",
        "left": 10.0,
        "top": 0.0,
        "rotation": 0,
        "zIndex": 1,
    }
