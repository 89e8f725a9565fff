"""Card stickers."""

from typing import Any

from entities.base import RemoteContext, TrelloEntity
from entities.field_mapper import StickerFields, all_fields
from entities.models import ImagePreviewJson, StickerJson
from sync.field import Field
from sync.identity_cache import IdentityCache
from sync.properties import Property, PropertyRegistry
from sync.validation import NumericRangeRule
from trello import TrelloClient

# Offsets are percentages of the card cover
OFFSET_RANGE = NumericRangeRule(-60, 100)
ROTATION_RANGE = NumericRangeRule(0, 359)
Z_INDEX_RANGE = NumericRangeRule(0)


class StickerContext(RemoteContext[StickerJson]):
    downloaded_fields = all_fields(StickerFields)
    properties = PropertyRegistry(StickerJson, {
        "left": Property.attribute("left", field=StickerFields.LEFT),
        "name": Property.attribute("image", field=StickerFields.NAME),
        "previews": Property.attribute("image_scaled", field=StickerFields.PREVIEWS),
        "rotation": Property.attribute("rotation", field=StickerFields.ROTATION),
        "top": Property.attribute("top", field=StickerFields.TOP),
        "image_url": Property.attribute("image_url", field=StickerFields.IMAGE_URL),
        "z_index": Property.attribute("z_index", field=StickerFields.Z_INDEX),
    })

    def __init__(self, sticker_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(sticker_id, client, cache, **options)
        self.card_id = card_id

    def _path(self) -> str:
        return f"/cards/{self.card_id}/stickers/{self.data.id}"


class Sticker(TrelloEntity):
    """An image placed on a card cover."""

    Fields = StickerFields
    _context_type = StickerContext

    def __init__(self, sticker_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any):
        super().__init__(StickerContext(sticker_id, card_id, client, cache, **options))
        self.card_id = card_id
        self.left: Field[float] = Field(self._context, "left").add_rule(OFFSET_RANGE)
        self.name: Field[str] = Field(self._context, "name")
        self.previews: Field[list[ImagePreviewJson]] = Field(self._context, "previews")
        self.rotation: Field[int] = Field(self._context, "rotation").add_rule(ROTATION_RANGE)
        self.top: Field[float] = Field(self._context, "top").add_rule(OFFSET_RANGE)
        self.image_url: Field[str] = Field(self._context, "image_url")
        self.z_index: Field[int] = Field(self._context, "z_index").add_rule(Z_INDEX_RANGE)

    @classmethod
    def from_json(
        cls, json: StickerJson, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any
    ) -> "Sticker":
        return cls._cached(json, cache, lambda: cls(json.id, card_id, client, cache, **options))

    @classmethod
    def from_id(
        cls, sticker_id: str, card_id: str, client: TrelloClient, cache: IdentityCache, **options: Any
    ) -> "Sticker":
        return cls.from_json(StickerJson(id=sticker_id), card_id, client, cache, **options)

    def __str__(self) -> str:
        return self.name.current or self.id
