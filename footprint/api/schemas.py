from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from footprint.core.services.classifier import classify, content_background, content_icon
from footprint.domain.entities import ContentDescriptor, DraftProfile, Page, Platform


# --- Tiles ---
class TileModel(BaseModel):
    """
    A tile as submitted in a draft.

    Either a classified descriptor (type set) or raw pasted text in input.
    """

    id: UUID | None = None
    type: Platform | None = None
    input: str | None = None
    url: str | None = None
    external_id: str | None = None
    title: str = ""
    description: str | None = None
    thumbnail_url: str | None = None
    embed_html: str | None = None

    def to_descriptor(self, max_note_length: int) -> ContentDescriptor:
        if self.type is None:
            tile = classify(self.input or self.url or self.title, max_note_length=max_note_length)
            return tile.model_copy(update={"id": self.id}) if self.id else tile

        data: dict[str, Any] = self.model_dump(exclude={"input"}, exclude_none=True)
        return ContentDescriptor.model_validate(data)


class TileResponse(BaseModel):
    id: UUID
    type: Platform
    url: str | None
    external_id: str | None
    title: str
    description: str | None
    thumbnail_url: str | None
    embed_html: str | None
    position: int | None
    icon: str
    background: str | None

    @classmethod
    def from_descriptor(cls, tile: ContentDescriptor) -> "TileResponse":
        return cls(
            **tile.model_dump(),
            icon=content_icon(tile.type),
            background=content_background(tile.type),
        )


class TileListResponse(BaseModel):
    items: list[TileResponse]
    total: int


class TileAddRequest(BaseModel):
    input: str


class TileReorderRequest(BaseModel):
    tile_id: UUID
    new_index: int = Field(ge=0)


class ParseRequest(BaseModel):
    input: str


# --- Publish ---
class DraftModel(BaseModel):
    profile: DraftProfile = Field(default_factory=DraftProfile)
    content: list[TileModel] = Field(default_factory=list)


class PublishRequest(BaseModel):
    transaction_id: str
    slug: str
    draft: DraftModel | None = None


class PublishResponse(BaseModel):
    serial_number: int
    slug: str
    created: bool


class CheckoutRequestModel(BaseModel):
    slug: str
    email: str | None = None


class CheckoutResponse(BaseModel):
    url: str
    transaction_id: str


class WebhookResponse(BaseModel):
    received: bool = True
    event_type: str | None = None
    handled: bool = False
    serial_number: int | None = None


# --- Footprints ---
class PageResponse(BaseModel):
    serial_number: int
    slug: str
    display_name: str | None
    handle: str | None
    bio: str | None
    avatar_url: str | None
    background_url: str | None
    theme: str
    is_public: bool

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls.model_validate(page.model_dump(include=set(cls.model_fields)))


class FootprintResponse(BaseModel):
    page: PageResponse
    tiles: list[TileResponse]


class NextSerialResponse(BaseModel):
    next_serial: int
