from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
Platform = Literal[
    "image",
    "youtube",
    "spotify",
    "twitter",
    "instagram",
    "tiktok",
    "vimeo",
    "soundcloud",
    "link",
    "note",
]
Partition = Literal["media", "embed"]
PurchaseStatus = Literal["completed", "refunded"]

PLATFORMS: tuple[Platform, ...] = (
    "image",
    "youtube",
    "spotify",
    "twitter",
    "instagram",
    "tiktok",
    "vimeo",
    "soundcloud",
    "link",
    "note",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Content ---

class ContentDescriptor(BaseModel):
    """One classified tile. Position is assigned by the content store."""

    id: UUID = Field(default_factory=uuid4)
    type: Platform
    url: str | None = None
    external_id: str | None = None
    title: str = ""
    description: str | None = None
    thumbnail_url: str | None = None
    embed_html: str | None = None
    position: int | None = None

# --- Pages ---

class Page(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    serial_number: int
    slug: str
    display_name: str | None = None
    handle: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    background_url: str | None = None
    theme: str = "midnight"
    is_primary: bool = True
    is_public: bool = True
    origin_transaction_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

# --- Purchases ---

class PurchaseRecord(BaseModel):
    transaction_id: str
    serial_number: int
    amount_cents: int
    currency: str = "usd"
    customer_email: str | None = None
    status: PurchaseStatus = "completed"
    created_at: datetime = Field(default_factory=_utcnow)

# --- Drafts (client-held, pre-payment) ---

class DraftProfile(BaseModel):
    display_name: str | None = None
    handle: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    background_url: str | None = None
    theme: str | None = None


class Draft(BaseModel):
    profile: DraftProfile = Field(default_factory=DraftProfile)
    content: list[ContentDescriptor] = Field(default_factory=list)
