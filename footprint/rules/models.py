from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class IdentityRules(BaseModel):
    first_serial: int = Field(ge=1)

class PricingRules(BaseModel):
    amount_cents: int = Field(gt=0)
    currency: str
    product_name: str
    product_description: str = ""

class SlugRules(BaseModel):
    pattern: str
    min: int
    max: int
    reserved: list[str] = Field(default_factory=list)

class ContentRules(BaseModel):
    max_tiles_per_page: int
    max_note_length: int
    media_types: list[str]

class PageRules(BaseModel):
    default_theme: str
    themes: list[str]

class PaymentsRules(BaseModel):
    adapter: str  # "stripe" | "stub"
    lookup_timeout_seconds: float
    success_path: str
    cancel_path: str

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]

class Rules(BaseModel):
    project: ProjectRules
    identity: IdentityRules
    pricing: PricingRules
    slugs: SlugRules
    content: ContentRules
    page: PageRules
    payments: PaymentsRules
    ops: OpsRules
