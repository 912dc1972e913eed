"""Publish and checkout routes."""

from fastapi import APIRouter, Depends

from footprint.api.deps import Settings, get_publish_component, get_rules, get_settings
from footprint.api.errors import http_error
from footprint.api.schemas import (
    CheckoutRequestModel,
    CheckoutResponse,
    PublishRequest,
    PublishResponse,
)
from footprint.components.publish import CheckoutInput, PublishComponent, PublishInput
from footprint.domain.entities import Draft
from footprint.rules.models import Rules

router = APIRouter()


@router.post("/publish", response_model=PublishResponse)
def publish(
    data: PublishRequest,
    component: PublishComponent = Depends(get_publish_component),
    rules: Rules = Depends(get_rules),
) -> PublishResponse:
    """Publish a paid draft. Safe to resubmit with the same transaction id."""
    draft = None
    if data.draft is not None:
        max_len = rules.content.max_note_length
        draft = Draft(
            profile=data.draft.profile,
            content=[tile.to_descriptor(max_len) for tile in data.draft.content],
        )

    result = component.run_publish(
        PublishInput(transaction_id=data.transaction_id, slug=data.slug, draft=draft)
    )
    if not result.success:
        raise http_error(result.errors)

    assert result.serial_number is not None and result.slug is not None
    return PublishResponse(
        serial_number=result.serial_number,
        slug=result.slug,
        created=result.created,
    )


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    data: CheckoutRequestModel,
    component: PublishComponent = Depends(get_publish_component),
    settings: Settings = Depends(get_settings),
) -> CheckoutResponse:
    """Start a fixed-price checkout for an available slug."""
    result = component.run_checkout(
        CheckoutInput(slug=data.slug, email=data.email, app_url=settings.app_url)
    )
    if not result.success:
        raise http_error(result.errors)

    assert result.url is not None and result.transaction_id is not None
    return CheckoutResponse(url=result.url, transaction_id=result.transaction_id)
