"""Payment processor event notifications."""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool

from footprint.api.deps import get_publish_component
from footprint.api.errors import http_error
from footprint.api.schemas import WebhookResponse
from footprint.components.publish import PublishComponent, WebhookInput

router = APIRouter()


@router.post("/webhook", response_model=WebhookResponse)
async def receive_event(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    component: PublishComponent = Depends(get_publish_component),
) -> WebhookResponse:
    """
    Verify and handle one event.

    Retryable publish failures answer 503 so the processor redelivers;
    permanent ones are acknowledged since redelivery cannot fix them.
    """
    # Signature covers the raw bytes, never a re-serialized body
    payload = await request.body()
    result = await run_in_threadpool(
        component.run_webhook,
        WebhookInput(payload=payload, signature=stripe_signature or ""),
    )

    if not result.success:
        if not result.handled or any(err.retryable for err in result.errors):
            raise http_error(result.errors)

    publish = result.publish
    return WebhookResponse(
        event_type=result.event_type,
        handled=result.handled,
        serial_number=publish.serial_number if publish and publish.success else None,
    )
