"""
Publish component - turns a completed payment plus a draft into a
numbered, persisted page.

Every run walks the same state machine (see footprint.domain.state).
Each step is idempotent on its own, so an aborted run can be resubmitted
with the same transaction id and converges on the same identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from footprint.components.publish.models import (
    CheckoutInput,
    CheckoutOutput,
    PublishInput,
    PublishOutput,
    PublishValidationError,
    WebhookInput,
    WebhookOutput,
)
from footprint.components.publish.ports import (
    ClockPort,
    ContentStorePort,
    NotifierPort,
    PageRepoPort,
    PaymentPort,
    PurchaseLedgerPort,
    SerialCounterPort,
)
from footprint.core.ports.db import AllocationError, SlugConflictError, StoreError
from footprint.core.ports.notify import NoticeStatus, WelcomeNotice
from footprint.core.ports.payment import (
    CHECKOUT_COMPLETED,
    CheckoutRequest,
    PaymentNotFoundError,
    PaymentSession,
    PaymentUnavailableError,
    SignatureVerificationError,
)
from footprint.domain.entities import ContentDescriptor, Draft, Page, PurchaseRecord
from footprint.domain.sanitize import clip_text, normalize_slug, slug_problem
from footprint.domain.state import PublishState, advance
from footprint.rules.models import Rules

logger = logging.getLogger(__name__)


class PublishAborted(Exception):
    """Internal signal: stop the run with a validation error."""

    def __init__(self, error: PublishValidationError) -> None:
        self.error = error
        super().__init__(error.message)


def _abort(code: str, message: str, field: str) -> PublishAborted:
    return PublishAborted(PublishValidationError(code=code, message=message, field=field))


@dataclass
class _Run:
    """Mutable bookkeeping for one publish run."""

    transaction_id: str
    slug: str
    state: PublishState = PublishState.VALIDATING_PAYMENT
    transitions: list[PublishState] = field(
        default_factory=lambda: [PublishState.VALIDATING_PAYMENT]
    )
    session: PaymentSession | None = None
    serial_number: int | None = None
    page: Page | None = None
    created: bool = False

    def move(self, new: PublishState) -> None:
        self.state = advance(self.state, new)
        self.transitions.append(new)
        logger.debug("Publish %s -> %s", self.transaction_id, new.value)


class PublishComponent:
    """Component coordinating payment validation, identity and persistence."""

    def __init__(
        self,
        payments: PaymentPort,
        counter: SerialCounterPort,
        ledger: PurchaseLedgerPort,
        pages: PageRepoPort,
        content: ContentStorePort,
        notifier: NotifierPort,
        rules: Rules,
        clock: ClockPort,
    ) -> None:
        self._payments = payments
        self._counter = counter
        self._ledger = ledger
        self._pages = pages
        self._content = content
        self._notifier = notifier
        self._rules = rules
        self._clock = clock

    def run(
        self, input_data: PublishInput | CheckoutInput | WebhookInput
    ) -> PublishOutput | CheckoutOutput | WebhookOutput:
        """Main dispatcher - routes to appropriate handler based on input type."""
        if isinstance(input_data, PublishInput):
            return self.run_publish(input_data)
        elif isinstance(input_data, CheckoutInput):
            return self.run_checkout(input_data)
        elif isinstance(input_data, WebhookInput):
            return self.run_webhook(input_data)
        else:
            raise TypeError(f"Unknown input type: {type(input_data)}")

    def run_publish(self, input_data: PublishInput) -> PublishOutput:
        run = _Run(
            transaction_id=input_data.transaction_id.strip(),
            slug=normalize_slug(input_data.slug),
        )

        try:
            self._validate_payment(run, input_data.draft)
            run.move(PublishState.RESOLVING_IDENTITY)
            self._resolve_identity(run)
            run.move(PublishState.UPSERTING_PROFILE)
            self._upsert_profile(run, input_data.draft)
            run.move(PublishState.REPLACING_CONTENT)
            self._replace_content(run, input_data.draft)
            run.move(PublishState.RECORDING_PURCHASE)
            self._record_purchase(run)
            run.move(PublishState.DONE)
        except PublishAborted as e:
            failed_in = run.state
            run.move(PublishState.ABORTED)
            logger.warning(
                "Publish %s aborted in %s: %s (%s)",
                run.transaction_id,
                failed_in.value,
                e.error.code,
                e.error.message,
            )
            return PublishOutput(
                errors=[e.error],
                success=False,
                state=run.state,
                serial_number=run.serial_number,
                slug=run.slug,
                transitions=run.transitions,
            )

        logger.info(
            "Published #%d as /%s (tx=%s, source=%s, created=%s)",
            run.serial_number,
            run.slug,
            run.transaction_id,
            input_data.source,
            run.created,
        )
        return PublishOutput(
            errors=[],
            success=True,
            state=run.state,
            serial_number=run.serial_number,
            slug=run.slug,
            created=run.created,
            transitions=run.transitions,
        )

    def run_checkout(self, input_data: CheckoutInput) -> CheckoutOutput:
        """Start a checkout for an available slug."""
        slug = normalize_slug(input_data.slug)

        problem = slug_problem(slug, self._rules.slugs)
        if problem:
            return CheckoutOutput(
                errors=[PublishValidationError(code="invalid_slug", message=problem, field="slug")],
                success=False,
            )

        if self._pages.get_by_slug(slug) is not None:
            return CheckoutOutput(
                errors=[
                    PublishValidationError(
                        code="slug_taken",
                        message=f"Slug '{slug}' is already taken",
                        field="slug",
                    )
                ],
                success=False,
            )

        pricing = self._rules.pricing
        payments = self._rules.payments
        request = CheckoutRequest(
            slug=slug,
            email=input_data.email,
            amount_cents=pricing.amount_cents,
            currency=pricing.currency,
            product_name=pricing.product_name,
            product_description=pricing.product_description,
            success_url=f"{input_data.app_url}{payments.success_path}",
            cancel_url=f"{input_data.app_url}{payments.cancel_path}",
        )

        try:
            session = self._payments.create_checkout(request)
        except PaymentUnavailableError as e:
            return CheckoutOutput(
                errors=[
                    PublishValidationError(code="payment_unavailable", message=str(e), field="slug")
                ],
                success=False,
            )

        logger.info("Checkout %s started for /%s", session.transaction_id, slug)
        return CheckoutOutput(
            errors=[],
            success=True,
            transaction_id=session.transaction_id,
            url=session.url,
        )

    def run_webhook(self, input_data: WebhookInput) -> WebhookOutput:
        """
        Verify an event notification and publish on checkout completion.

        The page is created from the slug in session metadata; the client's
        draft (if it arrives) fills in profile and content later.
        """
        try:
            event = self._payments.construct_event(input_data.payload, input_data.signature)
        except SignatureVerificationError as e:
            logger.warning("Rejected event notification: %s", e)
            return WebhookOutput(
                errors=[
                    PublishValidationError(
                        code="invalid_signature", message=str(e), field="signature"
                    )
                ],
                success=False,
            )

        if event.event_type != CHECKOUT_COMPLETED or event.session is None:
            logger.debug("Ignoring event %s (%s)", event.event_id, event.event_type)
            return WebhookOutput(errors=[], success=True, event_type=event.event_type)

        session = event.session
        if not session.slug:
            logger.warning("Checkout %s completed without a slug", session.transaction_id)
            return WebhookOutput(errors=[], success=True, event_type=event.event_type)

        result = self.run_publish(
            PublishInput(
                transaction_id=session.transaction_id,
                slug=session.slug,
                draft=None,
                source="webhook",
            )
        )
        return WebhookOutput(
            errors=result.errors,
            success=result.success,
            event_type=event.event_type,
            handled=True,
            publish=result,
        )

    # --- Steps ---

    def _validate_payment(self, run: _Run, draft: Draft | None) -> None:
        if not run.transaction_id:
            raise _abort("invalid_input", "Transaction id is required", "transaction_id")

        problem = slug_problem(run.slug, self._rules.slugs)
        if problem:
            raise _abort("invalid_slug", problem, "slug")

        max_tiles = self._rules.content.max_tiles_per_page
        if draft is not None and len(draft.content) > max_tiles:
            raise _abort(
                "too_many_tiles",
                f"A page holds at most {max_tiles} tiles",
                "draft.content",
            )

        if draft is not None and len({item.id for item in draft.content}) != len(draft.content):
            raise _abort("invalid_input", "Draft tiles must have distinct ids", "draft.content")

        try:
            session = self._payments.retrieve_session(run.transaction_id)
        except PaymentNotFoundError:
            raise _abort(
                "payment_not_found", "No payment found for this transaction", "transaction_id"
            ) from None
        except PaymentUnavailableError as e:
            raise _abort("payment_unavailable", str(e), "transaction_id") from None

        if not session.is_paid:
            raise _abort(
                "payment_incomplete",
                f"Payment status is '{session.payment_status}'",
                "transaction_id",
            )

        # A session without a slug cannot vouch for any slug
        if session.slug is None or normalize_slug(session.slug) != run.slug:
            raise _abort(
                "slug_mismatch",
                "Slug differs from the one chosen at checkout",
                "slug",
            )

        run.session = session

    def _resolve_identity(self, run: _Run) -> None:
        try:
            record = self._ledger.get(run.transaction_id)
            if record is not None:
                run.serial_number = record.serial_number
                logger.debug("Reusing #%d from ledger", record.serial_number)
                return

            orphan = self._pages.get_by_origin_transaction(run.transaction_id)
            if orphan is not None:
                run.serial_number = orphan.serial_number
                logger.debug("Reusing #%d from unrecorded page", orphan.serial_number)
                return

            owner = self._pages.get_by_slug(run.slug)
            if owner is not None:
                # Written by a concurrent run for this transaction since the check above
                if owner.origin_transaction_id == run.transaction_id:
                    run.serial_number = owner.serial_number
                    return
                raise _abort("slug_taken", f"Slug '{run.slug}' is already taken", "slug")

            run.serial_number = self._counter.claim_next_serial()
        except AllocationError as e:
            raise _abort("allocation_failure", str(e), "serial_number") from None
        except StoreError as e:
            raise _abort("store_write_failure", str(e), "serial_number") from None

    def _build_page(self, run: _Run, draft: Draft | None) -> Page:
        assert run.serial_number is not None
        page_rules = self._rules.page
        profile = draft.profile if draft is not None else None

        theme = page_rules.default_theme
        if profile is not None and profile.theme in page_rules.themes:
            theme = profile.theme

        now = self._clock.now()
        return Page(
            serial_number=run.serial_number,
            slug=run.slug,
            display_name=clip_text(profile.display_name, 100) if profile else None,
            handle=clip_text(profile.handle, 100) if profile else None,
            bio=clip_text(profile.bio, self._rules.content.max_note_length) if profile else None,
            avatar_url=profile.avatar_url if profile else None,
            background_url=profile.background_url if profile else None,
            theme=theme,
            origin_transaction_id=run.transaction_id,
            created_at=now,
            updated_at=now,
        )

    def _upsert_profile(self, run: _Run, draft: Draft | None) -> None:
        overwrite = draft is not None
        try:
            try:
                run.page = self._pages.upsert_primary(
                    self._build_page(run, draft), overwrite_profile=overwrite
                )
            except SlugConflictError:
                # A concurrent run for the same transaction may have won the slug
                sibling = self._pages.get_by_origin_transaction(run.transaction_id)
                if sibling is None or sibling.serial_number == run.serial_number:
                    raise
                logger.info(
                    "Adopting #%d created concurrently for %s (discarding #%d)",
                    sibling.serial_number,
                    run.transaction_id,
                    run.serial_number,
                )
                run.serial_number = sibling.serial_number
                run.page = self._pages.upsert_primary(
                    self._build_page(run, draft), overwrite_profile=overwrite
                )
        except SlugConflictError:
            raise _abort("slug_taken", f"Slug '{run.slug}' is already taken", "slug") from None
        except StoreError as e:
            raise _abort("store_write_failure", str(e), "slug") from None

        if run.page.slug != run.slug:
            # Webhook path: the existing profile was kept as-is
            run.slug = run.page.slug

    def _prepare_tile(self, item: ContentDescriptor) -> ContentDescriptor:
        max_len = self._rules.content.max_note_length
        return item.model_copy(
            update={
                "title": clip_text(item.title, max_len) or "",
                "description": clip_text(item.description, max_len),
                "position": None,
            }
        )

    def _replace_content(self, run: _Run, draft: Draft | None) -> None:
        if draft is None:
            return
        assert run.page is not None

        tiles = [self._prepare_tile(item) for item in draft.content]
        try:
            self._content.replace_all(run.page.id, tiles)
        except StoreError as e:
            raise _abort("store_write_failure", str(e), "draft.content") from None

    def _record_purchase(self, run: _Run) -> None:
        assert run.session is not None and run.serial_number is not None
        pricing = self._rules.pricing
        record = PurchaseRecord(
            transaction_id=run.transaction_id,
            serial_number=run.serial_number,
            amount_cents=run.session.amount_cents or pricing.amount_cents,
            currency=(run.session.currency or pricing.currency).lower(),
            customer_email=run.session.customer_email,
            created_at=self._clock.now(),
        )

        try:
            result = self._ledger.record_if_absent(record)
        except StoreError as e:
            raise _abort("store_write_failure", str(e), "transaction_id") from None

        run.serial_number = result.serial_number
        run.created = result.created

        if result.created:
            self._send_welcome(run)

    def _send_welcome(self, run: _Run) -> None:
        assert run.session is not None and run.serial_number is not None
        notice = WelcomeNotice(
            recipient=run.session.customer_email,
            serial_number=run.serial_number,
            slug=run.slug,
        )
        result = self._notifier.send_welcome(notice)
        if result.status == NoticeStatus.FAILED:
            logger.warning("Welcome notice for #%d failed: %s", run.serial_number, result.error)


def run(
    input_data: PublishInput | CheckoutInput | WebhookInput,
    component: PublishComponent,
) -> PublishOutput | CheckoutOutput | WebhookOutput:
    """Functional entry point."""
    return component.run(input_data)
