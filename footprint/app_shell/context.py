from __future__ import annotations

import os
from dataclasses import dataclass

from footprint.adapters.clock import SystemClock
from footprint.adapters.dev_notifier import DevNotifier
from footprint.adapters.payment_stub import DEFAULT_WEBHOOK_SECRET, PaymentStubAdapter
from footprint.adapters.sqlite.repos import (
    SQLiteContentStore,
    SQLitePageRepo,
    SQLitePurchaseLedger,
    SQLiteSerialCounter,
)
from footprint.adapters.stripe_payment import StripePaymentAdapter
from footprint.components.publish import ClockPort, PublishComponent
from footprint.components.tiles import TileService
from footprint.core.ports.db import (
    ContentStorePort,
    PageRepoPort,
    PurchaseLedgerPort,
    SerialCounterPort,
)
from footprint.core.ports.notify import NotifierPort
from footprint.core.ports.payment import PaymentPort
from footprint.rules.models import Rules


@dataclass
class ServiceContext:
    """Wired ports and components for one database."""

    counter: SerialCounterPort
    ledger: PurchaseLedgerPort
    pages: PageRepoPort
    content: ContentStorePort
    payments: PaymentPort
    notifier: NotifierPort
    clock: ClockPort
    publish: PublishComponent
    tiles: TileService
    rules: Rules

    @classmethod
    def create(
        cls,
        db_path: str,
        rules: Rules,
        payments: PaymentPort,
        notifier: NotifierPort | None = None,
        clock: ClockPort | None = None,
    ) -> ServiceContext:
        # Adapters
        counter = SQLiteSerialCounter(db_path, first_serial=rules.identity.first_serial)
        ledger = SQLitePurchaseLedger(db_path)
        pages = SQLitePageRepo(db_path)
        content = SQLiteContentStore(db_path, media_types=tuple(rules.content.media_types))
        notifier = notifier or DevNotifier()
        clock = clock or SystemClock()

        # Components
        publish = PublishComponent(
            payments=payments,
            counter=counter,
            ledger=ledger,
            pages=pages,
            content=content,
            notifier=notifier,
            rules=rules,
            clock=clock,
        )
        tiles = TileService(pages=pages, store=content, rules=rules.content)

        return cls(
            counter=counter,
            ledger=ledger,
            pages=pages,
            content=content,
            payments=payments,
            notifier=notifier,
            clock=clock,
            publish=publish,
            tiles=tiles,
            rules=rules,
        )


def build_payments(rules: Rules) -> PaymentPort:
    """Payment adapter named by payments.adapter."""
    if rules.payments.adapter == "stub":
        return PaymentStubAdapter(
            webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET") or DEFAULT_WEBHOOK_SECRET
        )
    return StripePaymentAdapter(
        api_key=os.environ.get("STRIPE_SECRET_KEY", ""),
        webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET"),
        timeout=rules.payments.lookup_timeout_seconds,
    )
