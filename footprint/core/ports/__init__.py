# footprint: ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from footprint.core.ports.db import (
    AllocationError,
    ContentStorePort,
    LedgerResult,
    PageRepoPort,
    PurchaseLedgerPort,
    SerialCounterPort,
    SlugConflictError,
    StoreError,
    StoreWriteError,
)
from footprint.core.ports.notify import (
    NoticeResult,
    NoticeStatus,
    NotifierPort,
    WelcomeNotice,
)
from footprint.core.ports.payment import (
    CHECKOUT_COMPLETED,
    CheckoutRequest,
    CheckoutSession,
    PaymentError,
    PaymentEvent,
    PaymentNotFoundError,
    PaymentPort,
    PaymentSession,
    PaymentUnavailableError,
    SignatureVerificationError,
)

__all__ = [
    # Store
    "AllocationError",
    "ContentStorePort",
    "LedgerResult",
    "PageRepoPort",
    "PurchaseLedgerPort",
    "SerialCounterPort",
    "SlugConflictError",
    "StoreError",
    "StoreWriteError",
    # Notifier
    "NoticeResult",
    "NoticeStatus",
    "NotifierPort",
    "WelcomeNotice",
    # Payment
    "CHECKOUT_COMPLETED",
    "CheckoutRequest",
    "CheckoutSession",
    "PaymentError",
    "PaymentEvent",
    "PaymentNotFoundError",
    "PaymentPort",
    "PaymentSession",
    "PaymentUnavailableError",
    "SignatureVerificationError",
]
