import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from footprint.adapters.dev_notifier import DevNotifier
from footprint.app_shell.context import ServiceContext, build_payments
from footprint.components.publish import PublishComponent
from footprint.components.tiles import TileService
from footprint.core.ports.db import SerialCounterPort
from footprint.core.ports.notify import NotifierPort
from footprint.core.ports.payment import PaymentPort
from footprint.rules.loader import default_rules_path, load_rules
from footprint.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("FOOTPRINT_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "footprint.db")
        self.rules_path = default_rules_path()
        self.app_url = os.environ.get("FOOTPRINT_APP_URL", "http://localhost:3000").rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Long-lived adapters (one per process) ---
@lru_cache
def get_payments() -> PaymentPort:
    return build_payments(get_rules())


@lru_cache
def get_notifier() -> NotifierPort:
    return DevNotifier()


# --- Context ---
def get_context(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    payments: PaymentPort = Depends(get_payments),
    notifier: NotifierPort = Depends(get_notifier),
) -> ServiceContext:
    return ServiceContext.create(
        db_path=settings.db_path,
        rules=rules,
        payments=payments,
        notifier=notifier,
    )


# --- Component Services ---
def get_publish_component(ctx: ServiceContext = Depends(get_context)) -> PublishComponent:
    return ctx.publish


def get_tile_service(ctx: ServiceContext = Depends(get_context)) -> TileService:
    """Get tiles component service."""
    return ctx.tiles


def get_serial_counter(ctx: ServiceContext = Depends(get_context)) -> SerialCounterPort:
    return ctx.counter
