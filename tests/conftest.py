from pathlib import Path

import pytest

from footprint.adapters.clock import FrozenClock
from footprint.adapters.dev_notifier import DevNotifier
from footprint.adapters.payment_stub import PaymentStubAdapter
from footprint.adapters.sqlite.migrator import SQLiteMigrator
from footprint.app_shell.context import ServiceContext
from footprint.rules.loader import load_rules
from footprint.rules.models import Rules


@pytest.fixture
def rules() -> Rules:
    # Tests run from the project root
    rules_path = Path("rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def db_path(tmp_path) -> str:
    """A migrated, empty SQLite database."""
    path = str(tmp_path / "footprint.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def payments() -> PaymentStubAdapter:
    return PaymentStubAdapter(webhook_secret="whsec_test")


@pytest.fixture
def notifier() -> DevNotifier:
    return DevNotifier()


@pytest.fixture
def test_ctx(db_path, rules, payments, notifier) -> ServiceContext:
    """
    Creates a full ServiceContext backed by a temporary SQLite DB and the
    in-memory payment stub.
    """
    return ServiceContext.create(
        db_path=db_path,
        rules=rules,
        payments=payments,
        notifier=notifier,
        clock=FrozenClock(),
    )
