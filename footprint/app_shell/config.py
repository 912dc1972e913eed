import logging
import os
from pathlib import Path

from footprint.rules.models import Rules

logger = logging.getLogger(__name__)

PAYMENT_ADAPTERS = ("stripe", "stub")


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    Raises ValueError listing every problem found.
    """
    ops = rules.ops
    problems: list[str] = []

    # 1. Data dir must exist (or be creatable) and be writable
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            problems.append(f"Data dir {data_dir} cannot be created: {e}")
        else:
            if not os.access(data_dir, os.W_OK):
                problems.append(f"Data dir {data_dir} is not writable")

    # 2. Required env
    required = list(ops.required_env)
    if rules.payments.adapter == "stripe":
        required += ["STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET"]
    elif rules.payments.adapter not in PAYMENT_ADAPTERS:
        problems.append(f"Unknown payments.adapter: {rules.payments.adapter}")

    missing = [name for name in dict.fromkeys(required) if not os.environ.get(name)]
    if missing:
        problems.append(f"Missing required environment variables: {', '.join(missing)}")

    # 3. Configured themes must include the default
    if rules.page.default_theme not in rules.page.themes:
        problems.append(f"page.default_theme '{rules.page.default_theme}' is not in page.themes")

    if problems:
        raise ValueError("; ".join(problems))

    logger.info("Configuration validated.")
