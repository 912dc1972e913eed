from pathlib import Path

import pytest

from footprint.app_shell.config import validate_ops_rules
from footprint.domain.sanitize import clip_text, normalize_slug, slug_problem
from footprint.rules.loader import load_rules


def test_load_project_rules(rules):
    assert rules.identity.first_serial == 7777
    assert rules.pricing.amount_cents == 1000
    assert "image" in rules.content.media_types
    assert rules.page.default_theme in rules.page.themes


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_fenced_yaml_block(tmp_path):
    body = Path("rules.yaml").read_text(encoding="utf-8")
    wrapped = tmp_path / "rules.md"
    wrapped.write_text(f"# Rules\n\n```yaml\n{body}\n```\n", encoding="utf-8")

    rules = load_rules(wrapped)
    assert rules.project.slug == "footprint"


def test_schema_violation(tmp_path):
    bad = tmp_path / "rules.yaml"
    bad.write_text("project:\n  slug: x\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(bad)


def test_env_override(tmp_path, monkeypatch):
    target = tmp_path / "custom.yaml"
    target.write_text(Path("rules.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    monkeypatch.setenv("FOOTPRINT_RULES_PATH", str(target))

    assert load_rules().project.slug == "footprint"


# --- Ops validation ---


def test_ops_stub_adapter_needs_no_keys(rules, tmp_path, monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    stub_rules = rules.model_copy(
        update={"payments": rules.payments.model_copy(update={"adapter": "stub"})}
    )

    validate_ops_rules(stub_rules, tmp_path / "data")
    assert (tmp_path / "data").is_dir()


def test_ops_stripe_requires_keys(rules, tmp_path, monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("STRIPE_WEBHOOK_SECRET", raising=False)

    with pytest.raises(ValueError, match="STRIPE_SECRET_KEY"):
        validate_ops_rules(rules, tmp_path)


def test_ops_unknown_adapter(rules, tmp_path):
    odd = rules.model_copy(
        update={"payments": rules.payments.model_copy(update={"adapter": "paypal"})}
    )
    with pytest.raises(ValueError, match="Unknown payments.adapter"):
        validate_ops_rules(odd, tmp_path)


# --- Slugs ---


@pytest.mark.parametrize("slug", ["alex", "a1", "my-page", "x" * 40])
def test_valid_slugs(rules, slug):
    assert slug_problem(slug, rules.slugs) is None


@pytest.mark.parametrize("slug", ["a", "x" * 41, "-lead", "trail-", "under_score", "Caps", "api"])
def test_invalid_slugs(rules, slug):
    assert slug_problem(slug, rules.slugs) is not None


def test_normalize_and_clip():
    assert normalize_slug("  Alex ") == "alex"
    assert clip_text("  hello  ", 3) == "hel"
    assert clip_text(None, 3) is None
