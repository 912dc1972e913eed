import re

from footprint.rules.models import SlugRules


def normalize_slug(raw: str) -> str:
    """Slugs are compared trimmed and lower-cased everywhere."""
    return raw.strip().lower()


def slug_problem(slug: str, rules: SlugRules) -> str | None:
    """
    Return a human-readable reason the (normalized) slug is unusable,
    or None if it is acceptable.
    """
    if len(slug) < rules.min:
        return f"Slug must be at least {rules.min} characters"
    if len(slug) > rules.max:
        return f"Slug must be {rules.max} characters or less"
    if not re.fullmatch(rules.pattern, slug):
        return "Slug may only contain lowercase letters, digits and inner hyphens"
    if slug in rules.reserved:
        return f"Slug '{slug}' is reserved"
    return None


def clip_text(text: str | None, max_length: int) -> str | None:
    """Trim surrounding whitespace and cap length. None stays None."""
    if text is None:
        return None
    return text.strip()[:max_length]
