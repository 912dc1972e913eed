# footprint: core services (pure functions, no I/O)

from footprint.core.services.classifier import (
    classify,
    content_background,
    content_icon,
    looks_like_url,
    partition_for,
)
from footprint.core.services.reorder import (
    is_dense,
    merge,
    next_position,
    remove,
    renumber,
    reorder,
)

__all__ = [
    # Classifier
    "classify",
    "content_background",
    "content_icon",
    "looks_like_url",
    "partition_for",
    # Reorder engine
    "is_dense",
    "merge",
    "next_position",
    "remove",
    "renumber",
    "reorder",
]
