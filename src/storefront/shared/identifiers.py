"""Ordered-fallback identifier resolution.

Several entry points accept an id, a slug or a SKU interchangeably. A
``Resolver`` holds an ordered chain of lookups and returns the first match,
so every entry point shares one fallback order instead of re-implementing
try-id-then-try-slug logic.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Lookup:
    """One link in the chain: a named finder returning a match or None."""

    name: str
    finder: Callable[[str], Any]

    def __call__(self, identifier: str) -> Any:
        return self.finder(identifier)


class Resolver:
    def __init__(self, *lookups: Lookup) -> None:
        self.lookups = lookups

    def resolve(self, identifier) -> Any:
        if identifier is None or str(identifier).strip() == "":
            return None

        identifier = str(identifier).strip()
        for lookup in self.lookups:
            match = lookup(identifier)
            if match is not None:
                logger.debug("Identifier resolved", identifier=identifier, strategy=lookup.name)
                return match
        return None


def same_text(left, right) -> bool:
    """Case-insensitive comparison that treats None as never equal."""
    if left is None or right is None:
        return False
    return str(left).strip().lower() == str(right).strip().lower()
