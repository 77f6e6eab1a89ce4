"""Order number generation.

Numbers look like ``ORD-20260314-7Q2K9X``: the configured prefix, the UTC
date and six random uppercase alphanumerics.
"""

import secrets
import string
from datetime import UTC, datetime

from storefront.config import get_settings

_ALPHABET = string.ascii_uppercase + string.digits
_SUFFIX_LENGTH = 6
MAX_ATTEMPTS = 5


def generate_order_number(prefix=None, today=None) -> str:
    prefix = (prefix or get_settings().order_number_prefix).upper()
    today = today or datetime.now(UTC).date()
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}-{today:%Y%m%d}-{suffix}"


def unique_order_number(is_taken, attempts=MAX_ATTEMPTS) -> str:
    """Generate numbers until ``is_taken`` rejects none, giving up after ``attempts`` tries."""
    for _ in range(attempts):
        candidate = generate_order_number()
        if not is_taken(candidate):
            return candidate
    raise RuntimeError(f"Could not generate a unique order number after {attempts} attempts")
