"""Philippine mobile number parsing."""

import re

_MOBILE_RE = re.compile(r"^(?:\+?63|0)(9\d{9})$")


def normalize_mobile_number(number: str) -> str:
    """Normalize a mobile number to ``+639XXXXXXXXX``.

    Accepts ``09XXXXXXXXX``, ``639XXXXXXXXX`` and ``+639XXXXXXXXX``, with
    optional spaces or dashes between digit groups.

    Raises:
        ValueError: If the number is not a Philippine mobile number
    """
    if not isinstance(number, str):
        raise ValueError("Mobile number is required.")
    compact = re.sub(r"[\s\-]", "", number)
    match = _MOBILE_RE.match(compact)
    if match is None:
        raise ValueError(f"Invalid mobile number '{number}'")
    return f"+63{match.group(1)}"


def is_mobile_number(value: str) -> bool:
    """Return True if value parses as a mobile number."""
    try:
        normalize_mobile_number(value)
    except ValueError:
        return False
    return True
