"""
Identifier (SSN) normalization.

Identifiers are stored in a fixed-width, zero-padded canonical form so that
"2945", "0000000000002945" and "29-45" all refer to the same record.
"""

import re
from typing import Optional

SSN_LENGTH = 16

_NON_DIGIT = re.compile(r"\D")


class IdentifierFormatError(ValueError):
    """Raised when an identifier has more significant digits than SSN_LENGTH."""


def normalize_identifier(raw: Optional[str]) -> Optional[str]:
    """
    Pad an identifier with leading zeros to SSN_LENGTH digits.

    Non-digit characters are removed first. When nothing is left the input
    is returned unchanged, so None and "" pass straight through.

    Args:
        raw: Identifier as submitted by the caller

    Returns:
        The canonical 16-character identifier, or the original input

    Raises:
        IdentifierFormatError: If the value does not fit in SSN_LENGTH digits
    """
    if not raw:
        return raw

    digits = _NON_DIGIT.sub("", raw)
    if not digits:
        return raw

    value = int(digits)
    canonical = f"{value:0{SSN_LENGTH}d}"
    if len(canonical) > SSN_LENGTH:
        raise IdentifierFormatError(
            f"Identifier {raw!r} exceeds {SSN_LENGTH} significant digits"
        )
    return canonical
