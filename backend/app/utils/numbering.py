from datetime import datetime, timezone
from typing import Optional

SUFFIX_DIGITS = 6
SUFFIX_MODULO = 10 ** SUFFIX_DIGITS


def document_number(prefix: str, now: Optional[datetime] = None, bump: int = 0) -> str:
    """
    PREFIX-YEAR-NNNNNN where NNNNNN is the last six digits of the epoch
    milliseconds, e.g. INV-2026-482913. `bump` shifts the suffix so a caller
    can step past a number that is already taken.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = (millis + bump) % SUFFIX_MODULO
    return f"{prefix}-{now.year}-{suffix:0{SUFFIX_DIGITS}d}"
