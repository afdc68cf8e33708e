import re
from typing import Optional


def normalize_whitespace(text: Optional[str]) -> str:
    if not text:
        return ""
    text = str(text).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def normalize_code(text: Optional[str]) -> Optional[str]:
    """
    SKUs and barcodes as strings with no spaces; blank becomes None.
    Scanners sometimes pad or split the code with spaces.
    """
    if text is None:
        return None
    text = str(text).strip().replace(" ", "")
    return text or None
