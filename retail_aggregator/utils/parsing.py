from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

_NON_PRICE = re.compile(r"[^0-9,.]")


def normalize_url(url: str) -> str:
    """
    Normalize URL by removing fragments.
    """
    parts = list(urlparse(url))
    parts[5] = ""  # strip fragment
    return urlunparse(parts)


def absolute_url(base_url: str, href: Optional[str]) -> str:
    if not href:
        return ""
    return normalize_url(urljoin(base_url, href))


def parse_price(text: str) -> float:
    """
    Parse a German-formatted price such as "1.299,00 €" or "849,-" into a float.
    Raises ValueError when the text holds no digits.
    """
    cleaned = _NON_PRICE.sub("", text or "")
    if not any(ch.isdigit() for ch in cleaned):
        raise ValueError(f"no price in {text!r}")

    if "," in cleaned:
        whole, _, fraction = cleaned.rpartition(",")
        whole = whole.replace(".", "").replace(",", "")
        fraction = fraction.replace(".", "")
        return float(f"{whole or 0}.{fraction or 0}")

    # Dots only: thousands separators unless a single group of one or two digits follows.
    groups = cleaned.split(".")
    if len(groups) == 2 and 1 <= len(groups[1]) <= 2:
        return float(cleaned)
    return float(cleaned.replace(".", ""))


def parse_page_number(text: str) -> int:
    """Raises ValueError unless text is a positive integer."""
    number = int((text or "").strip())
    if number < 1:
        raise ValueError(f"page number must be >= 1, got {number}")
    return number
