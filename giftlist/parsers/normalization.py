"""Text, price and image clean-up shared by the site extractors."""
from __future__ import annotations

import re
from typing import Iterable

from giftlist.parsers.schemas import CATEGORY_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, MAX_CATEGORIES

# Space-grouped thousands ("1 234") or a plain run of digits, then an optional decimal part.
_PRICE_RE = re.compile(r"\d{1,3}(?:\s\d{3})+(?:[.,]\d+)?|\d+(?:[.,]\d+)?")
_AMAZON_LOW_RES_RE = re.compile(r"_AC_.*?_")
_FNAC_DIMENSION_RE = re.compile(r"_\d+x\d+")

AMAZON_HIGH_RES_TOKEN = "_AC_SL1500_"
FNAC_HIGH_RES_TOKEN = "_2000x2000"
BULLET_SEPARATOR = " • "
MAX_BULLETS = 3


def truncate(value: str | None, limit: int) -> str:
    if not value:
        return ""
    return value[:limit]


def parse_price(text: str | None) -> float:
    """Return the first number found in ``text`` or 0.

    ``"1 234,56 €"`` gives ``1234.56``; a comma is read as the decimal mark.
    """
    if not text:
        return 0.0
    match = _PRICE_RE.search(text)
    if not match:
        return 0.0
    cleaned = re.sub(r"\s", "", match.group(0)).replace(",", ".")
    try:
        return max(float(cleaned), 0.0)
    except ValueError:
        return 0.0


def upscale_amazon_image(url: str) -> str:
    if url and "_AC_" in url:
        return _AMAZON_LOW_RES_RE.sub(AMAZON_HIGH_RES_TOKEN, url, count=1)
    return url


def upscale_fnac_image(url: str) -> str:
    if url and "_" in url:
        return _FNAC_DIMENSION_RE.sub(FNAC_HIGH_RES_TOKEN, url, count=1)
    return url


def join_bullets(items: Iterable[str]) -> str:
    bullets = [item for item in items if item][:MAX_BULLETS]
    return BULLET_SEPARATOR.join(bullets)


def clean_categories(labels: Iterable[str], excluded: Iterable[str] = ()) -> list[str]:
    skip = set(excluded)
    categories: list[str] = []
    for label in labels:
        if not label or label in skip or len(label) > CATEGORY_MAX_LENGTH:
            continue
        categories.append(label)
        if len(categories) == MAX_CATEGORIES:
            break
    return categories


def short_description(text: str | None) -> str:
    return truncate((text or "").strip(), DESCRIPTION_MAX_LENGTH)
