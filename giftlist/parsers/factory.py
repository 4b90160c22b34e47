from __future__ import annotations

from typing import Type

from giftlist.parsers.base import BaseExtractor
from giftlist.parsers.errors import UnsupportedSiteError
from giftlist.parsers.sites.amazon import AmazonExtractor
from giftlist.parsers.sites.fnac import FnacExtractor

# Checked in order; the first extractor whose marker appears in the URL wins.
EXTRACTOR_REGISTRY: tuple[Type[BaseExtractor], ...] = (
    AmazonExtractor,
    FnacExtractor,
)


class ExtractorFactory:
    @staticmethod
    def get_extractor(url: str, allowed: tuple[str, ...] | None = None) -> BaseExtractor:
        for extractor_class in EXTRACTOR_REGISTRY:
            if allowed is not None and extractor_class.name not in allowed:
                continue
            if extractor_class.matches(url):
                return extractor_class()
        raise UnsupportedSiteError()
