from giftlist.parsers.base import BaseExtractor
from giftlist.parsers.factory import ExtractorFactory
from giftlist.parsers.schemas import ProductRecord
from giftlist.parsers.scraper import ProductScraper

__all__ = ["BaseExtractor", "ExtractorFactory", "ProductRecord", "ProductScraper"]
