from giftlist.parsers.sites.amazon import AmazonExtractor
from giftlist.parsers.sites.fnac import FnacExtractor

__all__ = ["AmazonExtractor", "FnacExtractor"]
