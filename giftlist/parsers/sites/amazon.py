from __future__ import annotations

from bs4 import BeautifulSoup

from giftlist.parsers.base import BaseExtractor, Rule
from giftlist.parsers.normalization import (
    clean_categories,
    join_bullets,
    parse_price,
    short_description,
    upscale_amazon_image,
)

TITLE_RULES: tuple[Rule, ...] = (
    ("#productTitle", None),
    ("h1.product-title", None),
    ("span#productTitle", None),
)

PRICE_RULES: tuple[Rule, ...] = (
    (".a-price .a-offscreen", None),
    ("#priceblock_ourprice", None),
    ("#priceblock_dealprice", None),
    (".a-price-whole", None),
)

IMAGE_RULES: tuple[Rule, ...] = (
    ("#landingImage", "src"),
    ("#imgBlkFront", "src"),
    ("#main-image", "src"),
    (".a-dynamic-image", "src"),
)

BULLETS_SELECTOR = "#feature-bullets-btf ul li, #feature-bullets ul li"
DESCRIPTION_RULES: tuple[Rule, ...] = (("#productDescription p", None),)
BREADCRUMB_SELECTOR = "#wayfinding-breadcrumbs_feature_div a, .a-breadcrumb a"


class AmazonExtractor(BaseExtractor):
    name = "Amazon"
    markers = ("amazon.",)

    def extract_title(self, soup: BeautifulSoup) -> str:
        return self.first_value(soup, TITLE_RULES)

    def extract_price(self, soup: BeautifulSoup) -> float:
        return parse_price(self.first_value(soup, PRICE_RULES))

    def extract_image(self, soup: BeautifulSoup) -> str:
        return upscale_amazon_image(self.first_value(soup, IMAGE_RULES))

    def extract_description(self, soup: BeautifulSoup) -> str:
        bullets = join_bullets(self.all_texts(soup, BULLETS_SELECTOR))
        if bullets:
            return bullets
        return (
            short_description(self.first_value(soup, DESCRIPTION_RULES))
            or short_description(self.meta_content(soup, ("description",)))
        )

    def extract_categories(self, soup: BeautifulSoup) -> list[str]:
        return clean_categories(self.all_texts(soup, BREADCRUMB_SELECTOR))
