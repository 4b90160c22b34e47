from __future__ import annotations

from bs4 import BeautifulSoup

from giftlist.parsers.base import BaseExtractor, Rule
from giftlist.parsers.normalization import (
    clean_categories,
    join_bullets,
    parse_price,
    short_description,
    upscale_fnac_image,
)

TITLE_RULES: tuple[Rule, ...] = (
    ("h1.f-productHeader-Title", None),
    (".f-productHeader-Title", None),
    ('h1[itemprop="name"]', None),
    ('meta[property="og:title"]', "content"),
)

PRICE_RULES: tuple[Rule, ...] = (
    (".f-priceBox-price", None),
    ('[itemprop="price"]', "content"),
    (".price", None),
    ('meta[property="product:price:amount"]', "content"),
)

IMAGE_RULES: tuple[Rule, ...] = (
    (".f-productVisuals-mainImage img", "src"),
    ('[itemprop="image"]', "src"),
    (".js-ProductVisuals-image", "src"),
    ('meta[property="og:image"]', "content"),
)

FEATURES_SELECTOR = ".f-productDescription-list li, .ProductDescription-list li"
DESCRIPTION_RULES: tuple[Rule, ...] = (
    (".f-productDescription-text", None),
    ('[itemprop="description"]', None),
)
BREADCRUMB_SELECTOR = ".f-breadcrumb-link, .breadcrumb a"
HOME_BREADCRUMB = "Accueil"


class FnacExtractor(BaseExtractor):
    name = "Fnac"
    markers = ("fnac.com", "fnac.fr")

    def extract_title(self, soup: BeautifulSoup) -> str:
        return self.first_value(soup, TITLE_RULES)

    def extract_price(self, soup: BeautifulSoup) -> float:
        return parse_price(self.first_value(soup, PRICE_RULES))

    def extract_image(self, soup: BeautifulSoup) -> str:
        return upscale_fnac_image(self.first_value(soup, IMAGE_RULES))

    def extract_description(self, soup: BeautifulSoup) -> str:
        features = join_bullets(self.all_texts(soup, FEATURES_SELECTOR))
        if features:
            return features
        return (
            short_description(self.first_value(soup, DESCRIPTION_RULES))
            or short_description(self.meta_content(soup, ("description",)))
        )

    def extract_categories(self, soup: BeautifulSoup) -> list[str]:
        return clean_categories(self.all_texts(soup, BREADCRUMB_SELECTOR), excluded=(HOME_BREADCRUMB,))
