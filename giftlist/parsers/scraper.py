from __future__ import annotations

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from giftlist.parsers.base import BaseExtractor
from giftlist.parsers.errors import FetchFailedError, MissingTitleError, ScrapeError, ScrapeFailedError
from giftlist.parsers.factory import ExtractorFactory
from giftlist.parsers.normalization import truncate
from giftlist.parsers.schemas import (
    DESCRIPTION_MAX_LENGTH,
    MAX_CATEGORIES,
    TITLE_MAX_LENGTH,
    ProductRecord,
)

logger = logging.getLogger(__name__)

# French consumer headers keep the retailers from serving their bot page.
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7",
    "Upgrade-Insecure-Requests": "1",
}


class ProductScraper:
    """Fetches a product page and runs the extractor matching its URL."""

    def __init__(self, timeout: float = 10, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.headers = dict(BROWSER_HEADERS)
        self.transport = transport

    async def fetch_html(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                headers=self.headers, follow_redirects=True, transport=self.transport
            ) as client:
                response = await client.get(url, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise FetchFailedError(url, reason=str(exc)) from exc
        if not response.is_success:
            raise FetchFailedError(url, reason=f"HTTP {response.status_code}")
        return response.text

    def extract(self, extractor: BaseExtractor, html: str, default_description: Optional[str] = None) -> ProductRecord:
        soup = BeautifulSoup(html, "html.parser")
        title = extractor.extract_title(soup)
        if not title:
            raise MissingTitleError()

        description = (
            extractor.extract_description(soup) or default_description or extractor.default_description
        )
        return ProductRecord(
            title=truncate(title, TITLE_MAX_LENGTH),
            description=truncate(description, DESCRIPTION_MAX_LENGTH),
            price=extractor.extract_price(soup),
            image_url=extractor.extract_image(soup),
            categories=extractor.extract_categories(soup)[:MAX_CATEGORIES],
            source=extractor.name,
        )

    async def scrape(
        self,
        url: str,
        allowed_sites: tuple[str, ...] | None = None,
        default_description: Optional[str] = None,
    ) -> ProductRecord:
        extractor = ExtractorFactory.get_extractor(url, allowed=allowed_sites)
        try:
            html = await self.fetch_html(url)
            record = self.extract(extractor, html, default_description)
        except FetchFailedError as exc:
            logger.warning(f"Failed to fetch {exc.url}: {exc.reason}")
            raise
        except ScrapeError:
            raise
        except Exception as exc:
            logger.exception(f"Error scraping product {url}")
            raise ScrapeFailedError() from exc

        logger.info(f"Scraped {extractor.name} product '{record.title}' ({record.price})")
        return record
