from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from starlette import status

from giftlist.auth.deps import require_backoffice
from giftlist.config import get_settings
from giftlist.parsers import ProductScraper
from giftlist.parsers.errors import ScrapeError, ScrapeFailedError, UnsupportedSiteError
from giftlist.parsers.sites.amazon import AmazonExtractor
from giftlist.schemas.scrape import ScrapeRequest, ScrapeResponse
from giftlist.utils.errors import AppError

router = APIRouter(prefix="/api", tags=["scrape"], dependencies=[Depends(require_backoffice)])
logger = logging.getLogger(__name__)


def get_scraper() -> ProductScraper:
    return ProductScraper(timeout=get_settings().scraper_timeout_seconds)


@router.post("/scrape-product", summary="Pré-remplir un cadeau depuis Amazon ou Fnac")
async def scrape_product(data: ScrapeRequest, scraper: ProductScraper = Depends(get_scraper)) -> dict:
    if not data.url:
        raise AppError("missing_url", "URL manquante", status.HTTP_400_BAD_REQUEST)

    record = await scraper.scrape(data.url)
    return ScrapeResponse(**record.model_dump()).model_dump(by_alias=True)


@router.post("/scrape-amazon", summary="Pré-remplir un cadeau depuis Amazon")
async def scrape_amazon(data: ScrapeRequest, scraper: ProductScraper = Depends(get_scraper)) -> dict:
    if not data.url or not AmazonExtractor.matches(data.url):
        raise UnsupportedSiteError("URL Amazon invalide")

    try:
        record = await scraper.scrape(
            data.url,
            allowed_sites=(AmazonExtractor.name,),
            default_description="Produit Amazon",
        )
    except ScrapeError as exc:
        if exc.http_status >= 500:
            raise ScrapeFailedError("Erreur lors du scraping de la page Amazon") from exc
        raise
    return ScrapeResponse(**record.model_dump()).model_dump(by_alias=True, exclude={"source"})
