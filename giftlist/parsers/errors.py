from __future__ import annotations

from starlette import status

from giftlist.utils.errors import AppError

SCRAPE_FAILED_MESSAGE = "Erreur lors du scraping de la page"


class ScrapeError(AppError):
    """Base class for every terminal scraper failure."""


class UnsupportedSiteError(ScrapeError):
    def __init__(self, message: str = "URL non supportée. Seuls Amazon et Fnac sont supportés."):
        super().__init__("unsupported_site", message, status.HTTP_400_BAD_REQUEST)


class FetchFailedError(ScrapeError):
    def __init__(self, url: str, reason: str = "Impossible de récupérer la page"):
        self.url = url
        self.reason = reason
        super().__init__("fetch_failed", SCRAPE_FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


class MissingTitleError(ScrapeError):
    def __init__(self):
        super().__init__("missing_title", "Impossible d'extraire le titre du produit", status.HTTP_400_BAD_REQUEST)


class ScrapeFailedError(ScrapeError):
    def __init__(self, message: str = SCRAPE_FAILED_MESSAGE):
        super().__init__("scrape_failed", message, status.HTTP_500_INTERNAL_SERVER_ERROR)
