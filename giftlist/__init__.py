"""Gift list: public reservation page, backoffice and product scraper."""

__version__ = "1.0.0"
