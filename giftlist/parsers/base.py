from __future__ import annotations

import abc
from typing import ClassVar, Iterable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

# (css selector, attribute); a None attribute means the element text.
Rule = tuple[str, Optional[str]]


def element_text(element: Tag) -> str:
    return " ".join(element.get_text(" ").split())


class BaseExtractor(abc.ABC):
    """Field extractors for one retailer.

    Every field is read through an ordered list of rules: product pages change
    their markup between template versions, so the first rule that yields a
    non-empty value wins.
    """

    name: ClassVar[str]
    markers: ClassVar[tuple[str, ...]]
    default_description: ClassVar[str] = "Produit"

    @classmethod
    def matches(cls, url: str) -> bool:
        return any(marker in url for marker in cls.markers)

    @abc.abstractmethod
    def extract_title(self, soup: BeautifulSoup) -> str:
        ...

    @abc.abstractmethod
    def extract_price(self, soup: BeautifulSoup) -> float:
        ...

    @abc.abstractmethod
    def extract_image(self, soup: BeautifulSoup) -> str:
        ...

    @abc.abstractmethod
    def extract_description(self, soup: BeautifulSoup) -> str:
        ...

    @abc.abstractmethod
    def extract_categories(self, soup: BeautifulSoup) -> list[str]:
        ...

    @staticmethod
    def first_value(soup: BeautifulSoup, rules: Sequence[Rule]) -> str:
        for selector, attr in rules:
            element = soup.select_one(selector)
            if element is None:
                continue
            if attr is None:
                value = element_text(element)
            else:
                raw = element.get(attr)
                value = raw.strip() if isinstance(raw, str) else ""
            if value:
                return value
        return ""

    @staticmethod
    def all_texts(soup: BeautifulSoup, selector: str) -> list[str]:
        return [text for text in (element_text(el) for el in soup.select(selector)) if text]

    @staticmethod
    def meta_content(soup: BeautifulSoup, names: Iterable[str]) -> str:
        for name in names:
            tag = soup.find("meta", attrs={"name": name}) or soup.find("meta", attrs={"property": name})
            if tag and isinstance(tag.get("content"), str) and tag["content"].strip():
                return tag["content"].strip()
        return ""
