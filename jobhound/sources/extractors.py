"""
Page extractors: turn a captured listing page into raw listing records.

Extraction works on plain HTML so it can be exercised against saved pages
without a browser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from jobhound.log import get_logger
from jobhound.models import is_absolute_http_url

log = get_logger(__name__)


@dataclass
class RawListing:
    title: str
    url: str
    company: str = ""
    location: str = ""
    salary: str = ""
    description: str = ""
    posted: str = ""
    easy_apply: bool = False
    key: str = ""


@dataclass
class ListingSelectors:
    """CSS selectors for one board's listing cards.

    ``cards`` are alternatives tried in order; the first that matches
    anything is used. ``title`` likewise lists candidates for the title
    element, which is usually the link itself.
    """

    cards: list[str]
    title: list[str]
    link: list[str] = field(default_factory=list)
    company: str | None = None
    location: str | None = None
    salary: str | None = None
    description: str | None = None
    posted: str | None = None
    easy_apply: str | None = None
    key_attrs: tuple[str, ...] = ("data-job-key", "data-job-id", "data-entity-urn")


def _text(node) -> str:
    return " ".join(node.get_text(" ", strip=True).split()) if node is not None else ""


class SelectorExtractor:
    def __init__(self, selectors: ListingSelectors, base_url: str) -> None:
        self.selectors = selectors
        self.base_url = base_url

    def _cards(self, soup: BeautifulSoup) -> list:
        for sel in self.selectors.cards:
            found = soup.select(sel)
            if found:
                log.debug("Card selector %r matched %d elements", sel, len(found))
                return found
        return []

    def _title_and_href(self, card) -> tuple[str, str | None]:
        title, href = "", None
        for sel in self.selectors.title:
            el = card.select_one(sel)
            if el is None:
                continue
            title = _text(el)
            href = el.get("href")
            if href is None and el.find("a") is not None:
                href = el.find("a").get("href")
            if title and href:
                break
        if not href:
            for sel in self.selectors.link or ["a[href]"]:
                el = card.select_one(sel)
                if el is not None and el.get("href"):
                    href = el.get("href")
                    break
        return title, href

    def _field(self, card, selector: str | None) -> str:
        if not selector:
            return ""
        return _text(card.select_one(selector))

    def _posted(self, card) -> str:
        if not self.selectors.posted:
            return ""
        el = card.select_one(self.selectors.posted)
        if el is None:
            return ""
        return el.get("datetime") or _text(el)

    def _key(self, card) -> str:
        for attr in self.selectors.key_attrs:
            value = card.get(attr)
            if value:
                return str(value).split(":")[-1]
            inner = card.select_one(f"[{attr}]")
            if inner is not None:
                return str(inner.get(attr)).split(":")[-1]
        return ""

    def extract(self, html: str) -> list[RawListing]:
        soup = BeautifulSoup(html or "", "html.parser")
        listings: list[RawListing] = []
        seen: set[str] = set()
        for card in self._cards(soup):
            title, href = self._title_and_href(card)
            if not title or not href:
                continue
            url = urljoin(self.base_url, href.strip())
            if not is_absolute_http_url(url) or url in seen:
                continue
            seen.add(url)
            listings.append(RawListing(
                title=title[:200],
                url=url,
                company=self._field(card, self.selectors.company),
                location=self._field(card, self.selectors.location),
                salary=self._field(card, self.selectors.salary),
                description=self._field(card, self.selectors.description),
                posted=self._posted(card),
                easy_apply=bool(self.selectors.easy_apply and card.select_one(self.selectors.easy_apply)),
                key=self._key(card),
            ))
        return listings
