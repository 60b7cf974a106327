"""Best-effort webpage metadata.

A page's title and preview image are picked by ordered rule chains. Each rule
is a plain function of the parsed document and the page URL returning a value
or ``None``; the first rule returning a non-empty value wins.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Optional
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup

from linkblog.schemas import LinkMetadata

logger = logging.getLogger("linkblog.metadata")

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "LinkBlog-Metadata/1.0"

Rule = Callable[[BeautifulSoup, str], Optional[str]]


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    return tag.get("content") or None


def _stripped(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def document_title(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return _stripped(tag.get_text())


def og_title(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    return _stripped(_meta_content(soup, property="og:title"))


def meta_title(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    return _stripped(_meta_content(soup, name="title"))


def og_image(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    return _meta_content(soup, property="og:image")


def twitter_image(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    return _meta_content(soup, name="twitter:image")


def absolute_image_url(src: str, page_url: str) -> Optional[str]:
    """Complete an ``<img src>`` value, or return ``None`` if it can't be used."""
    if src.startswith("//"):
        return "https:" + src
    if src.startswith("/"):
        try:
            parts = urlsplit(page_url)
        except ValueError:
            return None
        # Drop any userinfo, keep host[:port].
        host = parts.netloc.rpartition("@")[2]
        if not parts.scheme or not host:
            return None
        return f"{parts.scheme}://{host}{src}"
    if src.startswith("http"):
        return src
    return None


def first_image(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    for img in soup.find_all("img", src=True):
        candidate = absolute_image_url(img["src"], page_url)
        if candidate:
            return candidate
    return None


TITLE_RULES: tuple[Rule, ...] = (document_title, og_title, meta_title)
IMAGE_RULES: tuple[Rule, ...] = (og_image, twitter_image, first_image)


def first_match(rules: Sequence[Rule], soup: BeautifulSoup, page_url: str) -> Optional[str]:
    for rule in rules:
        value = rule(soup, page_url)
        if value:
            return value
    return None


def extract_metadata(html: str, page_url: str) -> LinkMetadata:
    soup = BeautifulSoup(html, "html.parser")
    return LinkMetadata(
        title=first_match(TITLE_RULES, soup, page_url),
        image_url=first_match(IMAGE_RULES, soup, page_url),
    )


class MetadataService:
    """Fetches a page and extracts its title and preview image.

    ``extract`` never raises for network or parse failures; it returns an
    empty ``LinkMetadata`` instead.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        ) as client:
            response = await client.get(url)
            return response.text

    async def extract(self, url: str) -> LinkMetadata:
        try:
            html = await self.fetch(url)
        except Exception as exc:
            logger.warning("Fetching metadata for %s failed: %s", url, exc)
            return LinkMetadata()

        try:
            metadata = extract_metadata(html, url)
        except Exception as exc:
            logger.warning("Parsing metadata for %s failed: %s", url, exc)
            return LinkMetadata()

        logger.debug("Metadata for %s: %s", url, metadata)
        return metadata
