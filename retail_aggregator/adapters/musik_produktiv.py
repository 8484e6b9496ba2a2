from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from bs4 import BeautifulSoup

from .base import Product, ProductPage
from ..errors import FetchError, ParseError
from ..utils.parsing import absolute_url, parse_page_number, parse_price

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "e-gitarren-linkshaender",
    "e-baesse-linkshaender",
    "westerngitarren-linkshaender",
]


class TextGetter(Protocol):
    async def get_text(self, url: str) -> str:
        ...


class MusikProduktivAdapter:
    """Adapter for the category listings of musik-produktiv.de."""

    name = "Musik Produktiv"

    def __init__(
        self,
        http: TextGetter,
        categories: Optional[Sequence[str]] = None,
        base_url: str = "https://www.musik-produktiv.de",
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self._categories = list(categories or DEFAULT_CATEGORIES)
        # Learned from the filter menu of the last page that carried one.
        self.manufacturers: List[str] = []

    def categories(self) -> List[str]:
        return list(self._categories)

    def page_url(self, category: str, page: int) -> str:
        url = f"{self.base_url}/{category}/"
        if page > 1:
            url = f"{url}?p={page}"
        return url

    async def fetch_page(self, category: str, page: int) -> ProductPage:
        url = self.page_url(category, page)
        try:
            html = await self.http.get_text(url)
        except Exception as exc:
            raise FetchError(f"could not fetch products from musik-produktiv.de ({url}): {exc}") from exc

        return self.parse(html)

    # ---- Parsing ------------------------------------------------------------

    def parse(self, html: str) -> ProductPage:
        soup = BeautifulSoup(html, "html.parser")
        category_name = self._text(soup.select_one("div.list_title h1"))

        menu = soup.select_one(".mp-filtermenu ul")
        if menu is not None:
            self.manufacturers = [span.get_text(strip=True) for span in menu.select("li span")]

        products = [self._parse_product(item, category_name) for item in soup.select("ul.artgrid li")]
        current_page, last_page = self._parse_pagination(soup)
        logger.debug("Parsed %s products (page %s/%s) for %r", len(products), current_page, last_page, category_name)
        return ProductPage(products=products, current_page=current_page, last_page=last_page)

    def _parse_product(self, item, category: str) -> Product:
        name = self._text(item.find("b"))
        manufacturer, model = self.split_product_name(name)

        price_text = self._text(item.find("i"))
        try:
            price = parse_price(price_text)
        except ValueError as exc:
            raise ParseError(f"could not parse price of {name!r}: {exc}") from exc

        ampel = item.select_one(".ampel")
        # Only the "zzz" traffic light marks an item as out of stock.
        is_available = ampel is None or "zzz" not in (ampel.get("class") or [])
        availability_info = ""
        if ampel is not None:
            availability_info = ampel.get("title") or ampel.get_text(strip=True)

        anchor = item.find("a", href=True)
        image = item.find("img", src=True)
        return Product(
            retailer=self.name,
            manufacturer=manufacturer,
            model=model,
            category=category,
            is_available=is_available,
            availability_info=availability_info,
            price=price,
            product_url=absolute_url(self.base_url, anchor["href"] if anchor else None),
            thumbnail_url=absolute_url(self.base_url, image["src"] if image else None),
        )

    def split_product_name(self, name: str) -> Tuple[str, str]:
        """
        Split "Fender AM Pro II Jazzmaster" into manufacturer and model.
        Prefers the longest known manufacturer, otherwise falls back to the first word.
        """
        for manufacturer in sorted(self.manufacturers, key=len, reverse=True):
            if manufacturer and (name == manufacturer or name.startswith(manufacturer + " ")):
                return manufacturer, name[len(manufacturer):].strip()

        first, _, rest = name.partition(" ")
        return first, rest.strip()

    def _parse_pagination(self, soup: BeautifulSoup) -> Tuple[int, int]:
        blocks = soup.select(".list_page div")
        if len(blocks) <= 1:
            return 1, 1

        try:
            current_page = parse_page_number(self._text(blocks[0].find("div")))
        except ValueError as exc:
            raise ParseError(f"could not parse current page from pagination: {exc}") from exc

        # Arrow links ("»") carry no page number; on the last page the final link points backwards.
        numbered = [self._text(a) for a in blocks[0].find_all("a") if self._text(a).isdigit()]
        last_page = max([current_page] + [int(n) for n in numbered])
        return current_page, last_page

    def _text(self, node) -> str:
        if node is None:
            return ""
        return node.get_text(" ", strip=True)
