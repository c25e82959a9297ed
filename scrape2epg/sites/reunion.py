"""
scrape2epg.sites.reunion - Reunion Island listings (linfo.re)

The site publishes one channel list per reception offer (the data source:
TNT, Canalsat, Parabole). Genres are only given as a numbered icon, which
is mapped to the DVB content vocabulary.
"""

import logging
import re
from collections import OrderedDict
from datetime import date
from typing import List, Optional
from urllib.parse import urljoin

from ..matcher import Matcher, parse_html, select_path, text_of
from ..model import ChannelInfo, RawShow
from .base import SiteAdapter

GENRE_ICON = re.compile(r"/genres?/(-?\d+)\.(?:png|gif|jpg)$", re.IGNORECASE)

# Icon number -> DVB-EIT content vocabulary
GENRES = {
    1: "Movie / Drama",
    2: "News / Current affairs",
    3: "Show / Game show",
    4: "Sports",
    5: "Children's / Youth programmes",
    6: "Music / Ballet / Dance",
    7: "Arts / Culture (without music)",
    8: "Social / Political issues / Economics",
    9: "Education / Science / Factual topics",
    10: "Leisure hobbies",
}

CHANNEL_PATH = (Matcher.of("ul", class_="chaines"), Matcher.of("a", has=("data-chaine",)))
CHANNEL_LOGO = Matcher.of("img")

SHOW_BLOCK = Matcher.of("div", class_="emission")
START = Matcher.of("span", class_="horaire", text=r"^\d{1,2}[h:]\d{2}$")
END = Matcher.of("span", class_="fin")
TITLE = Matcher.of("span", class_="titre")
GENRE = Matcher.of("img", class_="genre", has=("src",))
SUMMARY = Matcher.of("p", class_="resume")


class ReunionAdapter(SiteAdapter):
    key = "re"
    description = "Reunion Island (linfo.re)"
    domain = "linfo.re"
    base_url = "http://www.linfo.re/programme-tv"
    encoding = "iso-8859-1"
    utc_offset = 4
    language = "fr"
    max_days = 7

    config_keys = frozenset({"source", "idtemplate"})
    sources = {"tnt": "tnt", "canalsat": "canalsat", "parabole": "parabole"}
    default_source = "tnt"
    genres = GENRES

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        source = self.resolve_source(ctx)
        content = self.download(ctx, f"{self.base_url}/{source}/chaines")
        if content is None:
            logging.warning("Could not retrieve the %s channel list for %s", self.domain, source)
            return OrderedDict()

        soup = parse_html(self.decode(content))
        links = select_path(soup, CHANNEL_PATH)
        if not links:
            logging.warning("No channels found on %s, site layout may have changed", self.domain)

        entries = []
        for link in links:
            logo = CHANNEL_LOGO.find(link)
            name = text_of(link) or (logo.get("alt", "") if logo is not None else "")
            icon = urljoin(self.base_url, logo["src"]) if logo is not None and logo.get("src") else None
            entries.append((link.get("data-chaine"), self.text(name), icon))
        return self.directory_from(entries)

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        source = self.resolve_source(ctx)
        return self.download(ctx, f"{self.base_url}/{source}/chaine/{channel_id}/{day.isoformat()}")

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        soup = parse_html(self.decode(page))
        shows = []
        for block in SHOW_BLOCK.find_all(soup):
            start = START.find(block)
            title = text_of(TITLE.find(block))
            if start is None or not title:
                continue
            shows.append(
                RawShow(
                    start=text_of(start),
                    stop=text_of(END.find(block)) or None,
                    title=self.text(title),
                    genre_code=self._genre_code(GENRE.find(block)),
                    description=text_of(SUMMARY.find(block)) or None,
                )
            )
        return shows

    @staticmethod
    def _genre_code(icon) -> Optional[str]:
        if icon is None:
            return None
        match = GENRE_ICON.search(icon.get("src", ""))
        return match.group(1) if match else None
