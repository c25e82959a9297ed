"""
scrape2epg.sites.brazil - Brazilian NET cable listings (netcombo.com.br)

Line-ups differ per city, so the city code from the configuration (or
--city) is sent with every request. Detail pages hold the synopsis, cast
and age rating.
"""

import logging
import re
from collections import OrderedDict
from datetime import date
from typing import List, Optional
from urllib.parse import urljoin

from ..matcher import Matcher, parse_html, text_of
from ..model import ChannelInfo, RawShow, ShowDetails
from .base import SiteAdapter

DURATION = re.compile(r"(\d+)\s*min", re.IGNORECASE)

CHANNEL_ROW = Matcher.of("tr", class_="canal", has=("data-canal",))
CHANNEL_NAME = Matcher.of("td", class_="nome")
CHANNEL_LOGO = Matcher.of("img", has=("src",))

SHOW_ROW = Matcher.of("tr", class_="programa")
START = Matcher.of("td", class_="hora", text=r"^\d{1,2}[h:]\d{2}$")
TITLE = Matcher.of("td", class_="titulo")
GENRE = Matcher.of("td", class_="genero")

SYNOPSIS = Matcher.of("div", id="sinopse")
DIRECTOR = Matcher.of("li", class_="diretor")
CAST = Matcher.of("li", class_="elenco")
RATING = Matcher.of("span", class_="classificacao")
LENGTH = Matcher.of("span", class_="duracao")
RERUN = Matcher.of("span", class_="reprise")


def _names(element) -> List[str]:
    """Comma separated names after an optional "Label:" prefix"""
    value = text_of(element)
    if ":" in value:
        value = value.split(":", 1)[1]
    return [name.strip() for name in value.split(",") if name.strip()]


class BrazilNetAdapter(SiteAdapter):
    key = "br_net"
    description = "Brazil (NET cable)"
    domain = "netcombo.com.br"
    base_url = "http://www.netcombo.com.br/guia"
    encoding = "iso-8859-1"
    utc_offset = -3
    language = "pt"
    max_days = 7

    config_keys = frozenset({"city", "idtemplate"})
    default_city = "1"
    has_details = True

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        content = self.download(ctx, f"{self.base_url}/canais", params={"cidade": ctx.effective_city})
        if content is None:
            logging.warning("Could not retrieve the %s channel list for city %s", self.domain, ctx.effective_city)
            return OrderedDict()

        soup = parse_html(self.decode(content))
        entries = []
        for row in CHANNEL_ROW.find_all(soup):
            logo = CHANNEL_LOGO.find(row)
            entries.append((
                row.get("data-canal"),
                self.text(text_of(CHANNEL_NAME.find(row))),
                urljoin(self.base_url + "/", logo["src"]) if logo is not None else None,
            ))
        return self.directory_from(entries)

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        return self.download(
            ctx,
            f"{self.base_url}/programacao",
            params={"cidade": ctx.effective_city, "canal": channel_id, "data": day.strftime("%d/%m/%Y")},
        )

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        soup = parse_html(self.decode(page))
        shows = []
        for row in SHOW_ROW.find_all(soup):
            start = START.find(row)
            cell = TITLE.find(row)
            title = text_of(cell)
            if start is None or not title:
                continue
            link = cell.find("a", href=True)
            shows.append(
                RawShow(
                    start=text_of(start),
                    title=title,
                    category=text_of(GENRE.find(row)) or None,
                    detail_url=urljoin(self.base_url + "/", link["href"]) if link is not None else None,
                )
            )
        return shows

    def parse_details(self, ctx, page: bytes) -> Optional[ShowDetails]:
        soup = parse_html(self.decode(page))
        synopsis = SYNOPSIS.find(soup)
        if synopsis is None:
            return None

        details = ShowDetails(
            description=text_of(synopsis.find("p")) or text_of(synopsis) or None,
            rating=text_of(RATING.find(soup)) or None,
        )
        directors = _names(DIRECTOR.find(soup))
        if directors:
            details.credits["director"] = directors
        actors = _names(CAST.find(soup))
        if actors:
            details.credits["actor"] = actors

        length = DURATION.search(text_of(LENGTH.find(soup)))
        if length:
            details.duration = int(length.group(1))
        if RERUN.find(soup) is not None:
            details.rerun = True
        return details
