"""
scrape2epg.sites.estonia - Estonian listings (kava.ee)

Titles are shown as "Series: Episode" while a data attribute carries the
bare series title; its length is used to split the two.
"""

import logging
import re
from collections import OrderedDict
from datetime import date
from typing import List, Optional

from ..matcher import Matcher, parse_html, select_path, text_of
from ..model import ChannelInfo, RawShow
from .base import SiteAdapter

RERUN_MARK = re.compile(r"^\(?\s*(K|kordus)\s*\)?$", re.IGNORECASE)

CHANNEL_PATH = (Matcher.of("div", id="channels"), Matcher.of("a", class_="channel", has=("data-id",)))

SHOW_BLOCK = Matcher.of("li", class_="broadcast")
START = Matcher.of("time", class_="start", text=r"^\d{1,2}:\d{2}$")
END = Matcher.of("time", class_="end")
TITLE = Matcher.of("span", class_="title")
CATEGORY = Matcher.of("span", class_="category")
DESCRIPTION = Matcher.of("div", class_="description")
REPEAT = Matcher.of("span", class_="repeat")


class EstoniaAdapter(SiteAdapter):
    key = "ee"
    description = "Estonia (kava.ee)"
    domain = "kava.ee"
    base_url = "http://www.kava.ee"
    encoding = "utf-8"
    utc_offset = 2
    language = "et"
    max_days = 14

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        content = self.download(ctx, f"{self.base_url}/kanalid")
        if content is None:
            logging.warning("Could not retrieve the %s channel list", self.domain)
            return OrderedDict()

        soup = parse_html(self.decode(content))
        return self.directory_from(
            (link.get("data-id"), text_of(link), link.get("data-logo"))
            for link in select_path(soup, CHANNEL_PATH)
        )

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        return self.download(ctx, f"{self.base_url}/kava/{channel_id}/{day.isoformat()}")

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        soup = parse_html(self.decode(page))
        shows = []
        for block in SHOW_BLOCK.find_all(soup):
            start = START.find(block)
            title = TITLE.find(block)
            if start is None or title is None or not text_of(title):
                continue

            repeat = text_of(REPEAT.find(block))
            shows.append(
                RawShow(
                    start=text_of(start),
                    stop=text_of(END.find(block)) or None,
                    title=text_of(title),
                    machine_title=title.get("data-title"),
                    category=text_of(CATEGORY.find(block)) or None,
                    description=text_of(DESCRIPTION.find(block)) or None,
                    rerun=True if repeat and RERUN_MARK.match(repeat) else None,
                )
            )
        return shows
