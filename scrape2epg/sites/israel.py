"""
scrape2epg.sites.israel - Israeli TV guide (tvguide.co.il)

Pages are windows-1255 and the Hebrew text is stored in visual order, so
every visible string is reordered to logical order after decoding. Day
pages are addressed by weekday number rather than by date.
"""

import logging
from collections import OrderedDict
from datetime import date
from typing import List, Optional

from ..matcher import Matcher, parse_html, text_of
from ..model import ChannelInfo, RawShow
from ..utils import HtmlUtils, TextUtils, TimeUtils
from .base import SiteAdapter

CHANNEL_SELECT = Matcher.of("select", name="ChannelID")
CHANNEL_OPTION = Matcher.of("option", has=("value",))

SHOW_ROW = Matcher.of("tr", class_="prog")
TIME_CELL = Matcher.of("td", class_="hour", text=r"^\d{1,2}:\d{2}$")
TITLE_CELL = Matcher.of("td", class_="name")
GENRE_CELL = Matcher.of("td", class_="genre")
DESC_CELL = Matcher.of("td", class_="desc")


class IsraelAdapter(SiteAdapter):
    key = "il"
    description = "Israel (tvguide.co.il)"
    domain = "tvguide.co.il"
    base_url = "http://www.tvguide.co.il"
    encoding = "windows-1255"
    utc_offset = 2
    language = "he"
    max_days = 7

    def text(self, value: Optional[str]) -> str:
        return TextUtils.visual_to_logical(HtmlUtils.clean_text(value))

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        content = self.download(ctx, f"{self.base_url}/channels.asp")
        if content is None:
            logging.warning("Could not retrieve the %s channel list", self.domain)
            return OrderedDict()

        soup = parse_html(self.decode(content))
        select = CHANNEL_SELECT.find(soup)
        if select is None:
            logging.warning("Channel selector not found on %s, site layout may have changed", self.domain)
            return OrderedDict()

        return self.directory_from(
            (option.get("value"), self.text(option.get_text()), None)
            for option in CHANNEL_OPTION.find_all(select)
        )

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        return self.download(
            ctx,
            f"{self.base_url}/schedule.asp",
            params={"ChannelID": channel_id, "Day": TimeUtils.weekday_index(day)},
        )

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        soup = parse_html(self.decode(page))
        shows = []
        for row in SHOW_ROW.find_all(soup):
            time_cell = TIME_CELL.find(row)
            if time_cell is None:
                continue  # header or separator row
            title = self.text(text_of(TITLE_CELL.find(row)))
            if not title:
                continue
            shows.append(
                RawShow(
                    start=text_of(time_cell),
                    title=title,
                    category=self.text(text_of(GENRE_CELL.find(row))) or None,
                    description=self.text(text_of(DESC_CELL.find(row))) or None,
                )
            )
        return shows
