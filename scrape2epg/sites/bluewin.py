"""
scrape2epg.sites.bluewin - Swiss listings (tv.bluewin.ch)

The day listing only carries time, title, genre and a few flag badges.
In slow mode each show's detail page adds description, cast and crew,
duration, age rating and the rerun marker.
"""

import logging
import re
from collections import OrderedDict
from datetime import date
from typing import List, Optional
from urllib.parse import urljoin

from ..matcher import Matcher, parse_html, select_path, text_of
from ..model import ChannelInfo, RawShow, ShowDetails, SubtitleFlag
from .base import SiteAdapter

DURATION = re.compile(r"(\d+)\s*Min", re.IGNORECASE)

# Credit labels on detail pages -> XMLTV roles
CREDIT_LABELS = {
    "regie": "director",
    "darsteller": "actor",
    "besetzung": "actor",
    "drehbuch": "writer",
    "buch": "writer",
    "moderation": "presenter",
}

FLAG_SUBTITLES = {
    "flag-ut": SubtitleFlag.TELETEXT,
    "flag-ot": SubtitleFlag.ONSCREEN,
    "flag-gs": SubtitleFlag.DEAF_SIGNED,
}

CHANNEL_ITEM = (Matcher.of("ul", class_="channel-list"), Matcher.of("li", class_="channel", has=("data-channel-id",)))
CHANNEL_NAME = Matcher.of("span", class_="name")
CHANNEL_LOGO = Matcher.of("img", class_="logo")

SHOW_BLOCK = Matcher.of("div", class_="broadcast")
START = Matcher.of("span", class_="time", text=r"^\d{1,2}:\d{2}$")
TITLE = Matcher.of("a", class_="title")
GENRE = Matcher.of("span", class_="genre")
FLAG = Matcher.of("span", class_="flag")

DETAIL = Matcher.of("div", class_="detail")
DETAIL_DESCRIPTION = Matcher.of("p", class_="description")
DETAIL_CREDITS = Matcher.of("dl", class_="credits")
DETAIL_DURATION = Matcher.of("span", class_="duration")
DETAIL_RATING = Matcher.of("span", class_="rating")
DETAIL_REPEAT = Matcher.of("span", class_="repeat")


class BluewinAdapter(SiteAdapter):
    key = "ch_bluewin"
    description = "Switzerland (tv.bluewin.ch)"
    domain = "tv.bluewin.ch"
    base_url = "https://tv.bluewin.ch"
    encoding = "utf-8"
    utc_offset = 1
    language = "de"
    max_days = 7
    has_details = True

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        content = self.download(ctx, f"{self.base_url}/channels")
        if content is None:
            logging.warning("Could not retrieve the %s channel list", self.domain)
            return OrderedDict()

        soup = parse_html(self.decode(content))
        entries = []
        for item in select_path(soup, CHANNEL_ITEM):
            logo = CHANNEL_LOGO.find(item)
            icon = urljoin(self.base_url, logo["src"]) if logo is not None and logo.get("src") else None
            entries.append((item.get("data-channel-id"), text_of(CHANNEL_NAME.find(item)), icon))
        return self.directory_from(entries)

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        return self.download(
            ctx, f"{self.base_url}/programm", params={"channel": channel_id, "date": day.strftime("%Y%m%d")}
        )

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        soup = parse_html(self.decode(page))
        shows = []
        for block in SHOW_BLOCK.find_all(soup):
            start = START.find(block)
            title = TITLE.find(block)
            if start is None or title is None or not text_of(title):
                continue

            show = RawShow(
                start=text_of(start),
                title=text_of(title),
                category=text_of(GENRE.find(block)) or None,
                detail_url=urljoin(self.base_url, title["href"]) if title.get("href") else None,
            )
            for flag in FLAG.find_all(block):
                classes = flag.get("class", [])
                if "flag-wh" in classes:
                    show.rerun = True
                for name, subtitle in FLAG_SUBTITLES.items():
                    if name in classes and show.subtitle_flag is None:
                        show.subtitle_flag = subtitle
            shows.append(show)
        return shows

    def parse_details(self, ctx, page: bytes) -> Optional[ShowDetails]:
        soup = parse_html(self.decode(page))
        detail = DETAIL.find(soup)
        if detail is None:
            return None

        details = ShowDetails(
            description=text_of(DETAIL_DESCRIPTION.find(detail)) or None,
            rating=text_of(DETAIL_RATING.find(detail)) or None,
        )

        duration = DURATION.search(text_of(DETAIL_DURATION.find(detail)))
        if duration:
            details.duration = int(duration.group(1))

        if DETAIL_REPEAT.find(detail) is not None:
            details.rerun = True

        credits_list = DETAIL_CREDITS.find(detail)
        if credits_list is not None:
            for term in credits_list.find_all("dt"):
                role = CREDIT_LABELS.get(text_of(term).rstrip(":").lower())
                value = term.find_next_sibling("dd")
                if role is None or value is None:
                    continue
                names = [name.strip() for name in text_of(value).split(",") if name.strip()]
                details.credits.setdefault(role, []).extend(names)
        return details
