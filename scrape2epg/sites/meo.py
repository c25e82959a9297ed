"""
scrape2epg.sites.meo - Portuguese MEO listings (SAPO EPG web service)

The service answers XML, so pages are walked with ElementTree instead of
the HTML matchers. Channels are identified by their "sigla" (short code)
and programmes carry full local timestamps.
"""

import logging
import re
import xml.etree.ElementTree as ET
from collections import OrderedDict
from datetime import date, datetime
from typing import Iterator, List, Optional

from ..model import ChannelInfo, RawShow
from ..utils import HtmlUtils
from .base import SiteAdapter

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _local(tag: str) -> str:
    """Element name without its XML namespace"""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element.iter():
        if _local(child.tag) == name:
            yield child


def _child_text(element: ET.Element, name: str) -> str:
    for child in element:
        if _local(child.tag) == name:
            return HtmlUtils.clean_text(child.text)
    return ""


class MeoAdapter(SiteAdapter):
    key = "pt_meo"
    description = "Portugal (MEO)"
    domain = "meo.pt"
    base_url = "http://services.sapo.pt/EPG"
    encoding = "utf-8"
    utc_offset = 0
    language = "pt"
    max_days = 7

    id_template = "{id}.{domain}"
    id_pattern = re.compile(r"^[A-Za-z0-9][A-Za-z0-9+_.-]*$")
    sentinel_ids = frozenset({"0", "NA", "N/A", "-"})

    def _parse(self, content: bytes) -> Optional[ET.Element]:
        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            logging.warning("Invalid XML received from %s: %s", self.domain, str(e))
            return None

    def fetch_channels(self, ctx) -> "OrderedDict[str, ChannelInfo]":
        content = self.download(ctx, f"{self.base_url}/GetChannelList")
        root = self._parse(content) if content is not None else None
        if root is None:
            logging.warning("Could not retrieve the %s channel list", self.domain)
            return OrderedDict()

        return self.directory_from(
            (_child_text(channel, "Sigla"), _child_text(channel, "Name"), None)
            for channel in _children(root, "Channel")
        )

    def fetch_day(self, ctx, channel_id: str, day: date) -> Optional[bytes]:
        return self.download(
            ctx,
            f"{self.base_url}/GetChannelByDateInterval",
            params={
                "channelSigla": channel_id,
                "startDate": f"{day.isoformat()} 00:00:00",
                "endDate": f"{day.isoformat()} 23:59:59",
            },
        )

    def extract(self, ctx, page: bytes, day: date) -> List[RawShow]:
        root = self._parse(page)
        if root is None:
            return []

        shows = []
        for program in _children(root, "Program"):
            start = self._timestamp(_child_text(program, "StartTime"))
            title = _child_text(program, "Title")
            if start is None or not title:
                continue
            stop = self._timestamp(_child_text(program, "EndTime"))
            shows.append(
                RawShow(
                    start=start.strftime("%H:%M"),
                    stop=stop.strftime("%H:%M") if stop else None,
                    day=start.date(),
                    stop_day=stop.date() if stop else None,
                    title=title,
                    description=_child_text(program, "Description") or None,
                )
            )
        return shows

    @staticmethod
    def _timestamp(value: str) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.strptime(value, TIMESTAMP_FORMAT)
        except ValueError:
            logging.debug("Unparseable MEO timestamp: %s", value)
            return None
