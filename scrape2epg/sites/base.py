"""
scrape2epg.sites.base - Site adapter interface

A SiteAdapter knows one website: where its channel directory and daily
schedule pages live, how they are encoded and how to pull show blocks out
of them. Adapters hold no run state; everything per-run comes from the
GrabContext passed to each call.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, tzinfo
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Mapping, Optional

from ..exceptions import ConfigError
from ..model import ChannelInfo, RawShow, ShowDetails
from ..utils import HtmlUtils, TextUtils, TimeUtils

if TYPE_CHECKING:
    from ..context import GrabContext


class SiteAdapter(ABC):
    """Fetch and extraction capabilities for one listings website"""

    key: str = ""
    description: str = ""
    domain: str = ""
    base_url: str = ""
    encoding: str = "utf-8"
    utc_offset: float = 0.0
    language: str = "en"
    max_days: int = 7

    id_template: str = "{id}.{domain}"
    id_pattern = re.compile(r"^\d+$")
    sentinel_ids: FrozenSet[str] = frozenset({"0"})

    # Metadata keys this site reads from its configuration file
    config_keys: FrozenSet[str] = frozenset({"idtemplate"})
    sources: Mapping[str, str] = {}
    default_source: Optional[str] = None
    default_city: Optional[str] = None

    has_details: bool = False
    genres: Optional[Mapping[int, str]] = None

    @property
    def tz(self) -> tzinfo:
        return TimeUtils.fixed_offset(self.utc_offset)

    def is_valid_channel_id(self, channel_id: Optional[str]) -> bool:
        """Reject empty, malformed, zero and placeholder channel ids"""
        if not channel_id:
            return False
        channel_id = channel_id.strip()
        if channel_id in self.sentinel_ids:
            return False
        if not self.id_pattern.match(channel_id):
            return False
        if channel_id.isdigit() and int(channel_id) == 0:
            return False
        return True

    def header(self) -> Dict[str, str]:
        from .. import __version__

        return {
            "source-info-url": self.base_url,
            "source-info-name": self.domain,
            "generator-info-name": f"scrape2epg/{__version__} ({self.key})",
        }

    def decode(self, content: bytes) -> str:
        return TextUtils.decode_page(content, self.encoding)

    def text(self, value: Optional[str]) -> str:
        """Visible text as stored by the site, cleaned for output"""
        return HtmlUtils.clean_text(value)

    def resolve_source(self, ctx: "GrabContext") -> Optional[str]:
        """Selected data source value, validated against the site's sources"""
        if not self.sources:
            return None
        name = ctx.effective_source
        if name not in self.sources:
            raise ConfigError(
                f"Unknown source '{name}' for {self.key}, choose one of: "
                + ", ".join(sorted(self.sources))
            )
        return self.sources[name]

    def download(self, ctx: "GrabContext", url: str, params: Optional[Dict[str, Any]] = None) -> Optional[bytes]:
        return ctx.downloader.download_with_retry(url, params=params)

    def directory_from(self, entries) -> "OrderedDict[str, ChannelInfo]":
        """Keep valid (id, name, icon) tuples in page order, first one wins"""
        channels: "OrderedDict[str, ChannelInfo]" = OrderedDict()
        for channel_id, name, icon in entries:
            channel_id = (channel_id or "").strip()
            if not self.is_valid_channel_id(channel_id):
                logging.debug("Discarding directory entry with invalid id %r (%s)", channel_id, name)
                continue
            if channel_id in channels:
                continue
            channels[channel_id] = ChannelInfo(display_name=name or channel_id, icon_url=icon or None)
        return channels

    @abstractmethod
    def fetch_channels(self, ctx: "GrabContext") -> "OrderedDict[str, ChannelInfo]":
        """Site channel directory; empty mapping (and a warning) on failure"""

    @abstractmethod
    def fetch_day(self, ctx: "GrabContext", channel_id: str, day: date) -> Optional[bytes]:
        """Raw schedule page for one channel and day, None on transport failure"""

    @abstractmethod
    def extract(self, ctx: "GrabContext", page: bytes, day: date) -> List[RawShow]:
        """Show blocks of a schedule page, in page order"""

    def fetch_details(self, ctx: "GrabContext", show: RawShow) -> RawShow:
        """Slow mode: enrich a show from its detail page

        Detail pages are parsed once per run; a rerun pointing at an already
        seen page reuses the cached details.
        """
        if not self.has_details or not show.detail_url:
            return show

        url = show.detail_url
        if url in ctx.detail_cache:
            logging.debug("  Details from cache: %s", url)
            details = ctx.detail_cache[url]
        else:
            page = self.download(ctx, url)
            details = None
            if page is not None:
                details = self.parse_details(ctx, page)
                if details is None:
                    logging.warning("No details found on %s", url)
            ctx.detail_cache[url] = details

        if details is not None:
            details.apply_to(show)
        return show

    def parse_details(self, ctx: "GrabContext", page: bytes) -> Optional[ShowDetails]:
        """Extended fields of a detail page (sites without details: None)"""
        return None
