"""
scrape2epg.model - Records exchanged between adapters, normalizer and writer
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

# (text, language) pairs, as written to XMLTV with a lang attribute
LangText = Tuple[str, str]

CREDIT_ROLES = ("director", "actor", "writer", "presenter")


class SubtitleFlag(enum.Enum):
    TELETEXT = "teletext"
    ONSCREEN = "onscreen"
    DEAF_SIGNED = "deaf-signed"


@dataclass(frozen=True)
class ChannelInfo:
    """One entry of a site's channel directory"""

    display_name: str
    icon_url: Optional[str] = None


@dataclass(frozen=True)
class Channel:
    site_channel_id: str
    display_name: str
    output_id: str
    icon_url: Optional[str] = None


@dataclass
class ConfigEntry:
    channel_id: str
    enabled: bool
    display_name: str


@dataclass
class Configuration:
    """Parsed configuration file"""

    entries: List[ConfigEntry] = field(default_factory=list)
    source: Optional[str] = None
    id_template: Optional[str] = None
    city: Optional[str] = None
    id_overrides: Dict[str, str] = field(default_factory=dict)

    @property
    def enabled_entries(self) -> List[ConfigEntry]:
        return [entry for entry in self.entries if entry.enabled]


@dataclass
class RawShow:
    """Fields pulled out of one show block, before normalization

    Times are bare ``HH:MM`` strings. ``day`` is only set when the page
    carries an explicit calendar date for the block, and ``stop_day`` when
    the stop comes as a full timestamp (no midnight rollover then).
    """

    start: str
    title: str
    stop: Optional[str] = None
    day: Optional[date] = None
    stop_day: Optional[date] = None
    machine_title: Optional[str] = None
    genre_code: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    credits: Dict[str, List[str]] = field(default_factory=dict)
    subtitle_flag: Optional[SubtitleFlag] = None
    rerun: Optional[bool] = None
    rating: Optional[str] = None
    duration: Optional[int] = None
    detail_url: Optional[str] = None


@dataclass
class ShowDetails:
    """Extended fields found on a show's detail page (slow mode)"""

    description: Optional[str] = None
    category: Optional[str] = None
    credits: Dict[str, List[str]] = field(default_factory=dict)
    duration: Optional[int] = None
    rating: Optional[str] = None
    rerun: Optional[bool] = None

    def apply_to(self, show: RawShow) -> RawShow:
        """Fill the show's missing fields; values already on the listing win"""
        if self.description and not show.description:
            show.description = self.description
        if self.category and not show.category:
            show.category = self.category
        for role, names in self.credits.items():
            if names and not show.credits.get(role):
                show.credits[role] = list(names)
        if self.duration and not show.duration:
            show.duration = self.duration
        if self.rating and not show.rating:
            show.rating = self.rating
        if self.rerun is not None and show.rerun is None:
            show.rerun = self.rerun
        return show


@dataclass
class Programme:
    channel: str
    title: List[LangText]
    start: datetime
    stop: Optional[datetime] = None
    sub_title: List[LangText] = field(default_factory=list)
    category: List[LangText] = field(default_factory=list)
    description: List[LangText] = field(default_factory=list)
    credits: Dict[str, List[str]] = field(default_factory=dict)
    subtitle_flag: Optional[SubtitleFlag] = None
    rerun: Optional[bool] = None
    rating: Optional[str] = None
    length: Optional[int] = None


@dataclass(frozen=True)
class FetchWindow:
    offset_days: int
    length_days: int

    def days(self, today: date) -> List[date]:
        """Calendar dates covered by the window, starting from today + offset"""
        return [today + timedelta(days=self.offset_days + i) for i in range(self.length_days)]
