"""
scrape2epg.normalize - Raw show blocks to programme records

Turns bare site times into aware datetimes with the site's fixed offset,
splits concatenated titles, maps genre codes and enforces the start/stop
ordering of finished records.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Mapping, Optional, Tuple

from .model import CREDIT_ROLES, FetchWindow, Programme, RawShow
from .utils import HtmlUtils, TimeUtils

TITLE_SEPARATORS = " :-–—,.;/|"


def clamp_window(offset_days: int, length_days: int, max_days: int) -> FetchWindow:
    """Clamp a requested grab window to the site's maximum lookahead

    When the offset alone reaches past the maximum the whole default window
    starting today is used instead.
    """
    offset_days = max(0, offset_days)
    length_days = max(0, length_days)

    if offset_days >= max_days:
        logging.warning(
            "Offset %d is beyond the %d days available, grabbing days 0-%d instead",
            offset_days, max_days, max_days - 1,
        )
        return FetchWindow(0, max_days)

    if offset_days + length_days > max_days:
        clamped = max_days - offset_days
        logging.warning(
            "Only %d days of listings are available, reducing --days from %d to %d",
            max_days, length_days, clamped,
        )
        return FetchWindow(offset_days, clamped)

    return FetchWindow(offset_days, length_days)


def split_title(title: str, machine_title: Optional[str]) -> Tuple[str, str]:
    """Split "Title: Subtitle" using the length of the machine-readable title

    The machine title length is the cut point into the displayed title. The
    separator and any leading punctuation of the remainder are stripped.
    Without a machine title the whole string is the title.
    """
    title = HtmlUtils.clean_text(title)
    machine_title = HtmlUtils.clean_text(machine_title)
    if not machine_title or len(machine_title) >= len(title):
        return title, ""

    cut = len(machine_title)
    head = title[:cut].rstrip(TITLE_SEPARATORS)
    tail = title[cut:].lstrip(TITLE_SEPARATORS).strip()
    if not head:
        return title, ""
    return head, tail


def map_genre(code, table: Mapping[int, str]) -> Optional[str]:
    """Map a site genre/icon code through a static vocabulary

    Codes that are not integers, negative, or absent from the table map to
    None: an unknown genre is dropped, never guessed.
    """
    if code is None:
        return None
    try:
        index = int(str(code).strip())
    except ValueError:
        logging.debug("Non-numeric genre code dropped: %r", code)
        return None
    if index < 0:
        logging.debug("Negative genre code dropped: %d", index)
        return None
    genre = table.get(index)
    if genre is None:
        logging.debug("Unknown genre code dropped: %d", index)
    return genre


def normalize(raw: RawShow, day: date, tz: tzinfo, language: str, channel_id: str,
              genres: Optional[Mapping[int, str]] = None) -> Programme:
    """Build a Programme from a raw block broadcast on ``day``

    A bare stop clock earlier than the start means the show crosses
    midnight, so the stop moves to the next day. A stop dated by the site
    is kept as is and left to validate_stop.
    """
    show_day = raw.day or day
    start_clock = TimeUtils.parse_clock(raw.start)
    if start_clock is None:
        raise ValueError(f"Unparseable start time: {raw.start!r}")
    start = TimeUtils.combine(show_day, start_clock, tz)

    stop = None
    stop_clock = TimeUtils.parse_clock(raw.stop)
    if stop_clock is not None and raw.stop_day is not None:
        stop = TimeUtils.combine(raw.stop_day, stop_clock, tz)
    elif stop_clock is not None:
        stop = TimeUtils.combine(show_day, stop_clock, tz)
        if stop < start:
            stop += timedelta(days=1)
    elif raw.duration:
        stop = start + timedelta(minutes=raw.duration)

    title, sub_title = split_title(raw.title, raw.machine_title)

    programme = Programme(channel=channel_id, title=[(title, language)], start=start, stop=stop)
    if sub_title:
        programme.sub_title.append((sub_title, language))

    if genres is not None and raw.genre_code is not None:
        genre = map_genre(raw.genre_code, genres)
        if genre:
            programme.category.append((genre, "en"))
    if raw.category:
        category = HtmlUtils.clean_text(raw.category)
        if category and (category, language) not in programme.category:
            programme.category.append((category, language))

    if raw.description:
        description = HtmlUtils.clean_text(raw.description)
        if description:
            programme.description.append((description, language))

    programme.credits = _clean_credits(raw.credits)
    programme.subtitle_flag = raw.subtitle_flag
    programme.rerun = raw.rerun
    programme.rating = HtmlUtils.clean_text(raw.rating) or None
    programme.length = raw.duration
    return programme


def validate_stop(programme: Programme) -> Programme:
    """Drop a stop time that precedes the start (upstream inconsistency)"""
    if programme.stop is not None and programme.stop < programme.start:
        logging.warning(
            "Dropping stop time %s before start %s for '%s' on %s",
            programme.stop.isoformat(), programme.start.isoformat(),
            programme.title[0][0] if programme.title else "?", programme.channel,
        )
        programme.stop = None
    return programme


def in_window(start: datetime, window: FetchWindow, today: date) -> bool:
    """True when start falls inside the grabbed days (site local dates)"""
    first = today + timedelta(days=window.offset_days)
    last = first + timedelta(days=window.length_days)
    return first <= start.date() < last


def _clean_credits(credits: Mapping[str, list]) -> Dict[str, list]:
    cleaned = {}
    for role in CREDIT_ROLES:
        names = []
        for name in credits.get(role, []) if credits else []:
            name = HtmlUtils.clean_text(name)
            if name and name not in names:
                names.append(name)
        if names:
            cleaned[role] = names
    return cleaned
