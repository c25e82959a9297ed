"""
scrape2epg.utils - Time, text and markup helpers

Provides time-of-day parsing, fixed UTC offsets, weekday indexes, page
decoding and visual to logical reordering for right-to-left sites.
"""

import html
import logging
import re
import shutil
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Optional

from bidi.algorithm import get_display


class TimeUtils:
    """Time and date utilities"""

    TIME_PATTERN = re.compile(r"^\s*(\d{1,2})\s*[:hH.]\s*(\d{2})\s*$")

    @staticmethod
    def fixed_offset(hours: float) -> tzinfo:
        """Return a fixed-offset timezone (no DST, no tz database lookup)"""
        return timezone(timedelta(minutes=int(round(hours * 60))))

    @staticmethod
    def parse_clock(value: Optional[str]) -> Optional[time]:
        """Parse ``HH:MM`` (also ``20h50`` and ``20.50``) into a time, or None"""
        if not value:
            return None
        match = TimeUtils.TIME_PATTERN.match(value)
        if not match:
            return None
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        return time(hour, minute)

    @staticmethod
    def combine(day: date, clock: time, tz: tzinfo) -> datetime:
        return datetime.combine(day, clock).replace(tzinfo=tz)

    @staticmethod
    def weekday_index(day: date) -> int:
        """Site weekday number: Sunday=1 ... Saturday=7, wrapping back to 1"""
        return (day.isoweekday() % 7) + 1

    @staticmethod
    def conv_time(value: datetime) -> str:
        """Convert an aware datetime to XMLTV time format"""
        return value.strftime("%Y%m%d%H%M%S %z")


class HtmlUtils:
    """HTML/XML utilities"""

    WHITESPACE = re.compile(r"\s+")

    @staticmethod
    def conv_html(data) -> str:
        """Convert data to an XML-safe string for XMLTV"""
        if data is None:
            return ""

        data = html.unescape(str(data))

        data = data.replace("&", "&amp;")
        data = data.replace('"', "&quot;")
        data = data.replace("'", "&apos;")
        data = data.replace("<", "&lt;")
        data = data.replace(">", "&gt;")

        return data

    @staticmethod
    def clean_text(value: Optional[str]) -> str:
        """Collapse whitespace runs (including nbsp) and strip"""
        if not value:
            return ""
        value = value.replace("\xa0", " ")
        return HtmlUtils.WHITESPACE.sub(" ", value).strip()


class TextUtils:
    """Page decoding and bidirectional text handling"""

    @staticmethod
    def decode_page(content: bytes, encoding: str) -> str:
        """Decode raw page bytes from the site's declared encoding"""
        try:
            return content.decode(encoding)
        except UnicodeDecodeError as e:
            logging.warning("Page is not valid %s (%s), replacing bad bytes", encoding, e)
            return content.decode(encoding, errors="replace")
        except LookupError:
            logging.warning("Unknown encoding %s, decoding as utf-8", encoding)
            return content.decode("utf-8", errors="replace")

    @staticmethod
    def visual_to_logical(text: str) -> str:
        """Reorder right-to-left text stored in visual order into logical order

        Applying the display algorithm to a visual-order line reverses the
        right-to-left runs back while keeping embedded digits and latin runs
        left-to-right.
        """
        if not text:
            return text
        return get_display(text)


def backup_output(output_file: Path) -> Optional[Path]:
    """Keep a copy of the previous XMLTV output before it is overwritten"""
    try:
        if output_file.exists():
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            backup_file = output_file.with_name(f"{output_file.name}.{timestamp}")
            shutil.copy2(output_file, backup_file)
            logging.info("XMLTV backed up: %s", backup_file.name)
            return backup_file
        logging.debug("No existing XMLTV file to backup")
    except OSError as e:
        logging.warning("Error backing up XMLTV: %s", str(e))
    return None
