"""
scrape2epg.grabber - Channel/day grab loop

Fetches one schedule page per (channel, day), extracts and normalizes the
show blocks, then cleans each channel's programme list (duplicates, window,
missing stop times) before handing it to the XMLTV writer.

Page fetches can run in a thread pool; pages are always processed in
(channel, day) order so the output is grouped by channel and chronological.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, List, Optional, Sequence, Tuple

from .context import GrabContext
from .model import Channel, Programme
from .normalize import in_window, normalize, validate_stop
from .utils import TimeUtils
from .xmltv import XmltvWriter

# (channel index, day index, day, page)
FetchedPage = Tuple[int, int, date, Optional[bytes]]


@dataclass
class GrabResult:
    channels: int = 0
    pages_fetched: int = 0
    pages_failed: int = 0
    empty_pages: int = 0
    programmes: int = 0
    details_fetched: int = 0
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """At least one schedule page came back"""
        return self.pages_fetched > 0


@dataclass
class _Entry:
    """Programme with the position of the page it came from"""

    programme: Programme
    day_index: int
    page_position: int


class Grabber:
    """Runs the grab for a list of channels against one site adapter"""

    def __init__(self, ctx: GrabContext):
        self.ctx = ctx
        self.adapter = ctx.adapter
        self.result = GrabResult()

    def run(self, channels: Sequence[Channel], writer: XmltvWriter) -> GrabResult:
        start_time = time.time()
        days = self.ctx.window.days(self.ctx.today)

        if days:
            logging.info(
                "Grabbing %d channels from %s, %s to %s",
                len(channels), self.adapter.domain, days[0].isoformat(), days[-1].isoformat(),
            )
        else:
            logging.warning("Empty grab window, no listings will be fetched")

        for channel in channels:
            writer.write_channel(channel)
        self.result.channels = len(channels)

        pending: List[FetchedPage] = []
        current = 0
        for fetched in self._pages(channels, days):
            if fetched[0] != current:
                self._emit(channels[current], pending, writer)
                pending = []
                current = fetched[0]
            pending.append(fetched)
        if pending:
            self._emit(channels[current], pending, writer)

        self.result.details_fetched = sum(1 for details in self.ctx.detail_cache.values() if details)
        self.result.duration = time.time() - start_time
        logging.info(
            "Grab completed: %d pages fetched, %d failed, %d empty, %d programmes in %.1fs",
            self.result.pages_fetched, self.result.pages_failed, self.result.empty_pages,
            self.result.programmes, self.result.duration,
        )
        return self.result

    def _pages(self, channels: Sequence[Channel], days: List[date]) -> Iterator[FetchedPage]:
        """Schedule pages in (channel, day) order, fetched sequentially or in a pool"""
        tasks = [
            (channel_index, day_index, channel, day)
            for channel_index, channel in enumerate(channels)
            for day_index, day in enumerate(days)
        ]

        if self.ctx.workers <= 1 or len(tasks) <= 1:
            for channel_index, day_index, channel, day in tasks:
                yield channel_index, day_index, day, self._fetch(channel, day)
            return

        logging.info("Fetching %d pages with %d workers", len(tasks), self.ctx.workers)
        with ThreadPoolExecutor(max_workers=self.ctx.workers) as executor:
            futures = [
                (channel_index, day_index, day, executor.submit(self._fetch, channel, day))
                for channel_index, day_index, channel, day in tasks
            ]
            # Results are consumed in submission order whatever order they complete in
            for channel_index, day_index, day, future in futures:
                yield channel_index, day_index, day, future.result()

    def _fetch(self, channel: Channel, day: date) -> Optional[bytes]:
        logging.debug("Fetching %s (%s) for %s", channel.display_name, channel.site_channel_id, day.isoformat())
        return self.adapter.fetch_day(self.ctx, channel.site_channel_id, day)

    def _emit(self, channel: Channel, pages: List[FetchedPage], writer: XmltvWriter):
        programmes = self.grab_channel(channel, pages)
        for programme in programmes:
            writer.write_programme(programme)
        self.result.programmes += len(programmes)
        logging.info("  %s: %d programmes", channel.display_name, len(programmes))

    def grab_channel(self, channel: Channel, pages: List[FetchedPage]) -> List[Programme]:
        """Programmes of one channel from its fetched day pages"""
        entries: List[_Entry] = []
        for position, (_, day_index, day, page) in enumerate(pages):
            if page is None:
                self.result.pages_failed += 1
                logging.warning(
                    "No listings for %s on %s, skipping day", channel.display_name, day.isoformat()
                )
                continue
            self.result.pages_fetched += 1
            for programme in self._page_programmes(channel, page, day):
                entries.append(_Entry(programme, day_index, position))

        entries = self._dedupe(entries)
        self._infer_stops(entries)

        programmes = []
        for entry in entries:
            if not in_window(entry.programme.start, self.ctx.window, self.ctx.today):
                logging.debug("Outside grab window: %s", entry.programme.start.isoformat())
                continue
            programmes.append(validate_stop(entry.programme))
        return programmes

    def _page_programmes(self, channel: Channel, page: bytes, day: date) -> List[Programme]:
        shows = self.adapter.extract(self.ctx, page, day)
        if not shows:
            self.result.empty_pages += 1
            logging.warning(
                "No programmes found for %s on %s: the %s page layout may have changed, "
                "try running --configure again",
                channel.display_name, day.isoformat(), self.adapter.domain,
            )
            return []

        programmes = []
        current_day = day
        previous_clock = None
        for show in shows:
            if self.ctx.slow:
                self.adapter.fetch_details(self.ctx, show)

            # Listings run past midnight: an earlier time means the next day
            if show.day is None:
                clock = TimeUtils.parse_clock(show.start)
                if clock is not None:
                    if previous_clock is not None and clock < previous_clock:
                        current_day += timedelta(days=1)
                    previous_clock = clock

            try:
                programme = normalize(
                    show, current_day, self.adapter.tz, self.adapter.language,
                    channel.output_id, self.adapter.genres,
                )
            except ValueError as e:
                logging.warning("Skipping show '%s' on %s: %s", show.title, channel.display_name, str(e))
                continue
            programmes.append(programme)
        return programmes

    @staticmethod
    def _dedupe(entries: List[_Entry]) -> List[_Entry]:
        seen = set()
        unique = []
        for entry in entries:
            key = (entry.programme.start, entry.programme.title[0][0] if entry.programme.title else "")
            if key in seen:
                logging.debug("Duplicate programme dropped: %s %s", key[0].isoformat(), key[1])
                continue
            seen.add(key)
            unique.append(entry)
        return unique

    @staticmethod
    def _infer_stops(entries: List[_Entry]):
        """Missing stop = start of the following programme on this or the next day's page"""
        for current, following in zip(entries, entries[1:]):
            programme = current.programme
            if programme.stop is not None:
                continue
            adjacent = (
                following.page_position == current.page_position
                or following.day_index == current.day_index + 1
            )
            if adjacent and following.programme.start > programme.start:
                programme.stop = following.programme.start
