"""Shared fixtures: an offline downloader and grab context builder."""

import logging
from datetime import date

import pytest

from scrape2epg.context import GrabContext
from scrape2epg.model import Configuration, FetchWindow


class FakeDownloader:
    """Stands in for OptimizedDownloader, answering from a routing function

    ``handler(url, params)`` returns the page bytes or None for a failed
    download. Every call is recorded in ``calls``.
    """

    def __init__(self, handler=None, pages=None):
        self.pages = pages or {}
        self.handler = handler
        self.calls = []

    def download_with_retry(self, url, params=None):
        self.calls.append((url, dict(params or {})))
        if self.handler is not None:
            return self.handler(url, params or {})
        return self.pages.get(url)

    def get_stats(self):
        return {"total_requests": len(self.calls), "failed_requests": 0, "bytes_downloaded": 0}

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture
def make_ctx():
    """Build a GrabContext around an adapter and a FakeDownloader"""

    def _make(adapter, downloader=None, window=None, today=date(2024, 1, 1), **kwargs):
        return GrabContext(
            adapter=adapter,
            downloader=downloader or FakeDownloader(),
            window=window or FetchWindow(0, 1),
            today=today,
            configuration=kwargs.pop("configuration", Configuration()),
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main.setup_logging replaces root handlers; put them back after each test"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def html_page(body: str, encoding: str = "utf-8") -> bytes:
    return f"<html><head><title>TV</title></head><body>{body}</body></html>".encode(encoding)
