"""
scrape2epg.downloader - HTTP download manager

Handles page downloads with connection reuse, a per-request politeness delay
and a fixed number of immediate retries. Failures are reported as warnings
and a None result so a single page never aborts a grab.
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import FetchError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/115.0"
)


class OptimizedDownloader:
    """Download manager with session reuse and fixed-count retries"""

    def __init__(self, delay: float = 0.0, max_retries: int = 3, timeout: int = 20,
                 user_agent: str = DEFAULT_USER_AGENT, pool_size: int = 1):
        self.session: Optional[requests.Session] = None
        self.delay = max(0.0, delay)
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.user_agent = user_agent
        self.pool_size = max(1, pool_size)
        self.last_request_time = 0.0
        self.total_requests = 0
        self.failed_requests = 0
        self.bytes_downloaded = 0
        self._lock = threading.Lock()

        self.init_session()

    def init_session(self):
        """Initialize session with keep-alive and browser-like headers"""
        if self.session:
            self.session.close()

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "text/html, application/xhtml+xml, application/xml;q=0.9, */*;q=0.8",
                "Accept-Language": "en-US,en;q=0.7",
                "Connection": "keep-alive",
            }
        )

        # Retries are done by download_with_retry, not by urllib3
        adapter = HTTPAdapter(
            pool_connections=self.pool_size,
            pool_maxsize=self.pool_size,
            max_retries=Retry(total=0, backoff_factor=0, status_forcelist=[]),
        )
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        logging.debug("HTTP session initialized (pool size %d)", self.pool_size)

    def polite_delay(self):
        """Keep at least ``delay`` seconds between two requests"""
        if self.delay <= 0:
            return
        with self._lock:
            elapsed = time.time() - self.last_request_time
            if elapsed < self.delay:
                sleep_time = self.delay - elapsed
                logging.debug("  Delay: %.2fs", sleep_time)
                time.sleep(sleep_time)
            self.last_request_time = time.time()

    def fetch(self, url: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """Download a page, raising FetchError once all attempts failed"""
        with self._lock:
            self.total_requests += 1

        last_reason = "no attempt made"
        for attempt in range(self.max_retries):
            self.polite_delay()
            logging.debug("  Attempt %d/%d: %s %s", attempt + 1, self.max_retries, url, params or "")

            try:
                response = self.session.get(url, params=params, timeout=self.timeout)

                if response.status_code == 200:
                    with self._lock:
                        self.bytes_downloaded += len(response.content)
                    logging.debug("  Success: %d bytes received", len(response.content))
                    return response.content

                last_reason = f"HTTP {response.status_code}"
                logging.debug("  HTTP %d received", response.status_code)
                if response.status_code in (404, 410):
                    break  # Don't retry for permanent errors

            except requests.exceptions.Timeout:
                last_reason = f"timeout after {self.timeout}s"
                logging.debug("  Timeout on attempt %d", attempt + 1)

            except requests.exceptions.ConnectionError as e:
                last_reason = f"connection error: {e}"
                logging.debug("  Connection error on attempt %d: %s", attempt + 1, str(e))

            except requests.exceptions.RequestException as e:
                last_reason = f"request error: {e}"
                logging.debug("  Request error on attempt %d: %s", attempt + 1, str(e))

        with self._lock:
            self.failed_requests += 1
        raise FetchError(url, last_reason)

    def download_with_retry(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[bytes]:
        """Download a page; on failure log a warning and return None"""
        try:
            return self.fetch(url, params=params)
        except FetchError as e:
            logging.warning("Download failed: %s", str(e))
            return None

    def close(self):
        """Clean shutdown"""
        if self.session:
            self.session.close()
            self.session = None

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "failed_requests": self.failed_requests,
            "bytes_downloaded": self.bytes_downloaded,
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
