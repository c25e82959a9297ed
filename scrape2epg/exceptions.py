"""
scrape2epg.exceptions - Error types shared by the grabbers
"""


class Scrape2EpgError(Exception):
    """Base class for scrape2epg errors"""


class ConfigError(Scrape2EpgError):
    """Missing, unreadable or unusable configuration file"""


class FetchError(Scrape2EpgError):
    """Page retrieval failed after all retries"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason
