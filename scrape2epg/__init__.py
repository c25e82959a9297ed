"""
scrape2epg - XMLTV grabbers for TV schedule websites

Scrapes daily listing pages from Israeli, Reunion, Estonian, Portuguese,
Swiss and Brazilian guide sites and writes them out as XMLTV.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0"

from .config import ConfigManager
from .context import GrabContext
from .downloader import OptimizedDownloader
from .exceptions import ConfigError, FetchError, Scrape2EpgError
from .grabber import Grabber, GrabResult
from .sites import SITES, SiteAdapter, get_adapter
from .utils import TimeUtils
from .xmltv import XmltvWriter

__all__ = [
    "ConfigManager",
    "ConfigError",
    "FetchError",
    "GrabContext",
    "GrabResult",
    "Grabber",
    "OptimizedDownloader",
    "SITES",
    "Scrape2EpgError",
    "SiteAdapter",
    "TimeUtils",
    "XmltvWriter",
    "get_adapter",
]
