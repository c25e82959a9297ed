"""
scrape2epg.context - Per-run state handed to every grabber component
"""

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Dict, Optional

from .downloader import OptimizedDownloader
from .model import Channel, ChannelInfo, Configuration, FetchWindow, ShowDetails

if TYPE_CHECKING:
    from .sites.base import SiteAdapter


@dataclass
class GrabContext:
    """Everything one run needs, built once at startup from CLI and config"""

    adapter: "SiteAdapter"
    downloader: OptimizedDownloader
    window: FetchWindow
    today: date
    configuration: Configuration = field(default_factory=Configuration)
    source: Optional[str] = None
    id_template: Optional[str] = None
    city: Optional[str] = None
    slow: bool = False
    workers: int = 1
    # Detail pages already parsed this run, keyed by URL (reruns share them)
    detail_cache: Dict[str, Optional[ShowDetails]] = field(default_factory=dict)

    @property
    def effective_source(self) -> Optional[str]:
        return self.source or self.configuration.source or self.adapter.default_source

    @property
    def effective_city(self) -> Optional[str]:
        return self.city or self.configuration.city or self.adapter.default_city

    @property
    def effective_id_template(self) -> str:
        return self.id_template or self.configuration.id_template or self.adapter.id_template

    def output_id(self, site_channel_id: str) -> str:
        """XMLTV id for a site channel: explicit override, else the id template"""
        override = self.configuration.id_overrides.get(site_channel_id)
        if override:
            return override
        return (
            self.effective_id_template.replace("{id}", site_channel_id)
            .replace("{domain}", self.adapter.domain)
        )

    def build_channel(self, site_channel_id: str, display_name: str,
                      info: Optional[ChannelInfo] = None) -> Channel:
        return Channel(
            site_channel_id=site_channel_id,
            display_name=display_name or (info.display_name if info else site_channel_id),
            output_id=self.output_id(site_channel_id),
            icon_url=info.icon_url if info else None,
        )
