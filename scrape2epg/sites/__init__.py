"""
scrape2epg.sites - Site adapter registry
"""

from typing import Dict, Type

from .base import SiteAdapter
from .bluewin import BluewinAdapter
from .brazil import BrazilNetAdapter
from .estonia import EstoniaAdapter
from .israel import IsraelAdapter
from .meo import MeoAdapter
from .reunion import ReunionAdapter

SITES: Dict[str, Type[SiteAdapter]] = {
    adapter.key: adapter
    for adapter in (
        IsraelAdapter,
        ReunionAdapter,
        EstoniaAdapter,
        MeoAdapter,
        BluewinAdapter,
        BrazilNetAdapter,
    )
}


def get_adapter(key: str) -> SiteAdapter:
    """Instantiate the adapter registered under a site key"""
    try:
        return SITES[key]()
    except KeyError:
        raise ValueError(f"Unknown site '{key}', choose one of: {', '.join(SITES)}") from None


__all__ = ["SITES", "SiteAdapter", "get_adapter"]
