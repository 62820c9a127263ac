"""Package initializer for `four_seasons_catalog`."""

from .catalog import Catalog
from .result import FetchResult

__all__ = ["Catalog", "FetchResult"]
