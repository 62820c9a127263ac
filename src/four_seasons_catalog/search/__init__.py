from .filters import ALL_DEVELOPERS, ALL_LOCATIONS, SearchFilters
from .matcher import filter_compounds

__all__ = ["ALL_DEVELOPERS", "ALL_LOCATIONS", "SearchFilters", "filter_compounds"]
