"""
External data loaders: NewsAPI articles and FRED series.
"""

from .base_loader import BaseLoader
from .fred_loader import FREDLoader, clean_observations
from .news_loader import NewsLoader

__all__ = [
    "BaseLoader",
    "FREDLoader",
    "NewsLoader",
    "clean_observations",
]
