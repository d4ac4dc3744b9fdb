"""
Utility Modules

Configuration loading and caching utilities.
"""

from smartmatch.utils.config import load_config, Config
from smartmatch.utils.cache import RecommendationCache

__all__ = ["load_config", "Config", "RecommendationCache"]
