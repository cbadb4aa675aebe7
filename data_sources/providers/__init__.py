"""
Providers package - Market data source implementations.
"""

from data_sources.providers.coingecko import CoinGeckoSource
from data_sources.providers.synthetic import SyntheticMarketSource


__all__ = [
    "CoinGeckoSource",
    "SyntheticMarketSource",
]
