"""
Sentiment providers package - Social platform source implementations.
"""

from .simulated import SimulatedPlatformSource


__all__ = [
    "SimulatedPlatformSource",
]
