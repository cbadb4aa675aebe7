"""
Data Processing - Configuration.
"""

from dataclasses import dataclass
from typing import Dict

from core.exceptions import ConfigurationError


@dataclass
class VolumeAnalyzerConfig:
    """Windows and thresholds for volume pattern classification."""
    window: int = 24                # hours of history in the moving average
    rsi_period: int = 14
    spike_multiplier: float = 2.0   # volume / average
    momentum_threshold: float = 0.05
    overbought: float = 70.0
    oversold: float = 30.0

    # MACD
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9

    def __post_init__(self) -> None:
        for name in ("window", "rsi_period", "macd_fast", "macd_slow", "macd_signal"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    config_key=f"analyzer.{name}",
                    actual_value=value,
                )
        if self.macd_fast >= self.macd_slow:
            raise ConfigurationError(
                "macd_fast must be shorter than macd_slow",
                config_key="analyzer.macd_fast",
                actual_value=self.macd_fast,
            )
        if not 0 <= self.oversold < self.overbought <= 100:
            raise ConfigurationError(
                "RSI bands must satisfy 0 <= oversold < overbought <= 100",
                config_key="analyzer.overbought",
                actual_value=self.overbought,
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "window": self.window,
            "rsi_period": self.rsi_period,
            "spike_multiplier": self.spike_multiplier,
            "momentum_threshold": self.momentum_threshold,
            "overbought": self.overbought,
            "oversold": self.oversold,
            "macd_fast": self.macd_fast,
            "macd_slow": self.macd_slow,
            "macd_signal": self.macd_signal,
        }
