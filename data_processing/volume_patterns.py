"""
Data Processing - Volume Pattern Analyzer.

============================================================
RESPONSIBILITY
============================================================
Turns an hourly price/volume history into classified steps.

- Compares each step's volume against the trailing average
- Reads volume and price RSI at the same step
- Labels the step accumulation, distribution or neutral
- Summarizes the whole history as TechnicalIndicators

============================================================
DESIGN PRINCIPLES
============================================================
- Pure: no I/O, no clock, no randomness
- Same input always gives the same output
- Ratio guards return 0 instead of raising

============================================================
"""

import logging
from typing import List, Optional, Sequence

from .config import VolumeAnalyzerConfig
from .indicators import macd, rsi, safe_div, trailing_average, volatility
from .models import PatternMetrics, PatternType, TechnicalIndicators, VolumePattern


logger = logging.getLogger(__name__)


NEUTRAL_RSI = 50.0


class VolumePatternAnalyzer:
    """
    Classifies accumulation and distribution in a market history.

    Usage:
        analyzer = VolumePatternAnalyzer()
        patterns = analyzer.analyze(volumes, prices, timestamps)
        indicators = analyzer.technical_indicators(volumes, prices)
    """

    def __init__(self, config: Optional[VolumeAnalyzerConfig] = None) -> None:
        self._config = config or VolumeAnalyzerConfig()

    @property
    def config(self) -> VolumeAnalyzerConfig:
        return self._config

    def analyze(
        self,
        volumes: Sequence[float],
        prices: Sequence[float],
        timestamps: Sequence[int],
    ) -> List[VolumePattern]:
        """
        Classify every step that has a full trailing window.

        Returns one VolumePattern per index in ``[window, len)``, carrying
        the input timestamp for that index.

        Raises:
            ValueError: if the three series differ in length
        """
        if not (len(volumes) == len(prices) == len(timestamps)):
            raise ValueError(
                f"Series length mismatch: volumes={len(volumes)} "
                f"prices={len(prices)} timestamps={len(timestamps)}"
            )

        cfg = self._config
        if len(volumes) <= cfg.window:
            return []

        volume_ma = trailing_average(volumes, cfg.window)
        volume_rsi = rsi(volumes, cfg.rsi_period)
        price_rsi = rsi(prices, cfg.rsi_period)

        patterns: List[VolumePattern] = []
        for i in range(cfg.window, len(volumes)):
            ratio = safe_div(volumes[i], volume_ma[i] or 0.0)
            change = safe_div(prices[i] - prices[i - 1], prices[i - 1])
            v_rsi = volume_rsi[i] if volume_rsi[i] is not None else NEUTRAL_RSI
            p_rsi = price_rsi[i] if price_rsi[i] is not None else NEUTRAL_RSI

            metrics = PatternMetrics(
                volume_ratio=ratio,
                price_change=change,
                volume_rsi=v_rsi,
                price_rsi=p_rsi,
                volume_spike=ratio > cfg.spike_multiplier,
                price_momentum=abs(change) > cfg.momentum_threshold,
            )
            patterns.append(VolumePattern(
                timestamp=timestamps[i],
                volume=volumes[i],
                price=prices[i],
                pattern=self._classify(metrics),
                metrics=metrics,
            ))

        return patterns

    def _classify(self, m: PatternMetrics) -> PatternType:
        cfg = self._config
        if not (m.volume_spike and m.price_momentum and m.volume_rsi > cfg.overbought):
            return PatternType.NEUTRAL

        if m.price_change > 0 and m.price_rsi < cfg.oversold:
            return PatternType.ACCUMULATION
        if m.price_change < 0 and m.price_rsi > cfg.overbought:
            return PatternType.DISTRIBUTION
        return PatternType.NEUTRAL

    def technical_indicators(
        self,
        volumes: Sequence[float],
        prices: Sequence[float],
    ) -> TechnicalIndicators:
        """Summarize a history; empty input yields the defaults."""
        if not prices:
            return TechnicalIndicators()

        cfg = self._config
        price_rsi = rsi(prices, cfg.rsi_period)
        latest_rsi = price_rsi[-1] if price_rsi[-1] is not None else NEUTRAL_RSI

        _, signal_line, histogram = macd(
            prices, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal,
        )

        mean_volume = safe_div(sum(volumes), len(volumes)) if volumes else 0.0
        profile = safe_div(volumes[-1], mean_volume) if volumes else 0.0

        return TechnicalIndicators(
            rsi=latest_rsi,
            macd_signal=signal_line[-1],
            macd_histogram=histogram[-1],
            volume_profile=profile,
            price_volatility=volatility(prices),
        )
