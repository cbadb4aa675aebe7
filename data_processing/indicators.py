"""
Data Processing - Indicator Maths.

============================================================
RESPONSIBILITY
============================================================
Pure numeric helpers over plain float sequences.

- Trailing simple moving average
- Relative strength index with a zero-loss guard
- Exponential moving average and MACD
- Return volatility

Every function returns a list aligned to its input index so
callers can read ``series[i]`` for the value at step ``i``.
Warm-up positions hold ``None``.

============================================================
"""

import math
from typing import List, Optional, Sequence, Tuple


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for zero or non-finite results."""
    if not denominator:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


def trailing_average(data: Sequence[float], window: int) -> List[Optional[float]]:
    """
    Mean of the ``window`` points strictly before each index.

    ``result[i]`` averages ``data[i - window:i]``; indices below ``window``
    have no average.
    """
    if window <= 0:
        raise ValueError("window must be positive")

    result: List[Optional[float]] = [None] * len(data)
    if len(data) <= window:
        return result

    running = sum(data[:window])
    for i in range(window, len(data)):
        result[i] = running / window
        running += data[i] - data[i - window]
    return result


def rsi(data: Sequence[float], period: int = 14) -> List[Optional[float]]:
    """
    Relative strength index aligned to each index.

    ``result[i]`` uses the ``period`` deltas ending at ``i``. When the
    average loss is zero it is replaced by 1 so the value stays finite.
    """
    if period <= 0:
        raise ValueError("period must be positive")

    result: List[Optional[float]] = [None] * len(data)
    if len(data) <= period:
        return result

    gains = [0.0] * len(data)
    losses = [0.0] * len(data)
    for i in range(1, len(data)):
        change = data[i] - data[i - 1]
        gains[i] = max(0.0, change)
        losses[i] = max(0.0, -change)

    for i in range(period, len(data)):
        avg_gain = sum(gains[i - period + 1:i + 1]) / period
        avg_loss = sum(losses[i - period + 1:i + 1]) / period
        rs = avg_gain / (avg_loss or 1)
        result[i] = 100 - (100 / (1 + rs))
    return result


def ema(data: Sequence[float], period: int) -> List[float]:
    """Exponential moving average seeded with the first value."""
    if period <= 0:
        raise ValueError("period must be positive")
    if not data:
        return []

    alpha = 2 / (period + 1)
    result = [float(data[0])]
    for value in data[1:]:
        result.append(alpha * value + (1 - alpha) * result[-1])
    return result


def macd(
    data: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Tuple[List[float], List[float], List[float]]:
    """Return (macd_line, signal_line, histogram)."""
    if not data:
        return [], [], []

    fast_ema = ema(data, fast)
    slow_ema = ema(data, slow)
    line = [f - s for f, s in zip(fast_ema, slow_ema)]
    signal_line = ema(line, signal)
    histogram = [m - s for m, s in zip(line, signal_line)]
    return line, signal_line, histogram


def returns(data: Sequence[float]) -> List[float]:
    """Step-over-step fractional changes; zero prior values yield 0."""
    return [safe_div(data[i] - data[i - 1], data[i - 1]) for i in range(1, len(data))]


def volatility(data: Sequence[float]) -> float:
    """Population standard deviation of step returns, in percent."""
    changes = returns(data)
    if not changes:
        return 0.0
    mean = sum(changes) / len(changes)
    variance = sum((c - mean) ** 2 for c in changes) / len(changes)
    return math.sqrt(variance) * 100
