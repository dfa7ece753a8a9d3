"""hostscore: weighting engine for ranking storage hosts.

Scores combine seven independent adjustments (collateral, price, interaction
history, age, uptime, remaining storage, version) into one currency-scale
weight suitable for proportional host selection.
"""

from __future__ import annotations

from .core.currency import Currency
from .engine import HostScorer
from .models import Allowance, HostRecord, HostScan, ScoreBreakdown, UsageGuidelines

__version__ = "0.1.0"

__all__ = [
    "Allowance",
    "Currency",
    "HostRecord",
    "HostScan",
    "HostScorer",
    "ScoreBreakdown",
    "UsageGuidelines",
]
