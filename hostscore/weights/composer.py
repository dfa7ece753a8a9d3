from __future__ import annotations

import logging
from fractions import Fraction
from typing import Callable, Dict, Iterable, Sequence, Tuple

from ..core.currency import SMALLEST_NONZERO, Currency
from ..models import HostRecord
from .adjustments import ADJUSTMENTS, Adjustment, ScoringContext

log = logging.getLogger(__name__)

# Most weights would otherwise be fractional, so the base is very large.
BASE_WEIGHT = Currency(10 ** 80)

# Share of the population score is scaled by 50 and capped at 100%.
CONVERSION_SCALE = 50
MAX_CONVERSION_RATE = 100.0

WeightFunc = Callable[[HostRecord], Currency]


def run_adjustments(
    entry: HostRecord,
    ctx: ScoringContext,
    adjustments: Sequence[Tuple[str, Adjustment]] = ADJUSTMENTS,
) -> Dict[str, float]:
    return {name: fn(entry, ctx) for name, fn in adjustments}


def combine(values: Iterable[float]) -> float:
    full_penalty = 1.0
    for value in values:
        full_penalty *= value
    return full_penalty


def weight_from_penalty(full_penalty: float) -> Currency:
    """
    Scale the combined adjustment onto BASE_WEIGHT.

    Never returns zero: the selection tree cannot pick zero-weight entries, so
    the smallest non-zero amount is returned instead.
    """
    weight = BASE_WEIGHT.mul_float(full_penalty)
    if weight.is_zero():
        return SMALLEST_NONZERO
    return weight


def compute_weight(entry: HostRecord, ctx: ScoringContext) -> Currency:
    return weight_from_penalty(combine(run_adjustments(entry, ctx).values()))


def weight_fn(ctx: ScoringContext) -> WeightFunc:
    """
    Bind a context, returning the ranking function used by host selection.
    """

    def _weight(entry: HostRecord) -> Currency:
        return compute_weight(entry, ctx)

    return _weight


def conversion_rate(score: Currency, population_scores: Iterable[Currency]) -> float:
    """
    Estimated percentage of contract slots that a host with `score` wins
    against the given population.
    """
    total = Currency(0)
    for s in population_scores:
        total = total.add(s)
    if total.is_zero():
        log.debug("Population score is zero; using 1 as the total")
        total = SMALLEST_NONZERO

    # Exact rational division; the raw values overflow a float.
    rate = float(Fraction(score.mul64(CONVERSION_SCALE).big(), total.big()))
    return min(rate, MAX_CONVERSION_RATE)
