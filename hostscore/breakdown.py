from __future__ import annotations

from typing import Iterable, List

from .core.currency import Currency
from .models import HostRecord, ScoreBreakdown
from .weights.adjustments import ADJUSTMENTS, BEST_CASE_ADJUSTMENTS, ScoringContext
from .weights.composer import combine, conversion_rate, run_adjustments, weight_from_penalty

# Adjustment names mapped onto ScoreBreakdown fields.
_FIELD_NAMES = {
    "age": "age_adjustment",
    "collateral": "collateral_adjustment",
    "interaction": "interaction_adjustment",
    "price": "price_adjustment",
    "storage_remaining": "storage_remaining_adjustment",
    "uptime": "uptime_adjustment",
    "version": "version_adjustment",
}


def _assemble(values: dict, score: Currency, population_scores: Iterable[Currency]) -> ScoreBreakdown:
    fields = {_FIELD_NAMES[name]: value for name, value in values.items()}
    return ScoreBreakdown(
        score=score,
        conversion_rate=conversion_rate(score, population_scores),
        burn_adjustment=1.0,
        **fields,
    )


def estimate_score(
    entry: HostRecord,
    ctx: ScoringContext,
    population_scores: Iterable[Currency],
) -> ScoreBreakdown:
    """
    Best-case score for a host: age, uptime and interaction history are
    assumed perfect, only advertised settings count.
    """
    values = run_adjustments(entry, ctx, BEST_CASE_ADJUSTMENTS)
    score = weight_from_penalty(combine(values.values()))
    return _assemble(values, score, population_scores)


def score_breakdown(
    entry: HostRecord,
    ctx: ScoringContext,
    population_scores: Iterable[Currency],
) -> ScoreBreakdown:
    values = run_adjustments(entry, ctx, ADJUSTMENTS)
    score = weight_from_penalty(combine(values.values()))
    return _assemble(values, score, population_scores)


def format_breakdown(breakdown: ScoreBreakdown, title: str = "") -> str:
    lines: List[str] = []
    if title:
        lines.append(title)
        lines.append("-" * max(len(title), 40))
    lines.append(f"Score:              {breakdown.score.human_string()} ({breakdown.score})")
    lines.append(f"Conversion rate:    {breakdown.conversion_rate:.2f}%")
    rows = [
        ("Age", breakdown.age_adjustment),
        ("Burn", breakdown.burn_adjustment),
        ("Collateral", breakdown.collateral_adjustment),
        ("Interactions", breakdown.interaction_adjustment),
        ("Price", breakdown.price_adjustment),
        ("Storage remaining", breakdown.storage_remaining_adjustment),
        ("Uptime", breakdown.uptime_adjustment),
        ("Version", breakdown.version_adjustment),
    ]
    for label, value in rows:
        lines.append(f"  {label + ':':<18}{value:.6g}")
    return "\n".join(lines)
