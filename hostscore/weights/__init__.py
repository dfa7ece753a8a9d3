from .adjustments import (
    ADJUSTMENTS,
    BEST_CASE_ADJUSTMENTS,
    ScanHistoryError,
    ScoringContext,
    collateral_adjustment,
    interaction_adjustment,
    lifetime_adjustment,
    normalize_inputs,
    price_adjustment,
    storage_remaining_adjustment,
    uptime_adjustment,
    version_adjustment,
)
from .composer import (
    BASE_WEIGHT,
    combine,
    compute_weight,
    conversion_rate,
    run_adjustments,
    weight_fn,
    weight_from_penalty,
)

__all__ = [
    "ADJUSTMENTS",
    "BASE_WEIGHT",
    "BEST_CASE_ADJUSTMENTS",
    "ScanHistoryError",
    "ScoringContext",
    "collateral_adjustment",
    "combine",
    "compute_weight",
    "conversion_rate",
    "interaction_adjustment",
    "lifetime_adjustment",
    "normalize_inputs",
    "price_adjustment",
    "run_adjustments",
    "storage_remaining_adjustment",
    "uptime_adjustment",
    "version_adjustment",
    "weight_fn",
    "weight_from_penalty",
]
