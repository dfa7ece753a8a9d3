from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Tuple

from ..core.currency import SIACOIN_PRECISION, Currency
from ..core.versions import version_cmp
from ..models import Allowance, HostRecord, UsageGuidelines

log = logging.getLogger(__name__)

# Bytes in a terabyte times blocks in a month.
TB_MONTH = 4032 * 10 ** 12

# Divisor that shrinks raw per-byte prices to small integers before they are
# converted to floats.
PRICE_DIV_NORMALIZATION = Currency(SIACOIN_PRECISION // 100_000 // TB_MONTH)

# Applied to the price when it is small relative to the allowance; cheap
# hosts do not save meaningful money.
PRICE_EXPONENT_SMALL = 1.5
# Applied to the price/cutoff ratio once the price is significant.
PRICE_EXPONENT_LARGE = 5.0

# One more than the large price exponent so scarce collateral outweighs price.
COLLATERAL_EXPONENT_SMALL = PRICE_EXPONENT_LARGE + 1
# Sublinear, large collateral is not over-rewarded.
COLLATERAL_EXPONENT_LARGE = 0.5

# Prior given to every host: 30 successes, 1 failure.
INTERACTION_PRIOR_SUCCESSES = 30
INTERACTION_PRIOR_FAILURES = 1
INTERACTION_EXPONENT = 15

# (age below, divisor) in blocks, applied cumulatively.
LIFETIME_LADDER: Tuple[Tuple[int, float], ...] = (
    (12000, 1.5),
    (6000, 2),
    (4000, 2),
    (2000, 2),
    (1000, 3),
    (576, 3),
    (288, 3),
    (144, 3),
)

# Multiples of the required-storage baseline; each one missed halves the score.
STORAGE_LADDER: Tuple[int, ...] = (200, 150, 100, 80, 40, 20, 15, 10, 5, 3, 2, 1)

# (minimum version, multiplier) applied when the host reports something older.
VERSION_LADDER: Tuple[Tuple[str, float], ...] = (
    ("1.4.0", 0.99999),
    ("1.3.5", 0.9),
    ("1.3.4", 0.9),
    ("1.3.3", 0.9),
)
HARDFORK_VERSION = "1.3.1"

SMALLEST_NONZERO_FLOAT = math.ulp(0.0)

UPTIME_CAP = 0.98
UPTIME_BONUS = 0.02
UPTIME_ALLOWED_DOWNTIME_PER_SCAN = 0.03
UPTIME_MAX_PENALTY_SPAN = 0.30
UPTIME_EXPONENT_SCALE = 200

DEFAULT_REQUIRED_STORAGE = 20_000_000_000


class ScanHistoryError(RuntimeError):
    """Raised for an unsorted scan history when strict checking is enabled."""


@dataclass(frozen=True)
class ScoringContext:
    """
    Everything a calculator may read besides the host itself.
    """

    allowance: Allowance = field(default_factory=Allowance)
    guidelines: UsageGuidelines = field(default_factory=UsageGuidelines)
    block_height: int = 0
    required_storage: int = DEFAULT_REQUIRED_STORAGE
    strict: bool = False


Adjustment = Callable[[HostRecord, ScoringContext], float]


def normalize_inputs(allowance: Allowance, guidelines: UsageGuidelines) -> Tuple[Allowance, UsageGuidelines]:
    """
    Replace every zero divisor in the allowance and guidelines with 1.
    """
    return allowance.normalized(), guidelines.normalized()


def _normalized_uint64(value: Currency) -> int:
    return max(value.div(PRICE_DIV_NORMALIZATION).uint64(), 1)


def collateral_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    """
    Reward hosts for collateral, heavily penalizing collateral that is
    insignificant next to the allowance.
    """
    allowance, ug = normalize_inputs(ctx.allowance, ctx.guidelines)

    # Keep the expected usage below half of the host's collateral ceiling.
    host_collateral = entry.collateral
    possible_collateral = (
        entry.max_collateral.div64(allowance.period).div64(ug.expected_storage).div64(2)
    )
    if host_collateral < possible_collateral:
        host_collateral = possible_collateral

    # Below the cutoff the amount of money is too small to signal anything.
    # The spend per host, per block, per byte of storage plus bandwidth,
    # leaves 5x of room for the host.
    expected_upload_bandwidth = ug.expected_storage * allowance.period // ug.expected_upload_frequency
    expected_download_bandwidth = (
        ug.expected_storage * allowance.period // ug.expected_download_frequency
        * ug.expected_data_pieces // (ug.expected_data_pieces + ug.expected_parity_pieces)
    )
    expected_bandwidth = expected_upload_bandwidth + expected_download_bandwidth
    cutoff = (
        allowance.funds.div64(allowance.host_count)
        .div64(allowance.period)
        .div64(ug.expected_storage + expected_bandwidth)
        .div64(5)
    )
    if host_collateral < cutoff:
        cutoff = host_collateral

    collateral64 = _normalized_uint64(host_collateral)
    cutoff64 = _normalized_uint64(cutoff)
    ratio = collateral64 / cutoff64

    small_weight = math.pow(cutoff64, COLLATERAL_EXPONENT_SMALL)
    large_weight = math.pow(ratio, COLLATERAL_EXPONENT_LARGE)
    return small_weight * large_weight


def price_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    """
    Penalize hosts for their total price expressed in storage-price terms.
    """
    allowance, ug = normalize_inputs(ctx.allowance, ctx.guidelines)

    # Contract and bandwidth prices are rescaled so they are comparable to the
    # per-byte-per-block storage price.
    adjusted_contract = entry.contract_price.div64(allowance.period).div64(ug.expected_storage)
    adjusted_upload = entry.upload_bandwidth_price.div64(ug.expected_upload_frequency)
    adjusted_download = (
        entry.download_bandwidth_price.div64(ug.expected_download_frequency)
        .mul64(ug.expected_data_pieces)
        .div64(ug.expected_data_pieces + ug.expected_parity_pieces)
    )
    network_fee = (
        adjusted_contract.add(adjusted_upload).add(adjusted_download).add(entry.collateral).mul_tax()
    )
    total_price = (
        entry.storage_price.add(adjusted_contract)
        .add(adjusted_upload)
        .add(adjusted_download)
        .add(network_fee)
    )

    expected_upload_bandwidth = ug.expected_storage * allowance.period // ug.expected_upload_frequency
    expected_download_bandwidth = (
        ug.expected_storage * allowance.period // ug.expected_download_frequency
        * ug.expected_data_pieces // (ug.expected_data_pieces + ug.expected_parity_pieces)
    )
    expected_bandwidth = expected_upload_bandwidth + expected_download_bandwidth
    cutoff = (
        allowance.funds.div64(allowance.host_count)
        .div64(allowance.period)
        .div64(ug.expected_storage + expected_bandwidth)
        .div64(5)
    )
    if total_price < cutoff:
        cutoff = total_price

    price64 = _normalized_uint64(total_price)
    cutoff64 = _normalized_uint64(cutoff)
    ratio = price64 / cutoff64

    small_weight = math.pow(cutoff64, PRICE_EXPONENT_SMALL)
    large_weight = math.pow(ratio, PRICE_EXPONENT_LARGE)
    return 1 / (small_weight * large_weight)


def interaction_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    # Bad hosts are rarely picked again, so failures accumulate slowly and
    # each one has to count for a lot.
    successes = entry.historic_successful_interactions + INTERACTION_PRIOR_SUCCESSES
    failures = entry.historic_failed_interactions + INTERACTION_PRIOR_FAILURES
    ratio = successes / (successes + failures)
    return math.pow(ratio, INTERACTION_EXPONENT)


def lifetime_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    """
    Discount young hosts. A host first seen above the current block height
    receives no penalty.
    """
    base = 1.0
    if ctx.block_height >= entry.first_seen_height:
        age = ctx.block_height - entry.first_seen_height
        for threshold, divisor in LIFETIME_LADDER:
            if age < threshold:
                base /= divisor
    return base


def uptime_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    """
    Penalize poor uptime. The penalty grows quickly below 95%:

        100% -> 1, 98% -> 1, 95% -> 0.83, 90% -> 0.26,
        85% -> 0.03, 80% -> 0.001, 75% -> 0.00001
    """
    history = entry.scan_history

    # Too few scans for a meaningful ratio.
    if len(history) == 0:
        return 0.25
    if len(history) == 1:
        return 0.75 if history[0].success else 0.25
    if len(history) == 2:
        if history[0].success and history[1].success:
            return 0.85
        if history[0].success or history[1].success:
            return 0.50
        return 0.05

    uptime = entry.historic_uptime
    downtime = entry.historic_downtime
    recent_time = history[0].timestamp
    recent_success = history[0].success
    for scan in history[1:]:
        if recent_time > scan.timestamp:
            if ctx.strict:
                raise ScanHistoryError(
                    f"scan history for {entry.label} is not sorted: "
                    f"{scan.timestamp.isoformat()} follows {recent_time.isoformat()}"
                )
            log.warning(
                "Host entry scan history not sorted (host=%s, %s after %s); skipping scan",
                entry.label,
                scan.timestamp.isoformat(),
                recent_time.isoformat(),
            )
            continue
        if recent_success:
            uptime += scan.timestamp - recent_time
        else:
            downtime += scan.timestamp - recent_time
        recent_time = scan.timestamp
        recent_success = scan.success

    total = uptime + downtime
    if not total:
        return 0.001

    # 98% and 100% uptime are worth the same.
    uptime_ratio = min(uptime / total, UPTIME_CAP)
    uptime_ratio += UPTIME_BONUS

    # Fewer scans buy more benefit of the doubt.
    allowed_downtime = UPTIME_ALLOWED_DOWNTIME_PER_SCAN * len(history)
    if uptime_ratio < 1 - allowed_downtime:
        uptime_ratio = 1 - allowed_downtime

    exponent = UPTIME_EXPONENT_SCALE * min(1 - uptime_ratio, UPTIME_MAX_PENALTY_SPAN)
    return math.pow(uptime_ratio, exponent)


def storage_remaining_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    base = 1.0
    for multiple in STORAGE_LADDER:
        if entry.remaining_storage < multiple * ctx.required_storage:
            base /= 2
    return base


def version_adjustment(entry: HostRecord, ctx: ScoringContext) -> float:
    base = 1.0
    for milestone, penalty in VERSION_LADDER:
        if version_cmp(entry.version, milestone) < 0:
            base *= penalty
    # Pre-hardfork hosts are effectively excluded.
    if version_cmp(entry.version, HARDFORK_VERSION) < 0:
        base = SMALLEST_NONZERO_FLOAT
    return base


ADJUSTMENTS: Tuple[Tuple[str, Adjustment], ...] = (
    ("collateral", collateral_adjustment),
    ("interaction", interaction_adjustment),
    ("age", lifetime_adjustment),
    ("price", price_adjustment),
    ("storage_remaining", storage_remaining_adjustment),
    ("uptime", uptime_adjustment),
    ("version", version_adjustment),
)

# Factors that do not depend on observed behaviour.
BEST_CASE_ADJUSTMENTS: Tuple[Tuple[str, Adjustment], ...] = tuple(
    (name, fn) for name, fn in ADJUSTMENTS if name in {"collateral", "price", "storage_remaining", "version"}
)
