from dataclasses import replace

import pytest

from hostscore.core.currency import Currency
from hostscore.models import Allowance
from hostscore.weights.adjustments import ADJUSTMENTS
from hostscore.weights.composer import (
    BASE_WEIGHT,
    combine,
    compute_weight,
    conversion_rate,
    run_adjustments,
    weight_fn,
    weight_from_penalty,
)


def test_combine_multiplies():
    assert combine([]) == 1.0
    assert combine([0.5, 4.0, 0.25]) == pytest.approx(0.5)


def test_weight_from_penalty_scales_base():
    assert weight_from_penalty(1.0) == BASE_WEIGHT
    assert weight_from_penalty(0.5) == BASE_WEIGHT.div64(2)


@pytest.mark.parametrize("penalty", [0.0, 5e-324, 1e-200])
def test_weight_from_penalty_never_zero(penalty):
    assert weight_from_penalty(penalty) == Currency(1)


def test_compute_weight_matches_product_of_adjustments(make_host, ctx):
    host = make_host()
    values = run_adjustments(host, ctx)
    assert set(values) == {name for name, _ in ADJUSTMENTS}
    assert compute_weight(host, ctx) == BASE_WEIGHT.mul_float(combine(values.values()))


def test_worst_case_host_still_has_weight(make_host, make_scans, ctx):
    host = make_host(
        version="1.0.0",
        collateral=Currency(0),
        max_collateral=Currency(0),
        remaining_storage=0,
        historic_successful_interactions=0,
        historic_failed_interactions=10 ** 6,
        first_seen_height=ctx.block_height,
        scan_history=make_scans(False, False),
    )
    weight = compute_weight(host, ctx)
    assert not weight.is_zero()
    assert weight == Currency(1)


def test_compute_weight_total_for_degenerate_allowance(make_host, ctx):
    weight = compute_weight(make_host(), replace(ctx, allowance=Allowance()))
    assert not weight.is_zero()


def test_compute_weight_is_deterministic(make_host, ctx):
    fn = weight_fn(ctx)
    host = make_host()
    assert fn(host) == fn(host) == compute_weight(host, ctx)


def test_reliable_host_outranks_unreliable_one(make_host, ctx):
    reliable = make_host(
        first_seen_height=ctx.block_height - 20000,
        historic_successful_interactions=50,
        historic_failed_interactions=0,
    )
    flaky = make_host(
        first_seen_height=ctx.block_height - 20000,
        historic_successful_interactions=0,
        historic_failed_interactions=50,
    )
    assert compute_weight(reliable, ctx) > compute_weight(flaky, ctx) > Currency(1)


def test_conversion_rate_single_host_is_fifty():
    score = Currency(123456789 * 10 ** 60)
    assert conversion_rate(score, [score]) == 50.0


def test_conversion_rate_shares_population():
    scores = [Currency(10), Currency(10), Currency(20)]
    assert conversion_rate(Currency(10), scores) == pytest.approx(12.5)
    assert conversion_rate(Currency(20), scores) == pytest.approx(25.0)


def test_conversion_rate_caps_and_handles_empty_population():
    assert conversion_rate(Currency(10), []) == 100.0
    assert conversion_rate(Currency(0), []) == 0.0
    assert conversion_rate(Currency(10 ** 90), [Currency(1)]) == 100.0


def test_conversion_rate_huge_values_do_not_overflow():
    big = Currency(10 ** 400)
    assert conversion_rate(big, [big, big, big, big]) == pytest.approx(12.5)
