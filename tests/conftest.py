# tests/conftest.py
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure project root (the directory that contains 'hostscore') is on sys.path
ROOT = Path(__file__).resolve().parent.parent  # one level up from tests/
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hostscore.core.config import clear_config_cache  # noqa: E402
from hostscore.core.currency import Currency, siacoins  # noqa: E402
from hostscore.models import Allowance, HostRecord, HostScan, UsageGuidelines  # noqa: E402
from hostscore.weights.adjustments import ScoringContext  # noqa: E402

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Roughly 200 SC/TB/month collateral and 100 SC/TB/month storage, per byte per block.
TYPICAL_COLLATERAL = Currency(46_000_000_000)
TYPICAL_STORAGE_PRICE = Currency(23_000_000_000)


def _scans(*outcomes, step=timedelta(hours=1)):
    return tuple(HostScan(timestamp=T0 + i * step, success=ok) for i, ok in enumerate(outcomes))


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for var in ("HOSTSCORE_CONFIG", "HOSTSCORE_BUILD", "HOSTSCORE_STRICT"):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def allowance():
    return Allowance(funds=siacoins(500), host_count=50, period=12096)


@pytest.fixture
def ctx(allowance):
    return ScoringContext(
        allowance=allowance,
        guidelines=UsageGuidelines(),
        block_height=30000,
        required_storage=20_000_000_000,
    )


@pytest.fixture
def make_host():
    def _make(**overrides):
        data = dict(
            public_key="ed25519:good",
            collateral=TYPICAL_COLLATERAL,
            max_collateral=siacoins(1000),
            contract_price=siacoins(3),
            storage_price=TYPICAL_STORAGE_PRICE,
            upload_bandwidth_price=Currency(25_000_000_000_000),
            download_bandwidth_price=Currency(50_000_000_000_000),
            remaining_storage=10 * 10 ** 12,
            version="1.4.0",
            first_seen_height=10000,
            historic_successful_interactions=50,
            historic_failed_interactions=0,
            scan_history=_scans(*([True] * 10)),
        )
        data.update(overrides)
        return HostRecord(**data)

    return _make


@pytest.fixture
def make_scans():
    return _scans
