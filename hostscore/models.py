# hostscore/models.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core.currency import ZERO, Currency


class HostScan(BaseModel):
    """
    One probe of a host: when it happened and whether the host answered.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    success: bool

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are UTC so mixed histories stay comparable.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class HostRecord(BaseModel):
    """
    Advertised settings and observed history for a single host.

    Prices are per byte (storage is per byte per block), the contract price is
    a flat fee. Interaction counters are floats because callers decay them
    over time.
    """

    model_config = ConfigDict(frozen=True)

    public_key: Optional[str] = None
    net_address: Optional[str] = None

    collateral: Currency = ZERO
    max_collateral: Currency = ZERO
    contract_price: Currency = ZERO
    storage_price: Currency = ZERO
    upload_bandwidth_price: Currency = ZERO
    download_bandwidth_price: Currency = ZERO

    remaining_storage: int = Field(default=0, ge=0)
    version: str = ""
    first_seen_height: int = Field(default=0, ge=0)

    historic_successful_interactions: float = Field(default=0.0, ge=0)
    historic_failed_interactions: float = Field(default=0.0, ge=0)
    historic_uptime: timedelta = timedelta(0)
    historic_downtime: timedelta = timedelta(0)
    scan_history: Tuple[HostScan, ...] = ()

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, v):
        # YAML reads `version: 1.4` as a float.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def label(self) -> str:
        return self.public_key or self.net_address or "<unknown host>"


class Allowance(BaseModel):
    """
    The renter's budget: total funds, how many hosts to spread them over, and
    the contract period in blocks.
    """

    model_config = ConfigDict(frozen=True)

    funds: Currency = ZERO
    host_count: int = Field(default=0, ge=0)
    period: int = Field(default=0, ge=0)

    def normalized(self) -> "Allowance":
        if self.host_count and self.period:
            return self
        return self.model_copy(
            update={
                "host_count": self.host_count or 1,
                "period": self.period or 1,
            }
        )


class UsageGuidelines(BaseModel):
    """
    Expected workload shape.

    Frequencies are the number of blocks between complete re-uploads and
    complete downloads of the stored data. With 25 GB stored and an upload
    frequency of 24 weeks the renter uploads about 1 GB per week.
    """

    model_config = ConfigDict(frozen=True)

    expected_storage: int = Field(default=25_000_000_000, ge=0)
    expected_upload_frequency: int = Field(default=24192, ge=0)
    expected_download_frequency: int = Field(default=12096, ge=0)
    expected_data_pieces: int = Field(default=10, ge=0)
    expected_parity_pieces: int = Field(default=20, ge=0)

    def normalized(self) -> "UsageGuidelines":
        values = self.model_dump()
        if all(values.values()):
            return self
        return self.model_copy(update={k: v or 1 for k, v in values.items()})


class ScoreBreakdown(BaseModel):
    """
    Aggregate score of a host together with each factor that produced it.
    """

    model_config = ConfigDict(frozen=True)

    score: Currency
    conversion_rate: float = Field(ge=0, le=100)

    age_adjustment: float = 1.0
    burn_adjustment: float = 1.0
    collateral_adjustment: float = 1.0
    interaction_adjustment: float = 1.0
    price_adjustment: float = 1.0
    storage_remaining_adjustment: float = 1.0
    uptime_adjustment: float = 1.0
    version_adjustment: float = 1.0
