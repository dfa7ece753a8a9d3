from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from .breakdown import estimate_score as _estimate_score
from .breakdown import score_breakdown as _score_breakdown
from .core.config import ScoringSettings, load_settings
from .core.currency import Currency
from .data.population import IHostPopulation, StaticPopulation
from .models import Allowance, HostRecord, ScoreBreakdown, UsageGuidelines
from .weights.adjustments import ScoringContext
from .weights.composer import WeightFunc, compute_weight, weight_fn

log = logging.getLogger(__name__)


class HostScorer:
    """
    Scores hosts against an allowance and a block height.

    Every scoring method takes its context explicitly. `set_context` caches
    one allowance/height pair for `current_score_breakdown`; that cache is the
    only mutable state and is guarded by a single lock.
    """

    def __init__(
        self,
        population: Optional[IHostPopulation] = None,
        *,
        guidelines: Optional[UsageGuidelines] = None,
        settings: Optional[ScoringSettings] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.population = population or StaticPopulation()
        self.guidelines = guidelines or self.settings.usage_guidelines
        self._lock = threading.Lock()
        self._allowance: Optional[Allowance] = None
        self._block_height: Optional[int] = None

    # ------------------ context ------------------

    def context(self, allowance: Allowance, block_height: int = 0) -> ScoringContext:
        return ScoringContext(
            allowance=allowance,
            guidelines=self.guidelines,
            block_height=block_height,
            required_storage=self.settings.required_storage_bytes,
            strict=self.settings.strict_scan_history,
        )

    def set_context(self, allowance: Allowance, block_height: int) -> None:
        with self._lock:
            self._allowance = allowance
            self._block_height = block_height
        log.info(
            "Scoring context updated height=%s hosts=%s period=%s",
            block_height,
            allowance.host_count,
            allowance.period,
        )

    def _resolve_height(self, block_height: Optional[int]) -> int:
        if block_height is not None:
            return block_height
        with self._lock:
            return self._block_height or 0

    # ------------------ scoring ------------------

    def weight_fn(self, allowance: Allowance, block_height: Optional[int] = None) -> WeightFunc:
        return weight_fn(self.context(allowance, self._resolve_height(block_height)))

    def compute_weight(
        self,
        entry: HostRecord,
        allowance: Allowance,
        block_height: Optional[int] = None,
    ) -> Currency:
        return compute_weight(entry, self.context(allowance, self._resolve_height(block_height)))

    def population_scores(self, ctx: ScoringContext) -> List[Currency]:
        return [compute_weight(h, ctx) for h in self.population.active_hosts()]

    def estimate_score(
        self,
        entry: HostRecord,
        allowance: Allowance,
        block_height: Optional[int] = None,
    ) -> ScoreBreakdown:
        """
        Best-case breakdown: age and uptime are assumed ideal. The population
        used for the conversion rate is scored at `block_height`, falling
        back to the cached height.
        """
        ctx = self.context(allowance, self._resolve_height(block_height))
        return _estimate_score(entry, ctx, self.population_scores(ctx))

    def score_breakdown(
        self,
        entry: HostRecord,
        allowance: Allowance,
        block_height: int,
    ) -> ScoreBreakdown:
        ctx = self.context(allowance, block_height)
        return _score_breakdown(entry, ctx, self.population_scores(ctx))

    def current_score_breakdown(self, entry: HostRecord) -> ScoreBreakdown:
        with self._lock:
            if self._allowance is None or self._block_height is None:
                raise RuntimeError("HostScorer has no current context; call set_context() first")
            return self.score_breakdown(entry, self._allowance, self._block_height)

    def rank(
        self,
        allowance: Allowance,
        block_height: Optional[int] = None,
    ) -> List[Tuple[HostRecord, Currency]]:
        """
        Active hosts paired with their weight, heaviest first.
        """
        fn = self.weight_fn(allowance, block_height)
        scored = [(h, fn(h)) for h in self.population.active_hosts()]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored
