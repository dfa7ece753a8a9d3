from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field

from ..models import Allowance, HostRecord, UsageGuidelines


class Scenario(BaseModel):
    """
    A scoring input file: the chain height, the renter's allowance, an
    optional workload and the hosts to score.

    JSON is accepted as well since it is a subset of YAML.
    """

    block_height: int = Field(default=0, ge=0)
    allowance: Allowance
    usage_guidelines: Optional[UsageGuidelines] = None
    hosts: List[HostRecord] = Field(default_factory=list)

    def find_host(self, key: str) -> HostRecord:
        """
        Look a host up by public key, net address, or 1-based position.
        """
        for host in self.hosts:
            if key in (host.public_key, host.net_address):
                return host
        if key.isdigit():
            idx = int(key)
            if 1 <= idx <= len(self.hosts):
                return self.hosts[idx - 1]
        raise KeyError(f"Host {key!r} not found in scenario")


def load_scenario(path: Union[str, Path]) -> Scenario:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return Scenario.model_validate(raw)
