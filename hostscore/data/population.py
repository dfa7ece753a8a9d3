# hostscore/data/population.py
from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from ..models import HostRecord


class IHostPopulation(ABC):
    @abstractmethod
    def active_hosts(self) -> Sequence[HostRecord]:
        """
        Hosts currently eligible for contracts. Implementations must return a
        stable snapshot; scoring iterates it without locking.
        """
        ...


class StaticPopulation(IHostPopulation):
    def __init__(self, hosts: Iterable[HostRecord] = ()) -> None:
        self._hosts: List[HostRecord] = list(hosts)

    def active_hosts(self) -> Sequence[HostRecord]:
        return tuple(self._hosts)

    def __len__(self) -> int:
        return len(self._hosts)
