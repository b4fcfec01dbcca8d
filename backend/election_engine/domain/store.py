from __future__ import annotations

import abc
from typing import Dict, List, Optional

from election_engine.domain.election import Election


class ElectionStore(abc.ABC):
    """Storage interface behind the registry.

    ``active_ids`` carries no ordering guarantee; ``all_ids`` is in creation
    order.
    """

    @abc.abstractmethod
    def next_id(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, election_id: int) -> Optional[Election]:
        raise NotImplementedError

    @abc.abstractmethod
    def add(self, election: Election) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def deactivate(self, election_id: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def active_ids(self) -> List[int]:
        raise NotImplementedError

    @abc.abstractmethod
    def all_ids(self) -> List[int]:
        raise NotImplementedError


class InMemoryElectionStore(ElectionStore):
    """In-memory default store, lives as long as the process."""

    def __init__(self) -> None:
        self._next_election_id = 0
        self._elections: Dict[int, Election] = {}
        self._active_ids: List[int] = []
        self._active_index: Dict[int, int] = {}
        self._all_ids: List[int] = []

    def next_id(self) -> int:
        self._next_election_id += 1
        return self._next_election_id

    def get(self, election_id: int) -> Optional[Election]:
        return self._elections.get(election_id)

    def add(self, election: Election) -> None:
        self._elections[election.id] = election
        self._all_ids.append(election.id)
        if election.is_active:
            self._active_index[election.id] = len(self._active_ids)
            self._active_ids.append(election.id)

    def deactivate(self, election_id: int) -> None:
        index = self._active_index.pop(election_id, None)
        if index is None:
            return
        # Swap with last, then truncate.
        last = self._active_ids.pop()
        if last != election_id:
            self._active_ids[index] = last
            self._active_index[last] = index

    def active_ids(self) -> List[int]:
        return list(self._active_ids)

    def all_ids(self) -> List[int]:
        return list(self._all_ids)


__all__ = ["ElectionStore", "InMemoryElectionStore"]
