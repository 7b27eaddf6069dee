"""
Capability interfaces the formation engine depends on.

The engine is wired against these protocols, not the concrete SQLModel-backed
services, so tests can hand it fakes and alternative seeding policies can be
plugged in later.
"""

from typing import Iterable, List, Optional, Protocol, Sequence

from arena_pairing.models.pair import Pair
from arena_pairing.models.pair_history import PairHistoryRecord
from arena_pairing.models.schemas import CombinationStatistics, PairHistoryCreate


class SeedLookup(Protocol):
    def ids_of_active_seeds(self, arena_id: str, stage_id: str) -> List[str]: ...


class PairHistory(Protocol):
    def compute_statistics(self, arena_id: str, stage_id: str) -> CombinationStatistics: ...

    def register_batch(self, dtos: Sequence[PairHistoryCreate], commit: bool = True) -> List[PairHistoryRecord]: ...


class PairWriter(Protocol):
    def create_many(self, pairs: Iterable[Pair], commit: bool = True) -> List[Pair]: ...

    def rollback(self) -> None: ...


class PairRepository(PairWriter, Protocol):
    """Writer plus the pass-through operations the controller layer reaches via the engine"""

    def find_by_stage(self, stage_id: str, arena_id: str) -> List[Pair]: ...

    def find_by_group(self, group_id: str) -> List[Pair]: ...

    def find_by_participant(self, stage_id: str, participant_id: str) -> Optional[Pair]: ...

    def mark_classified(self, pair_id: int, classified: bool) -> None: ...

    def mark_classified_bulk(self, pair_ids: Sequence[int], classified: bool) -> None: ...

    def delete_all_for_stage(self, stage_id: str, arena_id: str) -> int: ...
