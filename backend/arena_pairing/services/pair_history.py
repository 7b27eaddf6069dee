"""
Pair History Ledger - every pair ever formed in an arena.

Pairs are identified by a canonical key so that (A, B) and (B, A) are the same
pair. Records flagged both_seeds feed the seed-combination statistics that
decide whether seed protection is still worth enforcing.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from arena_pairing.models.pair_history import PairHistoryRecord
from arena_pairing.models.schemas import CombinationStatistics, PairHistoryCreate
from arena_pairing.services.seed_registry import SeedRegistry

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "_"


def canonical_key(participant_a: str, participant_b: str) -> str:
    """
    Order-independent identity of a pair.

    canonical_key("b", "a") == canonical_key("a", "b") == "a_b"
    """
    first, second = sorted((participant_a, participant_b))
    return f"{first}{KEY_SEPARATOR}{second}"


# Name used by callers that think of it as key normalisation
normalize = canonical_key


def combinations_possible(total_seeds: int) -> int:
    """C(n, 2), or 0 when fewer than two seeds exist."""
    if total_seeds < 2:
        return 0
    return total_seeds * (total_seeds - 1) // 2


def available_combinations(seed_ids: Sequence[str], realized: Set[str]) -> List[Tuple[str, str]]:
    """Seed pairs whose key is not in *realized*, i < j over the rank-ordered ids."""
    available: List[Tuple[str, str]] = []
    for i in range(len(seed_ids)):
        for j in range(i + 1, len(seed_ids)):
            if canonical_key(seed_ids[i], seed_ids[j]) not in realized:
                available.append((seed_ids[i], seed_ids[j]))
    return available


def _record_from(dto: PairHistoryCreate, key: str) -> PairHistoryRecord:
    return PairHistoryRecord(
        arena_id=dto.arena_id,
        stage_id=dto.stage_id,
        stage_name=dto.stage_name,
        participant_1_id=dto.participant_1_id,
        participant_1_name=dto.participant_1_name,
        participant_2_id=dto.participant_2_id,
        participant_2_name=dto.participant_2_name,
        canonical_key=key,
        both_seeds=dto.both_seeds,
    )


class PairHistoryLedger:
    def __init__(self, session: Session, seeds: SeedRegistry):
        self.session = session
        self.seeds = seeds

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register(self, dto: PairHistoryCreate) -> PairHistoryRecord:
        """
        Record one pair. Idempotent per (arena, stage, canonical key): a second
        call, in either participant order, returns the first record untouched.
        """
        key = canonical_key(dto.participant_1_id, dto.participant_2_id)

        existing = self._find_by_key(dto.arena_id, dto.stage_id, key)
        if existing:
            return existing

        record = _record_from(dto, key)
        self.session.add(record)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(
                "Failed to register pair history: stage=%s %s + %s",
                dto.stage_id,
                dto.participant_1_id,
                dto.participant_2_id,
            )
            raise
        self.session.refresh(record)

        logger.info(
            "Pair history registered: stage=%s (%s) %s + %s both_seeds=%s",
            dto.stage_id,
            dto.stage_name,
            dto.participant_1_name,
            dto.participant_2_name,
            dto.both_seeds,
        )
        return record

    def register_batch(self, dtos: Sequence[PairHistoryCreate], commit: bool = True) -> List[PairHistoryRecord]:
        """
        Record many pairs in one transaction; one record returned per input.

        All-or-nothing: on any failure the whole session is rolled back (which
        also discards anything else staged on it) and the error re-raised.
        Pairs already recorded for their stage are returned as-is, and
        repeats inside the batch share one record.

        With commit=False the records are only flushed, leaving the commit to
        the caller's unit of work.
        """
        if not dtos:
            return []

        keyed = [(dto, canonical_key(dto.participant_1_id, dto.participant_2_id)) for dto in dtos]

        try:
            known = self._existing_for(keyed)

            results: List[PairHistoryRecord] = []
            created: List[PairHistoryRecord] = []
            for dto, key in keyed:
                scope = (dto.arena_id, dto.stage_id, key)
                record = known.get(scope)
                if record is None:
                    record = _record_from(dto, key)
                    known[scope] = record
                    created.append(record)
                results.append(record)

            self.session.add_all(created)
            if commit:
                self.session.commit()
                for record in created:
                    self.session.refresh(record)
            else:
                self.session.flush()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to register pair history batch of %d", len(dtos))
            raise

        logger.info(
            "Pair history batch registered: stage=%s created=%d reused=%d",
            dtos[0].stage_id,
            len(created),
            len(results) - len(created),
        )
        return results

    def clear_for_stage(self, arena_id: str, stage_id: str) -> int:
        """Delete every record of the stage atomically. Returns the number deleted."""
        records = self.session.exec(
            select(PairHistoryRecord).where(
                PairHistoryRecord.arena_id == arena_id,
                PairHistoryRecord.stage_id == stage_id,
            )
        ).all()

        if not records:
            logger.info("No pair history to clear: arena=%s stage=%s", arena_id, stage_id)
            return 0

        for record in records:
            self.session.delete(record)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to clear pair history: arena=%s stage=%s", arena_id, stage_id)
            raise

        logger.info("Pair history cleared: arena=%s stage=%s removed=%d", arena_id, stage_id, len(records))
        return len(records)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def was_pair_formed(self, arena_id: str, participant_a: str, participant_b: str) -> bool:
        """True if the two were ever paired as seeds anywhere in the arena"""
        key = canonical_key(participant_a, participant_b)
        try:
            found = self.session.exec(
                select(PairHistoryRecord.id)
                .where(
                    PairHistoryRecord.arena_id == arena_id,
                    PairHistoryRecord.canonical_key == key,
                    PairHistoryRecord.both_seeds == True,  # noqa: E712
                )
                .limit(1)
            ).first()
        except SQLAlchemyError:
            logger.exception("Pair history lookup failed for %s", key)
            return False
        return found is not None

    def realized_seed_combinations(self, arena_id: str) -> Set[str]:
        """Canonical keys of every seed-vs-seed pair recorded in the arena"""
        try:
            keys = self.session.exec(
                select(PairHistoryRecord.canonical_key).where(
                    PairHistoryRecord.arena_id == arena_id,
                    PairHistoryRecord.both_seeds == True,  # noqa: E712
                )
            ).all()
        except SQLAlchemyError:
            logger.exception("Could not load realized seed combinations for arena %s", arena_id)
            return set()
        return set(keys)

    def compute_statistics(self, arena_id: str, stage_id: str) -> CombinationStatistics:
        """
        Seed-combination exhaustion for the stage.

        Seeds come from the stage; realized combinations are counted arena-wide
        regardless of stage, so a seed pair that met in an earlier stage counts.
        """
        seed_ids = [s.participant_id for s in self.seeds.list_active(arena_id, stage_id)]
        total = len(seed_ids)

        possible = combinations_possible(total)
        realized_keys = self.realized_seed_combinations(arena_id)
        realized = len(realized_keys)
        remaining = max(0, possible - realized)

        return CombinationStatistics(
            total_seeds=total,
            possible=possible,
            realized=realized,
            remaining=remaining,
            exhausted=remaining == 0,
            available=available_combinations(seed_ids, realized_keys),
        )

    def list_for_participant(self, arena_id: str, participant_id: str) -> List[PairHistoryRecord]:
        """Every record the participant appears in (either slot), newest first"""
        try:
            as_first = self.session.exec(
                select(PairHistoryRecord).where(
                    PairHistoryRecord.arena_id == arena_id,
                    PairHistoryRecord.participant_1_id == participant_id,
                )
            ).all()
            as_second = self.session.exec(
                select(PairHistoryRecord).where(
                    PairHistoryRecord.arena_id == arena_id,
                    PairHistoryRecord.participant_2_id == participant_id,
                )
            ).all()
        except SQLAlchemyError:
            logger.exception("Could not list pair history for participant %s", participant_id)
            return []

        return sorted([*as_first, *as_second], key=lambda r: (r.created_at, r.id), reverse=True)

    def _find_by_key(self, arena_id: str, stage_id: str, key: str) -> Optional[PairHistoryRecord]:
        return self.session.exec(
            select(PairHistoryRecord)
            .where(
                PairHistoryRecord.arena_id == arena_id,
                PairHistoryRecord.stage_id == stage_id,
                PairHistoryRecord.canonical_key == key,
            )
            .limit(1)
        ).first()

    def _existing_for(
        self, keyed: Sequence[Tuple[PairHistoryCreate, str]]
    ) -> Dict[Tuple[str, str, str], PairHistoryRecord]:
        """Already-recorded pairs for the batch, indexed by (arena, stage, key)."""
        keys_by_stage: Dict[Tuple[str, str], Set[str]] = {}
        for dto, key in keyed:
            keys_by_stage.setdefault((dto.arena_id, dto.stage_id), set()).add(key)

        known: Dict[Tuple[str, str, str], PairHistoryRecord] = {}
        for (arena_id, stage_id), keys in keys_by_stage.items():
            rows = self.session.exec(
                select(PairHistoryRecord).where(
                    PairHistoryRecord.arena_id == arena_id,
                    PairHistoryRecord.stage_id == stage_id,
                    PairHistoryRecord.canonical_key.in_(sorted(keys)),
                )
            ).all()
            for row in rows:
                known[(row.arena_id, row.stage_id, row.canonical_key)] = row
        return known
