"""
Pair Store - persistence of Pair rows for the formation engine and the
downstream group/classification logic.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from arena_pairing.models.pair import Pair
from arena_pairing.services.errors import NotFoundError
from arena_pairing.utils.sql import scalar_int

logger = logging.getLogger(__name__)


class PairStore:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_many(self, pairs: Iterable[Pair], commit: bool = True) -> List[Pair]:
        """
        Persist *pairs*. With commit=False they are flushed (ids assigned) and
        left for the caller's unit of work to commit or roll back.
        """
        pairs = list(pairs)
        if not pairs:
            return []

        self.session.add_all(pairs)
        try:
            if commit:
                self.session.commit()
                for pair in pairs:
                    self.session.refresh(pair)
            else:
                self.session.flush()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to create %d pairs", len(pairs))
            raise
        return pairs

    def rollback(self) -> None:
        self.session.rollback()

    def mark_classified(self, pair_id: int, classified: bool) -> None:
        pair = self.session.get(Pair, pair_id)
        if not pair:
            raise NotFoundError(f"Pair {pair_id} not found")
        pair.classified = classified
        self.session.add(pair)
        self._commit(f"mark pair {pair_id} classified={classified}")

    def mark_classified_bulk(self, pair_ids: Sequence[int], classified: bool) -> None:
        """Flag several pairs in one transaction; unknown ids fail the whole batch."""
        if not pair_ids:
            return
        pairs = self.session.exec(select(Pair).where(Pair.id.in_(list(pair_ids)))).all()
        missing = set(pair_ids) - {p.id for p in pairs}
        if missing:
            raise NotFoundError(f"Pairs not found: {sorted(missing)}")
        for pair in pairs:
            pair.classified = classified
            self.session.add(pair)
        self._commit(f"mark {len(pairs)} pairs classified={classified}")

    def assign_group(self, pair_id: int, group_id: str, group_name: Optional[str] = None) -> None:
        pair = self.session.get(Pair, pair_id)
        if not pair:
            raise NotFoundError(f"Pair {pair_id} not found")
        pair.group_id = group_id
        pair.group_name = group_name
        self.session.add(pair)
        self._commit(f"assign pair {pair_id} to group {group_id}")

    def delete_all_for_stage(self, stage_id: str, arena_id: str) -> int:
        pairs = self.session.exec(select(Pair).where(Pair.stage_id == stage_id, Pair.arena_id == arena_id)).all()
        if not pairs:
            return 0
        for pair in pairs:
            self.session.delete(pair)
        self._commit(f"delete pairs of stage {stage_id}")
        logger.info("Pairs deleted: arena=%s stage=%s removed=%d", arena_id, stage_id, len(pairs))
        return len(pairs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_stage(self, stage_id: str, arena_id: str) -> List[Pair]:
        return list(
            self.session.exec(
                select(Pair).where(Pair.stage_id == stage_id, Pair.arena_id == arena_id).order_by(Pair.id)
            ).all()
        )

    def find_by_group(self, group_id: str) -> List[Pair]:
        return list(self.session.exec(select(Pair).where(Pair.group_id == group_id).order_by(Pair.id)).all())

    def find_by_participant(self, stage_id: str, participant_id: str) -> Optional[Pair]:
        return self.session.exec(
            select(Pair)
            .where(
                Pair.stage_id == stage_id,
                or_(Pair.participant_1_id == participant_id, Pair.participant_2_id == participant_id),
            )
            .limit(1)
        ).first()

    def find_classified(self, stage_id: str, arena_id: str) -> List[Pair]:
        return list(
            self.session.exec(
                select(Pair)
                .where(
                    Pair.stage_id == stage_id,
                    Pair.arena_id == arena_id,
                    Pair.classified == True,  # noqa: E712
                )
                .order_by(Pair.id)
            ).all()
        )

    def count_for_stage(self, stage_id: str, arena_id: str) -> int:
        total = self.session.exec(
            select(func.count()).select_from(Pair).where(Pair.stage_id == stage_id, Pair.arena_id == arena_id)
        ).one()
        return scalar_int(total)

    def _commit(self, what: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to %s", what)
            raise
