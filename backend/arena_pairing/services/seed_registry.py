"""
Seed Registry - protected top players ("seeds") per stage.

Mutating operations commit and propagate every error. The advisory reads
(is_seed, filter_seeds, ids_of_active_seeds) degrade to a safe default when
the database is unavailable, since they only steer UI affordances and the
seed/normal split.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from arena_pairing.models.enums import Gender, SkillLevel
from arena_pairing.models.schemas import SeedDesignationCreate, SeedDesignationUpdate
from arena_pairing.models.seed_designation import SeedDesignation
from arena_pairing.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SeedRegistry:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def designate(
        self,
        arena_id: str,
        stage_id: str,
        participant_id: str,
        participant_name: str,
        order: int,
        level: Optional[SkillLevel] = None,
        gender: Optional[Gender] = None,
    ) -> SeedDesignation:
        """
        Flag a participant as seed of a stage.

        Raises:
            ConflictError: the participant already has an active designation
            pydantic.ValidationError: order < 1 or empty ids
        """
        dto = SeedDesignationCreate(
            arena_id=arena_id,
            stage_id=stage_id,
            participant_id=participant_id,
            participant_name=participant_name,
            participant_level=level,
            participant_gender=gender,
            order=order,
        )

        existing = self.find_by_participant(arena_id, stage_id, participant_id)
        if existing:
            raise ConflictError(f"Participant {participant_id} is already a seed of stage {stage_id}")

        seed = SeedDesignation(**dto.model_dump(), active=True)
        self.session.add(seed)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent designation (partial unique index)
            self.session.rollback()
            raise ConflictError(f"Participant {participant_id} is already a seed of stage {stage_id}") from exc
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to designate seed %s in stage %s", participant_id, stage_id)
            raise
        self.session.refresh(seed)

        logger.info("Seed designated: stage=%s participant=%s order=%d", stage_id, participant_id, seed.order)
        return seed

    def update(self, seed_id: int, changes: SeedDesignationUpdate) -> None:
        """Write only the fields explicitly set on *changes*, plus updated_at."""
        seed = self.session.get(SeedDesignation, seed_id)
        if not seed:
            raise NotFoundError(f"Seed designation {seed_id} not found")

        values = changes.model_dump(exclude_unset=True)
        if values.get("active") and not seed.active:
            other = self.find_by_participant(seed.arena_id, seed.stage_id, seed.participant_id)
            if other and other.id != seed.id:
                raise ConflictError(
                    f"Participant {seed.participant_id} already has an active seed designation in stage {seed.stage_id}"
                )

        for field, value in values.items():
            setattr(seed, field, value)
        seed.updated_at = _now()

        self.session.add(seed)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to update seed designation %s", seed_id)
            raise

    def deactivate(self, arena_id: str, stage_id: str, participant_id: str, reason: Optional[str] = None) -> None:
        seed = self._find_any(arena_id, stage_id, participant_id)
        if not seed:
            raise NotFoundError(f"Seed designation not found for participant {participant_id}")

        self.update(seed.id, SeedDesignationUpdate(active=False, deactivation_reason=reason))
        logger.info("Seed deactivated: stage=%s participant=%s reason=%s", stage_id, participant_id, reason)

    def reactivate(self, arena_id: str, stage_id: str, participant_id: str) -> None:
        seed = self._find_any(arena_id, stage_id, participant_id)
        if not seed:
            raise NotFoundError(f"Seed designation not found for participant {participant_id}")

        self.update(seed.id, SeedDesignationUpdate(active=True, deactivation_reason=None))
        logger.info("Seed reactivated: stage=%s participant=%s", stage_id, participant_id)

    def remove(self, arena_id: str, stage_id: str, participant_id: str) -> None:
        """Permanently delete every designation (active or not) of the participant in the stage."""
        rows = self.session.exec(
            select(SeedDesignation).where(
                SeedDesignation.arena_id == arena_id,
                SeedDesignation.stage_id == stage_id,
                SeedDesignation.participant_id == participant_id,
            )
        ).all()
        if not rows:
            raise NotFoundError(f"Seed designation not found for participant {participant_id}")

        for row in rows:
            self.session.delete(row)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to remove seed %s from stage %s", participant_id, stage_id)
            raise

        logger.info("Seed removed: stage=%s participant=%s rows=%d", stage_id, participant_id, len(rows))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_participant(self, arena_id: str, stage_id: str, participant_id: str) -> Optional[SeedDesignation]:
        """Active designation of the participant, or None"""
        return self.session.exec(
            select(SeedDesignation)
            .where(
                SeedDesignation.arena_id == arena_id,
                SeedDesignation.stage_id == stage_id,
                SeedDesignation.participant_id == participant_id,
                SeedDesignation.active == True,  # noqa: E712
            )
            .limit(1)
        ).first()

    def list_active(self, arena_id: str, stage_id: str) -> List[SeedDesignation]:
        """Active seeds of the stage, strongest first"""
        return list(
            self.session.exec(
                select(SeedDesignation)
                .where(
                    SeedDesignation.arena_id == arena_id,
                    SeedDesignation.stage_id == stage_id,
                    SeedDesignation.active == True,  # noqa: E712
                )
                .order_by(SeedDesignation.order, SeedDesignation.id)
            ).all()
        )

    def list_all(self, arena_id: str, stage_id: str) -> List[SeedDesignation]:
        """Active and deactivated designations; active first, then by rank"""
        return list(
            self.session.exec(
                select(SeedDesignation)
                .where(
                    SeedDesignation.arena_id == arena_id,
                    SeedDesignation.stage_id == stage_id,
                )
                .order_by(SeedDesignation.active.desc(), SeedDesignation.order, SeedDesignation.id)
            ).all()
        )

    def is_seed(self, arena_id: str, stage_id: str, participant_id: str) -> bool:
        try:
            return self.find_by_participant(arena_id, stage_id, participant_id) is not None
        except SQLAlchemyError:
            logger.exception("Seed lookup failed for participant %s, assuming not a seed", participant_id)
            return False

    def filter_seeds(self, arena_id: str, stage_id: str, candidate_ids: Sequence[str]) -> List[str]:
        """Subset of *candidate_ids* that are active seeds, input order preserved"""
        try:
            seed_ids = {s.participant_id for s in self.list_active(arena_id, stage_id)}
        except SQLAlchemyError:
            logger.exception("Seed filtering failed for stage %s", stage_id)
            return []
        return [pid for pid in candidate_ids if pid in seed_ids]

    def ids_of_active_seeds(self, arena_id: str, stage_id: str) -> List[str]:
        """Participant ids of the active seeds in rank order"""
        try:
            return [s.participant_id for s in self.list_active(arena_id, stage_id)]
        except SQLAlchemyError:
            logger.exception("Could not load seed ids for stage %s", stage_id)
            return []

    def _find_any(self, arena_id: str, stage_id: str, participant_id: str) -> Optional[SeedDesignation]:
        """Designation regardless of status; the active one wins, then the most recently touched."""
        return self.session.exec(
            select(SeedDesignation)
            .where(
                SeedDesignation.arena_id == arena_id,
                SeedDesignation.stage_id == stage_id,
                SeedDesignation.participant_id == participant_id,
            )
            .order_by(SeedDesignation.active.desc(), SeedDesignation.updated_at.desc(), SeedDesignation.id.desc())
            .limit(1)
        ).first()
