"""
Tests for the Seed Registry.

Covers:
- designate / conflict on duplicate active seed
- rank-ordered listing and id helpers
- partial update, deactivate / reactivate / remove
- advisory reads degrade to safe defaults on database errors
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from arena_pairing.models.enums import Gender, SkillLevel
from arena_pairing.models.schemas import SeedDesignationUpdate
from arena_pairing.models.seed_designation import SeedDesignation
from arena_pairing.services.errors import ConflictError, NotFoundError
from arena_pairing.services.seed_registry import SeedRegistry
from tests.helpers import ARENA, STAGE


def _broken_exec(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.fixture
def three_seeds(seeds: SeedRegistry):
    seeds.designate(ARENA, STAGE, "s3", "Seed Three", order=3)
    seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1, level=SkillLevel.advanced, gender=Gender.male)
    seeds.designate(ARENA, STAGE, "s2", "Seed Two", order=2)
    return seeds


class TestDesignate:
    def test_creates_active_designation(self, seeds: SeedRegistry):
        seed = seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1, level=SkillLevel.advanced)

        assert seed.id is not None
        assert seed.active is True
        assert seed.order == 1
        assert seed.participant_level == SkillLevel.advanced
        assert seed.deactivation_reason is None

    def test_duplicate_active_raises_conflict(self, seeds: SeedRegistry):
        seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1)
        with pytest.raises(ConflictError):
            seeds.designate(ARENA, STAGE, "s1", "Seed One", order=2)

    def test_same_participant_in_another_stage_is_fine(self, seeds: SeedRegistry):
        seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1)
        other = seeds.designate(ARENA, "stage-2", "s1", "Seed One", order=1)
        assert other.stage_id == "stage-2"

    def test_designate_again_after_deactivation(self, seeds: SeedRegistry):
        seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1)
        seeds.deactivate(ARENA, STAGE, "s1", reason="injury")

        again = seeds.designate(ARENA, STAGE, "s1", "Seed One", order=4)
        assert again.active is True
        assert [s.order for s in seeds.list_active(ARENA, STAGE)] == [4]

    def test_order_must_be_positive(self, seeds: SeedRegistry):
        with pytest.raises(ValidationError):
            seeds.designate(ARENA, STAGE, "s1", "Seed One", order=0)


class TestReads:
    def test_list_active_is_rank_ordered(self, three_seeds: SeedRegistry):
        assert [s.participant_id for s in three_seeds.list_active(ARENA, STAGE)] == ["s1", "s2", "s3"]

    def test_list_active_empty(self, seeds: SeedRegistry):
        assert seeds.list_active(ARENA, STAGE) == []

    def test_list_active_scoped_to_arena_and_stage(self, three_seeds: SeedRegistry):
        three_seeds.designate("arena-2", STAGE, "x1", "Other", order=1)
        three_seeds.designate(ARENA, "stage-2", "x2", "Other", order=1)
        assert len(three_seeds.list_active(ARENA, STAGE)) == 3

    def test_find_by_participant(self, three_seeds: SeedRegistry):
        found = three_seeds.find_by_participant(ARENA, STAGE, "s2")
        assert found is not None
        assert found.participant_name == "Seed Two"
        assert three_seeds.find_by_participant(ARENA, STAGE, "nobody") is None

    def test_find_ignores_inactive(self, three_seeds: SeedRegistry):
        three_seeds.deactivate(ARENA, STAGE, "s2")
        assert three_seeds.find_by_participant(ARENA, STAGE, "s2") is None

    def test_is_seed(self, three_seeds: SeedRegistry):
        assert three_seeds.is_seed(ARENA, STAGE, "s1") is True
        assert three_seeds.is_seed(ARENA, STAGE, "p9") is False

    def test_filter_seeds_keeps_candidate_order(self, three_seeds: SeedRegistry):
        assert three_seeds.filter_seeds(ARENA, STAGE, ["p1", "s3", "p2", "s1"]) == ["s3", "s1"]

    def test_ids_of_active_seeds(self, three_seeds: SeedRegistry):
        three_seeds.deactivate(ARENA, STAGE, "s1")
        assert three_seeds.ids_of_active_seeds(ARENA, STAGE) == ["s2", "s3"]

    def test_list_all_includes_inactive_after_active(self, three_seeds: SeedRegistry):
        three_seeds.deactivate(ARENA, STAGE, "s1")
        assert [s.participant_id for s in three_seeds.list_all(ARENA, STAGE)] == ["s2", "s3", "s1"]


class TestAdvisoryReadsDegrade:
    def test_is_seed_false_on_error(self, three_seeds: SeedRegistry, monkeypatch):
        monkeypatch.setattr(three_seeds.session, "exec", _broken_exec)
        assert three_seeds.is_seed(ARENA, STAGE, "s1") is False

    def test_filter_seeds_empty_on_error(self, three_seeds: SeedRegistry, monkeypatch):
        monkeypatch.setattr(three_seeds.session, "exec", _broken_exec)
        assert three_seeds.filter_seeds(ARENA, STAGE, ["s1", "s2"]) == []

    def test_ids_empty_on_error(self, three_seeds: SeedRegistry, monkeypatch):
        monkeypatch.setattr(three_seeds.session, "exec", _broken_exec)
        assert three_seeds.ids_of_active_seeds(ARENA, STAGE) == []

    def test_list_active_propagates(self, three_seeds: SeedRegistry, monkeypatch):
        monkeypatch.setattr(three_seeds.session, "exec", _broken_exec)
        with pytest.raises(OperationalError):
            three_seeds.list_active(ARENA, STAGE)


class TestUpdate:
    def test_only_supplied_fields_change(self, three_seeds: SeedRegistry, session: Session):
        seed = three_seeds.find_by_participant(ARENA, STAGE, "s3")
        before = seed.updated_at

        three_seeds.update(seed.id, SeedDesignationUpdate(order=7))

        session.refresh(seed)
        assert seed.order == 7
        assert seed.active is True
        assert seed.deactivation_reason is None
        assert seed.updated_at >= before

    def test_unknown_id(self, seeds: SeedRegistry):
        with pytest.raises(NotFoundError):
            seeds.update(999, SeedDesignationUpdate(order=1))

    def test_reactivating_row_with_active_twin_conflicts(self, seeds: SeedRegistry):
        old = seeds.designate(ARENA, STAGE, "s1", "Seed One", order=1)
        old_id = old.id
        seeds.deactivate(ARENA, STAGE, "s1")
        seeds.designate(ARENA, STAGE, "s1", "Seed One", order=2)

        with pytest.raises(ConflictError):
            seeds.update(old_id, SeedDesignationUpdate(active=True))


class TestDeactivateReactivateRemove:
    def test_deactivate_records_reason(self, three_seeds: SeedRegistry, session: Session):
        three_seeds.deactivate(ARENA, STAGE, "s2", reason="injured")

        row = session.exec(select(SeedDesignation).where(SeedDesignation.participant_id == "s2")).one()
        assert row.active is False
        assert row.deactivation_reason == "injured"
        assert three_seeds.is_seed(ARENA, STAGE, "s2") is False

    def test_deactivate_missing(self, seeds: SeedRegistry):
        with pytest.raises(NotFoundError):
            seeds.deactivate(ARENA, STAGE, "ghost")

    def test_reactivate_clears_reason(self, three_seeds: SeedRegistry, session: Session):
        three_seeds.deactivate(ARENA, STAGE, "s2", reason="injured")
        three_seeds.reactivate(ARENA, STAGE, "s2")

        row = session.exec(select(SeedDesignation).where(SeedDesignation.participant_id == "s2")).one()
        assert row.active is True
        assert row.deactivation_reason is None
        assert three_seeds.ids_of_active_seeds(ARENA, STAGE) == ["s1", "s2", "s3"]

    def test_reactivate_missing(self, seeds: SeedRegistry):
        with pytest.raises(NotFoundError):
            seeds.reactivate(ARENA, STAGE, "ghost")

    def test_remove_is_permanent(self, three_seeds: SeedRegistry, session: Session):
        three_seeds.deactivate(ARENA, STAGE, "s1")
        three_seeds.remove(ARENA, STAGE, "s1")

        rows = session.exec(select(SeedDesignation).where(SeedDesignation.participant_id == "s1")).all()
        assert rows == []
        with pytest.raises(NotFoundError):
            three_seeds.reactivate(ARENA, STAGE, "s1")

    def test_remove_missing(self, seeds: SeedRegistry):
        with pytest.raises(NotFoundError):
            seeds.remove(ARENA, STAGE, "ghost")
