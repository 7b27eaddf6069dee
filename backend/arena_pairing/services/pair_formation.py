"""
Pair Formation - turns a stage roster into disjoint pairs.

Strategy selection (first match wins):
1. gender_policy=mixed      -> one man + one woman per pair, level cascade
                               (same_level policy: equal levels first,
                               any other policy: diversified levels first)
2. formation_policy=balanced -> diversified skill levels first
3. formation_policy=free     -> plain random draw
4. default (seeded)          -> seeds are paired with non-seeds, unless every
                               seed-vs-seed combination already happened in
                               this arena, in which case the draw is free

Every strategy is a pure function of the roster and the injected shuffle.
PairFormationEngine wraps them with the seed/history reads and the writes:
pairs and their history records are committed in one transaction.

Concurrent formations of the same stage are NOT serialised here; the caller
must allow only one formation per stage at a time.
"""

import logging
from collections import Counter
from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

from sqlmodel import Session

from arena_pairing.database import shuffle_seed_from_env
from arena_pairing.models.enums import FormationPolicy, Gender, GenderPolicy, SkillLevel
from arena_pairing.models.pair import Pair
from arena_pairing.models.schemas import PairHistoryCreate, Participant
from arena_pairing.services.errors import InvalidStateError
from arena_pairing.services.interfaces import PairHistory, PairRepository, SeedLookup
from arena_pairing.services.pair_history import PairHistoryLedger
from arena_pairing.services.pair_store import PairStore
from arena_pairing.services.seed_registry import SeedRegistry
from arena_pairing.utils.shuffle import Shuffle, seeded_shuffle, shuffle

logger = logging.getLogger(__name__)

Draft = Tuple[Participant, Participant]

ADVANCED = SkillLevel.advanced
INTERMEDIATE = SkillLevel.intermediate
BEGINNER = SkillLevel.beginner
LEVELS = (ADVANCED, INTERMEDIATE, BEGINNER)

MALE = Gender.male
FEMALE = Gender.female

STRATEGY_MIXED = "mixed_gender"
STRATEGY_BALANCED = "balanced_level"
STRATEGY_SEEDED = "seed_protected"
STRATEGY_FREE = "free"

# (bucket, bucket) steps; a step with the same bucket twice pairs inside it.
LEVEL_CASCADE = [
    (ADVANCED, BEGINNER),
    (ADVANCED, INTERMEDIATE),
    (INTERMEDIATE, BEGINNER),
    (INTERMEDIATE, INTERMEDIATE),
    (ADVANCED, ADVANCED),
    (BEGINNER, BEGINNER),
]

MIXED_BALANCED_CASCADE = [
    ((ADVANCED, MALE), (BEGINNER, FEMALE)),
    ((ADVANCED, FEMALE), (BEGINNER, MALE)),
    ((ADVANCED, MALE), (INTERMEDIATE, FEMALE)),
    ((ADVANCED, FEMALE), (INTERMEDIATE, MALE)),
    ((INTERMEDIATE, MALE), (BEGINNER, FEMALE)),
    ((INTERMEDIATE, FEMALE), (BEGINNER, MALE)),
    ((INTERMEDIATE, MALE), (INTERMEDIATE, FEMALE)),
    ((ADVANCED, MALE), (ADVANCED, FEMALE)),
    ((BEGINNER, MALE), (BEGINNER, FEMALE)),
]

MIXED_SAME_LEVEL_CASCADE = [
    ((ADVANCED, MALE), (ADVANCED, FEMALE)),
    ((INTERMEDIATE, MALE), (INTERMEDIATE, FEMALE)),
    ((BEGINNER, MALE), (BEGINNER, FEMALE)),
]


# ============================================================================
# Roster validation
# ============================================================================


def validate_roster(participants: Sequence[Participant], gender_policy: GenderPolicy) -> None:
    """
    Structural preconditions, checked before any read or write.

    Raises:
        InvalidStateError: odd count, repeated participant, or (mixed) a
            missing gender / unequal number of men and women
    """
    if len(participants) % 2 != 0:
        raise InvalidStateError(f"Cannot form pairs from an odd number of participants ({len(participants)})")

    counts = Counter(p.participant_id for p in participants)
    repeated = sorted(pid for pid, n in counts.items() if n > 1)
    if repeated:
        raise InvalidStateError(f"Participants listed more than once: {repeated}")

    if gender_policy == GenderPolicy.mixed:
        missing = [p.participant_id for p in participants if p.gender is None]
        if missing:
            raise InvalidStateError(f"Mixed pairing needs a gender for every participant; missing for {missing}")
        men = sum(1 for p in participants if p.gender == MALE)
        women = len(participants) - men
        if men != women:
            raise InvalidStateError(
                f"Mixed pairing needs as many men as women: {men} men and {women} women registered"
            )


# ============================================================================
# Strategies (pure)
# ============================================================================


def pair_sequentially(items: Sequence[Participant]) -> List[Draft]:
    """(0, 1), (2, 3), ... ; a trailing odd element is left out."""
    return [(items[i], items[i + 1]) for i in range(0, len(items) - 1, 2)]


def _run_cascade(buckets: Dict[Hashable, List[Participant]], cascade) -> List[Draft]:
    """Consume buckets step by step; each step pairs until one side runs dry."""
    drafts: List[Draft] = []
    for first, second in cascade:
        if first == second:
            bucket = buckets[first]
            while len(bucket) >= 2:
                drafts.append((bucket.pop(0), bucket.pop(0)))
        else:
            left, right = buckets[first], buckets[second]
            while left and right:
                drafts.append((left.pop(0), right.pop(0)))
    return drafts


def pair_free(participants: Sequence[Participant], shuffle_fn: Shuffle) -> List[Draft]:
    return pair_sequentially(shuffle_fn(participants))


def check_seed_capacity(seed_count: int, normal_count: int) -> None:
    if seed_count > normal_count:
        raise InvalidStateError(
            f"Impossible to protect all seeds: {seed_count} seeds but only {normal_count} "
            f"non-seed participants; at least {seed_count} non-seeds are needed"
        )


def pair_seed_protected(
    seeds: Sequence[Participant],
    normals: Sequence[Participant],
    shuffle_fn: Shuffle,
) -> List[Draft]:
    """
    Every seed gets a non-seed partner; remaining non-seeds pair among themselves.

    Raises:
        InvalidStateError: more seeds than non-seeds
    """
    check_seed_capacity(len(seeds), len(normals))

    shuffled_seeds = shuffle_fn(seeds)
    shuffled_normals = shuffle_fn(normals)

    drafts: List[Draft] = list(zip(shuffled_seeds, shuffled_normals))
    drafts.extend(pair_sequentially(shuffled_normals[len(shuffled_seeds) :]))
    return drafts


def pair_balanced_levels(participants: Sequence[Participant], shuffle_fn: Shuffle) -> List[Draft]:
    """
    Single-gender level balancing: A×B, A×I, I×B, I×I, A×A, B×B, then whatever
    is left (including participants without a level) in order.
    """
    buckets: Dict[Hashable, List[Participant]] = {
        level: shuffle_fn([p for p in participants if p.level == level]) for level in LEVELS
    }
    unleveled = [p for p in participants if p.level is None]

    drafts = _run_cascade(buckets, LEVEL_CASCADE)

    leftovers = [p for level in LEVELS for p in buckets[level]] + unleveled
    drafts.extend(pair_sequentially(leftovers))
    return drafts


def pair_mixed_gender(participants: Sequence[Participant], shuffle_fn: Shuffle, same_level: bool) -> List[Draft]:
    """
    One man and one woman per pair (man in slot 1).

    The roster must already have passed validate_roster with the mixed policy,
    so both sides hold the same number of participants.
    """
    buckets: Dict[Hashable, List[Participant]] = {}
    for gender in (MALE, FEMALE):
        for level in LEVELS:
            buckets[(level, gender)] = shuffle_fn([p for p in participants if p.gender == gender and p.level == level])
        buckets[(None, gender)] = [p for p in participants if p.gender == gender and p.level is None]

    cascade = MIXED_SAME_LEVEL_CASCADE if same_level else MIXED_BALANCED_CASCADE
    drafts = [_man_first(a, b) for a, b in _run_cascade(buckets, cascade)]

    men = [p for level in (*LEVELS, None) for p in buckets[(level, MALE)]]
    women = [p for level in (*LEVELS, None) for p in buckets[(level, FEMALE)]]
    drafts.extend(zip(men, women))
    return drafts


def _man_first(a: Participant, b: Participant) -> Draft:
    return (b, a) if a.gender == FEMALE else (a, b)


# ============================================================================
# Engine
# ============================================================================


def _coerce_policy(value, enum_cls, default):
    if value is None:
        return default
    return enum_cls(value)


class PairFormationEngine:
    def __init__(
        self,
        seeds: SeedLookup,
        history: PairHistory,
        pairs: PairRepository,
        shuffle_fn: Shuffle = shuffle,
    ):
        self.seeds = seeds
        self.history = history
        self.pairs = pairs
        self.shuffle = shuffle_fn

    def form_pairs(
        self,
        stage_id: str,
        stage_name: str,
        arena_id: str,
        participants: Sequence[Participant],
        formation_policy: Optional[Union[FormationPolicy, str]] = None,
        gender_policy: Optional[Union[GenderPolicy, str]] = None,
    ) -> List[Pair]:
        """
        Form, persist and record the pairs of a stage.

        Returns:
            The created Pair rows, len(participants) // 2 of them

        Raises:
            InvalidStateError: roster or seed constraints cannot be met
            sqlalchemy.exc.SQLAlchemyError: persistence failure; nothing is
                left committed for this call
        """
        formation = _coerce_policy(formation_policy, FormationPolicy, FormationPolicy.seeded)
        gender = _coerce_policy(gender_policy, GenderPolicy, GenderPolicy.single)

        validate_roster(participants, gender)
        if not participants:
            return []

        strategy, drafts = self._draft_pairs(stage_id, arena_id, participants, formation, gender)

        created = self.pairs.create_many(
            [self._to_pair(stage_id, arena_id, first, second) for first, second in drafts],
            commit=False,
        )

        seed_ids = set(self.seeds.ids_of_active_seeds(arena_id, stage_id))
        records = [
            PairHistoryCreate(
                arena_id=arena_id,
                stage_id=stage_id,
                stage_name=stage_name,
                participant_1_id=pair.participant_1_id,
                participant_1_name=pair.participant_1_name,
                participant_2_id=pair.participant_2_id,
                participant_2_name=pair.participant_2_name,
                both_seeds=pair.participant_1_id in seed_ids and pair.participant_2_id in seed_ids,
            )
            for pair in created
        ]

        try:
            # Commits the staged pairs together with their history
            self.history.register_batch(records)
        except Exception:
            self.pairs.rollback()
            logger.exception("History registration failed for stage %s; pairs rolled back", stage_id)
            raise

        logger.info(
            "Pairs formed: arena=%s stage=%s strategy=%s pairs=%d seeds_in_roster=%d",
            arena_id,
            stage_id,
            strategy,
            len(created),
            sum(1 for p in participants if p.participant_id in seed_ids),
        )
        return created

    def _draft_pairs(
        self,
        stage_id: str,
        arena_id: str,
        participants: Sequence[Participant],
        formation: FormationPolicy,
        gender: GenderPolicy,
    ) -> Tuple[str, List[Draft]]:
        if gender == GenderPolicy.mixed:
            same_level = formation == FormationPolicy.same_level
            return STRATEGY_MIXED, pair_mixed_gender(participants, self.shuffle, same_level=same_level)

        if formation == FormationPolicy.balanced:
            return STRATEGY_BALANCED, pair_balanced_levels(participants, self.shuffle)

        if formation == FormationPolicy.free:
            return STRATEGY_FREE, pair_free(participants, self.shuffle)

        seed_ids = set(self.seeds.ids_of_active_seeds(arena_id, stage_id))
        seeds = [p for p in participants if p.participant_id in seed_ids]
        normals = [p for p in participants if p.participant_id not in seed_ids]

        check_seed_capacity(len(seeds), len(normals))

        stats = self.history.compute_statistics(arena_id, stage_id)
        if stats.exhausted and len(seeds) >= 2:
            logger.warning(
                "All %d seed combinations already played in arena %s; forming stage %s freely",
                stats.possible,
                arena_id,
                stage_id,
            )
            return STRATEGY_FREE, pair_free(participants, self.shuffle)

        return STRATEGY_SEEDED, pair_seed_protected(seeds, normals, self.shuffle)

    @staticmethod
    def _to_pair(stage_id: str, arena_id: str, first: Participant, second: Participant) -> Pair:
        return Pair(
            arena_id=arena_id,
            stage_id=stage_id,
            participant_1_id=first.participant_id,
            participant_1_name=first.name,
            participant_1_level=first.level,
            participant_1_gender=first.gender,
            participant_2_id=second.participant_id,
            participant_2_name=second.name,
            participant_2_level=second.level,
            participant_2_gender=second.gender,
        )

    # ------------------------------------------------------------------
    # Pass-through operations
    # ------------------------------------------------------------------

    def find_by_stage(self, stage_id: str, arena_id: str) -> List[Pair]:
        return self.pairs.find_by_stage(stage_id, arena_id)

    def find_by_group(self, group_id: str) -> List[Pair]:
        return self.pairs.find_by_group(group_id)

    def find_by_participant(self, stage_id: str, participant_id: str) -> Optional[Pair]:
        return self.pairs.find_by_participant(stage_id, participant_id)

    def mark_classified(self, pair_id: int, classified: bool) -> None:
        self.pairs.mark_classified(pair_id, classified)

    def mark_classified_bulk(self, pair_ids: Sequence[int], classified: bool) -> None:
        self.pairs.mark_classified_bulk(pair_ids, classified)

    def delete_all_for_stage(self, stage_id: str, arena_id: str) -> int:
        return self.pairs.delete_all_for_stage(stage_id, arena_id)


def build_pair_formation_engine(session: Session, shuffle_fn: Optional[Shuffle] = None) -> PairFormationEngine:
    """
    Wire the default SQLModel-backed collaborators over one session.

    Sharing the session is what makes pair creation and history registration
    a single transaction.
    """
    if shuffle_fn is None:
        env_seed = shuffle_seed_from_env()
        shuffle_fn = seeded_shuffle(env_seed) if env_seed is not None else shuffle

    seeds = SeedRegistry(session)
    return PairFormationEngine(
        seeds=seeds,
        history=PairHistoryLedger(session, seeds),
        pairs=PairStore(session),
        shuffle_fn=shuffle_fn,
    )
