"""
Tests for the canonical pair key and the seed-combination arithmetic.
"""

import itertools

import pytest

from arena_pairing.services.pair_history import (
    available_combinations,
    canonical_key,
    combinations_possible,
    normalize,
)


class TestCanonicalKey:
    def test_sorted_and_joined(self):
        assert canonical_key("b", "a") == "a_b"
        assert canonical_key("a", "b") == "a_b"

    def test_symmetric_for_many_ids(self):
        ids = ["p1", "p10", "p2", "Zed", "alice", "0x", "a_b", ""]
        for a, b in itertools.product(ids, repeat=2):
            assert canonical_key(a, b) == canonical_key(b, a)

    def test_lexicographic_not_numeric(self):
        # "p10" < "p2" as strings
        assert canonical_key("p2", "p10") == "p10_p2"

    def test_normalize_is_the_same_function(self):
        assert normalize("y", "x") == canonical_key("x", "y")


class TestCombinationsPossible:
    @pytest.mark.parametrize("n,expected", [(0, 0), (1, 0), (2, 1), (3, 3), (4, 6), (8, 28)])
    def test_values(self, n, expected):
        assert combinations_possible(n) == expected


class TestAvailableCombinations:
    def test_none_realized_keeps_rank_order(self):
        assert available_combinations(["s1", "s2", "s3"], set()) == [("s1", "s2"), ("s1", "s3"), ("s2", "s3")]

    def test_realized_are_skipped_in_either_order(self):
        realized = {canonical_key("s3", "s1")}
        assert available_combinations(["s1", "s2", "s3"], realized) == [("s1", "s2"), ("s2", "s3")]

    def test_all_realized(self):
        seeds = ["s1", "s2", "s3"]
        realized = {canonical_key(a, b) for a, b in itertools.combinations(seeds, 2)}
        assert available_combinations(seeds, realized) == []

    def test_single_seed(self):
        assert available_combinations(["s1"], set()) == []
