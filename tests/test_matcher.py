"""Tests for the Find Your Legacy matcher."""

import pytest

from academy.legacy.matcher import (
    EmptyCandidateSet,
    Match,
    NormalizedQuery,
    Query,
    clamp,
    find_match,
    normalize_query,
    score,
    snap_to_bucket,
)
from tests.conftest import make_candidate


class TestClamp:
    def test_inside(self):
        assert clamp(25, 6, 60) == 25

    def test_below(self):
        assert clamp(5, 6, 60) == 6

    def test_above(self):
        assert clamp(61, 6, 60) == 60


class TestSnapToBucket:
    def test_rounds_down_to_nearest(self):
        assert snap_to_bucket(172, 150, 205) == 170

    def test_rounds_up_to_nearest(self):
        assert snap_to_bucket(173, 150, 205) == 175

    def test_half_rounds_up_not_to_even(self):
        # round(34.5) == 34 in Python; buckets must still go up
        assert snap_to_bucket(172.5, 150, 205) == 175

    def test_multiple_of_step_unchanged(self):
        assert snap_to_bucket(180, 150, 205) == 180

    def test_clamped_to_floor(self):
        assert snap_to_bucket(140, 150, 205) == 150

    def test_clamped_to_ceiling(self):
        assert snap_to_bucket(225, 150, 205) == 205
        assert snap_to_bucket(220, 150, 205) == 205

    def test_weight_range(self):
        assert snap_to_bucket(35, 45, 115) == 45
        assert snap_to_bucket(140, 45, 115) == 115
        assert snap_to_bucket(68, 45, 115) == 70


class TestNormalizeQuery:
    def test_age_clamped_not_bucketed(self):
        n = normalize_query(Query(age=27, height_cm=180, weight_kg=75))
        assert n.age == 27

    def test_age_floor_is_idempotent(self):
        a = normalize_query(Query(age=5, height_cm=180, weight_kg=75))
        b = normalize_query(Query(age=6, height_cm=180, weight_kg=75))
        assert a == b
        assert a.age == 6

    def test_height_ceiling_is_idempotent(self):
        a = normalize_query(Query(age=25, height_cm=225, weight_kg=75))
        b = normalize_query(Query(age=25, height_cm=220, weight_kg=75))
        assert a.height_cm == b.height_cm == 205

    def test_ui_floor_inputs(self):
        n = normalize_query(Query(age=6, height_cm=140, weight_kg=35))
        assert n == NormalizedQuery(age=6, height_cm=150, weight_kg=45)


class TestScore:
    def test_weights(self):
        c = make_candidate(28, 170, 65)
        n = NormalizedQuery(age=30, height_cm=170, weight_kg=70)
        assert score(c, n) == pytest.approx(6.2)

    def test_zero_for_identical(self):
        c = make_candidate(25, 175, 70)
        assert score(c, NormalizedQuery(age=25, height_cm=175, weight_kg=70)) == 0.0

    def test_strictly_closer_on_every_term_scores_lower(self):
        n = NormalizedQuery(age=30, height_cm=180, weight_kg=75)
        a = make_candidate(31, 185, 80, cid="a")
        b = make_candidate(33, 190, 85, cid="b")
        assert score(a, n) < score(b, n)


class TestFindMatch:
    def test_exact_match(self):
        target = make_candidate(25, 175, 70, cid="target")
        candidates = [
            make_candidate(24, 175, 70, cid="near"),
            target,
            make_candidate(30, 190, 85, cid="far"),
        ]
        result = find_match(candidates, 25, 175, 70)
        assert isinstance(result, Match)
        assert result.candidate is target
        assert result.exact is True
        assert result.score == 0.0

    def test_exact_match_after_snapping(self):
        target = make_candidate(25, 175, 70, cid="target")
        result = find_match([make_candidate(25, 170, 70, cid="other"), target], 25, 174, 71)
        assert result.candidate is target
        assert result.exact is True

    def test_first_exact_match_wins(self):
        first = make_candidate(25, 175, 70, cid="first")
        second = make_candidate(25, 175, 70, cid="second")
        result = find_match([first, second], 25, 175, 70)
        assert result.candidate is first

    def test_fallback_nearest(self):
        c1 = make_candidate(28, 170, 65, cid="c1")
        c2 = make_candidate(32, 180, 75, cid="c2")
        result = find_match([c1, c2], 30, 172, 68)
        assert isinstance(result, Match)
        assert result.candidate is c1
        assert result.exact is False
        assert result.score == pytest.approx(6.2)
        assert result.normalized == NormalizedQuery(age=30, height_cm=170, weight_kg=70)

    def test_fallback_prefers_dominating_candidate_regardless_of_order(self):
        a = make_candidate(31, 185, 80, cid="a")
        b = make_candidate(33, 190, 85, cid="b")
        assert find_match([b, a], 30, 180, 75).candidate is a
        assert find_match([a, b], 30, 180, 75).candidate is a

    def test_tie_goes_to_first_in_order(self):
        up = make_candidate(30, 175, 70, cid="up")
        down = make_candidate(30, 165, 70, cid="down")
        assert find_match([up, down], 30, 170, 70).candidate is up
        assert find_match([down, up], 30, 170, 70).candidate is down

    def test_floor_inputs_still_match(self):
        youth = make_candidate(16, 160, 50, cid="youth")
        result = find_match([youth, make_candidate(30, 190, 90, cid="big")], 6, 140, 35)
        assert isinstance(result, Match)
        assert result.candidate is youth
        assert result.normalized == NormalizedQuery(age=6, height_cm=150, weight_kg=45)

    def test_query_preserved(self):
        result = find_match([make_candidate(25, 175, 70)], 30, 172, 68)
        assert result.query == Query(age=30, height_cm=172, weight_kg=68)

    def test_deterministic(self):
        candidates = [make_candidate(a, h, w, cid=f"{a}-{h}-{w}")
                      for a, h, w in [(22, 170, 65), (28, 185, 80), (31, 190, 88), (25, 175, 70)]]
        first = find_match(candidates, 27, 181, 77)
        for _ in range(5):
            assert find_match(candidates, 27, 181, 77) == first

    def test_empty_candidates(self):
        result = find_match([], 25, 175, 70)
        assert isinstance(result, EmptyCandidateSet)
        assert result.reason == "no_candidates"
        assert result.query == Query(age=25, height_cm=175, weight_kg=70)

    def test_empty_tuple(self):
        assert isinstance(find_match((), 6, 140, 35), EmptyCandidateSet)
