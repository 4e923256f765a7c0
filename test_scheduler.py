#!/usr/bin/env python3
"""
Tests for the clip scheduler: coverage, ordering and failure behavior.
"""

import math
import random
from typing import Dict, List, Sequence, Tuple

import pytest

from shortspipeline import InsufficientCoverage, Keyword, TrimmedClip, assemble


def make_pool(layout: Sequence[Tuple[str, Sequence[float]]]) -> Dict[Keyword, List[TrimmedClip]]:
    """[('rocket', [2.0, 1.5]), ...] -> {Keyword: [TrimmedClip, ...]}"""
    pool: Dict[Keyword, List[TrimmedClip]] = {}
    for position, (term, durations) in enumerate(layout):
        keyword = Keyword(term=term, position=position)
        pool[keyword] = [
            TrimmedClip(segment_id=f"{term}-{i}", path=f"/clips/{term}_{i}.mp4", duration=d, keyword=keyword)
            for i, d in enumerate(durations)
        ]
    return pool


def test_empty_pool_raises_insufficient_coverage():
    with pytest.raises(InsufficientCoverage):
        assemble({}, 10.0)
    with pytest.raises(InsufficientCoverage):
        assemble(make_pool([("rocket", []), ("galaxy", [])]), 10.0)


def test_sufficient_pool_reaches_target():
    pool = make_pool([("rocket", [2.5, 1.8]), ("galaxy", [2.9, 2.2]), ("telescope", [1.5, 2.7])])
    timeline = assemble(pool, 8.0)

    assert timeline.total_duration >= 8.0
    assert timeline.is_covered
    # 2.5 + 1.8 + 2.9 = 7.2 < 8.0, the fourth clip crosses the target
    assert [c.segment_id for c in timeline.clips] == ["rocket-0", "rocket-1", "galaxy-0", "galaxy-1"]


def test_insufficient_pool_returns_whole_pool_without_repeats():
    pool = make_pool([("rocket", [2.0, 1.0]), ("galaxy", [2.5])])
    timeline = assemble(pool, 30.0)

    assert math.isclose(timeline.total_duration, 5.5)
    assert len(timeline.clips) == 3
    assert len({c.segment_id for c in timeline.clips}) == 3
    assert not timeline.is_covered
    assert math.isclose(timeline.shortfall, 24.5)


def test_stops_mid_keyword_once_target_is_reached():
    pool = make_pool([("rocket", [2.0, 2.0, 2.0, 2.0]), ("galaxy", [2.0])])
    timeline = assemble(pool, 3.0)

    assert timeline.keyword_sequence() == ["rocket", "rocket"]
    assert math.isclose(timeline.overshoot, 1.0)


def test_keywords_follow_position_not_mapping_order():
    pool = make_pool([("rocket", [1.0]), ("galaxy", [1.0]), ("telescope", [1.0])])
    reversed_pool = dict(reversed(list(pool.items())))
    timeline = assemble(reversed_pool, 10.0)

    assert timeline.keyword_sequence() == ["rocket", "galaxy", "telescope"]


def test_rejects_non_positive_or_non_finite_targets():
    pool = make_pool([("rocket", [2.0])])
    for target in (0.0, -1.0, float("nan"), float("inf")):
        with pytest.raises(ValueError):
            assemble(pool, target)


def test_rocket_galaxy_telescope_scenario():
    pool = make_pool([("rocket", [2.5, 1.8]), ("galaxy", [2.9, 2.2]), ("telescope", [1.5, 2.7])])
    timeline = assemble(pool, 12.4)

    # 10.9s after five clips, so the sixth is needed
    assert timeline.keyword_sequence() == ["rocket", "rocket", "galaxy", "galaxy", "telescope", "telescope"]
    assert timeline.total_duration >= 12.4


def test_keyword_without_clips_is_skipped():
    pool = make_pool([("rocket", []), ("galaxy", [2.0, 2.5]), ("telescope", [2.8])])
    timeline = assemble(pool, 6.0)

    assert timeline.keyword_sequence() == ["galaxy", "galaxy", "telescope"]
    assert timeline.is_covered


def test_invariants_hold_for_random_pools():
    rng = random.Random(1234)
    for _ in range(300):
        layout = [
            (f"kw{k}", [round(rng.uniform(1.0, 2.99), 2) for _ in range(rng.randint(0, 3))])
            for k in range(rng.randint(1, 6))
        ]
        pool = make_pool(layout)
        target = rng.uniform(0.5, 25.0)
        aggregate = sum(c.duration for clips in pool.values() for c in clips)

        if aggregate == 0:
            with pytest.raises(InsufficientCoverage):
                assemble(pool, target)
            continue

        timeline = assemble(pool, target)
        if aggregate >= target:
            assert timeline.total_duration >= target
            # Dropping the last clip must leave the total below target
            assert sum(c.duration for c in timeline.clips[:-1]) < target
        else:
            assert math.isclose(timeline.total_duration, aggregate)

        # Keyword order: every earlier keyword is exhausted before a later one starts
        positions = [c.keyword.position for c in timeline.clips]
        assert positions == sorted(positions)
        for keyword in {c.keyword for c in timeline.clips[:-1]}:
            if keyword != timeline.clips[-1].keyword:
                used = [c for c in timeline.clips if c.keyword == keyword]
                assert used == pool[keyword]


if __name__ == "__main__":
    test_empty_pool_raises_insufficient_coverage()
    test_sufficient_pool_reaches_target()
    test_insufficient_pool_returns_whole_pool_without_repeats()
    test_stops_mid_keyword_once_target_is_reached()
    test_keywords_follow_position_not_mapping_order()
    test_rejects_non_positive_or_non_finite_targets()
    test_rocket_galaxy_telescope_scenario()
    test_keyword_without_clips_is_skipped()
    test_invariants_hold_for_random_pools()
    print("\n✅ Scheduler tests passed!")
