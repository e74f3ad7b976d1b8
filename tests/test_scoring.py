"""Tests for the scoring engine."""

import pytest

from git_auditor.core.models import Category, CheckRecord, Grade
from git_auditor.core.scoring import (
    DEFAULT_CATEGORY_WEIGHTS,
    evaluate,
    grade_for,
    round_half_up,
    score_categories,
)


def check(category=Category.PROFILE, weight=10, passed=True, is_bonus=False, label="check"):
    return CheckRecord(
        category=category,
        label=label,
        passed=passed,
        weight=weight,
        tip="tip",
        is_bonus=is_bonus,
    )


def test_bonus_overflow_is_capped_at_100():
    checks = [
        check(weight=20, passed=True),
        check(weight=40, passed=True, is_bonus=True),
    ]

    result = evaluate(checks, [], {Category.PROFILE: 100})

    score = result.category_scores[Category.PROFILE]
    assert score.total == 60
    assert score.max == 20
    assert result.categories[Category.PROFILE] == 100
    assert result.global_score == 100
    assert result.grade is Grade.A


def test_bonus_without_base_scores_zero():
    result = evaluate([check(weight=10, passed=True, is_bonus=True)], [], {Category.PROFILE: 100})

    assert result.category_scores[Category.PROFILE].max == 0
    assert result.categories[Category.PROFILE] == 0
    assert result.global_score == 0


def test_failed_checks_count_toward_max_only():
    scores = score_categories([
        check(weight=30, passed=True),
        check(weight=10, passed=False),
        check(weight=5, passed=False, is_bonus=True),
    ])

    profile = scores[Category.PROFILE]
    assert (profile.total, profile.max, profile.percentage) == (30, 40, 75)


def test_configured_category_without_checks_scores_zero_and_drags_mean():
    checks = [check(category=Category.PROFILE, weight=10, passed=True)]

    result = evaluate(checks, [], {Category.PROFILE: 1, Category.ACTIVITY: 1})

    assert result.categories[Category.ACTIVITY] == 0
    assert result.global_score == 50


def test_category_missing_from_weights_is_excluded_from_mean():
    checks = [
        check(category=Category.PROFILE, weight=10, passed=True),
        check(category=Category.SECURITY, weight=10, passed=False),
    ]

    result = evaluate(checks, [], {Category.PROFILE: 100})

    assert result.categories[Category.SECURITY] == 0
    assert result.global_score == 100


def test_weighted_mean_uses_category_weights():
    checks = [
        check(category=Category.PROFILE, weight=10, passed=True),
        check(category=Category.REPOSITORY, weight=10, passed=False),
    ]

    result = evaluate(checks, [], {Category.PROFILE: 150, Category.REPOSITORY: 300})

    # 100 * 150 / 450
    assert result.global_score == 33


@pytest.mark.parametrize("flags,expected", [(0, 100), (1, 95), (3, 85), (19, 5), (20, 0), (25, 0)])
def test_each_red_flag_costs_five_points_floored_at_zero(flags, expected):
    checks = [check(weight=10, passed=True)]

    result = evaluate(checks, [f"flag {i}" for i in range(flags)], {Category.PROFILE: 1})

    assert result.global_score == expected
    assert len(result.red_flags) == flags


def test_red_flags_keep_order_and_duplicates():
    flags = ["b", "a", "b"]
    result = evaluate([check()], flags, {Category.PROFILE: 1})
    assert result.red_flags == ["b", "a", "b"]


def test_empty_weights_give_zero():
    result = evaluate([check()], [], {})
    assert result.global_score == 0
    assert result.categories[Category.PROFILE] == 100


def test_default_weights_report_every_category():
    result = evaluate([], [])
    assert set(result.categories) == set(DEFAULT_CATEGORY_WEIGHTS)
    assert result.global_score == 0
    assert result.grade is Grade.F


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


@pytest.mark.parametrize("score,grade", [
    (100, Grade.A), (90, Grade.A), (89, Grade.B), (80, Grade.B),
    (79, Grade.C), (60, Grade.C), (59, Grade.D), (40, Grade.D), (39, Grade.F), (0, Grade.F),
])
def test_grade_boundaries(score, grade):
    assert grade_for(score) is grade


def test_check_records_are_immutable():
    record = check()
    with pytest.raises(Exception):
        record.passed = False
