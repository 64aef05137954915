from __future__ import annotations

import itertools
from collections import Counter

import pytest

from pirate_math.difficulty import (
    DIFFICULTIES,
    DifficultyTier,
    RewardBreakdown,
    calculate_reward,
    generate_question,
    generate_questions,
    generate_wrong_answers,
    get_difficulty,
    round_half_up,
)
from pirate_math.random_source import SeededRng


class ScriptedRng:
    """Returns queued integers and leaves shuffles in insertion order."""

    def __init__(self, ints: list[int]) -> None:
        self._ints = list(ints)

    def next_int(self, lo: int, hi: int) -> int:
        v = self._ints.pop(0)
        assert lo <= v <= hi
        return v

    def shuffle(self, seq):
        return list(seq)


def test_supported_tiers_satisfy_invariants() -> None:
    for tier_id in ("easy", "medium", "hard"):
        tier = get_difficulty(tier_id)
        lo, hi = tier.operand_range
        assert tier.tier_id == tier_id
        assert 0 <= lo <= hi
        assert tier.question_count >= 1
        assert tier.time_per_question_s >= 0
        assert tier.base_reward >= 0


def test_tier_table_values() -> None:
    easy = get_difficulty("easy")
    assert (easy.operand_range, easy.question_count, easy.time_per_question_s, easy.base_reward) == ((0, 4), 3, 10, 10)
    medium = get_difficulty("medium")
    assert (medium.operand_range, medium.question_count, medium.time_per_question_s, medium.base_reward) == (
        (0, 12),
        2,
        5,
        25,
    )
    hard = get_difficulty("hard")
    assert (hard.operand_range, hard.question_count, hard.time_per_question_s, hard.base_reward) == ((0, 12), 3, 3, 50)


@pytest.mark.parametrize("tier_id", ["legendary", "", "EASY", None, 3])
def test_unknown_tier_falls_back_to_medium(tier_id: object) -> None:
    assert get_difficulty(tier_id) is DIFFICULTIES["medium"]


def test_tier_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        DIFFICULTIES["easy"] = DIFFICULTIES["hard"]  # type: ignore[index]


def test_invalid_tier_definitions_raise() -> None:
    with pytest.raises(ValueError):
        DifficultyTier("x", "X", operand_range=(5, 1), question_count=1, time_per_question_s=1, base_reward=1)
    with pytest.raises(ValueError):
        DifficultyTier("x", "X", operand_range=(0, 1), question_count=0, time_per_question_s=1, base_reward=1)
    with pytest.raises(ValueError):
        DifficultyTier("x", "X", operand_range=(0, 1), question_count=1, time_per_question_s=-1, base_reward=1)
    with pytest.raises(ValueError):
        DifficultyTier("x", "X", operand_range=(0, 1), question_count=1, time_per_question_s=1, base_reward=-5)


def test_generate_question_formats_text_and_answer() -> None:
    q = generate_question("medium", ScriptedRng([7, 12]))
    assert (q.operand_a, q.operand_b, q.answer) == (7, 12, 84)
    assert q.display_text == "7 × 12"
    assert q.difficulty == "medium"


def test_generate_question_keeps_requested_id_for_unknown_tier() -> None:
    q = generate_question("mystery", ScriptedRng([11, 11]))
    assert q.difficulty == "mystery"
    assert q.answer == 121


@pytest.mark.parametrize("tier_id", ["easy", "medium", "hard"])
def test_operands_stay_in_range_over_many_questions(tier_id: str) -> None:
    lo, hi = get_difficulty(tier_id).operand_range
    rng = SeededRng(2024)
    seen_a: set[int] = set()
    for q in generate_questions(tier_id, 10_000, rng):
        assert lo <= q.operand_a <= hi
        assert lo <= q.operand_b <= hi
        assert q.answer == q.operand_a * q.operand_b
        seen_a.add(q.operand_a)
    # Both bounds are reachable.
    assert seen_a == set(range(lo, hi + 1))


def test_generate_questions_count() -> None:
    rng = SeededRng(1)
    assert len(generate_questions("hard", 7, rng)) == 7
    assert generate_questions("hard", 0, rng) == []
    with pytest.raises(ValueError):
        generate_questions("hard", -1, rng)


def test_generate_questions_allows_repeats() -> None:
    qs = generate_questions("easy", 3, ScriptedRng([2, 3, 2, 3, 3, 2]))
    assert [q.display_text for q in qs] == ["2 × 3", "2 × 3", "3 × 2"]


def test_wrong_answers_for_ten_uses_three_offsets() -> None:
    assert generate_wrong_answers(10, 3, ScriptedRng([])) == [10, 5, 13, 17]
    shuffled = generate_wrong_answers(10, 3, SeededRng(5))
    assert sorted(shuffled) == [5, 10, 13, 17]


def test_wrong_answers_underfill_is_not_padded() -> None:
    assert generate_wrong_answers(2, 3, ScriptedRng([])) == [2, 5, 9]
    assert generate_wrong_answers(0, 3, ScriptedRng([])) == [0, 3, 7]
    assert sorted(generate_wrong_answers(2, 3, SeededRng(9))) == [2, 5, 9]


def test_wrong_answers_stop_once_quota_met() -> None:
    assert generate_wrong_answers(100, 1, ScriptedRng([])) == [100, 95]
    assert generate_wrong_answers(100, 2, ScriptedRng([])) == [100, 95, 103]


def test_wrong_answers_zero_and_negative_count() -> None:
    assert generate_wrong_answers(42, 0, SeededRng(3)) == [42]
    with pytest.raises(ValueError):
        generate_wrong_answers(42, -1)


@pytest.mark.parametrize("correct", [0, 1, 2, 4, 5, 6, 10, 11, 24, 144])
def test_wrong_answers_properties(correct: int) -> None:
    rng = SeededRng(correct)
    for _ in range(50):
        answers = generate_wrong_answers(correct, 3, rng)
        assert answers.count(correct) == 1
        assert 1 <= len(answers) <= 4
        assert len(set(answers)) == len(answers)
        assert all(a > 0 for a in answers if a != correct)


def test_correct_answer_position_is_uniform() -> None:
    rng = SeededRng(777)
    positions = Counter(generate_wrong_answers(10, 3, rng).index(10) for _ in range(8000))
    assert set(positions) == {0, 1, 2, 3}
    for count in positions.values():
        assert 1700 <= count <= 2300


def test_every_ordering_is_produced_roughly_equally() -> None:
    rng = SeededRng(4242)
    orders = Counter(tuple(generate_wrong_answers(10, 3, rng)) for _ in range(12_000))
    assert set(orders) == set(itertools.permutations([10, 5, 13, 17]))
    for count in orders.values():
        assert 380 <= count <= 620


def test_reward_easy_example_rounds_half_up() -> None:
    reward = calculate_reward("easy", 3, 3, 15)
    assert reward == RewardBreakdown(base_reward=10, accuracy_bonus=10, speed_bonus=3, total=23)


def test_reward_total_is_rounded_once_from_unrounded_parts() -> None:
    # accuracy 12.5 and speed 12.5 display as 13 + 13, but the total is 25 + 25.0.
    reward = calculate_reward("medium", 1, 2, 0)
    assert (reward.accuracy_bonus, reward.speed_bonus) == (13, 13)
    assert reward.total == 50
    assert reward.base_reward + reward.accuracy_bonus + reward.speed_bonus == 51


@pytest.mark.parametrize("time_taken", [30, 30.5, 45, 1000])
def test_reward_no_speed_bonus_when_slow(time_taken: float) -> None:
    reward = calculate_reward("easy", 3, 3, time_taken)
    assert reward.speed_bonus == 0
    assert reward.total == 20


def test_reward_partial_accuracy_hard() -> None:
    reward = calculate_reward("hard", 2, 3, 9)
    assert reward == RewardBreakdown(base_reward=50, accuracy_bonus=33, speed_bonus=0, total=83)


def test_reward_unknown_tier_uses_medium() -> None:
    assert calculate_reward("kraken", 2, 2, 10) == calculate_reward("medium", 2, 2, 10)


def test_reward_zero_questions_raises() -> None:
    with pytest.raises(ValueError):
        calculate_reward("easy", 0, 0, 5)


def test_round_half_up_ties() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(22.5) == 23
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4999) == 2
    assert round_half_up(0.0) == 0


def test_same_seed_same_outputs() -> None:
    a, b = SeededRng(99), SeededRng(99)
    assert generate_questions("hard", 20, a) == generate_questions("hard", 20, b)
    assert [generate_wrong_answers(n, 3, a) for n in range(30)] == [generate_wrong_answers(n, 3, b) for n in range(30)]
    assert get_difficulty("easy") is get_difficulty("easy")
    assert calculate_reward("hard", 3, 3, 4.5) == calculate_reward("hard", 3, 3, 4.5)


def test_default_rng_is_used_when_none_given() -> None:
    q = generate_question("easy")
    assert 0 <= q.operand_a <= 4
    assert sorted(generate_wrong_answers(10)) == [5, 10, 13, 17]
