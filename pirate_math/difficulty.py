"""Difficulty tiers and the question/reward engine.

Everything in this module is a pure function of its arguments and the
static tier table below.  Nothing here touches player state, the clock or
the save slot: callers (the challenge session, a UI) measure time, render
choices and fold the reward into the player's coin balance themselves.

The only source of nondeterminism is the ``rng`` argument.  When omitted a
single process-wide :class:`SeededRng` is used; tests pass their own seeded
instance so that question batches and shuffles are reproducible.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .random_source import RandomSource, SeededRng


@dataclass(frozen=True, slots=True)
class DifficultyTier:
    tier_id: str
    name: str
    operand_range: tuple[int, int]  # inclusive (min, max) for both operands
    question_count: int
    time_per_question_s: float
    base_reward: int
    description: str = ""

    def __post_init__(self) -> None:
        lo, hi = self.operand_range
        if lo < 0 or hi < 0:
            raise ValueError("operand_range bounds must be >= 0")
        if lo > hi:
            raise ValueError("operand_range min must be <= max")
        if self.question_count < 1:
            raise ValueError("question_count must be >= 1")
        if self.time_per_question_s < 0:
            raise ValueError("time_per_question_s must be >= 0")
        if self.base_reward < 0:
            raise ValueError("base_reward must be >= 0")


@dataclass(frozen=True, slots=True)
class Question:
    operand_a: int
    operand_b: int
    answer: int
    display_text: str
    difficulty: str


@dataclass(frozen=True, slots=True)
class RewardBreakdown:
    base_reward: int
    accuracy_bonus: int
    speed_bonus: int
    total: int


DEFAULT_TIER_ID = "medium"

DISTRACTOR_OFFSETS: tuple[int, ...] = (-5, 3, 7, -10)

SPEED_BONUS_FACTOR = 0.5

DIFFICULTIES: Mapping[str, DifficultyTier] = MappingProxyType(
    {
        "easy": DifficultyTier(
            tier_id="easy",
            name="Easy",
            operand_range=(0, 4),
            question_count=3,
            time_per_question_s=10,
            base_reward=10,
            description="0x0 to 4x12, 10s per question",
        ),
        "medium": DifficultyTier(
            tier_id="medium",
            name="Medium",
            operand_range=(0, 12),
            question_count=2,
            time_per_question_s=5,
            base_reward=25,
            description="0x0 to 12x12, 2 Qs, 5s per question",
        ),
        "hard": DifficultyTier(
            tier_id="hard",
            name="Hard",
            operand_range=(0, 12),
            question_count=3,
            time_per_question_s=3,
            base_reward=50,
            description="0x0 to 12x12, 3 Qs, 3s per question",
        ),
    }
)

_DEFAULT_RNG = SeededRng()


def get_difficulty(tier_id: object) -> DifficultyTier:
    """Return the tier for ``tier_id``, or the medium tier if it is unknown.

    The lookup never fails; unknown identifiers are tolerated.
    """

    if isinstance(tier_id, str):
        tier = DIFFICULTIES.get(tier_id)
        if tier is not None:
            return tier
    return DIFFICULTIES[DEFAULT_TIER_ID]


def generate_question(tier_id: str, rng: RandomSource | None = None) -> Question:
    """Draw one multiplication question from the tier's operand range."""

    rng = rng or _DEFAULT_RNG
    lo, hi = get_difficulty(tier_id).operand_range

    a = rng.next_int(lo, hi)
    b = rng.next_int(lo, hi)
    return Question(
        operand_a=a,
        operand_b=b,
        answer=a * b,
        display_text=f"{a} × {b}",
        difficulty=tier_id,
    )


def generate_questions(tier_id: str, count: int, rng: RandomSource | None = None) -> list[Question]:
    """Generate ``count`` independent questions; repeats are allowed."""

    if count < 0:
        raise ValueError("count must be >= 0")
    rng = rng or _DEFAULT_RNG
    return [generate_question(tier_id, rng) for _ in range(count)]


def generate_wrong_answers(correct_answer: int, count: int = 3, rng: RandomSource | None = None) -> list[int]:
    """Return the correct answer plus up to ``count`` distractors, shuffled.

    Distractors come from fixed offsets around the correct answer.  Offsets
    that land on a non-positive value or repeat an earlier value are skipped
    and never replaced, so small answers yield fewer than ``count + 1``
    options (e.g. 2 -> {2, 5, 9}).
    """

    if count < 0:
        raise ValueError("count must be >= 0")
    rng = rng or _DEFAULT_RNG

    answers = [correct_answer]
    for offset in DISTRACTOR_OFFSETS:
        if len(answers) >= count + 1:
            break
        candidate = correct_answer + offset
        if candidate > 0 and candidate not in answers:
            answers.append(candidate)

    return rng.shuffle(answers)[: count + 1]


def calculate_reward(
    tier_id: str,
    correct_answers: int,
    total_questions: int,
    time_taken_s: float,
) -> RewardBreakdown:
    """Compute the coin reward for a finished challenge.

    ``total`` is rounded once from the unrounded sum; the two bonuses are
    rounded separately for display, so ``total`` may differ by one from
    ``base_reward + accuracy_bonus + speed_bonus``.
    """

    if total_questions <= 0:
        raise ValueError("total_questions must be > 0")

    tier = get_difficulty(tier_id)
    base = tier.base_reward

    accuracy_bonus = (correct_answers / total_questions) * base

    expected_time_s = tier.time_per_question_s * total_questions
    if expected_time_s > 0:
        speed_bonus = max(0.0, (1.0 - time_taken_s / expected_time_s) * base * SPEED_BONUS_FACTOR)
    else:
        speed_bonus = 0.0

    return RewardBreakdown(
        base_reward=base,
        accuracy_bonus=round_half_up(accuracy_bonus),
        speed_bonus=round_half_up(speed_bonus),
        total=round_half_up(base + accuracy_bonus + speed_bonus),
    )


def round_half_up(x: float) -> int:
    # Ties round toward +inf, never to even.
    return int(math.floor(x + 0.5))
