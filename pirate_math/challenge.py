"""Headless battle session: a batch of multiplication questions under a timer.

The session owns no rendering and no input devices.  A UI feeds it clicks
(``submit_choice``) or typed text (``submit_answer``), calls ``tick`` every
frame and draws ``snapshot()``.  All time comes from the injected ``Clock``
and all randomness from the injected ``RandomSource``, so a battle is fully
reproducible from (seed, scripted inputs, fake clock).

Flow::

    READY -> QUESTION -> FEEDBACK -> QUESTION -> ... -> FEEDBACK -> RESULTS

Transitions driven by time (question timeout, end of the feedback pause)
are stamped at the moment they were due rather than when ``tick`` noticed
them, so results do not depend on frame rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .clock import Clock, RealClock
from .difficulty import (
    DifficultyTier,
    Question,
    RewardBreakdown,
    calculate_reward,
    generate_questions,
    generate_wrong_answers,
    get_difficulty,
)
from .game_data import AnswerInputMode
from .random_source import RandomSource, SeededRng


class Phase(str, Enum):
    READY = "ready"
    QUESTION = "question"
    FEEDBACK = "feedback"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class ChallengeConfig:
    answer_input_mode: AnswerInputMode = AnswerInputMode.BUTTONS
    feedback_s: float = 2.0  # pause after each answer before the next question


@dataclass(frozen=True, slots=True)
class QuestionEvent:
    index: int
    question: Question
    response: int | None
    is_correct: bool
    timed_out: bool
    presented_at_s: float
    answered_at_s: float
    response_time_s: float


@dataclass(frozen=True, slots=True)
class ChallengeOutcome:
    difficulty: str
    success: bool
    correct: int
    total: int
    time_taken_s: float
    reward: RewardBreakdown
    events: tuple[QuestionEvent, ...]


@dataclass(frozen=True, slots=True)
class ChallengeSnapshot:
    """View model for the UI (pure data)."""

    title: str
    phase: Phase
    prompt: str
    progress: str
    choices: tuple[int, ...]
    time_remaining_s: float | None
    correct_so_far: int
    enemy_health: float  # 1.0 untouched, 0.0 defeated
    feedback: str | None = None


class ChallengeSession:
    def __init__(
        self,
        tier_id: str,
        *,
        clock: Clock | None = None,
        rng: RandomSource | None = None,
        config: ChallengeConfig | None = None,
        enemy: str = "Enemy",
    ) -> None:
        cfg = config or ChallengeConfig()
        if cfg.feedback_s < 0.0:
            raise ValueError("feedback_s must be >= 0")

        self._tier_id = tier_id
        self._tier = get_difficulty(tier_id)
        self._clock: Clock = clock if clock is not None else RealClock()
        self._rng = rng if rng is not None else SeededRng()
        self._mode = AnswerInputMode(cfg.answer_input_mode)
        self._feedback_s = float(cfg.feedback_s)
        self._enemy = enemy

        self._phase = Phase.READY
        self._questions: list[Question] = []
        self._index = 0
        self._choices: tuple[int, ...] = ()
        self._presented_at_s: float | None = None
        self._feedback_started_at_s: float | None = None
        self._feedback: str | None = None

        self._started_at_s: float | None = None
        self._events: list[QuestionEvent] = []
        self._correct = 0
        self._outcome: ChallengeOutcome | None = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def tier(self) -> DifficultyTier:
        return self._tier

    @property
    def answer_input_mode(self) -> AnswerInputMode:
        return self._mode

    @property
    def current_question(self) -> Question | None:
        if self._phase not in (Phase.QUESTION, Phase.FEEDBACK):
            return None
        return self._questions[self._index]

    @property
    def choices(self) -> tuple[int, ...]:
        """Answer buttons for the current question (empty in typing mode)."""
        return self._choices

    def events(self) -> list[QuestionEvent]:
        return list(self._events)

    def outcome(self) -> ChallengeOutcome | None:
        return self._outcome

    def start(self) -> None:
        if self._phase is not Phase.READY:
            raise RuntimeError("Challenge already started")
        now = self._clock.now()
        self._questions = generate_questions(self._tier_id, self._tier.question_count, self._rng)
        self._started_at_s = now
        self._present(0, at=now)

    def time_remaining_s(self) -> float | None:
        if self._phase is not Phase.QUESTION:
            return None
        assert self._presented_at_s is not None
        elapsed = self._clock.now() - self._presented_at_s
        return max(0.0, self._tier.time_per_question_s - elapsed)

    def tick(self) -> None:
        now = self._clock.now()
        while True:
            if self._phase is Phase.QUESTION:
                deadline = self._question_deadline()
                if now < deadline:
                    return
                self._resolve(None, timed_out=True, at=deadline)
            elif self._phase is Phase.FEEDBACK:
                assert self._feedback_started_at_s is not None
                due = self._feedback_started_at_s + self._feedback_s
                if now < due:
                    return
                self._advance(at=due)
            else:
                return

    def submit_choice(self, value: int) -> bool:
        """Click an answer button. Returns True if the click was accepted."""

        if self._mode is not AnswerInputMode.BUTTONS:
            raise RuntimeError("submit_choice requires buttons input mode")
        if not self._accepting_answer():
            return False
        if value not in self._choices:
            return False
        self._resolve(int(value), timed_out=False, at=self._clock.now())
        return True

    def submit_answer(self, raw: str) -> bool:
        """Submit a typed answer. Empty or non-numeric text is ignored."""

        if self._mode is not AnswerInputMode.TYPING:
            raise RuntimeError("submit_answer requires typing input mode")
        if not self._accepting_answer():
            return False
        value = _try_parse_int(raw)
        if value is None:
            return False
        self._resolve(value, timed_out=False, at=self._clock.now())
        return True

    def snapshot(self) -> ChallengeSnapshot:
        total = len(self._questions)
        question = self.current_question
        if self._phase is Phase.RESULTS:
            assert self._outcome is not None
            prompt = _results_text(self._outcome)
        elif question is not None:
            prompt = question.display_text
        else:
            prompt = ""

        progress = "" if question is None else f"Question {self._index + 1}/{total}"
        health = 1.0 if total == 0 else 1.0 - (self._correct / total)

        return ChallengeSnapshot(
            title=f"Battle: {self._enemy}",
            phase=self._phase,
            prompt=prompt,
            progress=progress,
            choices=self._choices if self._phase is Phase.QUESTION else (),
            time_remaining_s=self.time_remaining_s(),
            correct_so_far=self._correct,
            enemy_health=health,
            feedback=self._feedback,
        )

    def _accepting_answer(self) -> bool:
        if self._phase is not Phase.QUESTION:
            return False
        if self._clock.now() >= self._question_deadline():
            # Too late: the question already timed out.
            self.tick()
            return False
        return True

    def _question_deadline(self) -> float:
        assert self._presented_at_s is not None
        return self._presented_at_s + self._tier.time_per_question_s

    def _present(self, index: int, *, at: float) -> None:
        self._index = index
        self._phase = Phase.QUESTION
        self._presented_at_s = at
        self._feedback = None
        self._feedback_started_at_s = None
        if self._mode is AnswerInputMode.BUTTONS:
            answer = self._questions[index].answer
            self._choices = tuple(generate_wrong_answers(answer, rng=self._rng))
        else:
            self._choices = ()

    def _resolve(self, response: int | None, *, timed_out: bool, at: float) -> None:
        assert self._presented_at_s is not None
        question = self._questions[self._index]
        is_correct = (not timed_out) and response == question.answer

        self._events.append(
            QuestionEvent(
                index=self._index,
                question=question,
                response=response,
                is_correct=is_correct,
                timed_out=timed_out,
                presented_at_s=self._presented_at_s,
                answered_at_s=at,
                response_time_s=max(0.0, at - self._presented_at_s),
            )
        )

        if is_correct:
            self._correct += 1
            self._feedback = "CORRECT!"
        elif timed_out:
            self._feedback = f"TIME'S UP! Answer: {question.answer}"
        else:
            self._feedback = f"WRONG! Answer: {question.answer}"

        self._phase = Phase.FEEDBACK
        self._feedback_started_at_s = at

    def _advance(self, *, at: float) -> None:
        if self._index + 1 < len(self._questions):
            self._present(self._index + 1, at=at)
            return
        self._finish(at=at)

    def _finish(self, *, at: float) -> None:
        assert self._started_at_s is not None
        total = len(self._questions)
        time_taken_s = max(0.0, at - self._started_at_s)

        self._phase = Phase.RESULTS
        self._choices = ()
        self._presented_at_s = None
        self._feedback = None
        self._feedback_started_at_s = None
        self._outcome = ChallengeOutcome(
            difficulty=self._tier_id,
            success=self._correct * 2 > total,
            correct=self._correct,
            total=total,
            time_taken_s=time_taken_s,
            reward=calculate_reward(self._tier_id, self._correct, total, time_taken_s),
            events=tuple(self._events),
        )


def _results_text(outcome: ChallengeOutcome) -> str:
    if outcome.success:
        return (
            f"VICTORY!\nCorrect: {outcome.correct}/{outcome.total}\n"
            f"Coins Earned: {outcome.reward.total}"
        )
    return f"DEFEAT!\nCorrect: {outcome.correct}/{outcome.total}"


def _try_parse_int(text: str) -> int | None:
    s = text.strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None
