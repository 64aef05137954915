from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .difficulty import DEFAULT_TIER_ID, round_half_up

if TYPE_CHECKING:
    from .challenge import ChallengeOutcome


class AnswerInputMode(str, Enum):
    BUTTONS = "buttons"
    TYPING = "typing"


@dataclass(slots=True)
class PlayerProfile:
    name: str = "Captain"
    coins: int = 0
    total_coins_earned: int = 0
    level: int = 1
    experience: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "coins": int(self.coins),
            "totalCoinsEarned": int(self.total_coins_earned),
            "level": int(self.level),
            "experience": int(self.experience),
        }

    @classmethod
    def from_dict(cls, data: object) -> "PlayerProfile":
        if not isinstance(data, dict):
            return cls()
        name = str(data.get("name", "")).strip() or "Captain"
        return cls(
            name=name,
            coins=max(0, _as_int(data.get("coins"), 0)),
            total_coins_earned=max(0, _as_int(data.get("totalCoinsEarned"), 0)),
            level=max(1, _as_int(data.get("level"), 1)),
            experience=max(0, _as_int(data.get("experience"), 0)),
        )


@dataclass(slots=True)
class ShipState:
    level: int = 1
    health: int = 100
    max_health: int = 100
    speed: int = 1
    defense: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": int(self.level),
            "health": int(self.health),
            "maxHealth": int(self.max_health),
            "speed": int(self.speed),
            "defense": int(self.defense),
        }

    @classmethod
    def from_dict(cls, data: object) -> "ShipState":
        if not isinstance(data, dict):
            return cls()
        max_health = max(1, _as_int(data.get("maxHealth"), 100))
        return cls(
            level=max(1, _as_int(data.get("level"), 1)),
            health=min(max_health, max(0, _as_int(data.get("health"), max_health))),
            max_health=max_health,
            speed=_as_int(data.get("speed"), 1),
            defense=_as_int(data.get("defense"), 1),
        )


@dataclass(slots=True)
class CrewMember:
    crew_id: int
    name: str
    unlocked: bool
    level: int | None = None
    cost: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.crew_id, "name": self.name, "unlocked": self.unlocked}
        if self.level is not None:
            out["level"] = self.level
        if self.cost is not None:
            out["cost"] = self.cost
        return out


def default_crew() -> list[CrewMember]:
    return [
        CrewMember(1, "First Mate", unlocked=True, level=1),
        CrewMember(2, "Sailor Jack", unlocked=False, cost=50),
        CrewMember(3, "Storm Breaker", unlocked=False, cost=150),
    ]


@dataclass(slots=True)
class Cosmetics:
    purchased: list[str] = field(default_factory=list)
    equipped: dict[str, str] = field(default_factory=dict)  # category -> item id

    def to_dict(self) -> dict[str, Any]:
        return {"purchased": list(self.purchased), "equipped": dict(self.equipped)}

    @classmethod
    def from_dict(cls, data: object) -> "Cosmetics":
        if not isinstance(data, dict):
            return cls()
        raw_purchased = data.get("purchased")
        purchased: list[str] = []
        if isinstance(raw_purchased, list):
            for item_id in raw_purchased:
                item_id = str(item_id)
                if item_id not in purchased:
                    purchased.append(item_id)
        raw_equipped = data.get("equipped")
        equipped: dict[str, str] = {}
        if isinstance(raw_equipped, dict):
            equipped = {str(k): str(v) for k, v in raw_equipped.items()}
        return cls(purchased=purchased, equipped=equipped)


@dataclass(slots=True)
class Settings:
    answer_input_mode: AnswerInputMode = AnswerInputMode.BUTTONS

    def to_dict(self) -> dict[str, Any]:
        return {"answerInputMode": self.answer_input_mode.value}

    @classmethod
    def from_dict(cls, data: object) -> "Settings":
        if not isinstance(data, dict):
            return cls()
        try:
            mode = AnswerInputMode(str(data.get("answerInputMode", "buttons")))
        except ValueError:
            mode = AnswerInputMode.BUTTONS
        return cls(answer_input_mode=mode)


@dataclass(slots=True)
class Statistics:
    games_played: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    islands_visited: int = 0
    challenges_completed: int = 0
    challenges_failed: int = 0

    def accuracy_pct(self) -> int:
        """Whole-number percentage of answers that were correct."""

        total = self.correct_answers + self.wrong_answers
        if total == 0:
            return 0
        return round_half_up(self.correct_answers / total * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gamesPlayed": self.games_played,
            "correctAnswers": self.correct_answers,
            "wrongAnswers": self.wrong_answers,
            "islandsVisited": self.islands_visited,
            "challengesCompleted": self.challenges_completed,
            "challengesFailed": self.challenges_failed,
        }

    @classmethod
    def from_dict(cls, data: object) -> "Statistics":
        if not isinstance(data, dict):
            return cls()
        return cls(
            games_played=max(0, _as_int(data.get("gamesPlayed"), 0)),
            correct_answers=max(0, _as_int(data.get("correctAnswers"), 0)),
            wrong_answers=max(0, _as_int(data.get("wrongAnswers"), 0)),
            islands_visited=max(0, _as_int(data.get("islandsVisited"), 0)),
            challenges_completed=max(0, _as_int(data.get("challengesCompleted"), 0)),
            challenges_failed=max(0, _as_int(data.get("challengesFailed"), 0)),
        )


@dataclass(slots=True)
class PlayerState:
    """Everything that goes into the save slot.

    Passed explicitly to whatever needs it; there is no global instance.
    Serialised keys are the camelCase names used by existing save files.
    """

    player: PlayerProfile = field(default_factory=PlayerProfile)
    ship: ShipState = field(default_factory=ShipState)
    crew: list[CrewMember] = field(default_factory=default_crew)
    cosmetics: Cosmetics = field(default_factory=Cosmetics)
    difficulty: str = DEFAULT_TIER_ID
    settings: Settings = field(default_factory=Settings)
    statistics: Statistics = field(default_factory=Statistics)

    def credit_coins(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        self.player.coins += amount
        self.player.total_coins_earned += amount

    def spend_coins(self, amount: int) -> bool:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        if self.player.coins < amount:
            return False
        self.player.coins -= amount
        return True

    def begin_voyage(self, tier_id: str) -> None:
        self.difficulty = tier_id
        self.statistics.games_played += 1

    def set_answer_input_mode(self, mode: AnswerInputMode | str) -> None:
        self.settings.answer_input_mode = AnswerInputMode(mode)

    def record_challenge(self, outcome: "ChallengeOutcome") -> None:
        """Fold a finished battle into the statistics and coin balance.

        Coins are only credited for a victory.
        """

        self.statistics.correct_answers += outcome.correct
        self.statistics.wrong_answers += outcome.total - outcome.correct
        if outcome.success:
            self.credit_coins(outcome.reward.total)
            self.statistics.challenges_completed += 1
        else:
            self.statistics.challenges_failed += 1

    def collect_treasure(self, coins: int) -> None:
        self.credit_coins(coins)
        self.statistics.islands_visited += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player.to_dict(),
            "ship": self.ship.to_dict(),
            "crew": [member.to_dict() for member in self.crew],
            "cosmetics": self.cosmetics.to_dict(),
            "difficulty": self.difficulty,
            "settings": self.settings.to_dict(),
            "statistics": self.statistics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: object) -> "PlayerState":
        if not isinstance(data, dict):
            return cls()
        difficulty = data.get("difficulty")
        return cls(
            player=PlayerProfile.from_dict(data.get("player")),
            ship=ShipState.from_dict(data.get("ship")),
            crew=_crew_from_list(data.get("crew")),
            cosmetics=Cosmetics.from_dict(data.get("cosmetics")),
            difficulty=difficulty if isinstance(difficulty, str) and difficulty else DEFAULT_TIER_ID,
            settings=Settings.from_dict(data.get("settings")),
            statistics=Statistics.from_dict(data.get("statistics")),
        )


def format_coins(amount: int) -> str:
    """Compact coin label: 999 -> "999", 1500 -> "1.5k"."""

    if amount >= 1000:
        return f"{amount / 1000:.1f}k"
    return str(amount)


def _crew_from_list(data: object) -> list[CrewMember]:
    if not isinstance(data, list):
        return default_crew()
    crew: list[CrewMember] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        crew_id = _as_int(item.get("id"), -1)
        name = str(item.get("name", "")).strip()
        if crew_id < 0 or name == "":
            continue
        level = item.get("level")
        cost = item.get("cost")
        crew.append(
            CrewMember(
                crew_id=crew_id,
                name=name,
                unlocked=bool(item.get("unlocked", False)),
                level=None if level is None else _as_int(level, 1),
                cost=None if cost is None else _as_int(cost, 0),
            )
        )
    return crew or default_crew()


def _as_int(value: object, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
