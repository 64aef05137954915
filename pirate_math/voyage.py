from __future__ import annotations

from dataclasses import dataclass

from .difficulty import DifficultyTier, get_difficulty, round_half_up
from .random_source import RandomSource, SeededRng

MAX_DISTANCE = 500.0

# Distance a full question batch is worth; each victory advances by
# LEG_DISTANCE / question_count.
LEG_DISTANCE = 250.0

TREASURE_PER_ENEMY = 100

# Keyed by the raw difficulty id; unknown ids get 1, not the medium value.
TREASURE_MULTIPLIERS: dict[str, float] = {"easy": 1.0, "medium": 1.5, "hard": 2.0}


@dataclass(frozen=True, slots=True)
class Enemy:
    name: str
    difficulty: float


ENEMY_TYPES: tuple[Enemy, ...] = (
    Enemy("Shark", 0.8),
    Enemy("Pirate Speedboat", 1.0),
    Enemy("Giant Lobster", 1.2),
    Enemy("Whirlpool", 1.1),
    Enemy("Kraken", 0.9),
)


class Voyage:
    """Progress across one stretch of sea, from port to the next island.

    Each won battle pushes the ship forward; a lost battle only costs time.
    Once ``distance`` reaches ``MAX_DISTANCE`` the island is reached and the
    treasure can be collected.
    """

    def __init__(self, tier_id: str, *, rng: RandomSource | None = None) -> None:
        self._tier_id = tier_id
        self._tier = get_difficulty(tier_id)
        self._rng = rng if rng is not None else SeededRng()
        self._distance = 0.0
        self._enemies_defeated = 0

    @property
    def tier_id(self) -> str:
        return self._tier_id

    @property
    def tier(self) -> DifficultyTier:
        return self._tier

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def enemies_defeated(self) -> int:
        return self._enemies_defeated

    @property
    def island_reached(self) -> bool:
        return self._distance >= MAX_DISTANCE

    def progress(self) -> float:
        return min(1.0, self._distance / MAX_DISTANCE)

    def spawn_enemy(self) -> Enemy:
        return ENEMY_TYPES[self._rng.next_int(0, len(ENEMY_TYPES) - 1)]

    def record_battle(self, success: bool) -> bool:
        """Apply a battle result. Returns True once the island is reached."""

        if self.island_reached:
            raise RuntimeError("Voyage already reached the island")
        if success:
            self._enemies_defeated += 1
            step = LEG_DISTANCE / self._tier.question_count
            self._distance = min(MAX_DISTANCE, self._distance + step)
        return self.island_reached

    def treasure_coins(self) -> int:
        multiplier = TREASURE_MULTIPLIERS.get(self._tier_id, 1.0)
        base = TREASURE_PER_ENEMY * max(self._enemies_defeated, 1)
        return round_half_up(base * multiplier)
