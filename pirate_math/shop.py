from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .game_data import PlayerState


class PurchaseResult(str, Enum):
    PURCHASED = "purchased"
    INSUFFICIENT_COINS = "insufficient_coins"
    ALREADY_OWNED = "already_owned"
    UNKNOWN_ITEM = "unknown_item"


@dataclass(frozen=True, slots=True)
class CosmeticItem:
    item_id: str
    name: str
    cost: int
    category: str
    description: str


COSMETIC_ITEMS: tuple[CosmeticItem, ...] = (
    CosmeticItem("goldenSail", "Golden Sail", 150, "sail", "Gleaming gold sails"),
    CosmeticItem("diamondFlag", "Diamond Skull Flag", 200, "flag", "Precious diamond flag"),
    CosmeticItem("silverAnchor", "Silver Anchor", 100, "anchor", "Shiny silver anchor"),
    CosmeticItem("cannon", "Decorative Cannons", 180, "cannon", "Bronze cannons on deck"),
    CosmeticItem("treasureChest", "Treasure Chest", 250, "chest", "Golden treasure chest"),
    CosmeticItem("parrot", "Parrot Companion", 120, "parrot", "Colorful ship parrot"),
    CosmeticItem("lantern", "Golden Lanterns", 90, "lantern", "Glowing golden lanterns"),
    CosmeticItem("sailEmblem", "Sail Emblem", 140, "emblem", "Star emblem on sails"),
)

COSMETICS_BY_ID: Mapping[str, CosmeticItem] = MappingProxyType(
    {item.item_id: item for item in COSMETIC_ITEMS}
)


def has_cosmetic(state: PlayerState, item_id: str) -> bool:
    return item_id in state.cosmetics.purchased


def purchase_cosmetic(state: PlayerState, item_id: str) -> PurchaseResult:
    """Buy a cosmetic and equip it in its category.

    Cosmetics are visual only; buying one changes nothing but the coin
    balance and the ship's look.
    """

    item = COSMETICS_BY_ID.get(item_id)
    if item is None:
        return PurchaseResult.UNKNOWN_ITEM
    if has_cosmetic(state, item_id):
        return PurchaseResult.ALREADY_OWNED
    if not state.spend_coins(item.cost):
        return PurchaseResult.INSUFFICIENT_COINS

    state.cosmetics.purchased.append(item.item_id)
    state.cosmetics.equipped[item.category] = item.item_id
    return PurchaseResult.PURCHASED


def equip_cosmetic(state: PlayerState, item_id: str) -> bool:
    item = COSMETICS_BY_ID.get(item_id)
    if item is None or not has_cosmetic(state, item_id):
        return False
    state.cosmetics.equipped[item.category] = item.item_id
    return True


def equipped_items(state: PlayerState) -> list[CosmeticItem]:
    return [
        COSMETICS_BY_ID[item_id]
        for item_id in state.cosmetics.equipped.values()
        if item_id in COSMETICS_BY_ID
    ]
