from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Final, Iterable

from .types import Entity, Player

CHECKSUM_MODULUS: Final[int] = 173
HANDICAPS_DISABLED_WEIGHT: Final[int] = 29

_U32_MASK: Final[int] = 0xFFFF_FFFF


def _round_tenth(value: int) -> int:
    # The game divides the percentage by 10 in decimal and rounds half to even.
    return int((Decimal(int(value)) / 10).quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def _player_sum(player: Player) -> int:
    total = 0
    total += player.color_scheme_id * 5
    total += player.spawn_bot_id * 93
    total += player.emitter_id * 97
    total += player.player_theme_id * 53
    for index, taunt_id in enumerate(player.taunts):
        total += taunt_id * (13 + index)
    total += player.win_taunt_id * 37
    total += player.lose_taunt_id * 41
    for index, word in enumerate(player.taunt_database):
        total += (int(word) & _U32_MASK).bit_count() * (11 + index)
    total += (player.team & _U32_MASK) * 43
    for index, hero in enumerate(player.heroes):
        total += hero.hero_id * (17 + index)
        total += hero.costume_id * (7 + index)
        total += hero.stance_index * (3 + index)
        total += hero.packed_weapon_skins * (2 + index)
    if not player.handicaps_enabled:
        total += HANDICAPS_DISABLED_WEIGHT
    else:
        total += int(player.handicap_stock_count or 0) * 31
        total += _round_tenth(player.handicap_damage_done_multiplier or 0) * 3
        total += _round_tenth(player.handicap_damage_taken_multiplier or 0) * 23
    return total


def calculate_checksum(entities: Iterable[Entity], level_id: int) -> int:
    """Recompute the replay checksum from decoded player fields.

    The game accumulates into an unsigned 32-bit register, so the running sum
    wraps before the final modulo.
    """

    total = 0
    for entity in entities:
        total = (total + _player_sum(entity.player)) & _U32_MASK
    total = (total + int(level_id) * 47) & _U32_MASK
    return total % CHECKSUM_MODULUS
