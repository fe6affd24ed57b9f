from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from .dialect import Dialect

HERO_COUNT_MIN: Final[int] = 1
HERO_COUNT_MAX: Final[int] = 5
TAUNT_SLOTS: Final[int] = 8

TEAMS_FLAG = 1 << 0
TEAM_DAMAGE_FLAG = 1 << 1
FIXED_CAMERA_FLAG = 1 << 2
GADGETS_OFF_FLAG = 1 << 3
WEAPONS_OFF_FLAG = 1 << 4
TEST_LEVELS_ON_FLAG = 1 << 5
TEST_FEATURES_ON_FLAG = 1 << 6
GHOST_RULE_FLAG = 1 << 7
TURN_OFF_MAP_ART_THEMES_FLAG = 1 << 8
FORCE_CREW_BATTLE_CYCLE_FLAG = 1 << 9
ADVANCED_SETTINGS_FLAG = 1 << 10

BOUNCY_BOMBS_BIT = 1 << 0
PRESSURE_MINES_BIT = 1 << 1
SPIKEBALLS_BIT = 1 << 2
SIDEKICK_SUMMONERS_BIT = 1 << 3
HOMING_BOOMERANGS_BIT = 1 << 4
STICKY_BOMBS_BIT = 1 << 5
WEAPON_CRATES_BIT = 1 << 6

AIM_UP_BIT = 1 << 0
DROP_BIT = 1 << 1
MOVE_LEFT_BIT = 1 << 2
MOVE_RIGHT_BIT = 1 << 3
JUMP_BIT = 1 << 4
PRIORITISE_NEUTRAL_BIT = 1 << 5
HEAVY_ATTACK_BIT = 1 << 6
LIGHT_ATTACK_BIT = 1 << 7
DODGE_DASH_BIT = 1 << 8
PICK_UP_THROW_BIT = 1 << 9
TAUNT_SHIFT = 10
INPUT_STATE_BITS = 14

# Top nibble of the input state -> emote slot. The game encodes slots as a
# direction pattern, so this is not an arithmetic mapping.
TAUNT_SLOT_BY_NIBBLE: Final[dict[int, int]] = {
    0b0000: 0,
    0b0001: 1,
    0b0011: 2,
    0b0010: 3,
    0b0110: 4,
    0b0100: 5,
    0b1100: 6,
    0b1000: 7,
    0b1001: 8,
}


def taunt_slot(nibble: int) -> int:
    return TAUNT_SLOT_BY_NIBBLE.get(int(nibble) & 0xF, 0)


class GadgetSelection(IntEnum):
    ALL = 0
    CUSTOM = 1
    NO_GADGETS = 2


@dataclass(frozen=True, slots=True)
class GameModeFlags:
    bits: int
    teams: bool
    team_damage: bool
    fixed_camera: bool
    gadgets_off: bool
    weapons_off: bool
    test_levels_on: bool
    test_features_on: bool
    ghost_rule: bool
    turn_off_map_art_themes: bool
    force_crew_battle_cycle: bool
    # Not exposed by the live game.
    advanced_settings: bool

    @classmethod
    def from_bits(cls, bits: int) -> GameModeFlags:
        bits = int(bits)
        return cls(
            bits=bits,
            teams=bool(bits & TEAMS_FLAG),
            team_damage=bool(bits & TEAM_DAMAGE_FLAG),
            fixed_camera=bool(bits & FIXED_CAMERA_FLAG),
            gadgets_off=bool(bits & GADGETS_OFF_FLAG),
            weapons_off=bool(bits & WEAPONS_OFF_FLAG),
            test_levels_on=bool(bits & TEST_LEVELS_ON_FLAG),
            test_features_on=bool(bits & TEST_FEATURES_ON_FLAG),
            ghost_rule=bool(bits & GHOST_RULE_FLAG),
            turn_off_map_art_themes=bool(bits & TURN_OFF_MAP_ART_THEMES_FLAG),
            force_crew_battle_cycle=bool(bits & FORCE_CREW_BATTLE_CYCLE_FLAG),
            advanced_settings=bool(bits & ADVANCED_SETTINGS_FLAG),
        )


@dataclass(frozen=True, slots=True)
class CustomGadgets:
    """Per-gadget toggles, meaningful only when the selection is `CUSTOM`.

    The stored word marks disabled gadgets, so a clear bit means enabled.
    """

    bits: int
    bouncy_bombs: bool
    pressure_mines: bool
    spikeballs: bool
    sidekick_summoners: bool
    homing_boomerangs: bool
    sticky_bombs: bool
    weapon_crates: bool

    @classmethod
    def from_bits(cls, bits: int) -> CustomGadgets:
        bits = int(bits)
        return cls(
            bits=bits,
            bouncy_bombs=not bits & BOUNCY_BOMBS_BIT,
            pressure_mines=not bits & PRESSURE_MINES_BIT,
            spikeballs=not bits & SPIKEBALLS_BIT,
            sidekick_summoners=not bits & SIDEKICK_SUMMONERS_BIT,
            homing_boomerangs=not bits & HOMING_BOOMERANGS_BIT,
            sticky_bombs=not bits & STICKY_BOMBS_BIT,
            weapon_crates=not bits & WEAPON_CRATES_BIT,
        )


@dataclass(frozen=True, slots=True)
class GameSettings:
    flags: GameModeFlags
    max_players: int
    duration: int
    round_duration: int
    starting_lives: int
    scoring_type_id: int
    score_to_win: int
    game_speed: int
    damage_multiplier: int
    level_set_id: int
    # Legacy gadget model.
    item_spawn_rule_id: int | None = None
    weapon_spawn_rule_id: int | None = None
    gadget_spawn_rule_id: int | None = None
    disabled_gadgets: int | None = None
    variation: int | None = None
    # Current gadget model.
    gadget_selection: GadgetSelection | int | None = None
    custom_gadgets: CustomGadgets | None = None


@dataclass(frozen=True, slots=True)
class Hero:
    hero_id: int
    costume_id: int
    stance_index: int
    weapon_skin_1: int
    weapon_skin_2: int

    @property
    def packed_weapon_skins(self) -> int:
        return (int(self.weapon_skin_2) << 16) | int(self.weapon_skin_1)


@dataclass(frozen=True, slots=True)
class Player:
    color_scheme_id: int
    spawn_bot_id: int
    companion_id: int | None
    emitter_id: int
    player_theme_id: int
    taunts: tuple[int, ...]
    win_taunt_id: int
    lose_taunt_id: int
    # One word per 32 owned-emote slots.
    taunt_database: tuple[int, ...]
    avatar_id: int
    team: int
    connection_time: int
    heroes: tuple[Hero, ...]
    is_bot: bool
    handicaps_enabled: bool
    handicap_stock_count: int | None = None
    handicap_damage_done_multiplier: int | None = None
    handicap_damage_taken_multiplier: int | None = None


@dataclass(frozen=True, slots=True)
class Entity:
    entity_id: int
    name: str
    player: Player


@dataclass(frozen=True, slots=True)
class Death:
    timestamp: int
    entity_id: int


@dataclass(frozen=True, slots=True)
class Input:
    timestamp: int
    aim_up: bool
    drop: bool
    move_left: bool
    move_right: bool
    jump: bool
    prioritise_neutral_over_side: bool
    heavy_attack: bool
    light_attack: bool
    dodge_dash: bool
    pick_up_throw: bool
    taunt: int

    @classmethod
    def from_state(cls, timestamp: int, state: int) -> Input:
        state = int(state)
        return cls(
            timestamp=int(timestamp),
            aim_up=bool(state & AIM_UP_BIT),
            drop=bool(state & DROP_BIT),
            move_left=bool(state & MOVE_LEFT_BIT),
            move_right=bool(state & MOVE_RIGHT_BIT),
            jump=bool(state & JUMP_BIT),
            prioritise_neutral_over_side=bool(state & PRIORITISE_NEUTRAL_BIT),
            heavy_attack=bool(state & HEAVY_ATTACK_BIT),
            light_attack=bool(state & LIGHT_ATTACK_BIT),
            dodge_dash=bool(state & DODGE_DASH_BIT),
            pick_up_throw=bool(state & PICK_UP_THROW_BIT),
            taunt=taunt_slot(state >> TAUNT_SHIFT),
        )


@dataclass(frozen=True, slots=True)
class Replay:
    dialect: Dialect
    version: int
    version_check_1: int | None
    version_check_2: int | None
    length: int
    end_of_match_fanfare_id: int
    results: dict[int, int]
    deaths: tuple[Death, ...]
    random_seed: int
    playlist_id: int
    playlist_name: str | None
    online_game: bool
    game_settings: GameSettings
    level_id: int
    hero_count: int
    checksum: int
    entities: tuple[Entity, ...]
    inputs: dict[int, tuple[Input, ...]]
