from __future__ import annotations

from functools import partial
from typing import Callable, Final, TypeVar

from .bitstream import BitReader
from .context import DecodeContext
from .dialect import DialectRules
from .errors import InvalidReplayDataError
from .types import (
    HERO_COUNT_MAX,
    HERO_COUNT_MIN,
    INPUT_STATE_BITS,
    TAUNT_SLOTS,
    CustomGadgets,
    Death,
    Entity,
    GadgetSelection,
    GameModeFlags,
    GameSettings,
    Hero,
    Input,
    Player,
)

ENTITY_ID_BITS: Final[int] = 5

T = TypeVar("T")


def read_stop_bit_list(reader: BitReader, read_item: Callable[[], T]) -> list[T]:
    """Read elements while the leading continuation bit is set."""
    items: list[T] = []
    while reader.read_bool():
        items.append(read_item())
    return items


def _gadget_selection(value: int) -> GadgetSelection | int:
    try:
        return GadgetSelection(value)
    except ValueError:
        return value


def read_game_settings(reader: BitReader, rules: DialectRules) -> GameSettings:
    flags = GameModeFlags.from_bits(reader.read_uint())
    base = dict(
        flags=flags,
        max_players=reader.read_uint(),
        duration=reader.read_uint(),
        round_duration=reader.read_uint(),
        starting_lives=reader.read_uint(),
        scoring_type_id=reader.read_uint(),
        score_to_win=reader.read_uint(),
        game_speed=reader.read_uint(),
        damage_multiplier=reader.read_uint(),
        level_set_id=reader.read_uint(),
    )
    if rules.gadget_model == "spawn_rules":
        return GameSettings(
            **base,
            item_spawn_rule_id=reader.read_uint(),
            weapon_spawn_rule_id=reader.read_uint(),
            gadget_spawn_rule_id=reader.read_uint(),
            disabled_gadgets=reader.read_uint(),
            variation=reader.read_uint(),
        )
    return GameSettings(
        **base,
        gadget_selection=_gadget_selection(reader.read_uint()),
        custom_gadgets=CustomGadgets.from_bits(reader.read_uint()),
    )


def read_hero(reader: BitReader, rules: DialectRules) -> Hero:
    hero_id = reader.read_uint()
    costume_id = reader.read_uint()
    stance_index = reader.read_uint()
    first = reader.read_ushort()
    second = reader.read_ushort()
    if rules.skin_order == "second_first":
        skin_1, skin_2 = second, first
    else:
        skin_1, skin_2 = first, second
    return Hero(
        hero_id=hero_id,
        costume_id=costume_id,
        stance_index=stance_index,
        weapon_skin_1=skin_1,
        weapon_skin_2=skin_2,
    )


def read_player(reader: BitReader, rules: DialectRules, hero_count: int) -> Player:
    color_scheme_id = reader.read_uint()
    spawn_bot_id = reader.read_uint()
    companion_id = reader.read_uint() if rules.has_companion else None
    emitter_id = reader.read_uint()
    player_theme_id = reader.read_uint()
    taunts = tuple(reader.read_uint() for _ in range(TAUNT_SLOTS))
    win_taunt_id = reader.read_ushort()
    lose_taunt_id = reader.read_ushort()
    taunt_database = tuple(read_stop_bit_list(reader, reader.read_uint))
    # Signed short widened to u32: 0xFFFF reads as 0xFFFFFFFF.
    avatar_id = reader.read_short() & 0xFFFF_FFFF
    team = reader.read_int()
    connection_time = reader.read_int()
    heroes = tuple(read_hero(reader, rules) for _ in range(hero_count))
    is_bot = reader.read_bool()
    handicaps_enabled = reader.read_bool()
    stock_count = damage_done = damage_taken = None
    if handicaps_enabled:
        stock_count = reader.read_uint()
        damage_done = reader.read_uint()
        damage_taken = reader.read_uint()
    return Player(
        color_scheme_id=color_scheme_id,
        spawn_bot_id=spawn_bot_id,
        companion_id=companion_id,
        emitter_id=emitter_id,
        player_theme_id=player_theme_id,
        taunts=taunts,
        win_taunt_id=win_taunt_id,
        lose_taunt_id=lose_taunt_id,
        taunt_database=taunt_database,
        avatar_id=avatar_id,
        team=team,
        connection_time=connection_time,
        heroes=heroes,
        is_bot=is_bot,
        handicaps_enabled=handicaps_enabled,
        handicap_stock_count=stock_count,
        handicap_damage_done_multiplier=damage_done,
        handicap_damage_taken_multiplier=damage_taken,
    )


def read_entity(reader: BitReader, rules: DialectRules, hero_count: int) -> Entity:
    entity_id = reader.read_int()
    name = reader.read_string()
    return Entity(entity_id=entity_id, name=name, player=read_player(reader, rules, hero_count))


def read_header(reader: BitReader, ctx: DecodeContext) -> None:
    ctx.random_seed = reader.read_int()
    if ctx.rules.version_in_header:
        ctx.set_version(reader.read_uint())
    ctx.playlist_id = reader.read_uint()
    if ctx.playlist_id != 0:
        ctx.playlist_name = reader.read_string()
    ctx.online_game = reader.read_bool()


def read_player_data(reader: BitReader, ctx: DecodeContext) -> None:
    rules = ctx.rules
    ctx.game_settings = read_game_settings(reader, rules)
    ctx.level_id = reader.read_uint()
    hero_count = reader.read_ushort()
    if not HERO_COUNT_MIN <= hero_count <= HERO_COUNT_MAX:
        raise InvalidReplayDataError(
            f"invalid hero count {hero_count}; must be between {HERO_COUNT_MIN} and {HERO_COUNT_MAX}"
        )
    ctx.hero_count = hero_count
    ctx.entities.extend(read_stop_bit_list(reader, partial(read_entity, reader, rules, hero_count)))
    if not ctx.entities:
        raise InvalidReplayDataError("no entities found in the replay")
    if rules.version_checks:
        ctx.version_check_1 = reader.read_uint()
        ctx.check_version(ctx.version_check_1, label="first version check")
    ctx.checksum = reader.read_uint()


def _read_input_batch(reader: BitReader, ctx: DecodeContext) -> None:
    entity_id = reader.read_bits(ENTITY_ID_BITS)
    count = reader.read_int()
    log = ctx.inputs.setdefault(entity_id, [])
    for _ in range(count):
        timestamp = reader.read_int()
        state = reader.read_bits(INPUT_STATE_BITS) if reader.read_bool() else 0
        log.append(Input.from_state(timestamp, state))


def read_inputs(reader: BitReader, ctx: DecodeContext) -> None:
    read_stop_bit_list(reader, partial(_read_input_batch, reader, ctx))


def _read_face(reader: BitReader) -> Death:
    entity_id = reader.read_bits(ENTITY_ID_BITS)
    timestamp = reader.read_int()
    return Death(timestamp=timestamp, entity_id=entity_id)


def read_faces(reader: BitReader, ctx: DecodeContext, *, knockout: bool) -> None:
    faces = read_stop_bit_list(reader, partial(_read_face, reader))
    if not knockout:
        return
    ctx.deaths = sorted(faces, key=lambda death: death.timestamp)


def _read_result(reader: BitReader) -> tuple[int, int]:
    entity_id = reader.read_bits(ENTITY_ID_BITS)
    return entity_id, reader.read_short()


def read_results(reader: BitReader, ctx: DecodeContext) -> None:
    ctx.length = reader.read_uint()
    if ctx.rules.version_checks:
        ctx.version_check_2 = reader.read_uint()
        ctx.check_version(ctx.version_check_2, label="second version check")
    if reader.read_bool():
        for entity_id, result in read_stop_bit_list(reader, partial(_read_result, reader)):
            ctx.results[entity_id] = result
    ctx.end_of_match_fanfare_id = reader.read_uint()
