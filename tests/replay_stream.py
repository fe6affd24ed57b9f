from __future__ import annotations

"""Synthetic replay streams for tests.

The library only reads replays; this writer mirrors the wire layout so tests
can assemble exact plaintext streams record by record.
"""

import zlib
from dataclasses import replace

from construct import Float32b, Int16sb

from brawlreplay.checksum import calculate_checksum
from brawlreplay.cipher import apply_key
from brawlreplay.dialect import CURRENT_RULES, LEGACY_RULES, Dialect, DialectRules
from brawlreplay.types import CustomGadgets, Entity, GadgetSelection, GameModeFlags, GameSettings, Hero, Player

TAG_INPUTS = 1
TAG_END = 2
TAG_HEADER = 3
TAG_PLAYER_DATA = 4
TAG_KNOCKOUTS = 5
TAG_RESULTS = 6
TAG_FACES = 7

CURRENT_VERSION = 240
LEGACY_VERSION = 200


class BitWriter:
    def __init__(self) -> None:
        self._bits: list[int] = []

    def __len__(self) -> int:
        return len(self._bits)

    def bits(self, value: int, count: int) -> BitWriter:
        for shift in range(count - 1, -1, -1):
            self._bits.append((int(value) >> shift) & 1)
        return self

    def flag(self, value: bool) -> BitWriter:
        return self.bits(1 if value else 0, 1)

    def ushort(self, value: int) -> BitWriter:
        return self.bits(int(value) & 0xFFFF, 16)

    def short(self, value: int) -> BitWriter:
        return self.bits(int.from_bytes(Int16sb.build(int(value)), "big"), 16)

    def uint(self, value: int) -> BitWriter:
        return self.bits(int(value) & 0xFFFF_FFFF, 32)

    def float32(self, value: float) -> BitWriter:
        return self.bits(int.from_bytes(Float32b.build(float(value)), "big"), 32)

    def raw(self, data: bytes) -> BitWriter:
        for byte in data:
            self.bits(byte, 8)
        return self

    def string(self, text: str) -> BitWriter:
        data = text.encode("utf-8")
        self.ushort(len(data))
        return self.raw(data)

    def to_bytes(self) -> bytes:
        bits = self._bits + [0] * (-len(self._bits) % 8)
        out = bytearray()
        for i in range(0, len(bits), 8):
            byte = 0
            for bit in bits[i : i + 8]:
                byte = (byte << 1) | bit
            out.append(byte)
        return bytes(out)


def rules_of(dialect: Dialect) -> DialectRules:
    return LEGACY_RULES if dialect is Dialect.LEGACY else CURRENT_RULES


def make_hero(**overrides: int) -> Hero:
    fields = dict(hero_id=3, costume_id=0, stance_index=1, weapon_skin_1=0, weapon_skin_2=0)
    fields.update(overrides)
    return Hero(**fields)


def make_player(*, hero_count: int = 1, dialect: Dialect = Dialect.CURRENT, **overrides: object) -> Player:
    player = Player(
        color_scheme_id=2,
        spawn_bot_id=1,
        companion_id=0 if dialect is Dialect.LEGACY else None,
        emitter_id=0,
        player_theme_id=0,
        taunts=(1, 0, 0, 0, 0, 0, 0, 0),
        win_taunt_id=0,
        lose_taunt_id=0,
        taunt_database=(0b111,),
        avatar_id=0,
        team=1,
        connection_time=0,
        heroes=tuple(make_hero() for _ in range(hero_count)),
        is_bot=False,
        handicaps_enabled=False,
    )
    return replace(player, **overrides)


def make_settings(dialect: Dialect = Dialect.CURRENT, **overrides: object) -> GameSettings:
    base = dict(
        flags=GameModeFlags.from_bits(0b101),
        max_players=2,
        duration=480,
        round_duration=0,
        starting_lives=3,
        scoring_type_id=1,
        score_to_win=0,
        game_speed=100,
        damage_multiplier=100,
        level_set_id=7,
    )
    if dialect is Dialect.LEGACY:
        settings = GameSettings(
            **base,
            item_spawn_rule_id=1,
            weapon_spawn_rule_id=2,
            gadget_spawn_rule_id=3,
            disabled_gadgets=0b1000001,
            variation=4,
        )
    else:
        settings = GameSettings(
            **base,
            gadget_selection=GadgetSelection.CUSTOM,
            custom_gadgets=CustomGadgets.from_bits(0b0000101),
        )
    return replace(settings, **overrides)


def write_tag(w: BitWriter, rules: DialectRules, tag: int) -> None:
    w.bits(tag, rules.tag_bits)


def write_game_settings(w: BitWriter, settings: GameSettings, rules: DialectRules) -> None:
    w.uint(settings.flags.bits)
    for value in (
        settings.max_players,
        settings.duration,
        settings.round_duration,
        settings.starting_lives,
        settings.scoring_type_id,
        settings.score_to_win,
        settings.game_speed,
        settings.damage_multiplier,
        settings.level_set_id,
    ):
        w.uint(value)
    if rules.gadget_model == "spawn_rules":
        w.uint(settings.item_spawn_rule_id or 0)
        w.uint(settings.weapon_spawn_rule_id or 0)
        w.uint(settings.gadget_spawn_rule_id or 0)
        w.uint(settings.disabled_gadgets or 0)
        w.uint(settings.variation or 0)
    else:
        w.uint(int(settings.gadget_selection or 0))
        w.uint(settings.custom_gadgets.bits if settings.custom_gadgets is not None else 0)


def write_hero(w: BitWriter, hero: Hero, rules: DialectRules) -> None:
    w.uint(hero.hero_id).uint(hero.costume_id).uint(hero.stance_index)
    if rules.skin_order == "second_first":
        w.ushort(hero.weapon_skin_2).ushort(hero.weapon_skin_1)
    else:
        w.ushort(hero.weapon_skin_1).ushort(hero.weapon_skin_2)


def write_player(w: BitWriter, player: Player, rules: DialectRules) -> None:
    w.uint(player.color_scheme_id).uint(player.spawn_bot_id)
    if rules.has_companion:
        w.uint(player.companion_id or 0)
    w.uint(player.emitter_id).uint(player.player_theme_id)
    for taunt_id in player.taunts:
        w.uint(taunt_id)
    w.ushort(player.win_taunt_id).ushort(player.lose_taunt_id)
    for word in player.taunt_database:
        w.flag(True).uint(word)
    w.flag(False)
    w.ushort(player.avatar_id).uint(player.team).uint(player.connection_time)
    for hero in player.heroes:
        write_hero(w, hero, rules)
    w.flag(player.is_bot).flag(player.handicaps_enabled)
    if player.handicaps_enabled:
        w.uint(player.handicap_stock_count or 0)
        w.uint(player.handicap_damage_done_multiplier or 0)
        w.uint(player.handicap_damage_taken_multiplier or 0)


def write_header(
    w: BitWriter,
    rules: DialectRules,
    *,
    random_seed: int = 1234,
    version: int = CURRENT_VERSION,
    playlist_id: int = 0,
    playlist_name: str = "",
    online_game: bool = True,
) -> None:
    write_tag(w, rules, TAG_HEADER)
    w.uint(random_seed)
    if rules.version_in_header:
        w.uint(version)
    w.uint(playlist_id)
    if playlist_id != 0:
        w.string(playlist_name)
    w.flag(online_game)


def write_player_data(
    w: BitWriter,
    rules: DialectRules,
    *,
    settings: GameSettings,
    level_id: int,
    hero_count: int,
    entities: list[Entity],
    checksum: int,
    version_check: int = CURRENT_VERSION,
) -> None:
    write_tag(w, rules, TAG_PLAYER_DATA)
    write_game_settings(w, settings, rules)
    w.uint(level_id).ushort(hero_count)
    for entity in entities:
        w.flag(True).uint(entity.entity_id).string(entity.name)
        write_player(w, entity.player, rules)
    w.flag(False)
    if rules.version_checks:
        w.uint(version_check)
    w.uint(checksum)


def write_results(
    w: BitWriter,
    rules: DialectRules,
    *,
    length: int = 3600,
    results: dict[int, int] | None = None,
    fanfare_id: int = 9,
    version_check: int = CURRENT_VERSION,
) -> None:
    write_tag(w, rules, TAG_RESULTS)
    w.uint(length)
    if rules.version_checks:
        w.uint(version_check)
    w.flag(results is not None)
    if results is not None:
        for entity_id, result in results.items():
            w.flag(True).bits(entity_id, 5).short(result)
        w.flag(False)
    w.uint(fanfare_id)


def write_faces(w: BitWriter, rules: DialectRules, faces: list[tuple[int, int]], *, knockout: bool = True) -> None:
    write_tag(w, rules, TAG_KNOCKOUTS if knockout else TAG_FACES)
    for entity_id, timestamp in faces:
        w.flag(True).bits(entity_id, 5).uint(timestamp)
    w.flag(False)


def write_inputs(w: BitWriter, rules: DialectRules, batches: list[tuple[int, list[tuple[int, int | None]]]]) -> None:
    write_tag(w, rules, TAG_INPUTS)
    for entity_id, frames in batches:
        w.flag(True).bits(entity_id, 5).uint(len(frames))
        for timestamp, state in frames:
            w.uint(timestamp)
            w.flag(state is not None)
            if state is not None:
                w.bits(state, 14)
    w.flag(False)


def write_end(w: BitWriter, rules: DialectRules) -> None:
    write_tag(w, rules, TAG_END)


def build_stream(
    *,
    dialect: Dialect = Dialect.CURRENT,
    version: int | None = None,
    entities: list[Entity] | None = None,
    hero_count: int = 1,
    level_id: int = 4,
    checksum: int | None = None,
    results: dict[int, int] | None = None,
    settings: GameSettings | None = None,
) -> bytes:
    """Plaintext stream: [header] player data, results, end."""
    rules = rules_of(dialect)
    if version is None:
        version = LEGACY_VERSION if dialect is Dialect.LEGACY else CURRENT_VERSION
    if entities is None:
        entities = [Entity(entity_id=1, name="Bödvar fan", player=make_player(hero_count=hero_count, dialect=dialect))]
    if checksum is None:
        checksum = calculate_checksum(entities, level_id)
    w = BitWriter()
    if dialect is Dialect.LEGACY:
        w.uint(version)
    write_header(w, rules, version=version)
    write_player_data(
        w,
        rules,
        settings=settings if settings is not None else make_settings(dialect),
        level_id=level_id,
        hero_count=hero_count,
        entities=entities,
        checksum=checksum,
        version_check=version,
    )
    write_results(w, rules, results=results if results is not None else {1: 1}, version_check=version)
    write_end(w, rules)
    return w.to_bytes()


def pack(plaintext: bytes) -> bytes:
    return zlib.compress(apply_key(plaintext))
