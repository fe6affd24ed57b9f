from __future__ import annotations

from dataclasses import dataclass, field

from .dialect import DialectRules, dialect_for_version
from .errors import InvalidReplayDataError, VersionMismatchError
from .types import Death, Entity, GameSettings, Input, Replay


@dataclass(slots=True)
class DecodeContext:
    """Mutable state of a single decode.

    Record decoders fill it in as tags arrive. Once the dispatch loop ends,
    `freeze` checks that player data arrived and hands the state off as an
    immutable `Replay`.
    """

    rules: DialectRules
    ignore_checks: bool = False
    version: int = 0
    version_check_1: int | None = None
    version_check_2: int | None = None
    length: int = 0
    end_of_match_fanfare_id: int = 0
    results: dict[int, int] = field(default_factory=dict)
    deaths: list[Death] = field(default_factory=list)
    random_seed: int = 0
    playlist_id: int = 0
    playlist_name: str | None = None
    online_game: bool = False
    game_settings: GameSettings | None = None
    level_id: int = 0
    hero_count: int | None = None
    checksum: int = 0
    entities: list[Entity] = field(default_factory=list)
    inputs: dict[int, list[Input]] = field(default_factory=dict)

    def set_version(self, version: int) -> None:
        self.version = int(version)
        expected = dialect_for_version(self.version)
        if expected is not self.rules.dialect and not self.ignore_checks:
            raise VersionMismatchError(
                f"version {self.version} belongs to the {expected.value} layout "
                f"but the stream uses the {self.rules.dialect.value} layout"
            )

    def check_version(self, value: int, *, label: str) -> None:
        if int(value) != self.version and not self.ignore_checks:
            raise VersionMismatchError(f"{label} ({value}) does not match replay version {self.version}")

    def freeze(self) -> Replay:
        game_settings = self.game_settings
        hero_count = self.hero_count
        if not self.entities or game_settings is None or hero_count is None:
            raise InvalidReplayDataError("replay contains no player data")
        return Replay(
            dialect=self.rules.dialect,
            version=self.version,
            version_check_1=self.version_check_1,
            version_check_2=self.version_check_2,
            length=self.length,
            end_of_match_fanfare_id=self.end_of_match_fanfare_id,
            results=dict(self.results),
            deaths=tuple(self.deaths),
            random_seed=self.random_seed,
            playlist_id=self.playlist_id,
            playlist_name=self.playlist_name,
            online_game=self.online_game,
            game_settings=game_settings,
            level_id=self.level_id,
            hero_count=hero_count,
            checksum=self.checksum,
            entities=tuple(self.entities),
            inputs={entity_id: tuple(log) for entity_id, log in self.inputs.items()},
        )
