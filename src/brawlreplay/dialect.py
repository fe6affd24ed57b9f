from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal, TypeAlias

from .bitstream import BitReader

# Replays recorded before this version use the legacy layout.
CURRENT_MIN_VERSION: Final[int] = 220

# Width of the probe that tells the two layouts apart. A current replay opens
# with a record tag, which is never zero; a legacy replay opens with its
# 32-bit version, whose top bits are zero.
PROBE_BITS: Final[int] = 3

GadgetModel: TypeAlias = Literal["spawn_rules", "selection"]
SkinOrder: TypeAlias = Literal["first_second", "second_first"]


class Dialect(str, Enum):
    LEGACY = "legacy"
    CURRENT = "current"


@dataclass(frozen=True, slots=True)
class DialectRules:
    dialect: Dialect
    tag_bits: int
    version_in_header: bool
    version_checks: bool
    has_companion: bool
    gadget_model: GadgetModel
    skin_order: SkinOrder
    invalid_terminal_tag: int | None


LEGACY_RULES: Final[DialectRules] = DialectRules(
    dialect=Dialect.LEGACY,
    tag_bits=4,
    version_in_header=False,
    version_checks=False,
    has_companion=True,
    gadget_model="spawn_rules",
    skin_order="first_second",
    invalid_terminal_tag=8,
)

CURRENT_RULES: Final[DialectRules] = DialectRules(
    dialect=Dialect.CURRENT,
    tag_bits=3,
    version_in_header=True,
    version_checks=True,
    has_companion=False,
    gadget_model="selection",
    skin_order="second_first",
    invalid_terminal_tag=None,
)

_RULES: Final[dict[Dialect, DialectRules]] = {
    Dialect.LEGACY: LEGACY_RULES,
    Dialect.CURRENT: CURRENT_RULES,
}


def rules_for(dialect: Dialect) -> DialectRules:
    return _RULES[dialect]


def dialect_for_version(version: int) -> Dialect:
    if int(version) < CURRENT_MIN_VERSION:
        return Dialect.LEGACY
    return Dialect.CURRENT


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of probing the head of the plaintext stream.

    `version` is set for legacy streams (it leads the stream); `first_tag` is
    set for current streams (the probe bits were the first record tag).
    """

    rules: DialectRules
    version: int | None = None
    first_tag: int | None = None


def resolve(reader: BitReader) -> Resolution:
    head = reader.read_bits(PROBE_BITS)
    if head != 0:
        return Resolution(rules=CURRENT_RULES, first_tag=head)
    version = reader.read_bits(32 - PROBE_BITS)
    return Resolution(rules=LEGACY_RULES, version=version)
