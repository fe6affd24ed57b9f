from __future__ import annotations

import warnings
from typing import Final

from .types import Replay

# Oldest replay version the reader has been checked against real recordings.
OLDEST_TESTED_VERSION: Final[int] = 234


class ReplayVersionWarning(UserWarning):
    """Warnings related to the replay's recorded format version."""


def warn_on_untested_version(replay: Replay, *, oldest_tested: int = OLDEST_TESTED_VERSION) -> bool:
    """Warn if the replay predates the versions the decoder was validated on.

    Returns True if a warning was emitted.
    """

    if int(replay.version) >= int(oldest_tested):
        return False
    warnings.warn(
        f"Replay version {replay.version} is older than {oldest_tested}; decoded fields may be misaligned.",
        category=ReplayVersionWarning,
        stacklevel=2,
    )
    return True
