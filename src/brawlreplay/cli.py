from __future__ import annotations

import warnings
from pathlib import Path

import typer

from .checksum import calculate_checksum
from .config import default_output_path, resolve_replay_path
from .errors import ReplayError
from .export import replay_to_json
from .reader import read_replay_file
from .trace import DecodeTrace
from .types import Replay
from .versioning import warn_on_untested_version

app = typer.Typer(add_completion=False)


def _load(replay: str, *, replay_dir: Path | None, ignore_checks: bool, trace: Path | None) -> tuple[Path, Replay]:
    path = resolve_replay_path(replay, replay_dir=replay_dir)
    if not path.is_file():
        typer.echo(f"error: replay not found: {path}", err=True)
        raise typer.Exit(code=1)
    decode_trace = DecodeTrace(trace) if trace is not None else None
    try:
        decoded = read_replay_file(path, ignore_checks=ignore_checks, trace=decode_trace)
    except ReplayError as exc:
        typer.echo(f"error: {path.name}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        warn_on_untested_version(decoded)
    for warning in caught:
        typer.echo(f"warning: {warning.message}", err=True)
    return path, decoded


@app.command("decode")
def cmd_decode(
    replay: str = typer.Argument(..., help="replay path, or a recording name inside the replay folder"),
    output: Path | None = typer.Argument(None, help="output .json path (default: ./<replay name>.json)"),
    ignore_checks: bool = typer.Option(
        False,
        "--ignore-checks",
        "-i",
        help="decode even if the checksum or version checks do not match",
    ),
    trace: Path | None = typer.Option(None, "--trace", help="append a decode trace to this file"),
    replay_dir: Path | None = typer.Option(None, "--replay-dir", help="replay folder (default: ~/BrawlhallaReplays)"),
) -> None:
    """Decode a replay and write it as JSON."""
    path, decoded = _load(replay, replay_dir=replay_dir, ignore_checks=ignore_checks, trace=trace)
    dest = output if output is not None else default_output_path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(replay_to_json(decoded))
    typer.echo(f"extracted {dest}")


@app.command("verify")
def cmd_verify(
    replay: str = typer.Argument(..., help="replay path, or a recording name inside the replay folder"),
    replay_dir: Path | None = typer.Option(None, "--replay-dir", help="replay folder (default: ~/BrawlhallaReplays)"),
) -> None:
    """Report stored vs. recomputed integrity fields without failing on them."""
    _path, decoded = _load(replay, replay_dir=replay_dir, ignore_checks=True, trace=None)
    computed = calculate_checksum(decoded.entities, decoded.level_id)
    ok = computed == decoded.checksum
    typer.echo(f"dialect={decoded.dialect.value} version={decoded.version}")
    typer.echo(f"checksum stored={decoded.checksum} computed={computed}")
    for label, value in (("version_check_1", decoded.version_check_1), ("version_check_2", decoded.version_check_2)):
        if value is None:
            continue
        typer.echo(f"{label}={value}")
        ok = ok and value == decoded.version
    if not ok:
        typer.echo("mismatch", err=True)
        raise typer.Exit(code=1)
    typer.echo("ok")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="brawlreplay", args=argv)


if __name__ == "__main__":
    main()
