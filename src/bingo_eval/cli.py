from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from .config import resolve_parameters
from .core.board import create_board
from .core.patterns import BINGO_LETTERS
from .errors import BingoError
from .logging_setup import setup_logging
from .rng import create_rng
from .serialize import build_run_meta, emit_position_csv, emit_report_json, emit_transcript_json
from .simulate import MODES, run_simulation, summarize
from .verify import board_uniformity_report
from .version import __version__

app = typer.Typer(help="5x5 bingo board evaluator CLI")


@app.callback(invoke_without_command=True)
def common_options(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show application version and exit", is_eager=True
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _console(colors: str) -> Console:
    colors = (colors or "auto").lower()
    if colors == "always":
        return Console(force_terminal=True)
    if colors == "never":
        return Console(no_color=True, force_terminal=False)
    return Console()


def _resolve(
    config: Optional[str], cli_overrides: Dict[str, Any]
) -> Tuple[Dict[str, Any], str, str, Optional[int]]:
    resolved, params_hash, _cfg_path = resolve_parameters(
        config_path_str=config, cli_overrides=cli_overrides
    )
    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
    )
    seed_cfg = resolved.get("seed") or {}
    value = seed_cfg.get("value")
    engine = str(seed_cfg.get("engine") or "system")
    # a seed asks for reproducibility, which OS entropy cannot give
    if value is not None and engine == "system":
        engine = "py_random"
    return resolved, params_hash, engine, (int(value) if value is not None else None)


def _common_overrides(
    *, seed: Optional[int], engine: Optional[str], log_level: Optional[str], log_file: Optional[str], colors: Optional[str]
) -> Dict[str, Any]:
    cli_overrides: Dict[str, Any] = {}
    if seed is not None:
        cli_overrides["seed.value"] = seed
    if engine:
        cli_overrides["seed.engine"] = engine
    if log_level:
        cli_overrides["log_level"] = log_level
    if log_file:
        cli_overrides["log_file"] = log_file
    if colors:
        cli_overrides["colors"] = colors
    return cli_overrides


@app.command()
def board(
    seed: int = typer.Option(None, "--seed", help="Seed for a reproducible board"),
    engine: str = typer.Option(None, "--engine", help="system|py_random|numpy_pcg64"),
    colors: str = typer.Option(None, "--colors", help="auto|always|never"),
) -> None:
    """Deal one board and print it."""
    resolved, _hash, rng_engine, seed_value = _resolve(
        None,
        _common_overrides(seed=seed, engine=engine, log_level=None, log_file=None, colors=colors),
    )
    new_board = create_board(create_rng(rng_engine, seed_value))
    table = Table(show_lines=True)
    for letter in BINGO_LETTERS:
        table.add_column(letter, justify="center")
    for row in new_board.rows():
        table.add_row(*(str(n) for n in row))
    _console(str(resolved.get("colors", "auto"))).print(table)


@app.command()
def simulate(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    games: int = typer.Option(None, "--games", "-n", help="Number of games to play"),
    mode: str = typer.Option(None, "--mode", help="ai_vs_ai|random_vs_ai"),
    seed: int = typer.Option(None, "--seed", help="Base seed; each game derives its own"),
    engine: str = typer.Option(None, "--engine", help="system|py_random|numpy_pcg64"),
    out_transcript: str = typer.Option(None, "--out-transcript", help="transcript.json output path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    colors: str = typer.Option(None, "--colors", help="auto|always|never"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Play games to completion and summarize who won."""
    cli_overrides = _common_overrides(
        seed=seed, engine=engine, log_level=log_level, log_file=log_file, colors=colors
    )
    if games is not None:
        cli_overrides["games"] = games
    if mode:
        cli_overrides["mode"] = mode
    if out_transcript:
        cli_overrides["out_transcript"] = out_transcript

    resolved, params_hash, rng_engine, seed_value = _resolve(config, cli_overrides)
    game_mode = str(resolved.get("mode", "ai_vs_ai"))
    if game_mode not in MODES:
        raise typer.BadParameter(f"mode must be one of {', '.join(MODES)}", param_hint="--mode")

    if dry_run:
        typer.echo(f"Mode: {game_mode}")
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    start_time = time.time()
    sessions = run_simulation(
        games=int(resolved.get("games", 1)), mode=game_mode, engine=rng_engine, seed=seed_value
    )
    elapsed = time.time() - start_time
    summary = summarize(sessions)

    table = Table(title=f"{summary.games} games ({game_mode}) in {elapsed:.2f}s")
    table.add_column("Result")
    table.add_column("Count", justify="right")
    for party, count in summary.wins.items():
        table.add_row(f"{party} wins", str(count))
    table.add_row("ties", str(summary.ties))
    table.add_row("calls (min/avg/max)", f"{summary.min_calls}/{summary.avg_calls:.1f}/{summary.max_calls}")
    _console(str(resolved.get("colors", "auto"))).print(table)

    if resolved.get("out_transcript"):
        out_path = Path(resolved["out_transcript"])
        run_meta = build_run_meta(
            app_version=__version__,
            params_hash=params_hash,
            seed=seed_value,
            rng_engine=rng_engine,
        )
        emit_transcript_json(
            out_path, sessions=sessions, run_meta=run_meta, mkdirs=(not no_mkdirs), overwrite=force
        )
        typer.echo(f"Transcript: {out_path}")

    raise typer.Exit(code=0)


@app.command()
def uniformity(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    samples: int = typer.Option(None, "--samples", help="Number of boards to deal"),
    alpha: float = typer.Option(None, "--alpha", help="Significance level"),
    seed: int = typer.Option(None, "--seed", help="Seed for reproducible sampling"),
    engine: str = typer.Option(None, "--engine", help="system|py_random|numpy_pcg64"),
    out_report: str = typer.Option(None, "--out-report", help="report.json output path"),
    position_csv: str = typer.Option(None, "--position-csv", help="Per-position counts CSV"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Deal many boards and test that every number is equally likely at every cell."""
    cli_overrides = _common_overrides(
        seed=seed, engine=engine, log_level=log_level, log_file=None, colors=None
    )
    if samples is not None:
        cli_overrides["samples"] = samples
    if alpha is not None:
        cli_overrides["alpha"] = alpha
    if out_report:
        cli_overrides["out_report"] = out_report
    if position_csv:
        cli_overrides["position_csv"] = position_csv

    resolved, _hash, rng_engine, seed_value = _resolve(config, cli_overrides)
    report = board_uniformity_report(
        int(resolved.get("samples", 10000)),
        rng=create_rng(rng_engine, seed_value),
        alpha=float(resolved.get("alpha", 0.01)),
    )
    test = report["tests"]["position"]  # type: ignore[index]
    typer.echo(f"Boards: {report['samples']} (expected {report['expected_per_cell']} per cell)")
    typer.echo(f"Cell counts: min {report['min_count']}, max {report['max_count']}")
    typer.echo(f"chi2 per cell (df={test['df']}), Bonferroni-adjusted p={test['p_value']}")

    if resolved.get("out_report"):
        emit_report_json(
            Path(resolved["out_report"]), report=report, mkdirs=(not no_mkdirs), overwrite=force
        )
    if resolved.get("position_csv"):
        emit_position_csv(
            Path(resolved["position_csv"]),
            by_position=report["position_frequencies"],  # type: ignore[arg-type]
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )

    raise typer.Exit(code=0 if test["uniform"] else 1)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0
    except BingoError as e:
        typer.echo(f"error: {e}", err=True)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
