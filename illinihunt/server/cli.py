"""IlliniHunt CLI: serve the API, rank projects, manage config."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from pydantic.fields import FieldInfo
from rich import box
from rich.console import Console
from rich.table import Table

from illinihunt.config import IlliniHuntConfig, TrendingConfig, loadConfig
from illinihunt.ranking import FEATURED_PROJECTS_COUNT, TrendingPeriod
from illinihunt.service import svcFeatured, svcPeriods, svcTrending
from illinihunt.state import createAppState

logger = logging.getLogger("illinihunt")


def _checkFormat(format: str) -> None:
    if format not in ("human", "json"):
        raise typer.BadParameter(f"Invalid format {format!r}; choose human or json")


def _fmtVal(v: Any) -> str:
    if v is None:
        return "[dim]—[/dim]"
    if isinstance(v, TrendingPeriod):
        return v.value
    return str(v)


_SERVER_KEYS = ("db_path", "host", "port")


def _configKeys() -> list[str]:
    """Settable keys: the server fields plus trending.<field>."""
    return [*_SERVER_KEYS, *(f"trending.{k}" for k in TrendingConfig.model_fields)]


def _fieldOf(key: str) -> FieldInfo:
    section, _, name = key.rpartition(".")
    model = TrendingConfig if section == "trending" else IlliniHuntConfig
    return model.model_fields[name]


def _typeName(key: str) -> str:
    ann = _fieldOf(key).annotation
    if ann is TrendingPeriod:
        return "|".join(p.value for p in TrendingPeriod)
    return getattr(ann, "__name__", str(ann))


def _readKey(cfg: IlliniHuntConfig, key: str) -> Any:
    node: Any = cfg.model_dump(mode="json")
    for part in key.split("."):
        node = node[part]
    return node


def _fail(format: str, label: str, message: str) -> NoReturn:
    if format == "json":
        print(json.dumps({"ok": False, "error": message}))
    else:
        _console.print(f"[red]{label}:[/red] {message}")
    raise typer.Exit(1)


def _renderResults(title: str, results: list[dict]) -> None:
    t = Table(title=title, box=box.SIMPLE, padding=(0, 1))
    t.add_column("#", justify="right", style="dim")
    t.add_column("project")
    t.add_column("upvotes", justify="right")
    t.add_column("comments", justify="right")
    t.add_column("age (h)", justify="right")
    t.add_column("score", justify="right", style="bold")
    for r in results:
        p = r["project"]
        t.add_row(
            str(r["rank"]),
            f"{p['name']} [dim]{p['tagline']}[/dim]",
            str(p["upvotes_count"] or 0),
            str(p["comments_count"] or 0),
            f"{r['age_hours']:.1f}",
            f"{r['score']:.4f}",
        )
    _console.print(t)


def _runRanking(coro_factory, format: str) -> dict:
    state = createAppState()
    try:
        result = asyncio.run(coro_factory(state))
    finally:
        state.db.close()
    if "error" in result:
        _fail(format, "Error", result["error"])
    return result


# ============================================================
# CLI (typer)
# ============================================================

_cli = typer.Typer(
    name="illinihunt",
    help="Project showcase with trending ranking.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
_config_cli = typer.Typer(help="Read/write [bold]~/.illinihunt/config.json[/bold].")
_cli.add_typer(_config_cli, name="config")

_console = Console()


@_cli.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Port (default from config)"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from illinihunt.server.app import createApp

    logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")
    cfg = loadConfig()
    uvicorn.run(createApp(cfg), host=host or cfg.host, port=port or cfg.port)


@_cli.command()
def trending(
    period: TrendingPeriod | None = typer.Option(
        None, "--period", "-p", help="today|week|month|all (default from config)"
    ),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, help="Max results"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Rank recent projects by trending score."""
    _checkFormat(format)
    result = _runRanking(lambda s: svcTrending(s, period, limit), format)
    if format == "json":
        print(json.dumps(result))
        return
    if not result["results"]:
        _console.print(f"No trending projects for [bold]{result['label']}[/bold].")
        return
    _renderResults(f"Trending {result['label']}", result["results"])


@_cli.command()
def featured(
    limit: int = typer.Option(FEATURED_PROJECTS_COUNT, "--limit", "-n", min=1),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Featured projects: top of an oversized trending pool."""
    _checkFormat(format)
    result = _runRanking(lambda s: svcFeatured(s, limit), format)
    if format == "json":
        print(json.dumps(result))
        return
    _renderResults(f"Featured (pool of {result['pool_size']})", result["results"])


@_cli.command()
def periods(
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """List trending periods and their labels."""
    _checkFormat(format)
    rows = svcPeriods()
    if format == "json":
        print(json.dumps(rows))
        return
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("value", style="dim")
    t.add_column("label")
    for row in rows:
        t.add_row(row["value"], row["label"])
    _console.print(t)


@_config_cli.command("list")
def config_list(
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Pretty-print the current config grouped by section."""
    _checkFormat(format)
    cfg = loadConfig()

    if format == "json":
        print(cfg.model_dump_json())
        raise typer.Exit()

    defaults = IlliniHuntConfig()
    sections = [
        ("Server", cfg, defaults, list(_SERVER_KEYS)),
        ("Trending", cfg.trending, defaults.trending, list(TrendingConfig.model_fields)),
    ]
    for title, sub, def_sub, keys in sections:
        _console.print(f"\n[bold]{title}[/bold]")
        t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
        t.add_column("key", style="dim")
        t.add_column("val")
        for key in keys:
            val, default = getattr(sub, key), getattr(def_sub, key)
            fmt = _fmtVal(val)
            if val != default:
                fmt = f"[yellow]{fmt}[/yellow]"
            t.add_row(key, fmt)
        _console.print(t)


@_config_cli.command("get")
def config_get(
    key: str = typer.Argument(help="Config key, e.g. port or trending.default_period"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Get a single config value."""
    _checkFormat(format)
    if key not in _configKeys():
        _fail(format, "Unknown key", f"{key}; choose one of {', '.join(_configKeys())}")
    value = _readKey(loadConfig(), key)
    if format == "json":
        print(json.dumps({"key": key, "value": value, "type": _typeName(key)}))
    else:
        _console.print(f"[bold]{key}[/bold] = {_fmtVal(value)}  [dim]({_typeName(key)})[/dim]")


@_config_cli.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. trending.default_limit"),
    value: str = typer.Argument(help="New value, validated against the config schema"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Set a config value."""
    _checkFormat(format)
    from illinihunt.config import CONFIG_PATH

    if key not in _configKeys():
        _fail(format, "Unknown key", f"{key}; choose one of {', '.join(_configKeys())}")

    raw: dict = {}
    if CONFIG_PATH.exists():
        with contextlib.suppress(json.JSONDecodeError):
            raw = json.loads(CONFIG_PATH.read_text())

    section, _, name = key.rpartition(".")
    try:
        if section == "trending":
            trending = TrendingConfig(**{**raw.get("trending", {}), name: value})
            stored = trending.model_dump(mode="json")[name]
            raw["trending"] = {**raw.get("trending", {}), name: stored}
        else:
            server = IlliniHuntConfig(**{**raw, name: value})
            stored = server.model_dump(mode="json")[name]
            raw[name] = stored
    except ValidationError as e:
        message = "; ".join(err["msg"] for err in e.errors())
        _fail(format, "Invalid value", f"{key}={value!r}: {message}")

    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(raw, indent=2) + "\n")
    if format == "json":
        print(json.dumps({"ok": True, "key": key, "value": stored}))
    else:
        _console.print(f"[green]Set[/green] {key} = {stored!r}")


def main() -> None:
    _cli()


if __name__ == "__main__":
    main()
