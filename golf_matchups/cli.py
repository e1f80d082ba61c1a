"""
Command-line interface for the golf matchup value engine.
Built with Click and Rich.
"""

import sys
import json
import logging
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from . import __version__
from .config import get_config
from .comparison import MatchupComparisonEngine
from .course_fit import CourseFitAdapter, CourseFitClient
from .filters import apply_filter, list_filters
from .loader import load_field, group_by_matchup
from .matchup_filters import (
    MatchupFilterCriteria, FILTER_PRESETS, filter_matchups, matchup_badges,
    highlight_player, value_players,
)
from .models import MatchupComparison
from .odds import implied_probability, remove_vig, vig_margin, to_american, resolve_format

console = Console()
logging.basicConfig(
    level=getattr(logging, get_config().log_level, logging.INFO),
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def _fail(message: str):
    console.print(f"[red]Error: {message}[/]")
    sys.exit(1)


def _echo_json(data: Any):
    click.echo(json.dumps(data, indent=2, default=str))


def _coerce(value: str) -> Any:
    """Interpret a --option value: booleans, ints, floats, otherwise text."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    return value


def _parse_options(pairs: Tuple[str, ...]) -> Dict[str, Any]:
    options = {}
    for pair in pairs:
        if "=" not in pair:
            _fail(f"Options must look like key=value, got '{pair}'")
        key, value = pair.split("=", 1)
        options[key.strip().replace("-", "_")] = _coerce(value.strip())
    return options


def _load(field_file: str):
    try:
        return load_field(field_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _course_fit_adapter() -> Optional[CourseFitAdapter]:
    config = get_config()
    errors = config.validate_config(require_course_fit=True)
    if errors:
        for error in errors:
            console.print(f"[yellow]{error}[/]")
        console.print("[yellow]Continuing with neutral course fit.[/]")
        return None
    return CourseFitAdapter(CourseFitClient())


def _fmt(value: Optional[float], spec: str = ".2f", signed: bool = False) -> str:
    if value is None:
        return "-"
    return format(value, ("+" if signed else "") + spec)


def _fmt_odds(odds: Optional[float], fmt=None) -> str:
    american = to_american(odds, fmt)
    if american is None:
        return "-"
    return f"+{american}" if american > 0 else str(american)


def _compare_all(players) -> Dict:
    engine = MatchupComparisonEngine()
    return engine.compare_all(group_by_matchup(players))


@click.group()
@click.version_option(version=__version__, prog_name="Golf Matchup Value Engine")
def cli():
    """Golf Matchup Value Engine - find the edge in 2-ball and 3-ball matchups."""
    pass


@cli.command("filters")
def show_filters():
    """List the available player filters."""
    table = Table(title="Filters", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Sort Keys", style="green")
    table.add_column("Description")

    for f in list_filters():
        table.add_row(f["id"], f["name"], ", ".join(f["sort_keys"]), f["description"])

    console.print(table)


@cli.command("filter")
@click.argument("field_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--filter", "-f", "filter_id", default="sg-heavy", help="Filter id (see 'filters')")
@click.option("--option", "-o", "option_pairs", multiple=True, help="Filter option as key=value")
@click.option("--course-fit", is_flag=True, help="Query the course fit service (sg-value only)")
@click.option("--top", "-n", default=20, help="Number of picks to show")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def filter_command(field_file: str, filter_id: str, option_pairs: Tuple[str, ...],
                   course_fit: bool, top: int, as_json: bool):
    """Run a player filter over a matchup field."""
    players = _load(field_file)
    options = _parse_options(option_pairs)
    adapter = _course_fit_adapter() if course_fit else None

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
            disable=as_json,
        ) as progress:
            task = progress.add_task(f"Running {filter_id}...", total=None)
            result = apply_filter(filter_id, players, options, course_fit=adapter)
            progress.update(task, completed=True)
    except ValueError as e:
        _fail(str(e))

    if as_json:
        _echo_json(result.to_dict())
        return

    meta = result.meta
    odds_format = meta["options"].get("odds_format")  # "auto" or absent means detect
    console.print(Panel(
        f"Players: {meta['total_players']} | Eligible: {meta['eligible_players']} | "
        f"Qualified: {meta['qualified_players']}\n"
        f"Groups with picks: {meta['groups_with_qualifiers']}/{meta['total_groups']}",
        title=filter_id,
        border_style="cyan",
    ))

    if not result.filtered:
        console.print("[yellow]No qualifying players.[/]")
        return

    table = Table(title=f"Top {min(top, len(result))} Picks", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Rank", style="bold", width=4)
    table.add_column("Player", style="white")
    table.add_column("Matchup", justify="center")
    table.add_column("Odds", justify="right")
    table.add_column("SG", justify="right", style="green")
    table.add_column("SG Gap", justify="right")
    table.add_column("Value", justify="right", style="green")
    table.add_column("Composite", justify="right")
    table.add_column("vs", style="dim")

    for i, p in enumerate(result.filtered[:top], 1):
        table.add_row(
            f"#{i}",
            p.name,
            str(p.matchup_id),
            _fmt_odds(p.odds, odds_format),
            _fmt(p.weighted_sg, signed=True),
            _fmt(p.sg_gap_to_next, signed=True),
            _fmt(p.value_score, ".3f", signed=True),
            _fmt(p.composite_score, ".3f"),
            p.next_best_player or "",
            style="bold green" if i == 1 else None,
        )

    console.print(table)


def _print_comparison(comparison: MatchupComparison):
    a = comparison.analysis
    table = Table(
        title=f"Matchup {comparison.matchup_id} ({comparison.matchup_type})",
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("Player", style="white")
    table.add_column("Odds", justify="right")
    table.add_column("PGA SG", justify="right", style="green")
    table.add_column("DG SG", justify="right", style="green")
    table.add_column("Putt", justify="right")
    table.add_column("App", justify="right")
    table.add_column("ARG", justify="right")
    table.add_column("OTT", justify="right")
    table.add_column("Pos", justify="center")
    table.add_column("Today", justify="center")

    highlighted = highlight_player(comparison)
    for p in comparison.players:
        table.add_row(
            p.name,
            _fmt_odds(p.odds),
            _fmt(p.sg_total, signed=True),
            _fmt(p.dg_sg_total, signed=True),
            _fmt(p.dg_sg_putt if p.dg_sg_putt is not None else p.sg_putt, signed=True),
            _fmt(p.dg_sg_app if p.dg_sg_app is not None else p.sg_app, signed=True),
            _fmt(p.dg_sg_arg if p.dg_sg_arg is not None else p.sg_arg, signed=True),
            _fmt(p.dg_sg_ott if p.dg_sg_ott is not None else p.sg_ott, signed=True),
            str(p.position) if p.position is not None else "-",
            _fmt(p.today_score, "d", signed=True) if p.today_score is not None else "-",
            style="bold green" if p.name == highlighted else None,
        )
    console.print(table)

    lines = []
    if a.odds_leader:
        lines.append(f"[cyan]Odds favorite:[/] {a.odds_leader} ({a.american_odds_gap}pt gap)")
    if a.sg_leader:
        lines.append(f"[cyan]SG leader:[/] {a.sg_leader} (+{a.sg_gap_size:.2f}, {a.sg_source})")
    elif a.sg_source:
        lines.append(f"[cyan]SG leader:[/] tied ({a.sg_source})")
    if a.sg_category_dominance:
        d = a.sg_category_dominance
        lines.append(f"[cyan]Category dominance:[/] {d.player} leads {d.categories}/4 (+{d.total_gap:.2f})")
    if a.form_leader:
        lines.append(f"[cyan]Form leader today:[/] {a.form_leader}")
    if a.has_data_consensus:
        lines.append("[cyan]Data sources:[/] PGA Tour and Data Golf agree")
    elif a.has_data_source_disagreement:
        kind = a.data_source_disagreement_type.value if a.data_source_disagreement_type else "slight"
        lines.append(f"[cyan]Data sources:[/] {kind} disagreement ({a.dg_advantage_size:.2f})")

    badges = matchup_badges(comparison)
    if badges:
        lines.append("")
        lines.append("  ".join(
            f"[{b.color}]{b.label}{' ' + b.value if b.value else ''}[/]" for b in badges
        ))

    if lines:
        console.print(Panel("\n".join(lines), title="Analysis", border_style="green"))


@cli.command()
@click.argument("field_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("matchup_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def compare(field_file: str, matchup_id: str, as_json: bool):
    """Compare the players in one matchup."""
    groups = group_by_matchup(_load(field_file))
    key = int(matchup_id) if matchup_id.isdigit() else matchup_id
    if key not in groups:
        _fail(f"Matchup {matchup_id} not found in {field_file}")

    try:
        comparison = MatchupComparisonEngine().compare(groups[key])
    except ValueError as e:
        _fail(str(e))

    if as_json:
        data = comparison.to_dict()
        data["badges"] = [b.__dict__ for b in matchup_badges(comparison)]
        _echo_json(data)
        return

    _print_comparison(comparison)


@cli.command()
@click.argument("field_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--preset", "-p", type=click.Choice(sorted(FILTER_PRESETS)), default=None,
              help="Matchup filter preset")
@click.option("--require-all", is_flag=True, help="Require every active criterion")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def scan(field_file: str, preset: Optional[str], require_all: bool, as_json: bool):
    """Scan every matchup for comparative signals."""
    comparisons = _compare_all(_load(field_file))
    if preset:
        criteria = MatchupFilterCriteria.from_preset(preset, require_all=require_all)
    else:
        criteria = MatchupFilterCriteria(require_all=require_all)

    selected = filter_matchups(comparisons.values(), criteria)
    picks = value_players(comparisons.values(), criteria) if criteria.is_active else []

    if as_json:
        _echo_json({
            "preset": preset,
            "total_matchups": len(comparisons),
            "selected": [c.to_dict() for c in selected],
            "value_players": [p.__dict__ for p in picks],
        })
        return

    table = Table(
        title=f"{len(selected)}/{len(comparisons)} Matchups" + (f" ({preset})" if preset else ""),
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("Matchup", justify="center")
    table.add_column("Players", style="white")
    table.add_column("Favorite", style="yellow")
    table.add_column("SG Leader", style="green")
    table.add_column("Signals")

    for c in selected:
        badges = matchup_badges(c)
        table.add_row(
            str(c.matchup_id),
            " / ".join(p.name for p in c.players),
            c.analysis.odds_leader or "-",
            c.analysis.sg_leader or "-",
            ", ".join(f"[{b.color}]{b.label}[/]" for b in badges) or "-",
        )
    console.print(table)

    if picks:
        console.print("\n[bold cyan]Value Players:[/]")
        for p in picks:
            console.print(f"  [white]{p.name}[/] ({_fmt_odds(p.odds)}, matchup {p.matchup_id}) - {p.reason}")


@cli.command()
@click.argument("prices", nargs=-1, required=True, type=float)
@click.option("--format", "odds_format", default="auto",
              type=click.Choice(["auto", "american", "decimal", "fractional"]),
              help="Odds format (default: auto-detect)")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def odds(prices: Tuple[float, ...], odds_format: str, as_json: bool):
    """Implied and vig-free probabilities for one market.

    Negative prices go after --, e.g. golf-matchups odds -- -115 -105
    """
    fmt = resolve_format(odds_format)
    raw = [implied_probability(p, fmt) for p in prices]
    fair = remove_vig(raw)

    if as_json:
        _echo_json({
            "prices": list(prices),
            "implied": raw,
            "vig_free": fair,
            "margin": vig_margin(raw),
        })
        return

    table = Table(title="Market", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Price", justify="right")
    table.add_column("American", justify="right")
    table.add_column("Implied", justify="right")
    table.add_column("Vig-free", justify="right", style="green")

    for price, p_raw, p_fair in zip(prices, raw, fair):
        table.add_row(f"{price:g}", _fmt_odds(price, fmt), f"{p_raw:.1%}", f"{p_fair:.1%}")

    console.print(table)
    console.print(f"Margin: [yellow]{vig_margin(raw):.2%}[/]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
