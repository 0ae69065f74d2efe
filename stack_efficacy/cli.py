"""Command-line interface for the Stack Efficacy tool."""

import logging
from datetime import datetime

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from .config import config
from .analysis import DEFAULT_METRICS, DEFAULT_REGISTRY, StackAnalysisEngine
from .analysis.effectiveness import Grade
from .analysis.insights import InsightType
from .analysis.mock_data import DEMO_SCHEDULE, generate_mock_history
from .data import (
    InputValidationError,
    load_intervention_names,
    load_interventions,
    load_observations,
)

console = Console()

SIGNIFICANCE_STYLES = {"high": "bold green", "medium": "yellow", "low": "blue"}
DIRECTION_STYLES = {"positive": "green", "negative": "red", "neutral": "black"}
INSIGHT_STYLES = {
    InsightType.POSITIVE: "green",
    InsightType.WARNING: "yellow",
    InsightType.SUGGESTION: "blue",
}
GRADE_STYLES = {
    Grade.A: "bold green",
    Grade.B: "green",
    Grade.C: "yellow",
    Grade.D: "orange3",
    Grade.F: "red",
}


def _parse_end_date(value):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM-DD date", param_hint="--end-date")


def render_report(report) -> None:
    """Print correlations, insights and the effectiveness score."""
    start = report.window_start.isoformat() if report.window_start else "—"
    end = report.window_end.isoformat() if report.window_end else "—"
    console.print(f"\n[bold]Window:[/bold] {start} → {end} ({report.days_observed} observed days)")

    if report.results:
        table = Table(title="Intervention Correlations", box=box.ROUNDED)
        table.add_column("Intervention", style="bold")
        table.add_column("Metric")
        table.add_column("With", justify="right")
        table.add_column("Without", justify="right")
        table.add_column("Δ%", justify="right")
        table.add_column("n", justify="right")
        table.add_column("Direction")
        table.add_column("Significance")
        table.add_column("Conf.", justify="right")

        for r in report.results:
            direction_style = DIRECTION_STYLES[r.direction.value]
            sig_style = SIGNIFICANCE_STYLES.get(r.significance.value, "black")
            table.add_row(
                r.display_name,
                r.display_metric,
                f"{r.mean_with:.1f}",
                f"{r.mean_without:.1f}",
                f"[{direction_style}]{r.percent_difference:+.1f}%[/{direction_style}]",
                f"{r.sample_size_with}/{r.sample_size_without}",
                f"[{direction_style}]{r.emoji} {r.direction.value}[/{direction_style}]",
                f"[{sig_style}]{r.significance.value.upper()}[/{sig_style}]",
                f"{r.confidence}%",
            )
        console.print(table)
    else:
        console.print("[yellow]No significant correlations in this window.[/yellow]")

    for insight in report.insights:
        style = INSIGHT_STYLES[insight.type]
        body = insight.description
        if insight.action_label:
            body += f"\n[dim]→ {insight.action_label}[/dim]"
        console.print(Panel(body, title=insight.title, border_style=style, expand=False))

    effectiveness = report.effectiveness
    if effectiveness is not None:
        style = GRADE_STYLES[effectiveness.grade]
        console.print(Panel(
            f"[{style}]{effectiveness.score}/100  Grade {effectiveness.grade.value}[/{style}]\n"
            f"{effectiveness.summary}",
            title="Stack Effectiveness",
            border_style=style,
            expand=False,
        ))


def _emit(report, output_format: str) -> None:
    if output_format == "json":
        click.echo(report.to_json())
    else:
        render_report(report)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Stack Efficacy - screen your interventions against wearable data."""
    logging.basicConfig(
        level=config.get_log_level(verbose),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--observations", "observations_path", required=True, help="Path to daily observations CSV/JSON")
@click.option("--interventions", "interventions_path", required=True, help="Path to intervention log CSV/JSON")
@click.option("--names", "names_path", help="Optional id -> display name mapping (CSV/JSON)")
@click.option("--days", default=config.WINDOW_DAYS, help="Rolling window length in days", type=click.IntRange(1, 3650))
@click.option("--end-date", help="Last day of the window (YYYY-MM-DD), defaults to latest observation")
@click.option("--format", "output_format", default=config.DEFAULT_OUTPUT_FORMAT,
              type=click.Choice(["table", "json"]), help="Output format")
def analyze(observations_path, interventions_path, names_path, days, end_date, output_format):
    """Analyze an observation export against an intervention log."""
    end = _parse_end_date(end_date)

    try:
        observations = load_observations(observations_path)
        interventions = load_interventions(interventions_path)
        names = load_intervention_names(names_path) if names_path else None
    except (InputValidationError, FileNotFoundError) as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise SystemExit(1)

    engine = StackAnalysisEngine()
    report = engine.run(observations, interventions, days=days, end_date=end, intervention_names=names)
    _emit(report, output_format)


@cli.command()
@click.option("--days", default=config.WINDOW_DAYS, help="Number of mock days", type=click.IntRange(1, 365))
@click.option("--seed", default=42, help="Random seed for reproducible data")
@click.option("--format", "output_format", default=config.DEFAULT_OUTPUT_FORMAT,
              type=click.Choice(["table", "json"]), help="Output format")
def demo(days, seed, output_format):
    """Run the analysis on generated mock wearable data."""
    observations, interventions = generate_mock_history(days=days, schedule=DEMO_SCHEDULE, seed=seed)
    if output_format == "table":
        console.print(
            f"[black]Generated {len(observations)} mock days "
            f"({', '.join(sorted(DEMO_SCHEDULE))})[/black]"
        )

    report = StackAnalysisEngine().run(observations, interventions, days=days)
    _emit(report, output_format)


@cli.command()
def metrics():
    """List the metrics screened by default."""
    table = Table(title="Metric Definitions", box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Label")
    table.add_column("Unit")
    table.add_column("Polarity")

    for definition in DEFAULT_METRICS:
        table.add_row(definition.name, definition.display_label, definition.unit or "—", definition.polarity.value)
    console.print(table)


@cli.command()
def registry():
    """List the known intervention effects used for suggestions."""
    table = Table(title="Known Intervention Effects", box=box.ROUNDED)
    table.add_column("Key", style="bold")
    table.add_column("Expected Metrics")
    table.add_column("Lag", justify="right")
    table.add_column("Aliases")

    for effect in DEFAULT_REGISTRY:
        table.add_row(
            effect.key,
            ", ".join(effect.expected_metrics),
            f"{effect.lag_days}d",
            ", ".join(effect.aliases) or "—",
        )
    console.print(table)


def main():
    """Main entry point."""
    try:
        config.validate()
        cli()
    except KeyboardInterrupt:
        console.print("\n[orange3]Operation cancelled by user.[/orange3]")
    except ValueError as e:
        console.print(f"[red]❌ Configuration error: {escape(str(e))}[/red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
