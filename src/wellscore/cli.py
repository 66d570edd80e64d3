"""CLI for the wellscore daily scoring engine."""

import asyncio
import json
import logging
from datetime import date, datetime, timedelta

import click

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"

_day_type = click.DateTime(formats=["%Y-%m-%d"])


def _as_date(value: datetime | None) -> date:
    return value.date() if value is not None else date.today()


def _load_config(path: str | None):
    from wellscore.config import DEFAULT_CONFIG, load_config
    from wellscore.errors import ConfigError

    if path is None:
        return DEFAULT_CONFIG
    try:
        return load_config(path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _format_record(record) -> str:
    def fmt(value, spec: str, unit: str = "") -> str:
        return "-" if value is None else f"{value:{spec}}{unit}"

    lines = [
        f"{record.date.isoformat()}",
        f"  strain     {record.strain:.1f}/21 ({len(record.workouts)} workouts)",
        f"  recovery   {fmt(record.recovery, '.0f', '/100')}",
        f"  sleep      {fmt(record.sleep_duration, '.1f', 'h')}"
        f"  eff {fmt(record.sleep_efficiency, '.0f', '%')}"
        f"  debt {fmt(record.sleep_debt, '.1f', 'h')}",
        f"  hrv        {fmt(record.hrv_average, '.0f', ' ms')}",
        f"  rhr        {fmt(record.resting_heart_rate, '.0f', ' bpm')}",
        f"  stress     avg {fmt(record.stress_average, '.2f')}  max {fmt(record.stress_max, '.2f')}",
        f"  acwr       {fmt(record.acwr, '.2f')} ({record.acwr_status.value})",
    ]
    return "\n".join(lines)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """wellscore -- daily strain, recovery and stress scoring."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@main.command()
@click.argument("export", type=click.Path(exists=True, dir_okay=False))
@click.option("--store", "-s", "store_dir", required=True, type=click.Path(file_okay=False),
              help="Directory of daily JSON records.")
@click.option("--day", "-d", type=_day_type, default=None, help="Day to score (default: today).")
@click.option("--days", "-n", default=1, show_default=True, type=click.IntRange(min=1),
              help="Number of days to score, ending at --day.")
@click.option("--age", type=int, default=None, help="Age, for the 220 - age max HR estimate.")
@click.option("--max-hr", type=float, default=None, help="Measured max HR.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="JSON file with config overrides.")
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON.")
def score(
    export: str,
    store_dir: str,
    day: datetime | None,
    days: int,
    age: int | None,
    max_hr: float | None,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Aggregate a health export into daily records."""
    from wellscore.analytics.pipeline import DailyAggregator
    from wellscore.errors import AggregationError
    from wellscore.sources import JsonlHealthSource
    from wellscore.store import JsonDirectoryMetricsStore

    config = _load_config(config_path)
    end = _as_date(day)
    start = end - timedelta(days=days - 1)
    aggregator = DailyAggregator(
        JsonlHealthSource(export),
        JsonDirectoryMetricsStore(store_dir),
        age=age,
        max_hr=max_hr,
        config=config,
    )

    try:
        if days == 1:
            records = [asyncio.run(aggregator.aggregate_day(end))]
        else:
            records = asyncio.run(aggregator.aggregate_range(start, end))
    except AggregationError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if not records:
        click.echo("No days with data.")
    for record in records:
        click.echo(_format_record(record))


@main.command()
@click.option("--store", "-s", "store_dir", required=True, type=click.Path(file_okay=False))
@click.option("--as-of", type=_day_type, default=None, help="Day the baseline is for (default: today).")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None)
def baseline(store_dir: str, as_of: datetime | None, config_path: str | None) -> None:
    """Show the rolling baseline computed from stored records."""
    from wellscore.analytics.baseline import compute_baselines
    from wellscore.store import JsonDirectoryMetricsStore

    config = _load_config(config_path)
    day = _as_date(as_of)
    store = JsonDirectoryMetricsStore(store_dir)
    history = asyncio.run(
        store.get_range(day - timedelta(days=config.baseline.chronic_days), day - timedelta(days=1))
    )
    metrics = compute_baselines(history, day, config)
    if metrics is None:
        click.echo(f"Not enough history for a baseline on {day.isoformat()}.")
        return

    def fmt(value) -> str:
        return "-" if value is None else f"{value:.1f}"

    click.echo(f"Baseline as of {day.isoformat()} ({metrics.days_of_data} days"
               f"{'' if metrics.is_established else ', not yet established'})")
    click.echo(f"  HRV          {fmt(metrics.hrv_baseline)} ± {metrics.hrv_std_dev:.1f} ms")
    click.echo(f"  Resting HR   {fmt(metrics.rhr_baseline)} ± {metrics.rhr_std_dev:.1f} bpm")
    click.echo(f"  Respiratory  {fmt(metrics.respiratory_rate_baseline)} breaths/min")
    click.echo(f"  Strain       acute {metrics.acute_strain:.1f}, chronic {metrics.chronic_strain:.1f}")
    acwr = metrics.acwr
    status = metrics.acwr_status()
    click.echo(f"  ACWR         {fmt(acwr)} ({status.value}: {status.description})")


@main.command()
@click.option("--store", "-s", "store_dir", required=True, type=click.Path(file_okay=False))
@click.option("--day", "-d", type=_day_type, default=None)
def digest(store_dir: str, day: datetime | None) -> None:
    """Print the plain-text digest used as chat context."""
    from wellscore.digest import health_digest
    from wellscore.store import JsonDirectoryMetricsStore

    click.echo(asyncio.run(health_digest(JsonDirectoryMetricsStore(store_dir), _as_date(day))), nl=False)


@main.command()
@click.argument("values", nargs=-1, type=float, required=True)
def outliers(values: tuple[float, ...]) -> None:
    """Run the outlier filter over VALUES and show what it removes."""
    from wellscore.analytics.outliers import analyze_outliers, filter_outliers

    analysis = analyze_outliers(values)
    kept = filter_outliers(values)
    click.echo(f"Kept: {', '.join(f'{v:g}' for v in kept) or '(none)'}")
    click.echo(f"Removed: {analysis.absolute_outliers} absolute, {analysis.statistical_outliers} statistical "
               f"({analysis.outlier_percentage:.0f}%)")
    click.echo(f"Mean: {analysis.original_average:.2f} -> {analysis.filtered_average:.2f}")


@main.command("config")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None)
def config_cmd(config_path: str | None) -> None:
    """Print the effective configuration as JSON."""
    click.echo(_load_config(config_path).to_json())


if __name__ == "__main__":
    main()
