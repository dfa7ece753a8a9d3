# hostscore/cli.py
import json
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from .breakdown import format_breakdown
from .core.config import load_settings
from .data.population import StaticPopulation
from .data.scenario import Scenario, load_scenario
from .engine import HostScorer
from .weights.adjustments import ScanHistoryError
from .weights.composer import conversion_rate


def _load(path: Path) -> Scenario:
    try:
        return load_scenario(path)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid scenario {path}:\n{exc}")


def _scorer_for(scenario: Scenario) -> HostScorer:
    return HostScorer(
        StaticPopulation(scenario.hosts),
        guidelines=scenario.usage_guidelines,
        settings=load_settings(),
    )


def _pick_host(scenario: Scenario, key: str):
    try:
        return scenario.find_host(key)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0]))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool):
    """hostscore: storage host weighting CLI"""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("scenario_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--top", type=int, default=10, show_default=True, help="How many hosts to display")
@click.option("--json-output", is_flag=True, help="Emit JSON instead of human-readable text.")
def rank(scenario_path: Path, top: int, json_output: bool) -> None:
    """Rank every host in the scenario by weight."""
    scenario = _load(scenario_path)
    scorer = _scorer_for(scenario)
    try:
        ranked = scorer.rank(scenario.allowance, scenario.block_height)
    except ScanHistoryError as exc:
        raise click.ClickException(str(exc))

    if not ranked:
        click.echo("No hosts in scenario.")
        return

    scores = [score for _, score in ranked]
    rows = [
        {
            "rank": i,
            "host": host.label,
            "score": str(score),
            "conversion_rate": conversion_rate(score, scores),
        }
        for i, (host, score) in enumerate(ranked[:top], start=1)
    ]

    if json_output:
        click.echo(json.dumps(rows, indent=2))
        return

    click.echo(" #  Host                                      Conversion  Score")
    click.echo("-" * 80)
    for row, (_, score) in zip(rows, ranked):
        click.echo(
            f"{row['rank']:>2}  {row['host'][:40]:<40}  {row['conversion_rate']:>8.2f}%  "
            f"{score.human_string()}"
        )


def _breakdown_command(scenario_path: Path, host_key: str, json_output: bool, best_case: bool) -> None:
    scenario = _load(scenario_path)
    scorer = _scorer_for(scenario)
    host = _pick_host(scenario, host_key)
    try:
        if best_case:
            result = scorer.estimate_score(host, scenario.allowance, scenario.block_height)
        else:
            result = scorer.score_breakdown(host, scenario.allowance, scenario.block_height)
    except ScanHistoryError as exc:
        raise click.ClickException(str(exc))

    if json_output:
        payload = result.model_dump(mode="json")
        payload["host"] = host.label
        click.echo(json.dumps(payload, indent=2))
        return

    title = f"{'Estimated' if best_case else 'Current'} score for {host.label}"
    click.echo(format_breakdown(result, title=title))


@cli.command()
@click.argument("scenario_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--host", "host_key", required=True, help="Public key, net address or 1-based index.")
@click.option("--json-output", is_flag=True, help="Emit JSON instead of human-readable text.")
def estimate(scenario_path: Path, host_key: str, json_output: bool) -> None:
    """Best-case score for a host, assuming ideal age and uptime."""
    _breakdown_command(scenario_path, host_key, json_output, best_case=True)


@cli.command()
@click.argument("scenario_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--host", "host_key", required=True, help="Public key, net address or 1-based index.")
@click.option("--json-output", is_flag=True, help="Emit JSON instead of human-readable text.")
def breakdown(scenario_path: Path, host_key: str, json_output: bool) -> None:
    """Full score breakdown for a host at the scenario's block height."""
    _breakdown_command(scenario_path, host_key, json_output, best_case=False)


@cli.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def doctor(config_path: Optional[Path]) -> None:
    """Print the active scoring settings."""
    try:
        settings = load_settings(config_path)
    except (FileNotFoundError, ValidationError) as exc:
        raise click.ClickException(str(exc))

    ug = settings.usage_guidelines
    click.echo(f"Build profile:        {settings.build}")
    click.echo(f"Required storage:     {settings.required_storage_bytes} bytes")
    click.echo(f"Strict scan history:  {'on' if settings.strict_scan_history else 'off'}")
    click.echo("Usage guidelines:")
    click.echo(f"  expected_storage:            {ug.expected_storage}")
    click.echo(f"  expected_upload_frequency:   {ug.expected_upload_frequency}")
    click.echo(f"  expected_download_frequency: {ug.expected_download_frequency}")
    click.echo(f"  data/parity pieces:          {ug.expected_data_pieces}/{ug.expected_parity_pieces}")
    click.echo("All green.")


if __name__ == "__main__":
    cli()
