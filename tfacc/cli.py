"""Command line entrypoint for tfacc."""

import json
import logging
import sys
from typing import Any, Dict

import click

from .configs import NAMED_CONFIGS
from .errors import SweepError, TfaccError
from .events import run_outcome
from .settings import Settings
from .state import cleanup_run, get_run_dir, list_runs
from .sweep import list_sweepers, run_sweepers


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """tfacc - aws_vpc acceptance test tooling."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    ctx.obj['settings'] = Settings.from_env()


def _json_output(data: Dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=None))


def _reports_to_dict(results) -> Dict[str, Any]:
    return {
        region: {name: report.to_dict() for name, report in reports.items()}
        for region, reports in (results or {}).items()
    }


@main.command()
@click.option('--region', 'regions', multiple=True, help='Region to sweep (repeatable, defaults to $SWEEP)')
@click.option('--sweeper', 'sweepers', multiple=True, help='Sweeper to run (repeatable, defaults to $SWEEP_RUN)')
@click.pass_context
def sweep(ctx, regions, sweepers):
    """Delete leaked test resources."""
    settings: Settings = ctx.obj['settings']
    regions = list(regions) or settings.sweep_regions
    sweepers = list(sweepers) or settings.sweep_filter

    if not regions:
        raise click.UsageError("No regions to sweep: pass --region or set SWEEP")

    try:
        results = run_sweepers(regions, only=sweepers, settings=settings)
    except SweepError as e:
        if ctx.obj['json']:
            _json_output({"ok": False, "error": str(e), "results": _reports_to_dict(e.report)})
        else:
            click.echo(f"Sweep failed:\n{e}", err=True)
        sys.exit(1)
    except TfaccError as e:
        if ctx.obj['json']:
            _json_output({"ok": False, "error": str(e)})
        else:
            click.echo(f"Sweep failed: {e}", err=True)
        sys.exit(1)

    if ctx.obj['json']:
        _json_output({"ok": True, "results": _reports_to_dict(results)})
        return

    for region, reports in results.items():
        for name, report in reports.items():
            if report.sweep_skipped:
                click.echo(f"{region} {name}: skipped ({report.sweep_skipped})")
            else:
                click.echo(
                    f"{region} {name}: deleted {len(report.deleted)}, "
                    f"kept {len(report.skipped)} default(s)"
                )


@main.command('sweepers')
@click.pass_context
def sweepers_cmd(ctx):
    """List registered sweepers."""
    sweepers = list_sweepers()

    if ctx.obj['json']:
        _json_output({"sweepers": [
            {"name": s.name, "dependencies": s.dependencies} for s in sweepers
        ]})
        return

    for s in sweepers:
        deps = ", ".join(s.dependencies) if s.dependencies else "none"
        click.echo(f"{s.name} (depends on: {deps})")


@main.command()
@click.argument('name', type=click.Choice(sorted(NAMED_CONFIGS)))
def config(name):
    """Print a named configuration fixture."""
    click.echo(NAMED_CONFIGS[name])


@main.command()
@click.pass_context
def runs(ctx):
    """List run directories, newest first."""
    settings: Settings = ctx.obj['settings']
    entries = [
        {"id": run_id, "outcome": run_outcome(get_run_dir(run_id, settings))}
        for run_id in list_runs(settings)
    ]

    if ctx.obj['json']:
        _json_output({"runs": entries})
        return

    if not entries:
        click.echo("No runs found")
        return

    for entry in entries:
        click.echo(f"{entry['id']}  {entry['outcome']}")


@main.command('clean-runs')
@click.pass_context
def clean_runs(ctx):
    """Remove all run directories."""
    settings: Settings = ctx.obj['settings']
    run_ids = list_runs(settings)

    for run_id in run_ids:
        cleanup_run(run_id, settings)

    if ctx.obj['json']:
        _json_output({"removed": run_ids})
    else:
        click.echo(f"Removed {len(run_ids)} run(s)")


if __name__ == '__main__':
    main()
