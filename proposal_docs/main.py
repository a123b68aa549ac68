from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from . import config
from .layout.composer import FEE_SCHEDULE, SCOPE_OF_SERVICES, LayoutSettings, compose_documents
from .layout.errors import ConfigurationError, LayoutError, ValidationError
from .models import JobStatus, reset_engine
from .pipeline.ingest import ingest_payloads, list_jobs, load_payload
from .pipeline.run import run_pipeline

app = typer.Typer(help="Proposal cover letter and scope-of-services generator")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _use_out_dir(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


def _exit_with(exc: LayoutError) -> NoReturn:
    errors = exc.errors if isinstance(exc, ValidationError) else [str(exc)]
    for error in errors:
        typer.echo(f"ERROR: {error}", err=True)
    raise typer.Exit(code=1)


def _settings(services_per_page: int) -> LayoutSettings:
    try:
        return LayoutSettings(services_per_page=services_per_page).validate()
    except ConfigurationError as exc:
        _exit_with(exc)


def _report(results: dict[str, list[str]]) -> None:
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for slug in results["FAILED"]:
        typer.echo(f"FAILED: {slug}")


@app.command()
def build(
    payload: Optional[List[Path]] = typer.Option(None, "--payload", help="Proposal payload JSON (repeatable)"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    services_per_page: int = typer.Option(
        config.SERVICES_PER_PAGE, "--services-per-page", help="Service rows per scope-of-services page"
    ),
    dry_run_ingest: bool = typer.Option(False, "--dry-run-ingest", help="Only register the payloads"),
) -> None:
    settings = _settings(services_per_page)
    _use_out_dir(out)
    if payload:
        jobs = ingest_payloads(payload)
        typer.echo(f"Ingested {len(jobs)} proposals")
        if dry_run_ingest:
            return
    jobs = list_jobs([JobStatus.DRAFT])
    if not jobs:
        typer.echo("No proposals to process")
        return
    _report(run_pipeline(jobs, settings))


@app.command()
def retry(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    failed: bool = typer.Option(True, "--failed", help="Retry failed only"),
    services_per_page: int = typer.Option(
        config.SERVICES_PER_PAGE, "--services-per-page", help="Service rows per scope-of-services page"
    ),
) -> None:
    settings = _settings(services_per_page)
    _use_out_dir(out)
    statuses = [JobStatus.FAILED] if failed else [JobStatus.DRAFT]
    jobs = list_jobs(statuses)
    if not jobs:
        typer.echo("No proposals to retry")
        return
    _report(run_pipeline(jobs, settings))


@app.command()
def layout(
    payload: Path = typer.Argument(..., help="Proposal payload JSON"),
    variant: str = typer.Option("both", "--variant", help="fee_schedule | scope_of_services | both"),
    services_per_page: int = typer.Option(config.SERVICES_PER_PAGE, "--services-per-page"),
) -> None:
    """Print the document layout as JSON without rendering anything."""
    if variant not in (FEE_SCHEDULE, SCOPE_OF_SERVICES, "both"):
        raise typer.BadParameter(f"Unknown variant: {variant}", param_hint="--variant")
    try:
        documents = compose_documents(load_payload(payload), LayoutSettings(services_per_page=services_per_page))
    except LayoutError as exc:
        _exit_with(exc)

    trees = {
        FEE_SCHEDULE: documents.fee_schedule.to_dict(),
        SCOPE_OF_SERVICES: documents.scope_of_services.to_dict(),
    }
    output = trees if variant == "both" else trees[variant]
    typer.echo(json.dumps(output, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
