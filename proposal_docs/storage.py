from __future__ import annotations

from pathlib import Path
import shutil
from typing import Iterable, List

from . import config
from .models import Artifact, ProposalJob, get_session


# artifact type -> filename inside a job folder
ARTIFACT_NAMES = {
    "layout": "layout.json",
    "pdf_fee_schedule": "cover_letter.pdf",
    "pdf_scope_of_services": "scope_of_services.pdf",
    "preview_fee_schedule": "cover_letter.png",
    "preview_scope_of_services": "scope_of_services.png",
    "bundle": "bundle.zip",
    "error": "error.log",
    "readme": "README.txt",
}

STAGING_SUFFIX = ".tmp"

Artifacts = List[tuple[str, Path]]


def job_dir(slug: str) -> Path:
    """Final folder for a job's deliverables: OUT_DIR/<slug>."""
    return config.OUT_DIR / slug


def staging_dir(slug: str) -> Path:
    return config.OUT_DIR / f"{slug}{STAGING_SUFFIX}"


def artifact_path(directory: Path, artifact_type: str) -> Path:
    try:
        filename = ARTIFACT_NAMES[artifact_type]
    except KeyError:
        raise ValueError(f"Unknown artifact type: {artifact_type}") from None
    directory.mkdir(parents=True, exist_ok=True)
    return directory / filename


def open_staging(slug: str) -> Path:
    """Start from an empty staging folder; leftovers from an interrupted run are dropped."""
    path = staging_dir(slug)
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def discard_staging(slug: str) -> None:
    shutil.rmtree(staging_dir(slug), ignore_errors=True)


def promote_staging(slug: str, artifacts: Iterable[tuple[str, Path]]) -> Artifacts:
    """
    Swap the staging folder into place as the job folder.

    A previous job folder (from an earlier run or a failed attempt) is replaced
    whole, so readers never see a mix of old and new documents. Returns the
    artifacts re-pointed at their final location.
    """
    staged = staging_dir(slug)
    final = job_dir(slug)
    if final.exists():
        shutil.rmtree(final)
    staged.replace(final)
    return [(artifact_type, final / path.relative_to(staged)) for artifact_type, path in artifacts]


def write_error_log(slug: str, errors: Iterable[str]) -> Path:
    path = artifact_path(job_dir(slug), "error")
    message = "\n".join(errors)
    path.write_text(message or "Unknown error", encoding="utf-8")
    return path


def record_artifacts(job: ProposalJob, artifacts: Iterable[tuple[str, Path]]) -> None:
    # paths are stored relative to OUT_DIR so the output tree can be moved
    with get_session() as session:
        for artifact_type, path in artifacts:
            session.add(
                Artifact(
                    job_id=job.id,
                    type=artifact_type,
                    path=str(path.relative_to(config.OUT_DIR)),
                )
            )
        session.commit()
