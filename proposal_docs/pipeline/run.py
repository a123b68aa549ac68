from __future__ import annotations

from pathlib import Path
import logging
from typing import Iterable, List, Optional
import json

from ..layout.composer import LayoutSettings, ProposalDocuments, compose_documents
from ..layout.errors import ValidationError
from ..models import JobStatus, ProposalJob, get_session, init_db
from ..storage import (
    artifact_path,
    discard_staging,
    open_staging,
    promote_staging,
    record_artifacts,
    write_error_log,
)
from .ingest import load_payload
from .package import create_bundle, create_readme
from .render_pdf import render_pdfs
from .render_preview import render_previews


logger = logging.getLogger(__name__)


def write_layout(documents: ProposalDocuments, out_dir: Path) -> Path:
    path = artifact_path(out_dir, "layout")
    layout = {
        "fee_schedule": documents.fee_schedule.to_dict(),
        "scope_of_services": documents.scope_of_services.to_dict(),
    }
    path.write_text(json.dumps(layout, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def process_job(
    job: ProposalJob,
    settings: Optional[LayoutSettings] = None,
) -> tuple[JobStatus, List[tuple[str, Path]], List[str], ProposalDocuments | None]:
    payload = load_payload(Path(job.payload_path))
    try:
        documents = compose_documents(payload, settings)
    except ValidationError as exc:
        logger.info("Layout rejected for %s: %s", job.slug, "; ".join(exc.errors))
        return JobStatus.FAILED, [], exc.errors, None

    staging = open_staging(job.slug)
    artifacts: List[tuple[str, Path]] = [("layout", write_layout(documents, staging))]

    fee_pdf, scope_pdf = render_pdfs(documents, staging)
    artifacts.extend([("pdf_fee_schedule", fee_pdf), ("pdf_scope_of_services", scope_pdf)])

    fee_preview, scope_preview = render_previews(fee_pdf, scope_pdf, staging)
    artifacts.extend(
        [
            ("preview_fee_schedule", fee_preview),
            ("preview_scope_of_services", scope_preview),
        ]
    )

    page_counts = {
        "fee_schedule": documents.fee_schedule.page_count,
        "scope_of_services": documents.scope_of_services.page_count,
    }
    readme_path = create_readme(staging, job.client_name, page_counts)
    bundle_path = create_bundle(staging, fee_pdf, scope_pdf, readme_path)
    artifacts.append(("readme", readme_path))
    artifacts.append(("bundle", bundle_path))
    return JobStatus.READY, promote_staging(job.slug, artifacts), [], documents


def run_pipeline(
    jobs: Iterable[ProposalJob],
    settings: Optional[LayoutSettings] = None,
) -> dict[str, list[str]]:
    """
    Lay out and render every job, recording READY/FAILED per job.

    Bad settings are a problem with the run, not with any payload: they raise
    ConfigurationError here, before a single job is touched.
    """
    settings = (settings or LayoutSettings()).validate()
    init_db()
    results: dict[str, list[str]] = {"READY": [], "FAILED": []}
    with get_session() as session:
        for job in jobs:
            try:
                status, artifacts, errors, documents = process_job(job, settings)
            except Exception as exc:
                logger.exception("Pipeline error for %s", job.slug)
                discard_staging(job.slug)
                status = JobStatus.FAILED
                artifacts = []
                errors = [str(exc)]
                documents = None
                job.fail_code = "PIPELINE_ERROR"
            else:
                job.fail_code = "VALIDATION_FAILED" if status == JobStatus.FAILED else None

            job.status = status
            job.fail_detail = (errors[0] if errors else "Unknown error") if status == JobStatus.FAILED else None
            if documents is not None:
                job.service_count = len(documents.payload.services)
            session.add(job)
            session.commit()
            session.refresh(job)

            if status == JobStatus.READY:
                record_artifacts(job, artifacts)
                logger.info("Rendered proposal %s (%d services)", job.slug, job.service_count)
                results["READY"].append(job.slug)
            else:
                write_error_log(job.slug, errors)
                results["FAILED"].append(job.slug)
    return results
