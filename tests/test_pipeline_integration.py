from __future__ import annotations

import json
import tempfile
import zipfile
from pathlib import Path

import pytest
from sqlmodel import select

from proposal_docs import config
from proposal_docs.layout.composer import LayoutSettings
from proposal_docs.layout.errors import ConfigurationError
from proposal_docs.models import Artifact, JobStatus, ProposalJob, get_session, reset_engine
from proposal_docs.pipeline.ingest import ingest_payloads, list_jobs
from proposal_docs.pipeline.run import run_pipeline


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_pipeline_outputs_expected_artifacts() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir) / "out"
        config.set_out_dir(out_dir)
        reset_engine()
        good = _write(
            Path(temp_dir) / "acme.json",
            {
                "client": {"name": "Acme Pvt Ltd"},
                "services": [
                    {"id": "1", "category": "Audit", "service": "Statutory Audit", "price": 10000},
                    {"id": "2", "category": "Tax", "service": "Tax Audit", "price": 5000, "discountedPrice": 4500},
                ],
            },
        )
        bad = _write(
            Path(temp_dir) / "broken.json",
            {
                "client": {"name": "Broken Ltd"},
                "services": [{"id": "1", "service": "No category", "price": 100}],
            },
        )
        jobs = ingest_payloads([good, bad])
        assert [job.slug for job in jobs] == ["acme-pvt-ltd", "broken-ltd"]

        results = run_pipeline(jobs)
        assert results == {"READY": ["acme-pvt-ltd"], "FAILED": ["broken-ltd"]}

        job_dir = out_dir / "acme-pvt-ltd"
        for name in (
            "layout.json",
            "cover_letter.pdf",
            "scope_of_services.pdf",
            "cover_letter.png",
            "scope_of_services.png",
            "README.txt",
            "bundle.zip",
        ):
            assert (job_dir / name).exists(), name
        assert not (out_dir / "acme-pvt-ltd.tmp").exists()

        with zipfile.ZipFile(job_dir / "bundle.zip") as bundle:
            assert bundle.namelist() == ["cover_letter.pdf", "scope_of_services.pdf", "layout.json", "README.txt"]

        layout = json.loads((job_dir / "layout.json").read_text(encoding="utf-8"))
        assert layout["scope_of_services"]["blocks"][0]["rows"][1]["fee"] == "4,500"

        error_log = (out_dir / "broken-ltd" / "error.log").read_text(encoding="utf-8")
        assert "services[0].category is required" in error_log

        failed = list_jobs([JobStatus.FAILED])
        assert [job.fail_code for job in failed] == ["VALIDATION_FAILED"]

        with get_session() as session:
            ready = session.exec(select(ProposalJob).where(ProposalJob.slug == "acme-pvt-ltd")).one()
            artifacts = session.exec(select(Artifact).where(Artifact.job_id == ready.id)).all()
        assert ready.status == JobStatus.READY
        assert {a.type for a in artifacts} == {
            "layout",
            "pdf_fee_schedule",
            "pdf_scope_of_services",
            "preview_fee_schedule",
            "preview_scope_of_services",
            "readme",
            "bundle",
        }


def test_unexpected_errors_are_marked_pipeline_error(monkeypatch) -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir) / "out"
        config.set_out_dir(out_dir)
        reset_engine()
        payload = _write(
            Path(temp_dir) / "acme.json",
            {"client": {"name": "Acme"}, "services": [{"id": "1", "category": "Audit", "service": "A", "price": 1}]},
        )
        jobs = ingest_payloads([payload])

        def boom(*args, **kwargs):  # noqa: ARG001 - test helper
            raise RuntimeError("renderer exploded")

        monkeypatch.setattr("proposal_docs.pipeline.run.render_pdfs", boom)
        results = run_pipeline(jobs)

        assert results["FAILED"] == ["acme"]
        job = list_jobs([JobStatus.FAILED])[0]
        assert job.fail_code == "PIPELINE_ERROR"
        assert job.fail_detail == "renderer exploded"
        assert not (out_dir / "acme.tmp").exists()


def test_bad_settings_abort_the_run_before_any_job(monkeypatch) -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir) / "out"
        config.set_out_dir(out_dir)
        reset_engine()
        payload = _write(
            Path(temp_dir) / "acme.json",
            {"client": {"name": "Acme"}, "services": [{"id": "1", "category": "Audit", "service": "A", "price": 1}]},
        )
        jobs = ingest_payloads([payload])

        def unreachable(*args, **kwargs):  # noqa: ARG001 - test helper
            raise AssertionError("no job should be processed")

        monkeypatch.setattr("proposal_docs.pipeline.run.process_job", unreachable)
        with pytest.raises(ConfigurationError):
            run_pipeline(jobs, LayoutSettings(services_per_page=0))

        assert [job.slug for job in list_jobs([JobStatus.DRAFT])] == ["acme"]
        assert list_jobs([JobStatus.FAILED]) == []
        assert not (out_dir / "acme" / "error.log").exists()
