from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Iterable, List

from slugify import slugify

from sqlmodel import select

from ..config import DEFAULT_CLIENT_NAME
from ..models import JobStatus, ProposalJob, get_session, init_db


def load_payload(payload_path: Path) -> dict:
    if not payload_path.exists():
        raise FileNotFoundError(f"Payload not found: {payload_path}")
    try:
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Payload is not valid JSON: {payload_path} ({exc})") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Payload must be a JSON object: {payload_path}")
    return payload


def _client_name(payload: dict) -> str:
    client = payload.get("client")
    name = client.get("name") if isinstance(client, dict) else None
    return str(name).strip() if name and str(name).strip() else DEFAULT_CLIENT_NAME


def slug_from_name(name: str) -> str:
    slug = slugify(name)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(name.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from client name")
    return slug


def _unique_slug(base: str, taken: set) -> str:
    slug = base
    counter = 2
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def ingest_payloads(payload_paths: Iterable[Path]) -> List[ProposalJob]:
    """
    Register one DRAFT job per payload file.

    Payload contents are only checked for JSON shape here; field validation happens
    when the job is laid out, so a bad payload ends up as a FAILED job with a reason.
    """
    init_db()
    with get_session() as session:
        taken = set(session.exec(select(ProposalJob.slug)).all())

    seen_paths = set()
    jobs: List[ProposalJob] = []
    for payload_path in payload_paths:
        resolved = payload_path.resolve()
        if resolved in seen_paths:
            raise ValueError(f"Duplicate payload: {payload_path}")
        seen_paths.add(resolved)

        payload = load_payload(payload_path)
        client_name = _client_name(payload)
        slug = _unique_slug(slug_from_name(client_name), taken)
        taken.add(slug)
        services = payload.get("services")
        jobs.append(
            ProposalJob(
                client_name=client_name,
                slug=slug,
                payload_path=str(resolved),
                service_count=len(services) if isinstance(services, list) else 0,
                status=JobStatus.DRAFT,
            )
        )

    with get_session() as session:
        session.add_all(jobs)
        session.commit()
        for job in jobs:
            session.refresh(job)
    return jobs


def list_jobs(statuses: Iterable[JobStatus], client: str | None = None) -> List[ProposalJob]:
    init_db()
    with get_session() as session:
        statement = select(ProposalJob)
        if client:
            statement = statement.where(ProposalJob.client_name == client)
        if statuses:
            statement = statement.where(ProposalJob.status.in_(list(statuses)))
        return list(session.exec(statement))
