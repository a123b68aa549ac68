from __future__ import annotations

from proposal_docs.pipeline.ingest import slug_from_name


def test_slug_sanitization() -> None:
    slug = slug_from_name("Sharma Sons / Tax: 2026!")
    assert slug == "sharma-sons-tax-2026"


def test_slug_falls_back_to_hash() -> None:
    slug = slug_from_name("!!!")
    assert len(slug) == 12
    assert slug.isalnum()
