from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF

from ..storage import artifact_path


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1400) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the image is at least min_px
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(2.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_preview(pdf_path: Path, out_dir: Path, artifact_type: str) -> Path:
    """Render the first page of pdf_path as a PNG preview artifact."""
    out_path = artifact_path(out_dir, artifact_type)
    with fitz.open(pdf_path) as doc:
        _render_page_to_png(doc, 0, out_path)
    return out_path


def render_previews(fee_schedule_pdf: Path, scope_pdf: Path, out_dir: Path) -> tuple[Path, Path]:
    fee_preview = render_preview(fee_schedule_pdf, out_dir, "preview_fee_schedule")
    scope_preview = render_preview(scope_pdf, out_dir, "preview_scope_of_services")
    return fee_preview, scope_preview
