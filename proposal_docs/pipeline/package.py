from __future__ import annotations

from pathlib import Path
import zipfile

from ..storage import artifact_path


def create_readme(out_dir: Path, client_name: str, page_counts: dict) -> Path:
    path = artifact_path(out_dir, "readme")
    lines = [
        f"Proposal documents for {client_name}.",
        f"cover_letter.pdf: cover letter with the fee schedule ({page_counts.get('fee_schedule', 1)} page(s)).",
        f"scope_of_services.pdf: itemised scope of services ({page_counts.get('scope_of_services', 1)} page(s)).",
        "layout.json: the document layout both PDFs were drawn from.",
        "Print, sign and stamp the cover letter to accept the proposal.",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def create_bundle(out_dir: Path, fee_schedule_pdf: Path, scope_pdf: Path, readme_path: Path) -> Path:
    """
    Zip the deliverables for one proposal.

    Expected contents (all required):
      - cover_letter.pdf
      - scope_of_services.pdf
      - layout.json
      - README.txt
    """
    bundle_path = artifact_path(out_dir, "bundle")

    required_files = [
        fee_schedule_pdf,
        scope_pdf,
        artifact_path(out_dir, "layout"),
        readme_path,
    ]

    missing = [p for p in required_files if not p.exists()]
    if missing:
        missing_list = ", ".join(str(p) for p in missing)
        raise FileNotFoundError(f"[{out_dir.name}] bundle inputs missing: {missing_list}")

    # fixed order keeps the zip reproducible
    with zipfile.ZipFile(bundle_path, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
        for p in required_files:
            bundle.write(p, arcname=p.name)

    return bundle_path
