from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Set

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..config import load_style_preset
from ..layout.composer import ProposalDocuments
from ..layout.document import DocumentTree, PageBreak, ServicePageBlock, TableBlock, TextBlock
from ..storage import artifact_path


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except Exception:
        return default


def _s(style: dict, key: str, default):
    return style.get(key, default)


# gap above / below each text role, in points
ROLE_SPACING: Dict[str, tuple[float, float]] = {
    "date": (0, 20),
    "address": (0, 20),
    "subject": (0, 16),
    "salutation": (0, 16),
    "message": (0, 20),
    "terms": (24, 16),
    "acceptance": (16, 40),
    "signature": (40, 0),
    "enclosure": (20, 0),
}

# lines drawn in the bold face, by index within the block
ROLE_BOLD_LINES: Dict[str, Set[int]] = {
    "address": {1, 2},
    "signature": {0, 2},
}


@dataclass
class _Frame:
    canv: canvas.Canvas
    style: dict
    pw: float
    ph: float
    margin: float
    y: float

    @property
    def top(self) -> float:
        return self.ph - self.margin

    @property
    def width(self) -> float:
        return self.pw - 2 * self.margin

    def font(self, bold: bool = False) -> str:
        if bold:
            return str(_s(self.style, "font_bold", "Helvetica-Bold"))
        return str(_s(self.style, "font_name", "Helvetica"))

    def leading(self, size: float) -> float:
        return size * float(_s(self.style, "line_height", 1.5))

    def new_page(self) -> None:
        self.canv.showPage()
        self.y = self.top

    def ensure_space(self, needed: float) -> None:
        if self.y - needed < self.margin and self.y < self.top:
            self.new_page()


def _fit_font(canv: canvas.Canvas, text: str, font_name: str, base_size: float, max_width: float) -> float:
    """Shrink the font until text fits max_width."""
    size = float(base_size)
    while size > 7.0:
        if canv.stringWidth(text, font_name, size) <= max_width:
            return size
        size -= 0.5
    return 7.0


def _wrap_words(canv: canvas.Canvas, text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    words = (text or "").split()
    if not words:
        return [""]

    lines: List[str] = []
    cur: List[str] = []

    for w in words:
        test = (" ".join(cur + [w])).strip()
        if canv.stringWidth(test, font_name, font_size) <= max_width:
            cur.append(w)
            continue

        if cur:
            lines.append(" ".join(cur))
            cur = [w]
        else:
            # a single word wider than the column goes on its own line
            lines.append(w)

    if cur:
        lines.append(" ".join(cur))

    return lines


def _underline(canv: canvas.Canvas, x: float, y: float, text: str, font: str, size: float) -> None:
    canv.setLineWidth(0.6)
    canv.line(x, y - 1.5, x + canv.stringWidth(text, font, size), y - 1.5)


def _draw_text_block(frame: _Frame, block: TextBlock) -> None:
    canv = frame.canv
    size = float(_s(frame.style, "body_size", 11))
    leading = frame.leading(size)
    text_color = _hex(_s(frame.style, "text_color", "#1F2937"))
    before, after = ROLE_SPACING.get(block.role, (0, 12))
    bold_lines = ROLE_BOLD_LINES.get(block.role, set())

    indent = 10.0 if block.role == "terms" else 0.0
    prefix = "• " if block.role == "terms" else ""
    width = frame.width - indent

    wrapped: List[tuple[str, bool]] = []
    for i, line in enumerate(block.lines):
        bold = i in bold_lines or block.role == "subject"
        for part in _wrap_words(canv, prefix + line, frame.font(bold), size, width):
            wrapped.append((part, bold))

    title_h = leading + 6 if block.title else 0
    frame.y -= before
    frame.ensure_space(title_h + leading * min(len(wrapped), 3))

    canv.setFillColor(text_color)
    canv.setStrokeColor(text_color)
    if block.title:
        font = frame.font(True)
        canv.setFont(font, size)
        frame.y -= size
        canv.drawString(frame.margin, frame.y, block.title)
        _underline(canv, frame.margin, frame.y, block.title, font, size)
        frame.y -= leading - size + 6

    for text, bold in wrapped:
        frame.ensure_space(leading)
        font = frame.font(bold)
        canv.setFont(font, size)
        frame.y -= size
        if block.role == "date":
            canv.drawRightString(frame.pw - frame.margin, frame.y, text)
        else:
            canv.drawString(frame.margin + indent, frame.y, text)
            if block.role == "subject":
                _underline(canv, frame.margin, frame.y, text, font, size)
        frame.y -= leading - size
    frame.y -= after


def _draw_table_block(frame: _Frame, block: TableBlock) -> None:
    canv = frame.canv
    style = frame.style
    size = float(_s(style, "table_size", 10))
    title_size = float(_s(style, "category_size", 12))
    grid = _hex(_s(style, "grid_color", "#000000"))
    row_rule = _hex(_s(style, "row_rule_color", "#E5E7EB"))
    header_fill = _hex(_s(style, "header_fill", "#F3F4F6"))
    text_color = _hex(_s(style, "text_color", "#1F2937"))

    weights = [0.5, 0.25, 0.25]
    col_w = [frame.width * w for w in weights]
    pad = 6.0
    line_h = size * 1.3

    def cell_lines(values, bold: bool) -> List[List[str]]:
        return [
            _wrap_words(canv, str(v), frame.font(bold), size, col_w[i] - 2 * pad)
            for i, v in enumerate(values)
        ]

    header = cell_lines(block.columns, True)
    header_h = max(len(c) for c in header) * line_h + 2 * 8
    body = [cell_lines(row, False) for row in block.rows]
    row_hs = [max(len(c) for c in cells) * line_h + 2 * pad for cells in body]
    title_h = title_size * 1.5 + 8
    table_h = header_h + sum(row_hs)

    # a table is kept in one piece only when it fits on a fresh page
    frame.y -= 16
    if title_h + table_h <= frame.top - frame.margin:
        frame.ensure_space(title_h + table_h)
    else:
        frame.ensure_space(title_h + header_h + (row_hs[0] if row_hs else 0))

    canv.setFillColor(text_color)
    canv.setStrokeColor(text_color)
    title_font = frame.font(True)
    canv.setFont(title_font, title_size)
    frame.y -= title_size
    canv.drawString(frame.margin, frame.y, block.title)
    _underline(canv, frame.margin, frame.y, block.title, title_font, title_size)
    frame.y -= 8 + title_size * 0.3

    x0 = frame.margin

    def draw_cells(cells: List[List[str]], y_top: float, bold: bool, v_pad: float) -> None:
        x = x0
        canv.setFillColor(text_color)
        canv.setFont(frame.font(bold), size)
        for i, lines in enumerate(cells):
            yy = y_top - v_pad - size
            for line in lines:
                canv.drawString(x + pad, yy, line)
                yy -= line_h
            x += col_w[i]

    def draw_header(top: float) -> float:
        canv.setFillColor(header_fill)
        canv.rect(x0, top - header_h, frame.width, header_h, stroke=0, fill=1)
        draw_cells(header, top, True, 8)
        y = top - header_h
        canv.setStrokeColor(grid)
        canv.setLineWidth(1)
        canv.line(x0, y, x0 + frame.width, y)
        return y

    def close_border(top: float, bottom: float) -> None:
        canv.setStrokeColor(grid)
        canv.setLineWidth(1)
        x = x0
        for w in col_w[:-1]:
            x += w
            canv.line(x, top, x, bottom)
        canv.rect(x0, bottom, frame.width, top - bottom, stroke=1, fill=0)

    top = frame.y
    y = draw_header(top)
    for cells, row_h in zip(body, row_hs):
        if y - row_h < frame.margin:
            # continue on the next page under a repeated header
            close_border(top, y)
            frame.new_page()
            top = frame.y
            y = draw_header(top)
        draw_cells(cells, y, False, pad)
        y -= row_h
        canv.setStrokeColor(row_rule)
        canv.line(x0, y, x0 + frame.width, y)

    close_border(top, y)
    frame.y = y - 16


def _draw_service_page(frame: _Frame, block: ServicePageBlock) -> None:
    canv = frame.canv
    style = frame.style
    text_color = _hex(_s(style, "text_color", "#1F2937"))
    secondary = _hex(_s(style, "secondary_color", "#6B7280"))
    rule = _hex(_s(style, "service_rule_color", "#D1D5DB"))
    side_w = float(_s(style, "side_title_w", 80))
    fee_w = float(_s(style, "fee_column_w", 120))
    header_size = float(_s(style, "header_size", 14))
    title_size = float(_s(style, "service_title_size", 12))
    desc_size = float(_s(style, "service_desc_size", 10))
    fee_size = float(_s(style, "fee_size", 16))
    cycle_size = float(_s(style, "cycle_size", 9))

    if frame.y < frame.top:
        frame.new_page()

    bold = frame.font(True)
    regular = frame.font(False)
    x_left = frame.margin + side_w
    x_right = frame.pw - frame.margin

    # header row + divider
    canv.setFillColor(text_color)
    canv.setFont(bold, header_size)
    frame.y -= header_size
    canv.drawString(x_left, frame.y, block.header[0])
    canv.drawRightString(x_right, frame.y, block.header[1])
    frame.y -= 8
    canv.setStrokeColor(secondary)
    canv.setLineWidth(2)
    canv.line(frame.margin, frame.y, x_right, frame.y)
    frame.y -= 20

    content_top = frame.y
    content_h = content_top - frame.margin

    # vertical side title, reading bottom to top
    side_size = _fit_font(canv, block.side_title, bold, float(_s(style, "side_title_size", 40)), content_h)
    canv.saveState()
    canv.translate(frame.margin + side_w / 2 + side_size * 0.35, content_top - content_h / 2)
    canv.rotate(90)
    canv.setFont(bold, side_size)
    canv.drawCentredString(0, 0, block.side_title)
    canv.restoreState()

    x_rows = x_left + 16
    detail_w = x_right - fee_w - 16 - x_rows
    for row in block.rows:
        frame.y -= 12
        row_top = frame.y

        canv.setFillColor(text_color)
        canv.setFont(bold, title_size)
        yy = row_top - title_size
        for line in _wrap_words(canv, row.name, bold, title_size, detail_w):
            canv.drawString(x_rows, yy, line)
            yy -= title_size * 1.3
        if row.scope:
            yy += title_size - desc_size - 4
            canv.setFillColor(secondary)
            canv.setFont(regular, desc_size)
            for line in _wrap_words(canv, row.scope, regular, desc_size, detail_w):
                canv.drawString(x_rows, yy, line)
                yy -= desc_size * 1.4

        canv.setFillColor(text_color)
        canv.setFont(bold, fee_size)
        fy = row_top - fee_size
        canv.drawRightString(x_right, fy, row.fee)
        if row.billing_cycle:
            fy -= cycle_size + 4
            canv.setFillColor(secondary)
            canv.setFont(regular, cycle_size)
            canv.drawRightString(x_right, fy, row.billing_cycle)

        frame.y = min(yy, fy - cycle_size) - 6
        canv.setStrokeColor(rule)
        canv.setLineWidth(0.5)
        canv.line(x_rows, frame.y, x_right, frame.y)


def _draw_page_break(frame: _Frame, block: PageBreak) -> None:  # noqa: ARG001 - dispatch signature
    frame.new_page()


BLOCK_RENDERERS: Dict[str, Callable[[_Frame, object], None]] = {
    TextBlock.kind: _draw_text_block,
    TableBlock.kind: _draw_table_block,
    ServicePageBlock.kind: _draw_service_page,
    PageBreak.kind: _draw_page_break,
}


def render_pdf(tree: DocumentTree, output_path: Path) -> None:
    style = load_style_preset()
    pw, ph = A4
    canv = canvas.Canvas(str(output_path), pagesize=A4)
    margin = float(_s(style, "margin", 50))
    frame = _Frame(canv=canv, style=style, pw=pw, ph=ph, margin=margin, y=ph - margin)

    for block in tree.blocks:
        BLOCK_RENDERERS[block.kind](frame, block)

    canv.showPage()
    canv.save()


def render_pdfs(documents: ProposalDocuments, out_dir: Path) -> tuple[Path, Path]:
    fee_path = artifact_path(out_dir, "pdf_fee_schedule")
    scope_path = artifact_path(out_dir, "pdf_scope_of_services")
    render_pdf(documents.fee_schedule, fee_path)
    render_pdf(documents.scope_of_services, scope_path)
    return fee_path, scope_path
