# app/services/pdf_renderer.py
"""
Court-form PDF rendering with a fallback ladder.

For one document type and its mapped field values, strategies are tried in
order until one yields a valid PDF:

  1. template_fill  fill the AcroForm widgets of <TEMPLATES_DIR>/<type>.pdf, then flatten
  2. overlay        draw values at fixed coordinates on the template's pages
  3. synthesized    build a court-style document from scratch
  4. placeholder    minimal document with a notice and a plain dump of the values

Only a failure of the placeholder escapes as RenderError.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import fitz  # PyMuPDF

from app.core.config import settings
from app.core.errors import RenderError, TemplateUnavailableError
from app.services.court_forms import COURT_FORMS, CourtForm
from app.utils.field_values import yes_no
from app.utils.pdf_parser import ensure_valid_pdf

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = 612, 792  # US Letter
MARGIN = 40
BOTTOM = PAGE_HEIGHT - 80
FONT = "helv"
FONT_BOLD = "hebo"
BLANK = "____________________"

HEADER_FIELDS = ("court_county", "case_number")
PARTY_FIELDS = ("attorney_name", "declarant_name", "petitioner_name")


@dataclass
class RenderResult:
    doc_type: str
    data: bytes
    strategy: str


def _widget_key(name: str) -> str:
    # topmostSubform[0].Page1[0].CaseNumber_ft[0] -> CaseNumber_ft[0]
    return (name or "").rsplit(".", 1)[-1]


def _break_word(word: str, fontsize: float, max_width: float, fontname: str = FONT) -> List[str]:
    chunks, chunk = [], ""
    for ch in word:
        if chunk and fitz.get_text_length(chunk + ch, fontname=fontname, fontsize=fontsize) > max_width:
            chunks.append(chunk)
            chunk = ch
        else:
            chunk += ch
    chunks.append(chunk)
    return chunks


def _wrap(text: str, fontsize: float, max_width: float, fontname: str = FONT) -> List[str]:
    lines = []
    for paragraph in str(text).splitlines() or [""]:
        line = ""
        for word in paragraph.split(" "):
            candidate = f"{line} {word}" if line else word
            if fitz.get_text_length(candidate, fontname=fontname, fontsize=fontsize) <= max_width:
                line = candidate
                continue
            if line:
                lines.append(line)
            # emails, URLs and other unbroken runs wider than a line
            *full, word = _break_word(word, fontsize, max_width, fontname)
            lines.extend(full)
            line = word
        lines.append(line)
    return lines


class _PageWriter:
    """Top-to-bottom text cursor that starts a new page when the current one fills up."""

    def __init__(self, doc: fitz.Document, top: float = 60):
        self.doc = doc
        self.top = top
        self.page = None
        self.y = 0.0
        self.new_page()

    def new_page(self):
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.y = self.top

    def ensure_room(self, height: float):
        if self.y + height > BOTTOM:
            self.new_page()

    def text(self, x: float, text: str, fontsize: float = 9, bold: bool = False, advance: float = None):
        self.ensure_room(fontsize + 4)
        self.page.insert_text((x, self.y), text, fontsize=fontsize, fontname=FONT_BOLD if bold else FONT)
        self.y += advance if advance is not None else fontsize + 6

    def field(self, label: str, value: str, label_x: float = 50, value_x: float = 210, fontsize: float = 9):
        lines = _wrap(value or BLANK, fontsize, PAGE_WIDTH - MARGIN - value_x)
        # keep the label with at least its first lines, long values continue on the next page
        self.ensure_room(min(len(lines), 3) * (fontsize + 4) + 2)
        self.page.insert_text((label_x, self.y), f"{label}:", fontsize=fontsize, fontname=FONT_BOLD)
        for line in lines:
            self.ensure_room(fontsize + 4)
            self.page.insert_text((value_x, self.y), line, fontsize=fontsize, fontname=FONT)
            self.y += fontsize + 4
        self.y += 2


class DocumentRenderer:
    def __init__(
        self,
        templates_dir: Optional[str] = None,
        forms: Mapping[str, CourtForm] = None,
        enabled: bool = True,
        court_name: str = None,
        default_county: str = None,
    ):
        self.templates_dir = Path(templates_dir) if templates_dir else None
        self.forms = dict(forms) if forms is not None else dict(COURT_FORMS)
        self.enabled = enabled
        self.court_name = court_name or settings.COURT_NAME
        self.default_county = default_county or settings.DEFAULT_COUNTY

    @classmethod
    def from_settings(cls):
        return cls(templates_dir=settings.TEMPLATES_DIR, enabled=settings.PDF_RENDERER_ENABLED)

    # -------------------
    # configuration
    # -------------------
    def is_configured(self) -> bool:
        if not self.enabled:
            return False
        return self.templates_dir is None or self.templates_dir.is_dir()

    def status(self) -> Dict[str, object]:
        if not self.enabled:
            message = "PDF renderer is disabled"
        elif not self.is_configured():
            message = f"Templates directory not found: {self.templates_dir}"
        elif self.templates_dir is None:
            message = "PDF renderer ready (no templates directory, forms are synthesized)"
        else:
            message = f"PDF renderer ready with templates from {self.templates_dir}"
        configured = self.is_configured()
        return {
            "configured": configured,
            "status": "ready" if configured else "not_configured",
            "message": message,
        }

    def template_path(self, doc_type: str) -> Optional[Path]:
        if self.templates_dir is None:
            return None
        path = self.templates_dir / f"{doc_type}.pdf"
        return path if path.is_file() else None

    # -------------------
    # ladder
    # -------------------
    def render(self, doc_type: str, values: Mapping[str, str]) -> RenderResult:
        values = {k: ("" if v is None else str(v)) for k, v in (values or {}).items()}
        form = self.forms.get(doc_type)
        steps = (
            ("template_fill", lambda: self.fill_template(doc_type, form, values)),
            ("overlay", lambda: self.overlay(doc_type, form, values)),
            ("synthesized", lambda: self.synthesize(doc_type, form, values)),
        )
        reasons = []
        for strategy, step in steps:
            try:
                data = ensure_valid_pdf(step())
            except TemplateUnavailableError as e:
                logger.debug("%s: %s skipped (%s)", doc_type, strategy, e)
                reasons.append(f"{strategy}: {e}")
                continue
            except Exception as e:
                logger.warning("%s: %s failed, falling back: %s", doc_type, strategy, e)
                reasons.append(f"{strategy}: {e}")
                continue
            logger.info("Rendered %s via %s", doc_type, strategy)
            return RenderResult(doc_type, data, strategy)

        try:
            data = ensure_valid_pdf(self.placeholder(doc_type, values, "; ".join(reasons)))
        except Exception as e:
            raise RenderError(doc_type, f"placeholder could not be built: {e}") from e
        logger.warning("Rendered %s as placeholder", doc_type)
        return RenderResult(doc_type, data, "placeholder")

    # -------------------
    # 1. template fill
    # -------------------
    def fill_template(self, doc_type: str, form: Optional[CourtForm], values: Mapping[str, str]) -> bytes:
        path = self.template_path(doc_type)
        if path is None:
            raise TemplateUnavailableError("no template file")

        # widget name -> (target, value)
        by_widget = {}
        aliases = form.widget_names if form else {}
        for target, value in values.items():
            by_widget[target] = (target, value)
            if target in aliases:
                by_widget[aliases[target]] = (target, value)

        doc = fitz.open(path)
        try:
            if not doc.is_form_pdf:
                raise TemplateUnavailableError("template has no fillable fields")
            landed = set()
            for page in doc:
                for widget in page.widgets():
                    name = widget.field_name
                    match = by_widget.get(name) or by_widget.get(_widget_key(name))
                    if match is None:
                        continue
                    target, value = match
                    if widget.field_type == fitz.PDF_WIDGET_TYPE_CHECKBOX:
                        widget.field_value = widget.on_state() if yes_no(value) == "Yes" else "Off"
                    else:
                        widget.field_value = value
                    widget.field_flags |= fitz.PDF_FIELD_IS_READ_ONLY
                    widget.update()
                    if value:
                        landed.add(target)
            if not landed:
                raise TemplateUnavailableError("no template field matched")
            logger.debug("%s: filled %d template fields", doc_type, len(landed))
            doc.bake()

            # values without a matching widget go where the coordinate table puts them
            missed = {t: v for t, v in values.items() if v and t not in landed}
            if form is not None and missed:
                drawn = self._draw_overlay(doc, form, missed)
                logger.debug("%s: overlaid %d values without a template field", doc_type, drawn)
            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()

    # -------------------
    # 2. positional overlay
    # -------------------
    def overlay(self, doc_type: str, form: Optional[CourtForm], values: Mapping[str, str]) -> bytes:
        path = self.template_path(doc_type)
        if path is None:
            raise TemplateUnavailableError("no template file")
        if form is None or not form.overlay:
            raise TemplateUnavailableError("no coordinate table")

        doc = fitz.open(path)
        try:
            if doc.page_count < 1:
                raise TemplateUnavailableError("template has no pages")
            self._draw_overlay(doc, form, values)
            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()

    def _draw_overlay(self, doc: fitz.Document, form: CourtForm, values: Mapping[str, str]) -> int:
        drawn = 0
        for target, value in values.items():
            position = form.overlay.get(target)
            if position is None or not value:
                continue
            page_no, x, y = position
            if page_no >= doc.page_count:
                continue
            doc[page_no].insert_text((x, y), value, fontsize=9, fontname=FONT)
            drawn += 1
        return drawn

    # -------------------
    # 3. synthesized layout
    # -------------------
    def synthesize(self, doc_type: str, form: Optional[CourtForm], values: Mapping[str, str]) -> bytes:
        title = form.title if form else doc_type
        sections = list(form.sections) if form else []
        footer_lines = form.footer_lines if form else []

        doc = fitz.open()
        try:
            writer = _PageWriter(doc, top=60)
            self._draw_header(writer.page, doc_type, title, values)
            writer.y = 215

            placed = set(HEADER_FIELDS)
            for heading, rows in sections:
                writer.ensure_room(40)
                writer.y += 6
                writer.text(MARGIN, heading, fontsize=10, bold=True, advance=16)
                for label, target in rows:
                    writer.field(label, values.get(target, ""))
                    placed.add(target)

            leftovers = [(k, v) for k, v in values.items() if k not in placed and v]
            if leftovers:
                writer.y += 6
                writer.text(MARGIN, "ADDITIONAL INFORMATION", fontsize=10, bold=True, advance=16)
                for key, value in leftovers:
                    writer.field(key.replace("_", " ").capitalize(), value)

            if footer_lines:
                writer.y += 20
                for line in footer_lines:
                    for wrapped in _wrap(line, 9, PAGE_WIDTH - 2 * MARGIN):
                        writer.text(MARGIN, wrapped, fontsize=9)

            self._draw_footers(doc, doc_type, title)
            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()

    def _draw_header(self, page, doc_type: str, title: str, values: Mapping[str, str]):
        black = (0, 0, 0)
        page.draw_line((30, 30), (PAGE_WIDTH - 30, 30), color=black, width=1)

        # left column: filing party
        page.insert_text((MARGIN, 50), "ATTORNEY OR PARTY WITHOUT ATTORNEY:", fontsize=7, fontname=FONT_BOLD)
        party = next((values[k] for k in PARTY_FIELDS if values.get(k)), "")
        page.insert_text((MARGIN, 64), party or BLANK, fontsize=9, fontname=FONT)

        # right column: court box
        box_x = PAGE_WIDTH - 240
        page.draw_rect(fitz.Rect(box_x, 38, PAGE_WIDTH - 30, 150), color=black, width=1.5)
        county = (values.get("court_county") or self.default_county).upper()
        page.insert_text((box_x + 12, 58), self.court_name, fontsize=9, fontname=FONT_BOLD)
        page.insert_text((box_x + 12, 73), f"COUNTY OF {county}", fontsize=9, fontname=FONT_BOLD)
        page.insert_text((box_x + 10, 120), "CASE NUMBER:", fontsize=7, fontname=FONT_BOLD)
        page.insert_text((box_x + 20, 136), values.get("case_number") or BLANK, fontsize=10, fontname=FONT)

        # title and form number
        title_lines = _wrap(title, 12, PAGE_WIDTH - 2 * MARGIN - 90, fontname=FONT_BOLD)
        y = 175
        for line in title_lines:
            width = fitz.get_text_length(line, fontname=FONT_BOLD, fontsize=12)
            page.insert_text(((PAGE_WIDTH - 90 - width) / 2, y), line, fontsize=12, fontname=FONT_BOLD)
            y += 15
        page.insert_text((PAGE_WIDTH - 100, 175), doc_type, fontsize=10, fontname=FONT_BOLD)

    def _draw_footers(self, doc: fitz.Document, doc_type: str, title: str):
        total = doc.page_count
        for number, page in enumerate(doc, start=1):
            y = PAGE_HEIGHT - 60
            page.draw_line((MARGIN, y), (PAGE_WIDTH - MARGIN, y), color=(0, 0, 0), width=1)
            page.insert_text((MARGIN, y + 15), doc_type, fontsize=7, fontname=FONT)
            short_title = title if len(title) <= 70 else title[:67] + "..."
            page.insert_text((130, y + 15), short_title, fontsize=7, fontname=FONT)
            page.insert_text((PAGE_WIDTH - 100, y + 15), f"Page {number} of {total}", fontsize=7, fontname=FONT)

    # -------------------
    # 4. placeholder
    # -------------------
    def placeholder(self, doc_type: str, values: Mapping[str, str], reason: str = "") -> bytes:
        doc = fitz.open()
        try:
            writer = _PageWriter(doc, top=60)
            writer.text(MARGIN, doc_type, fontsize=16, bold=True, advance=24)
            writer.text(MARGIN, "Template missing or could not be rendered.", fontsize=11, advance=18)
            if reason:
                for line in _wrap(f"Reason: {reason}", 8, PAGE_WIDTH - 2 * MARGIN):
                    writer.text(MARGIN, line, fontsize=8, advance=11)
            writer.y += 12
            for key, value in values.items():
                if not value:
                    continue
                for line in _wrap(f"{key}: {value}", 9, PAGE_WIDTH - 2 * MARGIN):
                    writer.text(MARGIN, line, fontsize=9, advance=13)
            return doc.tobytes()
        finally:
            doc.close()
