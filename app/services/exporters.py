"""Render a generated answer as PDF, Word (.docx) or Word-compatible HTML (.doc)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from docx import Document
from docx.shared import Pt, RGBColor
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from app.config.settings import settings
from app.services.store import GeneratedAnswer


class ExportError(RuntimeError):
    """Raised when an answer cannot be rendered to a document."""


DOCUMENT_TITLE = "SPPU Model Answer"

# "1) Title** rest" or "a) Title** rest"; matched independently of question boundaries
ANSWER_POINT_RE = re.compile(r"^(\d+\)|[a-zA-Z]\))\s*(.*?)(\*\*|$)(.*)$")

PDF_MARGIN = 20 * mm
PDF_LINE_HEIGHT = 5 * mm

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "doc": "application/msword",
}

POINT_NUM_COLOR = RGBColor(0x43, 0x38, 0xCA)
TITLE_COLOR = RGBColor(0x31, 0x2E, 0x81)
META_COLOR = RGBColor(0x64, 0x74, 0x8B)


@dataclass
class AnswerLine:
    """One non-blank answer line, tagged as a labeled point or a plain paragraph."""

    text: str
    label: Optional[str] = None
    title: str = ""
    content: str = ""

    @property
    def is_point(self) -> bool:
        return self.label is not None


def tag_answer_lines(answer_text: str) -> List[AnswerLine]:
    lines: List[AnswerLine] = []
    for line in answer_text.split("\n"):
        if not line.strip():
            continue
        match = ANSWER_POINT_RE.match(line)
        if match:
            label, title, _, content = match.groups()
            lines.append(AnswerLine(text=line, label=label, title=title.strip(), content=content.strip()))
        else:
            lines.append(AnswerLine(text=line))
    return lines


def export_filename(answer: GeneratedAnswer, extension: str) -> str:
    return f"SPPU_Answer_{answer.id}.{extension}"


def _today(generated_on: Optional[date]) -> str:
    return (generated_on or date.today()).strftime("%d/%m/%Y")


def _wrap(text: str, font_name: str, font_size: float, width: float) -> List[str]:
    wrapped: List[str] = []
    for raw_line in text.split("\n"):
        wrapped.extend(simpleSplit(raw_line, font_name, font_size, width) or [""])
    return wrapped


def _draw_wrapped(pdf: canvas.Canvas, lines: List[str], font_name: str, font_size: float, y: float) -> float:
    """Draw ``lines`` top-down from ``y``, starting a new page at the bottom margin."""
    page_height = A4[1]
    pdf.setFont(font_name, font_size)
    for line in lines:
        if y < PDF_MARGIN:
            pdf.showPage()
            pdf.setFont(font_name, font_size)
            y = page_height - PDF_MARGIN
        pdf.drawString(PDF_MARGIN, y, line)
        y -= PDF_LINE_HEIGHT
    return y


def render_answer_pdf(answer: GeneratedAnswer, *, generated_on: Optional[date] = None) -> bytes:
    """Paginated A4 PDF with the question and answer wrapped to a fixed content width."""
    buffer = BytesIO()
    page_width, page_height = A4
    max_line_width = page_width - PDF_MARGIN * 2
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(DOCUMENT_TITLE)
    pdf.setAuthor(settings.app_name)

    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawString(PDF_MARGIN, page_height - 20 * mm, DOCUMENT_TITLE)

    pdf.setFont("Helvetica", 10)
    pdf.setFillGray(100 / 255)
    pdf.drawString(
        PDF_MARGIN,
        page_height - 28 * mm,
        f"Generated on: {_today(generated_on)} • {answer.marks.value} Marks",
    )
    pdf.line(PDF_MARGIN, page_height - 32 * mm, page_width - PDF_MARGIN, page_height - 32 * mm)

    pdf.setFillGray(0)
    question_lines = _wrap(f"Question: {answer.question}", "Helvetica-Bold", 11, max_line_width)
    y = _draw_wrapped(pdf, question_lines, "Helvetica-Bold", 11, page_height - 42 * mm)
    y -= 3 * mm

    answer_lines = _wrap(answer.answer, "Helvetica", 10, max_line_width)
    _draw_wrapped(pdf, answer_lines, "Helvetica", 10, y)
    pages = pdf.getPageNumber()

    try:
        pdf.save()
    except Exception as exc:
        raise ExportError(f"Failed to render PDF for answer {answer.id}") from exc

    logger.info(f"Rendered PDF | answer={answer.id} | pages={pages}")
    return buffer.getvalue()


def render_answer_docx(answer: GeneratedAnswer, *, generated_on: Optional[date] = None) -> bytes:
    """Word document with numbered/lettered points rendered as labeled items."""
    document = Document()
    document.core_properties.title = DOCUMENT_TITLE

    heading = document.add_heading(DOCUMENT_TITLE, level=1)
    for run in heading.runs:
        run.font.color.rgb = TITLE_COLOR

    meta = document.add_paragraph()
    meta_run = meta.add_run(
        f"Date: {_today(generated_on)} | Weightage: {answer.marks.value} Marks | Style: {answer.style}"
    )
    meta_run.font.size = Pt(10)
    meta_run.font.color.rgb = META_COLOR

    question = document.add_paragraph()
    question_run = question.add_run(f"Q: {answer.question}")
    question_run.bold = True
    question_run.font.size = Pt(12)

    for line in tag_answer_lines(answer.answer):
        paragraph = document.add_paragraph()
        if not line.is_point:
            paragraph.add_run(line.text)
            continue
        label_run = paragraph.add_run(line.label)
        label_run.bold = True
        label_run.font.color.rgb = POINT_NUM_COLOR
        if line.title:
            paragraph.add_run(" ")
            paragraph.add_run(line.title).bold = True
        if line.content:
            paragraph.add_run(f" {line.content}")
        paragraph.paragraph_format.space_after = Pt(4)

    buffer = BytesIO()
    try:
        document.save(buffer)
    except Exception as exc:
        raise ExportError(f"Failed to render Word document for answer {answer.id}") from exc

    logger.info(f"Rendered DOCX | answer={answer.id}")
    return buffer.getvalue()


def _env(template_dir: Optional[Path] = None) -> Environment:
    loader = FileSystemLoader(str(template_dir or settings.html_template_dir))
    return Environment(loader=loader, autoescape=select_autoescape(["html", "xml"]))


def render_answer_doc_html(answer: GeneratedAnswer, *, generated_on: Optional[date] = None) -> bytes:
    """Word-compatible HTML, BOM-prefixed, for the legacy ``.doc`` download."""
    template = _env().get_template("answer_doc.html")
    html = template.render(
        title=DOCUMENT_TITLE,
        date=_today(generated_on),
        answer=answer,
        lines=tag_answer_lines(answer.answer),
    )
    return ("\ufeff" + html).encode("utf-8")


RENDERERS = {
    "pdf": render_answer_pdf,
    "docx": render_answer_docx,
    "doc": render_answer_doc_html,
}


def render_answer(answer: GeneratedAnswer, fmt: str, *, generated_on: Optional[date] = None) -> bytes:
    try:
        renderer = RENDERERS[fmt]
    except KeyError:
        raise ExportError(f"Unsupported export format {fmt!r}") from None
    return renderer(answer, generated_on=generated_on)


def save_export(answer: GeneratedAnswer, fmt: str, output_dir: Optional[Path] = None) -> Path:
    """Render ``answer`` and write it under the export directory."""
    target_dir = output_dir or settings.export_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(answer, fmt)
    path.write_bytes(render_answer(answer, fmt))
    logger.info(f"Saved export | path={path}")
    return path
