"""Tests for PDF, Word and Word-HTML answer exports."""

from datetime import date
from io import BytesIO
from pathlib import Path
from unittest.mock import patch

import pytest
from docx import Document
from reportlab.pdfgen import canvas

from app.services.answer_generator import MarksWeightage
from app.services.exporters import (
    PDF_MARGIN,
    ExportError,
    export_filename,
    render_answer,
    render_answer_doc_html,
    render_answer_docx,
    render_answer_pdf,
    save_export,
    tag_answer_lines,
)
from app.services.store import GeneratedAnswer


ANSWER_TEXT = (
    "An operating system manages hardware and software resources.\n"
    "\n"
    "1) Process Management** Creates and schedules processes.\n"
    "2) Memory Management** Allocates memory to programs.\n"
    "a) Plain label without marker\n"
    "Conclusion: the OS is the core of the system."
)


@pytest.fixture
def answer() -> GeneratedAnswer:
    return GeneratedAnswer(
        id="1700000000000abc123xyz",
        question="Explain the functions of an operating system.",
        marks=MarksWeightage.eight,
        style="SPPU Model Answer",
        answer=ANSWER_TEXT,
        timestamp=1_700_000_000_000,
    )


class TestTagAnswerLines:
    """Tests for tag_answer_lines function."""

    def test_skips_blank_lines(self):
        lines = tag_answer_lines(ANSWER_TEXT)

        assert len(lines) == 5

    def test_point_with_title_marker(self):
        point = tag_answer_lines(ANSWER_TEXT)[1]

        assert point.is_point
        assert point.label == "1)"
        assert point.title == "Process Management"
        assert point.content == "Creates and schedules processes."

    def test_point_without_marker(self):
        point = tag_answer_lines("a) Plain label without marker")[0]

        assert point.label == "a)"
        assert point.title == "Plain label without marker"
        assert point.content == ""

    def test_plain_paragraphs(self):
        lines = tag_answer_lines(ANSWER_TEXT)

        assert not lines[0].is_point
        assert not lines[-1].is_point
        assert lines[-1].text == "Conclusion: the OS is the core of the system."

    @pytest.mark.parametrize("line", ["1. Dotted label", "(a) Parenthesized", "Q1) Prefixed"])
    def test_question_style_labels_are_paragraphs(self, line):
        assert not tag_answer_lines(line)[0].is_point


class TestRenderAnswerPdf:
    """Tests for render_answer_pdf function."""

    def test_produces_pdf(self, answer):
        content = render_answer_pdf(answer, generated_on=date(2024, 1, 15))

        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")

    def test_long_answers_paginate(self, answer):
        short_pdf = render_answer_pdf(answer)
        answer.answer = "\n".join(f"{i}) Point {i}** " + "detail " * 40 for i in range(1, 80))
        long_pdf = render_answer_pdf(answer)

        assert long_pdf.count(b"/Type /Page") > short_pdf.count(b"/Type /Page")

    def test_long_question_paginates(self, answer):
        answer.question = "\n".join(f"continuation line {n} of the question" for n in range(90))
        answer.answer = "short answer"

        with patch.object(canvas.Canvas, "drawString", autospec=True) as draw:
            render_answer_pdf(answer)

        drawn = [(call.args[2], call.args[3]) for call in draw.call_args_list]
        assert all(y >= PDF_MARGIN for y, _ in drawn)
        texts = [text for _, text in drawn]
        assert "continuation line 89 of the question" in texts
        assert texts[-1] == "short answer"


class TestRenderAnswerDocx:
    """Tests for render_answer_docx function."""

    def test_structure(self, answer):
        content = render_answer_docx(answer, generated_on=date(2024, 1, 15))
        document = Document(BytesIO(content))
        texts = [p.text for p in document.paragraphs]

        assert texts[0] == "SPPU Model Answer"
        assert texts[1] == "Date: 15/01/2024 | Weightage: 8 Marks | Style: SPPU Model Answer"
        assert texts[2] == "Q: Explain the functions of an operating system."
        assert "1) Process Management Creates and schedules processes." in texts
        assert "a) Plain label without marker" in texts
        assert "" not in texts[3:]

    def test_point_runs_are_bold(self, answer):
        document = Document(BytesIO(render_answer_docx(answer)))
        point = next(p for p in document.paragraphs if p.text.startswith("1)"))
        runs = point.runs

        assert runs[0].text == "1)" and runs[0].bold
        assert runs[2].text == "Process Management" and runs[2].bold
        assert not runs[3].bold


class TestRenderAnswerDocHtml:
    """Tests for render_answer_doc_html function."""

    def test_bom_and_points(self, answer):
        content = render_answer_doc_html(answer, generated_on=date(2024, 1, 15))
        html = content.decode("utf-8")

        assert html.startswith("\ufeff")
        assert "Weightage: 8 Marks" in html
        assert '<span class="point-num">1)</span>' in html
        assert '<span class="point-title">Memory Management</span>' in html
        assert "<p>Conclusion: the OS is the core of the system.</p>" in html

    def test_escapes_markup(self, answer):
        answer.question = "Compare <b> and <i> tags"
        html = render_answer_doc_html(answer).decode("utf-8")

        assert "&lt;b&gt;" in html
        assert "Compare <b>" not in html


class TestRenderAnswer:
    """Tests for render_answer dispatch and file helpers."""

    def test_unsupported_format(self, answer):
        with pytest.raises(ExportError):
            render_answer(answer, "odt")

    def test_export_filename(self, answer):
        assert export_filename(answer, "pdf") == "SPPU_Answer_1700000000000abc123xyz.pdf"

    def test_save_export(self, answer, tmp_path: Path):
        path = save_export(answer, "docx", output_dir=tmp_path)

        assert path == tmp_path / "SPPU_Answer_1700000000000abc123xyz.docx"
        assert path.read_bytes()[:2] == b"PK"
