"""Split pasted exam text into individual questions."""

from __future__ import annotations

import re
from typing import List

from app.config.settings import settings


# Leading labels that open a new question: Q1. / 1) / (a) / b.
# Digits and letters are ASCII only; other scripts' numerals are not labels.
QUESTION_BOUNDARY_RE = re.compile(
    r"^(([qQ][0-9]+[.:\s])|([0-9]+[.):\s])|(\([a-zA-Z0-9]+\))|([a-zA-Z][.)\s]))"
)


def is_question_boundary(line: str) -> bool:
    """Return True when ``line`` looks like the start of a new question."""
    return QUESTION_BOUNDARY_RE.match(line.strip()) is not None


def _long_enough(text: str) -> bool:
    return len(text) >= settings.min_question_length


def parse_questions(text: str, batch_mode: bool) -> List[str]:
    """Turn raw input into an ordered list of questions.

    In single mode the whole trimmed input is one question. In batch mode
    lines are accumulated into a buffer which is flushed whenever a boundary
    line arrives and the buffer is already long enough; the result is capped
    at ``settings.max_batch_questions``.
    """
    if not batch_mode:
        question = text.strip()
        return [question] if _long_enough(question) else []

    questions: List[str] = []
    current = ""
    for line in text.split("\n"):
        if is_question_boundary(line) and _long_enough(current):
            questions.append(current.strip())
            current = line
        else:
            current += ("\n" if current else "") + line

    if _long_enough(current.strip()):
        questions.append(current.strip())

    return questions[: settings.max_batch_questions]


def count_questions(text: str, batch_mode: bool) -> int:
    return len(parse_questions(text, batch_mode))
