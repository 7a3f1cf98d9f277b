"""LLM client for generating SPPU model answers and suggesting questions."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from loguru import logger
from openai import OpenAI

from app.config.settings import settings


class GenerationError(RuntimeError):
    """Raised when an answer cannot be generated."""


class MarksWeightage(str, Enum):
    two = "2"
    five = "5"
    eight = "8"
    ten = "10"


class DefaultAnswerStyle(str, Enum):
    model_answer = "SPPU Model Answer"
    brief = "Brief"
    detailed = "Detailed"


DEFAULT_STYLE = DefaultAnswerStyle.model_answer.value
EMPTY_ANSWER_FALLBACK = "Sorry, I couldn't generate an answer at this time."

SYSTEM_INSTRUCTION = """You are an SPPU University examiner, senior evaluator, and model answer designer.

Core Objective: Generate exam-ready model answers that look correct, complete, and easy to evaluate.

Mandatory Answer Structure (unless overridden by specific style):
1. Introduction / Definition: 1-2 lines only. Crisp, formal tone.
2. Body (Point-Wise Explanation):
   - Strictly in points using "X) Title** Explanation" format.
   - Points must be 2-4 lines max.
   - Maintain logical flow: Concept -> working -> advantages/examples -> applications.
3. Conclusion (Optional): 1 short line only if suitable.

Marks-Based Content Control:
- 2 Marks -> 2-3 concise points
- 5 Marks -> 5-6 well-explained points
- 8 Marks -> 8-9 structured points
- 10 Marks -> 10-12 complete points

Style Rules:
- Use simple, direct, technically correct language.
- Use standard keywords: definition, working principle, logic, block diagram, truth table, advantage, application, limitation.
- NO long paragraphs, NO conversational tone, NO over-justification.

Output Requirement:
- Answers must appear correct at first glance.
- Compact, scan-ready, and matching SPPU evaluation patterns."""

SUGGESTION_SYSTEM_INSTRUCTION = (
    "You are an SPPU University question paper setter. "
    "Provide only the questions in a numbered list."
)

ANSWER_LLM_PARAMS = {
    "temperature": 0.7,
    "top_p": 0.95,
}

SUGGESTION_LLM_PARAMS = {
    "temperature": 0.8,
}


def _ensure_openai_client(client: Optional[OpenAI] = None) -> OpenAI:
    if client is not None:
        return client

    api_key = settings.openai_api_key
    if not api_key:
        raise GenerationError(
            "OpenAI API key is not configured. Set the OPENAI_API_KEY environment variable."
        )

    return OpenAI(
        api_key=api_key,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout_seconds,
    )


def _marks_value(marks: MarksWeightage | str) -> str:
    return marks.value if isinstance(marks, MarksWeightage) else str(marks)


def _build_answer_prompt(
    question: str,
    marks: MarksWeightage | str,
    style: str,
    custom_instruction: Optional[str] = None,
) -> str:
    if custom_instruction:
        style_context = f'Apply this custom style instruction: "{custom_instruction}"'
    else:
        style_context = f'Follow the standard "{style}" format.'

    return (
        f"Question: {question}\n"
        f"Marks Weightage: {_marks_value(marks)} Marks\n"
        f"Answer Style: {style}\n"
        f"{style_context}\n\n"
        "Please provide the model answer strictly following the provided evaluator rules and style context."
    )


def _build_suggestion_prompt(topic: str) -> str:
    return (
        "Generate exactly 10 high-probability exam questions for the Savitribai Phule Pune "
        f'University (SPPU) for the subject/topic: "{topic}".\n'
        "Format each question starting with a number (e.g., 1., 2., ...).\n"
        "Ensure questions are typical of 5-10 marks weightage.\n"
        "Only return the list of questions, no other text."
    )


def _response_text(response) -> str:
    content = response.choices[0].message.content
    return (content or "").strip()


def generate_answer(
    question: str,
    marks: MarksWeightage | str,
    style: str,
    custom_instruction: Optional[str] = None,
    *,
    client: Optional[OpenAI] = None,
) -> str:
    """Generate a model answer for a single question."""

    llm_client = _ensure_openai_client(client)
    prompt = _build_answer_prompt(question, marks, style, custom_instruction)

    logger.info(
        "Requesting model answer",
        marks=_marks_value(marks),
        style=style,
        custom=bool(custom_instruction),
        question_chars=len(question),
    )
    try:
        response = llm_client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            **ANSWER_LLM_PARAMS,
        )
        text = _response_text(response)
    except Exception as exc:
        logger.exception("Answer generation request failed")
        raise GenerationError("Failed to generate answer. Please check your connection.") from exc

    if not text:
        logger.warning("LLM returned empty content for the answer")
        return EMPTY_ANSWER_FALLBACK

    logger.info(f"Model answer generated | chars={len(text)}")
    return text


def suggest_questions(topic: str, *, client: Optional[OpenAI] = None) -> str:
    """Suggest ten numbered exam questions for ``topic``.

    Failures are logged and reported as an empty string.
    """
    try:
        llm_client = _ensure_openai_client(client)
        response = llm_client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": SUGGESTION_SYSTEM_INSTRUCTION},
                {"role": "user", "content": _build_suggestion_prompt(topic)},
            ],
            **SUGGESTION_LLM_PARAMS,
        )
        text = _response_text(response)
    except Exception:
        logger.exception("Question suggestion failed", topic=topic)
        return ""

    logger.info(f"Suggested questions | topic={topic} | chars={len(text)}")
    return text
