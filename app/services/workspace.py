"""Session state and sequential batch generation of model answers."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from loguru import logger

from app.services.answer_generator import (
    DEFAULT_STYLE,
    DefaultAnswerStyle,
    GenerationError,
    MarksWeightage,
    generate_answer,
    suggest_questions,
)
from app.services.question_parser import count_questions, parse_questions
from app.services.store import CustomStyle, GeneratedAnswer, StateStore


class QuestionValidationError(ValueError):
    """Raised when the input holds no usable question."""


class GenerationInProgressError(RuntimeError):
    """Raised when a batch is started while another is still running."""


class GenerationCancelledError(GenerationError):
    """Raised when a batch is cancelled between questions."""


class AnswerNotFoundError(LookupError):
    """Raised when a history entry id is unknown."""


NO_VALID_QUESTION = "Please enter a valid question."
GENERIC_FAILURE = "An error occurred."
SUGGESTION_FAILURE = "Failed to suggest questions."
THEMES = ("light", "dark")

AnswerGenerator = Callable[..., str]
QuestionSuggester = Callable[[str], str]


class CancellationToken:
    """Checked between questions; cancelling never interrupts an in-flight call."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class GenerationTask:
    question: str
    marks: MarksWeightage
    style: str
    custom_instruction: Optional[str] = None


class AnswerWorkspace:
    """Everything a single user session works with.

    The persisted stores are injected; the remaining fields (input buffer,
    selections, current answer, error slot) live only for the process.
    """

    def __init__(
        self,
        store: StateStore,
        *,
        generator: AnswerGenerator = generate_answer,
        suggester: QuestionSuggester = suggest_questions,
    ) -> None:
        self.store = store
        self.generator = generator
        self.suggester = suggester

        self.question_input = ""
        self.batch_mode = False
        self.marks = MarksWeightage.five
        self.active_style = DEFAULT_STYLE
        self.current_answer: Optional[GeneratedAnswer] = None
        self.error: Optional[str] = None
        self._in_progress = threading.Lock()

    @property
    def is_loading(self) -> bool:
        return self._in_progress.locked()

    @property
    def history(self) -> List[GeneratedAnswer]:
        return list(self.store.history.items)

    @property
    def custom_styles(self) -> List[CustomStyle]:
        return list(self.store.styles.styles)

    @property
    def theme(self) -> str:
        return self.store.preferences.values["theme"]

    def detected_count(self) -> int:
        return count_questions(self.question_input, self.batch_mode)

    # -- generation -------------------------------------------------------

    def _build_tasks(self, questions: List[str]) -> Deque[GenerationTask]:
        custom = self.store.styles.find_by_name(self.active_style)
        instruction = custom.instruction if custom else None
        return deque(
            GenerationTask(
                question=question,
                marks=self.marks,
                style=self.active_style,
                custom_instruction=instruction,
            )
            for question in questions
        )

    def generate(
        self,
        text: Optional[str] = None,
        *,
        marks: Optional[MarksWeightage] = None,
        style: Optional[str] = None,
        batch_mode: Optional[bool] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[GeneratedAnswer]:
        """Generate answers for every question in the input, one at a time.

        Results reach history only when the whole batch succeeds. The first
        failing question aborts the batch and raises ``GenerationError``.
        The in-progress gate stays closed until history has been written.
        """
        if not self._in_progress.acquire(blocking=False):
            raise GenerationInProgressError("A generation batch is already running.")

        try:
            if text is not None:
                self.question_input = text
            if marks is not None:
                self.marks = MarksWeightage(marks)
            if style is not None:
                self.active_style = style
            if batch_mode is not None:
                self.batch_mode = batch_mode

            questions = parse_questions(self.question_input, self.batch_mode)
            if not questions:
                self.error = NO_VALID_QUESTION
                raise QuestionValidationError(NO_VALID_QUESTION)

            self.error = None
            results = self._run_batch(self._build_tasks(questions), cancel_token or CancellationToken())

            self.current_answer = results[-1]
            self.store.history.prepend(list(reversed(results)))
            if self.batch_mode:
                self.question_input = ""

            logger.info(
                "Batch generated",
                questions=len(results),
                marks=self.marks.value,
                style=self.active_style,
                history=len(self.store.history.items),
            )
        finally:
            self._in_progress.release()

        return results

    def _run_batch(self, tasks: Deque[GenerationTask], token: CancellationToken) -> List[GeneratedAnswer]:
        results: List[GeneratedAnswer] = []
        total = len(tasks)
        while tasks:
            if token.cancelled:
                self.error = "Generation cancelled."
                logger.warning(f"Batch cancelled after {len(results)}/{total} questions")
                raise GenerationCancelledError(self.error)

            task = tasks.popleft()
            try:
                answer_text = self.generator(
                    task.question,
                    task.marks,
                    task.style,
                    task.custom_instruction,
                )
            except Exception as exc:
                self.error = str(exc) or GENERIC_FAILURE
                logger.bind(discarded=len(results)).error(
                    f"Batch aborted at question {len(results) + 1}/{total}: {self.error}"
                )
                if isinstance(exc, GenerationError):
                    raise
                raise GenerationError(self.error) from exc

            results.append(
                GeneratedAnswer(
                    question=task.question,
                    marks=task.marks,
                    style=task.style,
                    answer=answer_text,
                )
            )
        return results

    # -- suggestions ------------------------------------------------------

    def suggest(self, topic: str) -> str:
        """Fill the input with suggested questions for ``topic``."""
        if not topic.strip():
            return ""
        questions_text = self.suggester(topic)
        if not questions_text:
            self.error = SUGGESTION_FAILURE
            return ""
        self.batch_mode = True
        self.question_input = questions_text
        return questions_text

    # -- history ----------------------------------------------------------

    def select_answer(self, answer_id: str) -> GeneratedAnswer:
        answer = self.store.history.get(answer_id)
        if answer is None:
            raise AnswerNotFoundError(f"Answer {answer_id!r} not found")
        self.current_answer = answer
        return answer

    def delete_history_item(self, answer_id: str) -> None:
        if not self.store.history.delete(answer_id):
            raise AnswerNotFoundError(f"Answer {answer_id!r} not found")
        if self.current_answer is not None and self.current_answer.id == answer_id:
            self.current_answer = None

    def copy_all_text(self) -> str:
        """Every history entry, oldest first, as one plain-text digest."""
        ordered = sorted(self.store.history.items, key=lambda item: item.timestamp)
        blocks = [
            f"{index}. QUESTION: {item.question}\n"
            f"(Marks: {item.marks.value}, Style: {item.style})\n\n"
            f"ANSWER:\n{item.answer}\n\n"
            f"{'-' * 40}\n"
            for index, item in enumerate(ordered, start=1)
        ]
        return "\n".join(blocks)

    # -- styles -----------------------------------------------------------

    def save_custom_style(self, name: str, instruction: str, style_id: Optional[str] = None) -> CustomStyle:
        """Create a style (and select it) or edit one, keeping the selection in step."""
        if style_id is None:
            style = self.store.styles.add(name, instruction)
            self.active_style = style.name
            return style

        previous_name = self.store.styles.get(style_id).name
        style = self.store.styles.update(style_id, name, instruction)
        if self.active_style == previous_name:
            self.active_style = style.name
        return style

    def delete_custom_style(self, style_id: str) -> CustomStyle:
        style = self.store.styles.delete(style_id)
        if self.active_style == style.name:
            self.active_style = DEFAULT_STYLE
        return style

    def available_styles(self) -> List[str]:
        return [s.value for s in DefaultAnswerStyle] + [s.name for s in self.store.styles.styles]

    # -- preferences ------------------------------------------------------

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}")
        self.store.preferences.set("theme", theme)
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme == "dark" else "dark")
