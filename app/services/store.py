"""JSON-file persistence for answer history, custom styles and preferences."""

from __future__ import annotations

import json
import random
import string
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from app.config.settings import settings
from app.services.answer_generator import MarksWeightage


class StoreError(RuntimeError):
    """Raised when persisted state cannot be written."""


class StyleValidationError(ValueError):
    """Raised when a custom style is missing its name or instruction."""


class StyleNotFoundError(LookupError):
    """Raised when a custom style id is unknown."""


_ID_ALPHABET = string.digits + string.ascii_lowercase


def now_millis() -> int:
    return int(time.time() * 1000)


def mint_id() -> str:
    """Epoch millis followed by a short random base-36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{now_millis()}{suffix}"


@dataclass
class GeneratedAnswer:
    """One generated model answer kept in history."""

    question: str
    marks: MarksWeightage
    style: str
    answer: str
    id: str = field(default_factory=mint_id)
    timestamp: int = field(default_factory=now_millis)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "marks": self.marks.value,
            "style": self.style,
            "answer": self.answer,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedAnswer":
        return cls(
            id=str(data["id"]),
            question=data["question"],
            marks=MarksWeightage(str(data["marks"])),
            style=data["style"],
            answer=data["answer"],
            timestamp=int(data["timestamp"]),
        )


@dataclass
class CustomStyle:
    """User-defined answer style; ``name`` doubles as the style value."""

    name: str
    instruction: str
    id: str = field(default_factory=mint_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomStyle":
        return cls(id=str(data["id"]), name=data["name"], instruction=data["instruction"])


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Could not read {path.name}, starting empty: {exc}")
        return default


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as exc:
        raise StoreError(f"Failed to write {path}") from exc


class HistoryStore:
    """Most-recent-first list of generated answers, bounded by capacity."""

    def __init__(self, path: Optional[Path] = None, capacity: Optional[int] = None) -> None:
        self.path = path or settings.history_path
        self.capacity = capacity or settings.history_capacity
        self.items: List[GeneratedAnswer] = []

    def load(self) -> List[GeneratedAnswer]:
        raw = _read_json(self.path, [])
        items: List[GeneratedAnswer] = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                items.append(GeneratedAnswer.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(f"Skipping malformed history entry: {exc}")
        self.items = items[: self.capacity]
        logger.info(f"Loaded history | entries={len(self.items)}")
        return list(self.items)

    def save(self, items: Optional[List[GeneratedAnswer]] = None) -> None:
        if items is not None:
            self.items = list(items)[: self.capacity]
        _write_json(self.path, [item.to_dict() for item in self.items])

    def prepend(self, answers: List[GeneratedAnswer]) -> None:
        """Insert ``answers`` (already newest-first) ahead of existing entries."""
        self.save(list(answers) + self.items)

    def get(self, answer_id: str) -> Optional[GeneratedAnswer]:
        return next((item for item in self.items if item.id == answer_id), None)

    def delete(self, answer_id: str) -> bool:
        remaining = [item for item in self.items if item.id != answer_id]
        if len(remaining) == len(self.items):
            return False
        self.save(remaining)
        return True


class StyleRegistry:
    """Custom styles keyed by id, kept in creation order."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or settings.styles_path
        self.styles: List[CustomStyle] = []

    def load(self) -> List[CustomStyle]:
        raw = _read_json(self.path, [])
        styles: List[CustomStyle] = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                styles.append(CustomStyle.from_dict(entry))
            except (KeyError, TypeError) as exc:
                logger.warning(f"Skipping malformed custom style: {exc}")
        self.styles = styles
        logger.info(f"Loaded custom styles | count={len(self.styles)}")
        return list(self.styles)

    def save(self, styles: Optional[List[CustomStyle]] = None) -> None:
        if styles is not None:
            self.styles = list(styles)
        _write_json(self.path, [style.to_dict() for style in self.styles])

    def get(self, style_id: str) -> CustomStyle:
        for style in self.styles:
            if style.id == style_id:
                return style
        raise StyleNotFoundError(f"Custom style {style_id!r} not found")

    def find_by_name(self, name: str) -> Optional[CustomStyle]:
        return next((style for style in self.styles if style.name == name), None)

    def add(self, name: str, instruction: str) -> CustomStyle:
        name, instruction = _validate_style(name, instruction)
        style = CustomStyle(name=name, instruction=instruction)
        self.save(self.styles + [style])
        logger.info(f"Custom style created | id={style.id} | name={style.name}")
        return style

    def update(self, style_id: str, name: str, instruction: str) -> CustomStyle:
        name, instruction = _validate_style(name, instruction)
        style = self.get(style_id)
        style.name = name
        style.instruction = instruction
        self.save()
        logger.info(f"Custom style updated | id={style.id} | name={style.name}")
        return style

    def delete(self, style_id: str) -> CustomStyle:
        style = self.get(style_id)
        self.save([s for s in self.styles if s.id != style_id])
        logger.info(f"Custom style deleted | id={style.id} | name={style.name}")
        return style


def _validate_style(name: str, instruction: str) -> Tuple[str, str]:
    name = (name or "").strip()
    instruction = (instruction or "").strip()
    if not name or not instruction:
        raise StyleValidationError("Style name and instruction are both required.")
    return name, instruction


class PreferenceStore:
    """Small key/value preferences (currently just the theme)."""

    DEFAULTS: Dict[str, Any] = {"theme": "light"}

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or settings.preferences_path
        self.values: Dict[str, Any] = dict(self.DEFAULTS)

    def load(self) -> Dict[str, Any]:
        raw = _read_json(self.path, {})
        self.values = {**self.DEFAULTS, **(raw if isinstance(raw, dict) else {})}
        return dict(self.values)

    def save(self) -> None:
        _write_json(self.path, self.values)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value
        self.save()


@dataclass
class StateStore:
    """Bundle of the persisted stores, loaded once at startup."""

    history: HistoryStore = field(default_factory=HistoryStore)
    styles: StyleRegistry = field(default_factory=StyleRegistry)
    preferences: PreferenceStore = field(default_factory=PreferenceStore)

    @classmethod
    def open(cls, root: Optional[Path] = None) -> "StateStore":
        if root is None:
            store = cls()
        else:
            store = cls(
                history=HistoryStore(root / settings.history_path.name),
                styles=StyleRegistry(root / settings.styles_path.name),
                preferences=PreferenceStore(root / settings.preferences_path.name),
            )
        store.load()
        return store

    def load(self) -> None:
        self.history.load()
        self.styles.load()
        self.preferences.load()
