#!/usr/bin/env python3
"""
Generate model answers for every question in a text file.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import datetime
from app.services.answer_generator import DEFAULT_STYLE, GenerationError, MarksWeightage
from app.services.exporters import save_export
from app.services.store import StateStore
from app.services.workspace import AnswerWorkspace, QuestionValidationError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="Text file with one or more questions")
    parser.add_argument("--marks", choices=[m.value for m in MarksWeightage], default=MarksWeightage.five.value)
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Built-in or custom style name")
    parser.add_argument("--single", action="store_true", help="Treat the whole file as one question")
    parser.add_argument("--export", choices=["pdf", "docx", "doc"], default=None, help="Also export each answer")
    return parser.parse_args(argv)


def generate_answers(argv=None):
    args = parse_args(argv)
    text = args.input.read_text(encoding="utf-8")

    print("\n" + "="*60)
    print("SPPU EXAM MASTER - ANSWER GENERATION")
    print("="*60)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    workspace = AnswerWorkspace(StateStore.open())
    start_time = datetime.now()

    try:
        answers = workspace.generate(
            text,
            marks=MarksWeightage(args.marks),
            style=args.style,
            batch_mode=not args.single,
        )
    except QuestionValidationError as e:
        print(f"\n[INVALID]: {e}")
        return 2
    except GenerationError as e:
        print(f"\n[FAILED]: {workspace.error or e}")
        return 1

    duration = (datetime.now() - start_time).total_seconds()

    for index, answer in enumerate(answers, start=1):
        print(f"\n{'='*60}")
        print(f"{index}. {answer.question}")
        print(f"{'='*60}")
        print(answer.answer)
        if args.export:
            path = save_export(answer, args.export)
            print(f"\n   Exported: {path}")

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)
    print(f"Answers generated: {len(answers)}")
    print(f"History entries: {len(workspace.history)}")
    print(f"Total time: {duration:.1f}s")
    print("="*60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(generate_answers())
