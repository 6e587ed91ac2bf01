#!/usr/bin/env python3
"""
Code Judge CLI

Operator-facing commands for grading submissions against a question bank
and printing event leaderboards.
"""

import argparse
import getpass
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import languages
from .bank import load_bank
from .config_loader import load_config, create_sample_config
from .errors import BankError, JudgeError
from .event_log import EventLog
from .feedback import build_feedback_service
from .leaderboard import rank, format_leaderboard
from .models import JudgeConfig
from .submissions import SubmissionService


LANGUAGE_BY_SUFFIX = {
    ".py": "python",
    ".js": "javascript",
    ".java": "java",
    ".cpp": "cpp",
    ".cc": "cpp",
}


def guess_language(code_path: Path) -> str:
    return LANGUAGE_BY_SUFFIX.get(code_path.suffix.lower(), "python")


def parse_submit_spec(spec: str) -> Tuple[str, str, Path]:
    """Split a USER:QUESTION:FILE argument."""
    parts = spec.split(":", 2)
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Invalid submission '{spec}', expected USER:QUESTION:FILE")
    return parts[0], parts[1], Path(parts[2])


class JudgeRunner:
    """Main CLI application controller."""

    def __init__(self):
        self.config: Optional[JudgeConfig] = None
        self.event_log: Optional[EventLog] = None

    def _read_key(self, bank_path: Path, key_file: Optional[str]) -> Optional[str]:
        if bank_path.suffix.lower() == '.json':
            return None
        if key_file:
            try:
                with open(key_file, 'r', encoding='utf-8') as f:
                    return f.read().strip()
            except OSError as e:
                raise BankError(f"Cannot read key file '{key_file}': {e}") from e
        key_input = getpass.getpass(f"Enter key or password for {bank_path.name}: ")
        return key_input.strip()

    def _build_service(self, args):
        self.config = load_config(Path(args.config) if args.config else None)
        self.event_log = EventLog(self.config.log_path)

        bank_path = Path(args.bank)
        store = load_bank(bank_path, self._read_key(bank_path, args.key_file))
        self.event_log.log("BANK_LOADED", f"Bank: {bank_path.name}")

        service = SubmissionService(
            store,
            config=self.config,
            feedback=build_feedback_service(self.config),
            session_logger=self.event_log.log
        )
        return store, service

    def _read_code(self, code_path: Path) -> str:
        if not code_path.exists():
            raise ValueError(f"File '{code_path}' not found")
        with open(code_path, 'r', encoding='utf-8') as f:
            return f.read()

    # ===== COMMANDS =====

    def cmd_languages(self, args) -> int:
        for name in languages.supported_languages():
            recipe = languages.resolve(name)
            mode = "compiled" if recipe.needs_compile else "interpreted"
            print(f"  {name:<12} {recipe.source_filename:<16} {mode}")
        return 0

    def cmd_sample_config(self, args) -> int:
        create_sample_config(Path(args.out))
        return 0

    def cmd_grade(self, args) -> int:
        code_path = Path(args.file)
        code = self._read_code(code_path)
        language = args.language or guess_language(code_path)

        store, service = self._build_service(args)
        with service:
            submission = service.submit(args.user, args.question, code, language)
            print(f"Submission {submission.id} queued ({language})...")
            result = service.wait(submission.id)

        print(f"\nStatus: {result.status}")
        print(f"Score: {result.score} / 100 ({result.passed_tests}/{result.total_tests} passed)")
        print(f"Execution time: {result.execution_time_ms} ms")
        if result.feedback:
            print(f"\nFeedback:\n{result.feedback}")
        return 0

    def cmd_leaderboard(self, args) -> int:
        specs = [parse_submit_spec(s) for s in (args.submit or [])]

        store, service = self._build_service(args)
        with service:
            if store.get_event(args.event) is None:
                print(f"Error: Event '{args.event}' not found")
                return 1

            submitted: List[str] = []
            for user_id, question_id, code_path in specs:
                code = self._read_code(code_path)
                submission = service.submit(user_id, question_id, code, guess_language(code_path))
                submitted.append(submission.id)
                print(f"Queued {code_path.name} for {user_id} on {question_id}")

            for submission_id in submitted:
                result = service.wait(submission_id)
                print(f"  {result.user_id} / {result.question_id}: {result.status} ({result.score})")

        print()
        print(format_leaderboard(rank(store, args.event)))
        return 0

    # ===== ENTRY POINT =====

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Code Judge - grade submissions and rank event participants",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  python main.py languages
  python main.py grade --bank banks/contest.json --question two-sum --user alice solution.py
  python main.py leaderboard --bank banks/contest.enc --key-file CONTEST.key --event spring \\
      --submit alice:two-sum:alice.py --submit bob:two-sum:bob.js
  python main.py sample-config --out judge_config.json
            """
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        subparsers.add_parser("languages", help="List supported languages")

        sample = subparsers.add_parser("sample-config", help="Write a sample configuration file")
        sample.add_argument("--out", default="judge_config.json", help="Output path")

        def add_bank_args(sub):
            sub.add_argument("--bank", required=True, help="Question bank (.json or encrypted)")
            sub.add_argument("--key-file", help="Key or password file for encrypted banks (prompted if omitted)")
            sub.add_argument("--config", help="Path to judge configuration file (default: judge_config.json)")

        grade = subparsers.add_parser("grade", help="Grade one source file")
        add_bank_args(grade)
        grade.add_argument("--question", required=True, help="Question ID")
        grade.add_argument("--user", default="local", help="Submitting user ID")
        grade.add_argument("--language", help="Language (default: guessed from file extension)")
        grade.add_argument("file", help="Source file to grade")

        board = subparsers.add_parser("leaderboard", help="Grade submissions and print an event leaderboard")
        add_bank_args(board)
        board.add_argument("--event", required=True, help="Event ID")
        board.add_argument("--submit", action="append", metavar="USER:QUESTION:FILE",
                           help="Submission to grade before ranking (repeatable)")

        return parser

    def run(self, argv: Optional[List[str]] = None) -> int:
        args = self.build_parser().parse_args(argv)
        commands = {
            "languages": self.cmd_languages,
            "sample-config": self.cmd_sample_config,
            "grade": self.cmd_grade,
            "leaderboard": self.cmd_leaderboard,
        }
        try:
            return commands[args.command](args)
        except (JudgeError, ValueError) as e:
            print(f"Error: {e}")
            if self.event_log:
                self.event_log.log("ERROR", str(e))
            return 1
        except (KeyboardInterrupt, EOFError):
            print("\nAborted.")
            return 1


def main(argv: Optional[List[str]] = None) -> int:
    return JudgeRunner().run(argv)


if __name__ == "__main__":
    sys.exit(main())
