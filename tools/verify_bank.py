#!/usr/bin/env python3
"""
verify_bank.py - Validate question bank schema and check reference solutions.

Usage with key file:
    python tools/verify_bank.py --bank banks/contest.enc --key-file CONTEST.key

Usage with password:
    python tools/verify_bank.py --bank banks/contest.enc --password

Usage with plaintext and reference solutions (solutions/<question_id>.py etc.):
    python tools/verify_bank.py --bank contest.json --solutions solutions/
"""

import argparse
import getpass
import sys
from pathlib import Path

import utils  # noqa: F401  (puts the repository root on sys.path)
from judge.bank import read_bank, validate_bank, populate_store
from judge.cli import guess_language
from judge.errors import JudgeError
from judge.grader import Grader
from judge.models import JudgeConfig


def _key_input(bank_file: str, key_file: str = None, use_password: bool = False):
    if bank_file.endswith('.json'):
        return None
    if use_password:
        return getpass.getpass("Enter decryption password: ")
    if key_file:
        return Path(key_file).read_text(encoding='utf-8').strip()
    raise ValueError("Encrypted bank requires --key-file or --password")


def check_solutions(data: dict, solutions_dir: Path, verbose: bool = False) -> list:
    """Grade each reference solution found in solutions_dir against its question."""
    store = populate_store(data)
    grader = Grader(JudgeConfig.default())
    errors = []

    for event in data['events']:
        for question_data in event.get('questions', []):
            question = store.get_question(question_data['id'])
            candidates = sorted(solutions_dir.glob(f"{question.id}.*"))
            if not candidates:
                print(f"  [SKIP] {question.id}: no reference solution")
                continue

            for path in candidates:
                outcome = grader.evaluate(
                    guess_language(path),
                    path.read_text(encoding='utf-8'),
                    question.test_cases,
                    question.time_limit_ms,
                    question.memory_limit_mb
                )
                if outcome.accepted:
                    print(f"  [OK] {path.name}: {outcome.passed_tests}/{outcome.total_tests} in {outcome.execution_time_ms} ms")
                else:
                    errors.append(f"{path.name}: {outcome.verdict} - {outcome.message}")
                    print(f"  [FAIL] {path.name}")
                    if verbose:
                        print(grader.format_outcome(outcome, show_details=True))

    return errors


def verify_bank(bank_file: str, key_file: str = None, use_password: bool = False,
                solutions: str = None, verbose: bool = False) -> bool:
    """
    Verify a question bank (encrypted or plaintext).
    Returns True if valid, False otherwise.
    """
    try:
        data = read_bank(Path(bank_file), _key_input(bank_file, key_file, use_password))
        print(f"[OK] Bank loaded")

        print(f"\n[SCHEMA] Bank Schema Validation")
        print(f"{'='*60}")
        errors = validate_bank(data)

        if not errors:
            events = data['events']
            total_questions = 0
            total_tests = 0
            for event in events:
                questions = event.get('questions', [])
                total_questions += len(questions)
                print(f"\n[EVENT] {event['id']} ({len(questions)} questions, {len(event.get('participants', []))} participants)")
                for question in questions:
                    tests = question.get('test_cases', question.get('tests', []))
                    total_tests += len(tests)
                    if verbose:
                        print(f"  [OK] {question['id']}: {question.get('title', '?')} ({len(tests)} tests)")

            print(f"\n{'='*60}")
            print(f"[SUMMARY]")
            print(f"  Users: {len(data['users'])}")
            print(f"  Events: {len(events)}")
            print(f"  Questions: {total_questions}")
            print(f"  Total test cases: {total_tests}")

            if solutions:
                print(f"\n[SOLUTIONS] Grading reference solutions")
                errors.extend(check_solutions(data, Path(solutions), verbose))

        if errors:
            print(f"\n[ERROR] ({len(errors)}):")
            for err in errors[:20]:  # Limit output
                print(f"  - {err}")
            if len(errors) > 20:
                print(f"  ... and {len(errors) - 20} more")
            return False

        print(f"\n[OK] Bank validation PASSED")
        return True

    except (JudgeError, ValueError, OSError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return False


def main():
    parser = argparse.ArgumentParser(
        description="Validate question bank schema and content.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify encrypted bank
  python tools/verify_bank.py --bank banks/contest.enc --key-file CONTEST.key

  # Verify plaintext bank (during authoring)
  python tools/verify_bank.py --bank contest.json --verbose

  # Check that reference solutions are accepted
  python tools/verify_bank.py --bank contest.json --solutions solutions/
        """
    )
    parser.add_argument("--bank", required=True, help="Path to bank file (.enc or .json)")
    parser.add_argument("--key-file", help="Encryption key file (for key-file encrypted banks)")
    parser.add_argument("--password", action="store_true", help="Use password to decrypt (for password-encrypted banks)")
    parser.add_argument("--solutions", help="Directory of reference solutions named <question_id>.<ext>")
    parser.add_argument("--verbose", action="store_true", help="Show detailed question information")

    args = parser.parse_args()

    success = verify_bank(args.bank, args.key_file, args.password, args.solutions, args.verbose)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
