"""
Tests for bank module.

Tests question bank loading including:
- Plain JSON banks
- Key-file and password encrypted banks
- Schema validation errors
- Population of the in-memory store
"""

import json
import os
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptography.fernet import Fernet

from judge.bank import (
    decrypt_bank, encrypt_bank, load_bank, populate_store, read_bank, validate_bank,
)
from judge.errors import BankError


SAMPLE_BANK = Path(__file__).parent.parent / "banks" / "sample_contest.json"


def bank_dict():
    return {
        "version": "1.0",
        "users": [{"id": "alice", "username": "alice"}, {"id": "bob"}],
        "events": [{
            "id": "spring",
            "name": "Spring",
            "participants": ["alice", "bob"],
            "questions": [{
                "id": "q1",
                "title": "Echo",
                "description": "Print the input",
                "time_limit_seconds": 2,
                "test_cases": [
                    {"input": "a\n", "output": "a"},
                    {"input": "b\n", "expected_output": "b"},
                ],
            }],
        }],
    }


class TestReadBank:
    """Test reading bank files."""

    def test_plain_json(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps(bank_dict()), encoding='utf-8')

        assert read_bank(path) == bank_dict()

    def test_key_file_encryption(self, tmp_path):
        key = Fernet.generate_key()
        path = tmp_path / "bank.enc"
        path.write_bytes(encrypt_bank(json.dumps(bank_dict()).encode(), key=key))

        assert read_bank(path, key.decode()) == bank_dict()

    def test_password_encryption(self, tmp_path):
        path = tmp_path / "bank.enc"
        path.write_bytes(encrypt_bank(json.dumps(bank_dict()).encode(), password="s3cret-pass", salt=os.urandom(16)))

        assert path.read_bytes().startswith(b"SALT")
        assert read_bank(path, "s3cret-pass") == bank_dict()

    def test_wrong_key(self):
        encrypted = encrypt_bank(b"{}", key=Fernet.generate_key())

        with pytest.raises(BankError):
            decrypt_bank(encrypted, Fernet.generate_key().decode())

    def test_malformed_key(self):
        encrypted = encrypt_bank(b"{}", key=Fernet.generate_key())

        with pytest.raises(BankError):
            decrypt_bank(encrypted, "not-a-key")

    def test_encrypted_without_key(self, tmp_path):
        path = tmp_path / "bank.enc"
        path.write_bytes(b"whatever")

        with pytest.raises(BankError):
            read_bank(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(BankError):
            read_bank(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text("{not json", encoding='utf-8')

        with pytest.raises(BankError):
            read_bank(path)

    def test_password_needs_salt(self):
        with pytest.raises(ValueError):
            encrypt_bank(b"{}", password="pw")


class TestValidateBank:
    """Test schema validation."""

    def test_valid(self):
        assert validate_bank(bank_dict()) == []

    def test_sample_bank_is_valid(self):
        assert validate_bank(read_bank(SAMPLE_BANK)) == []

    def test_missing_lists(self):
        errors = validate_bank({})
        assert "Missing required list: users" in errors
        assert "Missing required list: events" in errors

    def test_unknown_participant(self):
        data = bank_dict()
        data["events"][0]["participants"].append("mallory")
        assert any("mallory" in e for e in validate_bank(data))

    def test_no_test_cases(self):
        data = bank_dict()
        data["events"][0]["questions"][0]["test_cases"] = []
        assert any("no test cases" in e for e in validate_bank(data))

    def test_missing_expected_output(self):
        data = bank_dict()
        data["events"][0]["questions"][0]["test_cases"].append({"input": "x"})
        assert any("missing expected output" in e for e in validate_bank(data))

    def test_duplicate_question(self):
        data = bank_dict()
        data["events"][0]["questions"].append(dict(data["events"][0]["questions"][0]))
        assert any("duplicate" in e for e in validate_bank(data))

    def test_question_not_an_object(self):
        data = bank_dict()
        data["events"][0]["questions"].append("q2")
        assert "events[0].questions[1]: missing id" in validate_bank(data)

    def test_test_case_not_an_object(self):
        data = bank_dict()
        data["events"][0]["questions"][0]["test_cases"].append("just text")
        assert "events[0].questions[0].test_cases[2]: must be an object" in validate_bank(data)

    def test_test_cases_not_a_list(self):
        data = bank_dict()
        data["events"][0]["questions"][0]["test_cases"] = "a -> a"
        assert "events[0].questions[0]: test cases must be a list" in validate_bank(data)

    def test_user_not_an_object(self):
        data = bank_dict()
        data["users"].append(42)
        assert "users[2]: missing id" in validate_bank(data)

    def test_malformed_entries_rejected_by_populate(self):
        data = bank_dict()
        data["events"][0]["questions"].append(["not", "a", "question"])
        with pytest.raises(BankError):
            populate_store(data)

    def test_bad_time_limit(self):
        data = bank_dict()
        data["events"][0]["questions"][0]["time_limit_seconds"] = 0
        assert any("time limit" in e for e in validate_bank(data))


class TestPopulateStore:
    """Test loading a bank into a store."""

    def test_populates_everything(self):
        store = populate_store(bank_dict())

        assert [u.id for u in store.get_event_participants("spring")] == ["alice", "bob"]
        [question] = store.get_event_questions("spring")
        assert question.id == "q1"
        assert question.time_limit_ms == 2000
        assert question.memory_limit_mb == 256
        assert [t.expected_output for t in question.test_cases] == ["a", "b"]
        assert store.get_event("spring").name == "Spring"

    def test_invalid_bank_rejected(self):
        with pytest.raises(BankError):
            populate_store({"users": []})

    def test_load_sample_bank(self):
        store = load_bank(SAMPLE_BANK)

        question = store.get_question("two-sum")
        assert len(question.test_cases) == 2
        assert question.test_cases[0].expected_output == "[0,1]"
        assert len(store.get_event_questions("spring")) == 2
