"""
Question bank loading.

A bank is a JSON document holding users and events; each event lists its
participants and its questions with their hidden test cases. Banks may be
stored as plain .json or as Fernet-encrypted files, either with a raw key
or with a password (16-byte salt stored after a 'SALT' prefix).
"""

import base64
import json
from pathlib import Path
from typing import List, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import BankError
from .models import Event, Question, User
from .store import MemoryStore, Store


SALT_PREFIX = b'SALT'
SALT_LENGTH = 16


def derive_key_from_password(password: str, salt: bytes) -> bytes:
    """Derive a Fernet key from a password using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=480000,  # OWASP recommendation for 2024
    )
    key_material = kdf.derive(password.encode('utf-8'))
    return base64.urlsafe_b64encode(key_material)


def encrypt_bank(plaintext: bytes, key: Optional[bytes] = None, password: Optional[str] = None, salt: Optional[bytes] = None) -> bytes:
    """Encrypt bank bytes with a raw Fernet key or a password."""
    if password is not None:
        if salt is None or len(salt) != SALT_LENGTH:
            raise ValueError(f"Password encryption needs a {SALT_LENGTH}-byte salt")
        return SALT_PREFIX + salt + Fernet(derive_key_from_password(password, salt)).encrypt(plaintext)
    if key is None:
        raise ValueError("Must provide either a key or a password")
    return Fernet(key).encrypt(plaintext)


def decrypt_bank(encrypted_data: bytes, key_input: str) -> bytes:
    """
    Decrypt an encrypted bank.

    Args:
        encrypted_data: File contents
        key_input: Password for salted banks, base64 Fernet key otherwise

    Raises:
        BankError: If the key is wrong or the data is corrupted
    """
    if encrypted_data.startswith(SALT_PREFIX):
        start = len(SALT_PREFIX)
        salt = encrypted_data[start:start + SALT_LENGTH]
        encrypted_data = encrypted_data[start + SALT_LENGTH:]
        key = derive_key_from_password(key_input, salt)
    else:
        key = key_input.encode('utf-8')

    try:
        return Fernet(key).decrypt(encrypted_data)
    except (InvalidToken, ValueError) as e:
        raise BankError("Decryption failed: invalid key/password or corrupted file") from e


def read_bank(bank_path: Path, key_input: Optional[str] = None) -> dict:
    """
    Read a bank file into a dictionary.

    Plain JSON is read when the extension is .json; anything else is
    treated as encrypted and needs key_input.
    """
    bank_path = Path(bank_path)
    try:
        raw = bank_path.read_bytes()
    except OSError as e:
        raise BankError(f"Cannot read bank '{bank_path}': {e}") from e

    if bank_path.suffix.lower() != '.json':
        if not key_input:
            raise BankError(f"Bank '{bank_path.name}' is encrypted; a key or password is required")
        raw = decrypt_bank(raw, key_input)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BankError(f"Invalid JSON in bank: {e}") from e

    if not isinstance(data, dict):
        raise BankError("Bank must be a JSON object")
    return data


def validate_bank(data: dict) -> List[str]:
    """Check bank structure. Returns a list of error messages (empty when valid)."""
    errors = []
    users = data.get('users')
    events = data.get('events')

    if not isinstance(users, list):
        errors.append("Missing required list: users")
        users = []
    if not isinstance(events, list):
        errors.append("Missing required list: events")
        events = []

    user_ids = set()
    for u_idx, user in enumerate(users):
        if not isinstance(user, dict) or 'id' not in user:
            errors.append(f"users[{u_idx}]: missing id")
            continue
        user_ids.add(user['id'])
    question_ids = set()

    for e_idx, event in enumerate(events):
        label = f"events[{e_idx}]"
        if not isinstance(event, dict) or 'id' not in event:
            errors.append(f"{label}: missing id")
            continue
        participants = event.get('participants', [])
        questions = event.get('questions', [])
        if not isinstance(participants, list) or not isinstance(questions, list):
            errors.append(f"{label}: participants and questions must be lists")
            continue
        for participant in participants:
            if participant not in user_ids:
                errors.append(f"{label}: unknown participant '{participant}'")
        for q_idx, question in enumerate(questions):
            q_label = f"{label}.questions[{q_idx}]"
            if not isinstance(question, dict) or 'id' not in question:
                errors.append(f"{q_label}: missing id")
                continue
            if question['id'] in question_ids:
                errors.append(f"{q_label}: duplicate question id '{question['id']}'")
            question_ids.add(question['id'])
            tests = question.get('test_cases', question.get('tests'))
            if not tests:
                errors.append(f"{q_label}: no test cases")
                continue
            if not isinstance(tests, list):
                errors.append(f"{q_label}: test cases must be a list")
                continue
            for t_idx, test in enumerate(tests):
                if not isinstance(test, dict):
                    errors.append(f"{q_label}.test_cases[{t_idx}]: must be an object")
                elif 'output' not in test and 'expected_output' not in test:
                    errors.append(f"{q_label}.test_cases[{t_idx}]: missing expected output")
            limit = question.get('time_limit_seconds', question.get('time_limit', 5))
            if not isinstance(limit, (int, float)) or limit <= 0:
                errors.append(f"{q_label}: time limit must be a positive number")

    return errors


def populate_store(data: dict, store: Optional[Store] = None) -> Store:
    """
    Load a validated bank dictionary into a store.

    Raises:
        BankError: If the bank structure is invalid
    """
    errors = validate_bank(data)
    if errors:
        raise BankError("Invalid bank: " + "; ".join(errors))

    store = store if store is not None else MemoryStore()

    for user_data in data['users']:
        store.add_user(User.from_dict(user_data))

    for event_data in data['events']:
        store.add_event(Event(
            id=event_data['id'],
            name=event_data.get('name', event_data['id']),
            description=event_data.get('description', ""),
        ))
        for question_data in event_data.get('questions', []):
            store.add_question(Question.from_dict(question_data, event_id=event_data['id']))
        for user_id in event_data.get('participants', []):
            store.add_participant(event_data['id'], user_id)

    return store


def load_bank(bank_path: Path, key_input: Optional[str] = None, store: Optional[Store] = None) -> Store:
    """Read, validate and load a bank file into a store."""
    return populate_store(read_bank(bank_path, key_input), store)
