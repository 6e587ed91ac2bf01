import sys
from pathlib import Path

# Tools run as scripts from the repository root or the tools/ directory
sys.path.insert(0, str(Path(__file__).parent.parent))

from judge.bank import derive_key_from_password, encrypt_bank, decrypt_bank  # noqa: E402,F401
