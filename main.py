#!/usr/bin/env python3
"""
Launcher for the judge CLI.

Runs the CLI from a source checkout without installing the package, or as
the entry script of a PyInstaller build (judge_config.json is then looked
up next to the executable).
"""

import sys
from pathlib import Path


def _package_root() -> str:
    if getattr(sys, 'frozen', False):
        return sys._MEIPASS
    return str(Path(__file__).resolve().parent)


if __name__ == "__main__":
    sys.path.insert(0, _package_root())
    from judge.cli import main
    sys.exit(main())
