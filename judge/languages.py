"""
Language runner registry.

Maps a language identifier to a RunRecipe describing how to materialize,
compile and run a submission. Adding a language is a call to register();
nothing else in the engine changes.
"""

import shutil
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .errors import UnsupportedLanguageError


def get_python_executable() -> str:
    """Get the interpreter used to run Python submissions."""
    if getattr(sys, 'frozen', False):
        python_path = shutil.which('python3') or shutil.which('python')
        if not python_path:
            raise RuntimeError("Python executable not found. Please ensure Python is installed on the judge host.")
        return python_path
    return sys.executable


@dataclass(frozen=True)
class RunRecipe:
    """
    Instructions for running source code in one language.

    Command templates are argument lists; "{source}" expands to the source
    filename and "{python}" to the current interpreter.
    """
    language: str
    source_filename: str
    run_command: List[str]
    compile_command: Optional[List[str]] = None
    prepare_source: Optional[Callable[[str], str]] = None
    # JVM and V8 reserve far more virtual memory than they use
    limit_address_space: bool = True

    @property
    def needs_compile(self) -> bool:
        return self.compile_command is not None

    def render(self, template: List[str]) -> List[str]:
        rendered = []
        for part in template:
            if "{python}" in part:
                part = part.replace("{python}", get_python_executable())
            rendered.append(part.replace("{source}", self.source_filename))
        return rendered

    def source_text(self, code: str) -> str:
        if self.prepare_source:
            return self.prepare_source(code)
        return code


def _wrap_java_class(code: str) -> str:
    if "class" in code:
        return code
    return f"public class Solution {{\n{code}\n}}"


_REGISTRY: Dict[str, RunRecipe] = {}


def register(recipe: RunRecipe) -> None:
    """Add or replace the recipe for a language."""
    _REGISTRY[recipe.language.lower()] = recipe


def resolve(language: str) -> RunRecipe:
    """
    Look up the recipe for a language.

    Raises:
        UnsupportedLanguageError: If no recipe is registered
    """
    recipe = _REGISTRY.get((language or "").strip().lower())
    if recipe is None:
        raise UnsupportedLanguageError(language)
    return recipe


def supported_languages() -> List[str]:
    return sorted(_REGISTRY)


register(RunRecipe(
    language="python",
    source_filename="solution.py",
    run_command=["{python}", "-I", "-B", "{source}"],
))
register(RunRecipe(
    language="javascript",
    source_filename="solution.js",
    run_command=["node", "{source}"],
    limit_address_space=False,
))
register(RunRecipe(
    language="java",
    source_filename="Solution.java",
    compile_command=["javac", "{source}"],
    run_command=["java", "-cp", ".", "Solution"],
    prepare_source=_wrap_java_class,
    limit_address_space=False,
))
register(RunRecipe(
    language="cpp",
    source_filename="solution.cpp",
    compile_command=["g++", "-O2", "-o", "solution", "{source}"],
    run_command=["./solution"],
))
