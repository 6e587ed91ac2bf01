"""
Sandbox for executing submitted code with a wall-clock deadline.

Provides per-invocation isolation using a temporary working directory and
subprocess. Unix: the child leads its own session so the whole process
group can be killed on timeout, and the resource module applies CPU time
and memory limits. Windows: the timeout kills the process itself.
"""

import os
import platform
import signal
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .languages import RunRecipe


COMPLETED = "completed"
TIMEOUT = "timeout"
SPAWN_ERROR = "spawn_error"


@dataclass
class RunResult:
    """
    Outcome of one process invocation.

    status: "completed", "timeout" or "spawn_error". A completed run may
    still have a non-zero exit_code; deciding what that means is up to the
    caller.
    """
    status: str
    stdout: str
    stderr: str
    exit_code: Optional[int]
    elapsed_ms: int

    @property
    def succeeded(self) -> bool:
        return self.status == COMPLETED and self.exit_code == 0


def _is_windows() -> bool:
    return platform.system() == "Windows"


def _limit_setter(timeout_sec: float, memory_limit_mb: Optional[int]):
    """Build a preexec_fn applying CPU and address space limits in the child."""
    def set_limits():
        try:
            import resource
            # Set CPU time limit
            try:
                cpu_seconds = int(timeout_sec) + 1
                resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))
            except (ValueError, OSError):
                pass

            # Set memory limit (bytes)
            if memory_limit_mb:
                try:
                    memory_bytes = memory_limit_mb * 1024 * 1024
                    resource.setrlimit(resource.RLIMIT_AS, (memory_bytes, memory_bytes))
                except (ValueError, OSError):
                    pass
        except ImportError:
            pass
    return set_limits


def _kill_process_tree(proc: subprocess.Popen) -> None:
    if _is_windows():
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        proc.kill()


def _reap_process_group(proc: subprocess.Popen) -> None:
    """Kill descendants left in the group after the main process exited."""
    if _is_windows():
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


def execute(
    command: List[str],
    cwd: Path,
    input_str: str,
    timeout_sec: float,
    memory_limit_mb: Optional[int] = None
) -> RunResult:
    """
    Run a command with stdin/stdout redirection and a wall-clock deadline.

    Args:
        command: Argument list to execute
        cwd: Working directory of the child
        input_str: Text fed to stdin
        timeout_sec: Wall-clock deadline in seconds
        memory_limit_mb: Address space limit in MB (Unix only, None for no limit)

    Returns:
        RunResult; never raises for spawn failures or timeouts
    """
    popen_kwargs = {}
    if not _is_windows():
        popen_kwargs["start_new_session"] = True
        popen_kwargs["preexec_fn"] = _limit_setter(timeout_sec, memory_limit_mb)

    start_time = time.monotonic()
    try:
        proc = subprocess.Popen(
            command,
            cwd=str(cwd),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            **popen_kwargs
        )
    except (OSError, subprocess.SubprocessError) as e:
        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        return RunResult(SPAWN_ERROR, "", f"Failed to start process: {e}", None, elapsed_ms)

    try:
        stdout, stderr = proc.communicate(input=(input_str or "").encode('utf-8'), timeout=timeout_sec)
    except subprocess.TimeoutExpired:
        _kill_process_tree(proc)
        proc.communicate()
        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        return RunResult(TIMEOUT, "", "Process exceeded time limit", None, elapsed_ms)
    except BaseException:
        _kill_process_tree(proc)
        proc.communicate()
        raise

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    _reap_process_group(proc)
    return RunResult(
        COMPLETED,
        stdout.decode('utf-8', errors='replace'),
        stderr.decode('utf-8', errors='replace'),
        proc.returncode,
        elapsed_ms
    )


class Sandbox:
    """
    Temporary working directory holding one submission's source.

    Use as a context manager: the directory is created on entry and
    removed on every exit path. Compile once, then run any number of times.
    """

    def __init__(self, recipe: RunRecipe, source_code: str, memory_limit_mb: Optional[int] = None):
        self.recipe = recipe
        self.source_code = source_code
        self.memory_limit_mb = memory_limit_mb
        self.work_dir: Optional[Path] = None
        self._temp_dir = None

    def __enter__(self) -> 'Sandbox':
        self._temp_dir = tempfile.TemporaryDirectory(prefix="judge_", ignore_cleanup_errors=True)
        try:
            self.work_dir = Path(self._temp_dir.name)
            source_path = self.work_dir / self.recipe.source_filename
            source_path.write_text(self.recipe.source_text(self.source_code), encoding='utf-8')
        except BaseException:
            self._temp_dir.cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self._temp_dir.cleanup()
        self.work_dir = None
        return False

    def _memory_limit(self) -> Optional[int]:
        return self.memory_limit_mb if self.recipe.limit_address_space else None

    def compile(self, timeout_sec: float) -> RunResult:
        """Run the recipe's compile step. A recipe without one trivially succeeds."""
        if not self.recipe.needs_compile:
            return RunResult(COMPLETED, "", "", 0, 0)
        command = self.recipe.render(self.recipe.compile_command)
        return execute(command, self.work_dir, "", timeout_sec)

    def run(self, input_str: str, time_limit_ms: int) -> RunResult:
        """Run the program once against the given stdin."""
        command = self.recipe.render(self.recipe.run_command)
        return execute(command, self.work_dir, input_str, time_limit_ms / 1000.0, self._memory_limit())


def run_program(
    recipe: RunRecipe,
    source_code: str,
    input_str: str,
    time_limit_ms: int,
    memory_limit_mb: Optional[int] = None,
    compile_timeout_sec: float = 30.0
) -> RunResult:
    """
    Materialize, compile if needed, and run source code once.

    Returns:
        The compile RunResult if compilation did not succeed, otherwise the
        RunResult of the program itself
    """
    with Sandbox(recipe, source_code, memory_limit_mb) as sandbox:
        compiled = sandbox.compile(compile_timeout_sec)
        if not compiled.succeeded:
            return compiled
        return sandbox.run(input_str, time_limit_ms)
