"""Start several executor processes, each with its own seed, and wait for them."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from .engine import SEED_ENV
from .profile import Profile

_MASK64 = (1 << 64) - 1


def executor_command() -> list[str]:
    """Command line that starts the executor with the current interpreter."""
    return [sys.executable, "-m", "smithsql.executor"]


def can_execute(command: Sequence[str]) -> bool:
    """Whether the program of ``command`` exists and can be started."""
    if not command:
        return False
    program = command[0]
    if shutil.which(program) is None and not Path(program).exists():
        return False
    try:
        subprocess.run([program, "--version"], capture_output=True, check=False)
    except OSError:
        return False
    return True


def _terminate(children: list[subprocess.Popen]) -> None:
    for child in children:
        if child.poll() is None:
            child.terminate()
    for child in children:
        try:
            child.wait(timeout=5)
        except subprocess.TimeoutExpired:
            child.kill()
            child.wait()


def fork_server_main(profile: Profile, command: Sequence[str] | None = None) -> list[int]:
    """Run ``profile.executor_count`` executors concurrently and return their exit codes.

    Executor ``n`` gets the seed ``(base_seed << 8) + n`` through the environment.
    Exits with status 1 when the executor cannot be found or started; running
    executors are terminated if this process stops early.
    """
    if profile.executor_count is None:
        raise ValueError("executor_count must be specified")
    executor_count = profile.executor_count
    base_seed = 0 if profile.seed is None else profile.seed
    print(f"Using executor count: {executor_count}")

    command = list(command) if command is not None else executor_command()
    if not can_execute(command):
        print("Cannot find or execute the executor binary", file=sys.stderr)
        raise SystemExit(1)

    children: list[subprocess.Popen] = []
    try:
        for n in range(executor_count):
            seed = ((base_seed << 8) + n) & _MASK64
            env = {**os.environ, SEED_ENV: str(seed)}
            try:
                children.append(subprocess.Popen(command, env=env))
            except OSError as exc:
                print(f"Failed to execute {command[0]}: {exc}", file=sys.stderr)
                raise SystemExit(1) from exc
        return [child.wait() for child in children]
    except BaseException:
        _terminate(children)
        raise