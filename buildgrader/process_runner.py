"""
Launches an external program, feeds it input and enforces a wall-clock limit.

Every call creates exactly one child process, which never outlives the call:
it is killed at the deadline (together with anything it spawned, on POSIX)
and reaped before `run` returns or raises.
"""

import logging
import os
import signal
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from .config import EXECUTION_TIMEOUT_SECONDS
from .models import ProcessOutput

log = logging.getLogger(__name__)

# How long to wait for the pipes to drain once the process has been killed
_DRAIN_SECONDS = 1.0


class RunnerError(Exception):
    """Base class for failures to run an external process."""


class LaunchError(RunnerError):
    """The executable is missing or cannot be started."""


class StreamError(RunnerError):
    """Reading from or writing to the process pipes failed."""


def _kill(process: subprocess.Popen) -> None:
    if os.name == "posix":
        try:
            # The child leads its own session, so this reaches its children too
            os.killpg(process.pid, signal.SIGKILL)
            return
        except (ProcessLookupError, PermissionError):
            pass
    try:
        process.kill()
    except ProcessLookupError:
        pass


@contextmanager
def _spawned(argv: list[str], cwd: Path | None) -> Iterator[subprocess.Popen]:
    """Start `argv` with all standard streams piped and guarantee its cleanup."""
    try:
        process = subprocess.Popen(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=os.name == "posix",
        )
    except OSError as e:
        raise LaunchError(f"Cannot start {argv[0]}: {e}") from e

    try:
        yield process
    finally:
        if process.poll() is None:
            _kill(process)
        for stream in (process.stdin, process.stdout, process.stderr):
            if stream is not None:
                stream.close()
        process.wait()


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


def run(
    executable: str | Path,
    arguments: Sequence[str] = (),
    stdin: str | None = None,
    timeout: float = EXECUTION_TIMEOUT_SECONDS,
    cwd: Path | None = None,
) -> ProcessOutput:
    """
    Run a program to completion or until `timeout` elapses.

    Args:
        executable: Program to start.
        arguments: Command line arguments after the program name.
        stdin: Text written to standard input before it is closed.
            When None, standard input is closed immediately.
        timeout: Wall-clock budget in seconds.
        cwd: Working directory for the child.

    Returns:
        ProcessOutput with whatever was captured. On timeout the process
        is killed, `timed_out` is set and the output is best-effort.

    Raises:
        LaunchError: If the executable cannot be started.
        StreamError: If communicating with the process fails.
    """
    argv = [str(executable), *[str(a) for a in arguments]]
    payload = stdin.encode("utf-8") if stdin is not None else None
    log.debug("run %s (timeout %ss)", " ".join(argv), timeout)

    with _spawned(argv, cwd) as process:
        try:
            stdout, stderr = process.communicate(input=payload, timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill(process)
            try:
                stdout, stderr = process.communicate(timeout=_DRAIN_SECONDS)
            except subprocess.TimeoutExpired as e:
                stdout, stderr = e.stdout, e.stderr
            log.debug("%s killed after %ss", argv[0], timeout)
            return ProcessOutput(
                stdout=_decode(stdout),
                stderr=_decode(stderr),
                timed_out=True,
                return_code=process.returncode,
            )
        except OSError as e:
            raise StreamError(f"I/O error while running {argv[0]}: {e}") from e

        return ProcessOutput(
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            timed_out=False,
            return_code=process.returncode,
        )
