"""
Builds one submitted source file with the configured toolchain.

The build is judged by scanning the compiler's combined output for an
error marker (see `has_error_marker`). Before building, shell invocations
in the submitted source are neutralized so that the submission cannot run
arbitrary commands on the grading machine.
"""

import logging
import re
from pathlib import Path

from . import process_runner
from .config import (
    COMPILE_ERROR_MARKER,
    COMPILE_TIMEOUT_SECONDS,
    DEFAULT_COMPILE_COMMAND,
    SHELL_CALL_PATTERN,
    SHELL_CALL_REPLACEMENT,
)
from .models import Submission

log = logging.getLogger(__name__)

_SHELL_CALL = re.compile(SHELL_CALL_PATTERN)
_PLACEHOLDER = re.compile(r"\{(source|binary|directory|problem)\}")


def neutralize_shell_calls(source: str) -> str:
    """
    Comment out every `system` call (incl. `std::` and `_wsystem` forms) in C/C++ source.

    The identifier is replaced by `//`, which turns the rest of that line
    into a comment. This is a security measure for untrusted submissions and
    must run before every build.
    """
    return _SHELL_CALL.sub(SHELL_CALL_REPLACEMENT, source)


def has_error_marker(diagnostics: str) -> bool:
    """
    Decide whether compiler output reports a failed build.

    Heuristic: the build failed if the output contains COMPILE_ERROR_MARKER,
    ignoring case. Output that merely mentions the word (a file named
    error.h, a warning text) is a false positive; a localized compiler that
    never prints the word is a false negative.
    """
    return COMPILE_ERROR_MARKER.upper() in diagnostics.upper()


def expand_command(template: list[str], **values: str) -> list[str]:
    """
    Substitute {source}, {binary}, {directory} and {problem} in a command template.

    Other braces are left untouched.
    """
    def substitute(match: re.Match) -> str:
        return values[match.group(1)]

    return [_PLACEHOLDER.sub(substitute, part) for part in template]


class Compiler:
    """
    Compiles submissions with an external toolchain.
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout_seconds: float = COMPILE_TIMEOUT_SECONDS,
        fail_on_nonzero_exit: bool = False,
    ) -> None:
        """
        Initialize the compiler.

        Args:
            command: Command line template; see `expand_command`.
            timeout_seconds: Time budget for one build.
            fail_on_nonzero_exit: Also fail builds whose exit code is not zero.
        """
        self.command = list(command or DEFAULT_COMPILE_COMMAND)
        self.timeout_seconds = timeout_seconds
        self.fail_on_nonzero_exit = fail_on_nonzero_exit

    def compile(self, source_file: Path, binary_path: Path | None = None) -> bool:
        """
        Neutralize and build one source file.

        Args:
            source_file: File to compile. It is rewritten in place.
            binary_path: Where the executable must be written. Defaults to the
                source path without its extension.

        Returns:
            True if the build succeeded, False otherwise (including timeouts).
        """
        source_file = Path(source_file).resolve()
        binary_path = Path(binary_path).resolve() if binary_path else source_file.with_suffix("")

        # surrogateescape round-trips bytes that are not UTF-8 unchanged
        source = source_file.read_text(encoding="utf-8", errors="surrogateescape")
        neutralized = neutralize_shell_calls(source)
        if neutralized != source:
            log.info("Neutralized shell calls in %s", source_file)
            source_file.write_text(neutralized, encoding="utf-8", errors="surrogateescape")

        argv = expand_command(
            self.command,
            source=str(source_file),
            binary=str(binary_path),
            directory=str(source_file.parent),
            problem=binary_path.stem,
        )

        try:
            output = process_runner.run(
                argv[0],
                argv[1:],
                timeout=self.timeout_seconds,
                cwd=source_file.parent,
            )
        except process_runner.RunnerError as e:
            log.error("Compiler could not be run for %s: %s", source_file, e)
            return False

        if output.timed_out:
            log.warning("Compilation of %s exceeded %ss", source_file, self.timeout_seconds)
            return False

        diagnostics = output.stdout + output.stderr
        if has_error_marker(diagnostics):
            log.debug("Compiler output for %s:\n%s", source_file, diagnostics)
            return False

        if self.fail_on_nonzero_exit and output.return_code != 0:
            log.debug("Compiler exited with %s for %s", output.return_code, source_file)
            return False

        return True

    def compile_submission(self, submission: Submission) -> bool:
        """Build a submission to the location its tests expect."""
        return self.compile(submission.source_path, submission.binary_path)
