"""
Runs a compiled submission against its test cases.
"""

import logging
from concurrent.futures import Executor

from . import process_runner
from .compiler import expand_command
from .config import DEFAULT_RUN_COMMAND, EXECUTION_TIMEOUT_SECONDS
from .models import MismatchRecord, Submission, TestCase, TestSuite
from .normalizer import escape_line_endings, normalize

log = logging.getLogger(__name__)


class SubmissionExecutor:
    """
    Executes compiled submissions and compares their output.

    Timeouts and programs that cannot be started count as wrong answers.
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout_seconds: float = EXECUTION_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the executor.

        Args:
            command: Command line template used to start the binary; see
                `compiler.expand_command`.
            timeout_seconds: Time budget for one test case.
        """
        self.command = list(command or DEFAULT_RUN_COMMAND)
        self.timeout_seconds = timeout_seconds

    def run_test_case(self, submission: Submission, test_case: TestCase) -> bool:
        """
        Run one test case.

        Args:
            submission: A submission whose binary has been built.
            test_case: Input and expected output.

        Returns:
            True if the normalized output equals the normalized expectation.
        """
        binary = submission.binary_path.resolve()
        argv = expand_command(
            self.command,
            source=str(submission.source_path),
            binary=str(binary),
            directory=str(binary.parent),
            problem=submission.problem_id,
        )

        try:
            output = process_runner.run(
                argv[0],
                argv[1:],
                stdin=test_case.input.strip() + "\n",
                timeout=self.timeout_seconds,
                cwd=binary.parent,
            )
        except process_runner.RunnerError as e:
            log.error("Could not run %s: %s", binary, e)
            return False

        if output.timed_out:
            log.warning("Test timed out after %ss: %s", self.timeout_seconds, binary)

        actual = normalize(output.stdout)
        expected = normalize(test_case.expected_output)
        if actual == expected:
            return True

        record = MismatchRecord(
            submission_path=str(binary),
            expected=escape_line_endings(expected),
            actual=escape_line_endings(actual),
        )
        log.warning(
            "Test failed: %s\nExpect: %s\nResult: %s",
            record.submission_path,
            record.expected,
            record.actual,
        )
        return False

    def run_suite(
        self,
        submission: Submission,
        suite: TestSuite,
        pool: Executor | None = None,
    ) -> list[bool]:
        """
        Run every test case of a suite.

        Args:
            submission: A submission whose binary has been built.
            suite: Test cases to run.
            pool: When given, test cases are run on it concurrently.

        Returns:
            Verdicts in the order of `suite.cases`.
        """
        if pool is None:
            return [self.run_test_case(submission, case) for case in suite.cases]

        # map() yields results in submission order regardless of completion order
        return list(pool.map(lambda case: self.run_test_case(submission, case), suite.cases))
