"""
Discovers submissions and grades them concurrently.

Layout of the submissions root::

    submissions/
        hw3.81234/          <homework label>.<faculty id>
            sum.cpp         one source file per attempted problem
            primes.cpp

Each source file whose stem matches a problem of the test catalog becomes
one Submission. Files without a matching problem are ignored.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from pathlib import Path

from .compiler import Compiler
from .config import (
    DEFAULT_MAX_WORKERS,
    HOMEWORK_MARKER,
    HOMEWORK_SEPARATOR,
    SOURCE_EXTENSION,
)
from .executor import SubmissionExecutor
from .models import Result, Submission, TestSuite

log = logging.getLogger(__name__)


def parse_submission_dir(directory: Path) -> tuple[str, str]:
    """
    Split a submission folder name into homework label and faculty id.

    Anything in front of the homework marker is dropped from the label, so
    "2024_hw3.81234" gives ("hw3", "81234").

    Args:
        directory: Submission folder.

    Returns:
        Tuple of (homework label, faculty id).

    Raises:
        ValueError: If the name does not follow <label>.<faculty id>.
    """
    parts = directory.name.split(HOMEWORK_SEPARATOR)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Expected <homework>{HOMEWORK_SEPARATOR}<faculty id>, got '{directory.name}'"
        )

    label, faculty_id = parts[0], parts[1]
    marker = label.lower().find(HOMEWORK_MARKER)
    if marker > 0:
        label = label[marker:]
    return label, faculty_id


def discover_submissions(
    submissions_root: Path,
    test_suites: dict[str, TestSuite],
    source_extension: str = SOURCE_EXTENSION,
) -> list[Submission]:
    """
    Find every gradable source file below the submissions root.

    Folders that do not follow the naming convention or cannot be read are
    logged and skipped. Within a folder, only the first file (by name) of each
    problem id is kept.

    Args:
        submissions_root: Directory containing one folder per submission.
        test_suites: Catalog keyed by lower-cased problem id.
        source_extension: Extension of gradable source files.

    Returns:
        Submissions in folder and file name order.
    """
    submissions: list[Submission] = []

    for directory in sorted(submissions_root.iterdir()):
        if not directory.is_dir() or directory.name.startswith("."):
            continue

        try:
            homework_label, faculty_id = parse_submission_dir(directory)
            sources = sorted(
                item for item in directory.iterdir()
                if item.is_file() and item.suffix.lower() == source_extension.lower()
            )
        except (ValueError, OSError) as e:
            log.warning("Skipping %s: %s", directory, e)
            continue

        # Problem ids are case-insensitive but file names may not be: one
        # folder can hold SUM.cpp and sum.cpp, which would share a binary.
        seen: dict[str, Path] = {}
        for source in sources:
            problem_id = source.stem.lower()
            if problem_id not in test_suites:
                log.debug("No tests for %s, skipping", source)
                continue
            if problem_id in seen:
                log.warning("Ignoring %s: %s is already graded as %s", source, seen[problem_id].name, problem_id)
                continue
            seen[problem_id] = source
            submissions.append(
                Submission(
                    faculty_id=faculty_id,
                    homework_label=homework_label,
                    problem_id=problem_id,
                    source_path=source,
                    work_directory=directory,
                )
            )

    return submissions


class GradingOrchestrator:
    """
    Compiles and tests every submission on a bounded thread pool.

    Each worker builds its own Result and returns it; results are collected
    once all work has finished. A fault while grading one submission is
    logged and scores that submission zero without affecting the others.
    """

    def __init__(
        self,
        compiler: Compiler,
        executor: SubmissionExecutor,
        max_workers: int = DEFAULT_MAX_WORKERS,
        parallel_tests: bool = False,
        source_extension: str = SOURCE_EXTENSION,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            compiler: Builds submissions.
            executor: Runs built submissions against test cases.
            max_workers: Number of submissions graded at the same time.
            parallel_tests: Also run the tests of one submission concurrently.
            source_extension: Extension of gradable source files.
        """
        self.compiler = compiler
        self.executor = executor
        self.max_workers = max_workers
        self.parallel_tests = parallel_tests
        self.source_extension = source_extension

    def grade_submission(
        self,
        submission: Submission,
        suite: TestSuite,
        test_pool: Executor | None = None,
    ) -> Result:
        """
        Compile one submission and, if that succeeds, run its whole suite.

        Returns:
            Result with one verdict per test case; all False if the build failed.
        """
        if not self.compiler.compile_submission(submission):
            log.error("Could not compile %s", submission.source_path)
            return Result.failed(submission, suite)

        verdicts = self.executor.run_suite(submission, suite, pool=test_pool)
        return Result.for_submission(submission, suite, verdicts)

    def _grade_safely(
        self,
        submission: Submission,
        suite: TestSuite,
        test_pool: Executor | None,
    ) -> Result:
        try:
            return self.grade_submission(submission, suite, test_pool)
        except Exception:
            log.exception("Grading %s failed", submission.source_path)
            return Result.failed(submission, suite)

    def grade_all(self, submissions_root: Path, test_suites: dict[str, TestSuite]) -> list[Result]:
        """
        Grade every submission found below `submissions_root`.

        Args:
            submissions_root: Directory containing one folder per submission.
            test_suites: Catalog keyed by lower-cased problem id.

        Returns:
            One Result per discovered submission, in discovery order.
        """
        submissions = discover_submissions(submissions_root, test_suites, self.source_extension)
        log.info("Found %d gradable source files in %s", len(submissions), submissions_root)
        if not submissions:
            return []

        # Tests get their own pool: a submission worker blocks on its tests,
        # so sharing one pool could starve it.
        test_pool_context = (
            ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="test")
            if self.parallel_tests
            else nullcontext()
        )

        with test_pool_context as test_pool, ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="grade"
        ) as pool:
            futures = [
                pool.submit(self._grade_safely, submission, test_suites[submission.problem_id], test_pool)
                for submission in submissions
            ]
            return [future.result() for future in futures]
