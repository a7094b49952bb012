"""
Pydantic models for the Build Grader system.

Defines the test catalog, the submissions discovered on disk, the outcome
of a single process run and the per-submission grading result.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import EXECUTABLE_SUFFIX, MAX_POINTS


class TestCase(BaseModel):
    """
    One input/expected-output pair. Identity is its index in the suite.

    Attributes:
        input: Text fed to the program on standard input.
        expected_output: Text the program is expected to print.
    """

    model_config = ConfigDict(frozen=True)

    input: str = Field(default="", description="Standard input for the program")
    expected_output: str = Field(default="", description="Expected standard output")


class TestSuite(BaseModel):
    """
    Ordered test cases for one problem.

    Attributes:
        problem_id: Lower-cased problem identifier (catalog file stem).
        cases: Test cases in catalog order.
    """

    model_config = ConfigDict(frozen=True)

    problem_id: str = Field(..., description="Lower-cased problem identifier")
    cases: tuple[TestCase, ...] = Field(..., min_length=1, description="Test cases in catalog order")

    def __len__(self) -> int:
        return len(self.cases)

    @property
    def points_per_test(self) -> float:
        return MAX_POINTS / len(self.cases)


class Submission(BaseModel):
    """
    One source file of one homework submission.

    Attributes:
        faculty_id: Identifier of the participant (second part of the folder name).
        homework_label: Homework the folder belongs to, e.g. "hw3".
        problem_id: Lower-cased source file stem, matched against the catalog.
        source_path: Path to the submitted source file.
        work_directory: Folder the source is compiled and run in.
    """

    model_config = ConfigDict(frozen=True)

    faculty_id: str
    homework_label: str
    problem_id: str
    source_path: Path
    work_directory: Path

    @property
    def binary_path(self) -> Path:
        """Location the compiler must write the executable to."""
        return self.work_directory / f"{self.problem_id}{EXECUTABLE_SUFFIX}"


class ProcessOutput(BaseModel):
    """
    Captured outcome of one external process run.

    Attributes:
        stdout: Everything read from standard output (partial on timeout).
        stderr: Everything read from standard error (partial on timeout).
        timed_out: Whether the process was killed at the deadline.
        return_code: Exit status, None if it could not be determined.
    """

    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    return_code: int | None = None


class MismatchRecord(BaseModel):
    """
    Diagnostic for a test whose normalized output differs from the expected one.

    Line endings in expected/actual are escaped so they are visible in a log.
    """

    submission_path: str
    expected: str
    actual: str


class Result(BaseModel):
    """
    Grading result for one submitted source file.

    This is the hand-off record to the report: it is built by the worker
    grading the submission and never changed after it is published.

    Attributes:
        faculty_id: Participant identifier.
        homework_label: Homework label.
        problem_id: Problem identifier.
        points_per_test: MAX_POINTS divided by the number of tests.
        verdicts: One pass/fail flag per test case, in catalog order.
        submission_path: Path of the graded source file.
    """

    model_config = ConfigDict(frozen=True)

    faculty_id: str = Field(..., description="Participant identifier")
    homework_label: str = Field(..., description="Homework label")
    problem_id: str = Field(..., description="Problem identifier")
    points_per_test: float = Field(..., gt=0, description="Points awarded per passed test")
    verdicts: tuple[bool, ...] = Field(..., min_length=1, description="Per-test outcomes in catalog order")
    submission_path: str | None = Field(default=None, description="Path to the graded source file")

    @model_validator(mode="after")
    def _check_points(self) -> "Result":
        if abs(self.points_per_test * len(self.verdicts) - MAX_POINTS) > 1e-9:
            raise ValueError(
                f"points_per_test {self.points_per_test} does not split {MAX_POINTS} "
                f"across {len(self.verdicts)} tests"
            )
        return self

    @classmethod
    def for_submission(cls, submission: Submission, suite: TestSuite, verdicts: list[bool]) -> "Result":
        """
        Build the result of grading `submission` against `suite`.

        Raises:
            ValueError: If there is not exactly one verdict per test case.
        """
        if len(verdicts) != len(suite):
            raise ValueError(
                f"{len(verdicts)} verdicts for {len(suite)} tests of problem {suite.problem_id}"
            )
        return cls(
            faculty_id=submission.faculty_id,
            homework_label=submission.homework_label,
            problem_id=submission.problem_id,
            points_per_test=suite.points_per_test,
            verdicts=tuple(verdicts),
            submission_path=str(submission.source_path),
        )

    @classmethod
    def failed(cls, submission: Submission, suite: TestSuite) -> "Result":
        """Result with every verdict false, for submissions that never ran."""
        return cls.for_submission(submission, suite, [False] * len(suite))
