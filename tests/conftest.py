import sys
import textwrap
from pathlib import Path

import pytest

from buildgrader.compiler import Compiler
from buildgrader.executor import SubmissionExecutor
from buildgrader.models import Submission, TestCase, TestSuite

# The "toolchain" used in tests: building copies the Python source to the
# binary path, running starts it with the current interpreter.
COPY_SOURCE = "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2])"

SUM_PROGRAM = """
a, b = map(int, input().split())
print(a + b)
"""


def write_program(path: Path, code: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(code), encoding="utf-8")
    return path


def make_suite(problem_id: str, *pairs: tuple[str, str]) -> TestSuite:
    return TestSuite(
        problem_id=problem_id,
        cases=[TestCase(input=i, expected_output=o) for i, o in pairs],
    )


def make_submission(work_directory: Path, problem_id: str = "sum") -> Submission:
    return Submission(
        faculty_id="81234",
        homework_label="hw1",
        problem_id=problem_id,
        source_path=work_directory / f"{problem_id}.py",
        work_directory=work_directory,
    )


@pytest.fixture
def python_compiler() -> Compiler:
    return Compiler(
        command=[sys.executable, "-c", COPY_SOURCE, "{source}", "{binary}"],
        timeout_seconds=30,
    )


@pytest.fixture
def python_executor() -> SubmissionExecutor:
    return SubmissionExecutor(command=[sys.executable, "{binary}"], timeout_seconds=30)


@pytest.fixture
def sum_suite() -> TestSuite:
    return make_suite("sum", ("2 3", "5"))
