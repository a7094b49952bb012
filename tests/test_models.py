import pytest
from pydantic import ValidationError

from buildgrader.config import EXECUTABLE_SUFFIX
from buildgrader.models import Result

from conftest import make_submission, make_suite


@pytest.mark.parametrize("tests", [1, 2, 3, 7, 12])
def test_points_per_test_splits_max_points(tests):
    suite = make_suite("sum", *[("in", "out")] * tests)

    assert suite.points_per_test == 10 / tests


def test_suite_must_have_cases():
    with pytest.raises(ValidationError):
        make_suite("sum")


def test_result_has_one_verdict_per_case(tmp_path):
    suite = make_suite("sum", ("1", "1"), ("2", "2"))
    submission = make_submission(tmp_path)

    with pytest.raises(ValueError):
        Result.for_submission(submission, suite, [True])

    result = Result.failed(submission, suite)
    assert result.verdicts == (False, False)
    assert result.points_per_test == 5
    assert result.submission_path == str(submission.source_path)


def test_result_is_immutable(tmp_path):
    result = Result.failed(make_submission(tmp_path), make_suite("sum", ("1", "1")))

    with pytest.raises(ValidationError):
        result.verdicts = (True,)


def test_result_rejects_inconsistent_points():
    with pytest.raises(ValidationError):
        Result(faculty_id="1", homework_label="hw1", problem_id="sum", points_per_test=3, verdicts=(True, True))


def test_binary_path_follows_problem_id(tmp_path):
    submission = make_submission(tmp_path, problem_id="primes")

    assert submission.binary_path == tmp_path / f"primes{EXECUTABLE_SUFFIX}"
