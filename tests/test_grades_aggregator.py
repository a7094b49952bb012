import csv
import itertools
import json

import pytest

from buildgrader.config import MAX_POINTS
from buildgrader.grades_aggregator import (
    GradesAggregator,
    load_results_from_dir,
    render_report,
    score,
    total_score,
)
from buildgrader.models import Result


def make_result(faculty_id, verdicts, problem_id="sum"):
    return Result(
        faculty_id=faculty_id,
        homework_label="hw1",
        problem_id=problem_id,
        points_per_test=MAX_POINTS / len(verdicts),
        verdicts=verdicts,
    )


@pytest.mark.parametrize("tests", range(1, 8))
def test_score_never_exceeds_max_points(tests):
    for verdicts in itertools.product([True, False], repeat=tests):
        assert 0 <= score(make_result("1", verdicts)) <= MAX_POINTS
    assert score(make_result("1", (True,) * tests)) == MAX_POINTS


def test_score_is_points_per_test_times_passed():
    result = make_result("1", (True, False, True, True))

    assert result.points_per_test == 2.5
    assert score(result) == 7.5


def test_total_score():
    assert total_score([make_result("1", (True, False)), make_result("1", (True,), "echo")]) == 15


def test_report_is_sorted_by_faculty_and_padded():
    report = render_report([make_result("200", (True, False)), make_result("100", (True, True))])
    lines = report.splitlines()

    assert lines[0].split() == ["Faculty", "Homework", "Problem", "Total", "Tests"]
    assert lines[1].split() == ["100", "hw1", "sum", "10", "=5+5+"]
    assert lines[2].split() == ["200", "hw1", "sum", "5", "=5+0+"]
    assert lines[1].index("hw1") == 20
    assert lines[1].index("=5+5+") == 80


def test_save_all_writes_summary_csv_and_report(tmp_path):
    aggregator = GradesAggregator(output_dir=tmp_path / "grades")
    aggregator.add_results([make_result("200", (False, False)), make_result("100", (True, False))])

    output_files = aggregator.save_all()

    summary = json.loads(output_files["summary_json"].read_text(encoding="utf-8"))
    assert summary["total_results"] == 2
    assert summary["statistics"]["highest_score"] == 5
    assert [r["faculty_id"] for r in summary["results"]] == ["100", "200"]

    with open(output_files["summary_csv"], newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["verdicts"] == "+-"
    assert rows[1]["score"] == "0.00"

    assert output_files["report"].read_text(encoding="utf-8").startswith("Faculty")

    loaded = load_results_from_dir(tmp_path / "grades")
    assert [r.faculty_id for r in loaded] == ["100", "200"]
    assert loaded[0].verdicts == (True, False)


def test_load_results_from_missing_dir(tmp_path):
    assert load_results_from_dir(tmp_path) == []
