"""
Scoring and export of grading results.

Saves results to a grades folder as a JSON summary, a CSV table and a
fixed-width text report.
"""

import csv
import json
from datetime import datetime
from pathlib import Path

from .config import (
    DEFAULT_GRADES_DIR,
    MAX_POINTS,
    REPORT_COLUMN_WIDTH,
    REPORT_FILENAME,
    RESULTS_CSV_FILENAME,
    RESULTS_SUMMARY_FILENAME,
)
from .models import Result

REPORT_COLUMNS: list[str] = ["Faculty", "Homework", "Problem", "Total", "Tests"]


def score(result: Result) -> float:
    """
    Points earned by one result: points_per_test times the passed tests.

    Computed as MAX_POINTS * passed / tests, which is the same value but
    never exceeds MAX_POINTS through rounding.
    """
    passed = sum(1 for verdict in result.verdicts if verdict)
    return MAX_POINTS * passed / len(result.verdicts)


def total_score(results: list[Result]) -> float:
    """Sum of scores, e.g. over all problems of one participant."""
    return sum(score(result) for result in results)


def _format_points(points: float) -> str:
    return f"{points:g}"


def render_report(results: list[Result], width: int = REPORT_COLUMN_WIDTH) -> str:
    """
    Render results as a fixed-width text table sorted by faculty id.

    The Tests column lists the points of every test, e.g. "=2.5+0+2.5+2.5+".

    Args:
        results: Results to render.
        width: Width every column is padded to.

    Returns:
        Report text, one line per result after the header.
    """
    lines = ["".join(column.ljust(width) for column in REPORT_COLUMNS).rstrip()]

    for result in sorted(results, key=lambda r: r.faculty_id):
        tests = "=" + "".join(
            _format_points(result.points_per_test if verdict else 0) + "+"
            for verdict in result.verdicts
        )
        row = [
            result.faculty_id,
            result.homework_label,
            result.problem_id,
            _format_points(score(result)),
            tests,
        ]
        lines.append("".join(cell.ljust(width) for cell in row).rstrip())

    return "\n".join(lines) + "\n"


class GradesAggregator:
    """
    Aggregates results from all submissions and exports them.
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        """
        Initialize the grades aggregator.

        Args:
            output_dir: Directory to save results. Defaults to ./grades/
        """
        self.output_dir = output_dir or DEFAULT_GRADES_DIR
        self.results: list[Result] = []
        self.timestamp = datetime.now().isoformat()

    def add_result(self, result: Result) -> None:
        self.results.append(result)

    def add_results(self, results: list[Result]) -> None:
        self.results.extend(results)

    def save_all(self) -> dict[str, Path]:
        """
        Save all results to the output directory.

        Creates:
        - Summary JSON with statistics and every result
        - Summary CSV, one row per result
        - Fixed-width text report

        Returns:
            Dictionary of output file paths.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        output_files: dict[str, Path] = {}
        self.results.sort(key=lambda r: (r.faculty_id, r.homework_label, r.problem_id))

        summary_path = self.output_dir / RESULTS_SUMMARY_FILENAME
        summary_data = {
            "timestamp": self.timestamp,
            "total_results": len(self.results),
            "statistics": self._calculate_statistics(),
            "results": [result.model_dump(mode="json") for result in self.results],
        }
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(summary_data, f, indent=2)
        output_files["summary_json"] = summary_path

        csv_path = self.output_dir / RESULTS_CSV_FILENAME
        self._save_csv(csv_path)
        output_files["summary_csv"] = csv_path

        report_path = self.output_dir / REPORT_FILENAME
        report_path.write_text(render_report(self.results), encoding="utf-8")
        output_files["report"] = report_path

        return output_files

    def _calculate_statistics(self) -> dict:
        """
        Calculate summary statistics for all results.

        Returns:
            Dictionary with statistics.
        """
        if not self.results:
            return {}

        scores = [score(r) for r in self.results]
        full_marks = sum(1 for s in scores if s == MAX_POINTS)

        return {
            "average_score": sum(scores) / len(scores),
            "max_possible": MAX_POINTS,
            "highest_score": max(scores),
            "lowest_score": min(scores),
            "full_marks_count": full_marks,
            "full_marks_percent": (full_marks / len(scores)) * 100,
        }

    def _save_csv(self, csv_path: Path) -> None:
        """
        Save results as CSV file.

        Args:
            csv_path: Path to save CSV file.
        """
        header = ["faculty_id", "homework", "problem", "score", "max_score", "passed", "tests", "verdicts"]

        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(header)

            for result in self.results:
                writer.writerow([
                    result.faculty_id,
                    result.homework_label,
                    result.problem_id,
                    f"{score(result):.2f}",
                    MAX_POINTS,
                    sum(result.verdicts),
                    len(result.verdicts),
                    "".join("+" if v else "-" for v in result.verdicts),
                ])


def load_results_from_dir(grades_dir: Path) -> list[Result]:
    """
    Load results saved by a previous run.

    Args:
        grades_dir: Path to the grades directory.

    Returns:
        List of Result objects sorted by faculty id.
    """
    summary_path = grades_dir / RESULTS_SUMMARY_FILENAME
    if not summary_path.exists():
        return []

    with open(summary_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    results = [Result(**result_data) for result_data in data.get("results", [])]
    results.sort(key=lambda r: r.faculty_id)
    return results
