"""
Build Grader: compile, run and score homework submissions

Usage:
  main.py [--config=PATH]
  main.py (-h | --help)

Options:
  --config=PATH  Path to YAML configuration file [default: grader_config.yml].
  -h --help      Show this screen.
"""

import logging
import sys
from pathlib import Path

import colorlog
from docopt import docopt

from buildgrader.catalog import CatalogError, load_test_suites
from buildgrader.compiler import Compiler
from buildgrader.config import DEFAULT_GRADES_DIR, MAX_POINTS
from buildgrader.config_loader import GraderConfig, load_config
from buildgrader.executor import SubmissionExecutor
from buildgrader.grades_aggregator import GradesAggregator, score
from buildgrader.models import Result
from buildgrader.orchestrator import GradingOrchestrator
from buildgrader.workspace import clean_up_folder, extract_archives


def initialize_logging(verbose: bool) -> None:
    fmt = "%(log_color)s%(levelname)s %(message)s"
    colorlog.basicConfig(stream=sys.stdout, format=fmt, level=logging.DEBUG if verbose else logging.INFO)


def print_summary(results: list[Result]) -> None:
    """
    Print a summary of the run to console.

    Args:
        results: All results of the run.
    """
    print("\n" + "=" * 60)
    print("GRADING COMPLETE")
    print("=" * 60)
    print(f"Total source files graded: {len(results)}")

    if results:
        scores = [score(r) for r in results]
        avg_score = sum(scores) / len(scores)
        print(f"Average score: {avg_score:.1f}/{MAX_POINTS:.1f}")

        full = sum(1 for s in scores if s == MAX_POINTS)
        print(f"Full marks: {full}/{len(results)} ({100*full/len(results):.1f}%)")

        zero = sum(1 for r in results if not any(r.verdicts))
        print(f"No test passed: {zero}/{len(results)}")


def run_grading_pipeline(config: GraderConfig) -> list[Result]:
    """
    Run the complete grading pipeline.

    Args:
        config: Loaded grader configuration.

    Returns:
        List of Result objects, one per graded source file.

    Raises:
        CatalogError: If the test catalog cannot be loaded.
    """
    submissions_dir = config.submissions_dir

    if config.archives_dir:
        if config.clean_workspace:
            print(f"Cleaning {submissions_dir}...")
            clean_up_folder(submissions_dir)

        print(f"Extracting archives from {config.archives_dir}...")
        submissions_dir.mkdir(parents=True, exist_ok=True)
        extracted = extract_archives(config.archives_dir, submissions_dir)
        print(f"Extracted {len(extracted)} archives")

    print(f"Loading tests from {config.tests_dir}...")
    test_suites = load_test_suites(config.tests_dir)
    print(f"Found {len(test_suites)} problems")

    if config.verbose:
        for problem_id, suite in sorted(test_suites.items()):
            print(f"  - {problem_id}: {len(suite)} tests, {suite.points_per_test:g} pts each")

    orchestrator = GradingOrchestrator(
        compiler=Compiler(
            command=config.compile_command,
            timeout_seconds=config.compile_timeout,
            fail_on_nonzero_exit=config.fail_on_nonzero_exit,
        ),
        executor=SubmissionExecutor(
            command=config.run_command,
            timeout_seconds=config.execution_timeout,
        ),
        max_workers=config.max_workers,
        parallel_tests=config.parallel_tests,
        source_extension=config.source_extension,
    )

    print(f"\nGrading submissions in {submissions_dir}...")
    results = orchestrator.grade_all(submissions_dir, test_suites)

    if results:
        print("\nSaving results...")
        aggregator = GradesAggregator(output_dir=config.grades_dir or DEFAULT_GRADES_DIR)
        aggregator.add_results(results)
        output_files = aggregator.save_all()
        print(f"  Summary JSON: {output_files.get('summary_json')}")
        print(f"  Summary CSV:  {output_files.get('summary_csv')}")
        print(f"  Report:       {output_files.get('report')}")

    print_summary(results)
    return results


def main() -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__)
    config_path = Path(arguments["--config"])

    if not config_path.exists():
        print(f"Error: Configuration file not found at {config_path}")
        return 1

    try:
        config = load_config(config_path)
        print(f"Loaded configuration from {config_path}")
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    initialize_logging(config.verbose)

    if not config.archives_dir and not config.submissions_dir.exists():
        print(f"Error: Submissions directory not found: {config.submissions_dir}")
        return 1

    try:
        run_grading_pipeline(config)
        return 0
    except CatalogError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
