"""
Configuration constants for the Build Grader system.
"""

import os
from pathlib import Path


# Time budgets (seconds)
COMPILE_TIMEOUT_SECONDS: float = 5.0
EXECUTION_TIMEOUT_SECONDS: float = 5.0

# Scoring: every problem is worth the same, split evenly across its tests
MAX_POINTS: float = 10.0

# Concurrency
DEFAULT_MAX_WORKERS: int = 4

# Toolchain
# Placeholders: {source}, {binary}, {directory}, {problem}
DEFAULT_COMPILE_COMMAND: list[str] = ["g++", "-O2", "-o", "{binary}", "{source}"]
DEFAULT_RUN_COMMAND: list[str] = ["{binary}"]
SOURCE_EXTENSION: str = ".cpp"
EXECUTABLE_SUFFIX: str = ".exe" if os.name == "nt" else ""

# Marker searched (case-insensitively) in compiler output to detect failure
COMPILE_ERROR_MARKER: str = "ERROR"

# Shell invocations in submitted code are commented out before building.
# Matches `system`, `std::system` and the MSVC `_system`, `_wsystem`, `_tsystem`
# variants; `//` comments out the rest of the line.
SHELL_CALL_PATTERN: str = r"(?:\bstd::)?\b_*[tw]?system\b"
SHELL_CALL_REPLACEMENT: str = "//"

# Submission layout: <homework label>.<faculty id>, e.g. "hw3.81234"
HOMEWORK_SEPARATOR: str = "."
HOMEWORK_MARKER: str = "hw"
ARCHIVE_PATTERN: str = "*.zip"

# Test catalog file extensions
XML_CATALOG_EXTENSIONS: list[str] = [".xml"]
YAML_CATALOG_EXTENSIONS: list[str] = [".yml", ".yaml"]

# Output files
RESULTS_SUMMARY_FILENAME: str = "results.json"
RESULTS_CSV_FILENAME: str = "results.csv"
REPORT_FILENAME: str = "report.txt"
REPORT_COLUMN_WIDTH: int = 20

# Default paths (can be overridden via config file)
DEFAULT_GRADES_DIR: Path = Path("grades")
