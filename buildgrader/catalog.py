"""
Test catalog loader.

One file per problem; the problem id is the lower-cased file stem. Two
equivalent formats are accepted.

XML::

    <testFile>
      <tests>
        <test><input>2 3</input><output>5</output></test>
      </tests>
    </testFile>

YAML::

    tests:
      - input: "2 3"
        output: "5"
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import XML_CATALOG_EXTENSIONS, YAML_CATALOG_EXTENSIONS
from .models import TestCase, TestSuite

log = logging.getLogger(__name__)


class CatalogError(Exception):
    """The test catalog is missing or cannot be parsed."""


def _parse_xml(catalog_file: Path) -> list[dict[str, str]]:
    root = ET.parse(catalog_file).getroot()
    if root.tag != "testFile":
        raise CatalogError(f"{catalog_file}: expected <testFile> root, found <{root.tag}>")

    return [
        {
            "input": test.findtext("input", default=""),
            "output": test.findtext("output", default=""),
        }
        for test in root.iterfind("tests/test")
    ]


def _text(value: object) -> str:
    # YAML turns bare numbers into ints: "output: 5"
    return "" if value is None else str(value)


def _parse_yaml(catalog_file: Path) -> list[dict[str, str]]:
    with open(catalog_file, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    tests = data.get("tests") if isinstance(data, dict) else None
    if not isinstance(tests, list):
        raise CatalogError(f"{catalog_file}: expected a 'tests' list")
    for test in tests:
        if not isinstance(test, dict):
            raise CatalogError(f"{catalog_file}: every test must be a mapping")
    return [{key: _text(test.get(key)) for key in ("input", "output")} for test in tests]


def load_test_suite(catalog_file: Path) -> TestSuite:
    """
    Load the test suite of one problem.

    Args:
        catalog_file: XML or YAML catalog file.

    Returns:
        TestSuite named after the lower-cased file stem.

    Raises:
        CatalogError: If the file cannot be read or holds no tests.
    """
    suffix = catalog_file.suffix.lower()
    try:
        if suffix in XML_CATALOG_EXTENSIONS:
            records = _parse_xml(catalog_file)
        elif suffix in YAML_CATALOG_EXTENSIONS:
            records = _parse_yaml(catalog_file)
        else:
            raise CatalogError(f"Unsupported catalog format: {catalog_file}")
    except (OSError, ET.ParseError, yaml.YAMLError) as e:
        raise CatalogError(f"Cannot read {catalog_file}: {e}") from e

    try:
        return TestSuite(
            problem_id=catalog_file.stem.lower(),
            cases=[TestCase(input=r["input"], expected_output=r["output"]) for r in records],
        )
    except ValidationError as e:
        raise CatalogError(f"{catalog_file} does not define any tests") from e


def load_test_suites(tests_dir: Path) -> dict[str, TestSuite]:
    """
    Load every catalog file in a directory.

    Args:
        tests_dir: Directory with one catalog file per problem.

    Returns:
        Test suites keyed by lower-cased problem id.

    Raises:
        CatalogError: If the directory or any catalog file cannot be loaded.
    """
    if not tests_dir.is_dir():
        raise CatalogError(f"Tests directory not found: {tests_dir}")

    suites: dict[str, TestSuite] = {}
    supported = XML_CATALOG_EXTENSIONS + YAML_CATALOG_EXTENSIONS
    for catalog_file in sorted(tests_dir.iterdir()):
        if not catalog_file.is_file() or catalog_file.suffix.lower() not in supported:
            continue
        suite = load_test_suite(catalog_file)
        if suite.problem_id in suites:
            raise CatalogError(f"Problem '{suite.problem_id}' is defined twice in {tests_dir}")
        suites[suite.problem_id] = suite
        log.debug("Loaded %d tests for %s", len(suite), suite.problem_id)

    if not suites:
        raise CatalogError(f"No test catalogs found in {tests_dir}")
    return suites
