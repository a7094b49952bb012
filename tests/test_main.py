import sys
import zipfile

import pytest

import main
from buildgrader.catalog import CatalogError
from buildgrader.config_loader import GraderConfig

from conftest import COPY_SOURCE, SUM_PROGRAM

SUM_CATALOG = """<testFile><tests>
  <test><input>2 3</input><output>5</output></test>
  <test><input>10 -4</input><output>6</output></test>
</tests></testFile>
"""


def make_archive(path, files):
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)


@pytest.fixture
def layout(tmp_path):
    archives = tmp_path / "archives"
    archives.mkdir()
    make_archive(archives / "Petrov_hw2.100.zip", {"sum.py": SUM_PROGRAM})
    make_archive(archives / "Ivanov_hw2.200.zip", {"sum.py": "input()\nprint(5)\n"})

    tests_dir = tmp_path / "catalog"
    tests_dir.mkdir()
    (tests_dir / "sum.xml").write_text(SUM_CATALOG, encoding="utf-8")

    stale = tmp_path / "homeworks" / "hw1.999"
    stale.mkdir(parents=True)
    (stale / "sum.py").write_text(SUM_PROGRAM, encoding="utf-8")
    return tmp_path


def make_config(root, **overrides):
    values = dict(
        submissions_dir=root / "homeworks",
        tests_dir=root / "catalog",
        archives_dir=root / "archives",
        grades_dir=root / "grades",
        compile_command=[sys.executable, "-c", COPY_SOURCE, "{source}", "{binary}"],
        run_command=[sys.executable, "{binary}"],
        source_extension=".py",
        compile_timeout=30,
        execution_timeout=30,
        clean_workspace=True,
    )
    values.update(overrides)
    return GraderConfig(**values)


def test_pipeline_extracts_grades_and_reports(layout):
    results = main.run_grading_pipeline(make_config(layout))

    by_faculty = {r.faculty_id: r for r in results}
    assert sorted(by_faculty) == ["100", "200"]
    assert by_faculty["100"].verdicts == (True, True)
    assert by_faculty["200"].verdicts == (True, False)
    assert not (layout / "homeworks" / "hw1.999").exists()

    report = (layout / "grades" / "report.txt").read_text(encoding="utf-8").splitlines()
    assert [line.split()[:4] for line in report[1:]] == [["100", "hw2", "sum", "10"], ["200", "hw2", "sum", "5"]]
    assert (layout / "grades" / "results.json").exists()
    assert (layout / "grades" / "results.csv").exists()


def test_pipeline_without_cleanup_keeps_existing_submissions(layout):
    results = main.run_grading_pipeline(make_config(layout, clean_workspace=False))

    assert sorted(r.faculty_id for r in results) == ["100", "200", "999"]


def test_pipeline_aborts_without_catalog(layout):
    for catalog_file in (layout / "catalog").iterdir():
        catalog_file.unlink()

    with pytest.raises(CatalogError):
        main.run_grading_pipeline(make_config(layout))
    assert not (layout / "grades").exists()


def test_main_exit_codes(layout, monkeypatch):
    config_path = layout / "grader_config.yml"
    config_path.write_text(
        "submissions_dir: homeworks\n"
        "tests_dir: missing_catalog\n"
        "grades_dir: grades\n",
        encoding="utf-8",
    )

    monkeypatch.setattr(sys, "argv", ["main.py", f"--config={config_path}"])
    assert main.main() == 1

    monkeypatch.setattr(sys, "argv", ["main.py", f"--config={layout / 'nope.yml'}"])
    assert main.main() == 1
