"""
Configuration loader for the Build Grader system.

Handles parsing and validation of YAML configuration files.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .config import (
    COMPILE_TIMEOUT_SECONDS,
    DEFAULT_COMPILE_COMMAND,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RUN_COMMAND,
    EXECUTION_TIMEOUT_SECONDS,
    SOURCE_EXTENSION,
)


class GraderConfig(BaseModel):
    """
    Configuration model for the grader.
    """
    submissions_dir: Path = Field(..., description="Directory holding one <hw>.<faculty id> folder per submission")
    tests_dir: Path = Field(..., description="Directory holding one test catalog file per problem")
    archives_dir: Optional[Path] = Field(None, description="Directory of submission .zip archives to extract first")
    grades_dir: Optional[Path] = Field(None, description="Path to save results and the text report")

    # Toolchain
    compile_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPILE_COMMAND),
        min_length=1,
        description="Compiler command line template",
    )
    run_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RUN_COMMAND),
        min_length=1,
        description="Command line template used to start a compiled submission",
    )
    source_extension: str = Field(SOURCE_EXTENSION, description="Extension of gradable source files")
    fail_on_nonzero_exit: bool = Field(
        False, description="Also treat a non-zero compiler exit code as a failed build"
    )

    # Budgets and concurrency
    compile_timeout: float = Field(COMPILE_TIMEOUT_SECONDS, gt=0, description="Compiler time budget in seconds")
    execution_timeout: float = Field(EXECUTION_TIMEOUT_SECONDS, gt=0, description="Per test time budget in seconds")
    max_workers: int = Field(DEFAULT_MAX_WORKERS, ge=1, description="Submissions graded concurrently")
    parallel_tests: bool = Field(False, description="Run the tests of one submission concurrently")

    clean_workspace: bool = Field(False, description="Empty submissions_dir before extracting archives (requires archives_dir)")
    verbose: bool = Field(False, description="Enable verbose output")

    @model_validator(mode="after")
    def _clean_only_with_archives(self) -> "GraderConfig":
        # Cleaning without re-extracting would delete every submission
        if self.clean_workspace and not self.archives_dir:
            raise ValueError("clean_workspace requires archives_dir")
        return self


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    # Resolve relative paths relative to the config file location
    config_dir = config_path.parent
    for path_field in ["submissions_dir", "tests_dir", "archives_dir", "grades_dir"]:
        if config_data.get(path_field):
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    return GraderConfig(**config_data)
