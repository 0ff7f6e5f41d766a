"""Contract test fixtures.

Contract tests load the bundled example project from disk and check the
guarantees every export format gives to downstream tooling: stable output
in deterministic mode and loss-free snapshot round trips.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.config.loader import generate_example_project, load_project

if TYPE_CHECKING:
    from pathlib import Path

TEXT_FORMATS = ("xml", "csv", "json", "gvl", "html")


# Auto-mark all tests in this package as contract tests
def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-mark tests in contract directory with contract marker."""
    for item in items:
        if "contract" in str(item.fspath):
            item.add_marker(pytest.mark.contract)


@pytest.fixture
def example_project_path(tmp_path: Path) -> Path:
    path = tmp_path / "example-project.yaml"
    path.write_text(generate_example_project(), encoding="utf-8")
    return path


@pytest.fixture
def example_manager(example_project_path: Path) -> MappingManager:
    """Manager over the example project, as the CLI builds it."""
    config, signals = load_project(example_project_path).to_domain()
    return MappingManager(config, signals)


@pytest.fixture(params=TEXT_FORMATS)
def text_format(request: pytest.FixtureRequest) -> str:
    return request.param
