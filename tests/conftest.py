"""Test configuration."""

import os
from collections.abc import Generator
from pathlib import Path
from typing import List

import pytest
from pytest import Config

from spec2bom.core.logging import configure_logging

fixture = pytest.fixture

pytest_plugins: List[str] = [
    "tests.fixtures.api",
    "tests.fixtures.store",
]

# Settings are read from the environment; keep a developer's real key and
# proxy URL out of the test run.
for _name in ("VERTESIA_API_KEY", "VERTESIA_ENV_ID", "VERTESIA_MODEL", "SPEC2BOM_PROXY_URL"):
    os.environ.pop(_name, None)


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@fixture(autouse=True)
def isolated_workdir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Run each test from an empty directory so no ``.env`` file is picked up."""
    monkeypatch.chdir(tmp_path)
    yield tmp_path


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")
