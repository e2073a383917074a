"""Tests for request metrics labelling."""

import pytest

from spec2bom.middleware.metrics import _metric_path


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/health", "/health"),
        ("/api/vertesia/objects", "/api/vertesia/objects"),
        ("/api/vertesia/objects/upload-url", "/api/vertesia/objects"),
        ("/api/vertesia/object-abc123", "/api/vertesia/object-{id}"),
        ("/api/vertesia/execute-async/", "/api/vertesia/execute-async"),
    ],
)
def test_metric_path(path: str, expected: str) -> None:
    assert _metric_path(path, "/api/vertesia") == expected
