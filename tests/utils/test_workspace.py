"""
Tests for the workspace path helpers.
"""

import os

import pytest

from lsp_bridge.exceptions import SchemaValidationError
from lsp_bridge.utils.workspace import (
    ensure_within_root,
    path_to_uri,
    resolve_file_path,
    uri_to_path,
)


class TestResolveFilePath:
    """Test cases for resolve_file_path."""

    def test_relative_path_resolves_against_root(self, tmp_path):
        root = str(tmp_path)
        assert resolve_file_path("pkg/a.go", root) == os.path.join(root, "pkg", "a.go")

    def test_outside_root_rejected(self, tmp_path):
        """Test that escaping the root is rejected when enforcement is on."""
        root = str(tmp_path / "ws")
        with pytest.raises(SchemaValidationError) as exc_info:
            resolve_file_path("../other.go", root)
        assert exc_info.value.field == "filePath"

    def test_outside_root_allowed_without_enforcement(self, tmp_path):
        root = str(tmp_path / "ws")
        result = resolve_file_path("../other.go", root, enforce=False)
        assert result == os.path.join(str(tmp_path), "other.go")

    def test_empty_path_rejected(self, tmp_path):
        with pytest.raises(SchemaValidationError):
            resolve_file_path("  ", str(tmp_path))


class TestEnsureWithinRoot:
    """Test cases for ensure_within_root."""

    def test_root_itself_is_inside(self, tmp_path):
        ok, _ = ensure_within_root(str(tmp_path), str(tmp_path))
        assert ok

    def test_sibling_prefix_is_outside(self, tmp_path):
        """Test that /ws-other is not considered inside /ws."""
        ok, _ = ensure_within_root(str(tmp_path) + "-other/a.go", str(tmp_path))
        assert not ok


class TestUris:
    """Test cases for path/URI conversion."""

    def test_round_trip_with_spaces(self, tmp_path):
        path = os.path.join(str(tmp_path), "my file.go")
        uri = path_to_uri(path)
        assert uri.startswith("file:///")
        assert "%20" in uri
        assert uri_to_path(uri) == path
