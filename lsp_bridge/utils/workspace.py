from __future__ import annotations

import os
from typing import Tuple
from urllib.parse import quote, unquote, urlparse

from lsp_bridge.exceptions import SchemaValidationError

"""Workspace root utilities to constrain file access and map paths to URIs.

The root and the enforcement flag come from Settings
(LSP_BRIDGE_WORKSPACE_ROOT, LSP_BRIDGE_WORKSPACE_ENFORCE).
"""


def ensure_within_root(abs_path: str, root: str, enforce: bool = True) -> Tuple[bool, str]:
    """Return (ok, normalized_abs) if path is within root or enforcement disabled.

    All inputs must be absolute. The second value is the normalized absolute path.
    """
    p = os.path.abspath(abs_path)
    if not enforce:
        return True, p
    root = os.path.abspath(root)
    try:
        common = os.path.commonpath([root, p])
    except ValueError:
        return False, p
    return common == root, p


def normalize_file(path: str, root: str) -> str:
    s = os.path.expanduser(str(path or "").strip())
    if not os.path.isabs(s):
        s = os.path.join(root, s)
    return os.path.abspath(s)


def resolve_file_path(path: str, root: str, enforce: bool = True) -> str:
    """Normalize a caller-supplied path and apply the workspace guard."""
    if not str(path or "").strip():
        raise SchemaValidationError("'filePath' must be a non-empty string", field="filePath")
    ok, abs_path = ensure_within_root(normalize_file(path, root), root, enforce)
    if not ok:
        raise SchemaValidationError(
            f"Path is outside of the workspace root {root}: {abs_path} "
            "(set LSP_BRIDGE_WORKSPACE_ENFORCE=0 to disable)",
            field="filePath",
        )
    return abs_path


def path_to_uri(path: str) -> str:
    p = os.path.abspath(path).replace(os.sep, "/")
    if not p.startswith("/"):
        p = "/" + p
    return "file://" + quote(p, safe="/:")


def uri_to_path(uri: str) -> str:
    parsed = urlparse(uri)
    path = unquote(parsed.path)
    # file:///C:/x -> /C:/x on Windows
    if os.name == "nt" and len(path) > 2 and path[0] == "/" and path[2] == ":":
        path = path[1:]
    return os.path.normpath(path)
