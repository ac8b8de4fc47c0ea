"""Path template helpers.

Routes are declared with ``:name`` tokens (``/todos/:todoId``); both the
OpenAPI document and Starlette's router use ``{name}``. One function does
the translation for both so they always agree.
"""
from __future__ import annotations

import re

PATH_TOKEN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def path_tokens(path: str) -> list[str]:
    """Parameter names in template order."""
    return PATH_TOKEN.findall(path)


def to_openapi_path(path: str) -> str:
    """``/todos/:todoId`` -> ``/todos/{todoId}``."""
    return PATH_TOKEN.sub(r"{\1}", path)


def path_signature(path: str) -> str:
    """Template with parameter names erased; equal signatures match the same URLs."""
    return PATH_TOKEN.sub("{}", path)
