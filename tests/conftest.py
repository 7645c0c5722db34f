"""Shared fixtures for api-trace tests."""

import textwrap
from pathlib import Path

import pytest

from api_trace.caller_graph import CallerGraph
from api_trace.indexer import CSharpIndexer


@pytest.fixture
def indexer():
    """Indexer over a fresh graph with the default API surface."""
    return CSharpIndexer(CallerGraph())


@pytest.fixture
def make_tree(tmp_path):
    """Writes {relative path: content} under tmp_path and returns the root."""
    def _make(files: dict) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content), encoding="utf-8")
        return tmp_path
    return _make
