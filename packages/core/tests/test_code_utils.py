"""Tests for file-type helpers."""

import pytest

from adolens_core.utils.code import is_binary_path


@pytest.mark.parametrize("path", ["/img/logo.png", "/docs/manual.PDF", "/fonts/a.woff2", "/icons/x.svg", "/bin/tool.exe"])
def test_binary_paths(path):
    assert is_binary_path(path)


@pytest.mark.parametrize("path", ["/src/app.ts", "/README.md", "/Makefile", "/src/pngutil.py"])
def test_text_paths(path):
    assert not is_binary_path(path)
