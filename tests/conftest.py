"""Pytest fixtures for book-derivatives tests."""

import pytest
from fakes import FakeRepository, FakeRunner

from schemas.config import DerivativeConfig


def _make_executable(path):
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def tool_config(tmp_path):
    """Config whose tool paths point at installed (stub) executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return DerivativeConfig(
        convert_path=_make_executable(bin_dir / "convert"),
        gs_path=_make_executable(bin_dir / "gs"),
        tesseract_path=_make_executable(bin_dir / "tesseract"),
        gimp_path=_make_executable(bin_dir / "gimp"),
        enabled_languages=["eng", "fra"],
        temp_dir=scratch,
    )


@pytest.fixture
def missing_tools_config(tmp_path):
    """Config whose tool paths do not exist."""
    missing = tmp_path / "missing"
    return DerivativeConfig(
        convert_path=str(missing / "convert"),
        gs_path=str(missing / "gs"),
        tesseract_path=str(missing / "tesseract"),
        gimp_path=str(missing / "gimp"),
        temp_dir=tmp_path / "scratch",
    )


@pytest.fixture
def runner(tool_config):
    return FakeRunner(tool_config)


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def book(repository):
    return repository.add_book("book:1")


@pytest.fixture
def scratch_dir(tool_config):
    return tool_config.temp_dir
