"""Shared test fixtures."""

import pytest

KB = 1024
MB = 1024 * KB


@pytest.fixture
def make_file(tmp_path):
    """Factory writing bytes to a file under tmp_path."""
    def _make(name: str, content: bytes):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def patterned_bytes():
    """Factory for deterministic, non-repeating-looking content."""
    def _make(size: int) -> bytes:
        return bytes((i * 31 + (i >> 8) * 7) & 0xFF for i in range(size))
    return _make


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep ConfigLoader away from the real user/system config and env."""
    import os
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "platformdirs.user_config_dir",
        lambda *args, **kwargs: str(tmp_path / "user-config"),
    )
    for key in list(os.environ):
        if key.startswith("FILEPRINT_"):
            monkeypatch.delenv(key)
    return tmp_path


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way it was after setup_logging() runs."""
    import logging
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
