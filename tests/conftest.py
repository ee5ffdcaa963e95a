"""
Pytest configuration and shared fixtures.
"""

from typing import Optional

import pytest

from encoding_checker.dependencies import get_settings, reset_singletons


class FakeCharsetDetector:
    """
    Deterministic stand-in for the chardet backend.

    UTF-16 little endian BOM -> "UTF-16", pure 7-bit bytes -> "ASCII",
    other bytes -> "windows-1252", no bytes at all -> unknown (None).
    """

    def __init__(self):
        self.data = bytearray()
        self.feed_calls = 0
        self.finished = False

    def feed(self, chunk: bytes) -> None:
        assert not self.finished
        self.feed_calls += 1
        self.data.extend(chunk)

    def finish(self) -> Optional[str]:
        assert not self.finished
        self.finished = True
        if not self.data:
            return None
        if self.data.startswith(b"\xff\xfe"):
            return "UTF-16"
        if all(byte < 0x80 for byte in self.data):
            return "ASCII"
        return "windows-1252"


@pytest.fixture
def fake_detector_factory():
    """Factory that records every detector it creates."""
    created = []

    def factory():
        detector = FakeCharsetDetector()
        created.append(detector)
        return detector

    factory.created = created
    return factory


@pytest.fixture
def sample_tree(tmp_path):
    """
    root/
      a.txt       ASCII
      b.txt       UTF-16 with BOM
      notes.md    ASCII
      sub/
        c.txt     windows-1252
        deeper/
          d.TXT   ASCII
    """
    (tmp_path / "a.txt").write_bytes(b"hello world\n")
    (tmp_path / "b.txt").write_bytes(b"\xff\xfeh\x00i\x00")
    (tmp_path / "notes.md").write_bytes(b"# notes\n")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.txt").write_bytes(b"caf\xe9\n")
    deeper = sub / "deeper"
    deeper.mkdir()
    (deeper / "d.TXT").write_bytes(b"upper case extension\n")
    return tmp_path


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons and cached settings before every test."""
    reset_singletons()
    get_settings.cache_clear()
    yield
    reset_singletons()
    get_settings.cache_clear()
