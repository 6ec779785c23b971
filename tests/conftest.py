"""In-memory stand-ins for the pipeline services."""

from __future__ import annotations

from pathlib import Path

import pytest

from daily_report.errors import DecryptionError
from daily_report.services import Services


class MemoryFileSystem:
    def __init__(self, files=None):
        self.files = {Path(path): data for path, data in (files or {}).items()}

    def read_bytes(self, path):
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory", str(path)) from None

    def write_bytes(self, path, data):
        self.files[Path(path)] = data

    def write_text(self, path, text):
        self.files[Path(path)] = text.encode("utf-8")

    def exists(self, path):
        return Path(path) in self.files

    def list_files(self, directory):
        directory = Path(directory)
        return sorted(path for path in self.files if path.parent == directory)


class ReversingCrypto:
    """Reversible toy cipher; the passphrase is checked, not used."""

    def __init__(self, passphrase="test-passphrase"):
        self.passphrase = passphrase

    def encrypt(self, data, passphrase):
        return b"ENC:" + data[::-1]

    def decrypt(self, data, passphrase):
        if passphrase != self.passphrase or not data.startswith(b"ENC:"):
            raise DecryptionError("Could not decrypt exclusions: bad passphrase")
        return data[4:][::-1]


class ScriptedInteraction:
    def __init__(self, answer=True):
        self.answer = answer
        self.prompts = []

    def confirm(self, prompt):
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def make_services():
    def factory(files=None, answer=True):
        return Services(
            file_system=MemoryFileSystem(files),
            crypto=ReversingCrypto(),
            user_interaction=ScriptedInteraction(answer),
        )

    return factory


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Point settings at fixed relative paths, isolated from any local .env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PASSPHRASE", "test-passphrase")
    monkeypatch.setenv("DATA_DIR", "data")
    monkeypatch.setenv("OUTPUT_DIR", "reports")
    monkeypatch.setenv("EXCLUSIONS_FILE", "exclusions.json5")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return monkeypatch
