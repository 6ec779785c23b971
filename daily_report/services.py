"""
Side-effecting collaborators of the pipeline.

Everything that touches the disk, the terminal or the age cipher goes through a
Services bundle so tests can swap in in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

import pyrage
from pyrage import passphrase as age_passphrase

from .errors import DecryptionError


class FileSystem(Protocol):
    def read_bytes(self, path: Path) -> bytes: ...

    def write_bytes(self, path: Path, data: bytes) -> None: ...

    def write_text(self, path: Path, text: str) -> None: ...

    def exists(self, path: Path) -> bool: ...

    def list_files(self, directory: Path) -> List[Path]: ...


class Crypto(Protocol):
    def encrypt(self, data: bytes, passphrase: str) -> bytes: ...

    def decrypt(self, data: bytes, passphrase: str) -> bytes: ...


class UserInteraction(Protocol):
    def confirm(self, prompt: str) -> bool: ...


class LocalFileSystem:
    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        Path(path).write_bytes(data)

    def write_text(self, path: Path, text: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def list_files(self, directory: Path) -> List[Path]:
        return sorted(p for p in Path(directory).iterdir() if p.is_file())


class AgeCrypto:
    """Passphrase (scrypt) age encryption."""

    def encrypt(self, data: bytes, passphrase: str) -> bytes:
        return age_passphrase.encrypt(data, passphrase)

    def decrypt(self, data: bytes, passphrase: str) -> bytes:
        try:
            return age_passphrase.decrypt(data, passphrase)
        except pyrage.DecryptError as exc:
            raise DecryptionError(f"Could not decrypt exclusions: {exc}") from exc


class ConsoleInteraction:
    def confirm(self, prompt: str) -> bool:
        answer = input(f"{prompt} [y/N] ")
        return answer.strip().lower() in ("y", "yes")


@dataclass
class Services:
    file_system: FileSystem
    crypto: Crypto
    user_interaction: UserInteraction


def create_default_services() -> Services:
    return Services(
        file_system=LocalFileSystem(),
        crypto=AgeCrypto(),
        user_interaction=ConsoleInteraction(),
    )
