"""Digest helpers: handler hashes and archive SHA-256 sidecars."""

from __future__ import annotations

import hashlib
from pathlib import Path

HANDLER_HASH_LENGTH = 16


def sha256(path: Path) -> str:
    """Return the hex SHA-256 of the file at *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def text_digest(text: str, length: int = HANDLER_HASH_LENGTH) -> str:
    """Return a truncated hex SHA-256 of *text* (UTF-8)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def write_sidecar(path: Path) -> str:
    """Write `<path>.sha256` next to *path* and return the digest."""
    digest = sha256(path)
    Path(f"{path}.sha256").write_text(digest, encoding="utf-8")
    return digest


def verify_sha256(path: Path, expected: str) -> None:
    """Raise ValueError if *path*'s digest does not match *expected*.

    *expected* may be plain hex or `sha256:<hex>`.
    """
    exp = expected.strip().removeprefix("sha256:").lower()
    got = sha256(path)
    if got != exp:
        raise ValueError(f"SHA-256 mismatch for {path}: got {got}, expected {exp}")
