from __future__ import annotations

from typing import BinaryIO, Iterable, Iterator

from .errors import ConfigError


def iter_domains(lines: Iterable[str]) -> Iterator[str]:
    """One domain per line; blank lines and '#' comments are skipped."""
    for line in lines:
        s = line.split("#", 1)[0].strip()
        if s:
            yield s


def read_domains(path: str) -> Iterator[str]:
    """
    Lazily stream domains from a file.

    The file is opened up-front so a missing/unreadable file fails here, as a
    ConfigError, before any work starts. A line that is not valid UTF-8 fails
    as a ConfigError when the stream reaches it.
    """
    try:
        fh = open(path, "rb")
    except OSError as e:
        raise ConfigError(f"Cannot read domain list {path!r}: {e.strerror or e}") from e
    return iter_domains(_decoded_lines(fh, path))


def _decoded_lines(fh: BinaryIO, path: str) -> Iterator[str]:
    # Decoded line by line so lines before a bad byte are still delivered.
    with fh:
        for lineno, raw in enumerate(fh, 1):
            try:
                yield raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ConfigError(f"Cannot read domain list {path!r}: line {lineno} is not valid UTF-8 ({e.reason})") from e
