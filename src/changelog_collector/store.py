"""Fragment store reader.

Lists the YAML fragment files in a changelog directory and reads them.
Subdirectories and files with other extensions are skipped. Files are
returned sorted by name so that every run sees the same order.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from changelog_collector.errors import StoreUnavailable
from changelog_collector.logging_config import get_logger

logger = get_logger(__name__)

FRAGMENT_SUFFIXES = (".yaml", ".yml")


def is_fragment_name(filename: str) -> bool:
    return filename.endswith(FRAGMENT_SUFFIXES)


def list_fragment_files(directory: str | Path) -> list[Path]:
    """Return the fragment files in a directory, in listing order.

    Args:
        directory: The changelog fragment directory

    Returns:
        Paths of regular files ending in .yaml or .yml, sorted by name

    Raises:
        StoreUnavailable: If the directory cannot be listed
    """
    path = Path(directory)
    try:
        children = sorted(path.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise StoreUnavailable(f"cannot list fragment directory {path}: {exc}") from exc

    files = [
        child for child in children
        if is_fragment_name(child.name) and child.is_file()
    ]
    logger.info("fragments_discovered", path=str(path), count=len(files))
    return files


def read_fragments(directory: str | Path) -> Iterator[tuple[str, bytes]]:
    """Yield (filename, raw bytes) for every fragment file in a directory.

    Decoding is left to the parser, so a file that is not valid UTF-8 is
    reported as a malformed fragment rather than an unreadable store.

    Raises:
        StoreUnavailable: If the directory or one of its files cannot be read
    """
    for file in list_fragment_files(directory):
        try:
            content = file.read_bytes()
        except OSError as exc:
            raise StoreUnavailable(f"cannot read fragment {file}: {exc}") from exc
        yield file.name, content
