"""Document discovery for scanning markdown trees."""

import logging
import stat
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .errors import ScanError

logger = logging.getLogger(__name__)


DEFAULT_EXTENSION = ".md"
DEFAULT_EXCLUDE_DIRS: Set[str] = set()


def iter_documents(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
) -> Iterator[Path]:
    """
    Iterate over documents in a directory tree.

    Traversal is depth-first; the entries of each directory are visited in
    sorted order, so a subdirectory's documents are yielded before the
    entries that sort after it.

    Args:
        root: Root directory to scan.
        extension: File name suffix of recognized documents (case-sensitive).
        exclude_dirs: Directory names to skip. Entries starting with ``*``
                      match by suffix (e.g. ``*.egg-info``).
                      If None, uses DEFAULT_EXCLUDE_DIRS.
        max_depth: Maximum depth to descend. None means unlimited.

    Yields:
        Absolute Path objects for matching documents.

    Raises:
        ScanError: If the root or any entry below it cannot be listed or
                   stat'ed. Nothing is skipped silently.
    """
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS

    root = Path(root).absolute()
    if not _is_dir(root):
        raise ScanError(f"not a directory: {root}", root)

    def _walk(current: Path, depth: int) -> Iterator[Path]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            entries = sorted(current.iterdir())
        except OSError as exc:
            raise ScanError(f"cannot list directory {current}: {exc}", current) from exc

        for entry in entries:
            if _is_dir(entry):
                if _is_excluded(entry.name, exclude_dirs):
                    logger.debug("Skipping excluded directory %s", entry)
                    continue
                yield from _walk(entry, depth + 1)
            elif entry.name.endswith(extension):
                yield entry

    yield from _walk(root, 0)


def find_documents(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
) -> List[Path]:
    """Collect every document under root before any of them is processed."""
    return list(iter_documents(root, extension, exclude_dirs, max_depth))


def _is_dir(path: Path) -> bool:
    # Follows symlinks; a dangling link is an error, not a skipped entry.
    try:
        return stat.S_ISDIR(path.stat().st_mode)
    except OSError as exc:
        raise ScanError(f"cannot stat {path}: {exc}", path) from exc


def _is_excluded(name: str, exclude_dirs: Set[str]) -> bool:
    if name in exclude_dirs:
        return True
    return any(name.endswith(pat.lstrip("*")) for pat in exclude_dirs if pat.startswith("*"))
