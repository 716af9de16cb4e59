"""File handler module: folder validation, encoding-aware read/write.

Provides the local file I/O used by the tree builder and the pull path.
All functions are synchronous; async callers go through run_sync().
"""

import re
from pathlib import Path

from charset_normalizer import from_bytes

# =============================================================================
# Path Validation
# =============================================================================


def validate_folder_path(path_str: str) -> Path:
    """Validate and resolve a folder path to sync.

    Args:
        path_str: Absolute path string to an existing directory.

    Returns:
        Resolved Path object pointing to the folder.

    Raises:
        ValueError: If path is relative, doesn't exist, or is not a directory.
    """
    path = Path(path_str).expanduser()
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute: {path_str}")
    resolved = path.resolve()
    if not resolved.exists():
        raise ValueError(f"Folder not found: {path_str}")
    if not resolved.is_dir():
        raise ValueError(f"Path is not a folder: {path_str}")
    return resolved


_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def sanitize_filename(title: str) -> str:
    """Turn a section title into a safe file stem.

    Path separators and characters rejected by common file systems are
    replaced with ``-``; leading dots are removed so the result is never
    hidden.  Returns an empty string when nothing usable remains.
    """
    name = _UNSAFE_CHARS.sub("-", title).strip()
    return name.lstrip(".").strip()


# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def write_file(path: Path, content: str, encoding: str = "utf-8") -> int:
    """Write content to a file, creating parent directories as needed.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    return len(encoded)
