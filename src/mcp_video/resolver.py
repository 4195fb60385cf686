# src/mcp_video/resolver.py
"""Video path resolution against the home and base directories."""

import os
from pathlib import Path

# Order matters: an extension-less name resolves to the first match
SUPPORTED_VIDEO_FORMATS = (
    ".mp4",
    ".webm",
    ".mov",
    ".avi",
    ".mkv",
    ".m4v",
    ".flv",
    ".wmv",
    ".gif",
    ".mpeg",
    ".mpg",
    ".3gp",
)


def is_supported_format(file_path: str) -> bool:
    """Check whether the file extension is an allowed video container."""
    return get_file_extension(file_path) in SUPPORTED_VIDEO_FORMATS


def get_file_extension(file_path: str) -> str:
    return os.path.splitext(file_path)[1].lower()


def file_exists(file_path: str) -> bool:
    """True only for an existing regular file."""
    try:
        return os.path.isfile(file_path)
    except (OSError, ValueError):
        return False


class VideoResolver:
    """Turns user-supplied video names into existing file paths.

    Resolution never searches subdirectories.
    """

    def __init__(self, base_dir: str | None = None, home_dir: str | None = None):
        self.base_dir = Path(base_dir) if base_dir else None
        self.home_dir = Path(home_dir) if home_dir else Path.home()

    def resolve(self, input_path: str) -> str | None:
        """
        Resolve a video path, or return None when nothing matches.

        Order:
            1. Absolute path as given
            2. "~" expanded against the home directory
            3. Relative to the base directory, when configured
            4. Relative to the current working directory

        At every stage an extension-less candidate is also tried with
        each supported extension appended.
        """
        if os.path.isabs(input_path):
            return self._find_with_extensions(input_path)

        if input_path.startswith("~"):
            remainder = input_path[1:].lstrip("/\\")
            return self._find_with_extensions(str(self.home_dir / remainder))

        if self.base_dir is not None:
            candidate = os.path.abspath(self.base_dir / input_path)
            return self._find_with_extensions(candidate)

        return self._find_with_extensions(os.path.abspath(input_path))

    def _find_with_extensions(self, candidate: str) -> str | None:
        if file_exists(candidate):
            return candidate

        if not get_file_extension(candidate):
            for extension in SUPPORTED_VIDEO_FORMATS:
                with_extension = candidate + extension
                if file_exists(with_extension):
                    return with_extension

        return None

    def list_available(self) -> list[str]:
        """List supported video files directly inside the base directory."""
        if self.base_dir is None or not self.base_dir.is_dir():
            return []

        try:
            names = os.listdir(self.base_dir)
        except OSError:
            return []

        return sorted(
            name for name in names
            if is_supported_format(name) and (self.base_dir / name).is_file()
        )
