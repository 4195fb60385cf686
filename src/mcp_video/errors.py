# src/mcp_video/errors.py
"""Toolchain exceptions and their mapping onto classified errors."""

from mcp_video.models import ErrorCode, VideoError

INSTALL_HINT = "Install ffmpeg: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)"

# Diagnostic fragments that mean the executable itself could not be started
_MISSING_MARKERS = ("not found", "no such file")


class ToolchainError(Exception):
    """An external ffmpeg/ffprobe invocation failed."""

    def __init__(self, tool: str, message: str, stderr: str = ""):
        super().__init__(message)
        self.tool = tool
        self.stderr = stderr


class ToolchainNotFoundError(ToolchainError):
    """The executable is not installed or not on PATH."""
    pass


class ToolchainTimeoutError(ToolchainError):
    """The executable ran past the configured deadline and was killed."""
    pass


class ProbeParseError(ToolchainError):
    """ffprobe ran but its report could not be parsed."""
    pass


def classify_error(error: BaseException) -> VideoError:
    """Map a failure raised during probing or extraction to a VideoError."""
    message = str(error)

    if isinstance(error, ToolchainTimeoutError):
        return VideoError(
            code=ErrorCode.TIMEOUT,
            message=message,
            details={"tool": error.tool},
            suggestion="Try a shorter time window or raise VIDEO_PROCESS_TIMEOUT",
        )

    lowered = message.lower()
    if isinstance(error, ToolchainNotFoundError) or (
        isinstance(error, ToolchainError)
        and any(marker in lowered for marker in _MISSING_MARKERS)
    ):
        return VideoError(
            code=ErrorCode.TOOLCHAIN_NOT_FOUND,
            message=f"{error.tool} is not installed or not in PATH",
            details={"original_error": message},
            suggestion=INSTALL_HINT,
        )

    if isinstance(error, ToolchainError):
        return VideoError(
            code=ErrorCode.TOOLCHAIN_ERROR,
            message=f"FFmpeg error: {message}",
            details={"original_error": message},
        )

    if isinstance(error, OSError):
        # Frame file I/O, not the toolchain
        return VideoError(
            code=ErrorCode.UNKNOWN_ERROR,
            message=f"File system error: {message}",
            details={"original_error": message},
        )

    return VideoError(
        code=ErrorCode.UNKNOWN_ERROR,
        message=f"Unexpected error: {message}",
    )
