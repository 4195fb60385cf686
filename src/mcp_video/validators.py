# src/mcp_video/validators.py
"""Parameter validation, run before any subprocess is spawned.

Every check returns the first VideoError found, or None.
"""

import math
import os
from numbers import Real

from mcp_video.models import ErrorCode, VideoError
from mcp_video.resolver import (
    SUPPORTED_VIDEO_FORMATS,
    VideoResolver,
    get_file_extension,
    is_supported_format,
)

INTERVAL_RANGE = (0.1, 60)
MAX_FRAMES_RANGE = (1, 500)
QUALITY_RANGE = (1, 100)
WIDTH_RANGE = (100, 3840)


def _is_number(value) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_range(value, bounds: tuple, field_name: str, integer: bool = False) -> VideoError | None:
    """Check that value is a number within the closed interval bounds."""
    low, high = bounds

    if not _is_number(value):
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"{field_name} must be a number",
            details={"field": field_name, "value": repr(value), "min": low, "max": high},
            suggestion=f"Provide a number between {low} and {high}",
        )

    if integer and value != int(value):
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"{field_name} must be a whole number",
            details={"field": field_name, "value": value, "min": low, "max": high},
            suggestion=f"Provide a whole number between {low} and {high}",
        )

    if value < low or value > high:
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"{field_name} must be between {low} and {high}",
            details={"field": field_name, "value": value, "min": low, "max": high},
            suggestion=f"Adjust {field_name} to be within the valid range",
        )

    return None


def validate_path_argument(path) -> VideoError | None:
    """Check the raw path argument without touching the filesystem."""
    if not isinstance(path, str) or not path.strip():
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message="Video path is required",
            details={"field": "path"},
            suggestion="Provide a valid file path to a video file",
        )
    if "\x00" in path:
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message="Video path contains a null byte",
            details={"field": "path"},
            suggestion="Provide a valid file path to a video file",
        )
    return None


def validate_output_dir(output_dir) -> VideoError | None:
    """Reject an output directory that exists but is not a directory."""
    if not isinstance(output_dir, str) or "\x00" in output_dir:
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message="output_dir must be a directory path",
            details={"field": "output_dir", "value": repr(output_dir)},
            suggestion="Provide a directory path for the extracted frames",
        )
    expanded = os.path.expanduser(output_dir)
    if os.path.exists(expanded) and not os.path.isdir(expanded):
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"output_dir is not a directory: {output_dir}",
            details={"field": "output_dir", "value": output_dir},
            suggestion="Point output_dir at a directory, or at a path that does not exist yet",
        )
    return None


def validate_time(value, field_name: str) -> VideoError | None:
    if not _is_number(value):
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"{field_name} must be a number",
            details={"field": field_name, "value": repr(value)},
            suggestion=f"Provide {field_name} in seconds",
        )
    if value < 0:
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message=f"{field_name} cannot be negative",
            details={"field": field_name, "value": value, "min": 0},
            suggestion=f"Provide a non-negative {field_name} in seconds",
        )
    return None


def validate_extract_frames_options(
    path,
    interval,
    max_frames,
    quality,
    width,
    start_time=None,
    end_time=None,
    output_dir=None,
) -> VideoError | None:
    """Validate extract_frames arguments, fail-fast in declaration order."""
    error = (
        validate_path_argument(path)
        or validate_range(interval, INTERVAL_RANGE, "interval")
        or validate_range(max_frames, MAX_FRAMES_RANGE, "max_frames", integer=True)
        or validate_range(quality, QUALITY_RANGE, "quality")
        or validate_range(width, WIDTH_RANGE, "width", integer=True)
    )
    if error:
        return error

    if start_time is not None:
        error = validate_time(start_time, "start_time")
        if error:
            return error

    if end_time is not None:
        error = validate_time(end_time, "end_time")
        if error:
            return error

    if start_time is not None and end_time is not None and end_time <= start_time:
        return VideoError(
            code=ErrorCode.INVALID_PATH,
            message="end_time must be greater than start_time",
            details={"start_time": start_time, "end_time": end_time},
            suggestion="Ensure end_time is after start_time",
        )

    if output_dir is not None:
        return validate_output_dir(output_dir)

    return None


def validate_frame_at_time_options(path, timestamp, quality, width) -> VideoError | None:
    """Validate extract_frame_at_time arguments."""
    return (
        validate_path_argument(path)
        or validate_time(timestamp, "timestamp")
        or validate_range(quality, QUALITY_RANGE, "quality")
        or validate_range(width, WIDTH_RANGE, "width", integer=True)
    )


def check_video_path(resolver: VideoResolver, path: str) -> tuple[str | None, VideoError | None]:
    """
    Resolve a video path and confirm it is a supported container.

    Returns:
        (resolved_path, None) on success, (None, error) otherwise
    """
    resolved = resolver.resolve(path)

    if resolved is None:
        suggestion = "Check that the file path is correct and the file exists."
        if resolver.base_dir is not None:
            available = resolver.list_available()
            suggestion = f"Video not found in {resolver.base_dir}."
            if available:
                suggestion += f" Available videos: {', '.join(available)}"
            else:
                suggestion += " No videos found in this directory."
        return None, VideoError(
            code=ErrorCode.FILE_NOT_FOUND,
            message=f"Video not found: {path}",
            details={"path": path},
            suggestion=suggestion,
        )

    if not is_supported_format(resolved):
        extension = get_file_extension(resolved)
        return None, VideoError(
            code=ErrorCode.UNSUPPORTED_FORMAT,
            message=f"Unsupported video format: {extension or '(none)'}",
            details={"extension": extension},
            suggestion=f"Supported formats: {', '.join(SUPPORTED_VIDEO_FORMATS)}",
        )

    return resolved, None
