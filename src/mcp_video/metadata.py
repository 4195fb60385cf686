# src/mcp_video/metadata.py
"""Normalize ffprobe reports into VideoMetadata."""

import math
import os
from typing import Any

from mcp_video.models import VideoMetadata, format_duration

BYTE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

__all__ = [
    "format_bytes",
    "format_duration",
    "parse_frame_rate",
    "parse_video_metadata",
]


def format_bytes(num_bytes: float, decimals: int = 2) -> str:
    """Format a byte count with 1024-based units, e.g. 1536 -> "1.5 KB"."""
    if num_bytes == 0:
        return "0 Bytes"

    k = 1024
    decimals = max(decimals, 0)
    exponent = int(math.floor(math.log(abs(num_bytes)) / math.log(k)))
    exponent = min(max(exponent, 0), len(BYTE_UNITS) - 1)

    value = f"{num_bytes / k ** exponent:.{decimals}f}"
    if "." in value:
        value = value.rstrip("0").rstrip(".")
    return f"{value} {BYTE_UNITS[exponent]}"


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def _to_int(value: Any, default: int = 0) -> int:
    return int(_to_float(value, default))


def parse_frame_rate(rate: str | None) -> float:
    """Parse "30000/1001" or "29.97" into fps rounded to two places."""
    if not rate:
        return 0.0

    numerator, _, denominator = str(rate).partition("/")
    if denominator:
        den = _to_float(denominator)
        fps = _to_float(numerator) / den if den else 0.0
    else:
        fps = _to_float(numerator)

    return round(fps, 2)


def _first_stream(streams: list[dict], codec_type: str) -> dict | None:
    for stream in streams:
        if stream.get("codec_type") == codec_type:
            return stream
    return None


def parse_video_metadata(file_path: str, probe: dict[str, Any]) -> VideoMetadata:
    """Build VideoMetadata from an ffprobe JSON document.

    Missing video or audio streams are not errors; they produce "unknown"
    and None fields respectively.
    """
    streams = probe.get("streams") or []
    video_stream = _first_stream(streams, "video")
    audio_stream = _first_stream(streams, "audio")
    container = probe.get("format") or {}

    duration_seconds = max(_to_float(container.get("duration")), 0.0)
    file_size_bytes = _to_int(container.get("size"))

    width = height = 0
    resolution = "unknown"
    fps = 0.0
    codec = "unknown"
    if video_stream is not None:
        width = _to_int(video_stream.get("width"))
        height = _to_int(video_stream.get("height"))
        if width and height:
            resolution = f"{width}x{height}"
        fps = parse_frame_rate(video_stream.get("r_frame_rate"))
        codec = video_stream.get("codec_name") or "unknown"

    audio_codec = None
    if audio_stream is not None:
        audio_codec = audio_stream.get("codec_name") or "unknown"

    raw_bit_rate = container.get("bit_rate")
    bitrate = f"{format_bytes(_to_int(raw_bit_rate))}/s" if raw_bit_rate else "unknown"

    tags = container.get("tags") or {}

    return VideoMetadata(
        filename=os.path.basename(file_path),
        filepath=file_path,
        duration_seconds=duration_seconds,
        resolution=resolution,
        width=width,
        height=height,
        fps=fps,
        codec=codec,
        audio_codec=audio_codec,
        file_size=format_bytes(file_size_bytes),
        file_size_bytes=file_size_bytes,
        bitrate=bitrate,
        creation_time=tags.get("creation_time"),
    )
