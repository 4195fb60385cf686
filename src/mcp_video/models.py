"""Pydantic models for video metadata, frames and tool responses."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, computed_field


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS, or HH:MM:SS from one hour up.

    Fractional seconds are truncated.
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


class ErrorCode(str, Enum):
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    INVALID_PATH = "INVALID_PATH"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    TOOLCHAIN_NOT_FOUND = "TOOLCHAIN_NOT_FOUND"
    TOOLCHAIN_ERROR = "TOOLCHAIN_ERROR"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class VideoError(BaseModel):
    """A classified failure returned in place of a result."""
    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None
    suggestion: str | None = None


class VideoMetadata(BaseModel):
    """Normalized metadata for a probed video file."""
    model_config = ConfigDict(frozen=True)

    filename: str
    filepath: str
    duration_seconds: float
    resolution: str
    width: int
    height: int
    fps: float
    codec: str
    audio_codec: str | None = None
    file_size: str
    file_size_bytes: int
    bitrate: str
    creation_time: str | None = None

    @computed_field
    @property
    def duration(self) -> str:
        return format_duration(self.duration_seconds)

    @computed_field
    @property
    def has_audio(self) -> bool:
        return self.audio_codec is not None


class ExtractedFrame(BaseModel):
    """A single extracted frame, image payload base64 encoded."""
    index: int
    timestamp: str
    timestamp_seconds: float
    image: str
    mime_type: Literal["image/jpeg", "image/png"] = "image/jpeg"


class ExtractionRequest(BaseModel):
    """Validated parameters for one interval extraction."""
    model_config = ConfigDict(frozen=True)

    video_path: str
    interval: int | float
    max_frames: int
    quality: int | float
    width: int
    start_time: float | None = None
    end_time: float | None = None
    output_dir: str | None = None


class ExtractionInfo(BaseModel):
    total_frames_extracted: int
    interval_used: int | float
    quality: int | float
    width: int


class ExtractFramesResult(BaseModel):
    """Successful result of an interval extraction."""
    metadata: VideoMetadata
    frames: list[ExtractedFrame] = []
    extraction_info: ExtractionInfo
    frame_paths: list[str] | None = None
    output_directory: str | None = None


class FrameAtTimeResult(BaseModel):
    frame: ExtractedFrame
    metadata: VideoMetadata
