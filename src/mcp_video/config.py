# src/mcp_video/config.py
"""Configuration loaded from the environment."""

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict

# Environment variable -> VideoConfig field
ENV_VARS = {
    "VIDEO_BASE_DIR": "base_dir",
    "FFMPEG_PATH": "ffmpeg_path",
    "FFPROBE_PATH": "ffprobe_path",
    "VIDEO_TEMP_DIR": "temp_dir",
    "VIDEO_FRAMES_DIR": "frames_dir",
    "VIDEO_PROCESS_TIMEOUT": "process_timeout",
    "VIDEO_DEFAULT_INTERVAL": "default_interval",
    "VIDEO_DEFAULT_MAX_FRAMES": "default_max_frames",
    "VIDEO_DEFAULT_QUALITY": "default_quality",
    "VIDEO_DEFAULT_WIDTH": "default_width",
    "VIDEO_FRAME_QUALITY": "frame_quality",
    "VIDEO_FRAME_WIDTH": "frame_width",
    "VIDEO_LOG_LEVEL": "log_level",
}


class VideoConfig(BaseModel):
    """Settings for one pipeline instance.

    Passed explicitly to the pipeline so that several configurations can
    coexist in the same process.
    """
    model_config = ConfigDict(frozen=True)

    base_dir: str | None = None
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    temp_dir: str | None = None
    frames_dir: str | None = None
    process_timeout: float | None = None

    default_interval: int | float = 2
    default_max_frames: int = 30
    default_quality: int | float = 75
    default_width: int = 800
    frame_quality: int | float = 85
    frame_width: int = 1280

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "VideoConfig":
        """Build a config from environment variables, ignoring empty ones."""
        environ = os.environ if environ is None else environ
        values = {}
        for var, field in ENV_VARS.items():
            value = environ.get(var, "").strip()
            if value:
                values[field] = value
        return cls(**values)
