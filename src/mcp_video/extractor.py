# src/mcp_video/extractor.py
"""Frame extraction at fixed intervals using ffmpeg."""

import base64
import logging
import math
from decimal import Decimal
from pathlib import Path

from mcp_video.errors import ToolchainError
from mcp_video.models import ExtractedFrame, ExtractionRequest, format_duration
from mcp_video.storage import FRAME_PATTERN
from mcp_video.toolchain import Decoder

logger = logging.getLogger(__name__)

MIME_TYPE = "image/jpeg"


def native_quality(quality: float) -> int:
    """
    Map 1-100 JPEG quality onto ffmpeg's -q:v scale.

    Lower -q:v means better quality: 100 -> 2, 75 -> 10, 1 -> 33.
    Halves round up.
    """
    return int(math.floor((100 - quality) / 3.2 + 2 + 0.5))


def format_number(value: float) -> str:
    """Render a number for the command line: 2 -> "2", 0.5 -> "0.5"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    # Fixed-point, never exponent notation
    return format(Decimal(repr(value)), "f")


def scale_filter(width: int) -> str:
    # -1 keeps the source aspect ratio
    return f"scale={int(width)}:-1"


def read_image_base64(path: Path) -> str:
    return base64.b64encode(path.read_bytes()).decode("ascii")


class FrameExtractor:
    """Build ffmpeg invocations and turn their output into frames."""

    def __init__(self, decoder: Decoder):
        self.decoder = decoder

    def build_interval_args(self, request: ExtractionRequest, output_dir: Path) -> list[str]:
        """
        Build ffmpeg arguments for interval extraction.

        A start time becomes an input-side seek. With both a start and an
        end time the output is limited to their difference; with only an
        end time the limit is the end time itself, measured from the start
        of the file.
        """
        args: list[str] = []

        # -ss before -i: fast, keyframe-approximate seek
        if request.start_time is not None and request.start_time > 0:
            args += ["-ss", format_number(request.start_time)]

        args += ["-i", request.video_path]

        if request.end_time is not None and request.start_time is not None:
            args += ["-t", format_number(request.end_time - request.start_time)]
        elif request.end_time is not None:
            args += ["-t", format_number(request.end_time)]

        filters = [f"fps=1/{format_number(request.interval)}", scale_filter(request.width)]
        args += ["-vf", ",".join(filters)]
        args += ["-q:v", str(native_quality(request.quality))]
        args += ["-frames:v", str(int(request.max_frames))]
        args.append(str(output_dir / FRAME_PATTERN))
        return args

    async def extract_frames(self, request: ExtractionRequest, output_dir: Path) -> None:
        """Run ffmpeg, writing numbered JPEG frames into output_dir."""
        args = self.build_interval_args(request, output_dir)
        logger.info(f"Extracting frames from {request.video_path} to {output_dir}")
        await self.decoder.run(args)

    def collect_frames(self, frame_files: list[Path], request: ExtractionRequest) -> list[ExtractedFrame]:
        """
        Read frame files into ExtractedFrame models.

        Timestamps are computed as start_time + index * interval rather
        than read from the decoder, so they are only as exact as the
        requested interval.
        """
        start = request.start_time or 0
        frames = []
        for index, frame_path in enumerate(frame_files):
            timestamp = start + index * request.interval
            frames.append(ExtractedFrame(
                index=index,
                timestamp=format_duration(timestamp),
                timestamp_seconds=timestamp,
                image=read_image_base64(frame_path),
                mime_type=MIME_TYPE,
            ))
        return frames

    def build_single_frame_args(
        self,
        video_path: str,
        timestamp: float,
        quality: float,
        width: int,
        output_path: Path,
    ) -> list[str]:
        return [
            "-ss", format_number(timestamp),
            "-i", video_path,
            "-frames:v", "1",
            "-vf", scale_filter(width),
            "-q:v", str(native_quality(quality)),
            str(output_path),
        ]

    async def extract_frame_at_time(
        self,
        video_path: str,
        timestamp: float,
        quality: float,
        width: int,
        output_dir: Path,
    ) -> ExtractedFrame:
        """Extract the single frame nearest to timestamp."""
        output_path = output_dir / "frame.jpg"
        args = self.build_single_frame_args(video_path, timestamp, quality, width, output_path)
        await self.decoder.run(args)

        if not output_path.is_file():
            raise ToolchainError("ffmpeg", "Failed to extract frame - output file not created")

        return ExtractedFrame(
            index=0,
            timestamp=format_duration(timestamp),
            timestamp_seconds=timestamp,
            image=read_image_base64(output_path),
            mime_type=MIME_TYPE,
        )
