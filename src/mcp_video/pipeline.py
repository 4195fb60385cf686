# src/mcp_video/pipeline.py
"""Video metadata and frame extraction pipeline.

Each public operation returns either its result model or a VideoError.
Expected failures (bad parameters, missing files, toolchain problems)
never raise.
"""

import logging

from mcp_video.config import VideoConfig
from mcp_video.errors import ToolchainError, classify_error
from mcp_video.extractor import FrameExtractor
from mcp_video.metadata import parse_video_metadata
from mcp_video.models import (
    ErrorCode,
    ExtractFramesResult,
    ExtractionInfo,
    ExtractionRequest,
    FrameAtTimeResult,
    VideoError,
    VideoMetadata,
)
from mcp_video.resolver import VideoResolver
from mcp_video.storage import OutputLifecycle
from mcp_video.toolchain import FFmpeg, FFprobe, Decoder, Prober
from mcp_video.validators import (
    check_video_path,
    validate_extract_frames_options,
    validate_frame_at_time_options,
    validate_path_argument,
)

logger = logging.getLogger(__name__)

# Failures from the toolchain layer and frame file I/O
PIPELINE_ERRORS = (ToolchainError, OSError)


class VideoPipeline:
    """Probe videos and extract frames with ffprobe/ffmpeg."""

    def __init__(
        self,
        config: VideoConfig | None = None,
        prober: Prober | None = None,
        decoder: Decoder | None = None,
    ):
        self.config = config or VideoConfig()
        self.resolver = VideoResolver(base_dir=self.config.base_dir)
        self.prober = prober or FFprobe(self.config.ffprobe_path, timeout=self.config.process_timeout)
        self.decoder = decoder or FFmpeg(self.config.ffmpeg_path, timeout=self.config.process_timeout)
        self.extractor = FrameExtractor(self.decoder)
        self.output = OutputLifecycle(temp_dir=self.config.temp_dir)

    def _fail(self, error: VideoError) -> VideoError:
        logger.error(f"{error.code.value}: {error.message}")
        return error

    async def _probe(self, resolved_path: str) -> VideoMetadata:
        probe = await self.prober.probe(resolved_path)
        return parse_video_metadata(resolved_path, probe)

    async def get_video_info(self, path: str) -> VideoMetadata | VideoError:
        """Get metadata for a video without extracting frames."""
        error = validate_path_argument(path)
        if error:
            return self._fail(error)

        resolved_path, error = check_video_path(self.resolver, path)
        if error:
            return self._fail(error)

        logger.info(f"Probing {resolved_path}")
        try:
            return await self._probe(resolved_path)
        except PIPELINE_ERRORS as e:
            return self._fail(classify_error(e))

    async def extract_frames(
        self,
        path: str,
        interval: float | None = None,
        max_frames: int | None = None,
        quality: float | None = None,
        width: int | None = None,
        start_time: float | None = None,
        end_time: float | None = None,
        output_dir: str | None = None,
    ) -> ExtractFramesResult | VideoError:
        """
        Extract frames every `interval` seconds.

        Args:
            path: Video filename, name without extension, or full path
            interval: Seconds between frames (0.1-60)
            max_frames: Hard cap on frames produced (1-500)
            quality: JPEG quality (1-100)
            width: Output width in pixels (100-3840), height keeps aspect
            start_time: Seek here before extracting (seconds)
            end_time: Stop extracting here (seconds)
            output_dir: Persistent directory for the frames; when it already
                holds frames they are returned without running ffmpeg

        Returns:
            ExtractFramesResult, or VideoError on any failure
        """
        interval = self.config.default_interval if interval is None else interval
        max_frames = self.config.default_max_frames if max_frames is None else max_frames
        quality = self.config.default_quality if quality is None else quality
        width = self.config.default_width if width is None else width
        output_dir = output_dir or None

        error = validate_extract_frames_options(
            path, interval, max_frames, quality, width, start_time, end_time, output_dir
        )
        if error:
            return self._fail(error)

        resolved_path, error = check_video_path(self.resolver, path)
        if error:
            return self._fail(error)

        request = ExtractionRequest(
            video_path=resolved_path,
            interval=interval,
            max_frames=int(max_frames),
            quality=quality,
            width=int(width),
            start_time=start_time,
            end_time=end_time,
            output_dir=output_dir,
        )

        try:
            metadata = await self._probe(resolved_path)

            if start_time is not None and start_time >= metadata.duration_seconds:
                return self._fail(VideoError(
                    code=ErrorCode.INVALID_PATH,
                    message=(
                        f"start_time ({start_time}s) exceeds video duration "
                        f"({metadata.duration_seconds}s)"
                    ),
                    details={
                        "start_time": start_time,
                        "duration_seconds": metadata.duration_seconds,
                    },
                    suggestion=f"Use a start_time less than {metadata.duration_seconds} seconds",
                ))

            async def extract(directory):
                await self.extractor.extract_frames(request, directory)

            def collect(frame_files):
                return self.extractor.collect_frames(frame_files, request), frame_files

            (frames, frame_files), directory, reused = await self.output.produce(
                request.output_dir, extract, collect
            )
        except PIPELINE_ERRORS as e:
            return self._fail(classify_error(e))

        logger.info(
            f"{'Reused' if reused else 'Extracted'} {len(frames)} frames from {metadata.filename}"
        )

        return ExtractFramesResult(
            metadata=metadata,
            frames=frames,
            extraction_info=ExtractionInfo(
                total_frames_extracted=len(frames),
                interval_used=interval,
                quality=quality,
                width=int(width),
            ),
            frame_paths=[str(p) for p in frame_files] if directory is not None else None,
            output_directory=str(directory) if directory is not None else None,
        )

    async def extract_frame_at_time(
        self,
        path: str,
        timestamp: float,
        quality: float | None = None,
        width: int | None = None,
    ) -> FrameAtTimeResult | VideoError:
        """Extract one frame at `timestamp` seconds."""
        quality = self.config.frame_quality if quality is None else quality
        width = self.config.frame_width if width is None else width

        error = validate_frame_at_time_options(path, timestamp, quality, width)
        if error:
            return self._fail(error)

        resolved_path, error = check_video_path(self.resolver, path)
        if error:
            return self._fail(error)

        try:
            metadata = await self._probe(resolved_path)

            if timestamp >= metadata.duration_seconds:
                return self._fail(VideoError(
                    code=ErrorCode.INVALID_PATH,
                    message=(
                        f"timestamp ({timestamp}s) exceeds video duration "
                        f"({metadata.duration_seconds}s)"
                    ),
                    details={
                        "timestamp": timestamp,
                        "duration_seconds": metadata.duration_seconds,
                    },
                    suggestion=f"Use a timestamp less than {metadata.duration_seconds} seconds",
                ))

            with self.output.scratch_directory() as scratch:
                frame = await self.extractor.extract_frame_at_time(
                    resolved_path, timestamp, quality, int(width), scratch
                )
        except PIPELINE_ERRORS as e:
            return self._fail(classify_error(e))

        logger.info(f"Extracted frame at {frame.timestamp} from {metadata.filename}")
        return FrameAtTimeResult(frame=frame, metadata=metadata)
