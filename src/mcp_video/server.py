# src/mcp_video/server.py
"""MCP server for video metadata and frame extraction."""

import asyncio
import logging
import sys
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from mcp.types import ImageContent, TextContent

from mcp_video.config import VideoConfig
from mcp_video.models import VideoError
from mcp_video.pipeline import VideoPipeline

logger = logging.getLogger(__name__)

# Configuration from environment or defaults
config = VideoConfig.from_env()

# Initialize MCP server
mcp = FastMCP("mcp-video")

# Initialize components
pipeline = VideoPipeline(config)


def error_content(error: VideoError) -> list[TextContent]:
    text = f"Error: {error.message}"
    if error.suggestion:
        text += f"\n{error.suggestion}"
    return [TextContent(type="text", text=text)]


def default_output_dir(path: str) -> str | None:
    """Per-video frames directory under VIDEO_FRAMES_DIR, if configured."""
    if not config.frames_dir:
        return None
    resolved = pipeline.resolver.resolve(path) if isinstance(path, str) and path else None
    if resolved is None:
        return None
    return str(Path(config.frames_dir) / Path(resolved).stem)


@mcp.tool()
async def get_video_info(path: str) -> dict:
    """
    Get metadata about a video file including duration, resolution, codec,
    file size, and more. Does not extract frames.

    Args:
        path: The video filename (e.g. "demo.mp4" or "demo") or full path.
              A bare name is looked up in VIDEO_BASE_DIR.

    Returns:
        Dictionary with status and either metadata or error
    """
    try:
        result = await pipeline.get_video_info(path)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return {"status": "error", "error": {"code": "UNKNOWN_ERROR", "message": f"Unexpected error: {str(e)}"}}

    if isinstance(result, VideoError):
        return {"status": "error", "error": result.model_dump(mode="json")}
    return {"status": "success", "metadata": result.model_dump(mode="json")}


@mcp.tool()
async def extract_frames(
    path: str,
    interval: float | None = None,
    max_frames: int | None = None,
    quality: int | None = None,
    width: int | None = None,
    start_time: float | None = None,
    end_time: float | None = None,
    output_dir: str | None = None,
):
    """
    Extract frames from a video file at fixed intervals. Returns video
    metadata followed by the frames as JPEG images.

    Args:
        path: The video filename (e.g. "demo.mp4" or "demo") or full path.
              A bare name is looked up in VIDEO_BASE_DIR.
        interval: Seconds between frame captures (0.1-60). Default 2, or VIDEO_DEFAULT_INTERVAL
        max_frames: Maximum number of frames to extract (1-500). Default 30, or VIDEO_DEFAULT_MAX_FRAMES
        quality: JPEG quality 1-100. Default 75, or VIDEO_DEFAULT_QUALITY
        width: Frame width in pixels (100-3840), height keeps aspect ratio. Default 800, or VIDEO_DEFAULT_WIDTH
        start_time: Start extraction from this time in seconds
        end_time: End extraction at this time in seconds
        output_dir: Keep frames in this directory; frames already there are reused
    """
    try:
        result = await pipeline.extract_frames(
            path=path,
            interval=interval,
            max_frames=max_frames,
            quality=quality,
            width=width,
            start_time=start_time,
            end_time=end_time,
            output_dir=output_dir or default_output_dir(path),
        )
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return [TextContent(type="text", text=f"Unexpected error: {str(e)}")]

    if isinstance(result, VideoError):
        return error_content(result)

    metadata = result.metadata
    summary = (
        f"Video: {metadata.filename}\n"
        f"Duration: {metadata.duration}\n"
        f"Resolution: {metadata.resolution}\n"
        f"Frames extracted: {result.extraction_info.total_frames_extracted}"
    )
    if result.output_directory:
        summary += f"\nFrames saved to: {result.output_directory}"

    content: list[TextContent | ImageContent] = [TextContent(type="text", text=summary)]
    for frame in result.frames:
        content.append(ImageContent(type="image", data=frame.image, mimeType=frame.mime_type))
    return content


@mcp.tool()
async def get_frame_at_time(
    path: str,
    timestamp: float,
    quality: int | None = None,
    width: int | None = None,
):
    """
    Extract a single frame at a specific time.

    Args:
        path: The video filename or full path
        timestamp: Position in seconds
        quality: JPEG quality 1-100. Default 85, or VIDEO_FRAME_QUALITY
        width: Frame width in pixels (100-3840). Default 1280, or VIDEO_FRAME_WIDTH
    """
    try:
        result = await pipeline.extract_frame_at_time(
            path=path, timestamp=timestamp, quality=quality, width=width
        )
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return [TextContent(type="text", text=f"Unexpected error: {str(e)}")]

    if isinstance(result, VideoError):
        return error_content(result)

    frame = result.frame
    return [
        TextContent(type="text", text=f"Frame at {frame.timestamp} from {result.metadata.filename}"),
        ImageContent(type="image", data=frame.image, mimeType=frame.mime_type),
    ]


def main():
    """Run the MCP server."""
    logging.basicConfig(level=config.log_level.upper())

    available = asyncio.run(pipeline.decoder.is_available()) and asyncio.run(
        pipeline.prober.is_available()
    )
    if not available:
        logger.error(
            "ffmpeg and/or ffprobe not found. Install ffmpeg: "
            "brew install ffmpeg (macOS), sudo apt install ffmpeg (Linux), "
            "choco install ffmpeg (Windows)"
        )
        sys.exit(1)

    logger.info("MCP video server starting")
    mcp.run()


if __name__ == "__main__":
    main()
