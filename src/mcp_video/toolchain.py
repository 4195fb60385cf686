# src/mcp_video/toolchain.py
"""ffprobe and ffmpeg invocation behind small async interfaces."""

import asyncio
import json
import logging
import subprocess
from typing import Any, Protocol

from mcp_video.errors import (
    ProbeParseError,
    ToolchainError,
    ToolchainNotFoundError,
    ToolchainTimeoutError,
)

logger = logging.getLogger(__name__)


class Prober(Protocol):
    """Reads container and stream information from a video file."""

    async def probe(self, video_path: str) -> dict[str, Any]:
        ...


class Decoder(Protocol):
    """Runs the decoder with a prepared argument list."""

    async def run(self, args: list[str]) -> None:
        ...


async def run_tool(
    tool: str,
    cmd: list[str],
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """
    Run an external tool in a worker thread.

    Raises:
        ToolchainNotFoundError: If the executable cannot be started
        ToolchainTimeoutError: If it runs past timeout
        ToolchainError: If it exits non-zero
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        result = await asyncio.to_thread(
            subprocess.run,
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ToolchainNotFoundError(tool, f"{tool} not found: {cmd[0]}")
    except subprocess.TimeoutExpired:
        raise ToolchainTimeoutError(tool, f"{tool} timed out after {timeout} seconds")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise ToolchainError(
            tool,
            f"{tool} exited with code {result.returncode}: {stderr}",
            stderr=stderr,
        )

    return result


def parse_probe_output(stdout: str) -> dict[str, Any]:
    """Parse ffprobe JSON output, checking the parts the normalizer reads."""
    try:
        document = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ProbeParseError("ffprobe", f"Failed to parse ffprobe output: {e}")

    if not isinstance(document, dict):
        raise ProbeParseError("ffprobe", "Failed to parse ffprobe output: expected a JSON object")

    streams = document.setdefault("streams", [])
    if not isinstance(streams, list) or not all(isinstance(s, dict) for s in streams):
        raise ProbeParseError("ffprobe", "Failed to parse ffprobe output: malformed streams list")

    if not isinstance(document.get("format"), dict):
        raise ProbeParseError("ffprobe", "Failed to parse ffprobe output: missing format section")

    return document


class FFprobe:
    """Prober backed by the ffprobe executable."""

    def __init__(self, executable: str = "ffprobe", timeout: float | None = None):
        self.executable = executable
        self.timeout = timeout

    async def probe(self, video_path: str) -> dict[str, Any]:
        cmd = [
            self.executable,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            video_path,
        ]
        result = await run_tool("ffprobe", cmd, timeout=self.timeout)
        return parse_probe_output(result.stdout)

    async def is_available(self) -> bool:
        return await check_available("ffprobe", self.executable)


class FFmpeg:
    """Decoder backed by the ffmpeg executable."""

    def __init__(self, executable: str = "ffmpeg", timeout: float | None = None):
        self.executable = executable
        self.timeout = timeout

    async def run(self, args: list[str]) -> None:
        # -y: overwrite output files
        cmd = [self.executable, "-y", *args]
        await run_tool("ffmpeg", cmd, timeout=self.timeout)

    async def is_available(self) -> bool:
        return await check_available("ffmpeg", self.executable)


async def check_available(tool: str, executable: str) -> bool:
    """Check that `<executable> -version` runs cleanly."""
    try:
        await run_tool(tool, [executable, "-version"], timeout=10)
    except (ToolchainError, OSError):
        return False
    return True
