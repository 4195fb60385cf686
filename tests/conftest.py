# tests/conftest.py
"""Fake ffprobe/ffmpeg collaborators so unit tests never spawn processes."""

from pathlib import Path

import pytest


def make_probe_document(
    duration="125.5",
    size="1572864",
    bit_rate="800000",
    video=True,
    audio=True,
    r_frame_rate="30000/1001",
    creation_time=None,
):
    streams = []
    if video:
        streams.append({
            "index": 0,
            "codec_type": "video",
            "codec_name": "h264",
            "width": 1920,
            "height": 1080,
            "r_frame_rate": r_frame_rate,
        })
    if audio:
        streams.append({"index": 1, "codec_type": "audio", "codec_name": "aac"})

    fmt = {"filename": "clip.mp4", "format_name": "mov,mp4", "duration": duration, "size": size, "bit_rate": bit_rate}
    if creation_time:
        fmt["tags"] = {"creation_time": creation_time}
    return {"streams": streams, "format": fmt}


class FakeProber:
    def __init__(self, document=None, error=None):
        self.document = document if document is not None else make_probe_document()
        self.error = error
        self.calls = []

    async def probe(self, video_path):
        self.calls.append(video_path)
        if self.error:
            raise self.error
        return self.document

    async def is_available(self):
        return True


class FakeDecoder:
    """Writes fake JPEG files where ffmpeg would."""

    def __init__(self, frames=5, error=None, write_output=True):
        self.frames = frames
        self.error = error
        self.write_output = write_output
        self.calls = []
        self.output_dirs = []

    async def run(self, args):
        self.calls.append(list(args))
        output = Path(args[-1])
        self.output_dirs.append(output.parent)
        if self.error:
            raise self.error
        if not self.write_output:
            return

        if "%04d" in output.name:
            cap = int(args[args.index("-frames:v") + 1])
            for i in range(1, min(self.frames, cap) + 1):
                frame = output.parent / (output.name % i)
                frame.write_bytes(b"\xff\xd8fake-jpeg-" + str(i).encode() + b"\xff\xd9")
        else:
            output.write_bytes(b"\xff\xd8single\xff\xd9")

    async def is_available(self):
        return True


@pytest.fixture
def video_file(tmp_path) -> Path:
    videos = tmp_path / "videos"
    videos.mkdir()
    path = videos / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path
