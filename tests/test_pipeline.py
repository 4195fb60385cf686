# tests/test_pipeline.py
"""End-to-end pipeline behaviour with fake ffprobe/ffmpeg."""

import pytest
from conftest import FakeDecoder, FakeProber, make_probe_document

from mcp_video.config import VideoConfig
from mcp_video.errors import ProbeParseError, ToolchainError, ToolchainNotFoundError
from mcp_video.models import ErrorCode, ExtractFramesResult, FrameAtTimeResult, VideoError, VideoMetadata
from mcp_video.pipeline import VideoPipeline


def _pipeline(video_file, tmp_path, prober=None, decoder=None, **config):
    config = VideoConfig(base_dir=str(video_file.parent), temp_dir=str(tmp_path / "scratch"), **config)
    return VideoPipeline(config, prober=prober or FakeProber(), decoder=decoder or FakeDecoder())


@pytest.mark.asyncio
async def test_get_video_info(video_file, tmp_path):
    prober = FakeProber()
    pipeline = _pipeline(video_file, tmp_path, prober=prober)

    result = await pipeline.get_video_info("clip")

    assert isinstance(result, VideoMetadata)
    assert result.filepath == str(video_file)
    assert result.duration == "02:05"
    assert prober.calls == [str(video_file)]


@pytest.mark.asyncio
async def test_get_video_info_missing_file(video_file, tmp_path):
    prober = FakeProber()
    pipeline = _pipeline(video_file, tmp_path, prober=prober)

    result = await pipeline.get_video_info("missing.mp4")

    assert isinstance(result, VideoError)
    assert result.code == ErrorCode.FILE_NOT_FOUND
    assert "clip.mp4" in result.suggestion
    assert prober.calls == []


@pytest.mark.asyncio
async def test_get_video_info_unparsable_probe(video_file, tmp_path):
    prober = FakeProber(error=ProbeParseError("ffprobe", "Failed to parse ffprobe output: bad"))
    pipeline = _pipeline(video_file, tmp_path, prober=prober)

    result = await pipeline.get_video_info("clip.mp4")
    assert result.code == ErrorCode.TOOLCHAIN_ERROR


@pytest.mark.asyncio
async def test_extract_frames_scratch(video_file, tmp_path):
    decoder = FakeDecoder(frames=3)
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames("clip", start_time=5, interval=2, max_frames=3)

    assert isinstance(result, ExtractFramesResult)
    assert [f.timestamp_seconds for f in result.frames] == [5, 7, 9]
    assert result.extraction_info.total_frames_extracted == 3
    assert result.extraction_info.interval_used == 2
    assert result.extraction_info.quality == 75
    assert result.extraction_info.width == 800
    assert result.frame_paths is None
    assert result.output_directory is None
    # Scratch directory is gone
    assert not decoder.output_dirs[0].exists()
    assert list((tmp_path / "scratch").iterdir()) == []


@pytest.mark.asyncio
async def test_extract_frames_uses_config_defaults(video_file, tmp_path):
    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder, default_interval=5, default_width=640)

    result = await pipeline.extract_frames("clip.mp4")

    assert result.extraction_info.interval_used == 5
    assert "fps=1/5,scale=640:-1" in decoder.calls[0]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"interval": 0},
    {"interval": 61},
    {"quality": 0},
    {"quality": 101},
    {"width": 50},
    {"max_frames": 0},
    {"max_frames": 501},
    {"start_time": 10, "end_time": 10},
])
async def test_extract_frames_invalid_parameters(video_file, tmp_path, overrides):
    prober = FakeProber()
    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, prober=prober, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4", **overrides)

    assert isinstance(result, VideoError)
    assert result.code == ErrorCode.INVALID_PATH
    assert prober.calls == []
    assert decoder.calls == []


@pytest.mark.asyncio
async def test_start_time_past_duration(video_file, tmp_path):
    decoder = FakeDecoder()
    prober = FakeProber(make_probe_document(duration="10.0"))
    pipeline = _pipeline(video_file, tmp_path, prober=prober, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4", start_time=10)

    assert result.code == ErrorCode.INVALID_PATH
    assert "start_time (10s)" in result.message
    assert "10.0s" in result.message
    assert result.details == {"start_time": 10, "duration_seconds": 10.0}
    assert decoder.calls == []


@pytest.mark.asyncio
async def test_persistent_cache_hit_skips_decoder(video_file, tmp_path):
    output = tmp_path / "frames"
    output.mkdir()
    for i in range(1, 6):
        (output / f"frame_{i:04d}.jpg").write_bytes(b"cached")

    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames(
        "clip.mp4", interval=3, start_time=1, output_dir=str(output)
    )

    assert decoder.calls == []
    assert len(result.frames) == 5
    assert [f.timestamp_seconds for f in result.frames] == [1, 4, 7, 10, 13]
    assert result.output_directory == str(output)
    assert result.frame_paths == [str(output / f"frame_{i:04d}.jpg") for i in range(1, 6)]


@pytest.mark.asyncio
async def test_persistent_directory_populated_and_kept(video_file, tmp_path):
    output = tmp_path / "frames" / "clip"
    decoder = FakeDecoder(frames=4)
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4", output_dir=str(output))

    assert len(decoder.calls) == 1
    assert decoder.output_dirs[0] == output
    assert len(result.frames) == 4
    assert len(list(output.glob("*.jpg"))) == 4

    # Second call is served from the directory
    again = await pipeline.extract_frames("clip.mp4", output_dir=str(output))
    assert len(decoder.calls) == 1
    assert len(again.frames) == 4


@pytest.mark.asyncio
async def test_decoder_failure_is_classified_and_scratch_removed(video_file, tmp_path):
    decoder = FakeDecoder(error=ToolchainError("ffmpeg", "ffmpeg exited with code 1: Invalid data"))
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4")

    assert result.code == ErrorCode.TOOLCHAIN_ERROR
    assert not decoder.output_dirs[0].exists()


@pytest.mark.asyncio
async def test_persistent_directory_kept_after_failure(video_file, tmp_path):
    output = tmp_path / "frames"
    decoder = FakeDecoder(error=ToolchainError("ffmpeg", "ffmpeg exited with code 1: boom"))
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4", output_dir=str(output))

    assert result.code == ErrorCode.TOOLCHAIN_ERROR
    assert output.is_dir()


@pytest.mark.asyncio
async def test_missing_prober_executable(video_file, tmp_path):
    prober = FakeProber(error=ToolchainNotFoundError("ffprobe", "ffprobe not found: ffprobe"))
    pipeline = _pipeline(video_file, tmp_path, prober=prober)

    result = await pipeline.extract_frames("clip.mp4")
    assert result.code == ErrorCode.TOOLCHAIN_NOT_FOUND


@pytest.mark.asyncio
async def test_unsupported_format(video_file, tmp_path):
    (video_file.parent / "notes.txt").write_text("hi")
    pipeline = _pipeline(video_file, tmp_path)

    result = await pipeline.extract_frames("notes.txt")
    assert result.code == ErrorCode.UNSUPPORTED_FORMAT


@pytest.mark.asyncio
async def test_extract_frame_at_time(video_file, tmp_path):
    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frame_at_time("clip", 30)

    assert isinstance(result, FrameAtTimeResult)
    assert result.frame.timestamp_seconds == 30
    assert result.frame.timestamp == "00:30"
    assert result.metadata.filename == "clip.mp4"
    assert "scale=1280:-1" in decoder.calls[0]
    assert not decoder.output_dirs[0].exists()


@pytest.mark.asyncio
async def test_extract_frame_at_time_past_duration(video_file, tmp_path):
    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frame_at_time("clip", 500)

    assert result.code == ErrorCode.INVALID_PATH
    assert decoder.calls == []


@pytest.mark.asyncio
async def test_extract_frame_at_time_no_output(video_file, tmp_path):
    pipeline = _pipeline(video_file, tmp_path, decoder=FakeDecoder(write_output=False))

    result = await pipeline.extract_frame_at_time("clip", 3)
    assert result.code == ErrorCode.TOOLCHAIN_ERROR
    assert "output file not created" in result.message


@pytest.mark.asyncio
async def test_output_dir_naming_a_file_is_invalid_path(video_file, tmp_path):
    existing = tmp_path / "frames.jpg"
    existing.write_bytes(b"\xff\xd8\xff\xd9")
    decoder = FakeDecoder()
    pipeline = _pipeline(video_file, tmp_path, decoder=decoder)

    result = await pipeline.extract_frames("clip.mp4", output_dir=str(existing))

    assert isinstance(result, VideoError)
    assert result.code == ErrorCode.INVALID_PATH
    assert result.details["field"] == "output_dir"
    assert decoder.calls == []
