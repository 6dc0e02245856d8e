"""Clip stitching with FFmpeg.

Joins the two clips of a two-clip generation into one MP4. ``cut`` uses the
concat demuxer with stream copy (no re-encode); ``fade`` and ``dissolve``
re-encode through an xfade/acrossfade filter graph. All intermediate files
live in a temp directory that is removed whether stitching succeeds or not.
"""

import asyncio
import json
import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

TRANSITIONS = ("cut", "fade", "dissolve")
DEFAULT_TRANSITION_DURATION = 0.5

# Re-encode settings for crossfaded output
VIDEO_CODEC = "libx264"
VIDEO_PRESET = "fast"
VIDEO_CRF = "23"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "128k"


class VideoStitchError(Exception):
    """Raised when clips cannot be stitched."""

    pass


@dataclass
class StitchOptions:
    transition: str = "cut"
    transition_duration: float = DEFAULT_TRANSITION_DURATION


@dataclass
class StitchResult:
    video: bytes
    duration: float
    size: int


class MediaTool(Protocol):
    """Anything that can join two encoded clips into one."""

    async def concatenate(self, clip_a: bytes, clip_b: bytes, options: StitchOptions) -> StitchResult:
        ...


class FFmpegStitcher:
    """MediaTool backed by the ffmpeg and ffprobe binaries."""

    def __init__(self, ffmpeg_bin: str = "ffmpeg", ffprobe_bin: str = "ffprobe"):
        self.ffmpeg_bin = ffmpeg_bin
        self.ffprobe_bin = ffprobe_bin

    def is_available(self) -> bool:
        return shutil.which(self.ffmpeg_bin) is not None

    async def concatenate(self, clip_a: bytes, clip_b: bytes, options: StitchOptions) -> StitchResult:
        """Join ``clip_a`` and ``clip_b``.

        Raises:
            VideoStitchError: If ffmpeg is missing, a clip is empty, the
                transition is unknown or ffmpeg exits non-zero
        """
        if not self.is_available():
            raise VideoStitchError(f"{self.ffmpeg_bin} not found on PATH; cannot stitch clips")
        if not clip_a or not clip_b:
            raise VideoStitchError("Cannot stitch an empty clip")
        if options.transition not in TRANSITIONS:
            raise VideoStitchError(
                f"Unknown transition {options.transition!r}, expected one of {', '.join(TRANSITIONS)}"
            )

        return await asyncio.to_thread(self._stitch, clip_a, clip_b, options)

    def _stitch(self, clip_a: bytes, clip_b: bytes, options: StitchOptions) -> StitchResult:
        with tempfile.TemporaryDirectory(prefix="demodrop-stitch-") as tmp:
            work_dir = Path(tmp)
            first = work_dir / "clip1.mp4"
            second = work_dir / "clip2.mp4"
            output = work_dir / "output.mp4"
            first.write_bytes(clip_a)
            second.write_bytes(clip_b)

            if options.transition == "cut":
                self._concat_copy(first, second, output)
            else:
                self._crossfade(first, second, output, options)

            data = output.read_bytes()
            duration = self._get_video_duration(output)

        logger.info(
            f"Stitched clips with {options.transition} ({duration:.1f}s, {len(data) / 1024 / 1024:.1f} MB)"
        )
        return StitchResult(video=data, duration=duration, size=len(data))

    def _concat_copy(self, first: Path, second: Path, output: Path) -> None:
        concat_file = output.parent / "concat.txt"
        concat_file.write_text(f"file '{first}'\nfile '{second}'\n")
        cmd = [
            self.ffmpeg_bin, "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", str(concat_file),
            "-c", "copy",
            str(output),
        ]
        self._run_ffmpeg(cmd, "concatenate 2 clips (cut)")

    def _crossfade(self, first: Path, second: Path, output: Path, options: StitchOptions) -> None:
        first_duration = self._get_video_duration(first)
        if first_duration <= 0:
            raise VideoStitchError(f"Could not read the duration of {first.name}")

        fade = max(0.04, min(options.transition_duration, first_duration / 2))
        offset = max(0.0, first_duration - fade)

        filters = [
            f"[0:v][1:v]xfade=transition={options.transition}:duration={fade:.3f}:offset={offset:.3f}[vout]"
        ]
        maps = ["-map", "[vout]"]

        with_audio = self._has_audio(first) and self._has_audio(second)
        if with_audio:
            filters.append(f"[0:a][1:a]acrossfade=d={fade:.3f}[aout]")
            maps += ["-map", "[aout]"]

        cmd = [
            self.ffmpeg_bin, "-y",
            "-i", str(first),
            "-i", str(second),
            "-filter_complex", ";".join(filters),
            *maps,
            "-c:v", VIDEO_CODEC,
            "-preset", VIDEO_PRESET,
            "-crf", VIDEO_CRF,
        ]
        if with_audio:
            cmd += ["-c:a", AUDIO_CODEC, "-b:a", AUDIO_BITRATE]
        cmd.append(str(output))

        self._run_ffmpeg(cmd, f"{options.transition} transition ({fade:.2f}s)")

    def _probe(self, path: Path, entries: list[str]) -> dict:
        cmd = [self.ffprobe_bin, "-v", "error", *entries, "-of", "json", str(path)]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
            if result.returncode == 0:
                return json.loads(result.stdout)
        except Exception as e:
            logger.warning(f"ffprobe failed for {path}: {e}")
        return {}

    def _get_video_duration(self, path: Path) -> float:
        """Duration in seconds, 0.0 when it cannot be read."""
        data = self._probe(path, ["-show_entries", "format=duration"])
        try:
            return float(data["format"]["duration"])
        except (KeyError, TypeError, ValueError):
            return 0.0

    def _has_audio(self, path: Path) -> bool:
        data = self._probe(path, ["-select_streams", "a", "-show_entries", "stream=index"])
        return bool(data.get("streams"))

    def _run_ffmpeg(self, cmd: list[str], description: str = "") -> None:
        """Run an FFmpeg command.

        Raises:
            VideoStitchError: If FFmpeg returns a non-zero exit code
        """
        logger.info(f"FFmpeg: {description}")
        logger.debug(f"Command: {' '.join(cmd)}")

        result = subprocess.run(cmd, capture_output=True, text=True, timeout=600)

        if result.returncode != 0:
            logger.error(f"FFmpeg stderr: {result.stderr[-1000:]}")
            raise VideoStitchError(f"FFmpeg failed ({description}): {result.stderr[:500]}")
