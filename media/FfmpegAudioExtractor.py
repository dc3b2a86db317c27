# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: FfmpegAudioExtractor
# -----------------------------------------------------------------------------
import subprocess
from pathlib import Path
from typing import List

import settings
from utility.errors import MediaExtractionError
from utility.logging_utils import get_class_logger


class FfmpegAudioExtractor:
    """
    Pulls the audio track out of a video file with the ffmpeg CLI.

    Output is speech-friendly mp3: no video, libmp3lame @ 128k, mono, 16 kHz.
    """

    def __init__(
            self,
            *,
            binary: str = settings.FFMPEG_BINARY,
            timeout: float = settings.FFMPEG_TIMEOUT_SECONDS,
            logger=None,
    ):
        self.binary = binary
        self.timeout = timeout
        self.logger = logger or get_class_logger(self.__class__)

    def build_command(self, video_path: str | Path, audio_path: str | Path) -> List[str]:
        return [
            self.binary,
            "-y",
            "-i", str(video_path),
            "-vn",
            "-acodec", "libmp3lame",
            "-ab", "128k",
            "-ac", "1",
            "-ar", "16000",
            str(audio_path),
        ]

    def extract_audio_track(self, video_path: str | Path, audio_path: str | Path) -> Path:
        cmd = self.build_command(video_path, audio_path)
        self.logger.info("Extracting audio: %s -> %s", video_path, audio_path)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise MediaExtractionError(f"ffmpeg binary not found: {self.binary}") from e
        except subprocess.TimeoutExpired as e:
            raise MediaExtractionError(f"ffmpeg timed out after {self.timeout:.0f}s") from e

        if result.returncode != 0:
            tail = (result.stderr or "").strip()[-500:]
            self.logger.warning("ffmpeg exited with %d: %s", result.returncode, tail)
            raise MediaExtractionError(f"ffmpeg exited with code {result.returncode}: {tail}")

        out = Path(audio_path)
        if not out.exists():
            raise MediaExtractionError(f"ffmpeg reported success but wrote no file at {out}")

        self.logger.debug("Audio extracted (%d bytes)", out.stat().st_size)
        return out
