# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-11
# Updated: 2026-01-26
# Description: LangDetectDetector
# -----------------------------------------------------------------------------
from typing import Optional, Tuple

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

# langdetect is probabilistic; pin the seed so indexing the same text twice tags it the same way
DetectorFactory.seed = 0

LATIN_SCRIPT_LANGS = ("en", "fr", "de", "es", "it", "pt", "nl", "vi", "pl", "ro")


class LangDetectDetector:
    def __init__(self, min_chars: int = 20):
        self.min_chars = min_chars

    def detect(self, text: str) -> Tuple[str, float, Optional[str]]:
        if not text or len(text.strip()) < self.min_chars:
            return "und", 0.0, None

        try:
            detections = detect_langs(text)
        except LangDetectException:
            return "und", 0.0, None

        if not detections:
            return "und", 0.0, None

        top = detections[0]  # most probable language
        script = "Latn" if top.lang in LATIN_SCRIPT_LANGS else None
        return top.lang, top.prob, script
