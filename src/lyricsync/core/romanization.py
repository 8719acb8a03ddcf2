"""Script-aware romanization for lyrics display.

Each fragment is classified by the Unicode ranges it contains and sent to a
single transliteration path:

- Kana (Hiragana/Katakana) -> Japanese via pykakasi, even when Han is present
- Hangul -> Korean via korean_romanizer
- Han with no Kana -> Chinese via pypinyin
- anything else is returned as-is

No path ever raises to the caller; a failed conversion yields the original
text with a ``degraded`` status.
"""

import re
import threading
from enum import Enum
from typing import Any, Callable, Optional

from korean_romanizer.romanizer import Romanizer
from pykakasi import kakasi
from pypinyin import Style, pinyin

from ..utils.logging import get_logger
from .models import Romanization, RomanizationStatus, ScriptKind

logger = get_logger(__name__)

# ----------------------
# Unicode ranges for script detection
# ----------------------
KANA_RE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF]")
HANGUL_RE = re.compile(r"[\uAC00-\uD7AF]")
HAN_RE = re.compile(r"[\u4E00-\u9FFF]")


def classify_script(text: str) -> ScriptKind:
    """Classify a fragment; Kana wins over Han so mixed text is Japanese."""
    if not text:
        return ScriptKind.OTHER
    if KANA_RE.search(text):
        return ScriptKind.KANA
    if HANGUL_RE.search(text):
        return ScriptKind.HANGUL
    if HAN_RE.search(text):
        return ScriptKind.HAN
    return ScriptKind.OTHER


# ----------------------
# Japanese analyzer lifecycle
# ----------------------
class AnalyzerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class JapaneseAnalyzer:
    """Dictionary-backed Japanese converter initialized once in the background.

    Until the state is READY, conversions are not attempted; callers degrade
    to the original text instead of blocking or queueing.
    """

    def __init__(self, factory: Callable[[], Any] = kakasi):
        self._factory = factory
        self._converter: Any = None
        self._state = AnalyzerState.UNINITIALIZED
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._settled = threading.Event()

    @property
    def state(self) -> AnalyzerState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is AnalyzerState.READY

    def start(self) -> None:
        """Kick off background initialization (idempotent)."""
        with self._lock:
            if self._thread is not None or self._settled.is_set():
                return
            self._thread = threading.Thread(
                target=self._initialize, name="japanese-analyzer", daemon=True
            )
            self._thread.start()

    def initialize(self) -> AnalyzerState:
        """Initialize in the calling thread unless already started."""
        with self._lock:
            if self._thread is None and not self._settled.is_set():
                self._initialize()
        return self._state

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for initialization to settle; True only if READY."""
        self._settled.wait(timeout)
        return self.is_ready

    def _initialize(self) -> None:
        try:
            converter = self._factory()
        except Exception as e:
            logger.warning(f"Japanese analyzer failed to initialize: {e}")
            self._state = AnalyzerState.FAILED
        else:
            self._converter = converter
            self._state = AnalyzerState.READY
            logger.debug("Japanese analyzer ready")
        finally:
            self._settled.set()

    def convert(self, text: str) -> str:
        if not self.is_ready:
            raise RuntimeError("Japanese analyzer is not ready")
        result = self._converter.convert(text)
        return " ".join(" ".join(item["hepburn"] for item in result).split())


_JAPANESE_ANALYZER = JapaneseAnalyzer()


def start_japanese_analyzer() -> JapaneseAnalyzer:
    """Begin background dictionary loading and return the shared analyzer."""
    _JAPANESE_ANALYZER.start()
    return _JAPANESE_ANALYZER


# ----------------------
# Language-specific romanizers
# ----------------------
def romanize_japanese(text: str) -> Romanization:
    """Romanize Japanese text using pykakasi (spaced Hepburn)."""
    analyzer = _JAPANESE_ANALYZER
    if analyzer.state is AnalyzerState.UNINITIALIZED:
        analyzer.start()
        return Romanization(text, ScriptKind.KANA, RomanizationStatus.UNCHANGED)
    if analyzer.state is AnalyzerState.FAILED:
        return Romanization(text, ScriptKind.KANA, RomanizationStatus.DEGRADED)
    try:
        return Romanization(
            analyzer.convert(text), ScriptKind.KANA, RomanizationStatus.CONVERTED
        )
    except Exception as e:
        logger.debug(f"Japanese romanization failed for {text!r}: {e}")
        return Romanization(text, ScriptKind.KANA, RomanizationStatus.DEGRADED)


def romanize_korean(text: str) -> Romanization:
    """Romanize Korean text using korean_romanizer."""
    try:
        return Romanization(
            Romanizer(text).romanize(), ScriptKind.HANGUL, RomanizationStatus.CONVERTED
        )
    except Exception as e:
        logger.debug(f"Korean romanization failed for {text!r}: {e}")
        return Romanization(text, ScriptKind.HANGUL, RomanizationStatus.DEGRADED)


def romanize_chinese(text: str) -> Romanization:
    """Romanize Chinese text to tone-marked pinyin, one syllable per token.

    pypinyin segments multi-character words before converting, so heteronyms
    resolve by phrase rather than by isolated character.
    """
    try:
        syllables = pinyin(text, style=Style.TONE, heteronym=False)
        tokens = [s.strip() for group in syllables for s in group if s.strip()]
        return Romanization(
            " ".join(tokens), ScriptKind.HAN, RomanizationStatus.CONVERTED
        )
    except Exception as e:
        logger.debug(f"Chinese romanization failed for {text!r}: {e}")
        return Romanization(text, ScriptKind.HAN, RomanizationStatus.DEGRADED)


SCRIPT_ROMANIZERS = {
    ScriptKind.KANA: romanize_japanese,
    ScriptKind.HANGUL: romanize_korean,
    ScriptKind.HAN: romanize_chinese,
}


def romanize_with_outcome(text: str) -> Romanization:
    """Classify and romanize, reporting which path was taken."""
    if not text:
        return Romanization("", ScriptKind.OTHER)
    script = classify_script(text)
    romanizer = SCRIPT_ROMANIZERS.get(script)
    if romanizer is None:
        return Romanization(text, script)
    try:
        return romanizer(text)
    except Exception as e:
        logger.debug(f"Romanizer for {script.value} raised on {text!r}: {e}")
        return Romanization(text, script, RomanizationStatus.DEGRADED)


def romanize(text: str) -> str:
    """Best-effort Latin transliteration; never raises."""
    return romanize_with_outcome(text).text
