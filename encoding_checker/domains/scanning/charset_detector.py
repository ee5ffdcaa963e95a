"""
Charset detection capability used by the scan engine.

The engine only depends on the two-phase CharsetDetector protocol:
feed() is called with consecutive byte chunks of one file in read order and
finish() is called exactly once afterwards. A fresh detector is created for
every file, so no state leaks between files. A detector may also expose a
boolean `done` attribute; once it turns true the engine stops reading the
file and calls finish() right away.

The default backend wraps chardet's UniversalDetector (a port of Mozilla's
universal charset detector) and canonicalises its charset names.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from chardet import UniversalDetector


class CharsetDetector(Protocol):
    def feed(self, chunk: bytes) -> None:
        ...

    def finish(self) -> Optional[str]:
        """Return the detected charset identifier, or None when it is unknown."""
        ...


CharsetDetectorFactory = Callable[[], CharsetDetector]


# Keyed by normalised name (lower case, '_' -> '-')
_CANONICAL_NAMES: Dict[str, str] = {
    "ascii": "ASCII",
    "utf-8": "UTF-8",
    "utf-8-sig": "UTF-8-SIG",
    "utf-16": "UTF-16",
    "utf-16le": "UTF-16LE",
    "utf-16be": "UTF-16BE",
    "utf-32": "UTF-32",
    "utf-32le": "UTF-32LE",
    "utf-32be": "UTF-32BE",
    "big5": "Big5",
    "gb2312": "GB2312",
    "gb18030": "GB18030",
    "hz-gb-2312": "HZ-GB-2312",
    "euc-tw": "EUC-TW",
    "iso-2022-cn": "ISO-2022-CN",
    "euc-jp": "EUC-JP",
    "shift-jis": "Shift_JIS",
    "cp932": "CP932",
    "iso-2022-jp": "ISO-2022-JP",
    "euc-kr": "EUC-KR",
    "cp949": "CP949",
    "iso-2022-kr": "ISO-2022-KR",
    "johab": "Johab",
    "koi8-r": "KOI8-R",
    "maccyrillic": "MacCyrillic",
    "macroman": "MacRoman",
    "ibm855": "IBM855",
    "ibm866": "IBM866",
    "iso-8859-1": "ISO-8859-1",
    "iso-8859-2": "ISO-8859-2",
    "iso-8859-5": "ISO-8859-5",
    "iso-8859-7": "ISO-8859-7",
    "iso-8859-8": "ISO-8859-8",
    "iso-8859-9": "ISO-8859-9",
    "windows-1250": "windows-1250",
    "windows-1251": "windows-1251",
    "windows-1252": "windows-1252",
    "windows-1253": "windows-1253",
    "windows-1255": "windows-1255",
    "tis-620": "TIS-620",
}

# Charsets in which pure 7-bit ASCII content is valid as-is
_ASCII_COMPATIBLE = {
    "utf-8",
    "iso-8859-1",
    "iso-8859-2",
    "iso-8859-5",
    "iso-8859-7",
    "iso-8859-8",
    "iso-8859-9",
    "windows-1250",
    "windows-1251",
    "windows-1252",
    "windows-1253",
    "windows-1255",
    "koi8-r",
    "maccyrillic",
    "macroman",
    "tis-620",
    "euc-jp",
    "euc-kr",
    "euc-tw",
    "gb2312",
    "gb18030",
    "big5",
    "cp932",
    "cp949",
}


def normalize_charset_name(name: str) -> str:
    return name.strip().lower().replace("_", "-")


def canonical_charset_name(name: str) -> str:
    """Map a backend charset name to its display form; unknown names pass through unchanged."""
    return _CANONICAL_NAMES.get(normalize_charset_name(name), name.strip())


def known_charsets() -> List[str]:
    """All charset identifiers the default backend can report, in display form."""
    return sorted(set(_CANONICAL_NAMES.values()), key=str.lower)


def unknown_charsets(names: Iterable[str]) -> List[str]:
    """Names that match none of known_charsets(), sorted."""
    known = {normalize_charset_name(name) for name in known_charsets()}
    return sorted(name for name in names if normalize_charset_name(name) not in known)


def is_charset_accepted(charset: str, accepted_charsets: Iterable[str]) -> bool:
    """
    Check a detected charset against an accepted set.

    Names are compared case-insensitively in canonical form. ASCII counts as
    accepted whenever an ASCII-compatible charset (UTF-8, windows-1252, ...) is
    accepted, because the bytes of a pure ASCII file are valid in all of them.
    """
    detected = normalize_charset_name(charset)
    accepted = {normalize_charset_name(name) for name in accepted_charsets}
    if detected in accepted:
        return True
    if detected == "ascii":
        return bool(accepted & _ASCII_COMPATIBLE)
    return False


class ChardetCharsetDetector:
    """
    CharsetDetector backed by chardet's UniversalDetector.

    Detection is best-effort: backend errors are logged and turn the result
    into "unknown" instead of propagating.
    """

    def __init__(self) -> None:
        self._detector = UniversalDetector()
        self._bytes_fed = 0
        self._failed = False
        self._finished = False

    @property
    def done(self) -> bool:
        """True once more input cannot change the result."""
        return self._failed or self._detector.done

    def feed(self, chunk: bytes) -> None:
        if self._finished:
            raise RuntimeError("feed() called after finish()")
        if not chunk or self.done:
            return
        self._bytes_fed += len(chunk)
        try:
            self._detector.feed(chunk)
        except Exception as e:
            logging.debug(f"Charset detector rejected input, result will be unknown: {e}")
            self._failed = True

    def finish(self) -> Optional[str]:
        if self._finished:
            raise RuntimeError("finish() may only be called once")
        self._finished = True

        # Some chardet releases guess a charset even for empty input
        if self._failed or self._bytes_fed == 0:
            return None
        try:
            result = self._detector.close()
        except Exception as e:
            logging.debug(f"Charset detector failed to finish, result will be unknown: {e}")
            return None

        encoding = result.get("encoding") if result else None
        if not encoding:
            return None
        return canonical_charset_name(encoding)


def create_chardet_detector() -> CharsetDetector:
    return ChardetCharsetDetector()
