# recode/registry.py

"""
Closed registry of supported text encodings.

Entries are keyed by WHATWG display label; classifier answers (chardet labels
such as ``ascii``, ``ISO-8859-1`` or ``SHIFT_JIS``) are resolved through
Python's codec lookup and an alias table onto these entries.
"""
from __future__ import annotations
import codecs
from dataclasses import dataclass
from typing import Dict, Optional


C1_CONTROLS = "c1-controls"
C1_CONTROLS_OR_REPLACE = "c1-controls-replace"


def _c1_controls(exc: UnicodeError):
    """Decode bytes a Windows code page leaves undefined in 0x80-0x9F as U+0080-U+009F.

    Python's cp125x tables reject them; the WHATWG tables map them to the
    matching C1 control. Anything else is still an error.
    """
    if not isinstance(exc, UnicodeDecodeError):
        raise exc
    bad = exc.object[exc.start:exc.end]
    if not all(0x80 <= b <= 0x9F for b in bad):
        raise exc
    return "".join(chr(b) for b in bad), exc.end


def _c1_controls_or_replace(exc: UnicodeError):
    try:
        return _c1_controls(exc)
    except UnicodeDecodeError:
        return "\ufffd", exc.end


codecs.register_error(C1_CONTROLS, _c1_controls)
codecs.register_error(C1_CONTROLS_OR_REPLACE, _c1_controls_or_replace)


@dataclass(frozen=True)
class Encoding:
    """A supported encoding."""
    name: str         # WHATWG/IANA display label
    codec: str        # Python codec used to decode
    bom: bytes = b""  # byte-order mark, empty when the encoding has none
    errors: str = "strict"  # decode error handler

    @property
    def lenient_errors(self) -> str:
        """Handler for display decoding, where bad bytes become U+FFFD."""
        return C1_CONTROLS_OR_REPLACE if self.errors == C1_CONTROLS else "replace"

    def __str__(self) -> str:
        return self.name


UTF_8 = Encoding("UTF-8", "utf-8", codecs.BOM_UTF8)
UTF_16LE = Encoding("UTF-16LE", "utf-16-le", codecs.BOM_UTF16_LE)
UTF_16BE = Encoding("UTF-16BE", "utf-16-be", codecs.BOM_UTF16_BE)
UTF_32LE = Encoding("UTF-32LE", "utf-32-le", codecs.BOM_UTF32_LE)
UTF_32BE = Encoding("UTF-32BE", "utf-32-be", codecs.BOM_UTF32_BE)
WINDOWS_1252 = Encoding("windows-1252", "cp1252", errors=C1_CONTROLS)

CANONICAL = UTF_8
FALLBACK = WINDOWS_1252

_ENTRIES = [
    UTF_8, UTF_16LE, UTF_16BE, UTF_32LE, UTF_32BE,
    Encoding("windows-874", "cp874", errors=C1_CONTROLS),
    Encoding("windows-1250", "cp1250", errors=C1_CONTROLS),
    Encoding("windows-1251", "cp1251", errors=C1_CONTROLS),
    WINDOWS_1252,
    Encoding("windows-1253", "cp1253", errors=C1_CONTROLS),
    Encoding("windows-1254", "cp1254", errors=C1_CONTROLS),
    Encoding("windows-1255", "cp1255", errors=C1_CONTROLS),
    Encoding("windows-1256", "cp1256", errors=C1_CONTROLS),
    Encoding("windows-1257", "cp1257", errors=C1_CONTROLS),
    Encoding("windows-1258", "cp1258", errors=C1_CONTROLS),
    Encoding("ISO-8859-2", "iso8859-2"),
    Encoding("ISO-8859-3", "iso8859-3"),
    Encoding("ISO-8859-4", "iso8859-4"),
    Encoding("ISO-8859-5", "iso8859-5"),
    Encoding("ISO-8859-6", "iso8859-6"),
    Encoding("ISO-8859-7", "iso8859-7"),
    Encoding("ISO-8859-8", "iso8859-8"),
    Encoding("ISO-8859-10", "iso8859-10"),
    Encoding("ISO-8859-13", "iso8859-13"),
    Encoding("ISO-8859-14", "iso8859-14"),
    Encoding("ISO-8859-15", "iso8859-15"),
    Encoding("ISO-8859-16", "iso8859-16"),
    Encoding("KOI8-R", "koi8-r"),
    Encoding("KOI8-U", "koi8-u"),
    Encoding("IBM866", "cp866"),
    Encoding("macintosh", "mac-roman"),
    Encoding("x-mac-cyrillic", "mac-cyrillic"),
    Encoding("Shift_JIS", "cp932"),
    Encoding("EUC-JP", "euc_jp"),
    Encoding("ISO-2022-JP", "iso2022_jp"),
    Encoding("EUC-KR", "cp949"),
    Encoding("GBK", "gbk"),
    Encoding("gb18030", "gb18030"),
    Encoding("Big5", "big5"),
]

REGISTRY: Dict[str, Encoding] = {e.name.lower(): e for e in _ENTRIES}

# Python codec name (as normalised by codecs.lookup) -> registry label.
_CODEC_ALIASES: Dict[str, str] = {
    "ascii": "utf-8",        # ASCII is a strict subset; conversion is a pass-through
    "utf-8-sig": "utf-8",
    "utf-16": "utf-16le",
    "utf-32": "utf-32le",
    "latin-1": "windows-1252",
    "iso8859-1": "windows-1252",
    "iso8859-9": "windows-1254",
    "iso8859-11": "windows-874",
    "tis-620": "windows-874",
    "shift_jis": "shift_jis",
    "euc_kr": "euc-kr",
    "gb2312": "gbk",
    "cp936": "gbk",
}

_BY_CODEC: Dict[str, Encoding] = {codecs.lookup(e.codec).name: e for e in _ENTRIES}


def lookup(label: Optional[str]) -> Optional[Encoding]:
    """Resolve a label (display name, chardet answer or codec alias) to an entry.

    Returns None for labels outside the registry, including labels Python has
    no codec for.
    """
    if not label:
        return None
    key = label.strip().lower()
    if key in REGISTRY:
        return REGISTRY[key]
    try:
        codec_name = codecs.lookup(key).name
    except LookupError:
        return None
    if codec_name in _CODEC_ALIASES:
        return REGISTRY[_CODEC_ALIASES[codec_name]]
    return _BY_CODEC.get(codec_name)
