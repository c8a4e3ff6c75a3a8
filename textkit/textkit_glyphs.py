"""Icon glyph table and the icon font resource.

Public API:
  IconGlyphTable(mapping)          immutable icon name -> code point map
  default_glyph_table(force=False) built-in entries merged with external overrides
  load_icon_font(path=None, ...)   locate + register the Material Design Icons font
  asset_dirs(force=False)          ordered asset directories

The glyph table is built once at startup and injected where needed; nothing
here mutates it afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union
import json
import os
import sys

from textkit.textkit_logging import Sink, log_line, log_exception
from textkit.textkit_paths import build_candidate_paths

ICON_FONT_FAMILY = 'Material Design Icons'
ICON_FONT_FILE = 'materialdesignicons-webfont.ttf'
GLYPH_OVERRIDE_FILE = 'icon_glyphs.json'

# Code points of the bundled Material Design Icons webfont
_DEFAULT_GLYPHS: Dict[str, int] = {
    'auto-fix': 0xF0068,
    'undo': 0xF054C,
    'redo': 0xF044E,
    'alert': 0xF0026,
    'close-octagon': 0xF015C,
}

_ASSET_DIR_CACHE: List[Path] | None = None
_GLYPH_TABLE_CACHE: 'IconGlyphTable | None' = None


class UnknownIconError(KeyError):
    """Raised by IconGlyphTable.code_point for names missing from the table."""


class FontLoadError(OSError):
    """The icon font could not be located or registered with the host."""


class IconGlyphTable(Mapping[str, int]):
    """Read-only mapping of icon names to Unicode code points."""

    def __init__(self, glyphs: Mapping[str, int]):
        checked: Dict[str, int] = {}
        for name, cp in glyphs.items():
            cp = int(cp)
            if not 0 <= cp <= sys.maxunicode:
                raise ValueError(f"code point out of range for icon '{name}': {cp:#x}")
            checked[str(name)] = cp
        self._glyphs = MappingProxyType(checked)

    def __getitem__(self, name: str) -> int:
        return self._glyphs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._glyphs)

    def __len__(self) -> int:
        return len(self._glyphs)

    def code_point(self, name: str) -> int:
        try:
            return self._glyphs[name]
        except KeyError:
            raise UnknownIconError(name) from None

    def glyph(self, name: str) -> str:
        """Return the single character for ``name``."""
        return chr(self.code_point(name))

    def merged(self, extra: Mapping[str, int]) -> 'IconGlyphTable':
        """Return a new table with ``extra`` entries added or overriding."""
        combined = dict(self._glyphs)
        combined.update(extra)
        return IconGlyphTable(combined)

    def __repr__(self) -> str:
        return f"IconGlyphTable({len(self._glyphs)} icons)"


def asset_dirs(force: bool = False) -> List[Path]:
    """Return ordered candidate asset directories (deduplicated).

    Sources (precedence order):
      1. TEXTKIT_ASSET_DIRS (pathsep-separated list)
      2. TEXTKIT_ASSETS (single path)
      3. CWD/assets
      4. Package local assets (package dir, repository root)
      5. Frozen (_MEIPASS)/assets (if present)
    """
    global _ASSET_DIR_CACHE
    if _ASSET_DIR_CACHE is not None and not force:
        return _ASSET_DIR_CACHE
    _ASSET_DIR_CACHE = build_candidate_paths('assets', 'TEXTKIT_ASSET_DIRS', 'TEXTKIT_ASSETS')
    return _ASSET_DIR_CACHE


def parse_code_point(value: Union[int, str]) -> int:
    """Accept 983372, 'F054C', '0xF054C' or 'U+F054C'."""
    if isinstance(value, bool):
        raise ValueError(f"not a code point: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text[:2].upper() == 'U+':
        text = text[2:]
    return int(text, 16)


def load_glyph_overrides(path: Optional[Path] = None, sink: Optional[Sink] = None) -> Dict[str, int]:
    """Read extra glyph entries from JSON ``{name: code}``.

    Search order (first hit wins):
      1. explicit ``path``
      2. Environment variable TEXTKIT_ICON_GLYPHS
      3. icon_glyphs.json in the asset directories
    Invalid entries are skipped and logged; a missing file yields {}.
    """
    candidates: List[Path] = []
    if path is not None:
        candidates.append(Path(path))
    envp = os.environ.get('TEXTKIT_ICON_GLYPHS')
    if envp:
        candidates.append(Path(envp))
    candidates.extend(d / GLYPH_OVERRIDE_FILE for d in asset_dirs())
    for cand in candidates:
        if not cand.is_file():
            continue
        try:
            data = json.loads(cand.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            log_line('warn', f"Ignoring glyph overrides {cand}: {exc}", sink=sink)
            continue
        if not isinstance(data, dict):
            log_line('warn', f"Ignoring glyph overrides {cand}: top level is not an object", sink=sink)
            continue
        out: Dict[str, int] = {}
        for name, raw in data.items():
            if str(name).startswith('$'):
                continue
            try:
                cp = parse_code_point(raw)
            except (TypeError, ValueError):
                log_line('warn', f"Ignoring glyph '{name}' in {cand}: bad code point {raw!r}", sink=sink)
                continue
            if 0 <= cp <= sys.maxunicode:
                out[str(name)] = cp
            else:
                log_line('warn', f"Ignoring glyph '{name}' in {cand}: code point out of range", sink=sink)
        return out
    return {}


def default_glyph_table(force: bool = False, sink: Optional[Sink] = None) -> IconGlyphTable:
    """Built-in Material Design Icons entries merged with external overrides (cached)."""
    global _GLYPH_TABLE_CACHE
    if _GLYPH_TABLE_CACHE is not None and not force:
        return _GLYPH_TABLE_CACHE
    _GLYPH_TABLE_CACHE = IconGlyphTable(_DEFAULT_GLYPHS).merged(load_glyph_overrides(sink=sink))
    return _GLYPH_TABLE_CACHE


def clear_asset_cache():
    """Reset cached asset directories and glyph table (used by tests)."""
    global _ASSET_DIR_CACHE, _GLYPH_TABLE_CACHE
    _ASSET_DIR_CACHE = None
    _GLYPH_TABLE_CACHE = None


@dataclass(frozen=True)
class IconFont:
    """A usable icon font face: family name plus the file it came from (if any)."""
    family: str = ICON_FONT_FAMILY
    path: Optional[Path] = None


FontRegistrar = Callable[[Path, str], None]


def find_icon_font_file(path: Optional[Path] = None) -> Path:
    """Return the icon font file or raise FontLoadError."""
    candidates: List[Path] = []
    if path is not None:
        candidates.append(Path(path))
    envp = os.environ.get('TEXTKIT_ICON_FONT')
    if envp:
        candidates.append(Path(envp))
    candidates.extend(d / ICON_FONT_FILE for d in asset_dirs())
    for cand in candidates:
        if cand.is_file():
            return cand
    raise FontLoadError(f"{ICON_FONT_FILE} not found (searched {len(candidates)} locations)")


def register_font_file(path: Path, family: str) -> None:
    """Make ``family`` from ``path`` available to Tk.

    On Windows the file is added as a private GDI font resource for this
    process. Tk has no portable way to load a font file, so elsewhere the family
    must already be installed (fontconfig); raises FontLoadError otherwise.
    """
    if sys.platform == 'win32':
        import ctypes
        FR_PRIVATE = 0x10
        added = ctypes.windll.gdi32.AddFontResourceExW(str(path), FR_PRIVATE, 0)  # type: ignore[attr-defined]
        if not added:
            raise FontLoadError(f"AddFontResourceExW rejected {path}")
        return
    try:
        import tkinter.font as tkfont
        families = {str(f).lower() for f in tkfont.families()}
    except Exception as exc:  # tkinter missing or no default root yet
        raise FontLoadError(f"cannot query installed font families: {exc}") from exc
    if family.lower() not in families:
        raise FontLoadError(f"font family '{family}' is not installed")


def load_icon_font(path: Optional[Path] = None, *,
                   registrar: Optional[FontRegistrar] = register_font_file,
                   family: str = ICON_FONT_FAMILY,
                   sink: Optional[Sink] = None) -> Optional[IconFont]:
    """Locate and register the icon font; returns None (after logging) on failure.

    ``registrar=None`` only locates the file.
    """
    try:
        font_path = find_icon_font_file(path)
        if registrar is not None:
            registrar(font_path, family)
    except Exception as exc:
        log_exception("There was a problem loading the Material Design Icons font", exc, sink=sink)
        return None
    return IconFont(family=family, path=font_path)


__all__ = [
    'ICON_FONT_FAMILY', 'ICON_FONT_FILE', 'IconGlyphTable', 'UnknownIconError', 'FontLoadError',
    'IconFont', 'FontRegistrar', 'asset_dirs', 'parse_code_point', 'load_glyph_overrides',
    'default_glyph_table', 'clear_asset_cache', 'find_icon_font_file', 'register_font_file',
    'load_icon_font',
]
