"""Locale-scoped message catalogs backed by JSON bundles.

Bundle layout (resource-bundle convention, one flat JSON object per file):

    i18n/<base>.json            default messages
    i18n/<base>_<lang>.json     language specific
    i18n/<base>_<lang>_<RR>.json  language + region specific

Keys starting with '$' (e.g. the ``$meta`` block) are metadata, not messages.

A catalog is immutable. ``reload(locale)`` builds a new instance for the same
base name; owners swap their reference in a single assignment so concurrent
readers holding the old catalog never observe a half-updated state.

Lookup contract: ``lookup(key)`` never raises and returns ``key`` verbatim when
no bundle defines it.
"""
from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import json
import locale as _locale
import os
import re

from textkit.textkit_logging import Sink, log_line
from textkit.textkit_paths import build_candidate_paths

_I18N_DIR_CACHE: List[Path] | None = None

# Windows reports names like 'German_Germany'; map the common ones to tags.
_WINDOWS_LOCALE_MAP = {
    'Japanese_Japan': 'ja_JP',
    'English_United States': 'en_US',
    'English_United Kingdom': 'en_GB',
    'Chinese_China': 'zh_CN',
    'Korean_Korea': 'ko_KR',
    'German_Germany': 'de_DE',
    'French_France': 'fr_FR',
    'Spanish_Spain': 'es_ES',
    'Italian_Italy': 'it_IT',
    'Portuguese_Brazil': 'pt_BR',
    'Russian_Russia': 'ru_RU',
}

_SUFFIX_RE = re.compile(r'^[a-z]{2,3}(_[A-Z]{2}|_\d{3})?$')


def normalize_locale(value: Optional[str]) -> str:
    """Return ``lang[_REGION]`` for tags like 'de-de', 'de_DE.UTF-8', 'pt-BR'.

    Script subtags (``zh-Hant-TW``) are dropped. Returns '' for empty input and
    for the 'C'/'POSIX' pseudo locales.
    """
    if not value:
        return ''
    raw = str(value).strip()
    raw = _WINDOWS_LOCALE_MAP.get(raw, raw)
    raw = raw.split('.', 1)[0].split('@', 1)[0]
    if raw.upper() in ('C', 'POSIX'):
        return ''
    parts = [p for p in raw.replace('-', '_').split('_') if p]
    if not parts or not parts[0].isalpha():
        return ''
    lang = parts[0].lower()
    region = ''
    for p in parts[1:]:
        if (len(p) == 2 and p.isalpha()) or (len(p) == 3 and p.isdigit()):
            region = p.upper()
            break
    return f"{lang}_{region}" if region else lang


def detect_system_locale() -> str:
    """Best-effort detection of the user's UI locale (normalized, may be '')."""
    loc = None
    try:
        loc_tuple = _locale.getlocale()
        if loc_tuple and loc_tuple[0]:
            loc = loc_tuple[0]
    except (ValueError, TypeError):
        loc = None
    if normalize_locale(loc):
        return normalize_locale(loc)
    # POSIX precedence, but values naming no language (C, POSIX) are skipped
    # so a later LANGUAGE priority list or LANG can still apply
    for env_key in ('LC_ALL', 'LC_MESSAGES', 'LANGUAGE', 'LANG'):
        for entry in (os.environ.get(env_key) or '').split(':'):
            norm = normalize_locale(entry)
            if norm:
                return norm
    return ''


def locale_candidates(loc: Optional[str]) -> List[str]:
    """Return bundle suffixes from most to least specific ('de_AT' -> ['de_AT', 'de'])."""
    norm = normalize_locale(loc)
    if not norm:
        return []
    out = [norm]
    if '_' in norm:
        out.append(norm.split('_', 1)[0])
    return out


def i18n_dirs(extra: Optional[Iterable[Path]] = None, force: bool = False) -> List[Path]:
    """Return ordered candidate i18n directories.

    Precedence (earlier entries win on duplicate bundle files):
      1. Explicit ``extra`` directories given by the caller
      2. TEXTKIT_I18N_DIRS (os.pathsep-separated list of directories)
      3. TEXTKIT_I18N (single directory path)
      4. CWD/i18n, package local i18n/ (package dir, then repository root)
      5. Frozen (_MEIPASS) i18n directory
    Only the variant without ``extra`` is cached.
    """
    global _I18N_DIR_CACHE
    if extra:
        return build_candidate_paths('i18n', 'TEXTKIT_I18N_DIRS', 'TEXTKIT_I18N', extra=extra)
    if _I18N_DIR_CACHE is not None and not force:
        return _I18N_DIR_CACHE
    _I18N_DIR_CACHE = build_candidate_paths('i18n', 'TEXTKIT_I18N_DIRS', 'TEXTKIT_I18N')
    return _I18N_DIR_CACHE


def clear_i18n_cache():
    """Reset the cached directory list (facilitates deterministic testing)."""
    global _I18N_DIR_CACHE
    _I18N_DIR_CACHE = None


def bundle_file_name(base_name: str, suffix: str) -> str:
    return f"{base_name}_{suffix}.json" if suffix else f"{base_name}.json"


def read_bundle(path: Path, sink: Optional[Sink] = None) -> Optional[Dict[str, str]]:
    """Parse one bundle file; returns None (and logs) when unreadable or not an object."""
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        log_line('warn', f"Skipping unreadable message bundle {path}: {exc}", sink=sink)
        return None
    if not isinstance(data, dict):
        log_line('warn', f"Skipping message bundle {path}: top level is not an object", sink=sink)
        return None
    return {str(k): str(v) for k, v in data.items() if not str(k).startswith('$') and v is not None}


def find_bundles(base_name: str, suffixes: Iterable[str], dirs: Iterable[Path],
                 sink: Optional[Sink] = None) -> Dict[str, Dict[str, str]]:
    """Read the first existing bundle file for each suffix ('' = default bundle)."""
    dirs = list(dirs)
    found: Dict[str, Dict[str, str]] = {}
    for suffix in suffixes:
        if suffix in found:
            continue
        for d in dirs:
            path = d / bundle_file_name(base_name, suffix)
            if not path.is_file():
                continue
            data = read_bundle(path, sink)
            if data is not None:
                found[suffix] = data
                break
    return found


def available_locales(base_name: str, dirs: Optional[Iterable[Path]] = None) -> List[str]:
    """List locale suffixes that have a bundle for ``base_name`` (default bundle excluded)."""
    prefix = f"{base_name}_"
    out: set[str] = set()
    for d in (list(dirs) if dirs is not None else i18n_dirs()):
        if not d.is_dir():
            continue
        for f in d.glob(f"{base_name}_*.json"):
            suffix = f.stem[len(prefix):]
            if _SUFFIX_RE.match(suffix):
                out.add(suffix)
    return sorted(out)


def resolve_chain(requested: str, fallback: str, present: Iterable[str]) -> List[str]:
    """Return suffixes to layer, most specific first, always ending with ''.

    The requested locale's candidates are used when at least one of them has a
    bundle; otherwise the fallback (system default) locale's candidates are
    tried, and finally only the default bundle.
    """
    present = set(present)
    for loc in (requested, fallback):
        cands = [c for c in locale_candidates(loc) if c in present]
        if cands:
            return cands + ['']
    return ['']


class MessageCatalog:
    """Immutable key -> template mapping for one (base_name, locale) pair."""

    def __init__(self, base_name: str, locale: Optional[str], messages: Mapping[str, str], *,
                 resolved_locale: str = '', dirs: Optional[List[Path]] = None,
                 bundles: Optional[Mapping[str, Mapping[str, str]]] = None,
                 fallback_locale: Optional[str] = None, sink: Optional[Sink] = None):
        self._base_name = base_name
        self._locale = normalize_locale(locale)
        self._messages: Mapping[str, str] = MappingProxyType(dict(messages))
        self._resolved_locale = resolved_locale
        self._dirs = dirs
        self._bundles = bundles
        self._fallback_locale = fallback_locale
        self._sink = sink

    @classmethod
    def from_bundles(cls, base_name: str, locale: Optional[str],
                     bundles: Mapping[str, Mapping[str, str]], *,
                     fallback_locale: Optional[str] = None,
                     dirs: Optional[List[Path]] = None,
                     sink: Optional[Sink] = None) -> 'MessageCatalog':
        """Layer in-memory bundles keyed by locale suffix ('' for the default bundle)."""
        norm_bundles = {normalize_locale(k): v for k, v in bundles.items()}
        fallback = detect_system_locale() if fallback_locale is None else fallback_locale
        chain = resolve_chain(normalize_locale(locale), fallback, norm_bundles.keys())
        messages: Dict[str, str] = {}
        for suffix in reversed(chain):
            for k, v in (norm_bundles.get(suffix) or {}).items():
                if not str(k).startswith('$'):
                    messages[str(k)] = str(v)
        if not any(s in norm_bundles for s in chain):
            log_line('warn', f"No message bundle found for '{base_name}' (locale '{locale}'); keys are shown verbatim", sink=sink)
        return cls(base_name, locale, messages, resolved_locale=chain[0] if chain[0] in norm_bundles else '',
                   dirs=dirs, bundles=None if dirs is not None else norm_bundles,
                   fallback_locale=fallback_locale, sink=sink)

    @classmethod
    def load(cls, base_name: str, locale: Optional[str] = None, *,
             dirs: Optional[Iterable[Path]] = None,
             fallback_locale: Optional[str] = None,
             sink: Optional[Sink] = None) -> 'MessageCatalog':
        """Read bundles for ``base_name`` from the i18n directories and layer them.

        ``locale=None`` selects the system locale. ``fallback_locale=None`` means
        the system locale is used when the requested one has no bundle.
        """
        search = i18n_dirs(dirs)
        requested = normalize_locale(locale) if locale else detect_system_locale()
        fallback = detect_system_locale() if fallback_locale is None else fallback_locale
        suffixes: List[str] = locale_candidates(requested) + locale_candidates(fallback) + ['']
        bundles = find_bundles(base_name, suffixes, search, sink)
        return cls.from_bundles(base_name, requested, bundles, fallback_locale=fallback,
                                dirs=search, sink=sink)

    def reload(self, locale: Optional[str]) -> 'MessageCatalog':
        """Return a new catalog for the same base name under ``locale``."""
        if self._bundles is not None:
            return MessageCatalog.from_bundles(self._base_name, locale, self._bundles,
                                               fallback_locale=self._fallback_locale, sink=self._sink)
        return MessageCatalog.load(self._base_name, locale, dirs=self._dirs,
                                   fallback_locale=self._fallback_locale, sink=self._sink)

    @property
    def base_name(self) -> str:
        return self._base_name

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def resolved_locale(self) -> str:
        """Most specific bundle suffix that contributed messages ('' = default only)."""
        return self._resolved_locale

    def contains(self, key: str) -> bool:
        return key in self._messages

    def lookup(self, key: str) -> str:
        return self._messages.get(key, key)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._messages.keys())

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return f"MessageCatalog({self._base_name!r}, {self._locale!r}, {len(self._messages)} keys)"


__all__ = [
    'MessageCatalog', 'normalize_locale', 'detect_system_locale', 'locale_candidates',
    'i18n_dirs', 'clear_i18n_cache', 'read_bundle', 'find_bundles', 'available_locales',
    'resolve_chain', 'bundle_file_name',
]
