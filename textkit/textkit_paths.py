"""Path detection utilities for source/frozen environments.

Centralizes the PyInstaller-aware resource discovery used by:
- textkit_catalog (message bundles under ``i18n/``)
- textkit_glyphs (icon font and glyph overrides under ``assets/``)
"""
from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional
import os
import sys

from textkit.textkit_util import env_paths


def get_module_base(file_path: str) -> Path:
    """Get module's base directory (source or frozen)."""
    try:
        return Path(file_path).parent.resolve()
    except Exception:
        return Path.cwd()


def get_frozen_base() -> Optional[Path]:
    """Get PyInstaller frozen base directory if available."""
    if getattr(sys, 'frozen', False):
        base = getattr(sys, '_MEIPASS', '')
        if base:
            return Path(base)
    return None


def build_candidate_paths(
    base_name: str,
    env_multi: Optional[str] = None,
    env_single: Optional[str] = None,
    extra: Optional[Iterable[Path]] = None,
) -> List[Path]:
    """Build ordered list of candidate directories for resource discovery.

    Parameters:
    - base_name: subdirectory name (e.g., 'assets', 'i18n')
    - env_multi: environment variable for pathsep-separated list
    - env_single: environment variable for single path (legacy)
    - extra: caller supplied directories, checked before everything else

    Returns deduplicated ordered list:
    1. Caller supplied directories
    2. Environment multi-path variable
    3. Environment single-path variable
    4. CWD/base_name
    5. Module local paths (package dir, repository root)
    6. Frozen base path
    """
    candidates: List[Path] = []

    if extra:
        for p in extra:
            candidates.append(Path(p))

    if env_multi:
        for part in env_paths(env_multi):
            candidates.append(Path(part))

    if env_single:
        single = os.environ.get(env_single)
        if single and single.strip():
            candidates.append(Path(single.strip()))

    candidates.append(Path.cwd() / base_name)

    module_base = get_module_base(__file__)
    candidates.append(module_base / base_name)
    candidates.append(module_base.parent / base_name)

    frozen_base = get_frozen_base()
    if frozen_base:
        candidates.append(frozen_base / base_name)

    # Deduplicate while preserving order
    seen: set[str] = set()
    unique: List[Path] = []
    for p in candidates:
        try:
            resolved = p.resolve()
        except Exception:
            resolved = p
        key = str(resolved)
        if key not in seen:
            seen.add(key)
            unique.append(resolved)

    return unique


__all__ = ['get_module_base', 'get_frozen_base', 'build_candidate_paths']
