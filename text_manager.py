"""
Localized widget text with Material Design icon glyphs.

TextManager is the single entry point a GUI uses to put translated text on its
widgets:

    tm = TextManager('toolbar', 'de')
    tm.set_text(undo_button, 'undo')            # text, tooltip, icon font
    tm.get_text('errors_found', 3)              # 'Behebe 3 Fehler'
    tm.set_locale('en')                         # swap catalogs at runtime

Message templates come from JSON bundles (see textkit.textkit_catalog) and may
contain ``{{name}}`` argument slots, bound positionally, and ``{{icon:name}}``
slots that become glyphs of the icon font. A ``<key>_tooltip`` entry, when
present, becomes the widget tooltip.

Nothing here raises to the caller for missing keys, unknown icons, a missing
icon font or unsupported widgets: those are logged and the UI keeps running.

Run as a script to preview catalog entries from the command line:

    python text_manager.py --base toolbar --lang de errors_found 3
"""

import argparse
import functools
import json
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from textkit.textkit_apply import TextApplier
from textkit.textkit_catalog import MessageCatalog, available_locales, i18n_dirs
from textkit.textkit_glyphs import IconFont, IconGlyphTable, default_glyph_table, load_icon_font
from textkit.textkit_logging import Sink, log_line, log_exception
from textkit.textkit_tokens import IconSubstitutor, PlaceholderResolver, ResolvedText

FontLoader = Callable[..., Optional[IconFont]]


class TextManager:
    """Text resources for one catalog base name, switchable between locales."""

    def __init__(self, base_name: Union[str, type], locale: Optional[str] = None, *,
                 i18n_dirs: Optional[Iterable[Path]] = None,
                 glyphs: Optional[IconGlyphTable] = None,
                 font_loader: Optional[FontLoader] = load_icon_font,
                 fallback_locale: Optional[str] = None,
                 sink: Optional[Sink] = None):
        if not isinstance(base_name, str):
            base_name = base_name.__name__
        self._sink = sink
        self._catalog = MessageCatalog.load(base_name, locale, dirs=i18n_dirs,
                                            fallback_locale=fallback_locale, sink=sink)
        self._glyphs = glyphs if glyphs is not None else default_glyph_table(sink=sink)
        self._icon_font = self._load_icon_font(font_loader)
        self._resolver = PlaceholderResolver()
        self._substitutor = IconSubstitutor(self._glyphs, self._icon_font, sink=sink)
        self._applier = TextApplier(lambda: self._catalog, self._resolver, self._substitutor, sink=sink)

    def _load_icon_font(self, font_loader: Optional[FontLoader]) -> Optional[IconFont]:
        font = None
        if font_loader is not None:
            try:
                font = font_loader(sink=self._sink)
            except Exception as exc:
                log_exception("There was a problem loading the Material Design Icons font", exc, sink=self._sink)
                font = None
        if font is None:
            log_line('info', "Icon font unavailable; {{icon:...}} placeholders are left unresolved", sink=self._sink)
        return font

    @property
    def base_name(self) -> str:
        return self._catalog.base_name

    @property
    def locale(self) -> str:
        return self._catalog.locale

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    @property
    def glyphs(self) -> IconGlyphTable:
        return self._glyphs

    @property
    def icon_font(self) -> Optional[IconFont]:
        return self._icon_font

    def set_locale(self, locale: Optional[str]) -> None:
        """Reload the catalog for the current base name under ``locale``."""
        # single assignment: readers holding the old catalog stay consistent
        self._catalog = self._catalog.reload(locale)

    def get_text(self, key: str, *args: Any) -> str:
        """Template for ``key`` with arguments bound (icons not resolved); ``key`` if unknown."""
        catalog = self._catalog
        if not catalog.contains(key):
            return key
        return self._resolver.bind(catalog.lookup(key), args)

    def resolve_text(self, key: str, *args: Any) -> ResolvedText:
        """Like get_text, with icon placeholders replaced by glyphs."""
        return self._applier.resolve(self._catalog, key, args)

    def get_tooltip(self, key: str, *args: Any) -> Optional[str]:
        tip = self._applier.resolve_tooltip(self._catalog, key, args)
        return tip.text if tip is not None else None

    def set_text(self, widget: Any, key: str, *args: Any) -> Optional[ResolvedText]:
        """Apply text, tooltip and icon font for ``key`` to ``widget``."""
        return self._applier.apply(widget, key, args)


def _span_json(span) -> dict:
    return {
        'start': span.start,
        'length': span.length,
        'icon': span.icon,
        'code_point': f"U+{span.code_point:04X}",
        'scale': span.scale,
        'family': span.family,
    }


def main(argv=None):
    ap = argparse.ArgumentParser(description='Resolve localized widget text from message bundles')
    ap.add_argument('key', nargs='?', help='Message key to resolve')
    ap.add_argument('args', nargs='*', help='Positional arguments for {{...}} placeholders')
    ap.add_argument('--base', default='toolbar', help='Bundle base name (default: toolbar)')
    ap.add_argument('--lang', help='Locale tag, e.g. de or de_AT (default: system locale)')
    ap.add_argument('--i18n-dir', action='append', default=[], help='Extra bundle directory (repeatable, searched first)')
    ap.add_argument('--json', action='store_true', help='Print a JSON object instead of plain text')
    ap.add_argument('--assume-font', action='store_true', help='Resolve icons even if the icon font file is not found')
    ap.add_argument('--list-icons', action='store_true', help='List known icon names and code points')
    ap.add_argument('--list-langs', action='store_true', help='List locales that have a bundle for --base')
    args = ap.parse_args(argv)

    if args.list_icons:
        for name, cp in sorted(default_glyph_table().items()):
            print(f"{name}\tU+{cp:04X}")
        return 0
    dirs = [Path(d) for d in args.i18n_dir]
    if args.list_langs:
        for code in available_locales(args.base, i18n_dirs(dirs)):
            print(code)
        return 0
    if not args.key:
        ap.error('a message key is required')

    if args.assume_font:
        font_loader: FontLoader = lambda sink=None: IconFont()
    else:
        # locating the file is enough for a console preview
        font_loader = functools.partial(load_icon_font, registrar=None)
    tm = TextManager(args.base, args.lang, i18n_dirs=dirs, font_loader=font_loader)
    resolved = tm.resolve_text(args.key, *args.args)
    tip = tm.get_tooltip(args.key, *args.args)

    if args.json:
        out = {
            'key': args.key,
            'locale': tm.locale,
            'text': resolved.text,
            'tooltip': tip,
            'spans': [_span_json(s) for s in resolved.spans],
        }
        print(json.dumps(out, ensure_ascii=False, indent=2))
    else:
        print(resolved.text)
        if tip is not None:
            print(f"tooltip: {tip}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
