"""Resolve catalog text for a key and push it into a widget.

Pipeline per call: catalog lookup -> PlaceholderResolver.bind ->
IconSubstitutor.resolve, once for ``key`` and once for ``key + '_tooltip'``.

Font override is applied to the whole widget (family + enlarged size), not
per glyph span: Tk labels and buttons cannot mix fonts inside one string.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from textkit.textkit_catalog import MessageCatalog
from textkit.textkit_logging import Sink, log_line, log_exception
from textkit.textkit_tokens import IconSubstitutor, PlaceholderResolver, ResolvedText
from textkit.textkit_util import safe_call
from textkit.textkit_widgets import Capability, adapt_widget, capabilities_of, widget_type_name

TOOLTIP_SUFFIX = '_tooltip'


def tooltip_key(key: str) -> str:
    return f"{key}{TOOLTIP_SUFFIX}"


class TextApplier:
    """Stateless orchestration over a catalog provider, resolver and substitutor.

    ``catalog`` is a zero-argument callable returning the current catalog; it is
    called once per operation so a concurrent locale swap is never seen halfway.
    """

    def __init__(self, catalog: Callable[[], MessageCatalog], resolver: PlaceholderResolver,
                 substitutor: IconSubstitutor, *, sink: Optional[Sink] = None):
        self._catalog = catalog
        self._resolver = resolver
        self._substitutor = substitutor
        self._sink = sink

    def resolve(self, catalog: MessageCatalog, key: str, args: Sequence[object] = ()) -> ResolvedText:
        """Bound and icon-resolved text for ``key``; the key itself, untouched, when unknown."""
        if not catalog.contains(key):
            return ResolvedText(key)
        return self._substitutor.resolve(self._resolver.bind(catalog.lookup(key), args))

    def resolve_tooltip(self, catalog: MessageCatalog, key: str,
                        args: Sequence[object] = ()) -> Optional[ResolvedText]:
        """Tooltip for ``key`` or None when the catalog has no usable ``<key>_tooltip`` entry."""
        tip_key = tooltip_key(key)
        if not catalog.contains(tip_key):
            return None
        tip = self.resolve(catalog, tip_key, args)
        if not tip.text or tip.text == tip_key:
            return None
        return tip

    def apply(self, widget: Any, key: str, args: Sequence[object] = ()) -> Optional[ResolvedText]:
        """Resolve ``key`` and apply text, tooltip and icon font to ``widget``.

        Returns the applied text, or None when the widget supports none of the
        text/tooltip/font capabilities (a warning is logged, nothing mutated).
        """
        catalog = self._catalog()
        text = self.resolve(catalog, key, args)
        tooltip = self.resolve_tooltip(catalog, key, args)
        if not self.apply_resolved(widget, text, tooltip):
            return None
        return text

    def apply_resolved(self, widget: Any, text: ResolvedText, tooltip: Optional[ResolvedText] = None) -> bool:
        target = adapt_widget(widget)
        caps = capabilities_of(target)
        if not caps:
            log_line('warn', f"The component type '{widget_type_name(widget)}' is not supported", sink=self._sink)
            return False

        def _report(what: str):
            return lambda exc: log_exception(f"Could not set {what} on '{widget_type_name(widget)}'", exc, sink=self._sink)

        if Capability.TEXT in caps:
            safe_call(target.set_text, text.text, on_error=_report('text'))
        if Capability.TOOLTIP in caps and tooltip is not None:
            safe_call(target.set_tooltip, tooltip.text, on_error=_report('tooltip'))
        font = self._substitutor.font
        if Capability.FONT in caps and text.has_glyphs and font is not None:
            base = safe_call(target.base_font_size, on_error=_report('icon font'))
            if base is not None:
                size = int(round(base * self._substitutor.scale))
                safe_call(target.set_font, font.family, size, on_error=_report('icon font'))
        return True


__all__ = ['TOOLTIP_SUFFIX', 'tooltip_key', 'TextApplier']
