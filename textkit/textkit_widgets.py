"""Widget capability classification and Tkinter adapters.

A target widget is described only by what it can do:

  TextSettable      set_text(text)
  TooltipSettable   set_tooltip(text)
  FontOverridable   base_font_size() / set_font(family, size)

Any object implementing a subset of these (structurally, no base class needed)
is accepted. Plain Tk/ttk widgets are wrapped by ``adapt_widget`` into an
adapter exposing whatever their options allow.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Protocol, Tuple, runtime_checkable


class Capability(Enum):
    TEXT = 'text'
    TOOLTIP = 'tooltip'
    FONT = 'font'


@runtime_checkable
class TextSettable(Protocol):
    def set_text(self, text: str) -> None: ...


@runtime_checkable
class TooltipSettable(Protocol):
    def set_tooltip(self, text: str) -> None: ...


@runtime_checkable
class FontOverridable(Protocol):
    def base_font_size(self) -> int: ...
    def set_font(self, family: str, size: int) -> None: ...


def capabilities_of(widget: Any) -> FrozenSet[Capability]:
    caps = set()
    if isinstance(widget, TextSettable):
        caps.add(Capability.TEXT)
    if isinstance(widget, TooltipSettable):
        caps.add(Capability.TOOLTIP)
    if isinstance(widget, FontOverridable):
        caps.add(Capability.FONT)
    return frozenset(caps)


def widget_type_name(widget: Any) -> str:
    target = widget.widget if isinstance(widget, TkWidgetAdapter) else widget
    cls = type(target)
    return f"{cls.__module__}.{cls.__qualname__}"


class HoverTooltip:
    """Small undecorated window shown while the pointer rests over a widget.

    One instance per widget; calling ``attach`` again only swaps the text.
    """

    _ATTR = '_textkit_tooltip'

    def __init__(self, widget: Any, text: str, delay_ms: int = 500):
        self.widget = widget
        self.text = text
        self.delay_ms = delay_ms
        self._tip = None
        self._after_id = None
        widget.bind('<Enter>', self._schedule, add='+')
        widget.bind('<Leave>', self._hide, add='+')
        widget.bind('<ButtonPress>', self._hide, add='+')

    @classmethod
    def attach(cls, widget: Any, text: str) -> 'HoverTooltip':
        existing = getattr(widget, cls._ATTR, None)
        if isinstance(existing, cls):
            existing.text = text
            return existing
        tip = cls(widget, text)
        setattr(widget, cls._ATTR, tip)
        return tip

    def _schedule(self, _event=None):
        self._cancel()
        self._after_id = self.widget.after(self.delay_ms, self._show)

    def _cancel(self):
        if self._after_id is not None:
            self.widget.after_cancel(self._after_id)
            self._after_id = None

    def _show(self):
        self._after_id = None
        if self._tip is not None or not self.text:
            return
        import tkinter as tk
        x = self.widget.winfo_rootx() + 12
        y = self.widget.winfo_rooty() + self.widget.winfo_height() + 4
        tw = tk.Toplevel(self.widget)
        tw.wm_overrideredirect(True)
        tw.wm_geometry(f"+{x}+{y}")
        tk.Label(tw, text=self.text, justify='left', background='#ffffe0',
                 relief='solid', borderwidth=1, padx=4, pady=2).pack()
        self._tip = tw

    def _hide(self, _event=None):
        self._cancel()
        if self._tip is not None:
            self._tip.destroy()
            self._tip = None


def _font_size_from_spec(spec: Any) -> Optional[int]:
    """Size from a tuple/list font spec like ('Segoe UI', 10, 'bold'); None if not a tuple."""
    if isinstance(spec, (tuple, list)) and len(spec) >= 2:
        try:
            return int(spec[1])
        except (TypeError, ValueError):
            return None
    return None


class TkWidgetAdapter:
    """Base for adapters around a Tk widget (``widget`` attribute)."""

    # size before the first icon font override, stored on the widget itself
    _BASE_SIZE_ATTR = '_textkit_base_font_size'

    def __init__(self, widget: Any):
        self.widget = widget

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.widget!r})"


class _TkText:
    def set_text(self, text: str) -> None:
        self.widget.configure(text=text)  # type: ignore[attr-defined]


class _TkTooltip:
    def set_tooltip(self, text: str) -> None:
        HoverTooltip.attach(self.widget, text)  # type: ignore[attr-defined]


class _TkFont:
    def base_font_size(self) -> int:
        """Font size the widget had before any icon font override."""
        w = self.widget  # type: ignore[attr-defined]
        cached = getattr(w, TkWidgetAdapter._BASE_SIZE_ATTR, None)
        if cached is not None:
            return cached
        spec = w.cget('font')
        size = _font_size_from_spec(spec)
        if size is None:
            import tkinter.font as tkfont
            if spec:
                size = int(tkfont.Font(root=w, font=spec).cget('size'))
            else:
                size = int(tkfont.nametofont('TkDefaultFont').cget('size'))
        setattr(w, TkWidgetAdapter._BASE_SIZE_ATTR, size)
        return size

    def set_font(self, family: str, size: int) -> None:
        self.widget.configure(font=(family, size))  # type: ignore[attr-defined]


_ADAPTER_CLASSES: Dict[Tuple[bool, bool], type] = {}


def _adapter_class(has_text: bool, has_font: bool) -> type:
    key = (has_text, has_font)
    cls = _ADAPTER_CLASSES.get(key)
    if cls is None:
        bases: list = []
        if has_text:
            bases.append(_TkText)
        bases.append(_TkTooltip)
        if has_font:
            bases.append(_TkFont)
        bases.append(TkWidgetAdapter)
        name = 'Tk' + ('Text' if has_text else '') + ('Font' if has_font else '') + 'Adapter'
        cls = type(name, tuple(bases), {})
        _ADAPTER_CLASSES[key] = cls
    return cls


def is_tk_widget(widget: Any) -> bool:
    return all(callable(getattr(widget, attr, None)) for attr in ('configure', 'cget', 'keys', 'bind'))


def adapt_widget(widget: Any) -> Any:
    """Return ``widget`` itself if it already exposes a capability, else a Tk adapter.

    Objects that are neither are returned unchanged (and classify as empty).
    """
    if capabilities_of(widget):
        return widget
    if is_tk_widget(widget):
        opts = set(widget.keys())
        return _adapter_class('text' in opts, 'font' in opts)(widget)
    return widget


__all__ = [
    'Capability', 'TextSettable', 'TooltipSettable', 'FontOverridable', 'capabilities_of',
    'widget_type_name', 'HoverTooltip', 'TkWidgetAdapter', 'is_tk_widget', 'adapt_widget',
]
