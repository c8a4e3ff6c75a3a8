"""Placeholder tokenizer, positional argument binding and icon substitution.

Template grammar: ``{{...}}`` spans matched non-greedily (the first ``}}``
closes the token, no nesting, no newlines inside a token). A span whose inner
text starts with ``icon:`` is an icon token; anything else is an argument token.

    tokenize('Fix {{count}} {{icon:alert}}')
      -> [Literal('Fix '), ArgToken('{{count}}', 'count'), Literal(' '),
          IconToken('{{icon:alert}}', 'alert')]

Stage 1 (PlaceholderResolver.bind) fills argument tokens from positional
arguments. Stage 2 (IconSubstitutor.resolve) replaces icon tokens with glyph
characters and reports where they ended up, so a renderer can switch to the
icon font for those ranges. Stage 2 matches ``{{icon:...}}`` on its own, so
an unclosed ``{{`` ahead of an icon swallows it in stage 1 only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union
import re

from textkit.textkit_glyphs import IconFont, IconGlyphTable, UnknownIconError
from textkit.textkit_logging import Sink, log_line

_TOKEN_RE = re.compile(r'\{\{(.+?)\}\}')
_ICON_RE = re.compile(r'\{\{icon:(.+?)\}\}')
ICON_PREFIX = 'icon:'
# Icon glyphs render larger than the surrounding text
ICON_SCALE = 1.5


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class ArgToken:
    text: str
    name: str


@dataclass(frozen=True)
class IconToken:
    text: str
    name: str


Token = Union[Literal, ArgToken, IconToken]


def tokenize(template: str) -> List[Token]:
    """Split ``template`` into literals and typed placeholder tokens, left to right."""
    out: List[Token] = []
    pos = 0
    for m in _TOKEN_RE.finditer(template):
        if m.start() > pos:
            out.append(Literal(template[pos:m.start()]))
        inner = m.group(1)
        if inner.startswith(ICON_PREFIX):
            out.append(IconToken(m.group(0), inner[len(ICON_PREFIX):]))
        else:
            out.append(ArgToken(m.group(0), inner))
        pos = m.end()
    if pos < len(template):
        out.append(Literal(template[pos:]))
    return out


class PlaceholderResolver:
    """Binds positional arguments into argument tokens; icon tokens pass through."""

    def bind(self, template: str, args: Iterable[object] = ()) -> str:
        """Return ``template`` with argument tokens replaced, left to right.

        Every argument-token occurrence consumes one argument while any remain.
        All occurrences of the same token text show the value bound to the first
        one, so a repeated ``{{name}}`` uses up an argument it never displays.
        Tokens left over when arguments run out stay verbatim; surplus
        arguments are ignored. Substituted values are not scanned again.
        """
        values = [str(a) for a in args]
        if '{{' not in template:
            return template
        cursor = 0
        bound: Dict[str, str] = {}
        parts: List[str] = []
        for tok in tokenize(template):
            if isinstance(tok, ArgToken):
                if cursor < len(values):
                    bound.setdefault(tok.text, values[cursor])
                    cursor += 1
                parts.append(bound.get(tok.text, tok.text))
            else:
                parts.append(tok.text)
        return ''.join(parts)


@dataclass(frozen=True)
class GlyphSpan:
    """Range of a resolved string that must be drawn with the icon font."""
    start: int
    length: int
    icon: str
    code_point: int
    scale: float = ICON_SCALE
    family: str = ''

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def utf16_length(self) -> int:
        """Length in UTF-16 code units (2 for glyphs outside the BMP)."""
        return 2 if self.code_point > 0xFFFF else 1


@dataclass(frozen=True)
class ResolvedText:
    text: str
    spans: Tuple[GlyphSpan, ...] = ()

    @property
    def has_glyphs(self) -> bool:
        return bool(self.spans)

    def __str__(self) -> str:
        return self.text


class IconSubstitutor:
    """Replaces ``{{icon:name}}`` tokens with glyphs from an IconGlyphTable.

    Without an icon font (``font=None``) substitution is disabled and icon
    tokens are returned verbatim, since the glyphs could not be drawn.
    """

    def __init__(self, glyphs: IconGlyphTable, font: Optional[IconFont], *,
                 scale: float = ICON_SCALE, sink: Optional[Sink] = None):
        self._glyphs = glyphs
        self._font = font
        self._scale = scale
        self._sink = sink

    @property
    def enabled(self) -> bool:
        return self._font is not None

    @property
    def font(self) -> Optional[IconFont]:
        return self._font

    @property
    def scale(self) -> float:
        return self._scale

    def resolve(self, text: str) -> ResolvedText:
        if self._font is None or '{{' not in text:
            return ResolvedText(text)
        parts: List[str] = []
        spans: List[GlyphSpan] = []
        pos = 0
        last = 0
        # icon tokens only: a stray "{{" before an icon must not hide it
        for m in _ICON_RE.finditer(text):
            literal = text[last:m.start()]
            parts.append(literal)
            pos += len(literal)
            name = m.group(1)
            try:
                cp = self._glyphs.code_point(name)
            except UnknownIconError:
                log_line('error', f"There was a problem setting the icon '{name}': unknown icon name", sink=self._sink)
                piece = m.group(0)
            else:
                piece = chr(cp)
                spans.append(GlyphSpan(pos, len(piece), name, cp, self._scale, self._font.family))
            parts.append(piece)
            pos += len(piece)
            last = m.end()
        parts.append(text[last:])
        return ResolvedText(''.join(parts), tuple(spans))


__all__ = [
    'ICON_PREFIX', 'ICON_SCALE', 'Literal', 'ArgToken', 'IconToken', 'Token', 'tokenize',
    'PlaceholderResolver', 'GlyphSpan', 'ResolvedText', 'IconSubstitutor',
]
