"""Macro scanner and expander for the ``{{Name}}`` / ``{{Name[param]}}`` syntax

The token syntax is stored in user content upstream, so the grammar is fixed:

    token      := "{{" identifier ( "[" parameter "]" )? "}}"
    identifier := one or more ASCII letters, digits or underscores
    parameter  := any characters up to the next "]"

Scanning is a single left-to-right pass over the input. Output produced by a
handler is never rescanned, so macros do not expand recursively.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from notionpub.config import Settings
from notionpub.core.models import Post, Segment
from notionpub.core.plugins.registry import PluginRegistry


logger = logging.getLogger(__name__)

OPEN = '{{'
CLOSE = '}}'
UNKNOWN_PLUGIN_TEMPLATE = '<div class="plugin-warning">⚠️ Unknown plugin: {name}</div>'


@dataclass(frozen=True)
class MacroToken:
    start: int
    end: int                    # exclusive
    name: str
    parameter: Optional[str]    # None when no [..] part was given
    text: str                   # exact source substring


@dataclass
class RenderContext:
    """What a handler may inspect: the text being scanned, settings, and the owning post."""
    source_text: str
    settings: Settings
    post: Post


def _is_name_char(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c == '_')


def _match_at(text: str, start: int) -> MacroToken | None:
    """Match a token beginning with OPEN at start, or return None."""
    pos = start + len(OPEN)
    while pos < len(text) and _is_name_char(text[pos]):
        pos += 1
    if pos == start + len(OPEN):
        return None
    name = text[start + len(OPEN):pos]

    parameter = None
    if pos < len(text) and text[pos] == '[':
        close_bracket = text.find(']', pos + 1)
        if close_bracket == -1:
            return None
        parameter = text[pos + 1:close_bracket]
        pos = close_bracket + 1

    if not text.startswith(CLOSE, pos):
        return None
    end = pos + len(CLOSE)
    return MacroToken(start=start, end=end, name=name, parameter=parameter, text=text[start:end])


def scan_tokens(text: str) -> Iterator[MacroToken]:
    """Yield non-overlapping macro tokens left to right."""
    pos = text.find(OPEN)
    while pos != -1:
        token = _match_at(text, pos)
        if token is None:
            pos = text.find(OPEN, pos + 1)
            continue
        yield token
        pos = text.find(OPEN, token.end)


def unknown_plugin_fragment(name: str) -> str:
    return UNKNOWN_PLUGIN_TEMPLATE.format(name=name)


class MacroExpander:
    """Substitute every macro token in a text using handlers from a registry.

    - known plugin: replaced by the handler output
    - unknown plugin: replaced by a visible warning fragment naming it
    - handler raises: token left verbatim, failure logged

    Substitution is positional. Identical token texts within one call are
    rendered once and share that output.
    """

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    def expand(self, text: str, context: RenderContext) -> str:
        if OPEN not in text:
            return text
        return ''.join(s.text for s in self.split(text, context))

    def split(self, text: str, context: RenderContext) -> list[Segment]:
        """Expand text into ordered segments, flagging rendered macro output as markup.

        A token whose handler failed keeps its source text and stays literal.
        """
        segments: list[Segment] = []
        rendered: dict[str, str] = {}
        pos = 0
        for token in scan_tokens(text):
            if token.start > pos:
                segments.append(Segment(text=text[pos:token.start]))
            if token.text not in rendered:
                rendered[token.text] = self._render(token, context)
            output = rendered[token.text]
            segments.append(Segment(text=output, markup=output != token.text))
            pos = token.end
        if pos < len(text) or not segments:
            segments.append(Segment(text=text[pos:]))
        return segments

    def _render(self, token: MacroToken, context: RenderContext) -> str:
        plugin = self.registry.resolve(token.name)
        if plugin is None:
            logger.warning("Unknown plugin: %s", token.name)
            return unknown_plugin_fragment(token.name)

        try:
            output = plugin.render(token.parameter or '', context)
            if not isinstance(output, str):
                raise TypeError(f"render() returned {type(output).__name__}, expected str")
        except Exception:
            logger.warning("Plugin %s failed to render %s", token.name, token.text, exc_info=True)
            return token.text
        return output
