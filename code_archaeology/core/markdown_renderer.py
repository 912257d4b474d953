"""Markdown rendering helpers for fragment descriptions, code and explanations.

Architecture note:
    Era content is authored as plain markdown so that the same text works in
    the JSON files, in the browser and in tests. The renderer turns it into
    HTML fragments on request; highlighting of code blocks is left to the
    client, which only receives a ``language-<era>`` class on the block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown text and code samples into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_code(self, code: str, language: str) -> str:
        """Render a code sample as a ``<pre><code>`` block tagged with its language."""

        return (
            f'<pre><code class="language-{html.escape(language, quote=True)}">'
            f"{html.escape(code)}</code></pre>"
        )


# MarkdownIt is safe for concurrent read-only renders.
renderer = MarkdownRenderer()
