"""
Minimal Markdown to HTML rendering for paste pages and previews.

Supports headings (``#`` to ``######``), fenced code blocks and paragraphs.
Everything else is shown as escaped text with its line breaks kept.
"""
from typing import List


def escape_html(text: str) -> str:
    """Escape HTML entities for safe display."""
    return (
        text
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def _heading(line: str) -> str:
    level = len(line) - len(line.lstrip("#"))
    text = line[level:].strip()
    return f"<h{level}>{escape_html(text)}</h{level}>"


def _is_heading(line: str) -> bool:
    hashes = len(line) - len(line.lstrip("#"))
    return 1 <= hashes <= 6 and line[hashes:hashes + 1] in (" ", "")


def render_markdown(text: str) -> str:
    """Render Markdown text to an HTML fragment."""
    blocks: List[str] = []
    paragraph: List[str] = []
    code: List[str] = []
    in_code = False

    def flush_paragraph():
        if paragraph:
            blocks.append("<p>" + "<br>".join(escape_html(l) for l in paragraph) + "</p>")
            paragraph.clear()

    for line in text.splitlines():
        if line.strip().startswith("```"):
            if in_code:
                blocks.append("<pre><code>" + escape_html("\n".join(code)) + "</code></pre>")
                code.clear()
                in_code = False
            else:
                flush_paragraph()
                in_code = True
            continue

        if in_code:
            code.append(line)
        elif not line.strip():
            flush_paragraph()
        elif _is_heading(line):
            flush_paragraph()
            blocks.append(_heading(line))
        else:
            paragraph.append(line)

    # unterminated fence runs to the end
    if in_code:
        blocks.append("<pre><code>" + escape_html("\n".join(code)) + "</code></pre>")
    flush_paragraph()

    return "\n".join(blocks)
