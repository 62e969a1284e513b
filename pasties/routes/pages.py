"""
HTML page routes.
Serves the editor, rendered pastes and error pages.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from pasties.dependencies import get_manager
from pasties.errors import PasteError
from pasties.manager import PasteManager
from pasties.markdown import escape_html, render_markdown
from pasties.models import PasteView

router = APIRouter()

_STYLE = """
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
            padding: 20px;
        }
        .container {
            background: white;
            border-radius: 10px;
            box-shadow: 0 10px 40px rgba(0, 0, 0, 0.3);
            max-width: 900px;
            width: 100%;
            padding: 40px;
        }
        h1 {
            color: #333;
            margin-bottom: 10px;
            font-size: 24px;
        }
        .meta {
            color: #666;
            font-size: 12px;
            margin-bottom: 30px;
            font-family: monospace;
            word-break: break-all;
        }
        .content {
            line-height: 1.6;
            color: #333;
            word-wrap: break-word;
        }
        .content p, .content pre, .content h1, .content h2, .content h3 {
            margin-bottom: 12px;
        }
        pre {
            background: #f5f5f5;
            border: 1px solid #ddd;
            border-radius: 5px;
            padding: 12px;
            overflow-x: auto;
        }
        input, textarea {
            width: 100%;
            margin-bottom: 12px;
            padding: 10px;
            border: 1px solid #ddd;
            border-radius: 5px;
            font-family: "Courier New", monospace;
        }
        textarea {
            min-height: 300px;
        }
        button {
            background: #667eea;
            color: white;
            border: none;
            padding: 12px 30px;
            border-radius: 5px;
            font-weight: 600;
            cursor: pointer;
        }
        .footer {
            margin-top: 20px;
            text-align: center;
            color: #999;
            font-size: 12px;
        }
        .footer a {
            color: #667eea;
            text-decoration: none;
        }
"""

_EDITOR_SCRIPT = """
    <script>
    function describeError(detail) {
        // request validation errors arrive as a list of {loc, msg, type}
        if (Array.isArray(detail)) {
            return detail.map((entry) => entry.msg).join("; ");
        }
        return detail;
    }

    document.getElementById("editor").addEventListener("submit", async (event) => {
        event.preventDefault();
        const form = event.target;
        const editing = form.dataset.original !== "";
        const body = editing
            ? {url: form.dataset.original, password: form.password.value, content: form.content.value,
               new_url: form.url.value, new_password: form.new_password.value}
            : {url: form.url.value, password: form.password.value, content: form.content.value};
        const response = await fetch("/api/", {
            method: editing ? "PUT" : "POST",
            headers: {"Content-Type": "application/json"},
            body: JSON.stringify(body),
        });
        const data = await response.json();
        const status = document.getElementById("status");
        if (!response.ok) {
            status.textContent = describeError(data.detail);
        } else if (editing) {
            window.location = "/" + data.url;
        } else {
            status.textContent = "Saved at " + data.link + " with password " + data.password;
        }
    });
    </script>
"""


def _render_page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(title)} - Pasties</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
{body}
        <div class="footer">
            <p><a href="/">Create a new paste</a></p>
        </div>
    </div>
</body>
</html>"""


def _render_info_page(title: str, message: str, status_code: int) -> HTMLResponse:
    body = f"""        <h1>{escape_html(title)}</h1>
        <p class="content">{escape_html(message)}</p>"""
    return HTMLResponse(_render_page(title, body), status_code=status_code)


def _render_editor(paste: Optional[PasteView] = None) -> str:
    original = escape_html(paste.url) if paste else ""
    content = escape_html(paste.content) if paste else ""
    if paste:
        fields = f"""            <input name="url" placeholder="New URL (leave empty to keep {original})">
            <input name="password" type="password" placeholder="Current password" required>
            <input name="new_password" type="password" placeholder="New password (leave empty to keep)">"""
    else:
        fields = """            <input name="url" placeholder="Custom URL (optional)">
            <input name="password" type="password" placeholder="Editing password (optional)">"""
    heading = f"Edit {original}" if paste else "New paste"
    body = f"""        <h1>{heading}</h1>
        <form id="editor" data-original="{original}">
{fields}
            <textarea name="content" placeholder="Markdown content" required>{content}</textarea>
            <button type="submit">Save</button>
        </form>
        <p class="meta" id="status"></p>
{_EDITOR_SCRIPT}"""
    return _render_page(f"Edit {paste.url}" if paste else "New paste", body)


@router.get("/", response_class=HTMLResponse)
def editor() -> str:
    """Serve the create paste HTML page."""
    return _render_editor()


@router.get("/{url}", response_class=HTMLResponse)
def view_paste(url: str, manager: PasteManager = Depends(get_manager)):
    """View a paste with its Markdown rendered as HTML."""
    try:
        paste = manager.retrieve_paste(url)
    except PasteError as e:
        return _render_info_page("Error", e.message, e.status_code)

    body = f"""        <h1>{escape_html(paste.url)}</h1>
        <div class="meta">Published {paste.date_published} · Edited {paste.date_edited} · <a href="/{escape_html(paste.url)}/edit">edit</a></div>
        <div class="content">{render_markdown(paste.content)}</div>"""
    return _render_page(paste.url, body)


@router.get("/{url}/edit", response_class=HTMLResponse)
def edit_paste(url: str, manager: PasteManager = Depends(get_manager)):
    """Serve the editor pre-filled with an existing paste."""
    try:
        paste = manager.retrieve_paste(url)
    except PasteError as e:
        return _render_info_page("Error", e.message, e.status_code)
    return _render_editor(paste)


def not_found_page() -> HTMLResponse:
    return _render_info_page("Error 404", "The requested resource could not be found", 404)
