"""HTML pages for the article listing, the saved view and the notes view."""

from __future__ import annotations

from html import escape
from typing import Sequence
from urllib.parse import urlparse

from headlinescraper.models import Article, Note

__all__ = ["is_safe_link", "render_index", "render_notes", "render_saved"]

SAFE_LINK_SCHEMES = {"", "http", "https"}
_URL_IGNORED_CHARS = str.maketrans("", "", "\t\r\n")
_URL_STRIPPED_CHARS = "".join(chr(code) for code in range(33))

LAYOUT_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__TITLE__ | Headline Scraper</title>
    <style>
      :root {
        color-scheme: light;
        font-family: Georgia, "Times New Roman", serif;
        --color-paper: #faf8f3;
        --color-ink: #1d1d1b;
        --color-rule: #d9d4c7;
        --color-accent: #326891;
        background: var(--color-paper);
        color: var(--color-ink);
      }

      body {
        margin: 0;
      }

      header {
        border-bottom: 3px double var(--color-rule);
        padding: 24px 40px 16px;
        display: flex;
        align-items: baseline;
        justify-content: space-between;
        gap: 24px;
      }

      header h1 {
        margin: 0;
        font-size: 2rem;
      }

      nav {
        display: flex;
        gap: 16px;
        font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
      }

      nav a {
        color: var(--color-accent);
        text-decoration: none;
        font-weight: 600;
      }

      main {
        max-width: 860px;
        margin: 0 auto;
        padding: 32px 40px 64px;
      }

      .article {
        border-bottom: 1px solid var(--color-rule);
        padding: 16px 0;
        display: flex;
        justify-content: space-between;
        gap: 16px;
      }

      .article h2 {
        margin: 0;
        font-size: 1.2rem;
      }

      .article a {
        color: inherit;
      }

      .actions {
        display: flex;
        gap: 8px;
        flex-shrink: 0;
      }

      button {
        appearance: none;
        border: 1px solid var(--color-accent);
        border-radius: 4px;
        padding: 6px 12px;
        background: white;
        color: var(--color-accent);
        font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
        cursor: pointer;
      }

      button:hover {
        background: var(--color-accent);
        color: white;
      }

      .empty {
        color: #6b675e;
        font-style: italic;
      }

      .note {
        border-left: 3px solid var(--color-rule);
        padding: 4px 12px;
        margin: 12px 0;
      }

      form {
        display: grid;
        gap: 8px;
        margin-top: 24px;
      }

      input,
      textarea {
        font: inherit;
        padding: 8px;
        border: 1px solid var(--color-rule);
      }
    </style>
  </head>
  <body>
    <header>
      <h1>Headline Scraper</h1>
      <nav>
        <a href="/">Home</a>
        <a href="/saved">Saved articles</a>
        <a href="/scrape">Scrape new articles</a>
      </nav>
    </header>
    <main>
__CONTENT__
    </main>
    <script>
      const send = async (method, url, payload) => {
        const response = await fetch(url, {
          method,
          headers: { "Content-Type": "application/json" },
          body: payload === undefined ? undefined : JSON.stringify(payload),
        });
        window.location.assign(response.redirected ? response.url : window.location.href);
      };

      document.addEventListener("click", (event) => {
        const button = event.target.closest("button[data-action]");
        if (!button) {
          return;
        }
        const { action, id } = button.dataset;
        if (action === "save") {
          send("PUT", `/${id}`, { saved: true });
        } else if (action === "unsave") {
          send("PUT", `/delete/${id}`, { saved: false });
        } else if (action === "delete-note") {
          send("PUT", `/note/${id}`);
        }
      });

      const noteForm = document.getElementById("note-form");
      if (noteForm) {
        noteForm.addEventListener("submit", (event) => {
          event.preventDefault();
          const data = new FormData(noteForm);
          send("POST", noteForm.action, {
            title: data.get("title") || "",
            body: data.get("body") || "",
          });
        });
      }
    </script>
  </body>
</html>
"""


def _page(title: str, content: str) -> str:
    return LAYOUT_HTML.replace("__TITLE__", escape(title)).replace("__CONTENT__", content)


def is_safe_link(link: str) -> bool:
    """Return ``True`` for relative and http(s) links; scraped hrefs are untrusted."""

    if not link:
        return False
    # Browsers drop tabs and newlines anywhere in a URL and control characters at its ends.
    cleaned = link.translate(_URL_IGNORED_CHARS).strip(_URL_STRIPPED_CHARS)
    return urlparse(cleaned).scheme.lower() in SAFE_LINK_SCHEMES


def _headline(article: Article) -> str:
    title = escape(article.title) or "<span class=\"empty\">Untitled</span>"
    if is_safe_link(article.link):
        return f'<h2><a href="{escape(article.link)}" target="_blank" rel="noopener">{title}</a></h2>'
    return f"<h2>{title}</h2>"


def _article_row(article: Article, actions: str) -> str:
    return (
        f'<div class="article" id="article-{escape(article.id)}">'
        f"<div>{_headline(article)}</div>"
        f'<div class="actions">{actions}</div>'
        "</div>"
    )


def render_index(articles: Sequence[Article]) -> str:
    if not articles:
        return _page(
            "Home",
            '<p class="empty">No articles yet. Use "Scrape new articles" to pull the latest headlines.</p>',
        )

    rows = []
    for article in articles:
        if article.saved:
            action = "<span class=\"empty\">Saved</span>"
        else:
            action = f'<button data-action="save" data-id="{escape(article.id)}">Save article</button>'
        rows.append(_article_row(article, action))
    return _page("Home", "\n".join(rows))


def render_saved(articles: Sequence[Article]) -> str:
    if not articles:
        return _page("Saved", '<p class="empty">You have not saved any articles.</p>')

    rows = []
    for article in articles:
        article_id = escape(article.id)
        actions = (
            f'<a href="/notes/{article_id}"><button type="button">Notes ({len(article.notes)})</button></a>'
            f'<button data-action="unsave" data-id="{article_id}">Remove</button>'
        )
        rows.append(_article_row(article, actions))
    return _page("Saved", "\n".join(rows))


def render_notes(article: Article, notes: Sequence[Note]) -> str:
    parts = [_headline(article)]
    if notes:
        for note in notes:
            parts.append(
                '<div class="note">'
                f"<strong>{escape(note.title)}</strong>"
                f"<p>{escape(note.body)}</p>"
                f'<button data-action="delete-note" data-id="{escape(note.id)}">Delete note</button>'
                "</div>"
            )
    else:
        parts.append('<p class="empty">No notes for this article yet.</p>')

    parts.append(
        f'<form id="note-form" action="/notes/{escape(article.id)}">'
        '<input name="title" placeholder="Title" />'
        '<textarea name="body" rows="4" placeholder="Your note"></textarea>'
        "<button type=\"submit\">Save note</button>"
        "</form>"
    )
    return _page(f"Notes: {article.title}", "\n".join(parts))
