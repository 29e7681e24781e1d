"""Single extraction tool: plain text, title and links from HTML. Uses BeautifulSoup."""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def extract_text(html: str) -> str:
    """
    Whole-page plain text: script/style/noscript removed, whitespace collapsed.
    The title is part of the text (as a browser's document text would be).
    """
    soup = _soup(html)
    for tag in soup.find_all(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return re.sub(r"\s+", " ", text).strip()


def extract_title(html: str) -> str:
    """Extract <title> text, or "" when missing."""
    title_tag = _soup(html).find("title")
    return title_tag.get_text(strip=True) if title_tag else ""


def extract_links(html: str, base_url: str) -> list[str]:
    """Absolute targets of all <a href> in document order (duplicates kept)."""
    links = []
    for a in _soup(html).select("a[href]"):
        href = (a.get("href") or "").strip()
        if not href:
            continue
        links.append(urljoin(base_url, href))
    return links
