from __future__ import annotations

import re

from bs4 import BeautifulSoup, NavigableString

from index.ordering import WordSet

_WORD = re.compile(r"[A-Za-z]+")
_WS = re.compile(r"[ \t\r\f\v]+")
_ANY_WS = re.compile(r"\s+")

# elements that start a new line; everything else is inline
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "caption", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table",
    "title", "tr", "ul",
]
_CELL_TAGS = ["td", "th"]


def split_lines(text: str) -> list[str]:
    """Split text on newlines, dropping empty lines.

    Positions in the returned list are the line positions used by the index.
    """
    return [line for line in text.split("\n") if line]


def extract_words(text: str) -> list[str]:
    return _WORD.findall(text)


def extract_unique_words(text: str) -> WordSet:
    return WordSet(_WORD.findall(text))


def _norm(s: str) -> str:
    return _WS.sub(" ", s).strip()


def html_to_lines(html: str) -> str:
    """Visible text of an HTML page, one line per block element.

    Source newlines inside a block are plain whitespace; only block elements
    and <br> break lines. Table cells in a row are joined by a space.
    """
    soup = BeautifulSoup(html, "html.parser")
    # Remove script/style
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    # comments and doctypes subclass NavigableString and stay invisible
    for s in list(soup.find_all(string=True)):
        if type(s) is NavigableString:
            s.replace_with(_ANY_WS.sub(" ", str(s)))
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    for tag in soup.find_all(_CELL_TAGS):
        tag.insert_after(" ")
    lines = (_norm(line) for line in soup.get_text().split("\n"))
    return "\n".join(line for line in lines if line)
