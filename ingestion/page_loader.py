from __future__ import annotations

import codecs
from dataclasses import dataclass

import httpx

from processing.text import html_to_lines
from search.config import EngineConfig

DEFAULT_UA = "linesearch/0.1"

_TEXT_TYPES = ("text/", "application/xhtml+xml")


@dataclass
class FetchedPage:
    url: str
    status: int
    text: str
    content_type: str | None
    truncated: bool = False

    @property
    def is_html(self) -> bool:
        ctype = (self.content_type or "").lower()
        return "html" in ctype

    @property
    def is_text(self) -> bool:
        # no content-type header: assume text and let the tokenizer sort it out
        ctype = (self.content_type or "text/plain").lower()
        return ctype.startswith(_TEXT_TYPES)


def _decode(raw: bytes, encoding: str | None) -> str:
    try:
        codecs.lookup(encoding or "utf-8")
    except LookupError:
        encoding = "utf-8"
    return raw.decode(encoding or "utf-8", errors="replace")


async def fetch_url(
    url: str,
    *,
    cfg: EngineConfig | None = None,
    user_agent: str = DEFAULT_UA,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchedPage:
    """Fetch a document to index.

    The body is read up to `cfg.max_fetch_bytes`; when cut, the trailing partial
    line is dropped so no half line gets indexed. The charset from the
    content-type header is used for decoding, utf-8 otherwise.
    """
    cfg = cfg or EngineConfig()
    headers = {"User-Agent": user_agent, "Accept": "text/plain,text/html,application/xhtml+xml"}
    async with httpx.AsyncClient(
        follow_redirects=True, timeout=cfg.fetch_timeout, headers=headers, transport=transport
    ) as client:
        async with client.stream("GET", url) as resp:
            chunks: list[bytes] = []
            size = 0
            truncated = False
            async for chunk in resp.aiter_bytes():
                remaining = cfg.max_fetch_bytes - size
                if len(chunk) > remaining:
                    chunks.append(chunk[:remaining])
                    truncated = True
                    break
                chunks.append(chunk)
                size += len(chunk)
            raw = b"".join(chunks)
            if truncated:
                raw = raw[: raw.rfind(b"\n") + 1]
            return FetchedPage(
                url=url,
                status=resp.status_code,
                text=_decode(raw, resp.charset_encoding),
                content_type=resp.headers.get("content-type"),
                truncated=truncated,
            )


def page_text(page: FetchedPage) -> str:
    """Text to index for a fetched page: HTML is reduced to its visible lines."""
    if page.is_html:
        return html_to_lines(page.text)
    return page.text
