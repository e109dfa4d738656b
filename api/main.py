import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from starlette.concurrency import run_in_threadpool

from ingestion import page_loader
from search.config import EngineConfig
from search.engine import SearchEngine

logger = logging.getLogger(__name__)

app = FastAPI(title="linesearch API", version="0.1.0")

config = EngineConfig.from_env()
engine = SearchEngine()


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


class IndexRequest(BaseModel):
    text: str | None = None
    url: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "IndexRequest":
        if (self.text is None) == (self.url is None):
            raise ValueError("provide exactly one of 'text' or 'url'")
        return self


async def _load_url(url: str) -> str:
    try:
        page = await page_loader.fetch_url(url, cfg=config)
    except Exception as e:  # noqa: BLE001 - report upstream failure to the caller
        logger.warning("fetch failed for %s: %s", url, e)
        raise HTTPException(status_code=502, detail=f"fetch failed: {e}") from e
    if page.status != 200:
        logger.warning("fetch of %s returned status %d", url, page.status)
        raise HTTPException(status_code=502, detail=f"upstream returned {page.status}")
    if not page.is_text:
        raise HTTPException(status_code=415, detail=f"cannot index {page.content_type}")
    if page.truncated:
        logger.warning("body of %s cut at %d bytes", url, config.max_fetch_bytes)
    return page_loader.page_text(page)


@app.post("/index")
async def build_index(body: IndexRequest) -> dict[str, int]:
    if body.url is not None:
        text = await _load_url(body.url)
    else:
        text = body.text or ""
    # the numpy build is CPU bound; keep it off the event loop
    await run_in_threadpool(engine.build_index, text)
    return engine.index.stats()


@app.get("/index/stats")
def index_stats() -> dict[str, int]:
    return engine.index.stats()


class SearchRequest(BaseModel):
    query: str
    top_k: int | None = Field(default=None, ge=0)


def _search(query: str, top_k: int | None) -> dict[str, Any]:
    k = config.default_top_k if top_k is None else top_k
    hits = engine.search_hits(query, top_k=min(k, config.max_top_k))
    return {
        "query": query,
        "results": [
            {"position": h.position, "line": h.line, "score": float(round(h.score, 6))}
            for h in hits
        ],
    }


@app.post("/search")
def search_post(body: SearchRequest) -> dict[str, Any]:
    return _search(body.query, body.top_k)


@app.get("/search")
def search_get(q: str, top_k: int | None = Query(default=None, ge=0)) -> dict[str, Any]:
    return _search(q, top_k)
