from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class EngineConfig:
    default_top_k: int = 5
    max_top_k: int = 100  # requests above this are clamped
    fetch_timeout: float = 10.0
    max_fetch_bytes: int = 2_000_000  # fetched bodies are cut at this size

    @classmethod
    def from_env(cls) -> EngineConfig:
        return cls(
            default_top_k=int(os.getenv("LINESEARCH_DEFAULT_TOP_K", cls.default_top_k)),
            max_top_k=int(os.getenv("LINESEARCH_MAX_TOP_K", cls.max_top_k)),
            fetch_timeout=float(os.getenv("LINESEARCH_FETCH_TIMEOUT", cls.fetch_timeout)),
            max_fetch_bytes=int(os.getenv("LINESEARCH_MAX_FETCH_BYTES", cls.max_fetch_bytes)),
        )
