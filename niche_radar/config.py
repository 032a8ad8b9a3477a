"""Runtime settings for the niche radar pipeline.

Everything tunable (backend URL, timeouts, output sizes, escalation thresholds,
scoring weights) lives in one frozen :class:`RadarSettings` value that is built
once, usually through :meth:`RadarSettings.from_env`, and handed to the
pipeline at construction time.

Environment variables
---------------------
``NICHE_RADAR_API_URL``        trends backend base URL
``NICHE_RADAR_K_ENRICH``       ranked items handed to enrichment (default 15)
``NICHE_RADAR_K_FINAL``        items returned to the caller (default 10)
``NICHE_RADAR_SNIPPET_TIMEOUT`` per-item enrichment deadline in seconds
``NICHE_RADAR_GATE_POLICY``    ``lenient`` or ``strict``
"""
from __future__ import annotations

import os
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator


class GatePolicy(str, Enum):
    """What happens to an item that passes the category gate but matches no term."""

    LENIENT = "lenient"  # floor score, item can still surface
    STRICT = "strict"  # score stays 0, item is dropped


CATEGORY_GATE_POLICY = GatePolicy.LENIENT

DEFAULT_API_URL = "http://localhost:5000"


def _read_only(table: Mapping[str, Any]) -> Mapping[str, Any]:
    """Copy a per-source table into a mapping that rejects item assignment."""
    return MappingProxyType(dict(table))


class ScoringWeights(BaseModel):
    """Point values used by :class:`~niche_radar.scorer.RelevanceScorer`."""

    keyword_match: float = 50.0
    phrase_match: float = 30.0
    related_term_match: float = 8.0
    min_phrase_length: int = Field(3, description="Phrases must be longer than this to count")
    category_bonus: float = 15.0
    category_floor: float = 5.0
    volume_coefficient: float = 1.4
    volume_cap: float = 12.0
    growth_divisor: float = 100.0
    growth_cap: float = 5.0

    model_config = {
        "frozen": True,
    }


class RadarSettings(BaseModel):
    """Frozen configuration for one pipeline instance."""

    api_url: str = DEFAULT_API_URL
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    k_enrich: int = Field(15, ge=1)
    k_final: int = Field(10, ge=1)
    max_snippets: int = Field(5, ge=0)
    max_concurrent_enrichments: int | None = Field(None, ge=1, description="Defaults to k_enrich")

    corpus_limit: Mapping[str, int] = Field(default_factory=lambda: _read_only({"google": 381, "reddit": 25}))
    min_viable_corpus: Mapping[str, int] = Field(default_factory=lambda: _read_only({"google": 100, "reddit": 1}))

    corpus_timeout: Mapping[str, float] = Field(default_factory=lambda: _read_only({"google": 15.0, "reddit": 20.0}))
    snippet_timeout: float = Field(6.0, gt=0)
    comments_timeout: float = Field(15.0, gt=0)

    gate_policy: GatePolicy = CATEGORY_GATE_POLICY
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    model_config = {
        "frozen": True,
    }

    @field_validator("corpus_limit", "min_viable_corpus", "corpus_timeout")
    @classmethod
    def _freeze_table(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _read_only(value)

    @model_validator(mode="after")
    def _check_slices(self) -> "RadarSettings":
        if self.k_final > self.k_enrich:
            raise ValueError(f"k_final ({self.k_final}) must not exceed k_enrich ({self.k_enrich})")
        return self

    @property
    def enrichment_concurrency(self) -> int:
        return self.max_concurrent_enrichments or self.k_enrich

    def limit_for(self, source: str) -> int:
        return self.corpus_limit.get(source, 25)

    def min_viable_for(self, source: str) -> int:
        return self.min_viable_corpus.get(source, 1)

    def timeout_for(self, source: str) -> float:
        return self.corpus_timeout.get(source, 15.0)

    @classmethod
    def from_env(cls, **overrides) -> "RadarSettings":
        """Build settings from ``.env`` / process environment plus explicit overrides."""
        load_dotenv()

        values: dict = {
            "api_url": os.getenv("NICHE_RADAR_API_URL", DEFAULT_API_URL).rstrip("/"),
            "anthropic_api_key": os.getenv("ANTHROPIC_API_KEY") or None,
            "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
        }
        env_map = {
            "k_enrich": "NICHE_RADAR_K_ENRICH",
            "k_final": "NICHE_RADAR_K_FINAL",
            "snippet_timeout": "NICHE_RADAR_SNIPPET_TIMEOUT",
            "gate_policy": "NICHE_RADAR_GATE_POLICY",
        }
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw.strip().lower()

        values.update(overrides)
        return cls(**values)
