#!/usr/bin/env python3
"""Niche Trend Finder.

Runs the niche radar pipeline for a set of keywords:

1. Niche analysis (Claude/OpenAI) – falls back to a keyword-only profile
2. Corpus fetch from the trends backend (escalates to a fresh fetch if thin)
3. Relevance scoring, de-duplication and ranking
4. Concurrent tweet enrichment of the best matches
5. Optional: Claude narratives from the comments of the top Reddit posts

Example
-------
python scripts/find_trends.py ai tools, productivity, solopreneurs
python scripts/find_trends.py --source google --no-ai "home workouts"
python scripts/find_trends.py --json "side hustle"
python scripts/find_trends.py --narratives 2 "indie hackers"
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fetchers.narrative_synthesizer import NarrativeSynthesizer
from fetchers.niche_analyzer import NicheAnalyzer
from fetchers.trend_backend import TrendBackendClient
from niche_radar.config import RadarSettings
from niche_radar.exceptions import EmptyCorpusError
from niche_radar.models import Narrative, PipelineResult
from niche_radar.pipeline import NicheRadarPipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
LOGGER = logging.getLogger(__name__)


def parse_keywords(raw: List[str]) -> List[str]:
    """Split CLI words on commas: ``['ai tools,', 'productivity']`` -> ``['ai tools', 'productivity']``."""
    joined = " ".join(raw)
    return [k.strip() for k in joined.split(",") if k.strip()]


def results_frame(result: PipelineResult) -> pd.DataFrame:
    """Flatten the ranked trends into a display table."""
    rows = []
    for rank, trend in enumerate(result.trends, 1):
        rows.append({
            'rank': rank,
            'topic': trend.topic[:70],
            'score': round(trend.relevance_score, 1),
            'categories': ", ".join(trend.item.categories[:3]),
            'volume': int(trend.item.popularity_volume),
            'tweets': "n/a" if trend.enrichment_failed else len(trend.snippets),
        })
    return pd.DataFrame(rows, columns=['rank', 'topic', 'score', 'categories', 'volume', 'tweets'])


async def find_trends(
    keywords: List[str], source: str, use_ai: bool, narratives: int = 0
) -> Tuple[PipelineResult, Dict[str, List[Narrative]]]:
    """Build the collaborators, run one pipeline pass and optionally synthesize narratives."""
    settings = RadarSettings.from_env()
    async with TrendBackendClient(settings) as backend:
        pipeline = NicheRadarPipeline(
            settings,
            corpus_provider=backend,
            fetch_snippets=backend.fetch_snippets,
            profile_provider=NicheAnalyzer(settings) if use_ai else None,
        )
        result = await pipeline.run(keywords=keywords, source=source)
        if narratives <= 0:
            return result, {}
        synthesizer = NarrativeSynthesizer(settings, backend)
        return result, await synthesizer.synthesize_top(result.trends, narratives)


def main() -> None:
    """Entry-point for the niche trend finder."""
    parser = argparse.ArgumentParser(description="Find trending topics that match your niche")
    parser.add_argument("keywords", nargs="+", help="Comma-separated niche keywords")
    parser.add_argument("--source", default="reddit", help="Corpus source: reddit (default) or google")
    parser.add_argument("--no-ai", dest="use_ai", action="store_false",
                        help="Skip niche analysis and rank against the raw keywords")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print the raw JSON response")
    parser.add_argument("--narratives", type=int, default=0, metavar="N",
                        help="Synthesize comment narratives for the top N Reddit posts (needs ANTHROPIC_API_KEY)")
    cli_args = parser.parse_args()

    keywords = parse_keywords(cli_args.keywords)
    if not keywords:
        parser.error("at least one keyword is required")

    LOGGER.info(f"🚀 Finding {cli_args.source} trends for: {', '.join(keywords)}")
    try:
        result, narratives = asyncio.run(
            find_trends(keywords, cli_args.source, cli_args.use_ai, cli_args.narratives)
        )
    except EmptyCorpusError as exc:
        LOGGER.error(f"❌ {exc}")
        sys.exit(1)

    if cli_args.as_json:
        payload = result.model_dump(mode="json")
        if narratives:
            payload["narratives"] = {
                url: [n.model_dump() for n in items] for url, items in narratives.items()
            }
        print(json.dumps(payload, indent=2))
        return

    LOGGER.info(f"🎯 Niche: {result.niche.description}")
    LOGGER.info(
        f"📊 {result.total_matched} of {result.total_analyzed} items matched"
        f"{' (fresh fetch)' if result.escalated else ''}"
    )
    frame = results_frame(result)
    print(frame.to_string(index=False) if not frame.empty else "No matching trends right now.")
    for url, items in narratives.items():
        LOGGER.info(f"💬 Narratives for {url}")
        for narrative in items:
            print(f"  - {narrative.headline}: {narrative.insight}")
    LOGGER.info("🎉 Done")


if __name__ == "__main__":
    main()
