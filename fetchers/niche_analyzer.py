"""AI-powered niche profile extraction using Claude and OpenAI APIs."""

import json
import logging
import time
from typing import List, Optional

from niche_radar.config import RadarSettings
from niche_radar.exceptions import ProfileExtractionError
from niche_radar.models import NicheProfile

MAX_SUBREDDITS = 8


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences an LLM may wrap its JSON in."""
    clean = text.strip()
    if clean.startswith("```json"):
        clean = clean[7:]
    elif clean.startswith("```"):
        clean = clean[3:]
    if clean.endswith("```"):
        clean = clean[:-3]
    return clean.strip()


class NicheAnalyzer:
    """Turn a creator's raw keywords into a structured :class:`NicheProfile`."""

    CLAUDE_MODEL = "claude-sonnet-4-20250514"
    OPENAI_MODEL = "gpt-4o-mini"

    def __init__(self, settings: RadarSettings, preferred_api: str = "claude"):
        """Initialize the analyzer.

        Args:
            settings: supplies the API keys
            preferred_api: "claude" or "openai" (falls back to the other if the primary fails)
        """
        self.preferred_api = preferred_api
        self.logger = logging.getLogger(__name__)
        self.claude_available = False
        self.openai_available = False

        self._init_claude(settings.anthropic_api_key)
        self._init_openai(settings.openai_api_key)

    def _init_claude(self, api_key: Optional[str]):
        """Initialize Claude client."""
        if not api_key:
            return
        try:
            import anthropic
            self.claude_client = anthropic.Anthropic(api_key=api_key)
            self.claude_available = True
            self.logger.info("Claude client initialized")
        except ImportError:
            self.logger.warning("Anthropic library not available")
        except Exception as e:
            self.logger.warning(f"Claude initialization failed: {e}")

    def _init_openai(self, api_key: Optional[str]):
        """Initialize OpenAI client."""
        if not api_key:
            return
        try:
            import openai
            self.openai_client = openai.OpenAI(api_key=api_key)
            self.openai_available = True
            self.logger.info("OpenAI client initialized")
        except ImportError:
            self.logger.warning("OpenAI library not available")
        except Exception as e:
            self.logger.warning(f"OpenAI initialization failed: {e}")

    def _get_niche_prompt(self, keywords: List[str]) -> str:
        """Generate the prompt asking for the niche profile."""
        niche = ", ".join(keywords)
        return f"""You are helping a content creator find what their niche audience is talking about RIGHT NOW.

Their niche: "{niche}"

Return ONLY valid JSON (no markdown, no explanation):
{{
  "subreddits": ["6-8 real, active subreddit names (no r/ prefix), the most specific communities for this niche"],
  "description": "one sharp sentence describing this niche audience and what they care about",
  "match_phrases": ["8-15 short lowercase words or phrases that would appear verbatim in titles relevant to this niche"],
  "categories": ["1-3 coarse buckets from: Technology, Business, Finance, Health, Entertainment, Gaming, Sports, Politics, Lifestyle, Education"],
  "exclude_terms": ["terms whose presence makes a title irrelevant for this niche, may be empty"]
}}

Example for 'AI tools productivity solopreneurs': subreddits ChatGPT, SideProject, entrepreneur, productivity, artificial, OpenAI, nocode, startups."""

    def _call_claude(self, prompt: str) -> Optional[str]:
        """Call Claude API."""
        if not self.claude_available:
            return None

        try:
            response = self.claude_client.messages.create(
                model=self.CLAUDE_MODEL,
                max_tokens=500,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content[0].text if response.content else None

        except Exception as e:
            self.logger.error(f"Claude API call failed: {e}")
            return None

    def _call_openai(self, prompt: str) -> Optional[str]:
        """Call OpenAI API."""
        if not self.openai_available:
            return None

        try:
            response = self.openai_client.chat.completions.create(
                model=self.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": "You are an audience research analyst. Respond only with valid JSON."},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=500,
                temperature=0.3,
            )
            return response.choices[0].message.content

        except Exception as e:
            self.logger.error(f"OpenAI API call failed: {e}")
            return None

    def parse_profile(self, keywords: List[str], response_text: str) -> NicheProfile:
        """Parse the model's JSON answer into a profile for *keywords*."""
        try:
            data = json.loads(strip_code_fences(response_text))
        except json.JSONDecodeError as e:
            self.logger.debug(f"Raw response: {response_text}")
            raise ProfileExtractionError(f"Unparseable niche analysis: {e}") from e
        if not isinstance(data, dict):
            raise ProfileExtractionError("Niche analysis is not a JSON object")

        return NicheProfile(
            keywords=keywords,
            match_phrases=data.get("match_phrases") or keywords,
            categories=data.get("categories") or [],
            exclude_terms=data.get("exclude_terms") or [],
            description=data.get("description") or "",
            subreddits=(data.get("subreddits") or [])[:MAX_SUBREDDITS],
        )

    def analyze(self, keywords: List[str]) -> NicheProfile:
        """Build a niche profile for *keywords*.

        Raises:
            ProfileExtractionError: no API answered or the answer could not be parsed
        """
        start_time = time.time()
        self.logger.info(f"Analyzing niche: {', '.join(keywords)}")

        prompt = self._get_niche_prompt(keywords)
        apis_to_try = ["claude", "openai"] if self.preferred_api == "claude" else ["openai", "claude"]

        response_text = None
        for api in apis_to_try:
            response_text = self._call_claude(prompt) if api == "claude" else self._call_openai(prompt)
            if response_text:
                self.logger.info(f"Got niche analysis from {api}")
                break

        if not response_text:
            raise ProfileExtractionError("No AI backend returned a niche analysis")

        profile = self.parse_profile(keywords, response_text)
        elapsed = time.time() - start_time
        self.logger.info(
            f"Niche analysis completed in {elapsed:.1f}s "
            f"({len(profile.match_phrases)} phrases, categories={profile.categories})"
        )
        return profile
