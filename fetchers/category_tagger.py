"""Rule-based category tagging for Reddit posts.

The trends backend tags search entries with categories but ships Reddit posts
untagged, so posts would never pass a niche's category gate. The tagger assigns
the same coarse buckets from the post's subreddit and title keywords.
"""

import logging
import time
from typing import Dict, List

from niche_radar.matching import matches, normalize
from niche_radar.models import RedditPost


class CategoryTagger:
    """Fast keyword/subreddit based tagging into coarse topical categories."""

    def __init__(self):
        """Initialize the tagger and its keyword tables."""
        self.logger = logging.getLogger(__name__)
        self._setup_rules()

    def _setup_rules(self):
        """Initialize the category keyword and subreddit mappings."""

        self.CATEGORY_KEYWORDS: Dict[str, List[str]] = {
            'Technology': [
                'ai', 'chatgpt', 'claude', 'openai', 'gpt', 'llm', 'machine learning', 'software',
                'app', 'apps', 'saas', 'api', 'automation', 'no-code', 'nocode', 'startup tools',
                'iphone', 'android', 'google', 'microsoft', 'apple', 'crypto', 'bitcoin', 'blockchain',
            ],
            'Business': [
                'startup', 'startups', 'founder', 'founders', 'revenue', 'mrr', 'customers', 'marketing',
                'sales', 'side hustle', 'solopreneur', 'solopreneurs', 'entrepreneur', 'freelance',
                'agency', 'business', 'clients', 'pricing', 'launch', 'launched',
            ],
            'Finance': [
                'stock', 'stocks', 'invest', 'investing', 'etf', 'budget', 'debt', 'savings',
                'retirement', 'mortgage', 'interest rate', 'inflation', 'fed',
            ],
            'Health': [
                'fitness', 'workout', 'diet', 'nutrition', 'sleep', 'mental health', 'anxiety',
                'therapy', 'weight loss', 'gym',
            ],
            'Entertainment': [
                'movie', 'film', 'trailer', 'album', 'song', 'concert', 'netflix', 'series',
                'episode', 'celebrity',
            ],
            'Gaming': ['game', 'gaming', 'steam', 'playstation', 'xbox', 'nintendo', 'esports'],
            'Sports': ['nba', 'nfl', 'championship', 'playoffs', 'match', 'league', 'olympics'],
            'Politics': ['election', 'senate', 'congress', 'president', 'policy', 'government', 'vote'],
            'Lifestyle': ['productivity', 'habits', 'routine', 'travel', 'minimalism', 'cooking', 'home'],
            'Education': ['course', 'learn', 'learning', 'study', 'students', 'tutorial', 'university'],
        }

        # Lower-cased subreddit name -> categories it implies
        self.SUBREDDIT_CATEGORIES: Dict[str, List[str]] = {
            'chatgpt': ['Technology'],
            'openai': ['Technology'],
            'artificial': ['Technology'],
            'machinelearning': ['Technology'],
            'nocode': ['Technology', 'Business'],
            'sideproject': ['Technology', 'Business'],
            'saas': ['Technology', 'Business'],
            'programming': ['Technology'],
            'technology': ['Technology'],
            'entrepreneur': ['Business'],
            'startups': ['Business'],
            'smallbusiness': ['Business'],
            'marketing': ['Business'],
            'freelance': ['Business'],
            'productivity': ['Lifestyle', 'Business'],
            'getdisciplined': ['Lifestyle'],
            'personalfinance': ['Finance'],
            'investing': ['Finance'],
            'stocks': ['Finance'],
            'fitness': ['Health'],
            'nutrition': ['Health'],
            'movies': ['Entertainment'],
            'television': ['Entertainment'],
            'gaming': ['Gaming'],
            'sports': ['Sports'],
            'politics': ['Politics'],
            'learnprogramming': ['Education', 'Technology'],
        }

    def tag(self, title: str, subreddit: str = '') -> List[str]:
        """Return the categories implied by *subreddit* and keywords in *title*."""
        categories: List[str] = list(self.SUBREDDIT_CATEGORIES.get(normalize(subreddit), []))

        title_lower = normalize(title)
        for category, keywords in self.CATEGORY_KEYWORDS.items():
            if category in categories:
                continue
            if any(matches(title_lower, keyword) for keyword in keywords):
                categories.append(category)

        return categories

    def tag_posts(self, posts: List[RedditPost]) -> List[RedditPost]:
        """Return copies of *posts* with their ``tags`` filled in."""
        if not posts:
            return []

        start_time = time.time()
        tagged = [
            post.model_copy(update={'tags': self.tag(post.title, post.subreddit)})
            for post in posts
        ]
        untagged = sum(1 for post in tagged if not post.tags)

        elapsed = time.time() - start_time
        self.logger.info(f"Tagged {len(tagged)} posts in {elapsed:.2f}s ({untagged} without a category)")
        return tagged
