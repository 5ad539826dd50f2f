#!/usr/bin/env python3
"""
Recommendation Flow Local Script

Runs the recommendation flow against the real Gemini API without starting
the server or using the app. Requires GOOGLE_API_KEY in the environment
or in .env.

Usage:
    python scripts/try_recommendations.py --history zc_1 zc_2 --tags "#dance" "#food"
    python scripts/try_recommendations.py --count 3
    python scripts/try_recommendations.py --history zc_1 --free-text
"""

import argparse
import asyncio
import json
import logging
import sys

from zipplign.agents.recommendation import RecommendationError, recommend
from zipplign.agents.recommendation.client import GeminiRecommendationClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def run(history: list[str], tags: list[str], count: int, free_text: bool) -> int:
    client = GeminiRecommendationClient(structured_output=not free_text)
    request = {"viewingHistory": history, "trendingTags": tags, "numRecommendations": count}

    try:
        result = await recommend(request, client=client)
    except RecommendationError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1

    print(json.dumps(result.model_dump(), indent=2))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run the Zippclip recommendation flow against Gemini",
    )
    parser.add_argument(
        "--history", nargs="*", default=[],
        help="Zippclip IDs from the viewing history, oldest first",
    )
    parser.add_argument(
        "--tags", nargs="*", default=[],
        help="Trending tags to include in the prompt",
    )
    parser.add_argument(
        "--count", type=int, default=5,
        help="Number of recommendations to ask for (default: 5)",
    )
    parser.add_argument(
        "--free-text", action="store_true",
        help="Disable schema-constrained output and parse one ID per line",
    )
    args = parser.parse_args()

    return asyncio.run(run(args.history, args.tags, args.count, args.free_text))


if __name__ == "__main__":
    sys.exit(main())
