#!/usr/bin/env python3
"""Review analysis helper

Runs the analysis pipeline from the command line, without the API server.

Examples:
  - Random:   python scripts/analyze_review.py --reviews reviews_test.tsv
  - Text:     python scripts/analyze_review.py --text "Terrible, broken and a waste of money"
  - Offline:  python scripts/analyze_review.py --text "Great product" --offline
"""

from __future__ import annotations

import argparse
import asyncio
import json

from review_pulse.core.config import settings
from review_pulse.services.analysis_context import AnalysisContext
from review_pulse.services.collaborators.review_source import ReviewSource
from review_pulse.services.collaborators.sheet_logger import SheetLogger
from review_pulse.services.collaborators.token_store import TokenStore
from review_pulse.services.inference.providers import build_endpoints
from review_pulse.services.orchestrator import Orchestrator
from review_pulse.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Review sentiment analysis helper")
    parser.add_argument("--text", help="review text to analyze (default: random review)")
    parser.add_argument(
        "--reviews", default=settings.REVIEWS_PATH, help="TSV file with a 'text' column"
    )
    parser.add_argument(
        "--offline", action="store_true", help="skip remote inference entirely"
    )
    parser.add_argument(
        "--log", action="store_true", help="post the outcome to SHEET_LOGGER_URL"
    )
    args = parser.parse_args()

    configure_logging()

    reviews = ReviewSource() if args.text else ReviewSource.from_tsv(args.reviews)
    context = AnalysisContext(
        reviews=reviews,
        endpoints=build_endpoints(),
        token_store=TokenStore(settings.TOKEN_STORE_PATH),
        offline=args.offline or settings.offline,
    )
    sheet_logger = SheetLogger()
    orchestrator = Orchestrator(
        context, listeners=[sheet_logger] if args.log and sheet_logger.enabled else []
    )

    try:
        if args.text:
            outcome = await orchestrator.analyze(args.text)
        else:
            outcome = await orchestrator.analyze_random()
    finally:
        await orchestrator.aclose()
        await sheet_logger.aclose()

    print(json.dumps(outcome.to_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
