"""
Prediction CLI

Run one prediction against ratings loaded from a JSON file.

Usage:
    python -m cricket_predictor.cli.predict --ratings ratings.json --team1 IND --team2 AUS --format t20
    python -m cricket_predictor.cli.predict --ratings ratings.json --team1 IND --team2 AUS \
        --format odi --mode smart --tournament "ICC World Cup Final" --venue Ahmedabad

The ratings file is either a list of rating records or an object:
    {"ratings": [...], "homeVenues": {"Ahmedabad": "IND"}}
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from cricket_predictor.api.schemas.prediction import PredictionInput
from cricket_predictor.config import MATCH_FORMATS, PREDICTION_MODES, TIME_CONSTRAINTS
from cricket_predictor.logging_config import setup_logging
from cricket_predictor.services.prediction import RatingFeatureProvider
from cricket_predictor.services.prediction.rating_store import InMemoryRatingStore
from cricket_predictor.services.prediction_service import build_orchestrator
from cricket_predictor.settings import get_settings

logger = logging.getLogger(__name__)


def load_ratings_file(path: Path) -> tuple[list[dict], dict[str, str]]:
    """Read rating records and the optional home venue map."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return data, {}
    return data.get("ratings", []), data.get("homeVenues") or data.get("home_venues") or {}


async def run(args: argparse.Namespace) -> dict:
    settings = get_settings()
    records, home_venues = load_ratings_file(Path(args.ratings))

    store = InMemoryRatingStore()
    store.load_ratings(records)
    provider = RatingFeatureProvider(store, sport=settings.sport, home_venues=home_venues)
    orchestrator = build_orchestrator(settings, store=store, feature_provider=provider)

    request = PredictionInput(
        team1_id=args.team1,
        team2_id=args.team2,
        format=args.format,
        venue=args.venue,
        tournament=args.tournament,
        series_context=args.series_context,
    )
    result = await orchestrator.predict(
        request, mode=args.mode, time_constraint=args.time_constraint
    )
    return result.model_dump(by_alias=True, exclude_none=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a single match prediction")
    parser.add_argument("--ratings", "-r", required=True, help="Ratings JSON file")
    parser.add_argument("--team1", required=True, help="Team 1 identifier")
    parser.add_argument("--team2", required=True, help="Team 2 identifier")
    parser.add_argument("--format", "-f", required=True, choices=list(MATCH_FORMATS))
    parser.add_argument("--mode", "-m", default="smart", choices=list(PREDICTION_MODES))
    parser.add_argument(
        "--time-constraint", choices=list(TIME_CONSTRAINTS), default=None
    )
    parser.add_argument("--venue", help="Venue name")
    parser.add_argument("--tournament", help="Tournament name")
    parser.add_argument("--series-context", help="Series stage, e.g. 'Semi-final'")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def main():
    args = build_parser().parse_args()
    setup_logging(level=args.log_level)

    output = asyncio.run(run(args))
    print(json.dumps(output, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
