#!/usr/bin/env python3
"""Pet Match: single entry point.

Builds the pet repository and vision backend, optionally seeds pet
reports, and launches the FastAPI match API.

Usage:
    python main.py
    python main.py --repository memory --demo-data
    python main.py --seed reports.csv
    python main.py --vision clip --port 8000
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("pet-match")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lost & found pet matching API")
    parser.add_argument(
        "--repository",
        choices=["elasticsearch", "memory"],
        default=None,
        help="Pet report store (default: REPOSITORY_BACKEND or elasticsearch)",
    )
    parser.add_argument(
        "--vision",
        choices=["openai", "clip", "none"],
        default=None,
        help="Image similarity backend (default: VISION_BACKEND or openai)",
    )
    parser.add_argument(
        "--seed",
        type=Path,
        default=None,
        help="CSV or JSON file of pet reports to load before serving",
    )
    parser.add_argument(
        "--demo-data",
        action="store_true",
        help="Load the built-in demo reports before serving",
    )
    parser.add_argument("--es-url", type=str, default=None, help="Elasticsearch URL")
    parser.add_argument("--host", type=str, default=None, help="Server host")
    parser.add_argument("--port", type=int, default=None, help="Server port")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Configure components, seed data if asked, and serve the API."""
    args = _parse_args(argv)

    from src.config import get_config

    config = get_config()
    overrides = {
        "repository_backend": args.repository,
        "vision_backend": args.vision,
        "elasticsearch_url": args.es_url,
        "host": args.host,
        "port": args.port,
    }
    config = dataclasses.replace(
        config, **{key: value for key, value in overrides.items() if value is not None}
    )

    # Step 1: Pet repository
    logger.info("Step 1/4: Connecting to %s repository", config.repository_backend)
    from src.api.app import create_repository
    from src.errors import PetMatchError

    try:
        repository = create_repository(config)
    except (PetMatchError, ValueError) as exc:
        logger.error("Could not create repository: %s", exc)
        sys.exit(1)

    # Step 2: Seed reports
    reports = []
    if args.demo_data:
        from src.data.processor import sample_pets

        reports.extend(sample_pets())
    if args.seed:
        from src.data.processor import load_pet_reports

        try:
            reports.extend(load_pet_reports(args.seed))
        except (OSError, ValueError) as exc:
            logger.error("Could not load %s: %s", args.seed, exc)
            sys.exit(1)

    if reports:
        logger.info("Step 2/4: Seeding %d pet reports", len(reports))
        if hasattr(repository, "es"):
            from src.search.indexer import index_pets

            index_pets(repository.es, reports, index_name=config.index_name)
        else:
            for pet in reports:
                repository.add(pet)
    else:
        logger.info("Step 2/4: No reports to seed")

    # Step 3: Vision backend
    logger.info("Step 3/4: Preparing %s image analysis", config.vision_backend)
    from src.vision.factory import create_visual_similarity

    try:
        visual = create_visual_similarity(config)
    except PetMatchError as exc:
        logger.error("Could not create vision backend: %s", exc)
        sys.exit(1)

    # Step 4: Serve
    logger.info("Step 4/4: Launching match API on %s:%d", config.host, config.port)
    import uvicorn

    from src.api.app import create_app

    app = create_app()
    app.state.config = config
    app.state.repository = repository
    app.state.visual_similarity = visual

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
