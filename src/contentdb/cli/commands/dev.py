"""Dev watch command for contentdb CLI."""

import asyncio

from loguru import logger

from ... import app
from ...core.config import Config


def handle_dev(args, config: Config) -> None:
    """Run the dev watch loop until interrupted.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    if args.poll_interval:
        config.dev.poll_interval = args.poll_interval

    print(f"Watching content, live database: {config.database_path}")
    try:
        asyncio.run(app.dev(config))
    except KeyboardInterrupt:
        logger.info("Dev watch stopped")
