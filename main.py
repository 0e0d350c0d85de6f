"""
PLAYR - Main entry point.

Web app for the PLAYR sports network: players, coaches, clubs and brands.
"""

import asyncio
import logging
import sys

from dotenv import load_dotenv

# Supabase clients read credentials from the process environment
load_dotenv()

from aiohttp import web

from adapters.web.app import create_app
from adapters.web.loader import services
from config.features import features
from config.settings import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("playr.log", encoding="utf-8"),
    ],
)
logger = logging.getLogger(__name__)

# Set DEBUG level only for our app loggers, not for noisy libraries
if features.DEBUG_MODE:
    for name in ['adapters', 'core', 'infrastructure', '__main__']:
        logging.getLogger(name).setLevel(logging.DEBUG)
    # Silence noisy HTTP debug logs
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('hpack').setLevel(logging.WARNING)


async def main():
    """Start the web app and serve until cancelled."""

    logger.info("=== PLAYR Starting ===")
    logger.info(f"Environment: {settings.env}")
    logger.info("Feature Flags:")
    for key, value in features.to_dict().items():
        logger.info(f"  {key}: {value}")

    app = create_app(services)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", settings.port)
    await site.start()
    logger.info(f"PLAYR running on port {settings.port} ({settings.site_url})")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.info("Web server stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("PLAYR stopped by user (Ctrl+C)")
