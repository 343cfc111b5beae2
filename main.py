#!/usr/bin/env python3
"""
Run script for the Household Finance API.
"""

import logging

import uvicorn

from config import configure_logging, settings

logger = logging.getLogger(__name__)


def main():
    """Start the API server."""
    configure_logging()
    logger.info("Starting API server on %s:%s (reload=%s)", settings.host, settings.port, settings.reload)
    logger.info("API Documentation: http://%s:%s/docs", settings.host, settings.port)

    uvicorn.run(
        "api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
