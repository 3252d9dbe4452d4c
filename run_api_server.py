"""
FastAPI Server Startup Script
Run this to start the Invoice Manager API server
"""

import logging

import uvicorn

from invoice_api.config import settings

logger = logging.getLogger("run_api_server")


def main():
    """Start the FastAPI server"""
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s")
    logger.info("Starting Invoice Manager API server on http://%s:%s", settings.host, settings.port)
    logger.info("API documentation: http://%s:%s/docs", settings.host, settings.port)

    uvicorn.run(
        "invoice_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
