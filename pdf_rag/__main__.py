"""
API server entry point.

Runs the FastAPI application with uvicorn via `python -m pdf_rag`.
"""

import asyncio
import sys

import uvicorn

from pdf_rag.config.settings import get_settings
from pdf_rag.utils.logging import setup_logging


async def main() -> None:
    """
    Main entry point for the API server.

    Validates configuration, configures logging and serves the application
    on the configured host and port.
    """
    settings = get_settings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        app_name=settings.app_name,
    )

    print(f"Starting {settings.app_name} ({settings.environment})", file=sys.stderr)
    print(f"LLM Provider: {settings.llm.llm_provider}", file=sys.stderr)
    print(f"Embedding Provider: {settings.embedding.embedding_provider}", file=sys.stderr)

    config = uvicorn.Config(
        "pdf_rag.api.app:app",
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.log_level.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
