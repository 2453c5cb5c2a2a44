#!/usr/bin/env python3
"""
Simple run script for the LogicFlow server.

Usage:
    python run.py

Or with custom settings:
    HOST=127.0.0.1 PORT=8080 python run.py
"""

import uvicorn

from logicflow.config import settings


def main():
    """Run the FastAPI application."""
    print(f"""
LogicFlow {settings.APP_VERSION}

  Server:     http://{settings.HOST}:{settings.PORT}
  API Docs:   http://{settings.HOST}:{settings.PORT}/docs
  Flow files: {settings.FLOW_DIRECTORY}/
  Demo flow:  countdown-demo
    """)

    uvicorn.run(
        "logicflow.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
