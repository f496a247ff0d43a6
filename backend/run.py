#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates tables on startup (environment=development) and serves the API with
auto-reload. Set DATABASE_URL / REDIS_URL in backend/.env to point elsewhere.
"""

import logging
import os
from pathlib import Path

import uvicorn

backend_dir = Path(__file__).parent
os.chdir(backend_dir)

logger = logging.getLogger("slotengine.run")

if __name__ == "__main__":
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting slotengine at http://%s:%s (docs at /docs)", host, port)

    uvicorn.run("slotengine.main:app", host=host, port=port, reload=True, log_level="info")
