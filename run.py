#!/usr/bin/env python3
"""
Development server for the furniture shop back-office API.

HOST / PORT pick the bind address; RELOAD=0 turns auto-reload off.
"""
import os
import uvicorn

from app.core.config import settings

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload = os.getenv("RELOAD", "1") not in ("0", "false", "False")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
