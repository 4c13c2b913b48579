#!/usr/bin/env python3
"""Startup script for The Game backend"""

import os

import uvicorn


def main():
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    print(f"Starting The Game backend on {host}:{port}")
    print(f"WebSocket endpoint: ws://{host}:{port}/ws/<player_id>")

    uvicorn.run(
        "thegame_engine.main:app",
        host=host,
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )


if __name__ == "__main__":
    main()
