#!/usr/bin/env python
"""Run the listing API under uvicorn (PORT, LOG_LEVEL and DEBUG from the environment)."""
import os
import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    debug = os.environ.get("DEBUG", "").lower() in ("1", "true", "yes")

    print(f"Starting ASIN eBay Lister on port {port}")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=debug,
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
    )
