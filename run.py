#!/usr/bin/env python3
"""
Convenience script to run the FastAPI server
"""

import uvicorn

from medcare.config import HOST, LOG_LEVEL, PORT, RELOAD

if __name__ == "__main__":
    uvicorn.run(
        "medcare.main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        log_level=LOG_LEVEL,
    )
