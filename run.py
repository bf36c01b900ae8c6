#!/usr/bin/env python3
"""Run script for ExecuTask."""

import os

import uvicorn

from executask.logging_config import LoggingConfig

if __name__ == "__main__":
    LoggingConfig.setup_logging()
    uvicorn.run(
        "executask.api.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "False").lower() == "true",
        log_config=None,
    )
