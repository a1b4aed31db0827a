#!/usr/bin/env python3
"""
Bootstrap script for starting a local CertiChain node.
"""
import os
import sys

import uvicorn


def main():
    """Starts the Uvicorn server for the CertiChain node."""
    # Makes `from core.document import ...` work when this script is run directly
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)

    uvicorn.run(
        "node.server:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
        reload=os.environ.get("RELOAD", "1") == "1",
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
        app_dir=project_root
    )

if __name__ == "__main__":
    main()
