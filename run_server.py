#!/usr/bin/env python3
"""Run the lessico API server."""

import logging
import os

import uvicorn


def main():
    logging.basicConfig(level=logging.INFO)
    print("Starting Lessico API server...")
    print("API documentation available at: http://localhost:8000/docs")
    uvicorn.run(
        "server.app:app",
        host="0.0.0.0",
        port=int(os.environ.get('PORT', 8000)),
        reload=os.environ.get('LESSICO_RELOAD', '1') == '1'
    )


if __name__ == "__main__":
    main()
