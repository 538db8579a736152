#!/usr/bin/env python3
"""Run the wordloom API server."""

import logging
import os

import uvicorn


def main():
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    host = os.environ.get('WORDLOOM_HOST', '0.0.0.0')
    port = int(os.environ.get('WORDLOOM_PORT', '8000'))
    print("Starting Wordloom API server...")
    print(f"API documentation available at: http://localhost:{port}/docs")
    uvicorn.run(
        "server.app:app",
        host=host,
        port=port,
        reload=True
    )


if __name__ == "__main__":
    main()
