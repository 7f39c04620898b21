#!/usr/bin/env python3
"""
Exam Engine API
Startup script

Usage:
    python run.py [--port PORT] [--host HOST] [--debug]

Examples:
    python run.py
    python run.py --port 8080
    python run.py --host 0.0.0.0 --port 8000 --debug
"""

import argparse
import logging
import sys

import uvicorn

logger = logging.getLogger("exam_engine.run")


def main():
    """Start the API server"""
    parser = argparse.ArgumentParser(description='Exam Engine API')
    parser.add_argument('--host', default='localhost', help='host address (default: localhost)')
    parser.add_argument('--port', type=int, default=8000, help='port (default: 8000)')
    parser.add_argument('--debug', action='store_true', help='enable auto-reload')

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    logger.info(f"Starting Exam Engine API on http://{args.host}:{args.port} (reload={'on' if args.debug else 'off'})")

    try:
        uvicorn.run(
            "exam_engine.main:app",
            host=args.host,
            port=args.port,
            reload=args.debug,
        )
    except KeyboardInterrupt:
        logger.info("Stopped")
        sys.exit(0)


if __name__ == '__main__':
    main()
