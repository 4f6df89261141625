#!/usr/bin/env python3
"""
MindConnect -- account service (registration, login, password reset,
email verification, profile management).

Usage:
  python main.py
  python main.py --host 0.0.0.0 --port 5000
  python main.py --reload

Configuration comes from the environment / .env (see core/config.py).
At minimum set SECRET_KEY (32+ chars), or DEBUG=true for a throwaway dev key.
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the MindConnect API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port to listen on (default: 5000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug"])
    args = parser.parse_args()

    # Import string, not the app object: --reload needs to re-import in the worker.
    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level)


if __name__ == "__main__":
    main()
