"""
Run the portal server directly.

Usage:
    python -m schoolportal.admin
    python -m schoolportal.admin --port 8000
    python -m schoolportal.admin --open-browser
"""

import argparse

from .server import run_server


def main():
    parser = argparse.ArgumentParser(description="School Portal Server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=5050, help="Port (default: 5050)")
    parser.add_argument("--open-browser", action="store_true", help="Open a browser tab")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    args = parser.parse_args()

    run_server(
        host=args.host,
        port=args.port,
        open_browser=args.open_browser,
        debug=args.debug,
    )


if __name__ == "__main__":
    main()
