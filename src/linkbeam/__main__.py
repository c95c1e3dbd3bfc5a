"""
=============================================================================
LINKBEAM CLI ENTRY POINT
=============================================================================

Runs a FileServer from the command line until Ctrl+C (SIGINT) or SIGTERM.

=============================================================================
USAGE
=============================================================================

    # Share the home directory on port 8080
    python -m linkbeam

    # Share ~/Download on port 3000
    python -m linkbeam --port 3000 --root Download

    # Share the application-private directory, seeded with sample files
    python -m linkbeam --root internal --sample-files

    # Only report what storage we can see
    python -m linkbeam --check-storage --json

=============================================================================
ENVIRONMENT
=============================================================================

    LINKBEAM_PORT          default for --port
    LINKBEAM_ROOT          default for --root
    LINKBEAM_LOG_LEVEL     default for --log-level
    LINKBEAM_PUBLIC_ROOT   public storage root (see config.py)
    LINKBEAM_PRIVATE_ROOT  private storage directory (see config.py)

=============================================================================
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading
from typing import Dict, List, Optional

from . import __version__
from .server import FileServer


logger = logging.getLogger("linkbeam")


def _setup_logging(level_name: str):
    level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("linkbeam").setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkbeam",
        description="Share a directory over HTTP on the local network",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m linkbeam                          # Share home directory on :8080
  python -m linkbeam --root Download          # Share ~/Download
  python -m linkbeam --root /srv/share -p 80  # Absolute path, port 80
  python -m linkbeam --check-storage --json   # Storage probe only
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVER ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=int(os.getenv("LINKBEAM_PORT", "8080")),
        help="Port to listen on (default: 8080)",
    )

    parser.add_argument(
        "--root", "-r",
        default=os.getenv("LINKBEAM_ROOT", ""),
        help='Document root: "", "internal", an absolute path, or a folder '
             "under public storage (default: public storage root)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # DIAGNOSTIC ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--sample-files",
        action="store_true",
        help="Create sample files in the document root after starting",
    )

    parser.add_argument(
        "--check-storage",
        action="store_true",
        help="Report storage access and exit",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of text",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LINKBEAM_LOG_LEVEL", "INFO").upper(),
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"LinkBeam {__version__}",
    )

    return parser


def _emit(data: Dict[str, object], as_json: bool):
    if as_json:
        print(json.dumps(data, indent=2))
        return
    for key, value in data.items():
        print(f"{key}: {value}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    server = FileServer()

    if args.check_storage:
        _emit(server.check_storage_access().as_dict(), args.json)
        return 0

    result = server.start(args.port, args.root)
    if not result.success:
        if args.json:
            _emit(result.as_dict(), True)
        else:
            print(f"Error: {result.error}", file=sys.stderr)
        return 1

    if args.json:
        _emit(result.as_dict(), True)
    else:
        print(f"Serving {result.document_root}")
        print(f"  Local:   {result.local_url}")
        if result.wifi_url:
            print(f"  Network: {result.wifi_url}")
        print("Press Ctrl+C to stop")

    if args.sample_files:
        samples = server.create_sample_files()
        if samples.success:
            logger.info(samples.message)
        else:
            logger.error(f"Could not create sample files: {samples.error}")

    # ─────────────────────────────────────────────────────────────────────
    # WAIT FOR SIGINT / SIGTERM
    # ─────────────────────────────────────────────────────────────────────
    stop_requested = threading.Event()

    def shutdown_handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        stop_requested.set()

    original_handlers = {
        sig: signal.signal(sig, shutdown_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        while not stop_requested.wait(timeout=1.0):
            pass
    finally:
        for sig, handler in original_handlers.items():
            signal.signal(sig, handler)
        server.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
