"""Command line entrypoint for millserver."""
import argparse
import logging

from . import __version__
from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def main(argv=None) -> int:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(prog="millserver")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--host", default=settings.host, help="Server host")
    parser.add_argument("--port", type=int, default=settings.port, help="Server port")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help=f"Logging level (default: {settings.log_level}).",
    )
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        from uvicorn import run
        from millserver.api import create_app
    except ImportError:
        print("uvicorn and fastapi are required to serve the game. Install the package dependencies.")
        return 1

    run(
        create_app(settings),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        reload=False,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
