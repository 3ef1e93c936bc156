import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import PhotoSwordApp
from .exceptions import PhotoSwordError


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format=config.LOG_FORMAT,
        handlers=handlers,
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="photo-sword: group JPG/NEF photos by name and hash them")

    p.add_argument("directory", type=Path, help="Directory to scan")
    p.add_argument("-o", "--output", type=Path, default=Path(config.DEFAULT_OUTPUT),
                   help=f"Snapshot file to write (default: {config.DEFAULT_OUTPUT})")
    p.add_argument("-w", "--workers", type=int, default=config.DEFAULT_WORKERS,
                   help="Number of parallel hashing threads (default: 1)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--no-progress", action="store_true", help="Hide progress bars")

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    src_root = args.directory.resolve()
    logging.info("=== photo-sword Started ===")
    logging.info(f"Source: {src_root}")
    logging.info(f"Output: {args.output}")

    app = PhotoSwordApp(max_workers=args.workers, show_progress=not args.no_progress)

    try:
        app.run(src_root, args.output)
    except PhotoSwordError as e:
        logging.error(str(e))
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during scan.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
