"""Entry point: ``python -m fileserve [options] <ADDR>``."""

import logging
import sys
from typing import List, Optional

from fileserve.options import ConfigError, parse_args, usage
from fileserve.server import serve

log = logging.getLogger("fileserve")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()

    try:
        options = parse_args(argv)
    except ConfigError as exc:
        if str(exc):
            log.error("%s", exc)
        sys.stderr.write(usage())
        return 1

    try:
        return serve(options)
    except (ConfigError, OSError, RuntimeError) as exc:
        # bad ADDR, missing document root, unreadable or invalid PEM files
        log.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        log.info("Shutting down")
        return 130


if __name__ == "__main__":
    sys.exit(main())
