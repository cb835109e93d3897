"""
Allow running the package directly: python -m mandelscope
"""
import sys

from .app import run
from .config import config_from_args, configure_logging
from .errors import ConfigError


def main(argv=None):
    try:
        config = config_from_args(argv)
    except ConfigError as e:
        print(f"mandelscope: {e}", file=sys.stderr)
        return 2
    configure_logging(config.verbose)
    run(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
