"""
Configuration for the explorer.

Values come from three layers, later ones winning:
1. The defaults on Config
2. An optional settings.json (next to the package, or --settings PATH)
3. Command line flags
"""

from __future__ import annotations

import json
import logging
import os
from argparse import ArgumentParser
from dataclasses import dataclass, fields, replace

from .errors import ConfigError
from .palette import ColorScheme

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = os.path.join(os.path.dirname(__file__), "settings.json")


@dataclass(frozen=True)
class Config:
    """Startup configuration of the explorer."""

    width: int = 800
    height: int = 600
    max_iterations: int = 150
    workers: int | None = None
    color_scheme: ColorScheme = ColorScheme.GREEN
    use_histogram: bool = False
    verbose: bool = False

    def validate(self):
        """Raise ConfigError if any value is out of range."""
        for name in ("width", "height", "max_iterations"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.workers is not None and (not isinstance(self.workers, int) or self.workers <= 0):
            raise ConfigError(f"workers must be a positive integer, got {self.workers!r}")
        if not isinstance(self.color_scheme, ColorScheme):
            raise ConfigError(f"unknown color scheme {self.color_scheme!r}")
        return self

    def resolved_workers(self):
        """Worker count, falling back to the number of CPUs."""
        return self.workers or os.cpu_count() or 1


@dataclass(frozen=True)
class DrawSettings:
    """
    How the current frame is drawn.

    Immutable: the app replaces it (dataclasses.replace) on every toggle,
    so each texture update sees one consistent value.
    """

    use_histogram: bool = False
    color_scheme: ColorScheme = ColorScheme.GREEN
    show_colors: bool = False


def parse_scheme(name):
    """ColorScheme from its name, case-insensitive."""
    try:
        return ColorScheme(str(name).lower())
    except ValueError:
        choices = ", ".join(s.value for s in ColorScheme)
        raise ConfigError(f"unknown color scheme {name!r} (choose from {choices})") from None


def load_settings(path=None):
    """
    Load overrides from a settings.json file.

    A missing default file means no overrides; a missing explicit path is
    an error. A file that cannot be parsed is reported and ignored.

    Args:
        path: settings file (default: settings.json next to the package)

    Returns:
        dict of Config field names to values
    """
    explicit = path is not None
    path = path or DEFAULT_SETTINGS_PATH
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"settings file not found: {path}") from None
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Could not load %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object, got {type(data).__name__}")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown settings {', '.join(unknown)}")

    settings = dict(data)
    if "color_scheme" in settings:
        settings["color_scheme"] = parse_scheme(settings["color_scheme"])
    return settings


def build_parser():
    parser = ArgumentParser(prog="mandelscope", description="Interactive Mandelbrot set explorer")

    parser.add_argument('--width', type=int, dest='width',
                        help='window width in pixels', metavar='WIDTH')
    parser.add_argument('--height', type=int, dest='height',
                        help='window height in pixels', metavar='HEIGHT')
    parser.add_argument('--max-iterations', type=int, dest='max_iterations',
                        help='escape budget per pixel', metavar='MAX_ITERATIONS')
    parser.add_argument('--workers', type=int, dest='workers',
                        help='number of worker threads (default: CPU count)', metavar='WORKERS')
    parser.add_argument('--scheme', type=str, dest='color_scheme',
                        choices=[s.value for s in ColorScheme],
                        help='initial color scheme')
    parser.add_argument('--histogram', dest='use_histogram', action='store_true', default=None,
                        help='start with histogram-equalized coloring')
    parser.add_argument('--settings', type=str, dest='settings',
                        help='path to a settings.json file', metavar='PATH')
    parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', default=None,
                        help='enable debug logging (timings, zoom level)')

    return parser


def config_from_args(argv=None):
    """
    Build a validated Config from defaults, settings file and flags.

    Args:
        argv: Argument list (default: sys.argv[1:])
    """
    args = build_parser().parse_args(argv)

    config = replace(Config(), **load_settings(args.settings))

    overrides = {}
    for f in fields(Config):
        value = getattr(args, f.name, None)
        if value is not None:
            overrides[f.name] = value
    if "color_scheme" in overrides:
        overrides["color_scheme"] = parse_scheme(overrides["color_scheme"])

    return replace(config, **overrides).validate()


def configure_logging(verbose=False):
    """Send log records to stderr; DEBUG when verbose, else INFO."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # numba logs its compiler passes at DEBUG
    logging.getLogger("numba").setLevel(logging.WARNING)
