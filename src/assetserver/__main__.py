"""
=============================================================================
ASSETSERVER CLI ENTRY POINT
=============================================================================

Command-line interface for serving resources and computing versioned URLs.

=============================================================================
USAGE
=============================================================================

    # Serve ./public under /public on localhost:8080
    python -m assetserver --public ./public

    # Same, explicitly
    python -m assetserver --public ./public serve --port 3000

    # Resources bundled in an installed package, no caching while editing
    python -m assetserver --package myapp --dev serve

    # Print the versioned URL of a file (for templates, build scripts)
    python -m assetserver --public ./public version css/site.css
    /public/css/site-ver-1699999999000.css

Options left out fall back to the ASSETS_* environment variables
(see AppConfig.from_env).

=============================================================================
"""

import argparse
import sys
from dataclasses import replace

from . import __version__
from .app import create_app, run, setup_logging
from .config import LOG_FORMATS, LOG_LEVELS, AppConfig, ConfigError
from .resources.location import ResourceError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetserver",
        description="Serve versioned static resources over WSGI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m assetserver --public ./public                   # Serve a directory
  python -m assetserver --package myapp serve --port 3000   # Serve package data
  python -m assetserver --public ./public version app.js    # Versioned URL
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # RESOURCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--public", "-s",
        dest="public_dir",
        default=None,
        help="Directory to serve under --public-url (e.g., ./public)"
    )

    parser.add_argument(
        "--public-url",
        dest="public_url_path",
        default=None,
        help="URL prefix for the public directory (default: /public)"
    )

    parser.add_argument(
        "--package",
        dest="resource_package",
        default=None,
        help="Package whose bundled 'public' directory is served under /assets"
    )

    parser.add_argument(
        "--webjars",
        dest="webjars_package",
        default=None,
        help="Package holding a 'webjars/<library>/<version>/' tree"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CACHING / LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--max-age",
        dest="cache_max_age",
        type=int,
        default=None,
        help="Cache-Control max-age in seconds (default: 3600)"
    )

    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode: Cache-Control: no-cache"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"assetserver {__version__}"
    )

    # ─────────────────────────────────────────────────────────────────────
    # COMMANDS
    # ─────────────────────────────────────────────────────────────────────

    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the development server (default)")
    serve.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )
    serve.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    version = commands.add_parser("version", help="Print the versioned URL of a resource")
    version.add_argument("path", help="Resource path, e.g. css/site.css")

    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    """Environment configuration overridden by whatever was given on the command line."""
    config = AppConfig.from_env()

    overrides = {}
    for name in ("public_dir", "public_url_path", "resource_package", "webjars_package",
                 "cache_max_age", "log_level", "log_format", "host", "port"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if args.dev:
        overrides["production"] = False

    return replace(config, **overrides)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        setup_logging(config.log_level)
        app = create_app(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.command == "version":
        try:
            print(app.url_for(args.path))
        except ResourceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    run(app)
    return 0


if __name__ == "__main__":
    sys.exit(main())
