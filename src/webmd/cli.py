"""Command-line interface for webmd."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from . import __version__
from .conversion.preview import render_preview
from .core.converter import Converter
from .errors import WebmdError
from .logging_config import setup_logging
from .models.config import Duration, FetchRequest, ServerConfig, WebmdConfig


def _duration(value: str) -> float:
    """argparse type for Go-style durations such as '15s' or '500ms'."""
    try:
        return Duration._parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    browser_group = parser.add_argument_group("browser settings")
    browser_group.add_argument(
        "--browser-path",
        type=Path,
        default=None,
        metavar="PATH",
        help="Chrome/Chromium binary (default: $WEBMD_BROWSER_PATH or Playwright's Chromium)",
    )
    browser_group.add_argument(
        "--cdp-url",
        type=str,
        default=None,
        metavar="URL",
        help="Attach to a running browser at this DevTools endpoint instead of launching one",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML configuration file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only log errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the convert command."""
    parser = argparse.ArgumentParser(
        prog="webmd",
        description="Render a web page and convert it to clean markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a page to markdown on stdout
  webmd https://example.com

  # Main article only, with fetch metadata
  webmd https://blog.example.com/post --article --frontmatter

  # Slow JS site, as seen on a phone
  webmd https://spa.example.com --mobile --timeout 30s --wait 2s

  # Run the HTTP service
  webmd serve --port 8080
        """,
    )

    parser.add_argument("url", help="URL to convert")

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    content_group = parser.add_argument_group("content")
    content_group.add_argument(
        "--article",
        action="store_true",
        help="Extract the main article only (readability)",
    )
    content_group.add_argument(
        "--images",
        action="store_true",
        help="Keep images",
    )
    content_group.add_argument(
        "--keep-nav",
        action="store_true",
        help="Keep nav, header, footer and aside elements",
    )

    fetch_group = parser.add_argument_group("fetching")
    fetch_group.add_argument(
        "--mobile",
        action="store_true",
        help="Emulate a mobile device",
    )
    fetch_group.add_argument(
        "--timeout",
        type=_duration,
        default=15.0,
        metavar="DURATION",
        help="Deadline for navigation and page load, e.g. 15s, 1m (default: 15s, 0 = none)",
    )
    fetch_group.add_argument(
        "--wait",
        type=_duration,
        default=0.0,
        metavar="DURATION",
        help="Extra wait after the page settles, e.g. 2s",
    )
    fetch_group.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="Custom User-Agent string",
    )

    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write to FILE instead of stdout",
    )
    output_group.add_argument(
        "--frontmatter",
        action="store_true",
        help="Prepend YAML frontmatter with fetch metadata and timing",
    )
    output_group.add_argument(
        "--preview",
        action="store_true",
        help="Output a styled HTML page instead of markdown",
    )

    _add_common_arguments(parser)
    return parser


def create_serve_parser() -> argparse.ArgumentParser:
    """Create argument parser for the serve command."""
    parser = argparse.ArgumentParser(
        prog="webmd serve",
        description="Start an HTTP server that converts URLs to markdown (GET /?url=...)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)",
    )
    _add_common_arguments(parser)
    return parser


def load_config(args: argparse.Namespace) -> WebmdConfig:
    """Build the configuration from the config file and command-line overrides."""
    config = WebmdConfig.from_yaml_file(args.config) if args.config else WebmdConfig()

    browser_updates: dict = {}
    if args.browser_path:
        browser_updates["executable_path"] = args.browser_path
    if args.cdp_url:
        browser_updates["cdp_url"] = args.cdp_url
    if browser_updates:
        config = config.model_copy(update={"browser": config.browser.model_copy(update=browser_updates)})

    if args.verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    elif args.quiet:
        config = config.model_copy(update={"log_level": "ERROR"})

    return config


def write_output(content: str, output: Optional[Path]) -> None:
    """Write content to the output file, or stdout if none is given."""
    if output:
        output.write_text(content, encoding="utf-8")
        return
    sys.stdout.write(content)
    sys.stdout.flush()


def run_convert(args: argparse.Namespace) -> int:
    """Convert one URL with the given arguments."""
    console = Console(stderr=True)

    try:
        config = load_config(args)
        request = FetchRequest(
            url=args.url,
            timeout=args.timeout,
            wait=args.wait,
            user_agent=args.user_agent,
            mobile=args.mobile,
            images=args.images,
            keep_nav=args.keep_nav,
            frontmatter=args.frontmatter,
            article=args.article,
            preview=args.preview,
        )
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config.log_level, str(config.log_file) if config.log_file else None)

    async def run() -> int:
        async with Converter(config) as converter:
            result = await converter.convert(request)

        if not result.ok:
            console.print(f"[red]Error:[/red] {result.error}")
            return 1

        content = render_preview(result.markdown) if request.preview else result.markdown
        write_output(content, args.output)

        if args.verbose:
            timing = ", ".join(f"{step.name} {step.duration:.3f}s" for step in result.timing)
            console.print(f"[dim]{result.fetch_method.value if result.fetch_method else '?'}: {timing}[/dim]")
        return 0

    try:
        return asyncio.run(run())
    except (WebmdError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


def run_serve(args: argparse.Namespace) -> int:
    """Run the HTTP service until interrupted."""
    import uvicorn

    from .server import create_app

    console = Console(stderr=True)

    try:
        config = load_config(args)
        server_updates: dict = {}
        if args.host is not None:
            server_updates["host"] = args.host
        if args.port is not None:
            server_updates["port"] = args.port
        if server_updates:
            server = ServerConfig(**{**config.server.model_dump(), **server_updates})
            config = config.model_copy(update={"server": server})
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(config.log_level, str(config.log_file) if config.log_file else None)

    console.print(f"[bold blue]webmd[/bold blue] v{__version__} listening on {config.server.host}:{config.server.port}")
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "serve":
        return run_serve(create_serve_parser().parse_args(argv[1:]))

    return run_convert(create_parser().parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
