import argparse
import json
import sys
from pathlib import Path

from iiif_images_core import __version__
from iiif_images_core.config_manager import get_config_manager
from iiif_images_core.errors import IIIFImageError
from iiif_images_core.image_handler import get_image_handler
from iiif_images_core.logger import get_logger

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    cm = get_config_manager()
    parser = argparse.ArgumentParser(
        prog="mcp-iiif-images",
        description="MCP server exposing size-aware IIIF image and manifest tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--http",
        action="store_true",
        help="Use the HTTP/SSE transport instead of stdio",
    )
    parser.add_argument("--host", default=cm.get_setting("server.host", "127.0.0.1"), help="HTTP bind address")
    parser.add_argument(
        "--port",
        type=int,
        default=cm.get_setting("server.port", 3000),
        help="Port number for the HTTP server (default: %(default)s)",
    )
    parser.add_argument("--max-dimension", type=int, help="Largest width/height ever requested, in pixels")
    parser.add_argument("--max-area", type=int, help="Largest total pixel count ever requested")
    parser.add_argument(
        "--resolve",
        metavar="BASE_URI",
        help="Resolve one image request, print it as JSON and exit (no server)",
    )
    parser.add_argument("--region", default="full", help="Region for --resolve: 'full' or 'pct:x,y,w,h'")
    parser.add_argument("-o", "--output", help="With --resolve, also download the image to this file")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Write the given --host/--port/--max-dimension/--max-area to config.json and exit",
    )
    return parser


def _apply_overrides(args) -> None:
    cm = get_config_manager()
    if args.max_dimension is not None:
        cm.set_setting("images.max_dimension", args.max_dimension)
    if args.max_area is not None:
        cm.set_setting("images.max_area", args.max_area)
    # The handler snapshots its ceiling; rebuild it after overrides
    get_image_handler.cache_clear()


def _save_config(args) -> int:
    cm = get_config_manager()
    cm.set_setting("server.host", args.host)
    cm.set_setting("server.port", args.port)
    try:
        cm.save()
    except OSError as exc:
        logger.error("Unable to write %s: %s", cm.path, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logger.info("Settings saved to %s", cm.path)
    print(cm.path)
    return 0


def _resolve_once(args) -> int:
    handler = get_image_handler()
    try:
        result = handler.generate_image_region_url(args.resolve, args.region, fetch_image=bool(args.output))
    except IIIFImageError as exc:
        logger.error("Resolution failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.output and result.image_data is not None:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(result.image_data.data)
        logger.info("Saved %s bytes to %s", result.image_data.size, out_path)

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def main(argv=None) -> int:
    """Entry point for the `mcp-iiif-images` command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not 1 <= args.port <= 65535:
        parser.error("Port must be a number between 1 and 65535")

    _apply_overrides(args)

    if args.save_config:
        return _save_config(args)

    if args.resolve:
        return _resolve_once(args)

    from .server import run_server

    try:
        run_server(http=args.http, host=args.host, port=args.port)
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
