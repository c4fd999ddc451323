"""
Command-line front end.

Re-renders a photo in the style of an artwork and writes the result to disk:

    stylecast photo.jpg --artist "Claude Monet" --style impressionism -o monet.jpg
"""

import argparse
import asyncio
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from .models.media import StyleDescriptor
from .services.style_transfer import StyleTransferService
from .utils.config import get_settings, validate_config
from .utils.monitoring import init_monitoring


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stylecast",
        description="Re-render a photo in the style of an artwork"
    )
    parser.add_argument("image", help="Path to the input photo")
    parser.add_argument("--artist", required=True, help="Artist name, e.g. 'Vincent van Gogh'")
    parser.add_argument("--style", default="", help="Style category, e.g. 'impressionism'")
    parser.add_argument("--title", default="", help="Artwork title (display only)")
    parser.add_argument(
        "-o", "--output",
        help="Where to write the result (default: <image>_styled<ext>)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall deadline in seconds for the remote pipeline"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print progress lines"
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    style = StyleDescriptor(artist=args.artist, style=args.style, title=args.title)
    on_progress = None if args.quiet else (lambda message: print(message, flush=True))

    async with StyleTransferService(get_settings()) as service:
        result = await service.process(
            Path(args.image),
            style,
            on_progress=on_progress,
            timeout=args.timeout
        )

    output = Path(args.output) if args.output else _default_output(Path(args.image), result.result_path)
    if result.result_path is not None:
        shutil.move(str(result.result_path), output)
    else:
        output.write_bytes(result.data or b"")

    if result.is_mock:
        print(f"Remote generation unavailable ({result.fallback_reason}); wrote original photo to {output}",
              file=sys.stderr)
    else:
        print(f"Wrote {output} (source: {result.remote_url})")
    return 0


def _default_output(image: Path, result_path: Optional[Path]) -> Path:
    suffix = result_path.suffix if result_path is not None else image.suffix
    return image.with_name(f"{image.stem}_styled{suffix}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    init_monitoring(settings)

    for warning in validate_config(settings):
        print(f"warning: {warning}", file=sys.stderr)

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
