"""
Command-line interface.

Usage:
    qrlocate detect photo.jpg --json
    qrlocate decode crop.png -v
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from qrlocate import api
from qrlocate.config_loader import load_config

logger = logging.getLogger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_UNREADABLE = 2


def read_image(path: Path) -> Optional[np.ndarray]:
    """Read an image file as RGB (or RGBA when it has alpha)."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        return None
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrlocate",
        description="Locate and decode QR codes in images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Find a code anywhere in a photo
  qrlocate detect photo.jpg

  # Same, as JSON with corner coordinates
  qrlocate detect photo.jpg --json

  # Decode an image that is already cropped to the code
  qrlocate decode crop.png
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("detect", "Locate and decode a QR code"),
        ("decode", "Decode an image cropped to a QR code"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("image", type=Path, help="Input image file")
        sub.add_argument(
            "--config",
            type=Path,
            default=None,
            help="YAML configuration (default: bundled config.yaml)",
        )
        sub.add_argument(
            "-v", "--verbose", action="store_true", help="Enable debug logging"
        )
        if name == "detect":
            sub.add_argument(
                "--json", action="store_true", help="Print the full result as JSON"
            )

    return parser


async def _run(args: argparse.Namespace, image: np.ndarray) -> int:
    if args.command == "decode":
        text = await api.decode(image)
        if not text:
            print("No QR code decoded", file=sys.stderr)
            return EXIT_NOT_FOUND
        print(text)
        return EXIT_FOUND

    result = await api.detect(image)
    if result is None:
        if args.json:
            print(json.dumps(None))
        else:
            print("No QR code found", file=sys.stderr)
        return EXIT_NOT_FOUND

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(result.decoded_text)
    return EXIT_FOUND


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``qrlocate`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.config is not None:
        api.configure(load_config(args.config))

    image = read_image(args.image)
    if image is None:
        logger.error(f"Cannot read image: {args.image}")
        return EXIT_UNREADABLE

    return asyncio.run(_run(args, image))


if __name__ == "__main__":
    sys.exit(main())
