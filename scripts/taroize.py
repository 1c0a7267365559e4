#!/usr/bin/env python
"""
Convert a mini-program page to a Taro class component.

Reads the page's WXML template, script and JSON configuration from files
and writes the generated module to stdout or a file.

Usage:
    python scripts/taroize.py --wxml index.wxml --js index.js --json index.json
    python scripts/taroize.py --wxml index.wxml -o index.jsx
"""
import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.services.taroize import ConversionError, TaroizeConverter

logger = logging.getLogger(__name__)


def read_source(path):
    """Read a source file, or return None when no path was given"""
    if path is None:
        return None
    return Path(path).read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Convert a WeChat mini-program page to a Taro component')
    parser.add_argument('--wxml', help='WXML template file')
    parser.add_argument('--js', dest='script', help='Page/Component/App script file')
    parser.add_argument('--json', help='Page configuration JSON file')
    parser.add_argument('--class-name', help='Class name for Page and Component registrations')
    parser.add_argument('--key-attribute', help='Attribute that wx:key is renamed to')
    parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.wxml is None and args.script is None:
        print("Nothing to convert: pass --wxml and/or --js", file=sys.stderr)
        return 2

    options = {}
    if args.class_name:
        options["className"] = args.class_name
    if args.key_attribute:
        options["keyAttribute"] = args.key_attribute

    try:
        wxml = read_source(args.wxml)
        script = read_source(args.script)
        json = read_source(args.json)
    except OSError as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 1

    try:
        result = TaroizeConverter().convert(wxml=wxml, script=script, json=json, options=options)
    except ConversionError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(result["code"], encoding="utf-8")
        print(f"Wrote {result['kind']} component to {output_path}", file=sys.stderr)
    else:
        sys.stdout.write(result["code"])

    if result["components"]:
        logger.debug(f"Components: {', '.join(result['components'])}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
