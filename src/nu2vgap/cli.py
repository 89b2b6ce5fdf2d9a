"""
CLI entry point for nu2vgap.

Usage:
    nu2vgap rst <file>      Convert a Nu result into legacy result files
    nu2vgap vcr <file>      Write spec files and combat recordings only
    nu2vgap dump <file>     Pretty-print a Nu result document
    nu2vgap parse <file>    Parse a Nu result and show a summary
"""

import argparse
import logging
import sys
from pathlib import Path

from nu2vgap import __version__
from nu2vgap.errors import Nu2VgapError

logger = logging.getLogger(__name__)


def _load_config(args):
    from .config import ConverterConfig

    config = ConverterConfig(Path(args.config) if args.config else None)
    return config.override(root_dir=args.root, output_dir=args.output)


def cmd_rst(args):
    """Convert a Nu result into spec files, result and status file."""
    from .converter import convert_result, load_document

    doc = load_document(args.file)
    for path in convert_result(doc, _load_config(args)):
        logger.debug("wrote %s", path)
    return 0


def cmd_vcr(args):
    """Write spec files and the combat recording file."""
    from .converter import convert_vcr, load_document

    doc = load_document(args.file)
    for path in convert_vcr(doc, _load_config(args)):
        logger.debug("wrote %s", path)
    return 0


def cmd_dump(args):
    """Pretty-print a document."""
    from .parser import dump, parse_file

    sys.stdout.write(dump(parse_file(args.file)))
    return 0


def cmd_parse(args):
    """Parse a document and show a summary."""
    from .document import GameDocument

    doc = GameDocument.from_file(args.file)
    print(f"Parsed: {args.file}")
    print(f"Game: {doc.game_name}, turn {doc.turn}")
    print(f"Player: {doc.player_id} (race {doc.race_id})")
    for key in ("ships", "planets", "starbases", "messages", "vcrs"):
        print(f"  {key}: {len(doc.items(key))}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Convert Nu results into VGA Planets files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    nu2vgap rst c2rst.txt
    nu2vgap --root /usr/share/planets --output game1 rst c2rst.txt
    nu2vgap dump c2rst.txt > c2rst.pretty
"""
    )
    parser.add_argument('--version', action='version', version=f'nu2vgap {__version__}')
    parser.add_argument('--root', help='Directory with baseline spec files')
    parser.add_argument('--output', help='Directory to write files to')
    parser.add_argument('--config', help='Configuration file (YAML)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # rst
    rst_p = subparsers.add_parser('rst', help='Convert a result')
    rst_p.add_argument('file', help='Nu result document')
    rst_p.set_defaults(func=cmd_rst)

    # vcr
    vcr_p = subparsers.add_parser('vcr', help='Write combat recordings')
    vcr_p.add_argument('file', help='Nu result document')
    vcr_p.set_defaults(func=cmd_vcr)

    # dump
    dump_p = subparsers.add_parser('dump', help='Pretty-print a document')
    dump_p.add_argument('file', help='Nu result document')
    dump_p.set_defaults(func=cmd_dump)

    # parse
    parse_p = subparsers.add_parser('parse', help='Parse and summarize a document')
    parse_p.add_argument('file', help='Nu result document')
    parse_p.set_defaults(func=cmd_parse)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (Nu2VgapError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
