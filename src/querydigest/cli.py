import argparse
import logging
import sys

from querydigest.digest import digest_queries, split_statements
from querydigest.errors import FingerprintError
from querydigest.sql.fingerprint import fingerprint, fingerprint_checksum

logger = logging.getLogger(__name__)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the querydigest CLI."""
    parser = argparse.ArgumentParser(description="SQL query fingerprinting CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Fingerprint Command
    fp_parser = subparsers.add_parser("fingerprint", help="Fingerprint a single query")
    fp_parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Query text (default: read from stdin)",
    )
    fp_parser.add_argument(
        "--checksum",
        action="store_true",
        help="Also print the fingerprint checksum",
    )

    # Digest Command
    digest_parser = subparsers.add_parser("digest", help="Group a query log by fingerprint")
    digest_parser.add_argument(
        "path",
        nargs="?",
        default="-",
        help="Query log file, one query per line (default: stdin)",
    )
    digest_parser.add_argument(
        "--delimiter",
        default=None,
        help="Statement delimiter such as ';' (default: newline)",
    )
    digest_parser.add_argument(
        "--top",
        type=int,
        default=None,
        help="Only report the N most frequent fingerprints",
    )
    return parser


def main(argv=None) -> int:
    """Run the querydigest CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "fingerprint":
        query = args.query if args.query is not None else sys.stdin.read()
        try:
            fp = fingerprint(query)
        except FingerprintError as e:
            logger.error(f"Fingerprinting failed: {e}")
            return 1
        print(fp)
        if args.checksum:
            print(fingerprint_checksum(fp))
    elif args.command == "digest":
        try:
            text = _read_input(args.path)
        except OSError as e:
            logger.error(f"Could not read {args.path}: {e}")
            return 1
        report = digest_queries(split_statements(text, delimiter=args.delimiter))
        if args.top is not None:
            report = report.top(args.top)
        print(report.model_dump_json(indent=2))
    else:
        parser.print_help()
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
