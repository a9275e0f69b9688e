# directo/cli.py
"""
Command-line tool for managing Directo XSD schema files.

Usage:
    directo-schemas list [--base-url URL]
    directo-schemas download [--output DIR] [--base-url URL]

Exit codes: 0 on success, 1 on any failure, 130 when interrupted.
"""

import argparse
import sys
from typing import List, Optional

from directo.config import DEFAULT_SCHEMA_BASE_URL
from directo.exceptions import HelpfulError
from directo.logger import configure_logging, setup_logger
from directo.path_helpers import get_dir, Dir
from directo.schema_downloader import SchemaDownloader

logger = setup_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="directo-schemas",
        description="List or download the XSD schemas used by the Directo XMLCore SDK",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show schema files and their URLs")
    list_parser.add_argument("--base-url", default=DEFAULT_SCHEMA_BASE_URL,
                             help="Base URL schemas are published under")

    download_parser = subparsers.add_parser("download", help="Download all schema files")
    download_parser.add_argument("--output", default=None,
                                 help="Target directory (default: bundled resources/xsd)")
    download_parser.add_argument("--base-url", default=DEFAULT_SCHEMA_BASE_URL,
                                 help="Base URL schemas are published under")
    return parser


def run_list(args: argparse.Namespace) -> int:
    downloader = SchemaDownloader(get_dir(Dir.XSD), args.base_url)
    for schema in downloader.get_all_schemas():
        print(f"{schema['file']}\t{schema['url']}")
    return 0


def run_download(args: argparse.Namespace) -> int:
    output = args.output or get_dir(Dir.XSD)
    downloader = SchemaDownloader(output, args.base_url)
    results = downloader.download_all()

    for schema_file, path in results['success'].items():
        print(f"✅ {schema_file} -> {path}")
    for schema_file, reason in results['failed'].items():
        print(f"❌ {schema_file}: {reason}")

    if results['failed']:
        raise HelpfulError(
            what_went_wrong=f"{len(results['failed'])} schema file(s) could not be downloaded",
            how_to_fix="Check network access to the schema server and the --base-url value",
            example=f"directo-schemas download --base-url {DEFAULT_SCHEMA_BASE_URL}"
        )
    if not results['success']:
        raise HelpfulError(
            what_went_wrong=f"No schema files were written to {output}",
            how_to_fix="Make sure the output directory is writable"
        )

    print(f"Downloaded {len(results['success'])} schema file(s) to {output}")
    return 0


COMMANDS = {
    "list": run_list,
    "download": run_download,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except HelpfulError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


def run() -> None:
    """Console script: enable console logging, then exit with main()'s code."""
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
