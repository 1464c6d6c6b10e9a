#!/usr/bin/env python3
"""
CSAF Validator -- Checks CSAF 2.0 and 2.1 advisories against the
normative rules of the CSAF standard (mandatory, optional and informative tests).

Usage:
  python main.py advisory.json
  python main.py advisory.json --preset full
  python main.py advisory.json --test 6.1.1 6.1.27.4
  python main.py advisory.json --csaf-version 2.1
  python main.py advisory.json --json
  python main.py advisory.json --no-color --only-failures
  cat advisory.json | python main.py -
  python main.py --web --port 8000

Environment variables:
  DEFAULT_PRESET      Preset used when neither --preset nor --test is given (default: basic).
  MAX_DOCUMENT_SIZE   Largest accepted document in bytes.
  LOG_LEVEL           Diagnostic logging on stderr (default: WARNING).
"""

import argparse
import logging
import sys
from typing import Optional

from core.config import get_settings
from core.formatter import disable_color, print_terminal, to_json
from core.loader import LoadError, load_document, load_document_from_str
from core.models import CsafVersion, ValidationPreset
from core.validation import validate_document

logger = logging.getLogger("csafvalidator.cli")

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_LOAD_ERROR = 2


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _run_web(host: Optional[str], port: Optional[int]) -> None:
    """Serve the REST API. Imported lazily so the CLI works without the API extras."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csaf-validator",
        description="Validate CSAF 2.0 / 2.1 documents against the CSAF test catalogue.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Presets:
  basic     mandatory tests (6.1.x)
  extended  mandatory and optional tests (6.1.x, 6.2.x)
  full      mandatory, optional and informative tests (6.1.x, 6.2.x, 6.3.x)

Exit codes:
  0  all executed tests passed
  1  at least one test failed
  2  the document could not be read or parsed

Examples:
  python main.py advisory.json
  python main.py advisory.json --preset extended
  python main.py advisory.json --test 6.1.14 6.1.16 --json
  python main.py --web
        """,
    )
    parser.add_argument(
        "path",
        nargs="?",
        metavar="PATH",
        help="CSAF JSON document to validate ('-' reads standard input)",
    )
    parser.add_argument(
        "-c",
        "--csaf-version",
        choices=[v.value for v in CsafVersion],
        default=None,
        metavar="VERSION",
        help="Force the schema version (2.0 or 2.1) instead of reading /document/csaf_version",
    )
    parser.add_argument(
        "-p",
        "--preset",
        choices=[p.value for p in ValidationPreset],
        default=None,
        metavar="PRESET",
        help="Test preset: basic, extended, or full (default: DEFAULT_PRESET or basic)",
    )
    parser.add_argument(
        "-t",
        "--test",
        dest="test_ids",
        nargs="+",
        metavar="ID",
        help="Run only these test ids (e.g. 6.1.1 6.1.27.4); overrides --preset",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output the validation result as JSON",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI color codes in terminal output",
    )
    parser.add_argument(
        "--only-failures",
        action="store_true",
        help="List only failed tests in terminal output",
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Start the REST API instead of validating a file",
    )
    parser.add_argument("--host", default=None, help="Bind address for --web (default: API_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port for --web (default: API_PORT)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging()

    if args.web:
        _run_web(args.host, args.port)
        return EXIT_VALID

    if not args.path:
        parser.print_help()
        return EXIT_LOAD_ERROR

    # Apply color preference before any output
    if args.no_color:
        disable_color()

    csaf_version = CsafVersion(args.csaf_version) if args.csaf_version else None
    try:
        if args.path == "-":
            doc = load_document_from_str(sys.stdin.read(), csaf_version)
        else:
            doc = load_document(args.path, csaf_version)
    except LoadError as e:
        logger.debug("Load failed for %s", args.path, exc_info=True)
        print(f"  [!] {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    preset = ValidationPreset(args.preset) if args.preset else None
    result = validate_document(doc, preset=preset, test_ids=args.test_ids)
    logger.debug("Validation finished: success=%s errors=%d", result.success, result.num_errors)

    if args.json:
        print(to_json(result))
    else:
        source = "<stdin>" if args.path == "-" else args.path
        print_terminal(source, result, only_failures=args.only_failures)

    return EXIT_VALID if result.success else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
