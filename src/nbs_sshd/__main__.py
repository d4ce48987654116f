"""
CLI interface for nbs-sshd.

Usage:
    python -m nbs_sshd check /etc/ssh/sshd_config           # Parse and summarise
    python -m nbs_sshd check --json sshd_config             # Summary/error as JSON
    python -m nbs_sshd format sshd_config                   # Canonical form to stdout
    python -m nbs_sshd format sshd_config -o normalised     # Canonical form to file
    python -m nbs_sshd -v check sshd_config                 # Debug logging
    python -m nbs_sshd --help

Exit codes:
    0  Success
    1  The file is not a valid sshd_config
    2  The file could not be read or written
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

EXIT_OK = 0
EXIT_FORMAT_ERROR = 1
EXIT_IO_ERROR = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    from nbs_sshd import __version__

    parser = argparse.ArgumentParser(
        prog="nbs-sshd",
        description="Read, check and normalise OpenSSH server configuration files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v info, -vv debug)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser(
        "check",
        help="Parse a file and report whether it is valid",
    )
    check.add_argument("file", help="sshd_config file to read")
    check.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the file (default: utf-8)",
    )
    check.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the summary or error as JSON",
    )

    fmt = subparsers.add_parser(
        "format",
        help="Parse a file and write it back in canonical form",
    )
    fmt.add_argument("file", help="sshd_config file to read")
    fmt.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the input and output (default: utf-8)",
    )
    fmt.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write to FILE instead of stdout",
    )

    return parser


def configure_logging(verbose: int, quiet: bool) -> None:
    """Set up logging based on verbosity and quiet mode."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("asyncssh").setLevel(
        logging.DEBUG if verbose >= 3 else logging.WARNING
    )


def summarise(config: Any) -> dict[str, Any]:
    """Build a JSON-friendly summary of a parsed configuration."""
    return {
        "port": config.port,
        "host_key_file": config.host_key_file,
        "log_level": config.log_level.value,
        "subsystems": [str(s) for s in config.subsystems],
        "match_blocks": len(config.matches),
        "accepted_environment_variables": list(config.accepted_environment_variables),
        "ciphers": [str(c) for c in config.ciphers],
        "host_key_algorithms": [str(a) for a in config.host_key_algorithms],
        "key_exchange_algorithms": [str(a) for a in config.key_exchange_algorithms],
        "mac_algorithms": [str(a) for a in config.mac_algorithms],
    }


def run_check(args: argparse.Namespace) -> int:
    """Parse the file and report the result."""
    from nbs_sshd import FormatError, load_file

    try:
        config = load_file(args.file, encoding=args.encoding)
    except FormatError as e:
        if args.json_output:
            print(json.dumps({"valid": False, "error": e.to_dict()}))
        else:
            print(f"error: {args.file}: {e}", file=sys.stderr)
        return EXIT_FORMAT_ERROR

    summary = summarise(config)
    if args.json_output:
        print(json.dumps({"valid": True, "config": summary}))
    else:
        print(
            f"{args.file}: ok (port {summary['port']}, "
            f"{len(summary['subsystems'])} subsystem(s), "
            f"{summary['match_blocks']} Match block(s))"
        )
    return EXIT_OK


def run_format(args: argparse.Namespace) -> int:
    """Parse the file and write its canonical form."""
    from nbs_sshd import FormatError, load_file, save_file, serialize

    try:
        config = load_file(args.file, encoding=args.encoding)
    except FormatError as e:
        print(f"error: {args.file}: {e}", file=sys.stderr)
        return EXIT_FORMAT_ERROR

    if args.output:
        save_file(config, args.output, encoding=args.encoding)
    else:
        sys.stdout.write(serialize(config))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.quiet)
    log = logging.getLogger("nbs_sshd.cli")

    handlers = {
        "check": run_check,
        "format": run_format,
    }

    try:
        return handlers[args.command](args)
    except (OSError, UnicodeError, LookupError) as e:
        log.debug("I/O failure for %s", args.file, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
