#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
RomPatch - Command Line

Verifies, applies and removes S-record patches on ROM images.

    rompatch dump <patch>
    rompatch test|apply|applied|remove <patch> <rom>
    rompatch baseline <patch> <rom> > baseline.srec
"""

import sys
import logging
import argparse
from typing import List, Optional

from rompatch.version import ENGINE_VERSION, load_version

logger = logging.getLogger("rompatch.cli")

_PATCH_MODES = ("test", "apply", "applied", "remove")


def _print_err(message: str) -> None:
    print(message, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rompatch",
        description="RomPatch - verify, apply and remove S-record patches on ROM images",
    )
    parser.add_argument("--version", action="store_true", help="Show version information")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-json", action="store_true", help="Write diagnostic logs as JSON")
    parser.add_argument("--config", metavar="PATH", help="Path to a rompatch.json config file")

    commands = parser.add_subparsers(dest="command", metavar="command")

    dump = commands.add_parser("dump", help="List the records and blobs of a patch file")
    dump.add_argument("patch", help="Patch file (S-records)")

    helps = {
        "test": "Check whether a patch can be applied to a ROM",
        "apply": "Apply a patch to a ROM",
        "applied": "Check whether a patch has been applied to a ROM",
        "remove": "Remove a previously applied patch from a ROM",
    }
    for name in _PATCH_MODES:
        sub = commands.add_parser(name, help=helps[name])
        sub.add_argument("patch", help="Patch file (S-records)")
        sub.add_argument("rom", help="ROM image")

    baseline = commands.add_parser(
        "baseline", help="Write baseline S-records for a patch file to stdout"
    )
    baseline.add_argument("patch", help="Patch file with metadata and patch data")
    baseline.add_argument("rom", help="Unpatched ROM image")

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command line arguments."""
    return build_parser().parse_args(argv)


def _configure_logging(args: argparse.Namespace, settings) -> None:
    from rompatch.logging_config import setup_logging

    log_settings = settings.logging
    setup_logging(
        log_level="DEBUG" if args.debug else log_settings.level,
        log_dir=log_settings.log_dir,
        enable_file_logging=log_settings.file_logging,
        structured_json=True if args.log_json else (log_settings.json_format or None),
    )


def _run(args: argparse.Namespace) -> int:
    from rompatch.app import PatchMode, dump_patch_file, generate_baseline, run_patch
    from rompatch.config import load_settings

    settings = load_settings(args.config)
    _configure_logging(args, settings)
    logger.debug("Running %s", args.command)

    if args.command == "dump":
        report = dump_patch_file(args.patch, log_cb=print)
        return 0 if report.success else 1

    if args.command == "baseline":
        report = generate_baseline(
            args.patch,
            args.rom,
            sys.stdout,
            srecord_settings=settings.srecord,
            log_cb=_print_err,
        )
        return 0 if report.success else 1

    report = run_patch(
        args.patch,
        args.rom,
        PatchMode(args.command),
        settings=settings.workflow,
        log_cb=print,
    )
    return 0 if report.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the command line tool."""
    args = parse_arguments(argv)

    if args.version:
        print(f"RomPatch v{load_version()} (engine version {ENGINE_VERSION})")
        return 0

    if not args.command:
        build_parser().print_usage(sys.stderr)
        return 1

    try:
        return _run(args)
    except Exception as e:
        logger.error("RomPatch %s failed: %s", args.command, e, exc_info=args.debug)
        _print_err(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
