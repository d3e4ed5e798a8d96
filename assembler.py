#!/usr/bin/env python3
"""Online x86/x64 assembler: snippet -> gcc -> objdump -> opcode bytes."""

import json
import logging
import sys

import decoder
import toolchain
from errors import (
    GENERIC_FAILURE,
    AssemblerError,
    AssemblyFailure,
    InvalidMode,
    UnsafeCode,
)
from safety import is_safe

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Modes and limits
# ---------------------------------------------------------------------------

# Architecture name -> gcc flag.
MODES = {
    "x86": "-m32",
    "x64": "-m64",
}

DEFAULT_MODE = "x86"

MAX_CODE_LEN = 10 * 1024  # bytes of UTF-8 source

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class Assembler:
    """Assembles snippets for one caller in its currently selected mode.

    The mode is per-instance state: build one Assembler per caller (or per
    request) rather than sharing one between threads.
    """

    def __init__(self, mode=DEFAULT_MODE):
        self.mode = DEFAULT_MODE
        self.set_mode(mode)

    @property
    def arch_flag(self):
        return MODES[self.mode]

    def set_mode(self, mode):
        if not isinstance(mode, str) or mode not in MODES:
            raise InvalidMode(mode)
        self.mode = mode

    def check(self, code):
        """Raise UnsafeCode unless code is small enough and passes the filter."""
        try:
            size = len(code.encode("utf-8"))
        except UnicodeEncodeError:
            # Lone surrogates, e.g. "\ud800" from a JSON body.
            logger.info("Rejected source that is not valid UTF-8")
            raise UnsafeCode()
        if size >= MAX_CODE_LEN:
            logger.info("Rejected %d character source: too long", len(code))
            raise UnsafeCode()
        if not is_safe(code):
            raise UnsafeCode()

    def assemble(self, code):
        """Assemble code and return a decoder.AssemblyResult.

        Raises UnsafeCode before any external tool runs, or AssemblyFailure
        if gcc or objdump fail or the listing cannot be parsed.
        """
        self.check(code)
        try:
            listing = toolchain.invoke(code, self.arch_flag)
            return decoder.decode(listing)
        except AssemblyFailure as e:
            message = e.message.strip() or GENERIC_FAILURE
            raise AssemblyFailure(message) from e

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

FORMATS = ("hex", "string", "array", "code", "json")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="x86/x64 Online Assembler")
    parser.add_argument(
        "source", nargs="?",
        help="Assembly source file (reads stdin if omitted)")
    parser.add_argument(
        "--mode", choices=sorted(MODES), default=DEFAULT_MODE,
        help="Target architecture: x86 (32-bit, default) or x64 (64-bit)")
    parser.add_argument(
        "--format", choices=FORMATS, default="hex",
        help="Output format: hex (default), string (\\x escapes), "
             "array (C initializer), code (disassembly), json (everything)")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log tool invocations to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    if args.source:
        with open(args.source, "r") as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    asm = Assembler(args.mode)
    try:
        result = asm.assemble(source)
    except AssemblerError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if args.format == "json":
        print(json.dumps(result.as_dict(), indent=2))
    else:
        print(getattr(result, args.format))


if __name__ == "__main__":
    main()
