"""Decoder for objdump listings: opcode bytes and their printable forms."""

import logging
import re
from dataclasses import dataclass

from errors import GENERIC_FAILURE, AssemblyFailure
from toolchain import ENTRY_LABEL

logger = logging.getLogger(__name__)

ENTRY_MARKER = f"<{ENTRY_LABEL}>:\n"
FILE_FORMAT_MARKER = "file format "
SECTION_MARKER = "Disassembly of section "

# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

# Leading whitespace of every line, the first one included.
RE_LINE_INDENT = re.compile(r"(\n|^)\s*")

# Symbol lines such as "00000013 <loop>:".
RE_LABEL_LINE = re.compile(r"^[0-9a-fA-F]+\s+<[^>]*>:\s*$")

# A run of hex byte pairs, each followed by whitespace or end of line, that
# is not followed by "<non-s char>:" later on the line. The lookahead skips
# "address <label>:" lines but lets segment operands like "ds:0x0" through.
# Multi-letter segment names ending in something other than 's' would
# defeat it.
RE_BYTE_RUN = re.compile(r"([0-9a-fA-F]{2}(\s+|$))+(?!.*[^s]:)")

RE_HEX_PAIR = re.compile(r"[0-9a-fA-F]{2}")

LABEL, CODE, OTHER = "label", "code", "other"


def classify_line(line):
    """Classify one collapsed listing line. Returns (kind, bytes|None).

    kind: LABEL for symbol lines, CODE for lines carrying opcode bytes,
          OTHER for anything else
    """
    if RE_LABEL_LINE.match(line):
        return (LABEL, None)

    m = RE_BYTE_RUN.search(line)
    if m is None:
        return (OTHER, None)

    pairs = RE_HEX_PAIR.findall(m.group(0))
    return (CODE, bytes.fromhex("".join(pairs)))


def is_empty_listing(listing):
    """True if objdump read the object file but found no code to print.

    An empty .text section gives only the "file format" header line.
    """
    return FILE_FORMAT_MARKER in listing and SECTION_MARKER not in listing


def extract_code(listing):
    """Return the disassembly that follows the entry label, one line each.

    An empty listing gives "". Raises AssemblyFailure if the entry label
    is missing from a listing that does disassemble something.
    """
    start = listing.find(ENTRY_MARKER)
    if start < 0:
        if is_empty_listing(listing):
            return ""
        logger.warning("Entry label %s not found in objdump output",
                       ENTRY_LABEL)
        raise AssemblyFailure(GENERIC_FAILURE)

    code = listing[start + len(ENTRY_MARKER):]
    code = RE_LINE_INDENT.sub("\n", code)
    return code.strip()


def extract_bytes(code):
    """Concatenate the opcode bytes of every code line, in order."""
    data = bytearray()
    for line in code.split("\n"):
        kind, line_bytes = classify_line(line)
        if kind == CODE:
            data.extend(line_bytes)
    return bytes(data)

# ---------------------------------------------------------------------------
# Representations
# ---------------------------------------------------------------------------


def format_hex(data):
    return data.hex().upper()


def format_hex_zero_bold(data):
    """Hex with every zero byte wrapped in <b></b>.

    Only [0-9A-F] and the <b> tags are emitted, so the result can go into
    HTML unescaped.
    """
    parts = []
    for b in data:
        if b == 0:
            parts.append("<b>00</b>")
        else:
            parts.append(f"{b:02X}")
    return "".join(parts)


def format_string(data):
    return "".join(f"\\x{b:02X}" for b in data)


def format_array(data):
    """C initializer list, e.g. "{ 0xB8, 0x01 }"; empty data gives "{ }"."""
    items = ",".join(f" 0x{b:02X}" for b in data)
    return "{" + items + " }"


@dataclass(frozen=True)
class AssemblyResult:
    """Disassembled text plus machine code; every rendering derives from data."""

    code: str
    data: bytes

    @property
    def hex(self):
        return format_hex(self.data)

    @property
    def hex_zero_bold(self):
        return format_hex_zero_bold(self.data)

    @property
    def string(self):
        return format_string(self.data)

    @property
    def array(self):
        return format_array(self.data)

    def as_dict(self):
        return {
            "code": self.code,
            "hex": self.hex,
            "hex_zero_bold": self.hex_zero_bold,
            "string": self.string,
            "array": self.array,
        }

# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def decode(listing):
    """Turn an objdump listing into an AssemblyResult."""
    code = extract_code(listing)
    data = extract_bytes(code)
    logger.debug("Decoded %d bytes", len(data))
    return AssemblyResult(code=code, data=data)
