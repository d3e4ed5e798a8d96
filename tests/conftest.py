"""Shared fixtures: canned objdump listings and a fake toolchain."""

import pytest

import toolchain


# ---------------------------------------------------------------------------
# objdump -M intel -d listings
# ---------------------------------------------------------------------------

MOV_RET_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "00000000 <_main>:\n"
    "   0:\tb8 01 00 00 00       \tmov    eax,0x1\n"
    "   5:\tc3                   \tret\n"
)

NOP_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "00000000 <_main>:\n"
    "   0:\t90                   \tnop\n"
)

LABEL_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "00000000 <_main>:\n"
    "   0:\t31 c0                \txor    eax,eax\n"
    "\n"
    "00000002 <loop>:\n"
    "   2:\t40                   \tinc    eax\n"
    "   3:\teb fd                \tjmp    2 <loop>\n"
)

SEGMENT_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "00000000 <_main>:\n"
    "   0:\tff 25 00 00 00 00    \tjmp    DWORD PTR ds:0x0\n"
)

WRAPPED_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf64-x86-64\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "0000000000000000 <_main>:\n"
    "   0:\t48 b8 88 77 66 55 44 \tmovabs rax,0x1122334455667788\n"
    "   7:\t33 22 11 \n"
    "   a:\tc3                   \tret\n"
)

# What objdump prints for an object file whose .text is empty.
EMPTY_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
)

# Disassembles something, but not the entry label.
NO_ENTRY_LISTING = (
    "\n"
    "/tmp/asm-k2j1/0f3c.o:     file format elf32-i386\n"
    "\n"
    "\n"
    "Disassembly of section .text:\n"
    "\n"
    "00000000 <start>:\n"
    "   0:\tc3                   \tret\n"
)

GARBAGE_LISTING = "objdump: /tmp/asm-k2j1/0f3c.o: file truncated\n"


# ---------------------------------------------------------------------------
# Fake toolchain
# ---------------------------------------------------------------------------


class FakeToolchain:
    """Stands in for toolchain.invoke and records every call."""

    def __init__(self, listing=MOV_RET_LISTING, error=None):
        self.listing = listing
        self.error = error
        self.calls = []

    def __call__(self, code, arch_flag):
        self.calls.append((code, arch_flag))
        if self.error is not None:
            raise self.error
        return self.listing


@pytest.fixture
def fake_toolchain(monkeypatch):
    """Replace toolchain.invoke with a FakeToolchain returning MOV_RET_LISTING."""
    fake = FakeToolchain()
    monkeypatch.setattr(toolchain, "invoke", fake)
    return fake
