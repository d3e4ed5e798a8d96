"""Runs a snippet through gcc and objdump and returns the disassembly text."""

import logging
import os
import re
import subprocess
import tempfile
import uuid

from errors import GENERIC_FAILURE, AssemblyFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

CC_PATH = os.environ.get("ASM_CC", "gcc")
OBJDUMP_PATH = os.environ.get("ASM_OBJDUMP", "objdump")
TOOL_TIMEOUT = float(os.environ.get("ASM_TIMEOUT", "10"))

# Label placed in front of the user code; the decoder looks for it in the
# objdump listing.
ENTRY_LABEL = "_main"

ASSEMBLER_BANNER = "Assembler messages:\n"

# ---------------------------------------------------------------------------
# Source and diagnostics
# ---------------------------------------------------------------------------


def build_source(code):
    """Wrap user code in the translation unit handed to gcc."""
    return f".intel_syntax noprefix\n{ENTRY_LABEL}:\n{code}\n"


def clean_diagnostic(text, source_path):
    """Strip the temp file path, line numbers and banner from gcc output.

    "/tmp/x/ab12.s:3: Error: no such instruction: `foo'"
    becomes "Error: no such instruction: `foo'".
    """
    text = re.sub(re.escape(source_path) + r":(\d+:|)\s*", "", text)
    return text.replace(ASSEMBLER_BANNER, "")

# ---------------------------------------------------------------------------
# Process execution
# ---------------------------------------------------------------------------


def run_tool(args, merge_stderr=False):
    """Run one external tool and return the CompletedProcess."""
    logger.debug("Running %s", " ".join(args))
    try:
        return subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            timeout=TOOL_TIMEOUT,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s timed out after %.1fs", args[0], TOOL_TIMEOUT)
        raise AssemblyFailure(f"{os.path.basename(args[0])} timed out.")
    except OSError:
        logger.exception("Could not execute %s", args[0])
        raise AssemblyFailure(GENERIC_FAILURE)


def invoke(code, arch_flag):
    """Assemble code with gcc, disassemble it with objdump, return listing.

    arch_flag is passed straight to gcc ("-m32" or "-m64"). All temporary
    files live in a private directory that is removed on every exit path.
    """
    with tempfile.TemporaryDirectory(prefix="asm-",
                                     ignore_cleanup_errors=True) as workdir:
        # .s (lowercase) keeps gcc from running the file through cpp.
        name = uuid.uuid4().hex
        source_path = os.path.join(workdir, name + ".s")
        obj_path = os.path.join(workdir, name + ".o")

        with open(source_path, "w") as f:
            f.write(build_source(code))

        proc = run_tool(
            [CC_PATH, arch_flag, "-c", source_path, "-o", obj_path],
            merge_stderr=True)
        if proc.returncode != 0:
            logger.info("gcc exited with status %d", proc.returncode)
            raise AssemblyFailure(clean_diagnostic(proc.stdout, source_path))

        # -z keeps objdump from folding runs of zero bytes into "...".
        proc = run_tool([OBJDUMP_PATH, "-M", "intel", "-d", "-z", obj_path])
        if proc.returncode != 0:
            logger.warning("objdump exited with status %d: %s",
                           proc.returncode, proc.stderr.strip())
            raise AssemblyFailure(GENERIC_FAILURE)

        return proc.stdout
