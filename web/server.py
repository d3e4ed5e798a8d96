#!/usr/bin/env python3
"""Web server for the online x86/x64 assembler."""

import sys
import os
import logging

from flask import Flask, request, jsonify, render_template

# Import the assembler service from the parent directory
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))
from assembler import MODES, Assembler  # noqa: E402
from errors import AssemblerError  # noqa: E402

logger = logging.getLogger(__name__)

app = Flask(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_MODE = os.environ.get("ASM_DEFAULT_MODE", "x86")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _failure(message):
    return jsonify(success=False, errors=[message], result=None)

# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.route("/")
def index():
    return render_template("index.html", modes=sorted(MODES),
                           default_mode=DEFAULT_MODE)


@app.route("/api/assemble", methods=["POST"])
def api_assemble():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        data = {}
    code = data.get("code", "")
    mode = data.get("mode") or DEFAULT_MODE

    if not isinstance(code, str):
        return _failure("Field 'code' must be a string")

    # One Assembler per request: the mode never leaks between callers.
    try:
        asm = Assembler(mode)
        result = asm.assemble(code)
    except AssemblerError as e:
        logger.info("Request failed: %s", type(e).__name__)
        return _failure(str(e))

    return jsonify(success=True, errors=[], result=result.as_dict())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port)
