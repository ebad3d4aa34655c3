"""
orderforms/core/paths.py — Centralized Path Configuration

Single source of truth for directory and file paths. Every module imports
from here instead of computing its own DATA_DIR.
"""

import os
import logging

log = logging.getLogger("orderforms.paths")

# ── Project Root ──────────────────────────────────────────────────────────────
_THIS_FILE = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(_THIS_FILE)))

_DEFAULT_DATA_DIR = os.path.join(PROJECT_ROOT, "data")


# ── Resolve DATA_DIR ──────────────────────────────────────────────────────────
# Priority: ORDERFORMS_DATA_DIR env → project data/
def _resolve_data_dir() -> str:
    env_dir = os.environ.get("ORDERFORMS_DATA_DIR", "")
    if env_dir:
        return env_dir
    return _DEFAULT_DATA_DIR


DATA_DIR = _resolve_data_dir()
LOG_DIR = os.path.join(DATA_DIR, "logs")
OUTPUT_DIR = os.environ.get("ORDERFORMS_OUTPUT_DIR", os.path.join(PROJECT_ROOT, "output"))

# ── Key File Paths ───────────────────────────────────────────────────────────
CONFIG_PATH = os.environ.get("ORDERFORMS_CONFIG", os.path.join(PROJECT_ROOT, "orderforms_config.json"))
PURCHASE_FORM_PATH = os.environ.get(
    "ORDERFORMS_PURCHASE_FORM",
    os.path.join(DATA_DIR, "Jonsson School Student Organization Purchase Form.pdf"),
)


def validate_paths() -> dict:
    """Runtime validation. Call at app startup to catch path issues early.

    Returns:
        {"ok": bool, "errors": [str], "warnings": [str], "resolved": {name: path}}
    """
    result = {"ok": True, "errors": [], "warnings": [], "resolved": {}}

    checks = {
        "PROJECT_ROOT": (PROJECT_ROOT, True),
        "PURCHASE_FORM_PATH": (PURCHASE_FORM_PATH, True),
        "CONFIG_PATH": (CONFIG_PATH, False),
        "DATA_DIR": (DATA_DIR, False),
    }

    for name, (path, required) in checks.items():
        result["resolved"][name] = path
        if not os.path.exists(path):
            if required:
                result["errors"].append(f"{name} not found: {path}")
                result["ok"] = False
            else:
                result["warnings"].append(f"{name} not found: {path}")

    for msg in result["errors"]:
        log.error(msg)
    for msg in result["warnings"]:
        log.warning(msg)
    return result
