"""Helper functions for medmap"""

import json
import os
import re
from typing import Any, Dict


def load_file(path, default=None, type: str = "r"):
    """Load a file or: raise an exception/return default"""
    try:
        with open(path, type, encoding="utf-8" if type == "r" else None) as fp:
            return fp.read()
    except FileNotFoundError as e:
        if default is None:
            raise e
        return default


def ensure_directories_exist(path: str) -> None:
    """Checks if the directories in the provided path exist and creates them if not"""
    abs_path = os.path.dirname(os.path.abspath(os.path.expanduser(path)))

    if not os.path.exists(abs_path):
        os.makedirs(abs_path)


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return base updated with override, keys in base win if both are set"""
    merged = dict(override or {})
    for key, val in (base or {}).items():
        if val is not None:
            merged[key] = val
    return merged


def parse_json_response(text: str) -> Any:
    """Parse a model reply as JSON, unwrapping a Markdown code fence if present"""
    src = (text or "").strip()
    fence = re.match(r"^```(?:json)?\s*(.*?)\s*```$", src, re.DOTALL)
    if fence:
        src = fence.group(1)
    return json.loads(src or "{}")
