from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def load_json_config(path: Path) -> Any:
    """Load a JSON file (game config or contribution data) or raise a helpful error.

    Args:
        path: Path to the JSON file.

    Returns:
        The decoded JSON document.

    Raises:
        FileNotFoundError: If the file does not exist.
        SystemExit: If JSON is invalid, with a friendly message.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = (
            f"\nERROR: {path.name} is not valid JSON.\n"
            f"File: {path}\n"
            f"Line {e.lineno}, Col {e.colno}\n"
            f"{e.msg}\n\n"
            f"Contribution files hold a list of {{\"date\": \"YYYY-MM-DD\", \"count\": N}} "
            f"objects, or an object with a \"days\" list.\n"
        )
        raise SystemExit(msg)
