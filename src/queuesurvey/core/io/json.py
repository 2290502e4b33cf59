from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict


def dump_json(path: str | Path, obj: Dict[str, Any], *, indent: int = 2) -> Path:
    """Write JSON atomically through a temp file in the same directory."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(f".{p.name}.{os.getpid()}.tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=indent)
    os.replace(tmp, p)
    return p
