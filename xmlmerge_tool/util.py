from __future__ import annotations

import json
import os
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, cast


def to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj):
        return {k: to_jsonable(v) for k, v in asdict(cast(Any, obj)).items()}
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]
    return obj


def dumps_pretty(obj: Any) -> str:
    return json.dumps(to_jsonable(obj), indent=2, sort_keys=True, ensure_ascii=False)


def env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_str(name: str, default: str = "") -> str:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip() or default


def find_app_root(start: Path | None = None) -> Path:
    """Best-effort app root finder.

    Walks up from `start` looking for pyproject.toml or README.md, otherwise
    falls back to the current working directory.
    """
    try:
        cur = (start or Path(__file__).resolve().parent)
        for _ in range(8):
            if (cur / "pyproject.toml").is_file() or (cur / "README.md").is_file():
                return cur
            if cur.parent == cur:
                break
            cur = cur.parent
    except OSError:
        pass
    return Path.cwd()
