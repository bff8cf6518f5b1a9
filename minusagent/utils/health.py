from __future__ import annotations
import os
from pathlib import Path
import importlib
from typing import Tuple, List

from minusagent.config import config_path, skills_dir


def _check_api_key(messages: List[str]) -> bool:
    if config_path().is_file():
        messages.append(f"config file present: {config_path()}")
        return True
    api_key = os.getenv("LLM_API_KEY", "").strip()
    if not api_key:
        messages.append("LLM_API_KEY missing or empty (and no config file)")
        return False
    messages.append("LLM_API_KEY present")
    return True


essential_imports = [
    ("requests", "requests import failed"),
    ("pydantic", "pydantic import failed"),
    ("yaml", "PyYAML import failed"),
    ("tenacity", "tenacity import failed"),
]


def _check_imports(messages: List[str]) -> bool:
    ok = True
    for modname, errprefix in essential_imports:
        try:
            importlib.import_module(modname)
            messages.append(f"{modname} import ok")
        except ImportError as e:
            messages.append(f"{errprefix}: {e.__class__.__name__}: {e}")
            ok = False
    return ok


def _check_logfile(messages: List[str]) -> bool:
    log_file = os.getenv("LOG_FILE", "minusagent.log")
    path = Path(log_file)
    try:
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a"):
            pass
        messages.append(f"log file writable: {path}")
        return True
    except OSError as e:
        messages.append(f"log file not writable: {path} -> {e}")
        return False


def _note_skills(messages: List[str]) -> None:
    path = skills_dir()
    if path.is_dir():
        messages.append(f"skills directory: {path}")
    else:
        messages.append(f"no skills directory at {path} (optional)")


def healthcheck_env() -> Tuple[bool, List[str]]:
    """
    Run basic environment health checks.
    - Verifies a config file or LLM_API_KEY is available
    - Verifies key dependency imports
    - Verifies the log file path is writable (LOG_FILE or minusagent.log)

    Returns: (ok, messages)
    """
    messages: List[str] = []
    results = [
        _check_api_key(messages),
        _check_imports(messages),
        _check_logfile(messages),
    ]
    _note_skills(messages)
    ok = all(results)
    return ok, messages
