from __future__ import annotations

import shutil
from pathlib import Path


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def clean_output_dir(output_dir: Path, protected: Path) -> None:
    """Remove everything inside ``output_dir`` but keep the directory itself.

    Raises ``ValueError`` when ``output_dir`` is ``protected`` or one of its
    parents, so a misconfigured output path cannot wipe the sources.
    """
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    protected_resolved = protected.resolve()
    if output_resolved == protected_resolved or protected_resolved.is_relative_to(output_resolved):
        raise ValueError(f"Refusing to clean {output_dir}: it contains {protected}.")
    for item in output_dir.iterdir():
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()
