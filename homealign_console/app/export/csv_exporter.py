from __future__ import annotations

from pathlib import Path

DEFAULT_EXPORT_DIR = "exports"


def export_filename(entity: str) -> str:
    return f"{entity}.csv"


def save_export(*, entity: str, payload: bytes, output_dir: str | Path = DEFAULT_EXPORT_DIR) -> Path:
    """Write the server-rendered CSV for ``entity`` and return where it landed.

    An earlier export of the same entity is overwritten.
    """
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / export_filename(entity)
    path.write_bytes(payload)
    return path
