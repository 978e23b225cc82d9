"""
JSON document helpers shared by the per-user stores.

Both helpers raise PersistenceError; the stores decide whether that falls
back to defaults (reads) or is only logged (writes).
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .errors import PersistenceError

T = TypeVar("T")


def read_document(path: Path, adapter: TypeAdapter[T]) -> T:
    """Read and validate a JSON document."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return adapter.validate_python(data)
    except (OSError, ValueError, ValidationError) as e:
        raise PersistenceError(f"Cannot read {path}: {e}") from e


def write_document(path: Path, data: Any) -> None:
    """Write a JSON document, replacing the previous one atomically."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
    except (OSError, TypeError) as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e
