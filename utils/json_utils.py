"""Shared JSON utility functions.

JSON loading for configuration files and JSON saving for simulation
reports (metrics, MAC statistics).
"""
import json
from enum import Enum
from pathlib import Path
from typing import Any, Union


def load_json(file_path: Union[str, Path]) -> Any:
    """
    Load JSON from a file.

    Args:
        file_path: Path to the JSON file (string or Path object)

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If file does not exist
        json.JSONDecodeError: If JSON is malformed or the file is empty
    """
    path = Path(file_path)

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
        if not content.strip():
            raise json.JSONDecodeError("File is empty", content, 0)
        return json.loads(content)


def _default(value: Any) -> Any:
    """Serialize enums by value and anything else by str()"""
    if isinstance(value, Enum):
        return value.value
    return str(value)


def dumps_report(data: Any, indent: int = 2) -> str:
    """Serialize a report dictionary (enums and addresses allowed)"""
    return json.dumps(data, indent=indent, ensure_ascii=False, default=_default)


def save_json(
    data: Any,
    file_path: Union[str, Path],
    indent: int = 2
) -> None:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize to JSON
        file_path: Path to the output file
        indent: JSON indentation level (default: 2)

    Raises:
        PermissionError: If file cannot be written
        OSError: If directory cannot be created
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps_report(data, indent=indent))
