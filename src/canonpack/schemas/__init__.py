"""JSON Schemas shipped with canonpack.

Schemas are loaded once and cached; ``schema_errors`` wraps
``jsonschema`` so callers get a flat list of readable messages.
"""

import json
from functools import cache
from importlib import resources
from typing import Any

import jsonschema

__all__ = ["PACK_MANIFEST", "REDIRECT_MAP", "LOG_EVENT", "load_schema", "schema_errors"]

PACK_MANIFEST = "pack_manifest.schema.json"
REDIRECT_MAP = "redirect_map.schema.json"
LOG_EVENT = "log_event.schema.json"


@cache
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON Schema by file name.

    Parameters
    ----------
    name : str
        Schema file name (e.g., 'pack_manifest.schema.json').

    Returns
    -------
    dict[str, Any]
        Parsed schema document.
    """
    text = resources.files(__name__).joinpath(name).read_text(encoding="utf-8")
    return json.loads(text)


def schema_errors(instance: Any, name: str) -> list[str]:
    """Validate an instance and return every violation as a message.

    An empty list means the instance is valid.
    """
    validator = jsonschema.Draft202012Validator(load_schema(name))
    messages = []
    for error in sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path)):
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        messages.append(f"{location}: {error.message}")
    return messages
