from __future__ import annotations

import importlib
from typing import Any


def is_dotted_path(value: str) -> bool:
    return ":" in value or "." in value


def load_symbol(dotted: str) -> Any:
    """
    Load a class or function from a dotted path.
    Supports both "package.module:ClassName" and "package.module.ClassName".
    Raises ImportError when the module or the attribute cannot be found.
    """
    if ":" in dotted:
        module_name, symbol_name = dotted.split(":", 1)
    elif "." in dotted:
        module_name, symbol_name = dotted.rsplit(".", 1)
    else:
        raise ImportError(f"{dotted!r} is not a dotted path (expected module:Name)")

    module = importlib.import_module(module_name)
    try:
        return getattr(module, symbol_name)
    except AttributeError as exc:
        raise ImportError(f"module {module_name!r} has no attribute {symbol_name!r}") from exc
