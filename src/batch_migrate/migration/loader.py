# src/batch_migrate/migration/loader.py

from __future__ import annotations

import importlib
import inspect
import logging
from typing import Any

from ..errors import HooksLoadError

logger = logging.getLogger(__name__)

_REQUIRED = ("apply", "start_transaction", "commit_transaction", "rollback_transaction")


def _looks_like_hooks(obj: Any) -> bool:
    return all(callable(getattr(obj, name, None)) for name in _REQUIRED)


def load_hooks(spec: str, **kwargs: Any) -> Any:
    """
    Resolve "package.module:attr" into a MigrationHooks object.

    attr may be:
    - a ready hooks object (kwargs must be empty),
    - a class or factory function, called with **kwargs.
    """
    spec = (spec or "").strip()
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise HooksLoadError(f"Expected 'package.module:attr', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise HooksLoadError(f"Cannot import hooks module {module_name!r}: {e}") from e

    target: Any = module
    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise HooksLoadError(f"{module_name!r} has no attribute {attr_path!r}") from e

    if inspect.isclass(target) or (callable(target) and not _looks_like_hooks(target)):
        try:
            hooks = target(**kwargs)
        except TypeError as e:
            raise HooksLoadError(f"Cannot build hooks from {spec!r}: {e}") from e
    else:
        if kwargs:
            raise HooksLoadError(f"{spec!r} is an instance; it takes no arguments")
        hooks = target

    if not _looks_like_hooks(hooks):
        missing = [n for n in _REQUIRED if not callable(getattr(hooks, n, None))]
        raise HooksLoadError(f"{spec!r} does not provide: {', '.join(missing)}")

    logger.debug("Loaded migration hooks %s -> %s", spec, type(hooks).__name__)
    return hooks
