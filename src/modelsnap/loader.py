"""Resolve textual model references to model types."""

from __future__ import annotations

import importlib

from pydantic import BaseModel

from modelsnap.errors import ModelLoadError


def split_reference(reference: str) -> tuple[str, str]:
    """Split a model reference into module path and attribute path.

    ``pkg.mod:Outer.Inner`` splits at the colon; ``pkg.mod.Model`` splits at
    the last dot.

    Args:
        reference: Model reference text.

    Returns:
        Module path and attribute path.

    Raises:
        ModelLoadError: If either part is empty.
    """
    text = reference.strip()
    if ":" in text:
        module_path, _, attribute_path = text.partition(":")
    else:
        module_path, _, attribute_path = text.rpartition(".")
    if not module_path or not attribute_path:
        raise ModelLoadError(
            f"Invalid model reference {reference!r}; expected 'package.module:Model'"
        )
    return module_path, attribute_path


def load_model(reference: str) -> type[BaseModel]:
    """Import the model type named by ``reference``.

    Args:
        reference: ``package.module:Model`` or ``package.module.Model``.

    Returns:
        Pydantic model type.

    Raises:
        ModelLoadError: If the module or attribute is missing, or the target
            is not a Pydantic model type.
    """
    module_path, attribute_path = split_reference(reference)
    try:
        target: object = importlib.import_module(module_path)
    except ImportError as exc:
        raise ModelLoadError(f"Cannot import module {module_path!r}: {exc}") from exc
    for part in attribute_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ModelLoadError(
                f"Module {module_path!r} has no attribute {attribute_path!r}"
            ) from exc
    if not isinstance(target, type) or not issubclass(target, BaseModel):
        raise ModelLoadError(f"{reference!r} is not a Pydantic model type")
    return target
