"""Explicit schema description for snapshot model types."""

from __future__ import annotations

import collections.abc
import datetime as dt
import types
import uuid
from decimal import Decimal
from enum import Enum, StrEnum
from pathlib import Path
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict
from pydantic.fields import FieldInfo

from modelsnap.errors import UnsupportedFieldTypeError

# Name the Enum machinery reserves in a class body; never a relation name.
_ENUM_SENTINEL = "_ignore_"

# Class-body names added by pydantic and abc; never relation names.
_INTERNAL_PREFIXES = ("_abc_", "model_")

PRIMITIVE_TYPES: tuple[type, ...] = (
    str,
    int,
    float,
    bool,
    bytes,
    Decimal,
    uuid.UUID,
    dt.datetime,
    dt.date,
    dt.time,
    dt.timedelta,
    Path,
)

_SEQUENCE_ORIGINS = {
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
}
_SET_ORIGINS = {
    set,
    frozenset,
    collections.abc.Set,
    collections.abc.MutableSet,
}
_MAPPING_ORIGINS = {
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
}


class FieldKind(StrEnum):
    """Shape category used to pick a value strategy for a field."""

    PRIMITIVE = "primitive"
    ENUMERATION = "enumeration"
    LITERAL = "literal"
    MODEL = "model"
    SEQUENCE = "sequence"
    SET = "set"
    MAPPING = "mapping"
    TUPLE = "tuple"
    OPTIONAL = "optional"
    UNION = "union"
    ANY = "any"


class FieldSpec(BaseModel):
    """One declared model field."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, arbitrary_types_allowed=True
    )

    name: str
    kind: FieldKind
    annotation: Any = None


class ModelSchema(BaseModel):
    """Declared shape of a model type."""

    model_config = ConfigDict(
        extra="forbid", frozen=True, arbitrary_types_allowed=True
    )

    name: str
    field_specs: tuple[FieldSpec, ...]
    nested_types: tuple[type, ...] = ()
    relation_names: tuple[str, ...] = ()


def model_name(model: type) -> str:
    """Return the fully qualified name of a model type.

    Args:
        model: Model type.

    Returns:
        Dotted ``module.qualname`` string.
    """
    return f"{model.__module__}.{model.__qualname__}"


def input_key(name: str, info: FieldInfo) -> str:
    """Return the payload key a field accepts on validation.

    Args:
        name: Field name.
        info: Pydantic field info.

    Returns:
        String validation alias, else alias, else the field name.
    """
    if isinstance(info.validation_alias, str):
        return info.validation_alias
    return info.alias or name


def classify(annotation: Any) -> FieldKind:
    """Map a field annotation onto its field kind.

    Args:
        annotation: Resolved type annotation.

    Returns:
        Field kind for the annotation.

    Raises:
        UnsupportedFieldTypeError: If the annotation has no known kind.
    """
    if annotation is Any or annotation is object:
        return FieldKind.ANY
    origin = get_origin(annotation)
    if origin is Annotated:
        return classify(get_args(annotation)[0])
    if origin is Literal:
        return FieldKind.LITERAL
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        if type(None) in args:
            return FieldKind.OPTIONAL
        return FieldKind.UNION
    container = origin if origin is not None else annotation
    if container in _SEQUENCE_ORIGINS:
        return FieldKind.SEQUENCE
    if container in _SET_ORIGINS:
        return FieldKind.SET
    if container in _MAPPING_ORIGINS:
        return FieldKind.MAPPING
    if container is tuple:
        return FieldKind.TUPLE
    if isinstance(annotation, type):
        if issubclass(annotation, Enum):
            return FieldKind.ENUMERATION
        if issubclass(annotation, BaseModel):
            return FieldKind.MODEL
        if annotation in PRIMITIVE_TYPES:
            return FieldKind.PRIMITIVE
    raise UnsupportedFieldTypeError(f"Unsupported field annotation: {annotation!r}")


def nested_types(model: type) -> tuple[type, ...]:
    """Return classes declared directly in the model's class body.

    Args:
        model: Model type.

    Returns:
        Nested classes in declaration order.
    """
    prefix = f"{model.__qualname__}."
    found: list[type] = []
    for name, value in vars(model).items():
        if isinstance(value, type) and value.__qualname__ == f"{prefix}{name}":
            found.append(value)
    return tuple(found)


def declared_members(nested: type) -> tuple[str, ...]:
    """Return member names declared by a nested class.

    Enum members (aliases included) for enumerations, fields for pydantic
    models, plain data attributes otherwise.

    Args:
        nested: Nested class.

    Returns:
        Member names in declaration order.
    """
    if issubclass(nested, Enum):
        names = list(nested.__members__)
    elif issubclass(nested, BaseModel):
        names = list(nested.model_fields)
    else:
        names = [
            name
            for name, value in vars(nested).items()
            if not name.startswith(("__", *_INTERNAL_PREFIXES))
            and not callable(value)
            and not isinstance(value, (classmethod, staticmethod, property))
        ]
    return tuple(name for name in names if name != _ENUM_SENTINEL)


def relation_names(model: type) -> tuple[str, ...]:
    """Return relation names declared by the model's single nested class.

    Args:
        model: Model type.

    Returns:
        Member names of the nested class, or empty when the model declares
        zero or more than one nested class.
    """
    declared = nested_types(model)
    if len(declared) != 1:
        return ()
    return declared_members(declared[0])


def describe_model(model: type[BaseModel]) -> ModelSchema:
    """Build the schema description of a model type.

    Args:
        model: Pydantic model type.

    Returns:
        Field, nested-type and relation-name description.

    Raises:
        UnsupportedFieldTypeError: If a field annotation has no known kind.
    """
    field_specs = tuple(
        FieldSpec(
            name=name,
            kind=classify(info.annotation),
            annotation=info.annotation,
        )
        for name, info in model.model_fields.items()
    )
    return ModelSchema(
        name=model_name(model),
        field_specs=field_specs,
        nested_types=nested_types(model),
        relation_names=relation_names(model),
    )
