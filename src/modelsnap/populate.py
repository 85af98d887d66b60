"""Recursive random populator for snapshot model types.

Every value strategy is keyed on ``FieldKind`` and none of them produces
``None``: optional fields always take a non-``None`` arm and containers
always hold at least one element until the nesting limit is reached.
"""

from __future__ import annotations

import datetime as dt
import math
import random
import string
import uuid
from collections.abc import Callable, Iterable
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, TypeVar, get_args, get_origin

from pydantic import BaseModel

from modelsnap.errors import UnsupportedFieldTypeError
from modelsnap.schema import FieldKind, classify, input_key, model_name

M = TypeVar("M", bound=BaseModel)

ValueStrategy = Callable[["RandomPopulator", Any, tuple[Any, ...], int], Any]

_STRATEGIES: dict[FieldKind, ValueStrategy] = {}
_NUMBER_SPAN = 10_000
_EPOCH = dt.datetime(2000, 1, 1, tzinfo=dt.UTC)
_DATETIME_SPAN_SECONDS = 30 * 365 * 24 * 60 * 60
_ALPHABET = string.ascii_letters + string.digits


def _register(kind: FieldKind) -> Callable[[ValueStrategy], ValueStrategy]:
    """Register a value strategy for one field kind."""

    def inner(fn: ValueStrategy) -> ValueStrategy:
        if kind in _STRATEGIES:
            raise ValueError(f"Duplicate value strategy: {kind}")
        _STRATEGIES[kind] = fn
        return fn

    return inner


class RandomPopulator:
    """Build fully populated model instances with pseudo-random values."""

    def __init__(
        self,
        seed: int | None = None,
        *,
        max_collection_size: int = 3,
        string_length: int = 10,
        max_depth: int = 4,
    ) -> None:
        """Store generation limits and seed the random source.

        Args:
            seed: Optional seed for deterministic output.
            max_collection_size: Upper bound for generated container sizes.
            string_length: Length of generated strings without constraints.
            max_depth: Deepest model nesting level generated.

        Raises:
            ValueError: If a limit is below its minimum.
        """
        if max_collection_size < 1:
            raise ValueError("max_collection_size must be at least 1")
        if string_length < 1:
            raise ValueError("string_length must be at least 1")
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        self._rng = random.Random(seed)
        self._max_collection_size = max_collection_size
        self._string_length = string_length
        self._max_depth = max_depth

    @property
    def rng(self) -> random.Random:
        """Return the underlying random source."""
        return self._rng

    def populate(self, model: type[M]) -> M:
        """Return a validated instance of ``model`` with every field set.

        Args:
            model: Pydantic model type.

        Returns:
            Populated model instance.

        Raises:
            UnsupportedFieldTypeError: If a field has no value strategy or
                the model nests deeper than the configured limit.
        """
        return self.populate_model(model, depth=0)

    def value_for(
        self,
        annotation: Any,
        metadata: tuple[Any, ...] = (),
        depth: int = 0,
    ) -> Any:
        """Return a random non-null value for one annotation.

        Args:
            annotation: Field annotation.
            metadata: Constraint metadata such as ``annotated_types.Ge``.
            depth: Current model nesting level.

        Returns:
            Generated value.
        """
        if get_origin(annotation) is Annotated:
            inner, *extra = get_args(annotation)
            return self.value_for(inner, metadata + tuple(extra), depth)
        return _STRATEGIES[classify(annotation)](self, annotation, metadata, depth)

    def populate_model(self, model: type[M], depth: int) -> M:
        """Populate one model at the given nesting level.

        Args:
            model: Pydantic model type.
            depth: Nesting level of this model, zero for the root.

        Returns:
            Validated model instance.

        Raises:
            UnsupportedFieldTypeError: If ``depth`` exceeds the limit.
        """
        if depth > self._max_depth:
            raise UnsupportedFieldTypeError(
                f"Model nesting deeper than {self._max_depth} levels at "
                f"{model_name(model)}"
            )
        payload = {
            input_key(name, info): self.value_for(
                info.annotation, tuple(info.metadata), depth
            )
            for name, info in model.model_fields.items()
        }
        return model.model_validate(payload)

    def collection_size(self, metadata: tuple[Any, ...], depth: int) -> int:
        """Return a container size; empty once the nesting limit is reached."""
        if depth >= self._max_depth:
            return 0
        low, high = _length_bounds(metadata, 1, self._max_collection_size)
        return self._rng.randint(low, high)

    def random_string(self, metadata: tuple[Any, ...]) -> str:
        """Return an alphanumeric string honoring length constraints."""
        low, high = _length_bounds(metadata, self._string_length, self._string_length)
        length = self._rng.randint(low, high)
        return "".join(self._rng.choice(_ALPHABET) for _ in range(length))


def _constraint(metadata: Iterable[Any], attribute: str) -> Any:
    for item in metadata:
        value = getattr(item, attribute, None)
        if value is not None:
            return value
    return None


def _float_constraint(metadata: Iterable[Any], attribute: str) -> float | None:
    value = _constraint(metadata, attribute)
    return None if value is None else float(value)


def _number_bounds(metadata: tuple[Any, ...], step: float) -> tuple[float, float]:
    low = _float_constraint(metadata, "ge")
    if low is None and (gt := _float_constraint(metadata, "gt")) is not None:
        low = gt + step
    high = _float_constraint(metadata, "le")
    if high is None and (lt := _float_constraint(metadata, "lt")) is not None:
        high = lt - step
    if low is None and high is None:
        return 0, _NUMBER_SPAN
    if low is None:
        return (0 if high >= 0 else high - _NUMBER_SPAN), high
    if high is None:
        return low, max(low + _NUMBER_SPAN, _NUMBER_SPAN)
    return low, high


def _length_bounds(
    metadata: tuple[Any, ...], default_low: int, default_high: int
) -> tuple[int, int]:
    low = _constraint(metadata, "min_length")
    high = _constraint(metadata, "max_length")
    low = default_low if low is None else max(low, 0)
    high = max(default_high, low) if high is None else high
    return min(low, high), high


def _random_int(populator: RandomPopulator, metadata: tuple[Any, ...]) -> int:
    low, high = _number_bounds(metadata, 1)
    return populator.rng.randint(math.ceil(low), math.floor(high))


def _random_float(populator: RandomPopulator, metadata: tuple[Any, ...]) -> float:
    low, high = _number_bounds(metadata, 1e-6)
    return populator.rng.uniform(low, high)


def _random_decimal(
    populator: RandomPopulator, metadata: tuple[Any, ...]
) -> Decimal:
    low, high = _number_bounds(metadata, 0.01)
    return Decimal(str(round(populator.rng.uniform(low, high), 2)))


def _random_datetime(populator: RandomPopulator) -> dt.datetime:
    offset = populator.rng.randint(0, _DATETIME_SPAN_SECONDS)
    return _EPOCH + dt.timedelta(seconds=offset)


_PRIMITIVES: dict[type, Callable[[RandomPopulator, tuple[Any, ...]], Any]] = {
    bool: lambda p, m: p.rng.random() < 0.5,
    int: _random_int,
    float: _random_float,
    Decimal: _random_decimal,
    str: lambda p, m: p.random_string(m),
    bytes: lambda p, m: p.random_string(m).encode("ascii"),
    uuid.UUID: lambda p, m: uuid.UUID(int=p.rng.getrandbits(128), version=4),
    dt.datetime: lambda p, m: _random_datetime(p),
    dt.date: lambda p, m: _random_datetime(p).date(),
    dt.time: lambda p, m: _random_datetime(p).time(),
    dt.timedelta: lambda p, m: dt.timedelta(seconds=p.rng.randint(1, 86_400)),
    Path: lambda p, m: Path(p.random_string(())),
}


@_register(FieldKind.PRIMITIVE)
def _primitive(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    del depth
    return _PRIMITIVES[annotation](populator, metadata)


@_register(FieldKind.ENUMERATION)
def _enumeration(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    del metadata, depth
    members = list(annotation)
    if not members:
        raise UnsupportedFieldTypeError(f"Enumeration has no members: {annotation!r}")
    return populator.rng.choice(members)


@_register(FieldKind.LITERAL)
def _literal(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    del metadata, depth
    values = [value for value in get_args(annotation) if value is not None]
    if not values:
        raise UnsupportedFieldTypeError(
            f"Literal has no non-null value: {annotation!r}"
        )
    return populator.rng.choice(values)


@_register(FieldKind.MODEL)
def _model(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    del metadata
    return populator.populate_model(annotation, depth + 1)


@_register(FieldKind.SEQUENCE)
def _sequence(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    args = get_args(annotation)
    element = args[0] if args else Any
    count = populator.collection_size(metadata, depth)
    return [populator.value_for(element, (), depth) for _ in range(count)]


@_register(FieldKind.SET)
def _set(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    args = get_args(annotation)
    element = args[0] if args else Any
    count = populator.collection_size(metadata, depth)
    values = {populator.value_for(element, (), depth) for _ in range(count)}
    if (get_origin(annotation) or annotation) is frozenset:
        return frozenset(values)
    return values


@_register(FieldKind.MAPPING)
def _mapping(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    args = get_args(annotation)
    key_type, value_type = args if len(args) == 2 else (str, Any)
    count = populator.collection_size(metadata, depth)
    return {
        populator.value_for(key_type, (), depth): populator.value_for(
            value_type, (), depth
        )
        for _ in range(count)
    }


@_register(FieldKind.TUPLE)
def _tuple(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    args = get_args(annotation)
    if args and args[-1] is not Ellipsis:
        return tuple(populator.value_for(arg, (), depth) for arg in args)
    element = args[0] if args else Any
    count = populator.collection_size(metadata, depth)
    return tuple(populator.value_for(element, (), depth) for _ in range(count))


@_register(FieldKind.OPTIONAL)
@_register(FieldKind.UNION)
def _union(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    arms = [arm for arm in get_args(annotation) if arm is not type(None)]
    return populator.value_for(populator.rng.choice(arms), metadata, depth)


@_register(FieldKind.ANY)
def _any(
    populator: RandomPopulator, annotation: Any, metadata: tuple[Any, ...], depth: int
) -> Any:
    del annotation, metadata, depth
    return populator.random_string(())
