"""Unit tests for model reference loading."""

from __future__ import annotations

import pytest

from modelsnap.errors import ModelLoadError
from modelsnap.loader import load_model, split_reference
from tests.unit.sample_models import Employee, Person


@pytest.mark.unit
@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        ("pkg.mod:Model", ("pkg.mod", "Model")),
        ("pkg.mod:Outer.Inner", ("pkg.mod", "Outer.Inner")),
        ("pkg.mod.Model", ("pkg.mod", "Model")),
        ("  pkg:Model  ", ("pkg", "Model")),
    ],
)
def test_split_reference(reference: str, expected: tuple[str, str]) -> None:
    """References should split into module and attribute paths."""
    # Act / Assert - split parts
    assert split_reference(reference) == expected


@pytest.mark.unit
@pytest.mark.parametrize("reference", ["Model", "pkg:", ":Model"])
def test_split_reference_rejects_incomplete(reference: str) -> None:
    """References without both parts should be rejected."""
    # Act / Assert - load error
    with pytest.raises(ModelLoadError, match="Invalid model reference"):
        split_reference(reference)


@pytest.mark.unit
def test_load_model_resolves_both_reference_styles() -> None:
    """Colon and dotted references should resolve the same model."""
    # Act - load both styles
    colon = load_model("tests.unit.sample_models:Person")
    dotted = load_model("tests.unit.sample_models.Employee")

    # Assert - model types
    assert colon is Person
    assert dotted is Employee


@pytest.mark.unit
@pytest.mark.parametrize(
    ("reference", "message"),
    [
        ("tests.unit.no_such_module:Model", "Cannot import module"),
        ("tests.unit.sample_models:Missing", "has no attribute"),
        ("tests.unit.sample_models:Employee.Relation", "not a Pydantic model"),
        ("tests.unit.sample_models:Widget", "not a Pydantic model"),
    ],
)
def test_load_model_errors(reference: str, message: str) -> None:
    """Unresolvable references should raise a load error."""
    # Act / Assert - load error
    with pytest.raises(ModelLoadError, match=message):
        load_model(reference)
