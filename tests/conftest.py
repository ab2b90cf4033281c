"""Test configuration and shared fixtures."""

import pytest

from l5infer.core.env import TypeEnv
from l5infer.core.inference import Inferencer
from l5infer.core.types import TypeVarStore
from l5infer.surface.parser import parse


@pytest.fixture
def store() -> TypeVarStore:
    return TypeVarStore()


@pytest.fixture
def inferencer(store: TypeVarStore) -> Inferencer:
    return Inferencer(store)


@pytest.fixture
def type_of(store: TypeVarStore, inferencer: Inferencer):
    """Parse source with the shared store and type it in the empty environment."""

    def _type_of(source: str, tenv: TypeEnv | None = None):
        exp = parse(source, store)
        return inferencer.type_of(exp, tenv if tenv is not None else TypeEnv.empty())

    return _type_of
