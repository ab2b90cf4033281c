"""Type inference for L5, a small statically typed Scheme."""

from loguru import logger

from l5infer.api import FormResult, check_forms, infer_source, infer_type_of
from l5infer.core.env import TypeEnv
from l5infer.core.errors import (
    ArityMismatch,
    BadTypeExpression,
    CompositeError,
    OccursCheckViolation,
    TypeCheckError,
    TypeMismatch,
    UnboundVariable,
    UnsupportedConstruct,
)
from l5infer.core.inference import Inferencer, infer
from l5infer.core.types import (
    BOOLEAN,
    NUMBER,
    STRING,
    VOID,
    AtomicType,
    ProcType,
    TExp,
    TypeVar,
    TypeVarStore,
)
from l5infer.core.unify import occurs_check, resolve_var, unify, unify_all
from l5infer.surface.parser import ParseError, parse, parse_forms, parse_texp
from l5infer.surface.unparse import unparse, unparse_texp

logger.disable("l5infer")

__all__ = [
    # Entry points
    "infer_type_of",
    "infer_source",
    "check_forms",
    "FormResult",
    # Types
    "TExp",
    "AtomicType",
    "TypeVar",
    "ProcType",
    "TypeVarStore",
    "NUMBER",
    "BOOLEAN",
    "STRING",
    "VOID",
    # Environment
    "TypeEnv",
    # Unification
    "unify",
    "unify_all",
    "resolve_var",
    "occurs_check",
    # Inference
    "Inferencer",
    "infer",
    # Surface
    "parse",
    "parse_forms",
    "parse_texp",
    "unparse",
    "unparse_texp",
    "ParseError",
    # Errors
    "TypeCheckError",
    "UnboundVariable",
    "TypeMismatch",
    "ArityMismatch",
    "OccursCheckViolation",
    "UnsupportedConstruct",
    "BadTypeExpression",
    "CompositeError",
]
