"""
The contract between terms and the SMT solvers they are checked with.

A back end subclasses `Solver` and overrides the protected `_encode_*` hooks. Each
hook translates one kind of expression node into the back end's own representation,
recursively encoding the node's operands (`operand.encode(self)`) as it goes, and
reports a recoverable contingency by returning an `Error` instead of raising.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple

from .common import *
from .config import SolverConfig
from .decls import UnsafeDecl
from .sorts import Sort
from .terms import Bool, UnsafeTerm

logger = logging.getLogger(__name__)


@dataclass
class Stats:
    """Formula statistics. Only back ends update these."""
    constants: int = 0
    func_apps: int = 0
    array_selects: int = 0
    array_stores: int = 0
    unary_ops: int = 0
    binary_ops: int = 0
    nary_ops: int = 0
    equalities: int = 0
    disequalities: int = 0
    inequalities: int = 0
    implications: int = 0
    conjunctions: int = 0
    disjunctions: int = 0


class Solver(ABC):
    """
    Abstract SMT solver.

    Subclasses must have a constructor accepting an optional `Logic` as first argument.
    """

    literal_types: Tuple[type, ...] = ()
    """
    Scalar types this back end can encode as literals. `encode_literal` rejects any
    other type with `Error.UNSUPPORT_ERROR` before `_encode_literal` is consulted.
    """

    def __init__(self):
        self._stats = Stats()
        self._scopes = 0

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def scopes(self) -> int:
        """Number of `push()` calls that have not been matched by a `pop()` yet."""
        return self._scopes

    # === Encoding hooks ===

    def _encode_literal(self, sort: Sort, literal) -> Error:
        return Error.UNSUPPORT_ERROR

    @abstractmethod
    def _encode_constant(self, decl: UnsafeDecl) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_func_app(self, func_decl: UnsafeDecl, arity: int, args: Sequence[UnsafeTerm]) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_const_array(self, sort: Sort, init: UnsafeTerm) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_array_select(self, array: UnsafeTerm, index: UnsafeTerm) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_array_store(self, array: UnsafeTerm, index: UnsafeTerm, value: UnsafeTerm) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_unary(self, opcode: Opcode, sort: Sort, operand: UnsafeTerm) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_binary(self, opcode: Opcode, sort: Sort, loperand: UnsafeTerm, roperand: UnsafeTerm) -> Error:
        raise NotImplementedError()

    @abstractmethod
    def _encode_nary(self, opcode: Opcode, sort: Sort, operands: Sequence[UnsafeTerm]) -> Error:
        raise NotImplementedError()

    # === Solver hooks ===

    @abstractmethod
    def _reset(self):
        raise NotImplementedError()

    @abstractmethod
    def _push(self):
        raise NotImplementedError()

    @abstractmethod
    def _pop(self):
        raise NotImplementedError()

    @abstractmethod
    def _add(self, condition: UnsafeTerm) -> Error:
        """Encodes `condition` and asserts it."""
        raise NotImplementedError()

    @abstractmethod
    def _check(self) -> CheckResult:
        raise NotImplementedError()

    # === Public interface ===

    def encode_literal(self, sort: Sort, literal) -> Error:
        if not isinstance(literal, self.literal_types):
            return Error.UNSUPPORT_ERROR
        return self._encode_literal(sort, literal)

    def encode_constant(self, decl: UnsafeDecl) -> Error:
        return self._encode_constant(decl)

    def encode_func_app(self, func_decl: UnsafeDecl, arity: int, args: Sequence[UnsafeTerm]) -> Error:
        assert arity == len(args), f"arity {arity} does not match {len(args)} arguments"
        return self._encode_func_app(func_decl, arity, args)

    def encode_const_array(self, sort: Sort, init: UnsafeTerm) -> Error:
        return self._encode_const_array(sort, init)

    def encode_array_select(self, array: UnsafeTerm, index: UnsafeTerm) -> Error:
        return self._encode_array_select(array, index)

    def encode_array_store(self, array: UnsafeTerm, index: UnsafeTerm, value: UnsafeTerm) -> Error:
        return self._encode_array_store(array, index, value)

    def encode_unary(self, opcode: Opcode, sort: Sort, operand: UnsafeTerm) -> Error:
        return self._encode_unary(opcode, sort, operand)

    def encode_binary(self, opcode: Opcode, sort: Sort, loperand: UnsafeTerm, roperand: UnsafeTerm) -> Error:
        return self._encode_binary(opcode, sort, loperand, roperand)

    def encode_nary(self, opcode: Opcode, sort: Sort, operands: Sequence[UnsafeTerm]) -> Error:
        return self._encode_nary(opcode, sort, operands)

    def reset(self):
        """Removes all assertions and scopes."""
        logger.debug("resetting solver (dropping %d scopes)", self._scopes)
        self._reset()
        self._scopes = 0

    def push(self):
        self._push()
        self._scopes += 1
        logger.debug("push: %d scopes", self._scopes)

    def pop(self):
        assert self._scopes > 0, "pop() called without a matching push()"
        self._pop()
        self._scopes -= 1
        logger.debug("pop: %d scopes", self._scopes)

    def add(self, condition: Bool):
        """
        Asserts a typed Boolean condition. Raises `EncodeError` if the back end cannot
        encode it.
        """
        if not isinstance(condition, Bool):
            raise TypeError(f"only Bool terms can be asserted, instead got {condition!r}; use unsafe_add")
        self._add_or_raise(UnsafeTerm(condition))

    def unsafe_add(self, condition: UnsafeTerm):
        """Like `add`, but performs no sort check on `condition`."""
        self._add_or_raise(UnsafeTerm(condition))

    def _add_or_raise(self, condition: UnsafeTerm):
        err = self._add(condition)
        if err != Error.OK:
            logger.warning("could not encode assertion %s: %s", condition, err.name)
            raise EncodeError(err)

    def check(self) -> CheckResult:
        result = self._check()
        logger.debug("check: %s", result.name)
        return result


def create_solver(config: Optional[SolverConfig] = None) -> Solver:
    """
    Creates a back end from `config`. Back ends are imported lazily, so only the
    configured one needs its bindings installed.
    """
    config = config or SolverConfig()
    if config.backend == "cvc5":
        from .cvc5_solver import Cvc5Solver
        return Cvc5Solver(config=config)
    raise NotImplementedError(f"unknown solver backend {config.backend!r}")
