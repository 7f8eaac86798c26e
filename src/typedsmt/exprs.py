"""
Immutable expression nodes.

Nodes are never built directly by user code: the builders in `builders.py` and the
operators on term handles construct them. Every node carries the sort of the value it
denotes, and refers to its operands through type-erased `UnsafeTerm` handles, so that
sub-expressions can be shared freely between parents. Nodes compare and hash by
identity.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Tuple

from .common import *
from .decls import UnsafeDecl
from .sorts import Sort


def _check_operand(term):
    assert term is not None and not term.is_null(), "expression operand must not be null"


@dataclass(frozen=True, eq=False)
class Expr(Encodable):
    """
    Base class of all nodes. Subclasses provide `sort`, either as a field supplied at
    construction or computed from their operands.
    """

    expr_kind: ClassVar[ExprKind]

    @property
    def _children(self):
        return ()


@dataclass(frozen=True, eq=False)
class LiteralExpr(Expr):
    expr_kind = ExprKind.LITERAL

    sort: Sort
    literal: Any

    def __post_init__(self):
        assert isinstance(self.sort, Sort), f"{self.sort} is not a Sort instance"

    def _encode(self, solver):
        return solver.encode_literal(self.sort, self.literal)

    def __str__(self):
        return str(self.literal)


@dataclass(frozen=True, eq=False)
class ConstantExpr(Expr):
    expr_kind = ExprKind.CONSTANT

    decl: UnsafeDecl

    def __post_init__(self):
        assert isinstance(self.decl, UnsafeDecl), f"{self.decl} is not a declaration"

    @property
    def sort(self):
        return self.decl.sort

    def _encode(self, solver):
        return solver.encode_constant(self.decl)

    def __str__(self):
        return self.decl.symbol


@dataclass(frozen=True, eq=False)
class UnaryExpr(Expr):
    expr_kind = ExprKind.UNARY

    sort: Sort
    opcode: Opcode
    operand: "UnsafeTerm"

    def __post_init__(self):
        assert isinstance(self.opcode, Opcode), self.opcode
        _check_operand(self.operand)

    @property
    def _children(self):
        return (self.operand,)

    def _encode(self, solver):
        return solver.encode_unary(self.opcode, self.sort, self.operand)

    def __str__(self):
        return f"({self.opcode.name} {self.operand})"


@dataclass(frozen=True, eq=False)
class BinaryExpr(Expr):
    expr_kind = ExprKind.BINARY

    sort: Sort
    opcode: Opcode
    loperand: "UnsafeTerm"
    roperand: "UnsafeTerm"

    def __post_init__(self):
        assert isinstance(self.opcode, Opcode), self.opcode
        _check_operand(self.loperand)
        _check_operand(self.roperand)

    @property
    def _children(self):
        return (self.loperand, self.roperand)

    def _encode(self, solver):
        return solver.encode_binary(self.opcode, self.sort, self.loperand, self.roperand)

    def __str__(self):
        return f"({self.opcode.name} {self.loperand} {self.roperand})"


@dataclass(frozen=True, eq=False)
class NaryExpr(Expr):
    expr_kind = ExprKind.NARY

    sort: Sort
    opcode: Opcode
    operands: Tuple["UnsafeTerm", ...]

    def __post_init__(self):
        object.__setattr__(self, "operands", tuple(self.operands))
        assert isinstance(self.opcode, Opcode), self.opcode
        assert len(self.operands) > 0, "n-ary expression needs at least one operand"
        for o in self.operands:
            _check_operand(o)

    @property
    def _children(self):
        return self.operands

    def _encode(self, solver):
        return solver.encode_nary(self.opcode, self.sort, self.operands)

    def __str__(self):
        return f"({self.opcode.name} {' '.join(str(o) for o in self.operands)})"


@dataclass(frozen=True, eq=False)
class ConstArrayExpr(Expr):
    expr_kind = ExprKind.CONST_ARRAY

    sort: Sort
    init: "UnsafeTerm"

    def __post_init__(self):
        assert isinstance(self.sort, Sort) and self.sort.is_array, \
            f"constant array must have an array sort, instead got {self.sort}"
        _check_operand(self.init)

    @property
    def _children(self):
        return (self.init,)

    def _encode(self, solver):
        return solver.encode_const_array(self.sort, self.init)

    def __str__(self):
        return f"(const {self.sort} {self.init})"


@dataclass(frozen=True, eq=False)
class ArraySelectExpr(Expr):
    expr_kind = ExprKind.ARRAY_SELECT

    array: "UnsafeTerm"
    index: "UnsafeTerm"
    sort: Sort = field(init=False)

    def __post_init__(self):
        _check_operand(self.array)
        _check_operand(self.index)
        # element sort of the array
        object.__setattr__(self, "sort", self.array.sort.sorts(1))

    @property
    def _children(self):
        return (self.array, self.index)

    def _encode(self, solver):
        return solver.encode_array_select(self.array, self.index)

    def __str__(self):
        return f"{self.array}[{self.index}]"


@dataclass(frozen=True, eq=False)
class ArrayStoreExpr(Expr):
    expr_kind = ExprKind.ARRAY_STORE

    array: "UnsafeTerm"
    index: "UnsafeTerm"
    value: "UnsafeTerm"
    sort: Sort = field(init=False)

    def __post_init__(self):
        _check_operand(self.array)
        _check_operand(self.index)
        _check_operand(self.value)
        object.__setattr__(self, "sort", self.array.sort)

    @property
    def _children(self):
        return (self.array, self.index, self.value)

    def _encode(self, solver):
        return solver.encode_array_store(self.array, self.index, self.value)

    def __str__(self):
        return f"{self.array}[{self.index} <- {self.value}]"


@dataclass(frozen=True, eq=False)
class FuncAppExpr(Expr):
    expr_kind = ExprKind.FUNC_APP

    func_decl: UnsafeDecl
    args: Tuple["UnsafeTerm", ...]
    sort: Sort = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        assert isinstance(self.func_decl, UnsafeDecl), f"{self.func_decl} is not a declaration"
        for a in self.args:
            _check_operand(a)
        # for a fully applied function this is the codomain
        object.__setattr__(self, "sort", self.func_decl.sort.sorts(len(self.args)))

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def _children(self):
        return self.args

    def _encode(self, solver):
        return solver.encode_func_app(self.func_decl, len(self.args), self.args)

    def __str__(self):
        return f"{self.func_decl.symbol}({', '.join(str(a) for a in self.args)})"
