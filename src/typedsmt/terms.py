from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .common import *
from .exprs import *
from .sorts import *

# Python and numpy scalars that can stand in for a literal operand
SCALAR_TYPES = (bool, int, float, Fraction, np.bool_, np.integer, np.floating)


def is_scalar(value) -> bool:
    return isinstance(value, SCALAR_TYPES)


# === BEGIN OPCODE RULES ===

@dataclass(frozen=True)
class OpRule:
    """
    Which operand sorts a typed operator accepts, and whether its result is a Boolean
    (`relational`) rather than the sort of its operands.
    """
    accepts: Callable[[Sort], bool]
    relational: bool = False


def _any_sort(s):
    return True

def _bool_sort(s):
    return s.is_bool

def _bv_sort(s):
    return s.is_bv

def _bool_or_bv_sort(s):
    return s.is_bool or s.is_bv

def _arith_sort(s):
    return s.is_int or s.is_real or s.is_bv

def _integral_sort(s):
    return s.is_int or s.is_bv


UNARY_RULES: Dict[Opcode, OpRule] = {
    Opcode.LNOT:    OpRule(_bool_sort),
    Opcode.NOT:     OpRule(_bv_sort),
    Opcode.SUB:     OpRule(_arith_sort),
}

BINARY_RULES: Dict[Opcode, OpRule] = {
    Opcode.AND:     OpRule(_bv_sort),
    Opcode.OR:      OpRule(_bv_sort),
    Opcode.XOR:     OpRule(_bool_or_bv_sort),
    Opcode.LAND:    OpRule(_bool_sort),
    Opcode.LOR:     OpRule(_bool_sort),
    Opcode.IMP:     OpRule(_bool_sort),
    Opcode.EQL:     OpRule(_any_sort, relational=True),
    Opcode.NEQ:     OpRule(_any_sort, relational=True),
    Opcode.ADD:     OpRule(_arith_sort),
    Opcode.SUB:     OpRule(_arith_sort),
    Opcode.MUL:     OpRule(_arith_sort),
    Opcode.QUO:     OpRule(_arith_sort),
    Opcode.REM:     OpRule(_integral_sort),
    Opcode.LSS:     OpRule(_arith_sort, relational=True),
    Opcode.GTR:     OpRule(_arith_sort, relational=True),
    Opcode.LEQ:     OpRule(_arith_sort, relational=True),
    Opcode.GEQ:     OpRule(_arith_sort, relational=True),
}

NARY_RULES: Dict[Opcode, OpRule] = {
    Opcode.LAND:    OpRule(_bool_sort),
    Opcode.LOR:     OpRule(_bool_sort),
    Opcode.ADD:     OpRule(_arith_sort),
    Opcode.MUL:     OpRule(_arith_sort),
    Opcode.EQL:     OpRule(_any_sort, relational=True),
    Opcode.NEQ:     OpRule(_any_sort, relational=True),
}

# === END OPCODE RULES ===


# === BEGIN TERM HANDLES ===

def _node_of(expr) -> Optional[Expr]:
    if isinstance(expr, _Handle):
        expr = expr._expr
    assert expr is None or isinstance(expr, Expr), f"{expr!r} is not an expression node"
    return expr


class _Handle:
    """
    A read-only view onto one expression node, or a null handle if it views nothing.

    Handles keep Python's identity semantics for `==` so that they can be used as dict
    keys and set members; use `op_eq` and `op_ne` to build (dis)equalities instead.
    """

    __slots__ = ("_expr",)

    # makes numpy scalars on the left of an operator defer to our reflected operators
    __array_ufunc__ = None

    def is_null(self) -> bool:
        return self._expr is None

    def addr(self) -> int:
        """
        Identity of the viewed node, stable for as long as the node is alive. Two handles
        alias the same sub-expression iff their addresses are equal. Null handles return 0.
        """
        return 0 if self._expr is None else id(self._expr)

    def ref(self) -> Expr:
        assert self._expr is not None, "dereferenced a null term handle"
        return self._expr

    @property
    def expr_kind(self) -> ExprKind:
        return self.ref().expr_kind

    @property
    def sort(self) -> Sort:
        return self.ref().sort

    def encode(self, solver) -> Error:
        return self.ref().encode(solver)

    def _logic_opcode(self, bool_opcode, bv_opcode):
        return bool_opcode if self.sort.is_bool else bv_opcode

    def _unop(self, opcode):
        raise NotImplementedError()

    def _binop(self, opcode, other, reflected=False):
        raise NotImplementedError()

    def _strict_binop(self, opcode, other):
        result = self._binop(opcode, other)
        if result is NotImplemented:
            raise TypeError(f"cannot apply {opcode.name} to {self!r} and {other!r}")
        return result

    def implies(self, other):
        return self._strict_binop(Opcode.IMP, other)

    def op_eq(self, other):
        """
        We can't override `__eq__` without breaking hashing of handles, so `op_eq` is
        syntactic sugar for an equality expression instead.
        """
        return self._strict_binop(Opcode.EQL, other)

    def op_ne(self, other):
        return self._strict_binop(Opcode.NEQ, other)

    def __neg__(self):
        return self._unop(Opcode.SUB)

    def __invert__(self):
        return self._unop(self._logic_opcode(Opcode.LNOT, Opcode.NOT))

    def __and__(self, other):
        return self._binop(self._logic_opcode(Opcode.LAND, Opcode.AND), other)

    def __rand__(self, other):
        return self._binop(self._logic_opcode(Opcode.LAND, Opcode.AND), other, reflected=True)

    def __or__(self, other):
        return self._binop(self._logic_opcode(Opcode.LOR, Opcode.OR), other)

    def __ror__(self, other):
        return self._binop(self._logic_opcode(Opcode.LOR, Opcode.OR), other, reflected=True)

    def __xor__(self, other):
        return self._binop(Opcode.XOR, other)

    def __rxor__(self, other):
        return self._binop(Opcode.XOR, other, reflected=True)

    def __add__(self, other):
        return self._binop(Opcode.ADD, other)

    def __radd__(self, other):
        return self._binop(Opcode.ADD, other, reflected=True)

    def __sub__(self, other):
        return self._binop(Opcode.SUB, other)

    def __rsub__(self, other):
        return self._binop(Opcode.SUB, other, reflected=True)

    def __mul__(self, other):
        return self._binop(Opcode.MUL, other)

    def __rmul__(self, other):
        return self._binop(Opcode.MUL, other, reflected=True)

    def __truediv__(self, other):
        return self._binop(Opcode.QUO, other)

    def __rtruediv__(self, other):
        return self._binop(Opcode.QUO, other, reflected=True)

    def __mod__(self, other):
        return self._binop(Opcode.REM, other)

    def __rmod__(self, other):
        return self._binop(Opcode.REM, other, reflected=True)

    # Python swaps the operands of a reflected comparison itself (`1 < x` calls `x > 1`)
    def __lt__(self, other):
        return self._binop(Opcode.LSS, other)

    def __gt__(self, other):
        return self._binop(Opcode.GTR, other)

    def __le__(self, other):
        return self._binop(Opcode.LEQ, other)

    def __ge__(self, other):
        return self._binop(Opcode.GEQ, other)

    def __str__(self):
        return "<null>" if self._expr is None else str(self._expr)

    def __repr__(self):
        return f"{type(self).__name__}({self})"


class UnsafeTerm(_Handle):
    """
    A type-erased term handle. Operators on unsafe terms never check sorts: whatever
    sort the node ends up with is whatever the caller asked for. Any typed handle
    converts to an `UnsafeTerm` viewing the same node.
    """

    __slots__ = ()

    def __init__(self, expr=None):
        self._expr = _node_of(expr)

    def cast(self, term_type):
        """
        Views this term as a handle of the typed class `term_type`. If the node's sort is
        not `sort_of(term_type)` (or this handle is null), a null handle is returned.
        """
        if self._expr is not None and self._expr.sort == sort_of(term_type):
            return term_type(self._expr)
        return term_type()

    def _coerce(self, other) -> Optional["UnsafeTerm"]:
        if isinstance(other, _Handle):
            return UnsafeTerm(other)
        if is_scalar(other):
            return UnsafeTerm(LiteralExpr(self.sort, other))
        return None

    def _unop(self, opcode):
        return UnsafeTerm(UnaryExpr(self.sort, opcode, self))

    def _binop(self, opcode, other, reflected=False):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        lhs, rhs = (other, self) if reflected else (self, other)
        rule = BINARY_RULES.get(opcode)
        sort = BoolSort() if rule is not None and rule.relational else lhs.sort
        return UnsafeTerm(BinaryExpr(sort, opcode, lhs, rhs))


class Term(_Handle):
    """
    Base class of typed term handles. A handle of class `T` only ever views nodes
    whose sort is `sort_of(T)`.

    Operators accept another handle of exactly the same class, or a scalar that is
    promoted to a literal of that class. Anything else makes Python raise `TypeError`.
    """

    __slots__ = ()

    # scalars that are promoted to literals of this class
    _scalar_types: Tuple[type, ...] = ()

    def __init__(self, expr=None):
        expr = _node_of(expr)
        if expr is not None:
            assert expr.sort == sort_of(type(self)), \
                f"cannot view node of sort {expr.sort} as {type(self).__name__}"
        self._expr = expr

    @classmethod
    def _make_sort(cls) -> Sort:
        raise TypeError(f"{cls.__name__} is not a concrete term type")

    @classmethod
    def _wrap_scalar(cls, value):
        return value

    @classmethod
    def from_scalar(cls, value):
        """Creates a literal of this class. Raises `TypeError` for unaccepted scalars."""
        if not isinstance(value, cls._scalar_types):
            raise TypeError(f"cannot make a {cls.__name__} literal from {value!r}")
        return cls(LiteralExpr(sort_of(cls), cls._wrap_scalar(value)))

    @classmethod
    def _promote(cls, other):
        if type(other) is cls:
            return other
        if isinstance(other, cls._scalar_types):
            return cls.from_scalar(other)
        return None

    def _unop(self, opcode):
        rule = UNARY_RULES.get(opcode)
        if rule is None or not rule.accepts(self.sort):
            raise TypeError(f"operator {opcode.name} is not defined on {type(self).__name__}")
        return type(self)(UnaryExpr(self.sort, opcode, UnsafeTerm(self)))

    def _binop(self, opcode, other, reflected=False):
        rule = BINARY_RULES.get(opcode)
        if rule is None or not rule.accepts(self.sort):
            return NotImplemented
        other = self._promote(other)
        if other is None:
            return NotImplemented
        lhs, rhs = (other, self) if reflected else (self, other)
        result_type = Bool if rule.relational else type(self)
        return result_type(BinaryExpr(sort_of(result_type), opcode, UnsafeTerm(lhs), UnsafeTerm(rhs)))


class Bool(Term):
    __slots__ = ()
    _scalar_types = (bool, np.bool_)

    @classmethod
    def _make_sort(cls):
        return BoolSort()

    @classmethod
    def _wrap_scalar(cls, value):
        return bool(value)


class Int(Term):
    __slots__ = ()
    _scalar_types = (int, np.integer)

    @classmethod
    def _make_sort(cls):
        return IntSort()

    @classmethod
    def _wrap_scalar(cls, value):
        return int(value)


class Real(Term):
    __slots__ = ()
    _scalar_types = (int, float, Fraction, np.integer, np.floating)

    @classmethod
    def _make_sort(cls):
        return RealSort()

    @classmethod
    def _wrap_scalar(cls, value):
        if isinstance(value, (int, np.integer)):
            return Fraction(int(value))
        if isinstance(value, Fraction):
            return value
        if not np.isfinite(value):
            raise ValueError(f"cannot make a Real literal from non-finite {value!r}")
        return Fraction(float(value))


class Bv(Term):
    """
    Fixed-size bit-vectors, parameterized by a numpy integer scalar type, e.g.
    `Bv[np.int32]` or `Bv["uint8"]`. The width is that of the scalar type and the
    numpy kind decides whether the bit-vector is signed.
    """

    __slots__ = ()
    _scalar_types = (int, np.integer, np.bool_)
    scalar_type = None

    def __class_getitem__(cls, scalar_type):
        if cls.scalar_type is not None:
            raise TypeError(f"{cls.__name__} is already parameterized")
        try:
            dtype = np.dtype(scalar_type)
        except TypeError as e:
            raise TypeError(f"{scalar_type!r} is not a numpy scalar type") from e
        if dtype.kind not in "iub":
            raise TypeError(f"bit-vectors need an integer or bool scalar type, instead got {dtype}")
        return _bv_type(dtype.type)

    @classmethod
    def _make_sort(cls):
        if cls.scalar_type is None:
            raise TypeError("Bv must be parameterized with a scalar type, e.g. Bv[np.int32]")
        dtype = np.dtype(cls.scalar_type)
        return BVSort(8 * dtype.itemsize, dtype.kind == "i")

    @classmethod
    def _wrap_scalar(cls, value):
        # wraps modulo 2^width like a C integer conversion would
        sort = sort_of(cls)
        v = int(value) & sort.mask
        if sort.signed and v >> (sort.bitwidth - 1):
            v -= 1 << sort.bitwidth
        return cls.scalar_type(v)


@lru_cache(maxsize=None)
def _bv_type(scalar_type):
    return type(f"Bv[{scalar_type.__name__}]", (Bv,), {"__slots__": (), "scalar_type": scalar_type})


class Array(Term):
    """Arrays from `domain` to `range`, written `Array[Int, Bool]`."""

    __slots__ = ()
    domain = None
    range = None

    def __class_getitem__(cls, params):
        if cls.domain is not None:
            raise TypeError(f"{cls.__name__} is already parameterized")
        if not isinstance(params, tuple) or len(params) != 2:
            raise TypeError("Array takes a domain and a range type, e.g. Array[Int, Bool]")
        for p in params:
            sort_of(p)
        return _array_type(*params)

    @classmethod
    def _make_sort(cls):
        if cls.domain is None:
            raise TypeError("Array must be parameterized, e.g. Array[Int, Bool]")
        return ArraySort(sort_of(cls.domain), sort_of(cls.range))


@lru_cache(maxsize=None)
def _array_type(domain, range_):
    return type(
        f"Array[{domain.__name__}, {range_.__name__}]",
        (Array,),
        {"__slots__": (), "domain": domain, "range": range_}
    )


class Func(Term):
    """
    Uninterpreted functions, written `Func[A1, ..., An, R]` for a function from
    `A1, ..., An` to `R`.
    """

    __slots__ = ()
    domain = None
    range = None

    def __class_getitem__(cls, params):
        if cls.domain is not None:
            raise TypeError(f"{cls.__name__} is already parameterized")
        if not isinstance(params, tuple) or len(params) < 2:
            raise TypeError("Func takes parameter types and a result type, e.g. Func[Int, Bool]")
        for p in params:
            sort_of(p)
        return _func_type(tuple(params[:-1]), params[-1])

    @classmethod
    def _make_sort(cls):
        if cls.domain is None:
            raise TypeError("Func must be parameterized, e.g. Func[Int, Bool]")
        return FunctionSort(tuple(sort_of(d) for d in cls.domain), sort_of(cls.range))


@lru_cache(maxsize=None)
def _func_type(domain, range_):
    names = [d.__name__ for d in domain] + [range_.__name__]
    return type(
        f"Func[{', '.join(names)}]",
        (Func,),
        {"__slots__": (), "domain": domain, "range": range_}
    )


@lru_cache(maxsize=None)
def sort_of(term_type) -> Sort:
    """
    Returns the sort of the typed term class `term_type`. The result is computed once
    per class, so every handle of a class shares one `Sort` object.
    """
    if not (isinstance(term_type, type) and issubclass(term_type, Term)):
        raise TypeError(f"{term_type!r} is not a typed term class")
    return term_type._make_sort()

# === END TERM HANDLES ===
