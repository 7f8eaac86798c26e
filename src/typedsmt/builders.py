"""
Functions for building terms.

Every builder has a typed and a type-erased form, chosen from its arguments. Typed
handles of one class (plus scalars, which are promoted to literals of that class) give
a typed result, and mismatches raise `TypeError`. As soon as an `UnsafeTerm`, an
`UnsafeDecl` or a runtime `Sort` is involved, the result is an `UnsafeTerm` and no
sorts are checked.
"""

from typing import Iterable, List, Optional, Sequence

from .common import *
from .decls import Decl, UnsafeDecl
from .exprs import *
from .sorts import *
from .terms import *
from .terms import _Handle


def _term_type_of(operands: Sequence):
    """
    Returns the typed class shared by the handles in `operands`, or None if any of them
    is type-erased. Scalars take on the class of the handles around them.
    """
    term_type = None
    for o in operands:
        if isinstance(o, UnsafeTerm):
            return None
        if isinstance(o, Term):
            if term_type is None:
                term_type = type(o)
            elif type(o) is not term_type:
                raise TypeError(f"cannot combine {term_type.__name__} with {type(o).__name__}")
        elif not is_scalar(o):
            raise TypeError(f"{o!r} is neither a term nor a scalar")
    if term_type is None:
        raise TypeError("at least one operand must be a term handle")
    return term_type


def _erase(operands: Sequence, sort: Optional[Sort] = None) -> List[UnsafeTerm]:
    """
    Converts `operands` to unsafe handles. Scalars become literals of `sort`, or of
    the sort of the first handle among `operands` if `sort` is not given.
    """
    if sort is None:
        handles = [o for o in operands if isinstance(o, _Handle)]
        if not handles:
            raise TypeError("at least one operand must be a term handle")
        sort = handles[0].sort
    erased = []
    for o in operands:
        if isinstance(o, _Handle):
            erased.append(UnsafeTerm(o))
        elif is_scalar(o):
            erased.append(UnsafeTerm(LiteralExpr(sort, o)))
        else:
            raise TypeError(f"{o!r} is neither a term nor a scalar")
    return erased


def _promote(term_type, value):
    promoted = term_type._promote(value)
    if promoted is None:
        raise TypeError(f"expected {term_type.__name__}, instead got {value!r}")
    return promoted


def literal(term_type, value):
    """
    `literal(Int, 5)` creates a typed literal; `literal(IntSort(), 5)` creates an
    unsafe one that stores `value` exactly as given.
    """
    if isinstance(term_type, Sort):
        return UnsafeTerm(LiteralExpr(term_type, value))
    sort_of(term_type)
    return term_type.from_scalar(value)


def constant(decl: UnsafeDecl):
    if isinstance(decl, Decl):
        return decl.term_type(ConstantExpr(decl))
    assert isinstance(decl, UnsafeDecl), f"{decl!r} is not a declaration"
    return UnsafeTerm(ConstantExpr(decl))


def declare(symbol: str, term_type):
    """
    Declares `symbol` and returns it as a constant term: `declare("x", Int)` is shorthand
    for `constant(Decl("x", Int))`. With a `Sort` instead of a typed class, the result
    is unsafe.
    """
    if isinstance(term_type, Sort):
        return constant(UnsafeDecl(symbol, term_type))
    return constant(Decl(symbol, term_type))


def apply(func_decl: UnsafeDecl, *args):
    """
    Applies an uninterpreted function to `args`.

    A function declared as `Decl("f", Func[Int, Bool])` checks its arguments: there must
    be exactly one per parameter, each of the parameter's class or a scalar. The result
    is a handle of the function's range type.

    Otherwise no check is made, and the result sort is component `len(args)` of the
    declaration's sort, which raises `IndexError` when there are too many arguments.
    """
    func_type = func_decl.term_type if isinstance(func_decl, Decl) else None
    typed = func_type is not None and issubclass(func_type, Func) \
        and not any(isinstance(a, UnsafeTerm) for a in args)
    if typed:
        if len(args) != len(func_type.domain):
            raise TypeError(f"{func_decl.symbol} takes {len(func_type.domain)} arguments, instead got {len(args)}")
        typed_args = [_promote(p, a) for p, a in zip(func_type.domain, args)]
        return func_type.range(FuncAppExpr(func_decl, tuple(UnsafeTerm(a) for a in typed_args)))
    erased = []
    for i, a in enumerate(args):
        if isinstance(a, _Handle):
            erased.append(UnsafeTerm(a))
        else:
            erased.append(UnsafeTerm(LiteralExpr(func_decl.sort.sorts(i), a)))
    return UnsafeTerm(FuncAppExpr(func_decl, tuple(erased)))


def unary(opcode: Opcode, term):
    if not isinstance(term, _Handle):
        raise TypeError(f"{term!r} is not a term")
    return term._unop(opcode)


def binary(opcode: Opcode, left, right):
    term_type = _term_type_of((left, right))
    if term_type is None:
        lhs, rhs = _erase((left, right))
        return lhs._binop(opcode, rhs)
    result = _promote(term_type, left)._binop(opcode, right)
    if result is NotImplemented:
        raise TypeError(f"cannot apply {opcode.name} to {term_type.__name__}")
    return result


def nary(opcode: Opcode, terms: Iterable):
    terms = list(terms)
    assert len(terms) > 0, "n-ary expression needs at least one operand"
    rule = NARY_RULES.get(opcode)
    term_type = _term_type_of(terms)
    if term_type is None:
        erased = _erase(terms)
        sort = BoolSort() if rule is not None and rule.relational else erased[0].sort
        return UnsafeTerm(NaryExpr(sort, opcode, tuple(erased)))
    if rule is None or not rule.accepts(sort_of(term_type)):
        raise TypeError(f"cannot apply {opcode.name} to {term_type.__name__}")
    operands = [_promote(term_type, t) for t in terms]
    result_type = Bool if rule.relational else term_type
    return result_type(NaryExpr(sort_of(result_type), opcode, tuple(UnsafeTerm(o) for o in operands)))


def distinct(terms: Iterable):
    """Pairwise disequality of `terms`. With a single operand this is trivially true."""
    return nary(Opcode.NEQ, terms)


def implies(antecedent, consequent):
    return binary(Opcode.IMP, antecedent, consequent)


def const_array(array_type, init):
    """
    An array that maps every index to `init`. `array_type` is either a typed class like
    `Array[Int, Bool]` or an array `Sort`.
    """
    if isinstance(array_type, Sort):
        assert array_type.is_array, f"{array_type} is not an array sort"
        init, = _erase((init,), array_type.sorts(1))
        return UnsafeTerm(ConstArrayExpr(array_type, init))
    sort = sort_of(array_type)
    if not sort.is_array:
        raise TypeError(f"{array_type.__name__} is not an array type")
    if isinstance(init, UnsafeTerm):
        return UnsafeTerm(ConstArrayExpr(sort, init))
    init = _promote(array_type.range, init)
    return array_type(ConstArrayExpr(sort, UnsafeTerm(init)))


def select(array, index):
    if isinstance(array, Array) and not isinstance(index, UnsafeTerm):
        array_type = type(array)
        index = _promote(array_type.domain, index)
        return array_type.range(ArraySelectExpr(UnsafeTerm(array), UnsafeTerm(index)))
    array = UnsafeTerm(array)
    index, = _erase((index,), array.sort.sorts(0))
    return UnsafeTerm(ArraySelectExpr(array, index))


def store(array, index, value):
    if isinstance(array, Array) and not isinstance(index, UnsafeTerm) \
            and not isinstance(value, UnsafeTerm):
        array_type = type(array)
        index = _promote(array_type.domain, index)
        value = _promote(array_type.range, value)
        return array_type(ArrayStoreExpr(UnsafeTerm(array), UnsafeTerm(index), UnsafeTerm(value)))
    array = UnsafeTerm(array)
    index, = _erase((index,), array.sort.sorts(0))
    value, = _erase((value,), array.sort.sorts(1))
    return UnsafeTerm(ArrayStoreExpr(array, index, value))


def identity(opcode: Opcode, term_type=Bool):
    """
    The identity element of an associative Boolean connective: `true` for `LAND` and
    `false` for `LOR`. Handy as the seed of a fold, e.g. a conjunction of path guards.
    """
    if opcode == Opcode.LAND:
        value = True
    elif opcode == Opcode.LOR:
        value = False
    else:
        raise NotImplementedError(f"no identity element for {opcode.name}")
    if isinstance(term_type, Sort):
        assert term_type.is_bool, f"{opcode.name} is only defined on Booleans, not {term_type}"
        return UnsafeTerm(LiteralExpr(term_type, value))
    if term_type is not Bool:
        raise TypeError(f"{opcode.name} is only defined on Bool, not {term_type.__name__}")
    return Bool.from_scalar(value)
