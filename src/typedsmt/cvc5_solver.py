"""
`Solver` back end built on the cvc5 Python bindings.
"""

from fractions import Fraction
import logging
from typing import Dict, Optional

import cvc5 as pycvc5
import numpy as np

from .common import *
from .config import SolverConfig
from .decls import UnsafeDecl
from .exprs import Expr
from .logics import Logic
from .solver import Solver
from .sorts import *
from .terms import UnsafeTerm

logger = logging.getLogger(__name__)

_K = pycvc5.Kind

# https://cvc5.github.io/docs/api/python/base/kind.html
# Maps our Opcode class to pycvc5.Kind, per operand sort
_BOOL_KINDS = {
    Opcode.LAND:    _K.AND,
    Opcode.AND:     _K.AND,
    Opcode.LOR:     _K.OR,
    Opcode.OR:      _K.OR,
    Opcode.XOR:     _K.XOR,
    Opcode.IMP:     _K.IMPLIES,
}

_ARITH_KINDS = {
    Opcode.ADD:     _K.ADD,
    Opcode.SUB:     _K.SUB,
    Opcode.MUL:     _K.MULT,
    Opcode.LSS:     _K.LT,
    Opcode.GTR:     _K.GT,
    Opcode.LEQ:     _K.LEQ,
    Opcode.GEQ:     _K.GEQ,
}

_INT_KINDS = {
    **_ARITH_KINDS,
    Opcode.QUO:     _K.INTS_DIVISION,
    Opcode.REM:     _K.INTS_MODULUS,
}

_REAL_KINDS = {
    **_ARITH_KINDS,
    Opcode.QUO:     _K.DIVISION,
}

_BV_KINDS = {
    Opcode.AND:     _K.BITVECTOR_AND,
    Opcode.OR:      _K.BITVECTOR_OR,
    Opcode.XOR:     _K.BITVECTOR_XOR,
    Opcode.ADD:     _K.BITVECTOR_ADD,
    Opcode.SUB:     _K.BITVECTOR_SUB,
    Opcode.MUL:     _K.BITVECTOR_MULT,
}

_SIGNED_BV_KINDS = {
    **_BV_KINDS,
    Opcode.QUO:     _K.BITVECTOR_SDIV,
    Opcode.REM:     _K.BITVECTOR_SREM,
    Opcode.LSS:     _K.BITVECTOR_SLT,
    Opcode.GTR:     _K.BITVECTOR_SGT,
    Opcode.LEQ:     _K.BITVECTOR_SLE,
    Opcode.GEQ:     _K.BITVECTOR_SGE,
}

_UNSIGNED_BV_KINDS = {
    **_BV_KINDS,
    Opcode.QUO:     _K.BITVECTOR_UDIV,
    Opcode.REM:     _K.BITVECTOR_UREM,
    Opcode.LSS:     _K.BITVECTOR_ULT,
    Opcode.GTR:     _K.BITVECTOR_UGT,
    Opcode.LEQ:     _K.BITVECTOR_ULE,
    Opcode.GEQ:     _K.BITVECTOR_UGE,
}

# n-ary operators that are the identity on a single operand
_ASSOCIATIVE = (Opcode.LAND, Opcode.LOR, Opcode.ADD, Opcode.MUL, Opcode.AND, Opcode.OR)

_INEQUALITIES = (Opcode.LSS, Opcode.GTR, Opcode.LEQ, Opcode.GEQ)


def _unary_kind(opcode: Opcode, sort: Sort):
    if opcode == Opcode.SUB:
        if sort.is_int or sort.is_real:
            return _K.NEG
        if sort.is_bv:
            return _K.BITVECTOR_NEG
    elif opcode in (Opcode.LNOT, Opcode.NOT):
        if sort.is_bool:
            return _K.NOT
        if sort.is_bv:
            return _K.BITVECTOR_NOT
    return None


def _binary_kind(opcode: Opcode, sort: Sort):
    """Returns the kind that `opcode` has on operands of `sort`, or None."""
    if opcode == Opcode.EQL:
        return _K.EQUAL
    if opcode == Opcode.NEQ:
        # regardless of signedness
        return _K.DISTINCT
    if sort.is_bool:
        table = _BOOL_KINDS
    elif sort.is_int:
        table = _INT_KINDS
    elif sort.is_real:
        table = _REAL_KINDS
    elif sort.is_bv:
        table = _SIGNED_BV_KINDS if sort.is_signed else _UNSIGNED_BV_KINDS
    else:
        return None
    return table.get(opcode)


def _to_fraction(value) -> Fraction:
    if isinstance(value, (int, np.integer, np.bool_)):
        return Fraction(int(value))
    if isinstance(value, Fraction):
        return value
    return Fraction(float(value))


class Cvc5Solver(Solver):
    """
    An incremental cvc5 solver.

    Declarations are translated once each and keyed by equality, so `Decl("x", Int)` and
    `UnsafeDecl("x", IntSort())` refer to the same cvc5 constant. With memoization on,
    every expression node is translated at most once, no matter how many parents share it.
    """

    literal_types = (bool, int, float, Fraction, np.bool_, np.integer, np.floating)

    _solver: pycvc5.Solver
    _sorts: Dict[Sort, pycvc5.Sort]
    _decls: Dict[UnsafeDecl, pycvc5.Term]
    _nodes: Dict[Expr, pycvc5.Term]
    _expr: Optional[pycvc5.Term]
    """The cvc5 term produced by the most recent successful `encode_*` call."""

    def __init__(self, logic: Optional[Logic] = None, config: Optional[SolverConfig] = None):
        super().__init__()
        config = config or SolverConfig()
        if logic is None:
            logic = config.logic
        self.logic = logic
        self.config = config
        self._solver = pycvc5.Solver()
        self._solver.setOption("incremental", "true" if config.incremental else "false")
        # constant arrays need the extended array solver
        self._solver.setOption("arrays-exp", "true")
        for option, value in config.options.items():
            self._solver.setOption(option, value)
        if logic is not None:
            self._solver.setLogic(logic.acronym)
        logger.debug(
            "created cvc5 solver (logic=%s, incremental=%s, memoize=%s, options=%s)",
            logic, config.incremental, config.memoize, config.options
        )
        self._sorts = {}
        self._decls = {}
        self._nodes = {}
        self._expr = None

    def get_cvc5_solver(self) -> pycvc5.Solver:
        """
        Returns a reference to the underlying cvc5 solver.

        IMPORTANT: assertions made directly on the cvc5 solver are not tracked by this
        object, and neither are scopes pushed or popped on it.
        """
        return self._solver

    def expr(self) -> Optional[pycvc5.Term]:
        """Returns the cvc5 term produced by the last successful encoding."""
        return self._expr

    # === Translation helpers ===

    def _to_cvc5_sort(self, sort: Sort) -> pycvc5.Sort:
        if sort in self._sorts:
            return self._sorts[sort]
        sv = self._solver
        if sort.is_bool:
            c_sort = sv.getBooleanSort()
        elif sort.is_int:
            c_sort = sv.getIntegerSort()
        elif sort.is_real:
            c_sort = sv.getRealSort()
        elif sort.is_bv:
            c_sort = sv.mkBitVectorSort(sort.bv_size)
        elif sort.is_array:
            c_sort = sv.mkArraySort(self._to_cvc5_sort(sort.sorts(0)), self._to_cvc5_sort(sort.sorts(1)))
        elif sort.is_func:
            c_sort = sv.mkFunctionSort(
                [self._to_cvc5_sort(a) for a in sort.args],
                self._to_cvc5_sort(sort.codomain)
            )
        elif sort.is_tuple:
            c_sort = sv.mkTupleSort(*[self._to_cvc5_sort(e) for e in sort.elements])
        else:
            raise NotImplementedError(f"cannot convert sort {sort} to cvc5")
        self._sorts[sort] = c_sort
        return c_sort

    def _decl_term(self, decl: UnsafeDecl) -> pycvc5.Term:
        if decl not in self._decls:
            self._decls[decl] = self._solver.mkConst(self._to_cvc5_sort(decl.sort), decl.symbol)
        return self._decls[decl]

    def _translate(self, term: UnsafeTerm):
        """
        Encodes `term` and returns the error code together with the resulting cvc5
        term (None if encoding failed).
        """
        node = term.ref()
        if self.config.memoize and node in self._nodes:
            self._expr = self._nodes[node]
            return Error.OK, self._expr
        err = term.encode(self)
        if err != Error.OK:
            return err, None
        if self.config.memoize:
            self._nodes[node] = self._expr
        return Error.OK, self._expr

    def _translate_all(self, terms):
        c_terms = []
        for t in terms:
            err, c_term = self._translate(t)
            if err != Error.OK:
                return err, None
            c_terms.append(c_term)
        return Error.OK, c_terms

    def _mk_term(self, kind, *children) -> Error:
        try:
            self._expr = self._solver.mkTerm(kind, *children)
        except RuntimeError as e:
            logger.debug("cvc5 rejected term of kind %s: %s", kind, e)
            return Error.OPCODE_ERROR
        return Error.OK

    def _count(self, opcode: Opcode):
        stats = self._stats
        if opcode == Opcode.EQL:
            stats.equalities += 1
        elif opcode == Opcode.NEQ:
            stats.disequalities += 1
        elif opcode in _INEQUALITIES:
            stats.inequalities += 1
        elif opcode == Opcode.IMP:
            stats.implications += 1
        elif opcode == Opcode.LAND:
            stats.conjunctions += 1
        elif opcode == Opcode.LOR:
            stats.disjunctions += 1

    # === Encoding hooks ===

    def _encode_literal(self, sort, literal):
        sv = self._solver
        if sort.is_bool:
            self._expr = sv.mkBoolean(bool(literal))
        elif sort.is_int:
            if not isinstance(literal, (int, np.integer, np.bool_)):
                return Error.UNSUPPORT_ERROR
            self._expr = sv.mkInteger(str(int(literal)))
        elif sort.is_real:
            try:
                value = _to_fraction(literal)
            except (ValueError, OverflowError):
                # nan and infinities
                return Error.UNSUPPORT_ERROR
            if value.denominator == 1:
                self._expr = sv.mkReal(str(value.numerator))
            else:
                self._expr = sv.mkReal(f"{value.numerator}/{value.denominator}")
        elif sort.is_bv:
            if not isinstance(literal, (int, np.integer, np.bool_)):
                return Error.UNSUPPORT_ERROR
            self._expr = sv.mkBitVector(sort.bv_size, str(int(literal) & sort.mask), 10)
        else:
            return Error.UNSUPPORT_ERROR
        return Error.OK

    def _encode_constant(self, decl):
        self._expr = self._decl_term(decl)
        self._stats.constants += 1
        return Error.OK

    def _encode_func_app(self, func_decl, arity, args):
        fn = self._decl_term(func_decl)
        err, c_args = self._translate_all(args)
        if err != Error.OK:
            return err
        if arity == 0:
            self._expr = fn
            err = Error.OK
        else:
            err = self._mk_term(_K.APPLY_UF, fn, *c_args)
        if err == Error.OK:
            self._stats.func_apps += 1
        return err

    def _encode_const_array(self, sort, init):
        # cvc5 only builds constant arrays from values
        if init.expr_kind != ExprKind.LITERAL:
            return Error.UNSUPPORT_ERROR
        err, c_init = self._translate(init)
        if err != Error.OK:
            return err
        try:
            self._expr = self._solver.mkConstArray(self._to_cvc5_sort(sort), c_init)
        except RuntimeError as e:
            logger.debug("cvc5 rejected constant array of sort %s: %s", sort, e)
            return Error.UNSUPPORT_ERROR
        return Error.OK

    def _encode_array_select(self, array, index):
        err, c_terms = self._translate_all((array, index))
        if err != Error.OK:
            return err
        err = self._mk_term(_K.SELECT, *c_terms)
        if err == Error.OK:
            self._stats.array_selects += 1
        return err

    def _encode_array_store(self, array, index, value):
        err, c_terms = self._translate_all((array, index, value))
        if err != Error.OK:
            return err
        err = self._mk_term(_K.STORE, *c_terms)
        if err == Error.OK:
            self._stats.array_stores += 1
        return err

    def _encode_unary(self, opcode, sort, operand):
        kind = _unary_kind(opcode, operand.sort)
        if kind is None:
            return Error.OPCODE_ERROR
        err, c_operand = self._translate(operand)
        if err != Error.OK:
            return err
        err = self._mk_term(kind, c_operand)
        if err == Error.OK:
            self._stats.unary_ops += 1
        return err

    def _encode_binary(self, opcode, sort, loperand, roperand):
        kind = _binary_kind(opcode, loperand.sort)
        if kind is None:
            return Error.OPCODE_ERROR
        err, c_terms = self._translate_all((loperand, roperand))
        if err != Error.OK:
            return err
        err = self._mk_term(kind, *c_terms)
        if err == Error.OK:
            self._stats.binary_ops += 1
            self._count(opcode)
        return err

    def _encode_nary(self, opcode, sort, operands):
        kind = _binary_kind(opcode, operands[0].sort)
        if kind is None:
            return Error.OPCODE_ERROR
        err, c_terms = self._translate_all(operands)
        if err != Error.OK:
            return err
        if len(c_terms) == 1:
            # cvc5 wants at least two children for these kinds
            if opcode in _ASSOCIATIVE:
                self._expr = c_terms[0]
            elif opcode in (Opcode.EQL, Opcode.NEQ):
                self._expr = self._solver.mkTrue()
            else:
                return Error.OPCODE_ERROR
        else:
            err = self._mk_term(kind, *c_terms)
            if err != Error.OK:
                return err
        self._stats.nary_ops += 1
        self._count(opcode)
        return Error.OK

    # === Solver hooks ===

    def _reset(self):
        self._solver.resetAssertions()
        self._nodes.clear()
        self._expr = None

    def _push(self):
        self._solver.push()

    def _pop(self):
        self._solver.pop()

    def _add(self, condition):
        err, c_term = self._translate(condition)
        if err != Error.OK:
            return err
        if not c_term.getSort().isBoolean():
            return Error.UNSUPPORT_ERROR
        self._solver.assertFormula(c_term)
        return Error.OK

    def _check(self):
        try:
            result = self._solver.checkSat()
        except RuntimeError as e:
            logger.warning("cvc5 could not decide the assertions: %s", e)
            return CheckResult.UNKNOWN
        if result.isSat():
            return CheckResult.SAT
        elif result.isUnsat():
            return CheckResult.UNSAT
        return CheckResult.UNKNOWN
