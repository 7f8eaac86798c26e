from fractions import Fraction

import numpy as np
import pytest

import typedsmt as smt
from typedsmt import Bool, Bv, Int, Real, ExprKind, Opcode

x = smt.declare("x", Int)
y = smt.declare("y", Int)
r = smt.declare("r", Real)
a = smt.declare("a", Bool)
b = smt.declare("b", Bool)
p = smt.declare("p", Bv[np.uint8])
q = smt.declare("q", Bv[np.uint8])
s = smt.declare("s", Bv[np.int8])

binops = {
    "add": (lambda: x + y, Opcode.ADD, Int),
    "sub": (lambda: x - y, Opcode.SUB, Int),
    "mul": (lambda: x * y, Opcode.MUL, Int),
    "quo": (lambda: x / y, Opcode.QUO, Int),
    "rem": (lambda: x % y, Opcode.REM, Int),
    "lss": (lambda: x < y, Opcode.LSS, Bool),
    "gtr": (lambda: x > y, Opcode.GTR, Bool),
    "leq": (lambda: x <= y, Opcode.LEQ, Bool),
    "geq": (lambda: x >= y, Opcode.GEQ, Bool),
    "eql": (lambda: x.op_eq(y), Opcode.EQL, Bool),
    "neq": (lambda: x.op_ne(y), Opcode.NEQ, Bool),
    "land": (lambda: a & b, Opcode.LAND, Bool),
    "lor": (lambda: a | b, Opcode.LOR, Bool),
    "xor": (lambda: a ^ b, Opcode.XOR, Bool),
    "imp": (lambda: a.implies(b), Opcode.IMP, Bool),
    "bvand": (lambda: p & q, Opcode.AND, Bv[np.uint8]),
    "bvor": (lambda: p | q, Opcode.OR, Bv[np.uint8]),
    "bvxor": (lambda: p ^ q, Opcode.XOR, Bv[np.uint8]),
    "bvrem": (lambda: p % q, Opcode.REM, Bv[np.uint8]),
    "bvlss": (lambda: p < q, Opcode.LSS, Bool),
    "realquo": (lambda: r / r, Opcode.QUO, Real),
}

mismatches = {
    "int_real": lambda: x + r,
    "bool_add": lambda: a + b,
    "int_and": lambda: x & y,
    "bv_signedness": lambda: p + s,
    "bool_lss": lambda: a < b,
    "int_float": lambda: x + 1.5,
    "bool_int_scalar": lambda: a & 1,
    "real_rem": lambda: r % r,
    "eq_int_real": lambda: x.op_eq(r),
    "imp_int": lambda: x.implies(y),
    "int_invert": lambda: ~x,
    "bool_neg": lambda: -a,
}

class TestTypeTags:
    def test_primitive_sorts(self):
        assert smt.sort_of(Bool) == smt.BoolSort()
        assert smt.sort_of(Int) == smt.IntSort()
        assert smt.sort_of(Real) == smt.RealSort()

    def test_sorts_are_cached(self):
        assert smt.sort_of(Int) is smt.sort_of(Int)
        assert smt.sort_of(Bv[np.int32]) is smt.sort_of(Bv["int32"])

    @pytest.mark.parametrize("scalar_type,width,signed", [
        (np.int8, 8, True),
        (np.uint8, 8, False),
        (np.int16, 16, True),
        (np.uint32, 32, False),
        (np.int64, 64, True),
        (np.bool_, 8, False),
    ])
    def test_bv_sorts(self, scalar_type, width, signed):
        assert smt.sort_of(Bv[scalar_type]) == smt.BVSort(width, signed)

    def test_bv_classes_are_cached(self):
        assert Bv[np.int8] is Bv["int8"]
        assert Bv[np.int8] is Bv[np.dtype("int8")]
        assert Bv[np.int8] is not Bv[np.uint8]

    def test_bad_bv_params(self):
        with pytest.raises(TypeError):
            Bv[np.float32]
        with pytest.raises(TypeError):
            Bv["not a type"]
        with pytest.raises(TypeError):
            Bv[np.int8][np.int8]

    def test_unparameterized(self):
        for t in (Bv, smt.Array, smt.Func, smt.Term):
            with pytest.raises(TypeError):
                smt.sort_of(t)

    def test_not_a_term_type(self):
        with pytest.raises(TypeError):
            smt.sort_of(int)

    def test_array_and_func_types(self):
        A = smt.Array[Int, Bool]
        assert A is smt.Array[Int, Bool]
        assert smt.sort_of(A) == smt.ArraySort(smt.IntSort(), smt.BoolSort())
        F = smt.Func[Int, Real, Bool]
        assert F.domain == (Int, Real)
        assert F.range is Bool
        assert smt.sort_of(F) == smt.FunctionSort((smt.IntSort(), smt.RealSort()), smt.BoolSort())
        with pytest.raises(TypeError):
            smt.Func[Int]
        with pytest.raises(TypeError):
            smt.Array[Int]


class TestHandles:
    def test_null(self):
        for t in (Int(), smt.UnsafeTerm()):
            assert t.is_null()
            assert t.addr() == 0
            assert str(t) == "<null>"
            with pytest.raises(AssertionError):
                t.sort
            with pytest.raises(AssertionError):
                t.expr_kind

    def test_constant(self):
        assert not x.is_null()
        assert x.sort == smt.IntSort()
        assert x.expr_kind == ExprKind.CONSTANT
        assert x.ref().decl == smt.Decl("x", Int)
        assert str(x) == "x"

    def test_aliasing(self):
        u = smt.UnsafeTerm(x)
        assert u.addr() == x.addr()
        assert u.ref() is x.ref()
        # a second declaration of the same symbol is a distinct node
        assert smt.declare("x", Int).addr() != x.addr()

    def test_shared_subexpression(self):
        e = x + x
        assert e.ref().loperand.addr() == x.addr()
        assert e.ref().roperand.addr() == x.addr()

    def test_identity_semantics(self):
        # == compares handles, it does not build an equality
        assert (x == x) is True
        assert (x == smt.UnsafeTerm(x)) is False
        assert len({x, y, x}) == 2

    def test_view_wrong_sort(self):
        with pytest.raises(AssertionError):
            Bool(x)

    def test_str(self):
        assert str(x + 1) == "(ADD x 1)"
        assert str(~a) == "(LNOT a)"


class TestOperators:
    @pytest.mark.parametrize("op", list(binops.keys()))
    def test_binary(self, op):
        build, opcode, result_type = binops[op]
        e = build()
        assert type(e) is result_type
        assert e.expr_kind == ExprKind.BINARY
        assert e.ref().opcode == opcode
        assert e.sort == smt.sort_of(result_type)

    @pytest.mark.parametrize("op", list(mismatches.keys()))
    def test_mismatch(self, op):
        with pytest.raises(TypeError):
            mismatches[op]()

    def test_unary(self):
        assert (~a).ref().opcode == Opcode.LNOT
        assert (~p).ref().opcode == Opcode.NOT
        assert type(~p) is Bv[np.uint8]
        neg = -x
        assert type(neg) is Int
        assert neg.expr_kind == ExprKind.UNARY
        assert neg.ref().opcode == Opcode.SUB

    def test_int_promotion(self):
        e = x + 1
        assert type(e) is Int
        lit = e.ref().roperand
        assert lit.expr_kind == ExprKind.LITERAL
        assert lit.sort == smt.IntSort()
        assert lit.ref().literal == 1

    def test_reflected_promotion(self):
        e = 1 - x
        assert e.ref().opcode == Opcode.SUB
        assert e.ref().loperand.expr_kind == ExprKind.LITERAL
        assert e.ref().roperand.addr() == x.addr()

    def test_reflected_comparison(self):
        # Python evaluates `3 < x` as `x > 3`
        e = 3 < x
        assert type(e) is Bool
        assert e.ref().opcode == Opcode.GTR
        assert e.ref().loperand.addr() == x.addr()

    def test_numpy_scalar_on_left(self):
        e = np.int8(3) + s
        assert type(e) is Bv[np.int8]
        assert e.ref().loperand.ref().literal == 3

    def test_bv_literal_wraps(self):
        lit = (p + 300).ref().roperand.ref().literal
        assert isinstance(lit, np.uint8)
        assert lit == 44
        lit = (s + 255).ref().roperand.ref().literal
        assert isinstance(lit, np.int8)
        assert lit == -1

    def test_real_promotion(self):
        lit = (r + 0.5).ref().roperand.ref().literal
        assert lit == Fraction(1, 2)
        lit = (r * 2).ref().roperand.ref().literal
        assert lit == Fraction(2)

    def test_bool_promotion(self):
        e = a & True
        assert e.ref().roperand.ref().literal is True
        e = False | a
        assert e.ref().opcode == Opcode.LOR
        assert e.ref().loperand.ref().literal is False
        e = a | np.bool_(True)
        assert e.ref().roperand.ref().literal is True

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), -np.inf, np.float32("nan")])
    def test_real_rejects_non_finite(self, value):
        with pytest.raises(ValueError):
            r + value
        with pytest.raises(ValueError):
            smt.literal(Real, value)


class TestUnsafeTerms:
    def test_operators_pick_opcodes_by_sort(self):
        u = smt.declare("u", smt.BoolSort())
        v = smt.declare("v", smt.BVSort(4))
        assert isinstance(u, smt.UnsafeTerm)
        assert (~u).ref().opcode == Opcode.LNOT
        assert (~v).ref().opcode == Opcode.NOT
        assert (u & u).ref().opcode == Opcode.LAND
        assert (v & v).ref().opcode == Opcode.AND

    def test_relations_are_boolean(self):
        u = smt.declare("u", smt.IntSort())
        assert (u < 1).sort == smt.BoolSort()
        assert u.op_ne(u).sort == smt.BoolSort()
        assert (u + 1).sort == smt.IntSort()
        assert (u + 1).ref().roperand.sort == smt.IntSort()

    def test_no_sort_check(self):
        u = smt.declare("u", smt.IntSort())
        v = smt.declare("v", smt.BoolSort())
        e = u + v
        assert isinstance(e, smt.UnsafeTerm)
        assert e.sort == smt.IntSort()

    def test_typed_converts_implicitly(self):
        u = smt.declare("u", smt.IntSort())
        e = x + u
        assert isinstance(e, smt.UnsafeTerm)
        assert e.ref().loperand.addr() == x.addr()
        assert e.ref().roperand.addr() == u.addr()

    def test_cast(self):
        u = smt.UnsafeTerm(x)
        t = u.cast(Int)
        assert type(t) is Int
        assert t.addr() == x.addr()
        assert u.cast(Real).is_null()
        assert u.cast(Bv[np.int64]).is_null()
        assert smt.UnsafeTerm().cast(Int).is_null()

    def test_cast_by_sort(self):
        # an unsafe term of the right sort becomes a proper typed handle
        u = smt.declare("u", smt.BVSort(8, signed=True))
        t = u.cast(Bv[np.int8])
        assert not t.is_null()
        assert type(t + 1) is Bv[np.int8]
        assert u.cast(Bv[np.uint8]).is_null()
