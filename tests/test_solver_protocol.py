"""
Tests the double-dispatch encoding protocol against a back end that only records
the calls it receives.
"""

import numpy as np
import pytest

import typedsmt as smt
from typedsmt import Bool, Bv, Func, Int, Error, Opcode

class RecordingSolver(smt.Solver):
    literal_types = (bool, int)

    def __init__(self, logic=None):
        super().__init__()
        self.logic = logic
        self.calls = []
        self.assertions = []
        self.result = smt.unknown

    def _record(self, *call):
        self.calls.append(call)
        return Error.OK

    def _encode_operands(self, *operands):
        for o in operands:
            err = o.encode(self)
            if err != Error.OK:
                return err
        return Error.OK

    def _encode_literal(self, sort, literal):
        return self._record("literal", sort, literal)

    def _encode_constant(self, decl):
        return self._record("constant", decl.symbol)

    def _encode_func_app(self, func_decl, arity, args):
        err = self._encode_operands(*args)
        return err if err != Error.OK else self._record("func_app", func_decl.symbol, arity)

    def _encode_const_array(self, sort, init):
        err = self._encode_operands(init)
        return err if err != Error.OK else self._record("const_array", sort)

    def _encode_array_select(self, array, index):
        err = self._encode_operands(array, index)
        return err if err != Error.OK else self._record("array_select")

    def _encode_array_store(self, array, index, value):
        err = self._encode_operands(array, index, value)
        return err if err != Error.OK else self._record("array_store")

    def _encode_unary(self, opcode, sort, operand):
        err = self._encode_operands(operand)
        return err if err != Error.OK else self._record("unary", opcode, sort)

    def _encode_binary(self, opcode, sort, loperand, roperand):
        if opcode == Opcode.REM:
            return Error.OPCODE_ERROR
        err = self._encode_operands(loperand, roperand)
        return err if err != Error.OK else self._record("binary", opcode, sort)

    def _encode_nary(self, opcode, sort, operands):
        err = self._encode_operands(*operands)
        return err if err != Error.OK else self._record("nary", opcode, len(operands))

    def _reset(self):
        self.calls.append(("reset",))

    def _push(self):
        self.calls.append(("push",))

    def _pop(self):
        self.calls.append(("pop",))

    def _add(self, condition):
        err = condition.encode(self)
        if err == Error.OK:
            self.assertions.append(condition)
        return err

    def _check(self):
        return self.result


class TestSolverProtocol:
    def test_dispatch_order(self):
        solver = RecordingSolver()
        x = smt.declare("x", Int)
        assert (x + 1).encode(solver) == Error.OK
        assert solver.calls == [
            ("constant", "x"),
            ("literal", smt.IntSort(), 1),
            ("binary", Opcode.ADD, smt.IntSort()),
        ]

    def test_node_kinds(self):
        solver = RecordingSolver()
        f = smt.Decl("f", Func[Int, Int])
        arr = smt.declare("arr", smt.Array[Int, Int])
        e = smt.select(smt.store(arr, 0, smt.apply(f, -smt.declare("y", Int))), 0)
        assert e.encode(solver) == Error.OK
        kinds = [c[0] for c in solver.calls]
        assert kinds == [
            "constant", "literal", "constant", "unary", "func_app", "array_store", "literal", "array_select"
        ]
        assert ("func_app", "f", 1) in solver.calls

    def test_nary(self):
        solver = RecordingSolver()
        terms = [smt.declare(n, Int) for n in "abc"]
        assert smt.distinct(terms).encode(solver) == Error.OK
        assert solver.calls[-1] == ("nary", Opcode.NEQ, 3)

    def test_unsupported_literal_type(self):
        solver = RecordingSolver()
        # accepted by the term, but not listed in literal_types
        lit = smt.literal(Bv[np.uint8], 3)
        assert lit.encode(solver) == Error.UNSUPPORT_ERROR
        assert solver.calls == []

    def test_literal_default(self):
        class NoLiterals(RecordingSolver):
            literal_types = (bool, int)

            def _encode_literal(self, sort, literal):
                return smt.Solver._encode_literal(self, sort, literal)

        assert smt.literal(Int, 3).encode(NoLiterals()) == Error.UNSUPPORT_ERROR

    def test_add(self):
        solver = RecordingSolver()
        a = smt.declare("a", Bool)
        solver.add(a)
        assert [t.addr() for t in solver.assertions] == [a.addr()]

    def test_add_requires_bool(self):
        solver = RecordingSolver()
        with pytest.raises(TypeError):
            solver.add(smt.declare("x", Int))
        with pytest.raises(TypeError):
            solver.add(smt.declare("u", smt.BoolSort()))
        assert solver.assertions == []

    def test_unsafe_add(self):
        solver = RecordingSolver()
        u = smt.declare("u", smt.IntSort())
        # no sort check at all
        solver.unsafe_add(u)
        assert solver.assertions[0].addr() == u.addr()

    def test_add_raises_encode_error(self):
        solver = RecordingSolver()
        x = smt.declare("x", Int)
        with pytest.raises(smt.EncodeError) as e:
            solver.add((x % 2).op_eq(0))
        assert e.value.error == Error.OPCODE_ERROR
        with pytest.raises(smt.EncodeError):
            solver.unsafe_add(smt.literal(smt.BoolSort(), "true"))
        assert solver.assertions == []

    def test_scopes(self):
        solver = RecordingSolver()
        solver.push()
        solver.push()
        assert solver.scopes == 2
        solver.pop()
        assert solver.scopes == 1
        solver.reset()
        assert solver.scopes == 0
        assert solver.calls == [("push",), ("push",), ("pop",), ("reset",)]

    def test_pop_empty(self):
        solver = RecordingSolver()
        with pytest.raises(AssertionError):
            solver.pop()

    def test_failed_pop_keeps_scopes(self):
        class FailingPop(RecordingSolver):
            def _pop(self):
                raise RuntimeError("backend refused pop")

        solver = FailingPop()
        solver.push()
        with pytest.raises(RuntimeError):
            solver.pop()
        assert solver.scopes == 1

    def test_check(self):
        solver = RecordingSolver()
        assert solver.check() == smt.CheckResult.UNKNOWN
        solver.result = smt.sat
        assert solver.check() == smt.CheckResult.SAT

    def test_core_leaves_stats_alone(self):
        solver = RecordingSolver()
        x = smt.declare("x", Int)
        solver.add((x + 1).op_eq(x) & (x < 3))
        assert solver.stats == smt.Stats()

    def test_abstract(self):
        with pytest.raises(TypeError):
            smt.Solver()

    def test_create_solver_unknown_backend(self):
        with pytest.raises(NotImplementedError):
            smt.create_solver(smt.SolverConfig(backend="z3"))


class TestEnums:
    def test_error_values(self):
        assert Error.OK == 0
        assert Error.OK != Error.OPCODE_ERROR
        assert Error.OPCODE_ERROR != Error.UNSUPPORT_ERROR

    def test_check_result_aliases(self):
        assert smt.sat is smt.CheckResult.SAT
        assert smt.unsat is smt.CheckResult.UNSAT
        assert smt.unknown is smt.CheckResult.UNKNOWN


class TestSolverConfig:
    def test_defaults(self):
        config = smt.SolverConfig()
        assert config.backend == "cvc5"
        assert config.logic is None
        assert config.incremental
        assert config.memoize
        assert config.options == {}

    def test_normalization(self):
        config = smt.SolverConfig(backend="CVC5", logic="QF_BV", options={"produce-models": True})
        assert config.backend == "cvc5"
        assert config.logic is smt.Logic.QF_BV
        assert config.options == {"produce-models": "true"}

    def test_bad_logic(self):
        with pytest.raises(ValueError):
            smt.SolverConfig(logic="QF_XYZ")
