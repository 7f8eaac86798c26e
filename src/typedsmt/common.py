from abc import ABC, abstractmethod
from enum import Enum, IntEnum, auto


class Error(IntEnum):
    """
    Contingencies that every implementation of the `Solver` contract must consider.
    Returned (never raised) by all `encode_*` calls.
    """
    OK              = 0
    OPCODE_ERROR    = auto() # unexpected operator for this node/back end
    UNSUPPORT_ERROR = auto() # unsupported literal type or SMT-LIB feature


class CheckResult(Enum):
    UNSAT   = auto()
    SAT     = auto()
    UNKNOWN = auto()


unsat = CheckResult.UNSAT
sat = CheckResult.SAT
unknown = CheckResult.UNKNOWN


class Opcode(Enum):
    LNOT    = auto() # !
    NOT     = auto() # ~
    SUB     = auto() # -
    AND     = auto() # &
    OR      = auto() # |
    XOR     = auto() # ^
    LAND    = auto() # &&
    LOR     = auto() # ||
    IMP     = auto() # logical implication
    EQL     = auto() # ==
    ADD     = auto() # +
    MUL     = auto() # *
    QUO     = auto() # /
    REM     = auto() # %
    LSS     = auto() # <
    GTR     = auto() # >
    NEQ     = auto() # !=
    LEQ     = auto() # <=
    GEQ     = auto() # >=


class ExprKind(Enum):
    LITERAL         = auto()
    UNARY           = auto()
    BINARY          = auto()
    NARY            = auto()
    CONST_ARRAY     = auto()
    ARRAY_SELECT    = auto()
    ARRAY_STORE     = auto()
    CONSTANT        = auto()
    FUNC_APP        = auto()


class EncodeError(Exception):
    """
    Raised when a term asserted through `Solver.add` or `Solver.unsafe_add` could
    not be encoded by the back end.
    """

    def __init__(self, error: Error, msg=None):
        self.error = error
        super().__init__(msg or f"back end failed to encode term: {error.name}")


class Encodable(ABC):
    """
    Mixin for objects that a `Solver` back end can translate into its own representation.
    """

    @abstractmethod
    def _encode(self, solver) -> Error:
        raise NotImplementedError()

    def encode(self, solver) -> Error:
        return self._encode(solver)
