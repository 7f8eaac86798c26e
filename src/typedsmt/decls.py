from dataclasses import dataclass

from .sorts import Sort


@dataclass(frozen=True, eq=False)
class UnsafeDecl:
    """
    A symbol paired with a sort chosen at runtime.

    Two declarations are equal when their symbols and sorts are, no matter whether
    they were built as `UnsafeDecl` or `Decl`. Nothing checks that a symbol is only
    ever declared once; that is up to the caller.
    """

    symbol: str
    sort: Sort

    def __post_init__(self):
        assert isinstance(self.symbol, str) and len(self.symbol) > 0, \
            f"declaration symbol must be a non-empty string, instead got {self.symbol!r}"
        assert isinstance(self.sort, Sort), f"{self.sort} is not a Sort instance"

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, UnsafeDecl):
            return NotImplemented
        return self.symbol == other.symbol and self.sort == other.sort

    def __hash__(self):
        return hash((self.symbol, self.sort))

    def __str__(self):
        return f"{self.symbol} : {self.sort}"


class Decl(UnsafeDecl):
    """
    A declaration whose sort is derived from a typed term class, e.g. `Decl("x", Int)`.
    """

    def __init__(self, symbol: str, term_type):
        from .terms import sort_of
        super().__init__(symbol, sort_of(term_type))
        object.__setattr__(self, "term_type", term_type)

    def __repr__(self):
        return f"Decl({self.symbol!r}, {self.term_type.__name__})"
