from abc import ABC
from dataclasses import dataclass
from typing import Tuple

# === BEGIN SMT Sorts ===

class Sort(ABC):
    """
    Describes the sort of an SMT term.

    Primitive sorts carry no components. Composite sorts (arrays, functions, tuples)
    expose their component sorts through `sorts(index)`.
    """

    @property
    def is_bool(self) -> bool:
        return False

    @property
    def is_int(self) -> bool:
        return False

    @property
    def is_real(self) -> bool:
        return False

    @property
    def is_bv(self) -> bool:
        return False

    @property
    def is_signed(self) -> bool:
        return False

    @property
    def bv_size(self) -> int:
        return 0

    @property
    def is_array(self) -> bool:
        return False

    @property
    def is_func(self) -> bool:
        return False

    @property
    def is_tuple(self) -> bool:
        return False

    @property
    def _components(self) -> Tuple["Sort", ...]:
        return ()

    @property
    def sorts_size(self) -> int:
        return len(self._components)

    def sorts(self, index: int) -> "Sort":
        """
        Returns the `index`th component sort. Indexing past the end is a programming
        error and raises `IndexError`.
        """
        components = self._components
        if index < 0 or index >= len(components):
            raise IndexError(f"sort {self} has no component {index} (has {len(components)})")
        return components[index]


@dataclass(frozen=True)
class BoolSort(Sort):
    @property
    def is_bool(self):
        return True

    def __str__(self):
        return "bool"


@dataclass(frozen=True)
class IntSort(Sort):
    @property
    def is_int(self):
        return True

    def __str__(self):
        return "int"


@dataclass(frozen=True)
class RealSort(Sort):
    @property
    def is_real(self):
        return True

    def __str__(self):
        return "real"


@dataclass(frozen=True)
class BVSort(Sort):
    bitwidth: int
    signed: bool = False

    def __post_init__(self):
        assert isinstance(self.bitwidth, int) and self.bitwidth > 0, \
            f"bitvector width must be a positive int, instead got {self.bitwidth}"

    @property
    def is_bv(self):
        return True

    @property
    def is_signed(self):
        return self.signed

    @property
    def bv_size(self):
        return self.bitwidth

    @property
    def mask(self) -> int:
        return (1 << self.bitwidth) - 1

    def __str__(self):
        return ("sbv" if self.signed else "bv") + str(self.bitwidth)


@dataclass(frozen=True)
class ArraySort(Sort):
    idx_sort: Sort
    elem_sort: Sort

    def __post_init__(self):
        assert isinstance(self.idx_sort, Sort), f"{self.idx_sort} is not a Sort instance"
        assert isinstance(self.elem_sort, Sort), f"{self.elem_sort} is not a Sort instance"

    @property
    def is_array(self):
        return True

    @property
    def _components(self):
        return (self.idx_sort, self.elem_sort)

    def __str__(self):
        return f"[{self.idx_sort}]{self.elem_sort}"


@dataclass(frozen=True)
class FunctionSort(Sort):
    args: Tuple[Sort, ...] # argument sorts
    codomain: Sort # return sort

    def __post_init__(self):
        # lists are accepted for convenience, but the sort must stay hashable
        object.__setattr__(self, "args", tuple(self.args))
        assert all(isinstance(a, Sort) for a in self.args), self.args
        assert isinstance(self.codomain, Sort), f"{self.codomain} is not a Sort instance"

    @property
    def is_func(self):
        return True

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def _components(self):
        return self.args + (self.codomain,)

    def __str__(self):
        return f"({','.join(str(a) for a in self.args)}) -> {self.codomain}"


@dataclass(frozen=True)
class TupleSort(Sort):
    elements: Tuple[Sort, ...]

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))
        assert all(isinstance(e, Sort) for e in self.elements), self.elements

    @property
    def is_tuple(self):
        return True

    @property
    def _components(self):
        return self.elements

    def __str__(self):
        return f"({' * '.join(str(e) for e in self.elements)})"

# === END SMT Sorts ===
