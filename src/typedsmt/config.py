from dataclasses import dataclass, field
from typing import Dict, Optional

from .logics import Logic


@dataclass
class SolverConfig:
    """
    Options for constructing a solver back end through `create_solver`.

    `logic` is passed on to the back end as a hint only. `memoize` makes the back end
    translate every shared sub-expression once, keyed by node identity. `options` are
    passed verbatim to the back end (e.g. cvc5's `setOption`).
    """

    backend: str = "cvc5"
    logic: Optional[Logic] = None
    incremental: bool = True
    memoize: bool = True
    options: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        assert isinstance(self.backend, str), f"backend must be a string, instead got {self.backend!r}"
        self.backend = self.backend.lower()
        if isinstance(self.logic, str):
            self.logic = Logic(self.logic)
        assert self.logic is None or isinstance(self.logic, Logic), self.logic
        # cvc5 spells booleans in lower case
        self.options = {
            str(k): (str(v).lower() if isinstance(v, bool) else str(v))
            for k, v in self.options.items()
        }
