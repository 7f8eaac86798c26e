"""
Sort-checked SMT terms that can be handed to interchangeable solver back ends.

Terms are built bottom-up with Python operators and the builders in `builders`, either
through typed handles (`Bool`, `Int`, `Real`, `Bv[...]`, `Array[...]`, `Func[...]`),
which reject ill-sorted terms as they are constructed, or through type-erased
`UnsafeTerm` handles, which check nothing. A `Solver` back end translates them into its
own representation; `cvc5_solver.Cvc5Solver` is the one shipped here.
"""

from .common import *
from .logics import *
from .sorts import *
from .decls import *
from .exprs import *
from .terms import *
from .builders import *
from .config import *
from .solver import *
