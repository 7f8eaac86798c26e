"""
Standard acronyms of logic declarations in SMT-LIB 2.0.

See http://smtlib.cs.uiowa.edu/logics.html. A `Logic` is only ever passed to a back end
as a hint; it is never checked against the terms that are actually asserted.
"""

from enum import Enum


class Logic(Enum):
    # Quantified linear integer arithmetic with uninterpreted functions and arrays
    AUFLIA      = "AUFLIA"
    # Quantified linear int/real arithmetic with arrays of reals indexed by integers
    AUFLIRA     = "AUFLIRA"
    # Quantified nonlinear int/real arithmetic with arrays and uninterpreted functions
    AUFNIRA     = "AUFNIRA"
    LRA         = "LRA"
    QF_ABV      = "QF_ABV"
    QF_AUFBV    = "QF_AUFBV"
    QF_UFBV     = "QF_UFBV"
    QF_AUFLIA   = "QF_AUFLIA"
    QF_AX       = "QF_AX"
    QF_BV       = "QF_BV"
    # Integer difference logic: atoms restricted to x - y op c
    QF_IDL      = "QF_IDL"
    QF_RDL      = "QF_RDL"
    QF_LIA      = "QF_LIA"
    QF_LRA      = "QF_LRA"
    QF_NIA      = "QF_NIA"
    QF_NRA      = "QF_NRA"
    # Quantifier-free formulas modulo the empty theory
    QF_UF       = "QF_UF"
    QF_UFIDL    = "QF_UFIDL"
    QF_UFLIA    = "QF_UFLIA"
    QF_UFLRA    = "QF_UFLRA"
    QF_UFNRA    = "QF_UFNRA"
    UFLRA       = "UFLRA"
    UFNIA       = "UFNIA"

    @property
    def acronym(self) -> str:
        return self.value

    def __str__(self):
        return self.value
