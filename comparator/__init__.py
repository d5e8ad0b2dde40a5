"""
切片比较模块

规范化切片文本并在变量重命名意义下比较两个切片
"""

from .canonical import CanonicalForm, canonical_form, canonicalize, strip_preamble
from .equivalence import EquivalenceChecker, EquivalenceReport, check_equivalence
from .errors import ComparatorError, CanonicalizationMismatch

__all__ = [
    'CanonicalForm',
    'canonical_form',
    'canonicalize',
    'strip_preamble',
    'EquivalenceChecker',
    'EquivalenceReport',
    'check_equivalence',
    'ComparatorError',
    'CanonicalizationMismatch',
]
