#!/usr/bin/env python3
"""
切片等价性检查

两个切片在规范化后逐字符相同才判定为等价，不做部分得分。
任一切片无法解析、声明变量数不同或外部引用数不同时直接判定为不等价。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from parser import ParseFailure
from .canonical import CanonicalForm, canonical_form
from .errors import CanonicalizationMismatch

logger = logging.getLogger(__name__)


@dataclass
class EquivalenceReport:
    """等价性检查结果及原因"""
    equivalent: bool
    reason: str  # parse_failure / declared_count / free_count / text_mismatch / equivalent
    canonical_a: Optional[str] = None
    canonical_b: Optional[str] = None
    detail: str = ''

    def __bool__(self):
        return self.equivalent


class EquivalenceChecker:
    """切片等价性检查器（无状态）"""

    def check_equivalence(self, slice_a: str, slice_b: str) -> bool:
        """
        判断两个切片在变量重命名意义下是否等价

        Args:
            slice_a: 原程序的切片文本
            slice_b: 变异程序的切片文本

        Returns:
            是否等价
        """
        return self.explain(slice_a, slice_b).equivalent

    def explain(self, slice_a: str, slice_b: str) -> EquivalenceReport:
        """与check_equivalence相同，但返回判定原因"""
        try:
            form_a = canonical_form(slice_a)
            form_b = canonical_form(slice_b)
        except ParseFailure as e:
            logger.info(f"Slice does not parse: {e}")
            return EquivalenceReport(False, 'parse_failure', detail=str(e))

        try:
            self._check_counts(form_a, form_b)
        except CanonicalizationMismatch as e:
            logger.info(f"Slices are not equivalent: {e}")
            return EquivalenceReport(False, e.reason, form_a.text, form_b.text, detail=str(e))

        if form_a.text != form_b.text:
            detail = self._first_difference(form_a.text, form_b.text)
            logger.info(f"Slices are not equivalent: {detail}")
            return EquivalenceReport(False, 'text_mismatch', form_a.text, form_b.text, detail=detail)

        logger.debug("Slices are equivalent")
        return EquivalenceReport(True, 'equivalent', form_a.text, form_b.text)

    @staticmethod
    def _check_counts(form_a: CanonicalForm, form_b: CanonicalForm):
        """
        Raises:
            CanonicalizationMismatch: 声明变量数或外部引用数不同
        """
        if form_a.declared_count != form_b.declared_count:
            raise CanonicalizationMismatch('declared_count', form_a.declared_count, form_b.declared_count)
        if form_a.free_count != form_b.free_count:
            raise CanonicalizationMismatch('free_count', form_a.free_count, form_b.free_count)

    @staticmethod
    def _first_difference(a: str, b: str) -> str:
        for index, (x, y) in enumerate(zip(a, b)):
            if x != y:
                return f"first difference at position {index}: {a[index:index + 20]!r} vs {b[index:index + 20]!r}"
        return f"length {len(a)} vs {len(b)}"


def check_equivalence(slice_a: str, slice_b: str) -> bool:
    return EquivalenceChecker().check_equivalence(slice_a, slice_b)
