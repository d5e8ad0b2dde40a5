#!/usr/bin/env python3
"""
切片点选择

策略按顺序尝试：
1. 出现次数不少于2（声明+至少一次使用）的变量，不可达代码中的出现不计
2. 按(出现次数降序, 最后一次出现的行号降序)排序取第一个
3. 退而求其次：只出现一次的变量，排除生成器内部临时变量、入口参数和for循环计数器
4. 最后：程序中第一个声明的变量
"""

import re
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from analysis import BaseAnalyzer, DeadCodeClassifier
from parser import JavaProgram, VariableBinding, line_of, text
from .errors import NoSlicePoint
from .models import SlicePoint

logger = logging.getLogger(__name__)


RESERVED_PATTERN = r'.*temp.*|.*unused.*'


class SlicePointSelector(BaseAnalyzer):
    """切片点选择器，结果只取决于程序和不可达代码分类"""

    def __init__(self, reserved_pattern: str = RESERVED_PATTERN):
        super().__init__()
        self.reserved = re.compile(reserved_pattern)

    def select(self, program: Union[str, JavaProgram]) -> Optional[SlicePoint]:
        """
        选择切片点

        Args:
            program: Java程序

        Returns:
            SlicePoint，程序中没有任何变量时返回None
        """
        program = self.load(program)
        classifier = DeadCodeClassifier(program)
        bindings = [b for b in program.bindings() if not classifier.is_dead(b.node)]
        occurrences = self.occurrence_lines(program, classifier)

        order: Dict[str, int] = {}
        for index, binding in enumerate(bindings):
            order.setdefault(binding.name, index)

        candidates = [name for name in order if len(occurrences.get(name, [])) >= 2]
        if candidates:
            candidates.sort(key=lambda name: (-len(occurrences[name]), -max(occurrences[name]), order[name]))
            best = candidates[0]
            point = SlicePoint(best, max(occurrences[best]))
            logger.debug(f"slice point {point} ({len(occurrences[best])} occurrences)")
            return point

        singles = [b for b in bindings
                   if len(occurrences.get(b.name, [])) == 1 and self._eligible_single(b)]
        if singles:
            singles.sort(key=lambda b: (-b.line, order[b.name]))
            point = SlicePoint(singles[0].name, singles[0].line)
            logger.debug(f"slice point {point} from single-occurrence fallback")
            return point

        if bindings:
            point = SlicePoint(bindings[0].name, bindings[0].line)
            logger.debug(f"slice point {point} from first declaration")
            return point
        return None

    def select_or_raise(self, program: Union[str, JavaProgram]) -> SlicePoint:
        point = self.select(program)
        if point is None:
            raise NoSlicePoint("program declares no variable usable as slicing criterion")
        return point

    @staticmethod
    def occurrence_lines(program: JavaProgram, classifier: DeadCodeClassifier = None) -> Dict[str, List[int]]:
        """变量名 -> 可达出现位置的行号列表（声明和使用）"""
        classifier = classifier or DeadCodeClassifier(program)
        lines: Dict[str, List[int]] = {}
        for node in program.occurrences():
            if classifier.is_dead(node):
                continue
            lines.setdefault(text(node), []).append(line_of(node))
        return lines

    def _eligible_single(self, binding: VariableBinding) -> bool:
        if self.reserved.fullmatch(binding.name):
            return False
        if binding.kind == 'parameter' and self._is_entry_parameter(binding):
            return False
        return not self._is_for_counter(binding)

    @staticmethod
    def _is_entry_parameter(binding: VariableBinding) -> bool:
        if binding.name == 'args':
            return True
        method = binding.node.parent
        while method is not None and method.type not in ('method_declaration', 'lambda_expression'):
            method = method.parent
        if method is None or method.type != 'method_declaration':
            return False
        name = method.child_by_field_name('name')
        return name is not None and text(name) == 'main'

    @staticmethod
    def _is_for_counter(binding: VariableBinding) -> bool:
        declarator = binding.node.parent
        if declarator is None or declarator.type != 'variable_declarator':
            return False
        declaration = declarator.parent
        return declaration is not None and declaration.parent is not None \
            and declaration.parent.type == 'for_statement'


def find_declaration_line(program: Union[str, JavaProgram], variable: str) -> Optional[int]:
    """
    变量在可达代码中第一次声明的行号

    Args:
        program: Java程序或源代码
        variable: 变量名

    Returns:
        行号（从1开始），找不到时返回None
    """
    if not isinstance(program, JavaProgram):
        program = JavaProgram.parse(program)
    classifier = DeadCodeClassifier(program)
    for binding in program.bindings():
        if binding.name == variable and not classifier.is_dead(binding.node):
            return binding.line
    return None


def declaration_line_offset(original_path: Union[str, Path], mutated_path: Union[str, Path],
                            variable: str, mutated_variable: Optional[str] = None) -> int:
    """
    通过重新读取两个文件计算切片行号偏移：declLine(变异后) - declLine(原程序)

    Args:
        original_path: 原程序文件
        mutated_path: 变异后程序文件
        variable: 原程序中的变量名
        mutated_variable: 变异后程序中的变量名（重命名后不同），默认与variable相同

    Raises:
        NoSlicePoint: 任一文件中找不到变量声明
    """
    original_line = find_declaration_line(Path(original_path).read_text(encoding='utf-8'), variable)
    mutated_line = find_declaration_line(Path(mutated_path).read_text(encoding='utf-8'),
                                         mutated_variable or variable)
    if original_line is None or mutated_line is None:
        raise NoSlicePoint(f"declaration of {variable} not found in {original_path} or {mutated_path}")
    return mutated_line - original_line
