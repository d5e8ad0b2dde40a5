#!/usr/bin/env python3
"""
不可达代码分类器

仅依据AST节点类型和字面量判断：
- if (false) 的then分支、if (true) 的else分支
- while (false) 的循环体
- for 循环条件为字面量false，或计数头部静态可知迭代0次（如 for (int i = 0; i < 0; i++)）
  时的循环体与更新表达式
"""

import operator
from typing import List, Optional, Tuple

from parser import JavaProgram
from parser.utils import unwrap_parens
from .utils import text, int_literal_value, literal_truth


_COMPARATORS = {
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    '==': operator.eq,
    '!=': operator.ne,
}

# 操作数交换后的等价比较符
_MIRRORED = {'<': '>', '<=': '>=', '>': '<', '>=': '<=', '==': '==', '!=': '!='}


def counter_initial_value(for_node) -> Optional[Tuple[str, int]]:
    """for循环计数器的变量名与整数初值，头部不是单变量整数初始化时返回None"""
    inits = for_node.children_by_field_name('init')
    if len(inits) != 1:
        return None
    init = inits[0]
    if init.type == 'local_variable_declaration':
        declarators = init.children_by_field_name('declarator')
        if len(declarators) != 1:
            return None
        name = declarators[0].child_by_field_name('name')
        value = declarators[0].child_by_field_name('value')
    elif init.type == 'assignment_expression':
        name = init.child_by_field_name('left')
        value = init.child_by_field_name('right')
        operator_node = init.child_by_field_name('operator')
        if operator_node is None or text(operator_node) != '=':
            return None
    else:
        return None
    if name is None or value is None or name.type != 'identifier':
        return None
    initial = int_literal_value(value)
    if initial is None:
        return None
    return text(name), initial


def is_zero_iteration(for_node) -> bool:
    """for循环是否静态可知一次也不执行"""
    condition = for_node.child_by_field_name('condition')
    if condition is None:
        return False
    if literal_truth(condition) is False:
        return True
    counter = counter_initial_value(for_node)
    condition = unwrap_parens(condition)
    if counter is None or condition.type != 'binary_expression':
        return False
    name, initial = counter
    left = condition.child_by_field_name('left')
    right = condition.child_by_field_name('right')
    op_node = condition.child_by_field_name('operator')
    if left is None or right is None or op_node is None:
        return False
    op = text(op_node)
    if op not in _COMPARATORS:
        return False
    if left.type == 'identifier' and text(left) == name:
        bound = int_literal_value(right)
    elif right.type == 'identifier' and text(right) == name:
        bound = int_literal_value(left)
        op = _MIRRORED[op]
    else:
        return False
    if bound is None:
        return False
    return not _COMPARATORS[op](initial, bound)


class DeadCodeClassifier:
    """不可达代码分类器"""

    def __init__(self, program: JavaProgram):
        """
        Args:
            program: 待分类的Java程序
        """
        self.program = program
        self.regions = self._collect_regions()

    def _collect_regions(self) -> List[Tuple[int, int]]:
        """收集不可达区域的字节范围"""
        regions = []
        for node in self.program.visit('if_statement', 'while_statement', 'for_statement'):
            if node.type == 'if_statement':
                truth = literal_truth(node.child_by_field_name('condition'))
                if truth is False:
                    dead = [node.child_by_field_name('consequence')]
                elif truth is True:
                    dead = [node.child_by_field_name('alternative')]
                else:
                    dead = []
            elif node.type == 'while_statement':
                dead = [node.child_by_field_name('body')] \
                    if literal_truth(node.child_by_field_name('condition')) is False else []
            else:
                dead = [node.child_by_field_name('body')] + node.children_by_field_name('update') \
                    if is_zero_iteration(node) else []
            regions.extend((d.start_byte, d.end_byte) for d in dead if d is not None)
        return regions

    def is_dead(self, node) -> bool:
        """节点是否位于不可达区域内"""
        return any(start <= node.start_byte and node.end_byte <= end
                   for start, end in self.regions)

    def is_dead_guard(self, statement) -> bool:
        """语句本身是否为整体不执行的守卫结构（无else的if (false)、不执行的循环）"""
        if statement.type == 'if_statement':
            return literal_truth(statement.child_by_field_name('condition')) is False \
                and statement.child_by_field_name('alternative') is None
        if statement.type == 'while_statement':
            return literal_truth(statement.child_by_field_name('condition')) is False
        if statement.type == 'for_statement':
            return is_zero_iteration(statement)
        return False

    def dead_lines(self) -> List[Tuple[int, int]]:
        """不可达区域的行范围（从1开始，闭区间）"""
        lines = []
        for start, end in self.regions:
            start_line = self.program.between(0, start).count('\n') + 1
            end_line = self.program.between(0, end).count('\n') + 1
            lines.append((start_line, end_line))
        return lines
