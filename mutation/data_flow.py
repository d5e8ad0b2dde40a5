#!/usr/bin/env python3
"""
数据流变异器

对目标变量不受保护的赋值/初始化改写右值：交换 + 与 -、* 与 /，或把整数字面量扰动一个小的随机量。
目标变量及依赖它的变量都在受保护闭包之外，任何受保护变量的切片都观察不到这种改变。
"""

import logging
from typing import Dict, List, Optional, Tuple

from analysis.utils import NUMERIC_TYPES, int_literal_value
from parser import JavaProgram, node_key, text, same_node
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .errors import NoSafeMutationSite

logger = logging.getLogger(__name__)


_SWAPS = {'+': '-', '-': '+', '/': '*'}
_COMPOUND_SWAPS = {'+=': '-=', '-=': '+='}
# 字面量扰动只在这些运算符的操作数上进行（不碰除数、下标、数组长度、方法实参）
_PERTURBABLE_CONTEXT = {'+', '-', '*'}
_DELTAS = [d for d in range(-5, 6) if d != 0]

_INT_MAX = 2 ** 31 - 1
_LONG_MAX = 2 ** 63 - 1


class DataFlowMutator(Mutator):
    """数据流变异器"""

    kind = MutationKind.DATA_FLOW

    def mutate(self, program, protected, slice_point=None, rng=None) -> MutationResult:
        program = self.load(program)
        protected = set(protected)
        rng = self.rng_or_default(rng)
        context = MutationContext(self.kind)
        types = program.binding_types()
        edits: Dict[tuple, str] = {}

        for node in program.visit('variable_declarator', 'assignment_expression'):
            site = self._site(program, node, types)
            if site is None:
                continue
            target, value, operator = site
            # 同一条声明语句中的其他变量、所在for头部等也不能受保护
            statement = program.enclosing_statement(node) or node
            if target in protected or self.is_protected(statement, protected):
                continue
            options = self._options(program, value, operator, rng)
            if not options:
                continue
            key, replacement, action = rng.choice(options)
            edits[key] = replacement
            context.record(statement, action)
            logger.debug(f"data-flow {action} on {target} at line {node.start_point[0] + 1}")

        if not edits:
            raise NoSafeMutationSite(self.kind.value, "no unprotected numeric assignment")

        mutated = program.rewrite(lambda node, render: edits.get(node_key(node)))
        return MutationResult(program_text=mutated, line_offset=0, applied=True, context=context)

    def _site(self, program: JavaProgram, node, types: Dict[str, str]) -> Optional[Tuple]:
        """
        Returns:
            (目标变量, 右值节点, 复合赋值运算符节点或None)
        """
        if node.type == 'variable_declarator':
            name = node.child_by_field_name('name')
            value = node.child_by_field_name('value')
            if name is None or value is None or value.type == 'array_initializer':
                return None
            declaration = node.parent
            type_node = declaration.child_by_field_name('type') if declaration is not None else None
            if type_node is None or text(type_node) not in NUMERIC_TYPES \
                    or node.child_by_field_name('dimensions') is not None:
                return None
            return text(name), value, None

        left = node.child_by_field_name('left')
        value = node.child_by_field_name('right')
        operator = node.child_by_field_name('operator')
        if left is None or value is None or left.type != 'identifier':
            return None
        target = text(left)
        if types.get(target) not in NUMERIC_TYPES:
            return None
        compound = operator if operator is not None and text(operator) != '=' else None
        if compound is not None and text(compound) not in _COMPOUND_SWAPS:
            return None
        return target, value, compound

    def _options(self, program: JavaProgram, value, compound, rng) -> List[Tuple[tuple, str, str]]:
        """候选改写：[(被替换节点的key, 替换文本, 动作名)]"""
        options = []
        if compound is not None:
            options.append((node_key(compound), _COMPOUND_SWAPS[text(compound)], 'swap-compound'))

        top = value
        while top.type == 'parenthesized_expression' and top.named_children:
            top = top.named_children[0]
        if top.type == 'binary_expression':
            op = top.child_by_field_name('operator')
            operator = text(op)
            if operator in _SWAPS:
                options.append((node_key(op), _SWAPS[operator], 'swap-operator'))
            elif operator == '*' and int_literal_value(top.child_by_field_name('right')) not in (None, 0):
                options.append((node_key(op), '/', 'swap-operator'))

        for literal in self._perturbable_literals(program, value):
            replacement = self._perturb(literal, rng)
            if replacement is not None:
                options.append((node_key(literal), replacement, 'perturb-literal'))
        return options

    def _perturbable_literals(self, program: JavaProgram, value) -> List:
        return [node for node in program.visit('decimal_integer_literal', root=value)
                if self._in_arithmetic_context(node, value)]

    @staticmethod
    def _in_arithmetic_context(literal, value) -> bool:
        """字面量到右值根节点之间只经过括号和 + - * 运算"""
        child = literal
        while not same_node(child, value):
            parent = child.parent
            if parent is None:
                return False
            if parent.type == 'parenthesized_expression':
                child = parent
            elif parent.type == 'binary_expression' and \
                    text(parent.child_by_field_name('operator')) in _PERTURBABLE_CONTEXT:
                child = parent
            else:
                return False
        return True

    def _perturb(self, literal, rng) -> Optional[str]:
        raw = text(literal)
        suffix = raw[-1] if raw[-1] in 'lL' else ''
        digits = raw[:-1] if suffix else raw
        try:
            value = int(digits.replace('_', ''))
        except ValueError:
            return None
        limit = _LONG_MAX if suffix else _INT_MAX
        deltas = [d for d in _DELTAS if 0 <= value + d <= limit]
        if not deltas:
            return None
        delta = rng.choice(deltas)
        return f"{value + delta}{suffix}"
