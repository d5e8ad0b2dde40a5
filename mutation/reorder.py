#!/usr/bin/env python3
"""
语句重排变异器

把语句块划分为由可重排语句组成的最大连续段，段之间由固定的锚点语句（受保护语句等）隔开，
每段内部随机重排，锚点和段边界不移动。段内成员之间若存在定义-使用关系则保持其先后顺序。
"""

import logging
from typing import Dict, List, Set

from analysis import Node
from analysis.utils import is_print_call
from parser import JavaProgram, BLOCK_TYPES, STATEMENT_TYPES, node_key
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .errors import NoSafeMutationSite

logger = logging.getLogger(__name__)


_MOVABLE_TYPES = {
    'local_variable_declaration', 'expression_statement', 'if_statement',
    'for_statement', 'enhanced_for_statement', 'while_statement', 'do_statement',
}
# 包含这些节点的语句不移动
_JUMP_TYPES = ('return_statement', 'break_statement', 'continue_statement',
               'throw_statement', 'yield_statement', 'labeled_statement',
               'switch_expression', 'try_statement', 'try_with_resources_statement',
               'object_creation_expression', 'lambda_expression', 'method_reference',
               'class_body')


class StatementReorderMutator(Mutator):
    """语句重排变异器"""

    kind = MutationKind.REORDER
    MAX_ATTEMPTS = 10

    def mutate(self, program, protected, slice_point=None, rng=None) -> MutationResult:
        program = self.load(program)
        protected = set(protected)
        rng = self.rng_or_default(rng)

        runs = self.runs(program, protected)
        if not runs:
            raise NoSafeMutationSite(self.kind.value, "no run of two or more reorderable statements")

        for attempt in range(self.MAX_ATTEMPTS):
            context = MutationContext(self.kind)
            moves: Dict[tuple, object] = {}
            for run in runs:
                order = self._shuffle(run, rng)
                if order == list(range(len(run))):
                    continue
                for slot, source in enumerate(order):
                    if slot != source:
                        moves[node_key(run[slot])] = run[source]
                        context.record(run[source], 'reorder')
            if moves:
                mutated = program.rewrite(
                    lambda node, render: render(moves[node_key(node)], True) if node_key(node) in moves else None)
                logger.debug(f"reorder moved {len(moves)} statements (attempt {attempt + 1})")
                return MutationResult(program_text=mutated, line_offset=0, applied=True, context=context)

        raise NoSafeMutationSite(self.kind.value, "every run has a single admissible order")

    def runs(self, program: JavaProgram, protected: Set[str]) -> List[List]:
        """
        划分可重排段
        Returns:
            长度不小于2的可重排语句段列表
        """
        runs = []
        for container in program.visit(*BLOCK_TYPES):
            current: List = []
            for stmt in container.named_children:
                if stmt.type not in STATEMENT_TYPES:
                    continue
                if self.is_reorderable(program, stmt, protected):
                    current.append(stmt)
                    continue
                if len(current) > 1:
                    runs.append(current)
                current = []
            if len(current) > 1:
                runs.append(current)
        return runs

    def is_reorderable(self, program: JavaProgram, stmt, protected: Set[str]) -> bool:
        """局部变量声明/赋值（目标不受保护）、输出语句、不受保护的循环和if"""
        if stmt.type not in _MOVABLE_TYPES or self.is_protected(stmt, protected):
            return False
        if any(True for _ in program.visit(*_JUMP_TYPES, root=stmt)):
            return False
        # 除输出语句外的方法调用可能有副作用
        for call in program.visit('method_invocation', root=stmt):
            if not is_print_call(call):
                return False
        if stmt.type == 'expression_statement':
            expression = stmt.named_children[0] if stmt.named_children else None
            return expression is not None and (
                expression.type in ('assignment_expression', 'update_expression')
                or is_print_call(expression))
        return True

    def _shuffle(self, run: List, rng) -> List[int]:
        """
        随机拓扑排序：段内无依赖时等价于均匀随机洗牌
        Returns:
            新顺序，order[slot] = 原位置
        """
        nodes = [Node(stmt) for stmt in run]
        predecessors = {j: {i for i in range(j) if self._conflict(nodes[i], nodes[j])}
                        for j in range(len(run))}
        remaining = set(range(len(run)))
        order = []
        while remaining:
            ready = sorted(j for j in remaining if not (predecessors[j] & remaining))
            pick = rng.choice(ready)
            order.append(pick)
            remaining.remove(pick)
        return order

    @staticmethod
    def _conflict(first: Node, second: Node) -> bool:
        """写后读、读后写、写后写以及声明先于使用"""
        first_writes = first.defs | first.declared
        second_writes = second.defs | second.declared
        return bool(first_writes & second.variables or first.uses & second_writes)
