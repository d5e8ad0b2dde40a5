#!/usr/bin/env python3
"""
控制依赖图(CDG)构建器

变量级控制依赖：对每个 if/for/while/do/switch，守卫表达式中的变量G与
受控语句体（含嵌套块）中被赋值的变量A两两相连 g <-> a
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from parser import JavaProgram, is_variable_reference, binding_kind
from .graph import DependencyGraph, EdgeType
from .node import Node
from .utils import text

logger = logging.getLogger(__name__)


class CDG:
    """控制依赖图构建器"""

    def __init__(self, program: JavaProgram):
        self.program = program

    def construct_cdg(self, graph: Optional[DependencyGraph] = None) -> DependencyGraph:
        """
        构建控制依赖
        Args:
            graph: 已有的依赖图，为None时新建
        Returns:
            依赖图
        """
        graph = graph if graph is not None else DependencyGraph()
        for guard_vars, assigned in self.guarded_regions():
            for g in guard_vars:
                for a in assigned:
                    graph.add_symmetric(g, a, EdgeType.CONTROL)
        return graph

    def guarded_regions(self) -> List[Tuple[Set[str], Set[str]]]:
        """
        收集所有控制结构
        Returns:
            [(守卫变量集合, 受控区域内被赋值的变量集合)]
        """
        regions = []
        for node in self.program.visit('if_statement', 'while_statement', 'do_statement',
                                       'for_statement', 'enhanced_for_statement',
                                       'switch_expression'):
            guards, bodies = self._split(node)
            guard_vars: Set[str] = set()
            for guard in guards:
                guard_vars |= self._vars(guard)
            if node.type == 'enhanced_for_statement':
                name = node.child_by_field_name('name')
                if name is not None:
                    guard_vars.add(text(name))
            assigned: Set[str] = set()
            for body in bodies:
                assigned |= Node(body).defs
            if guard_vars and assigned:
                regions.append((guard_vars, assigned))
        logger.debug(f"CDG: {len(regions)} guarded regions")
        return regions

    def _split(self, node) -> Tuple[list, list]:
        """把控制结构拆分为守卫部分和受控部分"""
        if node.type == 'if_statement':
            guards = [node.child_by_field_name('condition')]
            bodies = [node.child_by_field_name('consequence'), node.child_by_field_name('alternative')]
        elif node.type == 'for_statement':
            guards = [node.child_by_field_name('condition')]
            bodies = [node.child_by_field_name('body')] + node.children_by_field_name('update')
        elif node.type == 'enhanced_for_statement':
            guards = [node.child_by_field_name('value')]
            bodies = [node.child_by_field_name('body')]
        elif node.type == 'switch_expression':
            guards = [node.child_by_field_name('condition')]
            bodies = [node.child_by_field_name('body')]
        else:
            guards = [node.child_by_field_name('condition')]
            bodies = [node.child_by_field_name('body')]
        return ([g for g in guards if g is not None], [b for b in bodies if b is not None])

    def _vars(self, expression) -> Set[str]:
        return {text(node) for node in self.program.visit('identifier', root=expression)
                if is_variable_reference(node) and binding_kind(node) is None}


def build_control_deps(program: JavaProgram) -> Dict[str, Set[str]]:
    """构建控制依赖映射"""
    return CDG(program).construct_cdg().to_map(EdgeType.CONTROL)
