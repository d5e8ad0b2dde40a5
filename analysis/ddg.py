#!/usr/bin/env python3
"""
数据依赖图(DDG)构建器

变量级数据依赖：对每个赋值类节点 t := e，添加 t -> vars(e) 以及对称边 v -> t
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from parser import JavaProgram, is_variable_reference, binding_kind
from .graph import DependencyGraph, EdgeType
from .utils import text, assignment_base

logger = logging.getLogger(__name__)


class DDG:
    """数据依赖图构建器"""

    def __init__(self, program: JavaProgram):
        self.program = program

    def construct_ddg(self, graph: Optional[DependencyGraph] = None) -> DependencyGraph:
        """
        一次遍历所有赋值类节点（带初始化的声明、赋值表达式、for-each变量）构建数据依赖
        Args:
            graph: 已有的依赖图，为None时新建
        Returns:
            依赖图
        """
        graph = graph if graph is not None else DependencyGraph()
        for binding in self.program.bindings():
            graph.add_variable(binding.name)

        assignments = self.assignments()
        logger.debug(f"DDG: {len(assignments)} assignment-like nodes")
        for target, reads in assignments:
            graph.add_variable(target)
            for var in reads:
                graph.add_symmetric(target, var, EdgeType.DATA)
        return graph

    def assignments(self) -> List[Tuple[str, Set[str]]]:
        """
        收集赋值类节点
        Returns:
            [(目标变量, 右值读取的变量集合)]
        """
        found = []
        for node in self.program.visit('variable_declarator', 'assignment_expression',
                                       'enhanced_for_statement'):
            if node.type == 'variable_declarator':
                name = node.child_by_field_name('name')
                value = node.child_by_field_name('value')
                if name is None or value is None:
                    continue
                found.append((text(name), self._vars(value)))
            elif node.type == 'assignment_expression':
                left = node.child_by_field_name('left')
                right = node.child_by_field_name('right')
                target = assignment_base(left) if left is not None else None
                if target is None or right is None:
                    continue
                reads = self._vars(right)
                # a[i] = e 中的下标同样影响a
                reads |= {var for var in self._vars(left) if var != target}
                operator = node.child_by_field_name('operator')
                if operator is not None and text(operator) != '=':
                    reads.add(target)
                found.append((target, reads))
            else:
                name = node.child_by_field_name('name')
                value = node.child_by_field_name('value')
                if name is None or value is None:
                    continue
                found.append((text(name), self._vars(value)))
        return found

    def _vars(self, expression) -> Set[str]:
        """表达式中读取的变量"""
        return {text(node) for node in self.program.visit('identifier', root=expression)
                if is_variable_reference(node) and binding_kind(node) is None}


def build_data_deps(program: JavaProgram) -> Dict[str, Set[str]]:
    """构建数据依赖映射"""
    return DDG(program).construct_ddg().to_map(EdgeType.DATA)
