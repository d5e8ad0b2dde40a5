#!/usr/bin/env python3
"""
依赖分析器

计算受保护变量集合：种子变量在数据依赖和控制依赖（均视为无向）下的传递闭包。
变异器只能修改不触及受保护变量的语句。
"""

import re
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Set, Union

from parser import JavaProgram
from .base import BaseAnalyzer
from .cdg import CDG
from .ddg import DDG
from .graph import DependencyGraph, EdgeType
from .node import Node
from .utils import text

logger = logging.getLogger(__name__)


class SliceRelevancePolicy:
    """切片相关变量的命名模式（生成器为切片相关变量使用的命名约定）"""

    DEFAULT_PATTERN = r'val\d+|temp\d+|result\d+|temp|choice'

    def __init__(self, pattern: Optional[str] = DEFAULT_PATTERN,
                 excluded_prefixes: Iterable[str] = ('unrelated',)):
        self.pattern = re.compile(pattern) if pattern else None
        self.excluded_prefixes = tuple(excluded_prefixes)

    @classmethod
    def disabled(cls) -> 'SliceRelevancePolicy':
        """不按命名模式扩充种子"""
        return cls(pattern=None)

    def matches(self, name: str) -> bool:
        if self.pattern is None:
            return False
        if self.excluded_prefixes and name.startswith(self.excluded_prefixes):
            return False
        return self.pattern.fullmatch(name) is not None


@dataclass(frozen=True)
class DependencyResult:
    """一次依赖分析的结果，只针对一个程序和一个切片变量使用"""
    protected: FrozenSet[str]
    data_deps: Dict[str, Set[str]]
    control_deps: Dict[str, Set[str]]
    seed: FrozenSet[str]
    graph: DependencyGraph = field(repr=False, compare=False, default=None)


class DependencyAnalyzer(BaseAnalyzer):
    """依赖分析器（无状态，可被多个单元并发调用）"""

    def __init__(self, policy: Optional[SliceRelevancePolicy] = None):
        """
        Args:
            policy: 切片相关变量的命名模式，默认使用生成器约定
        """
        super().__init__()
        self.policy = policy if policy is not None else SliceRelevancePolicy()

    def protected_seed(self, program: Union[str, JavaProgram], seed: Iterable[str] = ()) -> Set[str]:
        """
        计算种子集合：调用者给定的变量 ∪ 命名模式匹配的已声明变量 ∪ 守卫种子变量赋值的循环头部声明的变量

        Args:
            program: Java程序
            seed: 调用者指定的种子变量（通常是切片变量）

        Returns:
            种子变量集合
        """
        program = self.load(program)
        result = {name for name in seed if name}
        result |= {binding.name for binding in program.bindings() if self.policy.matches(binding.name)}
        result |= self._declared_in_guard_of(program, result)
        return result

    def _declared_in_guard_of(self, program: JavaProgram, seed: Set[str]) -> Set[str]:
        found = set()
        for loop in program.visit('for_statement', 'enhanced_for_statement'):
            body = loop.child_by_field_name('body')
            if body is None or not (Node(body).defs & seed):
                continue
            if loop.type == 'for_statement':
                for init in loop.children_by_field_name('init'):
                    if init.type == 'local_variable_declaration':
                        found |= Node(init).declared
            else:
                name = loop.child_by_field_name('name')
                if name is not None:
                    found.add(text(name))
        return found

    def build_data_deps(self, program: Union[str, JavaProgram]) -> Dict[str, Set[str]]:
        """数据依赖映射：t <-> vars(e)"""
        return DDG(self.load(program)).construct_ddg().to_map(EdgeType.DATA)

    def build_control_deps(self, program: Union[str, JavaProgram]) -> Dict[str, Set[str]]:
        """控制依赖映射：守卫变量 <-> 受控区域内被赋值的变量"""
        return CDG(self.load(program)).construct_cdg().to_map(EdgeType.CONTROL)

    @staticmethod
    def closure(seed: Iterable[str], data_deps: Dict[str, Set[str]],
                control_deps: Dict[str, Set[str]]) -> Set[str]:
        """
        广度优先计算传递闭包（依赖图可能有环，用visited集合防止重复访问）

        Args:
            seed: 种子变量
            data_deps: 数据依赖映射
            control_deps: 控制依赖映射

        Returns:
            闭包集合，对已闭合的集合再次求闭包结果不变
        """
        visited: Set[str] = set()
        queue = deque(sorted(seed))
        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            for neighbor in data_deps.get(current, set()) | control_deps.get(current, set()):
                if neighbor not in visited:
                    queue.append(neighbor)
        return visited

    def is_protected(self, stmt, protected: Iterable[str]) -> bool:
        """语句（含嵌套守卫和语句体）声明、赋值或读取的任一变量在受保护集合中"""
        return bool(Node(stmt).variables & set(protected))

    def analyze(self, program: Union[str, JavaProgram], seed_variable: Optional[str],
                extra_seed: Iterable[str] = ()) -> DependencyResult:
        """
        完整依赖分析

        Args:
            program: Java程序
            seed_variable: 切片变量
            extra_seed: 调用者额外指定的种子变量

        Returns:
            DependencyResult(受保护集合, 数据依赖, 控制依赖, 种子)
        """
        program = self.load(program)
        seed = self.protected_seed(program, [seed_variable, *extra_seed])

        graph = DependencyGraph()
        DDG(program).construct_ddg(graph)
        CDG(program).construct_cdg(graph)
        data_deps = graph.to_map(EdgeType.DATA)
        control_deps = graph.to_map(EdgeType.CONTROL)

        protected = self.closure(seed, data_deps, control_deps)
        logger.debug(f"Protected set for seed {sorted(seed)}: {len(protected)} of {len(graph)} variables")
        return DependencyResult(
            protected=frozenset(protected),
            data_deps=data_deps,
            control_deps=control_deps,
            seed=frozenset(seed),
            graph=graph,
        )
