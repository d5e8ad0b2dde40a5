#!/usr/bin/env python3
"""
图数据结构模块

变量级依赖图：节点是变量名，边记录数据依赖和控制依赖
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple
from enum import Enum

import networkx as nx


class EdgeType(Enum):
    """边类型枚举"""
    DATA = "DATA"  # 数据依赖：赋值目标 <-> 右值读取的变量
    CONTROL = "CONTROL"  # 控制依赖：守卫变量 <-> 受控语句体中被赋值的变量


class DependencyGraph:
    """变量依赖图"""

    def __init__(self):
        self.graph = nx.DiGraph()

    def add_variable(self, name: str):
        """添加变量节点"""
        self.graph.add_node(name)

    def add_edge(self, source: str, target: str, edge_type: EdgeType):
        """
        添加有向边，同一对变量上的多种依赖合并到kinds属性
        Args:
            source: 源变量
            target: 目标变量
            edge_type: 边的类型
        """
        self.graph.add_node(source)
        self.graph.add_node(target)
        if source == target:
            return
        if self.graph.has_edge(source, target):
            self.graph[source][target]['kinds'].add(edge_type)
        else:
            self.graph.add_edge(source, target, kinds={edge_type})

    def add_symmetric(self, a: str, b: str, edge_type: EdgeType):
        """添加双向边（闭包计算时依赖被视为无向）"""
        self.add_edge(a, b, edge_type)
        self.add_edge(b, a, edge_type)

    @property
    def variables(self) -> Set[str]:
        return set(self.graph.nodes)

    def edges(self, edge_type: Optional[EdgeType] = None) -> List[Tuple[str, str]]:
        """返回（指定类型的）全部边"""
        return [(u, v) for u, v, kinds in self.graph.edges(data='kinds')
                if edge_type is None or edge_type in kinds]

    def neighbors(self, name: str, edge_type: Optional[EdgeType] = None) -> Set[str]:
        if name not in self.graph:
            return set()
        return {v for v in self.graph.successors(name)
                if edge_type is None or edge_type in self.graph[name][v]['kinds']}

    def to_map(self, edge_type: EdgeType) -> Dict[str, Set[str]]:
        """
        转换为邻接映射
        Returns:
            变量名 -> 相邻变量集合，只包含至少有一条该类型边的变量
        """
        mapping: Dict[str, Set[str]] = {}
        for u, v in self.edges(edge_type):
            mapping.setdefault(u, set()).add(v)
        return mapping

    @classmethod
    def from_maps(cls, data_deps: Dict[str, Iterable[str]],
                  control_deps: Dict[str, Iterable[str]]) -> 'DependencyGraph':
        """由数据依赖和控制依赖映射构建依赖图"""
        graph = cls()
        for edge_type, mapping in ((EdgeType.DATA, data_deps), (EdgeType.CONTROL, control_deps)):
            for source, targets in mapping.items():
                graph.add_variable(source)
                for target in targets:
                    graph.add_edge(source, target, edge_type)
        return graph

    def __len__(self):
        return self.graph.number_of_nodes()
