"""
依赖分析模块

提供变量级数据依赖、控制依赖、受保护变量闭包和不可达代码分类功能
"""

from .node import Node
from .graph import DependencyGraph, EdgeType
from .base import BaseAnalyzer
from .ddg import DDG, build_data_deps
from .cdg import CDG, build_control_deps
from .dead_code import DeadCodeClassifier
from .dependency import DependencyAnalyzer, DependencyResult, SliceRelevancePolicy

__all__ = [
    'Node',
    'DependencyGraph',
    'EdgeType',
    'BaseAnalyzer',
    'DDG',
    'CDG',
    'build_data_deps',
    'build_control_deps',
    'DeadCodeClassifier',
    'DependencyAnalyzer',
    'DependencyResult',
    'SliceRelevancePolicy',
]
