#!/usr/bin/env python3
"""
变异器基础定义

MutationKind、MutationContext、MutationResult和Mutator基类
"""

import random
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Union

from analysis import DependencyAnalyzer
from parser import JavaProgram, line_of

logger = logging.getLogger(__name__)


class MutationKind(Enum):
    """变异类型，值同时用作输出目录名和文件名中的类型标记"""
    CONTROL_FLOW = "controlflow"
    DATA_FLOW = "dataflow"
    DEAD_CODE = "deadcode"
    REORDER = "reorder"
    RENAME = "rename"

    @classmethod
    def parse(cls, value: Union[str, 'MutationKind']) -> 'MutationKind':
        """接受 'deadcode'、'dead_code'、'DEAD_CODE' 等写法"""
        if isinstance(value, cls):
            return value
        normalized = value.strip().lower().replace('_', '').replace('-', '')
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown mutation kind: {value}")


@dataclass
class TouchedSite:
    """变异触及的原程序语句"""
    start_byte: int
    end_byte: int
    start_line: int
    end_line: int
    action: str


@dataclass
class MutationContext:
    """
    单次变异的上下文记录，随变异结果一起返回并传递给调度器

    Attributes:
        kind: 变异类型
        rename_map: 重命名映射（旧名 -> 新名）
        touched: 被改写的原程序语句
        inserted_lines: 插入新行的位置（原程序行号，插入在该行之前）及行数
        notes: 附加说明
    """
    kind: MutationKind
    rename_map: Dict[str, str] = field(default_factory=dict)
    touched: List[TouchedSite] = field(default_factory=list)
    inserted_lines: List[tuple] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def renamed(self, name: str) -> str:
        """变量在变异后程序中的名字"""
        return self.rename_map.get(name, name)

    def record(self, node, action: str):
        self.touched.append(TouchedSite(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            start_line=line_of(node),
            end_line=node.end_point[0] + 1,
            action=action,
        ))

    def record_insertion(self, before_line: int, count: int):
        self.inserted_lines.append((before_line, count))


@dataclass
class MutationResult:
    """变异结果"""
    program_text: str
    line_offset: int = 0
    applied: bool = False
    context: Optional[MutationContext] = None


class Mutator:
    """
    变异器基类

    子类实现mutate：扫描全部候选位置，只改写不受保护的位置；
    没有可改写位置时抛出NoSafeMutationSite，不返回部分改写的程序。
    """

    kind: MutationKind = None

    def __init__(self, analyzer: Optional[DependencyAnalyzer] = None):
        self.analyzer = analyzer if analyzer is not None else DependencyAnalyzer()

    def load(self, program: Union[str, JavaProgram]) -> JavaProgram:
        return self.analyzer.load(program)

    def is_protected(self, node, protected: Set[str]) -> bool:
        return self.analyzer.is_protected(node, protected)

    def mutate(self, program: Union[str, JavaProgram], protected: Iterable[str],
               slice_point=None, rng: Optional[random.Random] = None) -> MutationResult:
        """
        对程序做一次变异

        Args:
            program: 原程序
            protected: 受保护变量集合
            slice_point: 切片点（变量名、行号），部分变异器需要
            rng: 注入的随机数生成器，保证可复现

        Returns:
            MutationResult
        """
        raise NotImplementedError

    @staticmethod
    def rng_or_default(rng: Optional[random.Random]) -> random.Random:
        return rng if rng is not None else random.Random(0)
