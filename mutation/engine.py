#!/usr/bin/env python3
"""
变异引擎

按变异类型分派到对应变异器。没有可变异位置时返回未改动的程序和applied=False，
调用方据此把该单元排除在蜕变关系的通过/失败统计之外。
"""

import random
import logging
from typing import Dict, Iterable, Optional, Union

from analysis import DependencyAnalyzer
from parser import JavaProgram, ParseFailure
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .control_flow import ControlFlowMutator
from .data_flow import DataFlowMutator
from .dead_code import DeadCodeMutator
from .errors import NoSafeMutationSite
from .rename import VariableRenameMutator
from .reorder import StatementReorderMutator

logger = logging.getLogger(__name__)


class MutationEngine:
    """变异引擎（不持有跨调用的可变状态，可被多个工作线程共享）"""

    def __init__(self, analyzer: Optional[DependencyAnalyzer] = None,
                 dead_code_blocks: Optional[int] = None):
        """
        Args:
            analyzer: 依赖分析器，各变异器共享
            dead_code_blocks: 死代码插入的固定块数，None表示随机1-3
        """
        self.analyzer = analyzer if analyzer is not None else DependencyAnalyzer()
        self.mutators: Dict[MutationKind, Mutator] = {
            MutationKind.CONTROL_FLOW: ControlFlowMutator(self.analyzer),
            MutationKind.DATA_FLOW: DataFlowMutator(self.analyzer),
            MutationKind.DEAD_CODE: DeadCodeMutator(self.analyzer, blocks=dead_code_blocks),
            MutationKind.REORDER: StatementReorderMutator(self.analyzer),
            MutationKind.RENAME: VariableRenameMutator(self.analyzer),
        }

    def mutator(self, kind: Union[str, MutationKind]) -> Mutator:
        return self.mutators[MutationKind.parse(kind)]

    def mutate(self, program: Union[str, JavaProgram], kind: Union[str, MutationKind],
               protected: Iterable[str], slice_point=None,
               rng: Optional[random.Random] = None) -> MutationResult:
        """
        对程序应用一种变异

        Args:
            program: 原程序
            kind: 变异类型
            protected: 受保护变量集合
            slice_point: 切片点
            rng: 随机数生成器

        Returns:
            MutationResult；没有安全位置时applied为False，程序文本不变

        Raises:
            ParseFailure: 原程序无法解析，或变异器产生了无法解析的程序
        """
        kind = MutationKind.parse(kind)
        program = self.analyzer.load(program)
        try:
            result = self.mutators[kind].mutate(program, set(protected), slice_point=slice_point, rng=rng)
        except NoSafeMutationSite as e:
            logger.info(f"{kind.value}: {e}")
            context = MutationContext(kind, notes=[str(e)])
            return MutationResult(program_text=program.print(), line_offset=0, applied=False, context=context)

        try:
            JavaProgram.parse(result.program_text)
        except ParseFailure as e:
            logger.error(f"{kind.value} produced an unparsable mutant: {e}")
            raise
        return result
