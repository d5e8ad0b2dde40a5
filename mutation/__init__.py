"""
变异模块

五种保持语义的变异器，每个变异器在改写前都查询受保护变量集合：
- ControlFlowMutator: if条件取反并交换分支，for/while互转
- DataFlowMutator: 改写不受保护赋值的右值
- DeadCodeMutator: 在切片变量声明前插入不可达块
- StatementReorderMutator: 可重排语句段内部重排
- VariableRenameMutator: 等长双射重命名
"""

from .base import MutationKind, MutationContext, MutationResult, Mutator, TouchedSite
from .errors import MutationError, NoSafeMutationSite, LengthInvariantViolation
from .control_flow import ControlFlowMutator
from .data_flow import DataFlowMutator
from .dead_code import DeadCodeMutator
from .reorder import StatementReorderMutator
from .rename import VariableRenameMutator, rotate
from .engine import MutationEngine

__all__ = [
    'MutationKind',
    'MutationContext',
    'MutationResult',
    'Mutator',
    'TouchedSite',
    'MutationError',
    'NoSafeMutationSite',
    'LengthInvariantViolation',
    'ControlFlowMutator',
    'DataFlowMutator',
    'DeadCodeMutator',
    'StatementReorderMutator',
    'VariableRenameMutator',
    'rotate',
    'MutationEngine',
]
