#!/usr/bin/env python3
"""
死代码插入变异器

在目标变量声明语句之前（同一语句块内）插入1-3个单行的不可达块：
    if (false) { v = v + 3; }
    for (int deadIdx = 0; deadIdx < 0; deadIdx++) { v = v + deadIdx; }
插入行都位于声明之前，因此声明行号的偏移量就是切片行号的偏移量。
"""

import logging
from typing import Dict, List, Optional, Set

from analysis import DeadCodeClassifier
from analysis.utils import NUMERIC_TYPES
from parser import JavaProgram, VariableBinding, BLOCK_TYPES, STATEMENT_TYPES, node_key, line_of, text
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .errors import NoSafeMutationSite

logger = logging.getLogger(__name__)


_IF_BODIES = [
    "{v} = {v} + {n};",
    "{v} = {v} * {n} + {m};",
    "if ({v} > 0) {{ {v} = {v} - {n}; }}",
]
_LOOP_BODIES = [
    "{v} = {v} + {i};",
    "for (int {j} = 0; {j} < 5; {j}++) {{ {v} = {v} + {j}; }}",
]


class DeadCodeMutator(Mutator):
    """死代码插入变异器"""

    kind = MutationKind.DEAD_CODE
    MAX_BLOCKS = 3

    def __init__(self, analyzer=None, blocks: Optional[int] = None):
        """
        Args:
            analyzer: 依赖分析器
            blocks: 固定插入的块数，为None时随机取1-3
        """
        super().__init__(analyzer)
        self.blocks = blocks

    def mutate(self, program, protected, slice_point=None, rng=None) -> MutationResult:
        program = self.load(program)
        rng = self.rng_or_default(rng)
        context = MutationContext(self.kind)
        target = slice_point.variable if slice_point is not None else None

        declaration = self._declaration_statement(program, target)
        if declaration is None:
            raise NoSafeMutationSite(self.kind.value, f"no local declaration statement for {target}")

        candidates = [stmt for stmt in declaration.parent.named_children
                      if stmt.type in STATEMENT_TYPES
                      and stmt.start_byte <= declaration.start_byte
                      and self._starts_line(program, stmt)]
        if not candidates:
            raise NoSafeMutationSite(self.kind.value, "declaration does not start its own line")

        used = {text(node) for node in program.visit('identifier', 'type_identifier')}
        insertions: Dict[tuple, List[str]] = {}
        count = self.blocks if self.blocks is not None else rng.randint(1, self.MAX_BLOCKS)
        for _ in range(count):
            anchor = rng.choice(candidates)
            block = self._dead_block(program, anchor, used, rng)
            insertions.setdefault(node_key(anchor), []).append(block)
            context.record_insertion(line_of(anchor), 1)
            logger.debug(f"dead block before line {line_of(anchor)}: {block}")

        def hook(node, render):
            blocks = insertions.get(node_key(node))
            if blocks is None:
                return None
            indent = self._indent(program, node)
            return ''.join(block + '\n' + indent for block in blocks) + render(node, True)

        mutated = program.rewrite(hook)
        return MutationResult(program_text=mutated, line_offset=count, applied=True, context=context)

    def _declaration_statement(self, program: JavaProgram, target: Optional[str]):
        """目标变量（未指定时取第一个局部变量）的声明语句，必须直接位于语句块中"""
        classifier = DeadCodeClassifier(program)
        for binding in program.bindings():
            if binding.kind != 'local' or binding.node.parent.type != 'variable_declarator':
                continue
            if target is not None and binding.name != target:
                continue
            if classifier.is_dead(binding.node):
                continue
            statement = binding.node.parent.parent
            if statement.parent is not None and statement.parent.type == 'for_statement':
                statement = statement.parent
            if statement.parent is not None and statement.parent.type in BLOCK_TYPES:
                return statement
            return None
        return None

    @staticmethod
    def _starts_line(program: JavaProgram, stmt) -> bool:
        line_start = stmt.start_byte - stmt.start_point[1]
        return program.between(line_start, stmt.start_byte).strip() == ''

    @staticmethod
    def _indent(program: JavaProgram, stmt) -> str:
        return program.between(stmt.start_byte - stmt.start_point[1], stmt.start_byte)

    def _dead_block(self, program: JavaProgram, anchor, used: Set[str], rng) -> str:
        """生成一个单行不可达块，块体引用锚点处可见的数值变量"""
        static = self._in_static_context(anchor)
        variables = [b for b in program.scope_at(anchor).bindings()
                     if b.declared_type in NUMERIC_TYPES and not self._is_final(b)
                     and self._initialized(b)
                     and not (static and b.kind == 'field' and not self._has_modifier(b, 'static'))]
        n = rng.randint(1, 20)
        m = rng.randint(1, 20)
        if variables:
            var = rng.choice(variables).name
            prefix = ''
        else:
            var = self._fresh('deadTmp', used)
            prefix = f"int {var} = {n}; "

        if rng.random() < 0.5:
            body = rng.choice(_IF_BODIES).format(v=var, n=n, m=m)
            return f"if (false) {{ {prefix}{body} }}"
        counter = self._fresh('deadIdx', used)
        inner = self._fresh('deadStep', used)
        body = rng.choice(_LOOP_BODIES).format(v=var, i=counter, j=inner)
        return f"for (int {counter} = 0; {counter} < 0; {counter}++) {{ {prefix}{body} }}"

    @staticmethod
    def _fresh(base: str, used: Set[str]) -> str:
        index = 0
        while f"{base}{index}" in used:
            index += 1
        name = f"{base}{index}"
        used.add(name)
        return name

    @staticmethod
    def _initialized(binding: VariableBinding) -> bool:
        # 计数循环的条件不是常量表达式，块体只能读取已明确赋值的变量
        owner = binding.node.parent
        return owner.type != 'variable_declarator' or owner.child_by_field_name('value') is not None

    @staticmethod
    def _in_static_context(anchor) -> bool:
        """锚点是否位于静态方法或静态初始化块中（不能访问实例字段）"""
        current = anchor.parent
        while current is not None:
            if current.type == 'static_initializer':
                return True
            if current.type in ('method_declaration', 'constructor_declaration'):
                return any(child.type == 'modifiers' and 'static' in text(child).split()
                           for child in current.children)
            if current.type == 'class_body':
                return False
            current = current.parent
        return False

    @staticmethod
    def _has_modifier(binding: VariableBinding, modifier: str) -> bool:
        owner = binding.node.parent
        if owner is not None and owner.type == 'variable_declarator':
            owner = owner.parent
        if owner is None:
            return False
        return any(child.type == 'modifiers' and modifier in text(child).split()
                   for child in owner.children)

    def _is_final(self, binding: VariableBinding) -> bool:
        return self._has_modifier(binding, 'final')
