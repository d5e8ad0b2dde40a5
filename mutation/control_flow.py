#!/usr/bin/env python3
"""
控制流变异器

- if/else：对条件取反并交换两个分支，if (!c) {B} else {A} ≡ if (c) {A} else {B}
- for -> while：提升初始化语句到循环前，把更新语句追加到循环体末尾
- while -> for：上一种变换的逆变换

所有改写都不改变程序总行数，切片行号无需调整。
"""

import logging
from typing import Callable, Dict, Iterable, Optional, Set, Tuple

from analysis.utils import FLOATING_TYPES, int_literal_value
from parser import JavaProgram, BLOCK_TYPES, COMMENT_TYPES, node_key, text, same_node
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .errors import NoSafeMutationSite

logger = logging.getLogger(__name__)


_INVERTED = {'<': '>=', '>=': '<', '<=': '>', '>': '<=', '==': '!=', '!=': '=='}
_ORDERING = {'<', '<=', '>', '>='}
_LOGICAL = {'&&': '||', '||': '&&'}
_BOUND_OPERATORS = {'<', '<=', '>', '>=', '!='}

# 取反时可以直接加 ! 前缀的表达式
_PRIMARY_TYPES = {
    'identifier', 'method_invocation', 'field_access', 'array_access',
    'parenthesized_expression', 'true', 'false', 'this',
}


class ControlFlowMutator(Mutator):
    """控制流变异器"""

    kind = MutationKind.CONTROL_FLOW

    def mutate(self, program, protected, slice_point=None, rng=None) -> MutationResult:
        program = self.load(program)
        protected = set(protected)
        context = MutationContext(self.kind)
        plans: Dict[tuple, Callable] = {}
        types = program.binding_types()

        for node in program.visit('if_statement'):
            if node.child_by_field_name('alternative') is None:
                continue
            if self.is_protected(node, protected):
                logger.debug(f"skip protected if at line {node.start_point[0] + 1}")
                continue
            plans[node_key(node)] = self._swap_plan(program, node, types)
            context.record(node, 'negate-and-swap')

        for node in program.visit('for_statement'):
            if self.is_protected(node, protected):
                continue
            header = self._for_header(program, node)
            if header is None:
                continue
            plans[node_key(node)] = self._while_plan(program, node, *header)
            context.record(node, 'for-to-while')

        for node in program.visit('while_statement'):
            if self.is_protected(node, protected):
                continue
            header = self._while_header(program, node, protected)
            if header is None:
                continue
            decl, last = header
            plans[node_key(decl)] = lambda n, render: ''
            plans[node_key(last)] = lambda n, render: ''
            plans[node_key(node)] = self._for_plan(program, node, decl, last)
            context.record(decl, 'while-to-for')
            context.record(node, 'while-to-for')

        if not plans:
            raise NoSafeMutationSite(self.kind.value, "no unprotected if/else or counter loop")

        def hook(node, render):
            plan = plans.get(node_key(node))
            return plan(node, render) if plan is not None else None

        mutated = program.rewrite(hook)
        logger.debug(f"control-flow mutation touched {len(context.touched)} statements")
        return MutationResult(program_text=mutated, line_offset=0, applied=True, context=context)

    # ---------------- if/else ----------------

    def _swap_plan(self, program: JavaProgram, node, types: Dict[str, str]) -> Callable:
        condition = node.child_by_field_name('condition')
        consequence = node.child_by_field_name('consequence')
        alternative = node.child_by_field_name('alternative')

        def plan(n, render):
            return ''.join([
                program.between(node.start_byte, condition.start_byte),
                self.negate(program, condition, types),
                program.between(condition.end_byte, consequence.start_byte),
                self._braced(alternative, render),
                program.between(consequence.end_byte, alternative.start_byte),
                self._braced(consequence, render),
                program.between(alternative.end_byte, node.end_byte),
            ])
        return plan

    @staticmethod
    def _braced(branch, render) -> str:
        # 非块分支加花括号，避免交换后出现悬空else
        if branch.type == 'block':
            return render(branch)
        return '{ ' + render(branch) + ' }'

    def negate(self, program: JavaProgram, expr, types: Dict[str, str]) -> str:
        """
        条件取反
        关系运算符按反转表处理，&&/|| 按德摩根律分配，其余情况加逻辑非
        Args:
            program: 所属程序
            expr: 条件表达式节点
            types: 变量名 -> 声明类型，浮点比较不做反转（NaN）
        Returns:
            取反后的表达式文本
        """
        if expr.type == 'parenthesized_expression':
            inner = [c for c in expr.named_children if c.type not in COMMENT_TYPES][0]
            return (program.between(expr.start_byte, inner.start_byte)
                    + self.negate(program, inner, types)
                    + program.between(inner.end_byte, expr.end_byte))

        if expr.type == 'binary_expression':
            left = expr.child_by_field_name('left')
            op = expr.child_by_field_name('operator')
            right = expr.child_by_field_name('right')
            operator = text(op)
            if operator in _INVERTED and not (operator in _ORDERING and self._is_floating(program, expr, types)):
                return (program.between(expr.start_byte, op.start_byte)
                        + _INVERTED[operator]
                        + program.between(op.end_byte, expr.end_byte))
            if operator in _LOGICAL:
                return (self._negated_operand(program, left, types)
                        + program.between(left.end_byte, op.start_byte)
                        + _LOGICAL[operator]
                        + program.between(op.end_byte, right.start_byte)
                        + self._negated_operand(program, right, types))

        if expr.type == 'unary_expression':
            op = expr.child_by_field_name('operator')
            if op is not None and text(op) == '!':
                return program.text_of(expr.child_by_field_name('operand'))

        if expr.type in _PRIMARY_TYPES:
            return '!' + program.text_of(expr)
        return '!(' + program.text_of(expr) + ')'

    def _negated_operand(self, program: JavaProgram, operand, types) -> str:
        negated = self.negate(program, operand, types)
        if operand.type == 'binary_expression' and text(operand.child_by_field_name('operator')) in _LOGICAL:
            return '(' + negated + ')'
        return negated

    @staticmethod
    def _is_floating(program: JavaProgram, expr, types: Dict[str, str]) -> bool:
        """比较是否可能涉及浮点数（无法确定类型的调用和字段访问按浮点处理）"""
        for node in program.visit(root=expr):
            if node.type in ('decimal_floating_point_literal', 'hex_floating_point_literal',
                             'method_invocation', 'field_access', 'cast_expression'):
                return True
            if node.type == 'identifier' and types.get(text(node)) in FLOATING_TYPES:
                return True
        return False

    # ---------------- for -> while ----------------

    def _for_header(self, program: JavaProgram, node) -> Optional[Tuple]:
        """
        识别简单计数循环头部
        Returns:
            (初始化声明, 条件, 更新表达式, 循环体)，不满足条件时返回None
        """
        inits = node.children_by_field_name('init')
        if len(inits) != 1 or inits[0].type != 'local_variable_declaration':
            return None
        declarators = inits[0].children_by_field_name('declarator')
        if len(declarators) != 1 or declarators[0].child_by_field_name('value') is None:
            return None
        counter = text(declarators[0].child_by_field_name('name'))
        condition = node.child_by_field_name('condition')
        if not self._is_simple_bound(condition, counter):
            return None
        updates = node.children_by_field_name('update')
        if len(updates) != 1 or not self._is_unit_step(updates[0], counter):
            return None
        body = node.child_by_field_name('body')
        if body is None or self._contains_continue(program, body):
            return None
        return inits[0], condition, updates[0], body

    def _while_plan(self, program: JavaProgram, node, init, condition, update, body) -> Callable:
        # 头部原有的换行减去随初始化、条件、更新文本一起输出的换行
        header_lines = program.between(node.start_byte, body.start_byte).count('\n') \
            - sum(program.text_of(part).count('\n') for part in (init, condition, update))

        def plan(n, render):
            body_text = render(body)
            step = program.text_of(update) + '; }'
            if body.type == 'block':
                loop_body = body_text[:-1] + step
            else:
                loop_body = '{ ' + body_text + ' ' + step
            return ('{ ' + program.text_of(init) + ' while (' + program.text_of(condition) + ') '
                    + '\n' * header_lines + loop_body + ' }')
        return plan

    # ---------------- while -> for ----------------

    def _while_header(self, program: JavaProgram, node, protected: Set[str]) -> Optional[Tuple]:
        """
        识别 int i = C; while (i < N) { ...; i++; } 形式
        Returns:
            (计数器声明语句, 循环体最后的更新语句)，不满足条件时返回None
        """
        parent = node.parent
        if parent is None or parent.type not in BLOCK_TYPES:
            return None
        siblings = [c for c in parent.named_children if c.type not in COMMENT_TYPES]
        index = next((i for i, c in enumerate(siblings) if same_node(c, node)), None)
        if not index:
            return None
        decl = siblings[index - 1]
        if decl.type != 'local_variable_declaration' or self.is_protected(decl, protected):
            return None
        declarators = decl.children_by_field_name('declarator')
        if len(declarators) != 1 or declarators[0].child_by_field_name('value') is None:
            return None
        counter = text(declarators[0].child_by_field_name('name'))

        condition = node.child_by_field_name('condition')
        inner = condition.named_children[0] if condition is not None and condition.named_children else None
        if not self._is_simple_bound(inner, counter):
            return None
        body = node.child_by_field_name('body')
        if body is None or body.type != 'block' or self._contains_continue(program, body):
            return None
        statements = [c for c in body.named_children if c.type not in COMMENT_TYPES]
        if not statements or statements[-1].type != 'expression_statement':
            return None
        last = statements[-1]
        if not last.named_children or not self._is_unit_step(last.named_children[0], counter):
            return None
        # 计数器移入for头部后作用域变小，之后不能再被使用
        for later in siblings[index + 1:]:
            if any(text(ident) == counter for ident in program.occurrences(root=later)):
                return None
        return decl, last

    def _for_plan(self, program: JavaProgram, node, decl, last) -> Callable:
        condition = node.child_by_field_name('condition')
        inner = condition.named_children[0]
        body = node.child_by_field_name('body')
        update = last.named_children[0]
        # 被删除的声明和更新语句中的换行移到for头部之后
        header_lines = program.between(node.start_byte, body.start_byte).count('\n') \
            + program.text_of(decl).count('\n') + program.text_of(last).count('\n') \
            - program.text_of(decl).strip().count('\n') - program.text_of(inner).count('\n') \
            - program.text_of(update).count('\n')

        def plan(n, render):
            return ('for (' + program.text_of(decl).strip() + ' ' + program.text_of(inner) + '; '
                    + program.text_of(update) + ') ' + '\n' * header_lines + render(body))
        return plan

    # ---------------- helpers ----------------

    @staticmethod
    def _is_simple_bound(condition, counter: str) -> bool:
        if condition is None or condition.type != 'binary_expression':
            return False
        op = condition.child_by_field_name('operator')
        if op is None or text(op) not in _BOUND_OPERATORS:
            return False
        left = condition.child_by_field_name('left')
        right = condition.child_by_field_name('right')
        return any(side is not None and side.type == 'identifier' and text(side) == counter
                   for side in (left, right))

    @staticmethod
    def _is_unit_step(expr, counter: str) -> bool:
        """i++、++i、i--、--i、i += 1、i -= 1"""
        if expr.type == 'update_expression':
            operands = [c for c in expr.children if c.type == 'identifier']
            return len(operands) == 1 and text(operands[0]) == counter
        if expr.type == 'assignment_expression':
            left = expr.child_by_field_name('left')
            op = expr.child_by_field_name('operator')
            right = expr.child_by_field_name('right')
            return (left is not None and left.type == 'identifier' and text(left) == counter
                    and op is not None and text(op) in ('+=', '-=')
                    and int_literal_value(right) == 1)
        return False

    @staticmethod
    def _contains_continue(program: JavaProgram, body) -> bool:
        return any(True for _ in program.visit('continue_statement', root=body))
