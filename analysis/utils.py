#!/usr/bin/env python3
"""
工具函数模块

提供程序分析所需的基础工具函数
"""

import re
from typing import Optional

from parser.utils import text, field_of, unwrap_parens


NUMERIC_TYPES = {'int', 'long', 'float', 'double'}
FLOATING_TYPES = {'float', 'double', 'Float', 'Double'}

INTEGER_LITERAL_TYPES = {
    'decimal_integer_literal', 'hex_integer_literal',
    'octal_integer_literal', 'binary_integer_literal',
}

PRINT_CALL_PATTERN = re.compile(r'^System\.(out|err)\.(println|print|printf)$')


def int_literal_value(node) -> Optional[int]:
    """整数字面量（可带一元负号）的值，不是整数字面量时返回None"""
    node = unwrap_parens(node)
    if node is None:
        return None
    if node.type == 'unary_expression':
        operator = node.child_by_field_name('operator')
        operand = node.child_by_field_name('operand')
        if operator is not None and text(operator) == '-' and operand is not None:
            value = int_literal_value(operand)
            return -value if value is not None else None
        return None
    if node.type not in INTEGER_LITERAL_TYPES:
        return None
    raw = text(node).replace('_', '').rstrip('lL')
    try:
        if node.type == 'hex_integer_literal':
            return int(raw, 16)
        if node.type == 'binary_integer_literal':
            return int(raw[2:], 2)
        if node.type == 'octal_integer_literal':
            return int(raw, 8)
        return int(raw)
    except ValueError:
        return None


def literal_truth(node) -> Optional[bool]:
    """布尔字面量表达式（true/false及其取反）的静态值"""
    node = unwrap_parens(node)
    if node is None:
        return None
    if node.type == 'true':
        return True
    if node.type == 'false':
        return False
    if node.type == 'unary_expression':
        operator = node.child_by_field_name('operator')
        if operator is not None and text(operator) == '!':
            inner = literal_truth(node.child_by_field_name('operand'))
            return None if inner is None else not inner
    return None


def assignment_base(left) -> Optional[str]:
    """赋值左值的基变量名：a、a[i]、this.a、obj.f 分别得到 a、a、a、obj"""
    node = unwrap_parens(left)
    while node is not None:
        if node.type == 'identifier':
            return text(node)
        if node.type == 'array_access':
            node = node.child_by_field_name('array')
        elif node.type == 'field_access':
            obj = node.child_by_field_name('object')
            if obj is not None and obj.type == 'this':
                field = node.child_by_field_name('field')
                return text(field) if field is not None else None
            node = obj
        else:
            return None
    return None


def is_print_call(node) -> bool:
    """是否为System.out.println之类的输出调用"""
    if node is None or node.type != 'method_invocation':
        return False
    obj = node.child_by_field_name('object')
    name = node.child_by_field_name('name')
    if obj is None or name is None:
        return False
    return PRINT_CALL_PATTERN.match(f"{text(obj)}.{text(name)}") is not None


def is_left_of_assignment(identifier) -> bool:
    """标识符是否是赋值表达式左值的基变量"""
    child = identifier
    parent = identifier.parent
    while parent is not None:
        field = field_of(child)
        if parent.type == 'array_access' and field == 'array':
            pass
        elif parent.type == 'field_access' and field in ('object', 'field'):
            pass
        elif parent.type == 'parenthesized_expression':
            pass
        else:
            break
        child = parent
        parent = parent.parent
    return parent is not None and parent.type == 'assignment_expression' and field_of(child) == 'left'
