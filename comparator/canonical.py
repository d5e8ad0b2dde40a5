#!/usr/bin/env python3
"""
切片规范化

把每个声明的变量按声明顺序重命名为 VAR1..VARn，把引用了但未在片段中声明的变量
按首次出现顺序重命名为 EXTERNAL1..EXTERNALm，去掉注释后按词法单元重新拼接。
只有会粘连成另一个词法单元的相邻单元之间保留一个空格，因此规范形式仍可解析，
再次规范化结果不变。
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from parser import JavaProgram, COMMENT_TYPES, is_variable_reference, text

logger = logging.getLogger(__name__)


# 切片工具输出中第一个类声明之前的内容（日志、包声明、import）被丢弃
_CLASS_START = re.compile(
    r'^[ \t]*((public|private|protected|final|abstract|static|strictfp)\s+)*class\s+[A-Za-z_$]',
    re.MULTILINE)

# 作为整体输出的节点（字符串内部的空白有意义）
_ATOMIC_TYPES = {'string_literal', 'character_literal', 'text_block'}

_WORD_CHARS = set('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$')
_OPERATOR_CHARS = set('+-*/%<>=!&|^~?:.')


@dataclass
class CanonicalForm:
    """规范化结果"""
    text: str
    declared: List[str] = field(default_factory=list)   # 每个声明位置的变量名
    free: List[str] = field(default_factory=list)       # 按首次出现顺序的外部引用
    mapping: Dict[str, str] = field(default_factory=dict)

    @property
    def declared_count(self) -> int:
        return len(self.declared)

    @property
    def free_count(self) -> int:
        return len(self.free)


def strip_preamble(source: str) -> str:
    """去掉第一个类声明之前的内容，片段中没有类声明时原样返回"""
    match = _CLASS_START.search(source)
    if match is None:
        return source
    return source[match.start():].lstrip()


def _needs_space(previous: str, current: str) -> bool:
    if not previous or not current:
        return False
    last, first = previous[-1], current[0]
    if last in _WORD_CHARS and first in _WORD_CHARS:
        return True
    return last in _OPERATOR_CHARS and first in _OPERATOR_CHARS


def _tokens(node):
    """按源码顺序产出叶子词法单元节点，注释跳过，字符串字面量整体产出"""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in COMMENT_TYPES:
            continue
        if current.child_count == 0 or current.type in _ATOMIC_TYPES:
            yield current
            continue
        stack.extend(reversed(current.children))


def canonical_form(source: str) -> CanonicalForm:
    """
    规范化切片文本

    Args:
        source: 切片文本（完整类或语句片段）

    Returns:
        CanonicalForm

    Raises:
        ParseFailure: 去掉前导内容后仍无法解析
    """
    program = JavaProgram.parse(strip_preamble(source))

    mapping: Dict[str, str] = {}
    declared: List[str] = []
    for binding in program.bindings():
        declared.append(binding.name)
        if binding.name not in mapping:
            mapping[binding.name] = f"VAR{len(mapping) + 1}"

    free: List[str] = []
    for node in program.references():
        name = text(node)
        if name not in mapping:
            free.append(name)
            mapping[name] = f"EXTERNAL{len(free)}"

    parts: List[str] = []
    previous = ''
    for token in _tokens(program.root):
        value = text(token)
        if token.type == 'identifier' and is_variable_reference(token) and value in mapping:
            value = mapping[value]
        if not value:
            continue
        if _needs_space(previous, value):
            parts.append(' ')
        parts.append(value)
        previous = value

    form = CanonicalForm(text=''.join(parts), declared=declared, free=free, mapping=mapping)
    logger.debug(f"canonical form: {form.text}")
    return form


def canonicalize(source: str) -> str:
    """规范化切片文本，返回规范形式字符串"""
    return canonical_form(source).text
