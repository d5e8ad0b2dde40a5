#!/usr/bin/env python3
"""
变量重命名变异器

对所有声明的变量名做确定性的等长双射：字母在各自大小写内循环移位，数字模10移位，
'_'、'$' 和非ASCII字符保持不变。标识符首字符不会是数字，移位后的首字符仍是字母或'_'/'$'。
"""

import logging
from typing import Dict, List, Set

from parser import JavaProgram, is_variable_reference, node_key, text
from .base import Mutator, MutationKind, MutationContext, MutationResult
from .errors import NoSafeMutationSite, LengthInvariantViolation

logger = logging.getLogger(__name__)


JAVA_KEYWORDS = {
    'abstract', 'assert', 'boolean', 'break', 'byte', 'case', 'catch', 'char', 'class',
    'const', 'continue', 'default', 'do', 'double', 'else', 'enum', 'extends', 'final',
    'finally', 'float', 'for', 'goto', 'if', 'implements', 'import', 'instanceof', 'int',
    'interface', 'long', 'native', 'new', 'package', 'private', 'protected', 'public',
    'return', 'short', 'static', 'strictfp', 'super', 'switch', 'synchronized', 'this',
    'throw', 'throws', 'transient', 'try', 'void', 'volatile', 'while', 'true', 'false',
    'null', 'var', 'yield', 'record', 'sealed', 'permits', 'non-sealed', '_',
}


def rotate(name: str, letter_offset: int = 13, digit_offset: int = 5) -> str:
    """
    按字符移位
    Args:
        name: 原变量名
        letter_offset: 字母移位量
        digit_offset: 数字移位量
    Returns:
        等长的新变量名
    """
    chars = []
    for ch in name:
        if 'a' <= ch <= 'z':
            chars.append(chr((ord(ch) - ord('a') + letter_offset) % 26 + ord('a')))
        elif 'A' <= ch <= 'Z':
            chars.append(chr((ord(ch) - ord('A') + letter_offset) % 26 + ord('A')))
        elif '0' <= ch <= '9':
            chars.append(chr((ord(ch) - ord('0') + digit_offset) % 10 + ord('0')))
        else:
            chars.append(ch)
    return ''.join(chars)


class VariableRenameMutator(Mutator):
    """变量重命名变异器"""

    kind = MutationKind.RENAME
    LETTER_OFFSET = 13
    DIGIT_OFFSET = 5

    def mutate(self, program, protected, slice_point=None, rng=None) -> MutationResult:
        program = self.load(program)
        mapping = self.build_mapping(program)
        if not mapping:
            raise NoSafeMutationSite(self.kind.value, "program declares no variables")

        for old, new in mapping.items():
            if len(new) != len(old):
                raise LengthInvariantViolation(old, new)

        context = MutationContext(self.kind, rename_map=dict(mapping))
        replacements = {}
        for node in program.occurrences():
            name = text(node)
            if name in mapping:
                replacements[node_key(node)] = mapping[name]
        for binding in program.bindings():
            if binding.name in mapping:
                context.record(binding.node, 'rename')

        mutated = program.rewrite(lambda node, render: replacements.get(node_key(node)))
        logger.debug(f"renamed {len(mapping)} variables at {len(replacements)} sites")
        return MutationResult(program_text=mutated, line_offset=0, applied=True, context=context)

    def build_mapping(self, program: JavaProgram) -> Dict[str, str]:
        """
        构建重命名映射；新名字与关键字或不参与重命名的标识符冲突时换下一个字母移位量
        Raises:
            NoSafeMutationSite: 所有移位量都冲突
        """
        foreign = self._foreign_field_names(program)
        declared: List[str] = []
        for binding in program.bindings():
            if binding.kind == 'field' and binding.name in foreign:
                continue
            if binding.name not in declared:
                declared.append(binding.name)
        if not declared:
            return {}
        for name in sorted(foreign & {b.name for b in program.bindings() if b.kind == 'field'}):
            logger.debug(f"field {name} is accessed through another object, keeping its name")

        fixed = self._fixed_names(program, set(declared))
        offsets = [self.LETTER_OFFSET] + [o for o in range(1, 26) if o != self.LETTER_OFFSET]
        for offset in offsets:
            mapping = {name: rotate(name, offset, self.DIGIT_OFFSET) for name in declared}
            clashes = [new for old, new in mapping.items() if new != old and new in fixed]
            if not clashes:
                if offset != self.LETTER_OFFSET:
                    logger.debug(f"rename uses letter offset {offset}")
                return mapping
        raise NoSafeMutationSite(self.kind.value, "every rotation collides with a fixed identifier")

    @staticmethod
    def _foreign_field_names(program: JavaProgram) -> Set[str]:
        """通过this以外的对象访问的字段名（如other.count），这些字段不改名"""
        names = set()
        for node in program.visit('field_access'):
            target = node.child_by_field_name('object')
            field = node.child_by_field_name('field')
            if field is not None and (target is None or target.type != 'this'):
                names.add(text(field))
        return names

    @staticmethod
    def _fixed_names(program: JavaProgram, declared: Set[str]) -> Set[str]:
        """不参与重命名的名字：关键字、类型名、方法名、未声明的外部引用"""
        fixed = set(JAVA_KEYWORDS)
        for node in program.visit('identifier', 'type_identifier'):
            name = text(node)
            if node.type == 'type_identifier' or not is_variable_reference(node) or name not in declared:
                fixed.add(name)
        return fixed
