#!/usr/bin/env python3
"""
AST节点处理模块

提供Java语句的定义/使用信息提取
"""
from typing import Set, Tuple

from parser import binding_kind, is_variable_reference
from .utils import text, is_left_of_assignment


class Node:
    """程序分析节点"""

    def __init__(self, tree_sitter_node):
        """
        从tree-sitter节点创建分析节点
        Args:
            tree_sitter_node: tree-sitter解析的语句或表达式节点
        """
        self.line = tree_sitter_node.start_point[0] + 1
        self.type = tree_sitter_node.type
        self.declared, self.defs, self.uses = self._get_def_use_info(tree_sitter_node)

    @property
    def variables(self) -> Set[str]:
        """语句中出现的全部变量（声明、赋值、读取）"""
        return self.declared | self.defs | self.uses

    def _get_def_use_info(self, node) -> Tuple[Set[str], Set[str], Set[str]]:
        """获取节点子树的声明、定义和使用信息"""
        declared = set()
        defs = set()
        uses = set()

        stack = [node]
        while stack:
            current = stack.pop()
            stack.extend(current.children)
            if current.type != 'identifier' or not is_variable_reference(current):
                continue
            name = text(current)
            is_decl, is_def, is_use = self._is_definition(current)
            if is_decl:
                declared.add(name)
            if is_def:
                defs.add(name)
            if is_use:
                uses.add(name)

        return declared, defs, uses

    def _is_definition(self, identifier) -> Tuple[bool, bool, bool]:
        """
        判断标识符的角色
        Returns:
            (是否声明, 是否定义, 是否使用)
        """
        kind = binding_kind(identifier)
        if kind is not None:
            parent = identifier.parent
            if parent.type == 'variable_declarator':
                return True, parent.child_by_field_name('value') is not None, False
            # 参数、for-each变量、catch参数在进入时即被赋值
            return True, True, False

        if is_left_of_assignment(identifier):
            assignment = identifier.parent
            while assignment.type != 'assignment_expression':
                assignment = assignment.parent
            operator = assignment.child_by_field_name('operator')
            compound = operator is not None and text(operator) != '='
            # 数组元素写入不会覆盖整个数组
            element_write = identifier.parent.type == 'array_access'
            return False, True, compound or element_write

        parent = identifier.parent
        if parent is not None and parent.type == 'update_expression':
            return False, True, True
        if parent is not None and parent.type == 'parenthesized_expression' and \
                parent.parent is not None and parent.parent.type == 'update_expression':
            return False, True, True
        return False, False, True

    def __repr__(self):
        return f"Node(line={self.line}, type={self.type}, defs={sorted(self.defs)}, uses={sorted(self.uses)})"
