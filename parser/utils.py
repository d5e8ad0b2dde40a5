#!/usr/bin/env python3
"""
Parser utils module
"""

import threading
import logging
from typing import Optional

import tree_sitter_java as tsjava
from tree_sitter import Language, Parser

logger = logging.getLogger(__name__)


class TreeSitterManager:
    """
    Tree-sitter解析器管理器
    Java语言对象全局共享，Parser对象按线程各自持有（Parser不是线程安全的）
    """

    def __init__(self):
        self.java_language = Language(tsjava.language())
        self._local = threading.local()
        logger.debug("Tree-sitter Java语言初始化成功")

    def get_parser(self) -> Parser:
        """
        获取当前线程的Java解析器

        Returns:
            Parser: 当前线程专属的解析器
        """
        parser = getattr(self._local, 'parser', None)
        if parser is None:
            parser = Parser(self.java_language)
            self._local.parser = parser
        return parser

    def parse_content(self, content: str):
        """
        解析代码内容

        Args:
            content: Java代码内容

        Returns:
            Tree: 解析树
        """
        return self.get_parser().parse(content.encode('utf-8'))


# 全局单例实例
_tree_sitter_manager: Optional[TreeSitterManager] = None
_manager_lock = threading.Lock()


def get_tree_sitter_manager() -> TreeSitterManager:
    """
    获取全局TreeSitterManager单例实例

    Returns:
        TreeSitterManager: 全局单例实例
    """
    global _tree_sitter_manager
    with _manager_lock:
        if _tree_sitter_manager is None:
            _tree_sitter_manager = TreeSitterManager()
    return _tree_sitter_manager


def text(node) -> str:
    """获取tree-sitter节点的文本内容"""
    return node.text.decode('utf-8')


def line_of(node) -> int:
    """节点起始行号（从1开始）"""
    return node.start_point[0] + 1


def same_node(a, b) -> bool:
    """按类型和字节范围判断是否同一节点"""
    if a is None or b is None:
        return False
    return a.type == b.type and a.start_byte == b.start_byte and a.end_byte == b.end_byte


def field_of(node) -> Optional[str]:
    """返回节点在父节点中的字段名"""
    parent = node.parent
    if parent is None:
        return None
    for i, child in enumerate(parent.children):
        if same_node(child, node):
            return parent.field_name_for_child(i)
    return None


def unwrap_parens(node):
    """去掉外层括号表达式"""
    while node is not None and node.type == 'parenthesized_expression':
        inner = node.named_children
        if not inner:
            break
        node = inner[0]
    return node
