#!/usr/bin/env python3
"""
Java程序AST门面

基于tree-sitter-java提供解析、打印、遍历、结构化改写和作用域查询。
改写时未触及的区域保留原始字节（空白、注释、行布局）。
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

import tree_sitter

from .errors import ParseFailure
from .utils import get_tree_sitter_manager, text, line_of, same_node, field_of

logger = logging.getLogger(__name__)


STATEMENT_TYPES = {
    'local_variable_declaration', 'expression_statement', 'if_statement',
    'for_statement', 'enhanced_for_statement', 'while_statement', 'do_statement',
    'switch_expression', 'block', 'return_statement', 'break_statement',
    'continue_statement', 'throw_statement', 'try_statement',
    'try_with_resources_statement', 'labeled_statement', 'synchronized_statement',
    'assert_statement', 'yield_statement',
}

# 语句容器：其命名子节点按顺序构成语句序列
BLOCK_TYPES = {'block', 'constructor_body', 'switch_block_statement_group', 'program'}

LOOP_TYPES = {'for_statement', 'enhanced_for_statement', 'while_statement', 'do_statement'}

COMMENT_TYPES = {'line_comment', 'block_comment'}

# 这些声明的name字段是类型/方法名，不是变量
_DECLARATION_NAME_PARENTS = {
    'method_declaration', 'constructor_declaration', 'compact_constructor_declaration',
    'class_declaration', 'interface_declaration', 'enum_declaration',
    'record_declaration', 'annotation_type_declaration',
    'annotation_type_element_declaration', 'enum_constant',
}

_NON_VARIABLE_PARENTS = {
    'scoped_identifier', 'import_declaration', 'package_declaration',
    'module_declaration', 'labeled_statement', 'break_statement',
    'continue_statement', 'annotation', 'marker_annotation', 'element_value_pair',
}


@dataclass
class VariableBinding:
    """变量绑定（声明）信息"""
    name: str
    declared_type: str
    line: int
    kind: str  # local / field / parameter
    node: tree_sitter.Node


def binding_kind(node) -> Optional[str]:
    """
    判断标识符是否为变量声明位置

    Returns:
        'local' / 'field' / 'parameter'，不是声明时返回None
    """
    if node.type != 'identifier' or node.parent is None:
        return None
    parent = node.parent
    field = field_of(node)
    if parent.type == 'variable_declarator' and field == 'name':
        owner = parent.parent
        if owner is not None and owner.type in ('field_declaration', 'constant_declaration'):
            return 'field'
        if owner is not None and owner.type == 'spread_parameter':
            return 'parameter'
        return 'local'
    if parent.type == 'formal_parameter' and field == 'name':
        return 'parameter'
    if parent.type in ('catch_formal_parameter', 'enhanced_for_statement', 'resource',
                       'instanceof_expression') and field == 'name':
        return 'local'
    if parent.type == 'lambda_expression' and field == 'parameters':
        return 'parameter'
    if parent.type == 'inferred_parameters':
        return 'parameter'
    return None


def is_variable_reference(node) -> bool:
    """标识符是否处于变量位置（声明或使用），排除方法名、字段选择子、标签、类型名等"""
    if node.type != 'identifier':
        return False
    parent = node.parent
    if parent is None:
        return True
    field = field_of(node)
    if parent.type == 'field_access' and field == 'field':
        # this.x 视为对字段x的引用
        obj = parent.child_by_field_name('object')
        return obj is not None and obj.type == 'this'
    if parent.type == 'method_invocation' and field == 'name':
        return False
    if parent.type in _DECLARATION_NAME_PARENTS and field == 'name':
        return False
    if parent.type in _NON_VARIABLE_PARENTS:
        return False
    if parent.type == 'method_reference':
        named = parent.named_children
        if len(named) > 1 and same_node(named[-1], node):
            return False
    return True


def declared_type_of(name_node) -> str:
    """获取声明标识符对应的类型文本"""
    parent = name_node.parent
    if parent is None:
        return ''
    owner = parent
    if parent.type == 'variable_declarator':
        owner = parent.parent
    type_node = owner.child_by_field_name('type') if owner is not None else None
    if type_node is None and owner is not None:
        for child in owner.named_children:
            if child.type == 'catch_type':
                type_node = child
                break
    if type_node is None:
        return ''
    declared = text(type_node)
    if parent.type == 'variable_declarator' and parent.child_by_field_name('dimensions') is not None:
        declared += text(parent.child_by_field_name('dimensions'))
    return declared


def node_key(node) -> Tuple[str, int, int]:
    """节点的可哈希标识"""
    return (node.type, node.start_byte, node.end_byte)


def structure(node) -> tuple:
    """结构签名：节点类型与叶子词法单元，用于比较两棵树是否结构一致"""
    if node.child_count == 0:
        return (node.type, text(node))
    return (node.type,) + tuple(structure(child) for child in node.children)


def _first_error(node):
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == 'ERROR' or current.is_missing:
            return current
        stack.extend(reversed(current.children))
    return None


class Scope:
    """某一语句处可见的变量绑定"""

    def __init__(self, bindings: List[VariableBinding]):
        self._bindings = bindings

    def declared_in_current_scope(self) -> Set[str]:
        return {binding.name for binding in self._bindings}

    def bindings(self) -> List[VariableBinding]:
        return list(self._bindings)

    def type_of(self, name: str) -> Optional[str]:
        for binding in self._bindings:
            if binding.name == name:
                return binding.declared_type
        return None


class JavaProgram:
    """
    Java程序

    持有源代码文本与tree-sitter语法树。程序对象本身不可变，
    所有变换都通过rewrite生成新的文本。
    """

    def __init__(self, source: str, tree):
        self.source = source
        self.tree = tree
        self.root = tree.root_node
        self._bytes = source.encode('utf-8')
        self._bindings: Optional[List[VariableBinding]] = None

    @classmethod
    def parse(cls, source: str) -> 'JavaProgram':
        """
        解析Java源代码

        Args:
            source: Java源代码（完整编译单元或语句片段）

        Returns:
            JavaProgram对象

        Raises:
            ParseFailure: 文本为空或存在语法错误
        """
        if source is None or not source.strip():
            raise ParseFailure("empty program text")
        tree = get_tree_sitter_manager().parse_content(source)
        if tree.root_node.has_error:
            error = _first_error(tree.root_node)
            line = line_of(error) if error is not None else 0
            raise ParseFailure(f"syntax error near line {line}", line)
        return cls(source, tree)

    def print(self) -> str:
        return self.source

    def text_of(self, node) -> str:
        return self._bytes[node.start_byte:node.end_byte].decode('utf-8')

    def between(self, start_byte: int, end_byte: int) -> str:
        """两个字节偏移之间的原始文本"""
        return self._bytes[start_byte:end_byte].decode('utf-8')

    def visit(self, *types: str, root=None) -> Iterator:
        """
        先序遍历语法树

        Args:
            types: 只产出这些类型的节点，为空时产出全部节点
            root: 遍历起点，默认整个程序
        """
        stack = [root if root is not None else self.root]
        while stack:
            node = stack.pop()
            if not types or node.type in types:
                yield node
            stack.extend(reversed(node.children))

    def rewrite(self, hook: Callable) -> str:
        """
        结构化改写

        Args:
            hook: hook(node, render) 返回节点的替换文本，返回None表示保留原节点；
                  render(child) 可用于渲染子节点，以便嵌套改写相互组合；
                  render(node, True) 跳过node自身的hook只渲染其内部

        Returns:
            改写后的程序文本
        """
        data = self._bytes

        def render(node, skip_hook: bool = False) -> str:
            replaced = None if skip_hook else hook(node, render)
            if replaced is not None:
                return replaced
            if node.child_count == 0:
                return data[node.start_byte:node.end_byte].decode('utf-8')
            parts = []
            cursor = node.start_byte
            for child in node.children:
                parts.append(data[cursor:child.start_byte].decode('utf-8'))
                parts.append(render(child))
                cursor = child.end_byte
            parts.append(data[cursor:node.end_byte].decode('utf-8'))
            return ''.join(parts)

        return (data[:self.root.start_byte].decode('utf-8')
                + render(self.root)
                + data[self.root.end_byte:].decode('utf-8'))

    def bindings(self) -> List[VariableBinding]:
        """按声明顺序返回所有变量绑定"""
        if self._bindings is None:
            found = []
            for node in self.visit('identifier'):
                kind = binding_kind(node)
                if kind is not None:
                    found.append(VariableBinding(
                        name=text(node),
                        declared_type=declared_type_of(node),
                        line=line_of(node),
                        kind=kind,
                        node=node,
                    ))
            self._bindings = found
        return list(self._bindings)

    def declared_names(self) -> Set[str]:
        return {binding.name for binding in self.bindings()}

    def binding_types(self) -> Dict[str, str]:
        """变量名 -> 声明类型（同名时取第一次声明）"""
        types = {}
        for binding in self.bindings():
            types.setdefault(binding.name, binding.declared_type)
        return types

    def references(self, root=None) -> List:
        """变量使用位置的标识符节点（不含声明位置）"""
        return [node for node in self.visit('identifier', root=root)
                if is_variable_reference(node) and binding_kind(node) is None]

    def occurrences(self, root=None) -> List:
        """变量出现位置的标识符节点（声明和使用）"""
        return [node for node in self.visit('identifier', root=root) if is_variable_reference(node)]

    def statements(self) -> Iterator:
        """所有直接位于语句容器中的语句"""
        for container in self.visit(*BLOCK_TYPES):
            for child in container.named_children:
                if child.type in STATEMENT_TYPES:
                    yield child

    def enclosing_statement(self, node):
        """包含节点的最内层语句"""
        current = node
        while current is not None:
            if current.type in STATEMENT_TYPES:
                return current
            current = current.parent
        return None

    def scope_at(self, node) -> Scope:
        """
        查询某个节点处可见的变量绑定

        Args:
            node: 语句或表达式节点

        Returns:
            Scope对象
        """
        by_start = {binding.node.start_byte: binding for binding in self.bindings()}

        def within(container, predicate=None) -> List[VariableBinding]:
            return [binding for start, binding in by_start.items()
                    if container.start_byte <= start < container.end_byte
                    and (predicate is None or predicate(binding))]

        visible: List[VariableBinding] = []
        child = node
        parent = node.parent
        while parent is not None:
            if parent.type in BLOCK_TYPES:
                for stmt in parent.named_children:
                    if stmt.start_byte >= child.start_byte:
                        break
                    if stmt.type == 'local_variable_declaration':
                        visible.extend(within(stmt))
            elif parent.type == 'for_statement':
                for init in parent.children_by_field_name('init'):
                    if init.type == 'local_variable_declaration' and not same_node(init, child):
                        visible.extend(within(init))
            elif parent.type == 'enhanced_for_statement':
                if same_node(parent.child_by_field_name('body'), child):
                    name = parent.child_by_field_name('name')
                    if name is not None and name.start_byte in by_start:
                        visible.append(by_start[name.start_byte])
            elif parent.type in ('method_declaration', 'constructor_declaration', 'lambda_expression'):
                params = parent.child_by_field_name('parameters')
                if params is not None:
                    visible.extend(within(params, lambda b: b.kind == 'parameter'))
            elif parent.type == 'catch_clause':
                for param in parent.named_children:
                    if param.type == 'catch_formal_parameter':
                        visible.extend(within(param))
            elif parent.type == 'class_body':
                visible.extend(within(parent, lambda b: b.kind == 'field'
                                      and same_node(b.node.parent.parent.parent, parent)))
            child = parent
            parent = parent.parent
        visible.sort(key=lambda binding: binding.node.start_byte)
        return Scope(visible)

    def line_count(self) -> int:
        return self.source.count('\n') + 1
