#!/usr/bin/env python3
"""
可视化模块

变量依赖图的graphviz可视化，受保护变量高亮显示
"""

from typing import Iterable
from graphviz import Digraph
from .graph import DependencyGraph, EdgeType


_EDGE_STYLE = {
    EdgeType.DATA: {'color': 'black', 'style': 'solid'},
    EdgeType.CONTROL: {'color': 'blue', 'style': 'dashed'},
}


def visualize_dependency_graph(graph: DependencyGraph, protected: Iterable[str] = (),
                               filename: str = 'DEPS', pdf: bool = False,
                               dot_format: bool = True, view: bool = False) -> Digraph:
    """
    可视化依赖图
    Args:
        graph: 变量依赖图
        protected: 受保护变量，填充为浅红色
        filename: 输出文件名（不含扩展名）
        pdf: 是否渲染PDF（需要本机安装graphviz）
        dot_format: 是否保存.dot文件
        view: 渲染后是否打开
    """
    protected = set(protected)
    dot = Digraph(comment=filename, strict=True)
    dot.attr(rankdir='LR')
    dot.attr('node', fontname='Arial')
    dot.attr('edge', fontname='Arial')

    for name in sorted(graph.variables):
        if name in protected:
            dot.node(name, label=name, shape='ellipse', style='filled', fillcolor='lightpink')
        else:
            dot.node(name, label=name, shape='ellipse')

    # 对称边只画一次
    drawn = set()
    for edge_type in (EdgeType.DATA, EdgeType.CONTROL):
        for source, target in graph.edges(edge_type):
            key = (edge_type, frozenset((source, target)))
            if key in drawn:
                continue
            drawn.add(key)
            dot.edge(source, target, label=edge_type.value.lower(), dir='both', **_EDGE_STYLE[edge_type])

    if dot_format:
        with open(f"{filename}.dot", 'w') as f:
            f.write(dot.source)

    if pdf:
        dot.render(filename, view=view, cleanup=True)

    return dot
