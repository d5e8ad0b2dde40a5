#!/usr/bin/env python3
"""
测试依赖分析：数据依赖、控制依赖、受保护闭包和依赖图导出
"""

import sys
from pathlib import Path

from hypothesis import given, settings, strategies as st

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis import DependencyAnalyzer, DependencyGraph, EdgeType, Node, SliceRelevancePolicy
from analysis.visualization import visualize_dependency_graph
from parser import JavaProgram


PROGRAM = """int a = 1;
int b = a + 2;
int c = 5;
int d = c * 2;
if (b > 0) {
    int e = 3;
    e = e + 1;
}
"""


def plain_analyzer():
    return DependencyAnalyzer(SliceRelevancePolicy.disabled())


def test_data_dependencies_are_symmetric():
    """t := e 同时产生 t -> vars(e) 和 vars(e) -> t"""
    deps = plain_analyzer().build_data_deps(PROGRAM)
    assert deps['b'] == {'a'}
    assert deps['a'] == {'b'}
    assert deps['d'] == {'c'}
    assert 'e' not in deps


def test_control_dependencies_link_guard_and_assigned():
    deps = plain_analyzer().build_control_deps(PROGRAM)
    assert deps == {'b': {'e'}, 'e': {'b'}}


def test_compound_assignment_reads_target():
    deps = plain_analyzer().build_data_deps("int s = 0;\nint k = 2;\ns += k;\n")
    assert deps['s'] == {'k'}


def test_array_element_write_depends_on_index():
    deps = plain_analyzer().build_data_deps("int[] arr = new int[3];\nint j = 1;\nint w = 4;\narr[j] = w;\n")
    assert deps['arr'] == {'j', 'w'}


def test_node_def_use_sets():
    """语句节点只记录声明、定义和使用三类变量"""
    program = JavaProgram.parse("class P {\n    void f(int k) {\n        int s = 0;\n        s += k;\n    }\n}\n")
    statements = list(program.statements())
    declaration, update = (Node(stmt) for stmt in statements)
    assert (declaration.declared, declaration.defs, declaration.uses) == ({'s'}, {'s'}, set())
    assert (update.declared, update.defs, update.uses) == (set(), {'s'}, {'s', 'k'})
    assert update.variables == {'s', 'k'}
    assert update.line == 4
    assert repr(update) == "Node(line=4, type=expression_statement, defs=['s'], uses=['k', 's'])"


def test_protected_closure():
    """闭包沿数据依赖和控制依赖双向传播，无关变量不受保护"""
    analyzer = plain_analyzer()
    result = analyzer.analyze(PROGRAM, 'b')
    assert result.protected == frozenset({'a', 'b', 'e'})
    assert result.seed == frozenset({'b'})

    program = JavaProgram.parse(PROGRAM)
    statements = {program.text_of(stmt): stmt for stmt in program.statements()}
    assert analyzer.is_protected(statements['int a = 1;'], result.protected)
    assert not analyzer.is_protected(statements['int d = c * 2;'], result.protected)
    # if语句整体包含受保护的守卫变量
    if_statement = next(stmt for text, stmt in statements.items() if text.startswith('if'))
    assert analyzer.is_protected(if_statement, result.protected)


def test_closure_of_unknown_seed_is_seed():
    result = plain_analyzer().analyze(PROGRAM, 'missing')
    assert result.protected == frozenset({'missing'})


def test_relevance_policy_extends_seed():
    """命名模式匹配的变量和守卫其赋值的循环计数器加入种子"""
    code = "int val1 = 0;\nint x = 1;\nint unrelated1 = 2;\nfor (int i = 0; i < 3; i++) { val1 += i; }\n"
    seed = DependencyAnalyzer().protected_seed(code, ['x'])
    assert seed == {'x', 'val1', 'i'}
    assert plain_analyzer().protected_seed(code, ['x']) == {'x'}


def test_policy_excludes_unrelated_prefix():
    policy = SliceRelevancePolicy(r'.*\d')
    assert policy.matches('temp1')
    assert not policy.matches('unrelated1')
    assert not SliceRelevancePolicy.disabled().matches('temp1')


def test_dependency_graph_from_maps_round_trip():
    result = plain_analyzer().analyze(PROGRAM, 'b')
    graph = DependencyGraph.from_maps(result.data_deps, result.control_deps)
    assert graph.to_map(EdgeType.DATA) == result.data_deps
    assert graph.to_map(EdgeType.CONTROL) == result.control_deps
    assert graph.neighbors('b', EdgeType.CONTROL) == {'e'}


def test_visualize_writes_dot_file(tmp_path):
    result = plain_analyzer().analyze(PROGRAM, 'b')
    filename = str(tmp_path / 'deps')
    visualize_dependency_graph(result.graph, result.protected, filename=filename)
    dot = (tmp_path / 'deps.dot').read_text()
    assert 'digraph' in dot
    assert 'lightpink' in dot
    assert 'control' in dot


names = st.sampled_from(['a', 'b', 'c', 'd', 'e', 'f', 'g'])
maps = st.dictionaries(names, st.sets(names, max_size=4), max_size=7)


@settings(max_examples=100, deadline=None)
@given(seed=st.sets(names, min_size=1, max_size=3), data_deps=maps, control_deps=maps)
def test_closure_is_idempotent(seed, data_deps, control_deps):
    """对已闭合的集合再求闭包结果不变，且包含种子"""
    closed = DependencyAnalyzer.closure(seed, data_deps, control_deps)
    assert seed <= closed
    assert DependencyAnalyzer.closure(closed, data_deps, control_deps) == closed
