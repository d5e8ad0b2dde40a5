#!/usr/bin/env python3
"""
测试切片点选择策略
"""

import sys
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from generator import TemplateGenerator
from parser import JavaProgram
from slicer import NoProtectedVariable, NoSlicePoint, SlicePoint, SlicePointSelector, find_declaration_line


def test_most_frequent_variable_at_last_occurrence():
    code = "int a = 1;\nint b = a + 2;\nb = b + a;\nb = b * 2;\nint c = 0;\n"
    assert SlicePointSelector().select(code) == SlicePoint('b', 4)


def test_ties_prefer_later_last_occurrence():
    code = "int a = 1;\nint b = 2;\na = a + 1;\nb = b + 1;\n"
    assert SlicePointSelector().select(code) == SlicePoint('b', 4)


def test_dead_occurrences_are_not_counted():
    code = ("int x = 1;\n"
            "if (false) { x = x + 1; x = x + 2; x = x + 3; }\n"
            "int y = x;\n"
            "y = y + 1;\n")
    # x 在可达代码中出现2次，y 出现3次
    assert SlicePointSelector().select(code) == SlicePoint('y', 4)


def test_single_occurrence_fallback_skips_reserved_names():
    code = "int first = 1;\nint temp = 2;\nint unusedA = 3;\n"
    assert SlicePointSelector().select(code) == SlicePoint('first', 1)


def test_single_occurrence_fallback_prefers_latest():
    code = "int first = 1;\nint second = 2;\n"
    assert SlicePointSelector().select(code) == SlicePoint('second', 2)


def test_first_declaration_fallback():
    """入口参数和for计数器不作为单次出现的候选，最后退回第一个声明"""
    code = ("public class A {\n"
            "    public static void main(String[] args) {\n"
            "        for (int i = 0; ; ) { }\n"
            "    }\n"
            "}\n")
    assert SlicePointSelector().select(code) == SlicePoint('args', 2)


def test_no_variable():
    selector = SlicePointSelector()
    assert selector.select("System.out.println(1);\n") is None
    with pytest.raises(NoSlicePoint):
        selector.select_or_raise("System.out.println(1);\n")
    assert NoProtectedVariable is NoSlicePoint


def test_find_declaration_line_skips_dead_code():
    code = "if (false) { int v = 0; }\nint v = 1;\n"
    assert find_declaration_line(code, 'v') == 2
    assert find_declaration_line(code, 'w') is None


def test_slice_point_helpers():
    point = SlicePoint('v', 20)
    assert point.shifted(2) == SlicePoint('v', 22)
    assert point.renamed('i') == SlicePoint('i', 20)
    assert str(point) == '20:v'


@settings(max_examples=20, deadline=None)
@given(seed=st.integers(min_value=0, max_value=100000))
def test_generated_programs_always_have_a_point(seed):
    """选出的变量在程序中声明，且所在行确实出现该变量"""
    code = TemplateGenerator().generate(seed)
    point = SlicePointSelector().select(code)
    assert point is not None
    program = JavaProgram.parse(code)
    assert point.variable in program.declared_names()
    assert point.variable in code.splitlines()[point.line - 1]
    # 结果只取决于程序文本
    assert SlicePointSelector().select(code) == point
