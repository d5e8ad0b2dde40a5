#!/usr/bin/env python3
"""
测试变量重命名变异器
"""

import sys
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from comparator import check_equivalence
from generator import TemplateGenerator
from mutation import LengthInvariantViolation, MutationEngine, MutationKind, VariableRenameMutator, rotate
from parser import JavaProgram


@pytest.mark.parametrize("name, renamed", [
    ("val1", "iny6"),
    ("count", "pbhag"),
    ("Zeta_9", "Mrgn_4"),
    ("$x", "$k"),
])
def test_rotate(name, renamed):
    assert rotate(name) == renamed
    assert len(rotate(name)) == len(name)


def test_rotate_is_invertible():
    assert rotate(rotate("temp3", 13, 5), 13, 5) == "temp3"


def test_rename_all_occurrences():
    code = "int count = 1;\ncount = count + 2;\nSystem.out.println(count);\n"
    result = VariableRenameMutator().mutate(code, set())
    assert result.applied
    assert result.line_offset == 0
    assert result.program_text == "int pbhag = 1;\npbhag = pbhag + 2;\nSystem.out.println(pbhag);\n"
    assert result.context.rename_map == {'count': 'pbhag'}
    assert result.context.renamed('count') == 'pbhag'
    assert result.context.renamed('System') == 'System'


def test_rename_avoids_external_names():
    """新名字与未声明的外部引用冲突时换一个移位量"""
    code = "int a = 1;\nint b = a + n;\n"
    result = VariableRenameMutator().mutate(code, set())
    assert result.program_text == "int b = 1;\nint c = b + n;\n"
    assert result.context.rename_map == {'a': 'b', 'b': 'c'}


def test_method_and_type_names_are_kept():
    code = ("class Box {\n    int size;\n    int grow(int step) {\n"
            "        this.size = size + step;\n        return size;\n    }\n}\n")
    result = VariableRenameMutator().mutate(code, set())
    assert 'class Box' in result.program_text
    assert 'int grow(' in result.program_text
    assert 'this.fvmr = fvmr + fgrc;' in result.program_text


def test_field_read_through_other_object_keeps_name():
    """通过其他对象访问的字段（other.count）不改名，声明与所有访问保持一致"""
    code = ("class C {\n    int count;\n    boolean same(C other) {\n"
            "        return this.count == other.count;\n    }\n}\n")
    result = VariableRenameMutator().mutate(code, set())
    assert result.context.rename_map == {'other': 'bgure'}
    assert "    int count;\n" in result.program_text
    assert "boolean same(C bgure)" in result.program_text
    assert "return this.count == bgure.count;" in result.program_text
    JavaProgram.parse(result.program_text)


def test_length_check(monkeypatch):
    """映射改变长度时抛出不变式异常，而不是被当作无可变异位置"""
    monkeypatch.setattr(VariableRenameMutator, 'build_mapping', lambda self, program: {'a': 'abc'})
    with pytest.raises(LengthInvariantViolation):
        VariableRenameMutator().mutate("int a = 1;\n", set())
    with pytest.raises(AssertionError):
        MutationEngine().mutate("int a = 1;\n", MutationKind.RENAME, set())


def test_program_without_variables():
    result = MutationEngine().mutate("class Empty {}\n", MutationKind.RENAME, set())
    assert not result.applied


@settings(max_examples=20, deadline=None)
@given(seed=st.integers(min_value=0, max_value=100000))
def test_rename_preserves_length_and_equivalence(seed):
    """重命名后程序长度、行数不变，且与原程序在变量重命名意义下等价"""
    code = TemplateGenerator().generate(seed)
    result = VariableRenameMutator().mutate(code, set())
    mutated = result.program_text
    assert len(mutated) == len(code)
    assert mutated.count('\n') == code.count('\n')
    assert len(set(result.context.rename_map.values())) == len(result.context.rename_map)
    JavaProgram.parse(mutated)
    assert check_equivalence(code, mutated)
