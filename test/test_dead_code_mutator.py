#!/usr/bin/env python3
"""
测试死代码插入变异器与切片行号偏移
"""

import random
import sys
from pathlib import Path

import pytest

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis import DeadCodeClassifier
from mutation import DeadCodeMutator, MutationEngine, MutationKind, NoSafeMutationSite
from parser import JavaProgram
from slicer import (NoSlicePoint, SlicePoint, SlicePointSelector,
                    declaration_line_offset, find_declaration_line)
from programs import DEAD_CODE_PROGRAM


def test_slice_point_shifts_with_declaration(tmp_path):
    """v声明在第10行、切片点在第20行，插入2个块后分别变为第12行和第22行"""
    point = SlicePointSelector().select(DEAD_CODE_PROGRAM)
    assert point == SlicePoint('v', 20)
    assert find_declaration_line(DEAD_CODE_PROGRAM, 'v') == 10

    result = DeadCodeMutator(blocks=2).mutate(DEAD_CODE_PROGRAM, {'a', 'b', 'v'},
                                              slice_point=point, rng=random.Random(3))
    assert result.applied
    assert result.line_offset == 2

    original = tmp_path / 'Dead.java'
    mutated = tmp_path / 'Dead_deadcode_0.java'
    original.write_text(DEAD_CODE_PROGRAM)
    mutated.write_text(result.program_text)

    offset = declaration_line_offset(original, mutated, 'v')
    assert offset == 2
    shifted = point.shifted(offset)
    assert shifted == SlicePoint('v', 22)
    assert result.program_text.splitlines()[shifted.line - 1].strip() == "System.out.println(v);"
    assert find_declaration_line(result.program_text, 'v') == 12


@pytest.mark.parametrize("seed", range(8))
def test_inserted_blocks_are_dead(seed):
    """插入的行都被分类为不可达，且全部位于声明之前"""
    point = SlicePoint('v', 20)
    result = DeadCodeMutator().mutate(DEAD_CODE_PROGRAM, set(), slice_point=point, rng=random.Random(seed))
    assert 1 <= result.line_offset <= DeadCodeMutator.MAX_BLOCKS

    program = JavaProgram.parse(result.program_text)
    dead_lines = {start for start, _ in DeadCodeClassifier(program).dead_lines()}
    original = DEAD_CODE_PROGRAM.splitlines()
    mutated = result.program_text.splitlines()
    inserted = [number for number, line in enumerate(mutated, 1)
                if line.strip().startswith(('if (false)', 'for (int deadIdx'))]
    assert len(inserted) == result.line_offset
    assert set(inserted) <= dead_lines
    assert all(number < 10 + result.line_offset for number in inserted)
    # 删除插入行后得到原程序
    kept = [line for number, line in enumerate(mutated, 1) if number not in inserted]
    assert kept == original


def test_fixed_block_count():
    point = SlicePoint('v', 20)
    result = DeadCodeMutator(blocks=3).mutate(DEAD_CODE_PROGRAM, set(), slice_point=point,
                                              rng=random.Random(11))
    assert result.line_offset == 3
    assert sum(count for _, count in result.context.inserted_lines) == 3
    program = JavaProgram.parse(result.program_text)
    # 插入块只引用声明之前可见的变量
    assert find_declaration_line(program, 'v') == 13
    assert result.program_text.count('(v') == DEAD_CODE_PROGRAM.count('(v')


def test_no_local_declaration_is_not_applicable():
    code = "class P {\n    int f(int p) {\n        return p;\n    }\n}\n"
    with pytest.raises(NoSafeMutationSite):
        DeadCodeMutator().mutate(code, set(), slice_point=SlicePoint('p', 3))

    result = MutationEngine().mutate(code, MutationKind.DEAD_CODE, set(), slice_point=SlicePoint('p', 3))
    assert not result.applied
    assert result.line_offset == 0
    assert result.program_text == code


def test_declaration_offset_requires_both_declarations(tmp_path):
    original = tmp_path / 'A.java'
    mutated = tmp_path / 'B.java'
    original.write_text("int x = 1;\n")
    mutated.write_text("int y = 1;\n")
    with pytest.raises(NoSlicePoint):
        declaration_line_offset(original, mutated, 'x')
    assert declaration_line_offset(original, mutated, 'x', mutated_variable='y') == 0


def test_single_block_keeps_anchor_statement():
    """插入块之后锚点语句本身原样保留"""
    code = ("class P {\n    void run() {\n        int a = 1;\n        int v = a;\n"
            "        System.out.println(v);\n    }\n}\n")
    result = DeadCodeMutator(blocks=1).mutate(code, set(), slice_point=SlicePoint('v', 5),
                                              rng=random.Random(0))
    assert result.applied
    assert result.line_offset == 1
    assert result.program_text.count("int v = a;") == 1
    assert result.program_text.count("int a = 1;") == 1
    JavaProgram.parse(result.program_text)
    assert find_declaration_line(result.program_text, 'v') == 5


STATIC_MAIN_PROGRAM = """public class P {
    int counter = 3;
    static int shared = 2;
    public static void main(String[] args) {
        int v = 1;
        v = v + shared;
        System.out.println(v);
    }
}
"""


@pytest.mark.parametrize("seed", range(30))
def test_static_method_blocks_skip_instance_fields(seed):
    """静态方法中的死代码块不引用实例字段"""
    result = DeadCodeMutator().mutate(STATIC_MAIN_PROGRAM, set(), slice_point=SlicePoint('v', 7),
                                      rng=random.Random(seed))
    inserted = [line for line in result.program_text.splitlines()
                if line.strip().startswith(('if (false)', 'for (int deadIdx'))]
    assert len(inserted) == result.line_offset
    assert not any('counter' in line for line in inserted)
