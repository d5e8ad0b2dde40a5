#!/usr/bin/env python3
"""
测试外部切片工具调用（使用伪切片工具脚本）
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from slicer import ExternalToolFailure, SliceExecutor, SlicePoint


SOURCE = "public class A { int f() { int x = 1; return x; } }\n"


def write_source(directory: Path, name: str = 'A.java') -> Path:
    path = directory / name
    path.write_text(SOURCE, encoding='utf-8')
    return path


def test_build_command_default_template():
    executor = SliceExecutor(jar='tool.jar')
    assert executor.build_command('A.java', 7, 'x') == ['java', '-jar', 'tool.jar', '-c', 'A.java#7:x']


def test_build_command_keeps_paths_with_spaces_together():
    executor = SliceExecutor(command="slicer --file {file} --criterion {line}:{variable}")
    command = executor.build_command('/tmp/my dir/A.java', 3, 'v')
    assert command == ['slicer', '--file', '/tmp/my dir/A.java', '--criterion', '3:v']


def test_execute_reads_output_file(tmp_path, copy_slicer):
    source = write_source(tmp_path)
    executor = SliceExecutor(command=copy_slicer, timeout=30)
    run = executor.execute(source, SlicePoint('x', 1), cwd=tmp_path)
    assert run.exit_code == 0
    assert run.slice_text == SOURCE
    assert Path(run.output_file) == tmp_path / 'slice' / 'A.java'
    assert run.command[-3:] == [str(source.resolve()), '1', 'x']
    assert executor.run(source, 1, 'x', cwd=tmp_path) == SOURCE


def test_nonzero_exit(tmp_path, failing_slicer):
    source = write_source(tmp_path)
    with pytest.raises(ExternalToolFailure) as info:
        SliceExecutor(command=failing_slicer, timeout=30).execute(source, SlicePoint('x', 1), cwd=tmp_path)
    assert info.value.exit_code == 3
    assert 'cannot slice' in info.value.output


def test_missing_output_lists_checked_paths(tmp_path, silent_slicer):
    source = write_source(tmp_path)
    with pytest.raises(ExternalToolFailure) as info:
        SliceExecutor(command=silent_slicer, timeout=30).execute(source, SlicePoint('x', 1), cwd=tmp_path)
    assert info.value.exit_code == 0
    assert str(tmp_path / 'slice' / 'A.java') in info.value.checked_paths
    # 源文件本身不算输出
    assert str(source.resolve()) not in info.value.checked_paths


def test_stale_output_is_removed(tmp_path, silent_slicer):
    """上一次调用留下的同名输出不会被当作本次结果"""
    source = write_source(tmp_path)
    stale = tmp_path / 'slice' / 'A.java'
    stale.parent.mkdir()
    stale.write_text("int stale = 0;\n")
    with pytest.raises(ExternalToolFailure):
        SliceExecutor(command=silent_slicer, timeout=30).execute(source, SlicePoint('x', 1), cwd=tmp_path)
    assert not stale.exists()


def test_timeout(tmp_path, slow_slicer):
    source = write_source(tmp_path)
    with pytest.raises(ExternalToolFailure) as info:
        SliceExecutor(command=slow_slicer, timeout=0.5).execute(source, SlicePoint('x', 1), cwd=tmp_path)
    assert 'timed out' in str(info.value)


def test_tool_cannot_start(tmp_path):
    source = write_source(tmp_path)
    executor = SliceExecutor(command="no-such-slicer-binary-on-path {file} {line} {variable}")
    with pytest.raises(ExternalToolFailure):
        executor.execute(source, SlicePoint('x', 1), cwd=tmp_path)


def test_missing_source(tmp_path, copy_slicer):
    with pytest.raises(ExternalToolFailure):
        SliceExecutor(command=copy_slicer).execute(tmp_path / 'Missing.java', SlicePoint('x', 1), cwd=tmp_path)
