#!/usr/bin/env python3
"""
测试公共夹具：伪切片工具脚本、环境变量隔离
"""

import sys
import shlex
import textwrap
from pathlib import Path

import pytest

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from driver.config_parser import ENV_OVERRIDES


# 把源文件原样复制到 <cwd>/slice/<文件名>，相当于"整个程序就是切片"
COPY_SLICER = textwrap.dedent("""
    import shutil
    import sys
    from pathlib import Path

    source = Path(sys.argv[1])
    out = Path('slice')
    out.mkdir(exist_ok=True)
    shutil.copy(source, out / source.name)
""")

FAILING_SLICER = textwrap.dedent("""
    import sys
    sys.stderr.write('cannot slice\\n')
    sys.exit(3)
""")

SILENT_SLICER = "pass\n"

SLOW_SLICER = textwrap.dedent("""
    import time
    time.sleep(10)
""")


def slicer_command(script: Path) -> str:
    """伪切片工具的命令模板"""
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))} {{file}} {{line}} {{variable}}"


def _write_script(directory: Path, name: str, body: str) -> str:
    script = directory / name
    script.write_text(body, encoding='utf-8')
    return slicer_command(script)


@pytest.fixture
def copy_slicer(tmp_path):
    return _write_script(tmp_path, 'copy_slicer.py', COPY_SLICER)


@pytest.fixture
def failing_slicer(tmp_path):
    return _write_script(tmp_path, 'failing_slicer.py', FAILING_SLICER)


@pytest.fixture
def silent_slicer(tmp_path):
    return _write_script(tmp_path, 'silent_slicer.py', SILENT_SLICER)


@pytest.fixture
def slow_slicer(tmp_path):
    return _write_script(tmp_path, 'slow_slicer.py', SLOW_SLICER)


@pytest.fixture
def clean_env(monkeypatch):
    """屏蔽外部环境中的覆盖变量，测试结束后恢复"""
    for variable in ENV_OVERRIDES:
        monkeypatch.setenv(variable, '')
    return monkeypatch
