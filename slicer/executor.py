#!/usr/bin/env python3
"""
外部切片工具调用

以子进程方式运行被测切片工具（默认 java -jar <jar> -c <file>#<line>:<variable>），
工具把切片结果写到输出目录下与源文件同名的文件中。
"""

import os
import shlex
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from .errors import ExternalToolFailure
from .models import SlicePoint, SliceRun

logger = logging.getLogger(__name__)


DEFAULT_COMMAND = "java -jar {jar} -c {file}#{line}:{variable}"
DEFAULT_TIMEOUT = 120


class SliceExecutor:
    """外部切片工具执行器，每次调用相互独立，可被多个工作线程共享"""

    def __init__(self, jar: Optional[str] = None, command: str = DEFAULT_COMMAND,
                 output_dir: str = 'slice', timeout: Optional[float] = DEFAULT_TIMEOUT,
                 env: Optional[dict] = None):
        """
        初始化执行器

        Args:
            jar: 切片工具路径，替换命令模板中的 {jar}
            command: 命令模板，可用占位符 {jar} {file} {line} {variable}
            output_dir: 工具的切片输出目录（相对路径按工作目录解析）
            timeout: 单次调用超时秒数，None表示不限
            env: 额外环境变量
        """
        self.jar = jar
        self.command = command
        self.output_dir = output_dir
        self.timeout = timeout
        self.env = env or {}

    def build_command(self, path: Union[str, Path], line: int, variable: str) -> List[str]:
        """先按shell规则切分模板再逐项替换，路径中的空格不会破坏参数"""
        values = {
            'jar': self.jar or '',
            'file': str(path),
            'line': line,
            'variable': variable,
        }
        return [token.format(**values) for token in shlex.split(self.command)]

    def candidate_outputs(self, path: Union[str, Path], cwd: Union[str, Path]) -> List[Path]:
        """可能的输出文件位置：<out>/<name>、<out>/**/<name>、工作目录/<name>"""
        name = Path(path).name
        out = Path(cwd) / self.output_dir
        candidates = [out / name]
        if out.is_dir():
            candidates.extend(p for p in sorted(out.glob(f'**/{name}')) if p not in candidates)
        candidates.append(Path(cwd) / name)
        source = Path(path).resolve()
        return [p for p in candidates if p.resolve() != source]

    def execute(self, path: Union[str, Path], point: SlicePoint,
                cwd: Optional[Union[str, Path]] = None) -> SliceRun:
        """
        对文件运行一次切片

        Args:
            path: 已落盘的程序文件
            point: 切片点
            cwd: 工具的工作目录，默认当前目录

        Returns:
            SliceRun

        Raises:
            ExternalToolFailure: 工具无法启动、超时、非零退出或没有产生输出文件
        """
        path = Path(path).resolve()
        cwd = Path(cwd) if cwd is not None else Path.cwd()
        if not path.exists():
            raise ExternalToolFailure(f"Source file does not exist: {path}")

        command = self.build_command(path, point.line, point.variable)
        run = SliceRun(source_file=str(path), point=point, command=command)

        # 清理上一次调用留下的同名输出
        for stale in self.candidate_outputs(path, cwd):
            if stale.is_file():
                stale.unlink()

        logger.info(f"Executing slicer: {' '.join(command)}")
        env = dict(os.environ)
        env.update(self.env)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=str(cwd),
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalToolFailure(f"Slicer timed out after {self.timeout}s on {path.name}",
                                      output=str(e.stdout or '')) from e
        except OSError as e:
            raise ExternalToolFailure(f"Slicer could not be started: {e}") from e

        run.exit_code = result.returncode
        run.tool_output = (result.stdout or '') + (result.stderr or '')
        if result.returncode != 0:
            raise ExternalToolFailure(
                f"Slice execution failed with exit code {result.returncode} on {path.name}",
                exit_code=result.returncode, output=run.tool_output)

        checked = self.candidate_outputs(path, cwd)
        for candidate in checked:
            if candidate.is_file():
                run.output_file = str(candidate)
                run.slice_text = candidate.read_text(encoding='utf-8')
                logger.debug(f"Found slice output at {candidate} ({len(run.slice_text)} chars)")
                return run

        raise ExternalToolFailure(
            f"No slice output file found for {path.name}",
            exit_code=result.returncode, output=run.tool_output,
            checked_paths=[str(p) for p in checked])

    def run(self, path: Union[str, Path], line: int, variable: str,
            cwd: Optional[Union[str, Path]] = None) -> str:
        """Slicer.run(path, line, variable) -> 切片文本"""
        return self.execute(path, SlicePoint(variable, line), cwd=cwd).slice_text
