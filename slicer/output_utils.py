#!/usr/bin/env python3
"""
输出和文件保存工具
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union


def unit_directory(output_dir: Union[str, Path], kind: str) -> Path:
    """变异类型对应的输出目录 <dir>/<kind>"""
    directory = Path(output_dir) / kind
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def baseline_path(output_dir: Union[str, Path], kind: str, base_name: str,
                  extension: str = 'java') -> Path:
    """原程序副本路径 <dir>/<kind>/<baseName>.<ext>"""
    return unit_directory(output_dir, kind) / f"{base_name}.{extension}"


def mutant_path(output_dir: Union[str, Path], kind: str, base_name: str, index: int,
                extension: str = 'java') -> Path:
    """变异程序路径 <dir>/<kind>/<baseName>_<kind>_<index>.<ext>"""
    return unit_directory(output_dir, kind) / f"{base_name}_{kind}_{index}.{extension}"


def save_program(path: Union[str, Path], code: str) -> Path:
    """
    保存程序文本
    Returns:
        保存的文件路径
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(code, encoding='utf-8')
    return path


def save_report(results: Iterable[dict], summary: dict, output_dir: Union[str, Path],
                filename: Optional[str] = None) -> Path:
    """
    保存批量运行报告（JSON）

    Args:
        results: 每个测试单元的结果字典
        summary: 汇总统计
        output_dir: 输出目录
        filename: 报告文件名，默认带时间戳

    Returns:
        报告文件路径
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"metamorph_report_{timestamp}.json"
    report = {
        'generated_at': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'summary': summary,
        'units': list(results),
    }
    path = output_dir / filename
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return path


def list_programs(input_dir: Union[str, Path], extension: str = 'java') -> List[Path]:
    """输入目录下的全部程序文件（按名称排序）"""
    return sorted(Path(input_dir).glob(f'*.{extension}'))
