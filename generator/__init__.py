"""
基准程序生成模块
"""

from .template_generator import TemplateGenerator, VARIABLE_NAMES

__all__ = [
    'TemplateGenerator',
    'VARIABLE_NAMES',
]
