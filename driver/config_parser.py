#!/usr/bin/env python3
"""
Configuration file parser
For parsing the YAML configuration of a metamorphic slicer test run
"""

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from mutation import MutationKind
from slicer import DEFAULT_COMMAND

DEFAULT_CONFIG_PATH = Path(__file__).parent / 'config.yaml'

ENV_OVERRIDES = {
    'METAMORPH_SLICER_JAR': ('slicer', 'jar', str),
    'METAMORPH_TIMEOUT': ('slicer', 'timeout', float),
    'METAMORPH_WORKERS': ('run', 'workers', int),
    'METAMORPH_OUTPUT_DIR': ('output', 'dir', str),
    'METAMORPH_SEED': ('run', 'seed', int),
}


@dataclass
class RunConfig:
    """Resolved settings for one batch run"""
    slicer_jar: Optional[str] = None
    slicer_command: str = DEFAULT_COMMAND
    slice_output_dir: str = 'slice'
    timeout: Optional[float] = 120
    count: int = 10
    seed: int = 42
    kinds: List[MutationKind] = field(default_factory=lambda: list(MutationKind))
    workers: Optional[int] = None
    dead_code_blocks: Optional[int] = None
    relevance_pattern: Optional[str] = None
    output_dir: str = 'output'
    input_dir: Optional[str] = None
    write_report: bool = True
    dump_graph: bool = False

    @property
    def max_workers(self) -> int:
        return self.workers or os.cpu_count() or 1


class ConfigParser:
    """Configuration file parser"""

    def __init__(self, config_path: Optional[str] = None, base_dir: Optional[str] = None,
                 env_file: Optional[str] = None):
        """
        Initialize configuration parser

        Args:
            config_path: Configuration file path, defaults to driver/config.yaml
            base_dir: Base directory for relative paths, defaults to the configuration file's directory
            env_file: .env file with overrides, defaults to <base_dir>/.env when present
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        self.base_dir = Path(base_dir) if base_dir else self.config_path.parent
        self.env_file = Path(env_file) if env_file else self.base_dir / '.env'

        self._config_data = self._load_config()
        self._validate_config()
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"YAML parsing error: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")
        return data

    def _validate_config(self):
        """Validate required sections and fields"""
        required_sections = ['slicer', 'run', 'output']
        for section in required_sections:
            if not isinstance(self._config_data.get(section), dict):
                raise ValueError(f"Missing required configuration section: {section}")

        if 'command' in self._config_data['slicer']:
            command = self._config_data['slicer']['command']
            for placeholder in ('{file}', '{line}', '{variable}'):
                if placeholder not in command:
                    raise ValueError(f"Slicer command is missing placeholder {placeholder}: {command}")

        for kind in self._config_data['run'].get('kinds') or []:
            MutationKind.parse(kind)

    def _apply_env_overrides(self):
        """Apply .env file and environment variable overrides"""
        if self.env_file.exists():
            load_dotenv(self.env_file, override=True)
        for variable, (section, key, convert) in ENV_OVERRIDES.items():
            value = os.getenv(variable)
            if value is None or value == '':
                continue
            try:
                self._config_data[section][key] = convert(value)
            except ValueError:
                raise ValueError(f"Invalid value for {variable}: {value!r}")

    def get_slicer_config(self) -> Dict[str, Any]:
        """Get slicer invocation configuration"""
        slicer = self._config_data['slicer']
        return {
            'jar': self._resolve(slicer.get('jar')),
            'command': slicer.get('command', DEFAULT_COMMAND),
            'output_dir': slicer.get('output_dir', 'slice'),
            'timeout': slicer.get('timeout', 120),
        }

    def get_run_config(self) -> Dict[str, Any]:
        """Get batch run configuration"""
        run = self._config_data['run']
        kinds = run.get('kinds') or [kind.value for kind in MutationKind]
        return {
            'count': int(run.get('count', 10)),
            'seed': int(run.get('seed', 42)),
            'kinds': [MutationKind.parse(kind) for kind in kinds],
            'workers': run.get('workers'),
            'dead_code_blocks': run.get('dead_code_blocks'),
            'relevance_pattern': run.get('relevance_pattern') or None,
        }

    def get_output_dir(self) -> str:
        """Get output directory"""
        return str(self._resolve(self._config_data['output'].get('dir', 'output')))

    def to_run_config(self, **overrides) -> RunConfig:
        """
        Build a RunConfig, command line values (non-None) override the file and environment

        Args:
            overrides: RunConfig field values from the command line
        """
        slicer = self.get_slicer_config()
        run = self.get_run_config()
        output = self._config_data['output']
        config = RunConfig(
            slicer_jar=slicer['jar'],
            slicer_command=slicer['command'],
            slice_output_dir=slicer['output_dir'],
            timeout=slicer['timeout'],
            count=run['count'],
            seed=run['seed'],
            kinds=run['kinds'],
            workers=run['workers'],
            dead_code_blocks=run['dead_code_blocks'],
            relevance_pattern=run['relevance_pattern'],
            output_dir=self.get_output_dir(),
            write_report=bool(output.get('report', True)),
            dump_graph=bool(output.get('dump_graph', False)),
        )
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(config, key):
                raise ValueError(f"Unknown configuration field: {key}")
            if key == 'kinds':
                value = [MutationKind.parse(kind) for kind in value]
            setattr(config, key, value)
        return config

    def _resolve(self, value: Optional[str]) -> Optional[str]:
        """Relative paths are resolved against the base directory"""
        if value is None:
            return None
        path = Path(value)
        if path.is_absolute():
            return str(path)
        return str(self.base_dir / path)
