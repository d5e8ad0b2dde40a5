#!/usr/bin/env python3
"""
Metamorphic test orchestrator

Each (baseline, mutation kind) pair is an independent unit:
select slice point -> analyze -> mutate -> persist -> slice both programs -> compare.
Units run on a bounded thread pool and share only the lock-protected result list.
"""

import random
import threading
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from analysis import DependencyAnalyzer, SliceRelevancePolicy
from analysis.visualization import visualize_dependency_graph
from comparator import EquivalenceChecker
from generator import TemplateGenerator
from mutation import MutationContext, MutationEngine, MutationKind
from parser import JavaProgram, ParseFailure
from slicer import (ExternalToolFailure, NoSlicePoint, SliceExecutor, SlicePoint,
                    SlicePointSelector, Verdict, declaration_line_offset)
from slicer.output_utils import (baseline_path, list_programs, mutant_path, save_program,
                                 save_report, unit_directory)

from .config_parser import RunConfig
from .log import log_error, log_info, log_success, log_warning


@dataclass
class Baseline:
    """A baseline program and the name used for its files"""
    name: str
    code: str
    source: Optional[str] = None


@dataclass
class UnitResult:
    """Outcome of one (baseline, kind) unit"""
    baseline: str
    kind: MutationKind
    verdict: Verdict
    index: int = 0
    slice_point: Optional[SlicePoint] = None
    mutant_point: Optional[SlicePoint] = None
    baseline_file: Optional[str] = None
    mutant_file: Optional[str] = None
    reason: str = ''
    context: Optional[MutationContext] = field(default=None, repr=False)

    def to_dict(self) -> Dict:
        return {
            'baseline': self.baseline,
            'kind': self.kind.value,
            'index': self.index,
            'verdict': self.verdict.value,
            'slice_point': str(self.slice_point) if self.slice_point else None,
            'mutant_point': str(self.mutant_point) if self.mutant_point else None,
            'baseline_file': self.baseline_file,
            'mutant_file': self.mutant_file,
            'reason': self.reason,
            'rename_map': dict(self.context.rename_map) if self.context else {},
        }


@dataclass
class BatchSummary:
    """Verdict counts; the pass rate only covers units where the relation was actually tested"""
    total: int = 0
    passed: int = 0
    failed: int = 0
    inconclusive: int = 0
    not_applicable: int = 0
    errors: int = 0

    @classmethod
    def from_results(cls, results: Iterable[UnitResult]) -> 'BatchSummary':
        summary = cls()
        for result in results:
            summary.total += 1
            if result.verdict == Verdict.PASS:
                summary.passed += 1
            elif result.verdict == Verdict.FAIL:
                summary.failed += 1
            elif result.verdict == Verdict.INCONCLUSIVE:
                summary.inconclusive += 1
            elif result.verdict == Verdict.NOT_APPLICABLE:
                summary.not_applicable += 1
            else:
                summary.errors += 1
        return summary

    @property
    def tested(self) -> int:
        return self.passed + self.failed

    @property
    def pass_rate(self) -> Optional[float]:
        if self.tested == 0:
            return None
        return self.passed / self.tested

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'passed': self.passed,
            'failed': self.failed,
            'inconclusive': self.inconclusive,
            'not_applicable': self.not_applicable,
            'errors': self.errors,
            'pass_rate': self.pass_rate,
        }


class Orchestrator:
    """Wires generator, selector, analyzer, mutators, slicer and checker together"""

    def __init__(self, config: RunConfig,
                 analyzer: Optional[DependencyAnalyzer] = None,
                 engine: Optional[MutationEngine] = None,
                 selector: Optional[SlicePointSelector] = None,
                 executor: Optional[SliceExecutor] = None,
                 checker: Optional[EquivalenceChecker] = None):
        """
        Args:
            config: Resolved run configuration
            analyzer: Dependency analyzer, built from the configured relevance pattern by default
            engine: Mutation engine
            selector: Slice point selector
            executor: Slicer under test
            checker: Slice equivalence checker
        """
        self.config = config
        if analyzer is None:
            policy = SliceRelevancePolicy(config.relevance_pattern) if config.relevance_pattern \
                else SliceRelevancePolicy.disabled()
            analyzer = DependencyAnalyzer(policy)
        self.analyzer = analyzer
        self.engine = engine or MutationEngine(self.analyzer, dead_code_blocks=config.dead_code_blocks)
        self.selector = selector or SlicePointSelector()
        self.executor = executor or SliceExecutor(
            jar=config.slicer_jar,
            command=config.slicer_command,
            output_dir=config.slice_output_dir,
            timeout=config.timeout,
        )
        self.checker = checker or EquivalenceChecker()
        self.output_dir = Path(config.output_dir)
        self._results: List[UnitResult] = []
        self._lock = threading.Lock()

    def generate_baselines(self, count: Optional[int] = None, seed: Optional[int] = None) -> List[Baseline]:
        """Generate baselines, baseline i uses seed + i"""
        count = self.config.count if count is None else count
        seed = self.config.seed if seed is None else seed
        generator = TemplateGenerator()
        baselines = []
        for i in range(count):
            name = f"Baseline{i}"
            baselines.append(Baseline(name=name, code=generator.generate(seed + i, class_name=name)))
        return baselines

    def load_baselines(self, input_dir: str) -> List[Baseline]:
        """Read every .java file of a directory as a baseline"""
        baselines = []
        for path in list_programs(input_dir):
            baselines.append(Baseline(name=path.stem, code=path.read_text(encoding='utf-8'), source=str(path)))
        if not baselines:
            log_warning(f"No .java files found in {input_dir}")
        return baselines

    def run(self, baselines: List[Baseline], kinds: Optional[Iterable] = None) -> List[UnitResult]:
        """
        Run every (baseline, kind) unit

        Args:
            baselines: Baseline programs
            kinds: Mutation kinds, defaults to the configured kinds

        Returns:
            Unit results in completion order
        """
        kinds = [MutationKind.parse(kind) for kind in (kinds or self.config.kinds)]
        units = [(baseline, kind, i * len(kinds) + k)
                 for i, baseline in enumerate(baselines)
                 for k, kind in enumerate(kinds)]
        self._results = []
        log_info(f"Running {len(units)} units on {self.config.max_workers} workers")

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            future_to_unit = {
                executor.submit(self.run_unit, baseline, kind, index): (baseline.name, kind)
                for baseline, kind, index in units
            }
            for future in as_completed(future_to_unit):
                # Mutator invariant violations propagate and abort the batch
                result = future.result()
                with self._lock:
                    self._results.append(result)
                self._log_result(result)

        return list(self._results)

    def run_unit(self, baseline: Baseline, kind: MutationKind, index: int) -> UnitResult:
        """
        Process one unit; parse, selection and tool failures are recovered here

        Args:
            baseline: Baseline program
            kind: Mutation kind
            index: Unit index, also the offset of this unit's seed

        Returns:
            UnitResult
        """
        rng = random.Random(self.config.seed + index)
        result = UnitResult(baseline=baseline.name, kind=kind, verdict=Verdict.ERROR, index=index)

        try:
            program = JavaProgram.parse(baseline.code)
            point = self.selector.select_or_raise(program)
            result.slice_point = point
            analysis = self.analyzer.analyze(program, point.variable)
            mutation = self.engine.mutate(program, kind, analysis.protected, slice_point=point, rng=rng)
        except (ParseFailure, NoSlicePoint) as e:
            result.reason = str(e)
            return result

        result.context = mutation.context
        if not mutation.applied:
            result.verdict = Verdict.NOT_APPLICABLE
            result.reason = '; '.join(mutation.context.notes) if mutation.context else ''
            return result

        unit_dir = unit_directory(self.output_dir, kind.value)
        baseline_file = save_program(baseline_path(self.output_dir, kind.value, baseline.name), program.print())
        mutant_file = save_program(mutant_path(self.output_dir, kind.value, baseline.name, index),
                                   mutation.program_text)
        result.baseline_file = str(baseline_file)
        result.mutant_file = str(mutant_file)

        if self.config.dump_graph:
            visualize_dependency_graph(analysis.graph, analysis.protected,
                                       filename=str(unit_dir / f"{baseline.name}_deps"))

        mutant_point = point
        if mutation.context is not None:
            mutant_point = point.renamed(mutation.context.renamed(point.variable))
        if kind == MutationKind.DEAD_CODE:
            try:
                offset = declaration_line_offset(baseline_file, mutant_file, point.variable,
                                                 mutant_point.variable)
            except NoSlicePoint as e:
                result.reason = str(e)
                return result
            mutant_point = mutant_point.shifted(offset)
        elif mutation.line_offset:
            mutant_point = mutant_point.shifted(mutation.line_offset)
        result.mutant_point = mutant_point

        try:
            slice_a = self.executor.execute(baseline_file, point, cwd=unit_dir).slice_text
            slice_b = self.executor.execute(mutant_file, mutant_point, cwd=unit_dir).slice_text
        except ExternalToolFailure as e:
            result.verdict = Verdict.INCONCLUSIVE
            result.reason = str(e)
            return result

        report = self.checker.explain(slice_a, slice_b)
        result.verdict = Verdict.PASS if report.equivalent else Verdict.FAIL
        result.reason = report.reason if not report.detail else f"{report.reason}: {report.detail}"
        return result

    def write_report(self, results: List[UnitResult], summary: BatchSummary) -> Path:
        return save_report([r.to_dict() for r in results], summary.to_dict(), self.output_dir)

    @staticmethod
    def _log_result(result: UnitResult):
        label = f"{result.baseline} [{result.kind.value}]"
        if result.verdict == Verdict.PASS:
            log_success(f"{label} slices equivalent at {result.slice_point} / {result.mutant_point}")
        elif result.verdict == Verdict.FAIL:
            log_error(f"{label} slices differ at {result.slice_point} / {result.mutant_point}: {result.reason}")
        elif result.verdict == Verdict.INCONCLUSIVE:
            log_warning(f"{label} inconclusive: {result.reason}")
        elif result.verdict == Verdict.NOT_APPLICABLE:
            log_info(f"{label} no safe mutation site")
        else:
            log_warning(f"{label} skipped: {result.reason}")
