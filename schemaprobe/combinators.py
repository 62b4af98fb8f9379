"""Evaluation of `allOf`, `anyOf` and `oneOf` candidate lists against one value."""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from schemaprobe.aggregator import Violation, ViolationKind
from schemaprobe.report import ReportWriter
from schemaprobe.schemanode import CombinatorKind, SchemaNode

logger = logging.getLogger(__name__)


@dataclass
class CandidateProbe:
    """Outcome of checking one candidate schema in isolation."""
    index: int
    label: str
    violations: List[Violation] = field(default_factory=list)
    report: ReportWriter = field(default_factory=ReportWriter)

    @property
    def passed(self) -> bool:
        return not self.violations


class CombinatorEvaluator:
    """
    Decides whether a value satisfies a combinator and reports why not.

    Each candidate is probed by walking it into a scratch aggregator and a buffered
    report, so a failing candidate keeps its detailed reasons (for example which
    required property it misses) while the final decision is taken on the whole
    list. Records of a satisfied combinator are dropped; records of an unsatisfied
    one are appended to the caller's aggregator in candidate order.
    """

    def __init__(self, walker) -> None:
        self.walker = walker

    def evaluate_all(self, node: SchemaNode, value: Any, ctx) -> None:
        """Evaluate every combinator keyword present on `node`, anyOf, allOf, oneOf in turn."""
        for kind, candidates in node.combinators:
            self.evaluate(ctx, kind, candidates, value)

    def evaluate(self, ctx, kind: CombinatorKind, candidates: Sequence[SchemaNode], value: Any) -> bool:
        """
        Evaluate one combinator.

        Args:
            ctx (ValidationContext): Context of the value being checked.
            kind (CombinatorKind): The combinator keyword.
            candidates (Sequence[SchemaNode]): The candidate schemas, in list order.
            value: The instance value.

        Returns:
            bool: True if the combinator is satisfied.
        """
        options = ctx.report.options
        total = len(candidates)
        probes: List[CandidateProbe] = []
        for index, candidate in enumerate(candidates):
            probe = self._probe(ctx, candidate, value, index, f"{kind.value} {index + 1} of {total}")
            probes.append(probe)
            if kind is CombinatorKind.ANY_OF and probe.passed and not options.verbose_combinators:
                break

        matched = [probe for probe in probes if probe.passed]
        if kind is CombinatorKind.ALL_OF:
            satisfied = len(matched) == total
        elif kind is CombinatorKind.ANY_OF:
            satisfied = bool(matched)
        else:
            satisfied = len(matched) == 1

        show_detail = not satisfied or options.verbose_combinators or not ctx.branch_is_valid
        for probe in probes:
            if show_detail:
                ctx.report.label(ctx.level, probe.label)
                ctx.report.merge(probe.report)
            if not satisfied and not (kind is CombinatorKind.ONE_OF and matched):
                ctx.errors.extend(probe.violations)

        if kind is CombinatorKind.ONE_OF and len(matched) > 1:
            numbers = ', '.join(str(probe.index + 1) for probe in matched)
            message = f"instance matched {len(matched)} of {total} oneOf candidates ({numbers}), expected exactly one"
            ctx.errors.record(Violation(ctx.path, message, ViolationKind.INVALID))
            ctx.report.failed(ctx.level, ctx.path, message)

        logger.debug("%s at %s: %d of %d candidates matched, satisfied=%s",
                     kind.value, ctx.path or '(root)', len(matched), total, satisfied)
        return satisfied

    def _probe(self, ctx, candidate: SchemaNode, value: Any, index: int, label: str) -> CandidateProbe:
        scratch = ctx.capturing(label)
        self.walker.walk(candidate, value, scratch)
        violations = scratch.errors.drain()
        if not violations:
            messages = self.walker.check_leaf(candidate, value)
            if messages:
                violations = [Violation(ctx.path, messages[0], ViolationKind.INVALID)]
                scratch.report.failed(scratch.level, ctx.path, messages[0])
        return CandidateProbe(index=index, label=scratch.key_name, violations=violations, report=scratch.report)
