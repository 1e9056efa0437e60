# ==============================
# Dependency Resolver
# ==============================
"""
Dependency resolution over a run's step list.

This module is intentionally small and pure:
- No persistence
- No scheduling
- No logging

A step is unblocked only when every dependency id maps to a step whose status is
exactly completed. Failed/skipped dependencies and unknown ids block.

Cycles are not checked by default. find_dependency_cycle() and
next_executable_steps(check_cycles=True) exist as an opt-in safety net.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Sequence, Set

from agentrun.contracts.step_schema import OrchestrationStep, StepStatus


class DependencyCycleError(ValueError):
    """Raised (opt-in only) when the step graph contains a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")


def _index(steps: Sequence[OrchestrationStep]) -> Dict[str, OrchestrationStep]:
    # first occurrence wins for duplicate ids
    out: Dict[str, OrchestrationStep] = {}
    for s in steps:
        out.setdefault(s.step_id, s)
    return out


def _satisfied(step: OrchestrationStep, by_id: Mapping[str, OrchestrationStep]) -> bool:
    for dep_id in step.dependencies:
        dep = by_id.get(dep_id)
        if dep is None or dep.status != StepStatus.COMPLETED:
            return False
    return True


def dependencies_satisfied(step: OrchestrationStep, all_steps: Sequence[OrchestrationStep]) -> bool:
    """True iff `step` has no dependencies or all of them are completed in `all_steps`."""
    if not step.dependencies:
        return True
    return _satisfied(step, _index(all_steps))


def next_executable_steps(
    steps: Sequence[OrchestrationStep],
    *,
    check_cycles: bool = False,
) -> List[OrchestrationStep]:
    """
    Dependency frontier: pending steps whose dependencies are satisfied.

    Input order is preserved; callers pre-sort if priority matters.
    """
    if check_cycles:
        cycle = find_dependency_cycle(steps)
        if cycle:
            raise DependencyCycleError(cycle)

    by_id = _index(steps)
    return [s for s in steps if s.status == StepStatus.PENDING and _satisfied(s, by_id)]


def find_dependency_cycle(steps: Sequence[OrchestrationStep]) -> List[str]:
    """
    Return the step ids of one dependency cycle (first id repeated at the end),
    or [] when the graph is acyclic. Unknown dependency ids are ignored.
    """
    by_id = _index(steps)
    done: Set[str] = set()

    for root in by_id:
        if root in done:
            continue
        # iterative DFS; path mirrors the stack of dependency iterators
        path: List[str] = [root]
        on_path: Set[str] = {root}
        stack: List[Iterator[str]] = [iter(by_id[root].dependencies)]
        while stack:
            dep = next(stack[-1], None)
            if dep is None:
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                stack.pop()
                continue
            if dep not in by_id or dep in done:
                continue
            if dep in on_path:
                return path[path.index(dep):] + [dep]
            path.append(dep)
            on_path.add(dep)
            stack.append(iter(by_id[dep].dependencies))
    return []
