from __future__ import annotations

# ==============================
# Tests: Architecture Guardrails
# ==============================

import ast
from pathlib import Path
from typing import Iterable, List, Tuple

REPO_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = REPO_ROOT / "agentrun"

# Pure modules: no I/O, no logging, no environment access.
PURE_MODULES = (
    "orchestrator/steps.py",
    "orchestrator/dependencies.py",
    "orchestrator/progress.py",
    "orchestrator/csi.py",
    "orchestrator/thread_status.py",
    "orchestrator/state.py",
    "orchestrator/decomposition.py",
)
PURE_FORBIDDEN = ("os", "logging", "agentrun.logging", "agentrun.config", "threading", "asyncio")


def _imports(path: Path) -> Iterable[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom) and node.module:
            yield node.module


def _matches(module: str, prefixes: Iterable[str]) -> bool:
    return any(module == p or module.startswith(p + ".") for p in prefixes)


def test_pure_modules_have_no_side_effect_imports() -> None:
    offenders: List[Tuple[str, str]] = []
    for rel in PURE_MODULES:
        path = PACKAGE_ROOT / rel
        offenders.extend((rel, m) for m in _imports(path) if _matches(m, PURE_FORBIDDEN))
    if offenders:
        details = "\n".join(f"{path}: {module}" for path, module in offenders)
        raise AssertionError(f"Forbidden imports in pure modules:\n{details}")


def test_only_loader_reads_environment() -> None:
    offenders: List[str] = []
    for path in PACKAGE_ROOT.rglob("*.py"):
        if path.name == "loader.py":
            continue
        source = path.read_text(encoding="utf-8")
        if "os.environ" in source or "getenv(" in source:
            offenders.append(str(path.relative_to(REPO_ROOT)))
    assert offenders == []


def test_contracts_do_not_import_orchestrator() -> None:
    offenders: List[Tuple[str, str]] = []
    for path in (PACKAGE_ROOT / "contracts").rglob("*.py"):
        offenders.extend((path.name, m) for m in _imports(path) if _matches(m, ("agentrun.orchestrator",)))
    assert offenders == []
