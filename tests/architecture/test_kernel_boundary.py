"""
Kernel Boundary & Invariants Contract.

Tests that enforce the kernel's architectural boundaries:

1. warehouse_kernel/** may NOT import warehouse_services or
   warehouse_config. The kernel never depends upward.

2. warehouse_kernel/domain/** is pure: no ORM, driver or model imports
   at runtime (TYPE_CHECKING imports are allowed).

3. Only warehouse_services commits transactions; the kernel flushes and
   its db package offers a session factory, not a transaction scope.

4. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from warehouse_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

REPO_ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(root: str) -> list[Path]:
    """Return all .py files under REPO_ROOT/root."""
    return sorted((REPO_ROOT / root).rglob("*.py"))


def _display(path: Path) -> str:
    return str(path.relative_to(REPO_ROOT))


def _parse(path: Path) -> ast.Module:
    return ast.parse(path.read_text(), filename=str(path))


def _type_checking_lines(tree: ast.Module) -> set[int]:
    """Line numbers of every statement nested in an ``if TYPE_CHECKING:`` block."""
    lines: set[int] = set()
    for node in ast.walk(tree):
        if not isinstance(node, ast.If):
            continue
        test = node.test
        is_type_checking = (isinstance(test, ast.Name) and test.id == "TYPE_CHECKING") or (
            isinstance(test, ast.Attribute) and test.attr == "TYPE_CHECKING"
        )
        if is_type_checking:
            for child in node.body:
                for inner in ast.walk(child):
                    if hasattr(inner, "lineno"):
                        lines.add(inner.lineno)
    return lines


def _extract_imports(path: Path, *, runtime_only: bool = False) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = _parse(path)
    skipped = _type_checking_lines(tree) if runtime_only else set()

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if getattr(node, "lineno", None) in skipped:
            continue
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(f"{prefix}.")


# ---------------------------------------------------------------------------
# Test: Kernel has no upward dependencies
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    """warehouse_kernel/** must not import warehouse_services or warehouse_config."""

    def test_kernel_does_not_import_forbidden_packages(self):
        violations: list[str] = []

        for path in _python_files("warehouse_kernel"):
            for lineno, module in _extract_imports(path):
                for prefix in FORBIDDEN_KERNEL_IMPORTS:
                    if _matches(module, prefix):
                        violations.append(f"  {_display(path)}:{lineno} imports '{module}'")

        assert not violations, (
            "Kernel boundary violation: warehouse_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )

    def test_config_does_not_import_services(self):
        violations: list[str] = []

        for path in _python_files("warehouse_config"):
            for lineno, module in _extract_imports(path):
                if _matches(module, "warehouse_services"):
                    violations.append(f"  {_display(path)}:{lineno} imports '{module}'")

        assert not violations, "\n".join(violations)


# ---------------------------------------------------------------------------
# Test: Kernel domain purity
# ---------------------------------------------------------------------------


class TestKernelDomainPurity:
    """warehouse_kernel/domain/** must not import ORM or DB packages at runtime."""

    FORBIDDEN_MODULES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "warehouse_kernel.db",
        "warehouse_kernel.models",
        "warehouse_kernel.stores",
        "warehouse_kernel.services",
    )

    def test_domain_no_orm_imports(self):
        violations: list[str] = []

        for path in _python_files("warehouse_kernel/domain"):
            for lineno, module in _extract_imports(path, runtime_only=True):
                for forbidden in self.FORBIDDEN_MODULES:
                    if _matches(module, forbidden):
                        violations.append(f"  {_display(path)}:{lineno} imports '{module}'")

        assert not violations, (
            "Domain purity violation: warehouse_kernel/domain/** must not "
            "import ORM/DB packages at runtime:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Transaction ownership
# ---------------------------------------------------------------------------


class TestTransactionOwnership:
    """Kernel db, services, stores and selectors flush; they never commit or roll back."""

    def test_kernel_layers_never_commit(self):
        violations: list[str] = []

        for layer in ("db", "services", "stores", "selectors", "domain"):
            for path in _python_files(f"warehouse_kernel/{layer}"):
                for node in ast.walk(_parse(path)):
                    if (
                        isinstance(node, ast.Call)
                        and isinstance(node.func, ast.Attribute)
                        and node.func.attr in ("commit", "rollback")
                    ):
                        violations.append(
                            f"  {_display(path)}:{node.lineno} calls .{node.func.attr}()"
                        )

        assert not violations, (
            "Transaction ownership violation: only warehouse_services may "
            "commit or roll back:\n" + "\n".join(violations)
        )

    def test_db_package_exposes_no_transaction_scope(self):
        import warehouse_kernel.db as db
        import warehouse_kernel.db.engine as engine

        for module in (db, engine):
            assert not hasattr(module, "session_scope")
            assert not hasattr(module, "get_session")
        assert hasattr(db, "get_session_factory")


# ---------------------------------------------------------------------------
# Test: Invariants declaration exists and is complete
# ---------------------------------------------------------------------------


class TestKernelInvariantsDeclaration:
    """The kernel invariants contract must be declared and complete."""

    def test_invariants_non_empty(self):
        assert len(ALL_KERNEL_INVARIANTS) > 0

    def test_required_invariants_declared(self):
        required = {
            "CAPACITY_CONSERVATION",
            "CAPACITY_BOUND",
            "POSITIVE_QUANTITY",
            "SKU_UNIQUE_PER_WAREHOUSE",
            "EXCLUSIVE_OWNERSHIP",
            "ALL_OR_NOTHING",
        }
        declared = {inv.name for inv in KernelInvariant}
        missing = required - declared
        assert not missing, f"Missing kernel invariants: {missing}"

    def test_forbidden_imports_declared(self):
        for pkg in ("warehouse_services", "warehouse_config"):
            assert pkg in FORBIDDEN_KERNEL_IMPORTS, f"'{pkg}' not in FORBIDDEN_KERNEL_IMPORTS"
