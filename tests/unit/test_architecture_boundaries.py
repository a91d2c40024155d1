import ast
from pathlib import Path


def _imported_modules(py_file: Path):
    tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.lineno, node.module or ""


def _violations(layer: str, forbidden):
    repo_root = Path(__file__).resolve().parents[2]
    layer_dir = repo_root / "vtrim" / layer

    violations = []
    for py_file in layer_dir.rglob("*.py"):
        rel_path = py_file.relative_to(repo_root)
        for lineno, name in _imported_modules(py_file):
            for prefix in forbidden:
                if name == prefix or name.startswith(prefix + "."):
                    violations.append(f"{rel_path}:{lineno} imports {name}")
    return violations


def test_pipeline_layer_does_not_import_ui_layer():
    """Pipeline layer must not import from UI layer directly."""
    violations = _violations("pipeline", ["vtrim.ui"])
    assert not violations, "Pipeline layer must not import UI layer:\n" + "\n".join(violations)


def test_infrastructure_layer_does_not_import_pipeline_or_ui():
    violations = _violations("infrastructure", ["vtrim.pipeline", "vtrim.ui"])
    assert not violations, "Infrastructure must stay below pipeline and UI:\n" + "\n".join(violations)


def test_domain_layer_is_self_contained():
    """Domain models and errors must not depend on any outer layer."""
    violations = _violations("domain", ["vtrim.infrastructure", "vtrim.pipeline", "vtrim.ui", "vtrim.config"])
    assert not violations, "Domain layer imports outer layers:\n" + "\n".join(violations)
