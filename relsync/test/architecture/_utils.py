from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_python_files(base: Path) -> list[Path]:
    files: list[Path] = []
    for path in sorted(base.rglob("*.py")):
        if any(part == "__pycache__" for part in path.parts):
            continue
        files.append(path)
    return files


def parse_imports(path: Path) -> list[ImportRef]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imports: list[ImportRef] = []

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(ImportRef(module=alias.name, line=node.lineno))
            continue

        if isinstance(node, ast.ImportFrom):
            if node.level and node.level > 0:
                continue
            if node.module is None:
                continue
            imports.append(ImportRef(module=node.module, line=node.lineno))

    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")
