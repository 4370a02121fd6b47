from __future__ import annotations

import pytest

from reltrack.test.architecture._gate import require_arch_checks_enabled
from reltrack.test.architecture._utils import (
    iter_python_files,
    matches_prefix,
    package_root,
    parse_imports,
)

# layer -> packages it must never import
RULES: dict[str, tuple[str, ...]] = {
    "core": ("reltrack.api", "reltrack.services", "reltrack.cli", "reltrack.output", "typer", "rich"),
    "platform": ("reltrack.api", "reltrack.services", "reltrack.cli", "typer", "rich"),
    "api": ("reltrack.services", "reltrack.cli", "reltrack.output", "typer", "rich"),
    "services": ("reltrack.cli", "typer", "rich"),
    "output": ("reltrack.api", "reltrack.services", "reltrack.cli", "typer"),
}


@pytest.mark.parametrize("layer", sorted(RULES))
def test_layer_only_depends_downwards(layer: str) -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in RULES[layer]):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} layering violations:\n" + "\n".join(offenders)
