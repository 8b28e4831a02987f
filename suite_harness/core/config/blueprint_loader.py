"""
Blueprint loader — discovers module declarations in the source tree.

Declarations live in Blueprints.yml files anywhere under the source
root.  Each file holds a ``modules`` list::

    modules:
      - type: tradefed_binary_host
        name: cts-tradefed
        short_name: cts
        full_name: Compat Test Suite
        version: 11_r3
        libs: [extra-lib]

Files are visited in sorted path order and declarations kept in file
order, so the load phase always sees them the same way.
"""

from __future__ import annotations

import logging
from pathlib import Path

from suite_harness.core.config.loader import ConfigError, read_yaml
from suite_harness.core.models.declaration import ModuleDeclaration

logger = logging.getLogger(__name__)

BLUEPRINT_FILE = "Blueprints.yml"


def load_blueprint(path: Path, source_root: Path) -> list[ModuleDeclaration]:
    """Load the declarations of one Blueprints.yml.

    Raises:
        ConfigError: If the file is unreadable or malformed.
    """
    rel = path.relative_to(source_root)
    data = read_yaml(path, rel.as_posix())
    if data is None:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("modules", []), list):
        raise ConfigError(f"Expected a mapping with a 'modules' list in {rel}")

    directory = rel.parent.as_posix()
    if directory == ".":
        directory = ""

    declarations = []
    for index, entry in enumerate(data.get("modules", [])):
        if not isinstance(entry, dict) or "type" not in entry:
            raise ConfigError(f"{rel}: module #{index + 1} needs a 'type'")
        properties = {k: v for k, v in entry.items() if k != "type"}
        declarations.append(
            ModuleDeclaration(
                type=str(entry["type"]),
                directory=directory,
                source=rel.as_posix(),
                properties=properties,
            )
        )

    logger.debug("Loaded %d declarations from %s", len(declarations), rel)
    return declarations


def discover_blueprints(source_root: Path, out_dir: Path) -> list[ModuleDeclaration]:
    """Load every Blueprints.yml under ``source_root``.

    The output directory and hidden directories are skipped.
    """
    skip = (source_root / out_dir).resolve()
    declarations: list[ModuleDeclaration] = []

    for path in sorted(source_root.rglob(BLUEPRINT_FILE)):
        rel_parts = path.relative_to(source_root).parts[:-1]
        if any(part.startswith(".") for part in rel_parts):
            continue
        if path.resolve().is_relative_to(skip):
            continue
        declarations.extend(load_blueprint(path, source_root))

    logger.info("Discovered %d module declarations", len(declarations))
    return declarations
