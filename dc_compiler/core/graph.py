import logging
from typing import Dict, Iterator, List, Set, Tuple

from dc_compiler.errors import (
    CircularDependency,
    EntryNotFound,
    InvalidInputError,
    MissingDependency,
)
from dc_compiler.models import ScriptModule

logger = logging.getLogger("dc_compiler.graph")


def build_dependency_order(modules: List[ScriptModule], entry_name: str) -> List[ScriptModule]:
    """
    Order modules so every dependency precedes its dependent.

    Depth-first from the entry module; a module is emitted once all of its
    dependencies have been emitted. Modules unreachable from the entry are
    dropped.

    Raises:
        EntryNotFound: ``entry_name`` is not a discovered module.
        CircularDependency: A cycle is reachable from the entry.
        MissingDependency: A reachable module requires an unknown base name.
    """
    if not isinstance(modules, list) or not modules:
        raise InvalidInputError("Files array", "Files array must be non-empty")
    if not entry_name or not isinstance(entry_name, str):
        raise InvalidInputError("Main component name")

    by_name: Dict[str, ScriptModule] = {m.base_name: m for m in modules}
    if entry_name not in by_name:
        raise EntryNotFound(entry_name)

    visited: Set[str] = set()
    visiting: Set[str] = set()
    stack: List[str] = []
    # Explicit frames: (module, remaining dependencies); depth is unbounded
    frames: List[Tuple[ScriptModule, Iterator[str]]] = []
    ordered: List[ScriptModule] = []

    def enter(name: str) -> None:
        if name in visiting:
            cycle = stack[stack.index(name):] + [name]
            raise CircularDependency(cycle)

        module = by_name.get(name)
        if module is None:
            raise MissingDependency(name, stack[-1] if stack else "unknown")

        visiting.add(name)
        stack.append(name)
        frames.append((module, iter(module.dependencies)))

    enter(entry_name)
    while frames:
        module, remaining = frames[-1]
        dep = next((d for d in remaining if d not in visited), None)
        if dep is not None:
            enter(dep)
            continue

        frames.pop()
        stack.pop()
        visiting.discard(module.base_name)
        visited.add(module.base_name)
        ordered.append(module)

    dropped = len(modules) - len(ordered)
    if dropped:
        logger.info(f"Dropped {dropped} modules not reachable from '{entry_name}'")
    logger.info(f"Load order: {', '.join(m.base_name for m in ordered)}")
    return ordered
