"""Extension load ordering."""

from notur_core.errors import create_error


class DependencyResolver:
    """Orders extensions so dependencies activate before their dependents.

    Graphs map an extension id to the ids it depends on. Dependencies that
    are not keys of the graph (not installed) are ignored for ordering and
    reported by ``find_missing``.
    """

    def resolve(self, graph: dict[str, list[str]]) -> list[str]:
        """Resolve load order via depth-first topological sort.

        Independent extensions keep their order in ``graph``.

        Args:
            graph: Extension id -> ids it depends on

        Returns:
            Extension ids in load order

        Raises:
            NoturError: DEPENDENCY_CYCLE on a circular dependency
        """
        cycle = self.find_cycle(graph)
        if cycle:
            raise create_error(
                "DEPENDENCY_CYCLE",
                extension_id=cycle[0],
                detail=" -> ".join(cycle + [cycle[0]]),
            )

        ordered: list[str] = []
        visited: set[str] = set()

        def visit(node: str) -> None:
            if node in visited:
                return
            visited.add(node)
            for dependency in graph.get(node, []):
                if dependency in graph:
                    visit(dependency)
            ordered.append(node)

        for node in graph:
            visit(node)

        return ordered

    def find_cycle(self, graph: dict[str, list[str]]) -> list[str] | None:
        """Return the members of the first dependency cycle found, or None."""
        done: set[str] = set()

        def visit(node: str, stack: list[str]) -> list[str] | None:
            if node in stack:
                return stack[stack.index(node):]
            if node in done:
                return None
            stack.append(node)
            for dependency in graph.get(node, []):
                if dependency in graph:
                    cycle = visit(dependency, stack)
                    if cycle:
                        return cycle
            stack.pop()
            done.add(node)
            return None

        for node in graph:
            cycle = visit(node, [])
            if cycle:
                return cycle
        return None

    def find_missing(self, graph: dict[str, list[str]]) -> dict[str, list[str]]:
        """Map each extension id to the dependencies that are not installed."""
        missing: dict[str, list[str]] = {}
        for extension_id, dependencies in graph.items():
            absent = [dep for dep in dependencies if dep not in graph]
            if absent:
                missing[extension_id] = absent
        return missing
