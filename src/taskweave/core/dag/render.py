"""Human-readable views of a task graph.

Rich renderables for terminals and a Mermaid flowchart for docs:

    >>> executor = create_executor().add("user", fetch_user).add_dependent("posts", fetch_posts)
    >>> graph = executor.graph()
    >>> print_plan(graph)
    >>> print(to_mermaid(graph))
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from taskweave.core.dag.graph import TaskGraph
from taskweave.core.types import TaskStatus

STATUS_STYLES = {
    TaskStatus.PENDING: "dim",
    TaskStatus.RUNNING: "yellow",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "bold red",
    TaskStatus.CANCELLED: "magenta",
}


def render_waves(graph: TaskGraph) -> Table:
    """Tabulate the graph by wave (tasks that can start together).

    Args:
        graph: Built graph.

    Returns:
        Table with one row per task, grouped by wave.
    """
    table = Table(title="Execution plan", show_lines=False)
    table.add_column("Wave", justify="right", style="cyan")
    table.add_column("Task", style="bold")
    table.add_column("Depends on")
    table.add_column("Status")

    for index, wave in enumerate(graph.waves()):
        for position, name in enumerate(wave):
            node = graph.nodes[name]
            table.add_row(
                str(index) if position == 0 else "",
                name,
                ", ".join(node.dependencies) or "-",
                Text(node.status.value, style=STATUS_STYLES[node.status]),
            )

    return table


def render_tree(graph: TaskGraph) -> Tree:
    """Render dependents as a tree hanging off each root.

    Tasks reachable through several paths appear under each parent.
    """
    tree = Tree("[bold]tasks[/]")
    stack = [(tree, root, frozenset({root})) for root in reversed(graph.roots)]

    while stack:
        branch, name, seen = stack.pop()
        child = branch.add(Text(name, style=STATUS_STYLES[graph.nodes[name].status]))
        for dependent in reversed(graph.dependents_of(name)):
            if dependent not in seen:
                stack.append((child, dependent, seen | {dependent}))

    return tree


def print_plan(graph: TaskGraph, console: Console | None = None) -> None:
    """Print the wave table and any problems found by validate().

    Args:
        graph: Built graph.
        console: Rich console for output. Defaults to a new stdout console.
    """
    console = console or Console()
    renderables: list[Table | Text] = [render_waves(graph)]

    path = graph.critical_path()
    if path:
        renderables.append(Text(f"Critical path: {' -> '.join(path)}", style="cyan"))

    for problem in graph.validate():
        renderables.append(Text(f"! {problem}", style="bold red"))

    console.print(Group(*renderables))


def to_mermaid(graph: TaskGraph) -> str:
    """Generate a Mermaid flowchart of the graph.

    Edges point from a dependency to the task that needs it.
    """
    ids = {name: f"T{index}" for index, name in enumerate(graph.names)}
    lines = ["graph TD"]

    for name in graph.names:
        label = name.replace('"', "'")
        lines.append(f'  {ids[name]}["{label}"]')

    for name, node in graph.nodes.items():
        for dep in node.dependencies:
            lines.append(f"  {ids[dep]} --> {ids[name]}")

    cycles = graph.find_cycles()
    if cycles:
        lines.append("")
        lines.append("  %% Circular dependencies detected")
        for cycle in cycles:
            lines.append(f"  %% Cycle: {' -> '.join(cycle)}")

    return "\n".join(lines)
