"""Tests for taskweave.core.dag.render module."""

import io

from rich.console import Console

from taskweave.core.dag import Task, TaskGraph
from taskweave.core.dag.render import print_plan, render_tree, render_waves, to_mermaid
from taskweave.core.types import TaskStatus


async def user():
    return 1


async def posts(user):
    return 2


async def comments(user):
    return 3


async def stats(posts, comments):
    return 4


def build_graph():
    return TaskGraph.build(
        {"user": user, "posts": posts, "comments": comments, "stats": stats}
    )


def render(renderable) -> str:
    console = Console(file=io.StringIO(), width=100, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestRenderWaves:
    """Tests for render_waves()."""

    def test_rows(self):
        """Test one row per task."""
        table = render_waves(build_graph())

        assert table.title == "Execution plan"
        assert table.row_count == 4

    def test_output(self):
        """Test names, dependencies and statuses appear."""
        output = render(render_waves(build_graph()))

        assert "user" in output
        assert "posts, comments" in output
        assert "pending" in output


class TestRenderTree:
    """Tests for render_tree()."""

    def test_fan_in_shown_under_each_parent(self):
        """Test a task with two parents appears twice."""
        output = render(render_tree(build_graph()))

        assert output.count("stats") == 2
        assert output.count("user") == 1

    def test_status_reflected(self):
        """Test completed nodes render after a status change."""
        graph = build_graph()
        graph.nodes["user"].status = TaskStatus.COMPLETED

        assert "user" in render(render_tree(graph))

    def test_long_chain(self):
        """Test a chain deeper than the recursion limit builds a tree."""
        count = 1500
        tasks = [Task(name="t0", fn=user, depends_on=[])]
        tasks += [Task(name=f"t{i}", fn=user, depends_on=[f"t{i - 1}"]) for i in range(1, count)]

        branch = render_tree(TaskGraph.build(tasks))
        depth = 0
        while branch.children:
            (branch,) = branch.children
            depth += 1

        assert depth == count


class TestPrintPlan:
    """Tests for print_plan()."""

    def test_valid_graph(self):
        """Test the plan shows the critical path and no problems."""
        console = Console(file=io.StringIO(), width=100, color_system=None)

        print_plan(build_graph(), console=console)

        output = console.file.getvalue()
        assert "Execution plan" in output
        assert "Critical path: user -> comments -> stats" in output
        assert "!" not in output

    def test_problems_listed(self):
        """Test validation problems are printed."""

        async def a(b):
            return 1

        async def b(a):
            return 1

        console = Console(file=io.StringIO(), width=100, color_system=None)

        print_plan(TaskGraph.build({"a": a, "b": b}), console=console)

        output = console.file.getvalue()
        assert "! Cycle detected: a -> b -> a" in output
        assert "! No task without dependencies" in output
        assert "Critical path" not in output


class TestToMermaid:
    """Tests for to_mermaid()."""

    def test_nodes_and_edges(self):
        """Test nodes are declared and edges point at dependents."""
        text = to_mermaid(build_graph())
        lines = text.splitlines()

        assert lines[0] == "graph TD"
        assert '  T0["user"]' in lines
        assert "  T0 --> T1" in lines
        assert "  T0 --> T2" in lines
        assert "  T1 --> T3" in lines
        assert "  T2 --> T3" in lines
        assert "%%" not in text

    def test_cycles_annotated(self):
        """Test cycles are listed as comments."""

        async def a(b):
            return 1

        async def b(a):
            return 1

        text = to_mermaid(TaskGraph.build({"a": a, "b": b}))

        assert "  %% Cycle: a -> b -> a" in text

    def test_quotes_escaped(self):
        """Test double quotes in names cannot break the label."""

        async def noop():
            return None

        text = to_mermaid(TaskGraph.build({'say "hi"': noop}))

        assert "T0[\"say 'hi'\"]" in text

    def test_long_cycle(self):
        """Test a cycle longer than the recursion limit is annotated."""
        count = 1500
        tasks = [Task(name="start", fn=user, depends_on=[])]
        tasks += [
            Task(name=f"t{i}", fn=user, depends_on=[f"t{(i + 1) % count}"]) for i in range(count)
        ]

        text = to_mermaid(TaskGraph.build(tasks))

        assert "  %% Cycle: t0 -> t1 -> t2" in text
        assert text.count("%% Cycle:") == 1
