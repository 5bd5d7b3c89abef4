# creator/orchestration/task_graph.py
"""
Dependency Graph Builder - tasks in, execution layers out.

Each layer holds task ids whose dependencies all sit in earlier layers.
Tasks inside one layer have no dependency relationship and may run
concurrently. A cycle or a dangling dependency id is a GraphError.
"""
from typing import Dict, List

from creator.core.exceptions import GraphError
from creator.core.logging import log
from creator.core.types import Task


class DependencyGraph:
    """
    nodes:  task id -> Task
    edges:  task id -> dependency ids
    layers: ordered partition of the node ids
    """

    def __init__(self, nodes: Dict[str, Task], edges: Dict[str, List[str]], layers: List[List[str]]):
        self.nodes = nodes
        self.edges = edges
        self.layers = layers

    def __len__(self) -> int:
        return len(self.nodes)


def build_graph(tasks: List[Task]) -> DependencyGraph:
    """
    Layer the tasks.

    Each scan places every remaining task whose dependencies were all placed
    by earlier scans. A scan that places nothing while tasks remain means a
    cycle or a reference to an unknown id.

    Raises:
        GraphError: duplicate ids, cycles, or dangling dependencies.
    """
    nodes: Dict[str, Task] = {}
    edges: Dict[str, List[str]] = {}
    for task in tasks:
        if task.id in nodes:
            raise GraphError(f"Duplicate task id {task.id}", unplaced=[task.id])
        nodes[task.id] = task
        edges[task.id] = list(task.dependencies or [])

    placed = set()
    remaining = [task.id for task in tasks]
    layers: List[List[str]] = []

    while remaining:
        layer = [tid for tid in remaining if all(dep in placed for dep in edges[tid])]

        if not layer:
            missing = sorted({dep for tid in remaining for dep in edges[tid] if dep not in nodes})
            if missing:
                message = f"Unknown dependency ids {missing} referenced by {remaining}"
            else:
                message = f"Dependency cycle among {remaining}"
            log("SCHEDULER", f"❌ {message}")
            raise GraphError(message, unplaced=remaining, missing=missing)

        placed.update(layer)
        remaining = [tid for tid in remaining if tid not in placed]
        layers.append(layer)

    log("SCHEDULER", f"{len(nodes)} tasks in {len(layers)} layers: {layers}")
    return DependencyGraph(nodes=nodes, edges=edges, layers=layers)


def task_sort_key(task_id: str):
    """Order task ids by decomposition index: task-2 before task-10."""
    prefix, _, index = task_id.rpartition("-")
    if prefix == "task" and index.isdigit():
        return (0, int(index), task_id)
    return (1, 0, task_id)
