# creator/orchestration/decomposer.py
"""
Task Decomposer - expands a Plan + request spec into concrete Tasks.

The full-stack topology is fixed. It encodes the real build order of a
generated application:

    design-system ──► frontend-structure ─────────────────┐
                                                          ▼
    database-schema ──► api-endpoints ──► authentication ──► frontend-backend-integration ──► deployment-config

Unsupported strategy/spec combinations decompose to an empty list.
"""
from typing import Any, Callable, Dict, List, Tuple

from creator.core.logging import log
from creator.core.types import Plan, Strategy, Task


ParamBuilder = Callable[[Dict[str, Any]], Dict[str, Any]]


def _design_system_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    design = spec.get("designSystem") or {}
    return {
        "style": design.get("style") or "modern",
        "colors": design.get("colors"),
        "components": list(spec.get("components") or []),
    }


def _frontend_structure_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "framework": spec.get("framework") or "react",
        "routes": list(spec.get("routes") or []),
        "layouts": list(spec.get("layouts") or []),
    }


def _database_schema_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": spec.get("database") or "postgres",
        "models": list(spec.get("models") or []),
    }


def _api_endpoints_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": spec.get("apiType") or "rest",
        "endpoints": list(spec.get("endpoints") or []),
    }


def _authentication_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "providers": list(spec.get("authProviders") or ["email"]),
        "features": list(spec.get("authFeatures") or ["jwt"]),
    }


def _integration_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {"apiClient": True, "stateManagement": True}


def _deployment_params(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "platform": spec.get("deployPlatform") or "vercel",
        "environments": ["development", "production"],
    }


# (name, engine, priority, depends-on names, params)
FULL_STACK_TASKS: List[Tuple[str, str, int, List[str], ParamBuilder]] = [
    ("design-system", "design", 1, [], _design_system_params),
    ("frontend-structure", "app", 2, ["design-system"], _frontend_structure_params),
    ("database-schema", "backend", 1, [], _database_schema_params),
    ("api-endpoints", "backend", 2, ["database-schema"], _api_endpoints_params),
    ("authentication", "backend", 3, ["api-endpoints"], _authentication_params),
    ("frontend-backend-integration", "app", 4, ["frontend-structure", "authentication"], _integration_params),
    ("deployment-config", "backend", 5, ["frontend-backend-integration"], _deployment_params),
]

# Named workflows: (name, engine, priority). No dependencies among them.
WORKFLOW_TASKS: Dict[str, List[Tuple[str, str, int]]] = {
    "startup": [
        ("business-plan", "content", 1),
        ("landing-page", "app", 2),
        ("mvp", "app", 3),
        ("marketing", "content", 4),
    ],
}


class TaskDecomposer:
    """Assigns ids task-0, task-1, ... in decomposition order."""

    def __init__(self):
        self._next_id = 0
        self._ids_by_name: Dict[str, str] = {}

    def _new_task(
        self,
        name: str,
        engine: str,
        priority: int,
        depends_on: List[str],
        params: Dict[str, Any],
    ) -> Task:
        task_id = f"task-{self._next_id}"
        self._next_id += 1
        task = Task(
            id=task_id,
            name=name,
            engine=engine,
            priority=priority,
            dependencies=[self._ids_by_name[dep] for dep in depends_on],
            params=params,
        )
        self._ids_by_name[name] = task_id
        return task

    def decompose(self, plan: Plan, spec: Dict[str, Any]) -> List[Task]:
        spec = spec or {}
        tasks: List[Task] = []

        if plan.strategy == Strategy.FULL_STACK:
            for name, engine, priority, depends_on, build_params in FULL_STACK_TASKS:
                tasks.append(self._new_task(name, engine, priority, depends_on, build_params(spec)))

        elif plan.strategy == Strategy.MULTI_PHASE:
            workflow = spec.get("workflow")
            for name, engine, priority in WORKFLOW_TASKS.get(workflow, []):
                tasks.append(self._new_task(name, engine, priority, [], {"workflow": workflow}))

        if not tasks:
            log("PLANNER", f"No tasks for type '{plan.type}' ({plan.strategy.value}) - empty run")
        else:
            log("PLANNER", f"Decomposed '{plan.type}' into {len(tasks)} tasks")
        return tasks


def decompose(plan: Plan, spec: Dict[str, Any]) -> List[Task]:
    """Expand a plan into tasks. Fresh id sequence per call."""
    return TaskDecomposer().decompose(plan, spec)
