# creator/orchestration/assembler.py
"""
Output Assembler - folds validated results into one artifact bundle.

- `artifacts` always carries every task result, valid or not.
- `project` views (structure, files, instructions) only read valid results.
- Files are concatenated in task-id order; duplicates are kept.
"""
import copy
from typing import Any, Dict, List, Mapping, Optional

from creator.core.logging import log
from creator.core.types import CreationRequest, OrchestrationOutput, Task, now_ms
from creator.orchestration.task_graph import task_sort_key


DEFAULT_PROJECT_NAME = "generated-project"

SETUP_STEPS = ["npm install", "cp .env.example .env", "npm run db:migrate"]
DEVELOPMENT_STEPS = ["npm run dev"]


def _is_valid(result: Any) -> bool:
    return isinstance(result, dict) and bool((result.get("validation") or {}).get("valid"))


def _task_name(task_id: str, result: Dict[str, Any], tasks: Mapping[str, Task]) -> Optional[str]:
    task = tasks.get(task_id)
    if task is not None:
        return task.name
    return result.get("task")


def wants_project(spec: Dict[str, Any]) -> bool:
    return spec.get("type") == "app" or bool(spec.get("name"))


def build_structure(by_name: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    def pick(name: str, key: str) -> Any:
        return copy.deepcopy((by_name.get(name) or {}).get(key) or {})

    return {
        "src/": {
            "components/": pick("frontend-structure", "components"),
            "pages/": pick("frontend-structure", "pages"),
            "api/": pick("api-endpoints", "endpoints"),
            "styles/": pick("design-system", "styles"),
        },
        "database/": pick("database-schema", "schema"),
        "config/": pick("deployment-config", "config"),
        "tests/": {},
        "docs/": {},
    }


def collect_files(ordered: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    files: List[Dict[str, Any]] = []
    for result in ordered:
        for item in result.get("files") or []:
            files.append(copy.deepcopy(item))
    return files


def build_instructions(by_name: Dict[str, Dict[str, Any]]) -> Dict[str, List[str]]:
    deployment = (by_name.get("deployment-config") or {}).get("deploymentSteps") or []
    return {
        "setup": list(SETUP_STEPS),
        "development": list(DEVELOPMENT_STEPS),
        "deployment": list(deployment),
    }


def assemble(
    results: Dict[str, Dict[str, Any]],
    request: CreationRequest,
    tasks: Optional[Mapping[str, Task]] = None,
    timestamp: Optional[int] = None,
) -> OrchestrationOutput:
    """
    Build the final output from validated results.

    `tasks` (id -> Task) lets the project views find results by task name;
    without it the result's own `task` field is used.
    """
    tasks = tasks or {}
    spec = request.spec or {}
    ordered_ids = sorted(results, key=task_sort_key)

    artifacts = {task_id: copy.deepcopy(results[task_id]) for task_id in ordered_ids}
    valid_ids = [task_id for task_id in ordered_ids if _is_valid(results[task_id])]

    output = OrchestrationOutput(
        success=len(valid_ids) == len(ordered_ids),
        timestamp=timestamp if timestamp is not None else now_ms(),
        spec=copy.deepcopy(spec),
        artifacts=artifacts,
    )

    if wants_project(spec):
        by_name: Dict[str, Dict[str, Any]] = {}
        for task_id in valid_ids:
            name = _task_name(task_id, results[task_id], tasks)
            if name and name not in by_name:
                by_name[name] = results[task_id]

        output.project = {
            "name": spec.get("name") or DEFAULT_PROJECT_NAME,
            "structure": build_structure(by_name),
            "files": collect_files([results[task_id] for task_id in valid_ids]),
            "instructions": build_instructions(by_name),
        }

    log(
        "ASSEMBLER",
        f"Assembled {len(artifacts)} artifacts ({len(valid_ids)} valid)"
        + (f", {len(output.project['files'])} files" if output.project else ""),
    )
    return output
