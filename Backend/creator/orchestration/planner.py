# creator/orchestration/planner.py
"""
Planner - turns a raw creation request into a Plan.

Pure function of the request: no I/O, no randomness. Identical input
always yields an identical Plan.
"""
from typing import Any, Dict, List, Optional

from creator.core.exceptions import RequestError
from creator.core.logging import log
from creator.core.types import CreationRequest, Plan, Strategy


APP_COMPONENTS = ["frontend", "backend", "database", "deployment"]
DESIGN_ITERATIONS = 3

# Phases per named workflow
WORKFLOW_PHASES: Dict[str, List[Dict[str, str]]] = {
    "startup": [
        {"name": "ideation", "duration": "2m"},
        {"name": "planning", "duration": "3m"},
        {"name": "building", "duration": "5m"},
        {"name": "launching", "duration": "2m"},
    ],
}


def _count(spec: Dict[str, Any], key: str) -> int:
    value = spec.get(key)
    return len(value) if value else 0


def assess_complexity(spec: Dict[str, Any]) -> int:
    """Additive heuristic on a 1-5 scale."""
    complexity = 1
    if _count(spec, "features") > 5:
        complexity += 1
    if _count(spec, "platforms") > 2:
        complexity += 1
    if _count(spec, "integrations") > 0:
        complexity += 1
    if spec.get("scale") == "enterprise":
        complexity += 2
    return min(complexity, 5)


def extract_requirements(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "functional": list(spec.get("features") or []),
        "nonFunctional": {
            "performance": spec.get("performance") or "standard",
            "security": spec.get("security") or "standard",
            "scalability": spec.get("scalability") or "standard",
        },
        "technical": {
            "language": spec.get("language"),
            "framework": spec.get("framework"),
            "database": spec.get("database"),
        },
    }


def identify_constraints(spec: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "time": spec.get("deadline"),
        "budget": spec.get("budget") or "unlimited",
        "resources": spec.get("resources") or "standard",
        "compliance": list(spec.get("compliance") or []),
    }


def suggest_optimizations(spec: Dict[str, Any]) -> List[str]:
    optimizations: List[str] = []
    if spec.get("performance") == "high":
        optimizations.extend(["caching", "lazy-loading", "code-splitting"])
    if spec.get("scale") == "enterprise":
        optimizations.extend(["microservices", "load-balancing", "auto-scaling"])
    if "mobile" in (spec.get("platforms") or []):
        optimizations.extend(["responsive-design", "offline-first", "progressive-enhancement"])
    return optimizations


def select_strategy(request_type: str) -> Strategy:
    """Total function over the request type."""
    if request_type == "workflow":
        return Strategy.MULTI_PHASE
    if "app" in request_type:
        return Strategy.FULL_STACK
    if request_type == "design":
        return Strategy.ITERATIVE
    return Strategy.SINGLE_PHASE


def plan_workflow_phases(spec: Dict[str, Any]) -> List[Dict[str, str]]:
    phases = WORKFLOW_PHASES.get(spec.get("workflow") or "", [])
    return [dict(phase) for phase in phases]


def analyze_plan(request: CreationRequest) -> Plan:
    """
    Inspect a request and derive its Plan.

    Raises:
        RequestError: when the request carries no type.
    """
    request_type = getattr(request, "type", None)
    if not isinstance(request_type, str) or not request_type.strip():
        raise RequestError("Creation request is missing 'type'", {"type": request_type})

    spec = request.spec or {}
    strategy = select_strategy(request_type)

    components: Optional[List[str]] = None
    phases: Optional[List[Dict[str, str]]] = None
    iterations: Optional[int] = None
    if strategy == Strategy.MULTI_PHASE:
        phases = plan_workflow_phases(spec)
    elif strategy == Strategy.FULL_STACK:
        components = list(APP_COMPONENTS)
    elif strategy == Strategy.ITERATIVE:
        iterations = DESIGN_ITERATIONS

    plan = Plan(
        type=request_type,
        complexity=assess_complexity(spec),
        requirements=extract_requirements(spec),
        constraints=identify_constraints(spec),
        optimizations=suggest_optimizations(spec),
        strategy=strategy,
        components=components,
        phases=phases,
        iterations=iterations,
    )
    log("PLANNER", f"{request_type}: strategy={strategy.value} complexity={plan.complexity}")
    return plan
