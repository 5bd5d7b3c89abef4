# creator/orchestration/__init__.py
"""
Orchestration package - planning, scheduling, execution, validation, assembly.
"""
from .planner import analyze_plan
from .decomposer import decompose, TaskDecomposer
from .task_graph import DependencyGraph, build_graph
from .executor import LayerExecutor, execute
from .validator import validate, validate_result
from .assembler import assemble
from .progress import ProgressReporter, STAGE_PERCENTAGES
from .state import CreationStateManager, CreationRecord
from .orchestrator import CreationOrchestrator

__all__ = [
    "analyze_plan",
    "decompose",
    "TaskDecomposer",
    "DependencyGraph",
    "build_graph",
    "LayerExecutor",
    "execute",
    "validate",
    "validate_result",
    "assemble",
    "ProgressReporter",
    "STAGE_PERCENTAGES",
    "CreationStateManager",
    "CreationRecord",
    "CreationOrchestrator",
]
