# creator/orchestration/validator.py
"""
Result Validator - lightweight post-hoc checks per task result.

Only ever adds a `validation` field; the engine payload is left as-is.
Invalid results stay in the map so the assembler can report them.

A result that is not a mapping has nowhere to carry that field, so it is
stored as `{"result": <value>, "validation": ...}` (and a missing result as
`{"validation": ...}`). Mapping results keep their own keys untouched.

Timeouts are known from the executor's `timed_out` ids, not from anything
the engine put in its payload. Every warning is also issued through
`warnings.warn` with the ValidationWarning category; it never aborts a run.
"""
import warnings
from typing import Any, Dict, Iterable, List, Optional

from creator.core.exceptions import ValidationWarning
from creator.core.logging import log
from creator.core.types import TaskValidation


DEFAULT_MARKERS = ("TODO",)


def _generated_sources(result: Dict[str, Any]) -> Iterable[str]:
    code = result.get("code")
    if isinstance(code, str):
        yield code
    for item in result.get("files") or []:
        if isinstance(item, dict) and isinstance(item.get("content"), str):
            yield item["content"]


def validate_result(
    result: Any,
    markers: Iterable[str] = DEFAULT_MARKERS,
    timed_out: bool = False,
) -> TaskValidation:
    """Check one result."""
    validation = TaskValidation()

    if timed_out:
        validation.valid = False
        validation.errors.append("timeout")
        return validation

    if result is None:
        validation.valid = False
        validation.errors.append("No result produced")
        return validation

    if not isinstance(result, dict):
        validation.valid = False
        validation.errors.append(f"Result must be a mapping, got {type(result).__name__}")
        return validation

    files = result.get("files")
    if files is not None and not isinstance(files, list):
        validation.valid = False
        validation.errors.append("'files' must be a list")

    for marker in markers:
        if any(marker in source for source in _generated_sources(result)):
            validation.warnings.append(f"Contains {marker} items")

    return validation


def validate(
    results: Dict[str, Any],
    markers: Optional[List[str]] = None,
    timed_out: Optional[Iterable[str]] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Attach a validation record to every result.

    `timed_out` lists the task ids the executor gave up on.
    Returns a new map; input results are not mutated.
    """
    markers = list(markers) if markers is not None else list(DEFAULT_MARKERS)
    expired = set(timed_out or ())
    validated: Dict[str, Dict[str, Any]] = {}

    for task_id, result in results.items():
        validation = validate_result(result, markers, task_id in expired)
        if isinstance(result, dict):
            payload = dict(result)
        elif result is None:
            payload = {}
        else:
            payload = {"result": result}
        payload["validation"] = validation.to_dict()
        validated[task_id] = payload

        if not validation.valid:
            log("VALIDATOR", f"{task_id} invalid: {validation.errors}")
        for warning in validation.warnings:
            log("VALIDATOR", f"{task_id} warning: {warning}")
            warnings.warn(f"{task_id}: {warning}", ValidationWarning, stacklevel=2)

    return validated
