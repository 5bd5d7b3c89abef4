# tests/test_validator_assembler.py
"""
Tests for the Result Validator and the Output Assembler.
"""
import json

import pytest

from creator.core.exceptions import ValidationWarning
from creator.core.types import CreationRequest, Task
from creator.orchestration.assembler import (
    DEFAULT_PROJECT_NAME,
    SETUP_STEPS,
    assemble,
    wants_project,
)
from creator.orchestration.validator import validate, validate_result


# ═══════════════════════════════════════════════════════
# VALIDATOR
# ═══════════════════════════════════════════════════════

class TestValidateResult:

    def test_missing_result_is_invalid(self):
        validation = validate_result(None)
        assert validation.valid is False
        assert validation.errors == ["No result produced"]

    def test_empty_mapping_is_valid(self):
        assert validate_result({}).valid is True

    def test_non_mapping_is_invalid(self):
        validation = validate_result("done")
        assert validation.valid is False
        assert "str" in validation.errors[0]

    def test_timed_out_task_is_invalid(self):
        validation = validate_result({"status": "timeout", "task": "slow"}, timed_out=True)
        assert validation.valid is False
        assert validation.errors == ["timeout"]

    def test_engine_status_timeout_is_just_payload(self):
        # Only the executor decides what timed out
        validation = validate_result({"status": "timeout", "task": "poll-upstream"})
        assert validation.valid is True
        assert validation.errors == []

    def test_files_must_be_a_list(self):
        validation = validate_result({"files": {"a.txt": "x"}})
        assert validation.valid is False

    def test_placeholder_in_code_warns(self):
        validation = validate_result({"code": "function f() { /* TODO */ }"})
        assert validation.valid is True
        assert validation.warnings == ["Contains TODO items"]

    def test_placeholder_in_files_warns(self):
        result = {"files": [{"path": "a.js", "content": "// TODO: wire up"}]}
        assert validate_result(result).warnings == ["Contains TODO items"]

    def test_custom_markers(self):
        result = {"code": "FIXME later"}
        assert validate_result(result, markers=["TODO"]).warnings == []
        assert validate_result(result, markers=["FIXME"]).warnings == ["Contains FIXME items"]


class TestValidate:

    def test_adds_validation_only(self):
        results = {"task-0": {"task": "design-system", "files": []}}
        validated = validate(results)

        assert validated["task-0"]["validation"] == {"valid": True, "warnings": [], "errors": []}
        payload = {k: v for k, v in validated["task-0"].items() if k != "validation"}
        assert payload == results["task-0"]

    def test_input_not_mutated(self):
        results = {"task-0": {"task": "a"}}
        validate(results)
        assert "validation" not in results["task-0"]

    def test_every_entry_is_kept(self):
        results = {"task-0": None, "task-1": {"status": "timeout"}, "task-2": {"task": "ok"}}
        validated = validate(results, timed_out=["task-1"])

        assert set(validated) == set(results)
        assert validated["task-0"]["validation"]["valid"] is False
        assert validated["task-1"]["validation"]["errors"] == ["timeout"]
        assert validated["task-2"]["validation"]["valid"] is True

    def test_scalar_result_is_wrapped(self):
        validated = validate({"task-0": 42})
        assert validated["task-0"]["result"] == 42
        assert validated["task-0"]["validation"]["valid"] is False

    def test_missing_result_keeps_only_validation(self):
        validated = validate({"task-0": None})
        assert list(validated["task-0"]) == ["validation"]

    def test_warnings_use_validation_warning_category(self):
        results = {"task-3": {"files": [{"path": "a.js", "content": "// TODO"}]}}

        with pytest.warns(ValidationWarning, match="task-3: Contains TODO items"):
            validated = validate(results)

        assert validated["task-3"]["validation"]["valid"] is True


# ═══════════════════════════════════════════════════════
# ASSEMBLER
# ═══════════════════════════════════════════════════════

def _valid(payload):
    return {**payload, "validation": {"valid": True, "warnings": [], "errors": []}}


def _invalid(payload):
    return {**payload, "validation": {"valid": False, "warnings": [], "errors": ["timeout"]}}


@pytest.fixture
def app_results():
    return {
        "task-0": _valid({
            "task": "design-system",
            "styles": {"tokens.css": ":root {}"},
            "files": [{"path": "src/styles/tokens.css", "content": ":root {}"}],
        }),
        "task-1": _valid({
            "task": "frontend-structure",
            "pages": {"Home.jsx": "home"},
            "components": {"Button.jsx": "button"},
            "files": [{"path": "src/pages/Home.jsx", "content": "home"}],
        }),
        "task-2": _valid({
            "task": "database-schema",
            "schema": {"schema.sql": "CREATE TABLE users ();"},
            "files": [{"path": "database/schema.sql", "content": "CREATE TABLE users ();"}],
        }),
        "task-6": _valid({
            "task": "deployment-config",
            "config": {"vercel.json": "{}"},
            "deploymentSteps": ["vercel --prod"],
            "files": [{"path": "vercel.json", "content": "{}"}],
        }),
    }


class TestAssemble:

    def test_project_views(self, app_results):
        output = assemble(app_results, CreationRequest(type="app", spec={"name": "Demo"}))

        project = output.project
        assert project["name"] == "Demo"
        assert project["structure"]["src/"]["pages/"] == {"Home.jsx": "home"}
        assert project["structure"]["src/"]["styles/"] == {"tokens.css": ":root {}"}
        assert project["structure"]["database/"] == {"schema.sql": "CREATE TABLE users ();"}
        assert project["structure"]["config/"] == {"vercel.json": "{}"}
        assert project["instructions"]["setup"] == SETUP_STEPS
        assert project["instructions"]["deployment"] == ["vercel --prod"]

    def test_files_follow_task_id_order(self, app_results):
        # Insertion order deliberately scrambled
        scrambled = {k: app_results[k] for k in ["task-6", "task-2", "task-0", "task-1"]}
        output = assemble(scrambled, CreationRequest(type="app", spec={"name": "Demo"}))

        paths = [f["path"] for f in output.project["files"]]
        assert paths == ["src/styles/tokens.css", "src/pages/Home.jsx", "database/schema.sql", "vercel.json"]
        assert list(output.artifacts) == ["task-0", "task-1", "task-2", "task-6"]

    def test_numeric_not_lexical_order(self):
        results = {
            f"task-{i}": _valid({"task": f"t{i}", "files": [{"path": f"{i}.txt", "content": ""}]})
            for i in (10, 2, 1)
        }
        output = assemble(results, CreationRequest(type="x", spec={"name": "n"}))
        assert [f["path"] for f in output.project["files"]] == ["1.txt", "2.txt", "10.txt"]

    def test_duplicate_paths_are_kept(self):
        results = {
            "task-0": _valid({"task": "a", "files": [{"path": "README.md", "content": "one"}]}),
            "task-1": _valid({"task": "b", "files": [{"path": "README.md", "content": "two"}]}),
        }
        output = assemble(results, CreationRequest(type="x", spec={"name": "dup"}))
        assert [f["content"] for f in output.project["files"]] == ["one", "two"]

    def test_invalid_results_kept_in_artifacts_only(self, app_results):
        app_results["task-2"] = _invalid({"task": "database-schema", "status": "timeout"})
        output = assemble(app_results, CreationRequest(type="app", spec={"name": "Demo"}))

        assert output.success is False
        assert output.artifacts["task-2"]["validation"]["valid"] is False
        assert output.project["structure"]["database/"] == {}
        assert "database/schema.sql" not in [f["path"] for f in output.project["files"]]

    def test_success_when_all_valid(self, app_results):
        assert assemble(app_results, CreationRequest(type="app", spec={})).success is True

    def test_empty_run_is_successful(self):
        output = assemble({}, CreationRequest(type="video", spec={}))
        assert output.success is True
        assert output.artifacts == {}
        assert output.project is None

    def test_no_project_without_app_type_or_name(self, app_results):
        output = assemble(app_results, CreationRequest(type="app", spec={"features": ["x"]}))
        assert output.project is None
        assert "project" not in output.to_dict()

    def test_default_project_name(self, app_results):
        output = assemble(app_results, CreationRequest(type="app", spec={"type": "app"}))
        assert output.project["name"] == DEFAULT_PROJECT_NAME

    def test_task_names_resolved_from_tasks(self):
        results = {"task-0": _valid({"pages": {"A.jsx": "a"}})}
        tasks = {"task-0": Task(id="task-0", name="frontend-structure", engine="app")}
        output = assemble(results, CreationRequest(type="app", spec={"name": "n"}), tasks)
        assert output.project["structure"]["src/"]["pages/"] == {"A.jsx": "a"}

    def test_idempotent(self, app_results):
        request = CreationRequest(type="app", spec={"name": "Demo"})
        first = assemble(app_results, request, timestamp=1700000000000)
        second = assemble(app_results, request, timestamp=1700000000000)
        assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)

    def test_output_does_not_alias_inputs(self, app_results):
        request = CreationRequest(type="app", spec={"name": "Demo"})
        output = assemble(app_results, request)
        output.project["files"][0]["content"] = "changed"
        output.spec["name"] = "changed"

        assert app_results["task-0"]["files"][0]["content"] == ":root {}"
        assert request.spec["name"] == "Demo"


class TestWantsProject:

    @pytest.mark.parametrize("spec, expected", [
        ({"type": "app"}, True),
        ({"name": "Demo"}, True),
        ({"type": "workflow"}, False),
        ({}, False),
        ({"name": ""}, False),
    ])
    def test_rules(self, spec, expected):
        assert wants_project(spec) is expected
