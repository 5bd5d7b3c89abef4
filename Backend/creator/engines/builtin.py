# creator/engines/builtin.py
"""
Built-in generator engines.

Each engine dispatches on the task name and returns a plain dict. Results
always carry `task` (the task name) and `files` ([{path, content}]), plus
the structural keys the assembler reads. Generated content is kept short;
only its shape matters to the orchestrator.
"""
import asyncio
from typing import Any, Dict, List, Optional

from creator.core.logging import log
from creator.core.types import TaskContext
from creator.engines.base import Engine, EngineKind


def flatten_structure(structure: Dict[str, Any], prefix: str = "") -> List[Dict[str, str]]:
    """Nested {dir/: {file: content}} → [{path, content}]. None entries are skipped."""
    files: List[Dict[str, str]] = []
    for key, value in structure.items():
        path = f"{prefix.rstrip('/')}/{key}" if prefix else key
        if value is None:
            continue
        if isinstance(value, str):
            files.append({"path": path, "content": value})
        elif isinstance(value, dict):
            files.extend(flatten_structure(value, path))
    return files


def find_dependency(ctx: TaskContext, name: str) -> Dict[str, Any]:
    """Result of the dependency whose task name is `name`, or {}."""
    for result in ctx.dependencies.values():
        if isinstance(result, dict) and result.get("task") == name:
            return result
    return {}


def pascal_case(value: str) -> str:
    return "".join(part.capitalize() for part in str(value).replace("_", "-").split("-") if part)


class TemplateEngine(Engine):
    """Dispatch on task name to `_task_<name>` methods."""

    async def execute_task(self, ctx: TaskContext) -> Dict[str, Any]:
        task = ctx.task
        log("ENGINE", f"[{self.kind.value}] Executing task: {task.name}")
        # Suspension point per dispatch
        await asyncio.sleep(0)

        handler = getattr(self, "_task_" + task.name.replace("-", "_"), None)
        if handler is None:
            result = self.generic(ctx)
        else:
            result = handler(task.params or {}, ctx)
        result.setdefault("task", task.name)
        result.setdefault("files", [])
        return result

    def generic(self, ctx: TaskContext) -> Dict[str, Any]:
        return {
            "task": ctx.task.name,
            "status": "completed",
            "result": f"Generic execution of {ctx.task.name}",
        }


class DesignSystemEngine(TemplateEngine):
    kind = EngineKind.DESIGN

    PALETTES = {
        "modern": {"primary": "#6366f1", "secondary": "#ec4899", "background": "#0f172a", "text": "#f8fafc"},
        "minimal": {"primary": "#111827", "secondary": "#6b7280", "background": "#ffffff", "text": "#111827"},
    }

    def _task_design_system(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        style = params.get("style") or "modern"
        colors = dict(self.PALETTES.get(style, self.PALETTES["modern"]))
        colors.update(params.get("colors") or {})

        template = None
        if ctx.library is not None:
            template = ctx.library.get("templates", f"design-templates.{style}-ui")
        radius = (template or {}).get("radius", "8px")

        variables = "\n".join(f"  --color-{name}: {value};" for name, value in colors.items())
        tokens_css = f":root {{\n{variables}\n  --radius: {radius};\n}}\n"
        components = list(params.get("components") or []) or ["button", "card"]

        return {
            "type": "design-system",
            "style": style,
            "tokens": {"colors": colors, "radius": radius},
            "components": components,
            "styles": {"tokens.css": tokens_css},
            "files": [{"path": "src/styles/tokens.css", "content": tokens_css}],
        }


class AppCreationEngine(TemplateEngine):
    kind = EngineKind.APP

    def _task_frontend_structure(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        framework = params.get("framework") or "react"
        routes = list(params.get("routes") or []) or ["home"]
        design = find_dependency(ctx, "design-system")

        pages = {
            f"{pascal_case(route)}.jsx": (
                f"export default function {pascal_case(route)}() {{\n"
                f"  return <main className=\"page\">{pascal_case(route)}</main>;\n}}\n"
            )
            for route in routes
        }
        components = {
            f"{pascal_case(name)}.jsx": (
                f"export function {pascal_case(name)}(props) {{\n"
                f"  return <div className=\"{name}\" {{...props}} />;\n}}\n"
            )
            for name in design.get("components") or []
        }
        structure = {"src/": {"pages/": pages, "components/": components}}

        return {
            "framework": framework,
            "routes": routes,
            "layouts": list(params.get("layouts") or []),
            "pages": pages,
            "components": components,
            "files": flatten_structure(structure),
        }

    def _task_frontend_backend_integration(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        frontend = find_dependency(ctx, "frontend-structure")
        auth = find_dependency(ctx, "authentication")

        client = (
            "const BASE_URL = import.meta.env.VITE_API_URL || '/api';\n\n"
            "export async function request(path, options = {}) {\n"
            "  const response = await fetch(`${BASE_URL}${path}`, {\n"
            "    headers: { 'Content-Type': 'application/json', ...(options.headers || {}) },\n"
            "    ...options,\n"
            "  });\n"
            "  if (!response.ok) throw new Error(`${response.status} ${path}`);\n"
            "  return response.json();\n"
            "}\n"
        )
        files = [{"path": "src/lib/apiClient.js", "content": client}]
        if params.get("stateManagement"):
            store = "export const store = { user: null, loading: false };\n"
            files.append({"path": "src/lib/store.js", "content": store})

        return {
            "framework": frontend.get("framework"),
            "authProviders": auth.get("providers") or [],
            "apiClient": bool(params.get("apiClient")),
            "stateManagement": bool(params.get("stateManagement")),
            "files": files,
        }

    def _task_landing_page(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        html = "<!doctype html>\n<html>\n  <body>\n    <h1>Coming soon</h1>\n  </body>\n</html>\n"
        return {"type": "landing-page", "files": [{"path": "landing/index.html", "content": html}]}

    def _task_mvp(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        main = "export default function App() {\n  return <h1>MVP</h1>;\n}\n"
        return {"type": "mvp", "files": [{"path": "mvp/src/App.jsx", "content": main}]}


class BackendEngine(TemplateEngine):
    kind = EngineKind.BACKEND

    DEPLOYMENT_STEPS = {
        "vercel": ["npm i -g vercel", "vercel link", "vercel --prod"],
        "heroku": ["heroku create", "git push heroku main"],
        "aws": ["npm i -g serverless", "serverless deploy"],
    }

    def _task_database_schema(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        db_type = params.get("type") or "postgres"
        models = list(params.get("models") or [])

        tables = []
        for model in models:
            name = model.get("name") if isinstance(model, dict) else str(model)
            tables.append(
                f"CREATE TABLE {name.lower()}s (\n"
                "  id SERIAL PRIMARY KEY,\n"
                "  created_at TIMESTAMP DEFAULT NOW()\n"
                ");\n"
            )
        schema_sql = "\n".join(tables) or "-- no models declared\n"

        return {
            "database": db_type,
            "models": models,
            "schema": {"schema.sql": schema_sql},
            "files": [{"path": "database/schema.sql", "content": schema_sql}],
        }

    def _task_api_endpoints(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        endpoints = []
        for item in params.get("endpoints") or []:
            spec = item if isinstance(item, dict) else {"name": str(item)}
            endpoints.append({
                "path": spec.get("path") or f"/{spec.get('name', 'resource')}",
                "method": (spec.get("method") or "GET").upper(),
            })

        routes = "".join(
            f"router.{e['method'].lower()}('{e['path']}', (req, res) => res.json({{ ok: true }}));\n"
            for e in endpoints
        )
        source = "const router = require('express').Router();\n\n" + routes + "\nmodule.exports = router;\n"

        return {
            "apiType": params.get("type") or "rest",
            "endpoints": {f"{e['method']} {e['path']}": e for e in endpoints},
            "files": [{"path": "src/api/routes.js", "content": source}],
        }

    def _task_authentication(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        providers = list(params.get("providers") or ["email"])
        features = list(params.get("features") or ["jwt"])
        source = (
            "const jwt = require('jsonwebtoken');\n\n"
            "exports.sign = (user) => jwt.sign({ sub: user.id }, process.env.JWT_SECRET, { expiresIn: '1h' });\n"
            "exports.verify = (token) => jwt.verify(token, process.env.JWT_SECRET);\n"
        )
        files = [{"path": "src/auth/jwt.js", "content": source}] if "jwt" in features else []
        return {"type": "auth", "providers": providers, "features": features, "files": files}

    def _task_deployment_config(self, params: Dict[str, Any], ctx: TaskContext) -> Dict[str, Any]:
        platform = params.get("platform") or "vercel"
        configs: Dict[str, Optional[str]] = {}
        if platform == "vercel":
            configs["vercel.json"] = '{\n  "version": 2\n}\n'
        elif platform == "heroku":
            configs["Procfile"] = "web: node src/index.js\n"
        elif platform == "aws":
            configs["serverless.yml"] = "service: app\nprovider:\n  name: aws\n"

        return {
            "platform": platform,
            "environments": list(params.get("environments") or []),
            "config": configs,
            "deploymentSteps": list(self.DEPLOYMENT_STEPS.get(platform, [])),
            "files": flatten_structure(configs),
        }


class ContentEngine(TemplateEngine):
    kind = EngineKind.CONTENT

    def generic(self, ctx: TaskContext) -> Dict[str, Any]:
        title = ctx.task.name.replace("-", " ").title()
        content = f"# {title}\n\nContent for {ctx.task.name}\n"
        return {
            "task": ctx.task.name,
            "status": "completed",
            "content": content,
            "files": [{"path": f"docs/{ctx.task.name}.md", "content": content}],
        }


class AIEngine(TemplateEngine):
    kind = EngineKind.AI

    def generic(self, ctx: TaskContext) -> Dict[str, Any]:
        return {
            "task": ctx.task.name,
            "status": "completed",
            "ai": f"AI implementation for {ctx.task.name}",
        }


BUILTIN_ENGINES = (DesignSystemEngine, AppCreationEngine, BackendEngine, ContentEngine, AIEngine)
