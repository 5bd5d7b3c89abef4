# creator/engines/library.py
"""
Resource library - templates, components, patterns and examples that
engines can draw on. Read-only once initialized.
"""
import copy
from typing import Any, Dict, List, Optional

from creator.core.logging import log


BUILTIN_RESOURCES: Dict[str, Dict[str, Any]] = {
    "templates": {
        "app-templates": {
            "react-spa": {
                "framework": "react",
                "entry": "src/main.jsx",
                "dependencies": ["react", "react-dom", "react-router-dom", "vite"],
            },
            "vue-ssr": {
                "framework": "vue",
                "entry": "src/entry-server.js",
                "dependencies": ["vue", "vue-router", "vite"],
            },
            "nextjs-fullstack": {
                "framework": "next",
                "entry": "app/page.tsx",
                "dependencies": ["next", "react", "react-dom"],
            },
            "express-api": {
                "framework": "express",
                "entry": "src/index.js",
                "dependencies": ["express", "cors", "dotenv"],
            },
        },
        "design-templates": {
            "modern-ui": {"radius": "12px", "font": "Inter", "density": "comfortable"},
            "minimal-ui": {"radius": "4px", "font": "system-ui", "density": "compact"},
        },
    },
    "components": {
        "ui-components": {
            "button": {"props": ["variant", "size", "disabled", "onClick"]},
            "card": {"props": ["title", "children", "footer"]},
            "modal": {"props": ["open", "onClose", "title", "children"]},
            "form": {"props": ["onSubmit", "children"]},
        },
        "layout-components": {
            "header": {"props": ["title", "actions"]},
            "sidebar": {"props": ["items", "collapsed"]},
            "footer": {"props": ["links"]},
        },
    },
    "patterns": {
        "architectural-patterns": {
            "mvc": "Model-View-Controller separation",
            "clean-architecture": "Entities, use cases, adapters and frameworks in concentric layers",
        },
        "design-patterns": {
            "factory": "Create objects without naming their concrete class",
            "observer": "Notify subscribers when state changes",
            "strategy": "Swap algorithms behind one interface",
        },
    },
    "examples": {
        "code-examples": {
            "authentication": "JWT issued on login, verified by middleware on each request",
            "api-integration": "Typed fetch client with a shared base URL and error mapping",
            "state-management": "Single store with actions per domain slice",
        },
    },
}


class ResourceLibrary:
    """
    Handle passed to every engine via TaskContext.library.
    """

    def __init__(self, resources: Optional[Dict[str, Dict[str, Any]]] = None):
        self._resources = copy.deepcopy(resources if resources is not None else BUILTIN_RESOURCES)
        self.initialized = False

    async def initialize(self) -> "ResourceLibrary":
        self.initialized = True
        log("LIBRARY", f"Initialized with {self.size()} resources")
        return self

    def categories(self) -> List[str]:
        return list(self._resources)

    def get(self, category: str, resource_id: str) -> Optional[Any]:
        """Look up a dotted id, e.g. get("templates", "app-templates.react-spa")."""
        node: Any = self._resources.get(category)
        for part in resource_id.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def list(self, category: str, group: Optional[str] = None) -> List[str]:
        node = self._resources.get(category) or {}
        if group is not None:
            node = node.get(group) or {}
        return sorted(node)

    def search(self, query: str) -> List[Dict[str, str]]:
        """Case-insensitive substring search over string leaves."""
        needle = query.lower()
        matches: List[Dict[str, str]] = []

        def walk(node: Any, path: str) -> None:
            if isinstance(node, str):
                if needle in node.lower():
                    matches.append({"path": path, "match": node})
            elif isinstance(node, dict):
                for key, value in node.items():
                    walk(value, f"{path}.{key}")

        for category, data in self._resources.items():
            walk(data, category)
        return matches

    def size(self) -> int:
        def count(node: Any) -> int:
            if isinstance(node, dict) and node and all(isinstance(v, dict) for v in node.values()):
                return sum(count(v) for v in node.values())
            return 1

        return sum(count(group) for data in self._resources.values() for group in data.values())
