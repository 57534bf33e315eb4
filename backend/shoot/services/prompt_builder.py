"""
Shoot - Prompt Assembler
========================
Pure builders turning spec/app data into LLM prompt text.
Endpoints are passed as plain dicts with at least `method` and `path`.
"""

from __future__ import annotations

import json
from typing import Iterable, Mapping

ASSISTANT_SYSTEM = (
    "You are Shoot, an assistant that turns API specifications into working applications. "
    "You help users upload OpenAPI/Swagger specs, explore their endpoints, generate React or Node "
    "clients, and refine the generated apps. Keep answers short, practical, and in markdown."
)
CODE_GENERATOR_SYSTEM = "You generate production-ready applications from API specifications."
ARCHITECT_SYSTEM = "You are an API architect. Reply with a single JSON object and nothing else."
DESIGNER_SYSTEM = (
    "You are a product designer and senior React engineer building polished customer-facing apps. "
    "Reply with a single JSON object and nothing else."
)
REVIEWER_SYSTEM = "You are a code reviewer who gives specific, actionable feedback."
STRATEGIST_SYSTEM = "You are an API product strategist who finds valuable ways to use an API."
CREATIVE_SYSTEM = (
    "You are a creative technologist. Look for surprising but buildable uses of existing APIs."
)


def endpoint_line(endpoint: Mapping) -> str:
    label = endpoint.get("summary") or endpoint.get("description") or ""
    line = f"{endpoint.get('method', '').upper()} {endpoint.get('path', '')}"
    return f"{line}: {label}" if label else line


def endpoint_listing(endpoints: Iterable[Mapping], *, limit: int | None = None, numbered: bool = False) -> str:
    rows = list(endpoints)
    if limit is not None:
        rows = rows[:limit]
    if numbered:
        return "\n".join(f"{i}. {endpoint_line(e)}" for i, e in enumerate(rows, start=1))
    return "\n".join(f"- {endpoint_line(e)}" for e in rows)


def code_excerpt(code: Mapping[str, str], *, max_files: int = 5, max_chars: int = 6000) -> str:
    parts = [f"// {name}\n{source}" for name, source in list(code.items())[:max_files]]
    return "\n\n---\n\n".join(parts)[:max_chars]


def general_chat_system(spec_name: str | None = None, endpoint_count: int = 0) -> str:
    if not spec_name:
        return ASSISTANT_SYSTEM + "\nNo API spec is active yet; suggest uploading one when relevant."
    return ASSISTANT_SYSTEM + f"\nThe active spec is {spec_name} with {endpoint_count} endpoints."


def app_generation(framework: str, spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Generate a complete {framework} application for the API "{spec_name}".

Endpoints:
{endpoint_listing(endpoints)}

Requirements:
- TypeScript throughout
- typed request/response interfaces
- error handling and loading states
- short doc comments on exported functions

Emit every file as its own fenced code block whose first line is a comment holding the
relative file path, for example:
```tsx
// src/App.tsx
...
```"""


def intent_analysis(intent: str, spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""A user wants to build something on top of an API.

User intent: "{intent}"
API: {spec_name}
Endpoints:
{endpoint_listing(endpoints, numbered=True)}

Pick only the endpoints this intent needs, in call order, and describe the data flow.
Return JSON:
{{
  "understanding": "what the user wants",
  "selectedEndpoints": [{{"endpoint": "GET /path", "purpose": "why", "order": 1}}],
  "workflow": {{
    "name": "short name",
    "description": "what it accomplishes",
    "steps": [{{"stepNumber": 1, "action": "what happens", "endpoint": "GET /path", "inputFrom": "user"}}]
  }}
}}"""


def intent_code(intent: str, spec_name: str, analysis: Mapping) -> str:
    selected = "\n".join(
        f"- {item.get('endpoint')}: {item.get('purpose', '')}"
        for item in analysis.get("selectedEndpoints") or []
        if isinstance(item, Mapping)
    )
    workflow = analysis.get("workflow") or {}
    return f"""Write a React + TypeScript application for this plan.

User intent: "{intent}"
API: {spec_name}
Plan: {analysis.get("understanding", "")}
Endpoints to use:
{selected}
Workflow steps:
{json.dumps(workflow.get("steps", []), indent=2)}

Return JSON: {{"files": {{"relative/path.tsx": "full source"}}}}"""


def app_refinement(app_name: str, code: Mapping[str, str], refinement: str) -> str:
    return f"""Refine the application "{app_name}".

Requested change: "{refinement}"

Current files:
{code_excerpt(code)}

Return JSON with only the files you changed or added:
{{"files": {{"path": "full new source"}}, "changes": ["change 1"], "explanation": "summary"}}"""


def customer_app(description: str, spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Design and build a customer-facing web app.

What the business wants: "{description}"
API: {spec_name}
Endpoints:
{endpoint_listing(endpoints)}

Use React, TypeScript and Tailwind. Choose endpoints that serve end customers, not admins.
Return JSON:
{{
  "understanding": "what will be built and for whom",
  "design": {{"colorPalette": {{"primary": "#hex", "accent": "#hex"}}, "typography": "fonts", "layout": "layout idea"}},
  "selectedEndpoints": [{{"endpoint": "GET /path", "uiElement": "where it appears"}}],
  "files": {{"src/App.tsx": "full source"}},
  "features": ["feature 1"]
}}"""


def ui_refinement(app_name: str, code: Mapping[str, str], request: str) -> str:
    return f"""Improve the look and feel of "{app_name}".

Request: "{request}"

Current files:
{code_excerpt(code)}

Return JSON with only modified files:
{{"files": {{"path": "full new source"}}, "changes": ["change"], "visualDiff": "what looks different",
  "explanation": "why", "designChanges": {{}}}}"""


def component_design(description: str, endpoints: Iterable[Mapping], style: str | None) -> str:
    return f"""Create one polished React component.

Component: "{description}"
Style direction: {style or "modern, clean"}
Related endpoints:
{endpoint_listing(endpoints, limit=10)}

Return JSON:
{{"componentName": "Name", "preview": "one-line description", "usage": "<Name />", "files": {{"path": "source"}}}}"""


def feature_addition(app_name: str, code: Mapping[str, str], feature: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Add a feature to "{app_name}".

Feature: "{feature}"
Available endpoints:
{endpoint_listing(endpoints, limit=20)}

Current files:
{code_excerpt(code)}

Return JSON:
{{"newFiles": {{"path": "source"}}, "updatedFiles": {{"path": "full new source"}}, "features": ["capability"],
  "explanation": "how it works", "userInstructions": "how customers use it"}}"""


def flow_suggestions(spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Suggest 3-5 applications or flows worth building on the API "{spec_name}".

Endpoints:
{endpoint_listing(endpoints, limit=30)}

Return a JSON array of objects with: name, description, framework (react or node), reason."""


def component_modification(file_name: str, source: str, instruction: str) -> str:
    return f"""Modify the file {file_name}.

Instruction: "{instruction}"

```
{source}
```

Reply with the complete updated file in one fenced code block."""


def component_generation(description: str, framework: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Generate a {framework} component: "{description}".

Endpoints it may call:
{endpoint_listing(endpoints, limit=15)}

Use TypeScript, handle loading and error states, and reply with the code only."""


def app_review(app_name: str, framework: str, code: Mapping[str, str]) -> str:
    return f"""Review the {framework} application "{app_name}".

Files: {", ".join(code.keys())}

Sample code:
{code_excerpt(code, max_chars=3000)}

Suggest 5 concrete improvements covering code quality, performance, error handling, UX and new features.
Return a JSON array of objects with: title, description, priority (high, medium or low)."""


def capability_analysis(spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Analyze what can be built with the API "{spec_name}".

Endpoints:
{endpoint_listing(endpoints)}

Return JSON:
{{
  "capabilities": ["core capability"],
  "useCases": [{{"title": "", "description": "", "complexity": "simple|medium|complex"}}],
  "innovativeIdeas": [{{"title": "", "description": ""}}],
  "missingFeatures": [{{"title": "", "description": ""}}],
  "workflows": [{{"name": "", "description": "", "steps": ["step"]}}]
}}"""


def workflow_design(goal: str, spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Design a multi-step workflow on the API "{spec_name}" that achieves:
"{goal}"

Endpoints:
{endpoint_listing(endpoints)}

Return JSON:
{{
  "name": "workflow name",
  "description": "what it accomplishes",
  "steps": [{{"stepNumber": 1, "action": "", "endpoint": "GET /path", "inputFrom": "user", "output": ""}}],
  "complexity": "simple|medium|complex",
  "errorHandling": "how failures are handled",
  "successCriteria": "how to know it worked"
}}"""


def api_extensions(spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""The API "{spec_name}" currently exposes:
{endpoint_listing(endpoints)}

Suggest new endpoints that would make it more useful.
Return a JSON array of objects with: endpoint, method, description, rationale, priority."""


def remix(theme: str, spec_name: str, endpoints: Iterable[Mapping]) -> str:
    return f"""Invent a "remix" of the API "{spec_name}" around the theme: {theme}

Endpoints:
{endpoint_listing(endpoints)}

Combine endpoints in unexpected ways to create a new user experience.
Return JSON:
{{
  "remixName": "catchy name",
  "tagline": "one line",
  "description": "what it does",
  "innovation": "what makes it new",
  "endpointsUsed": ["GET /path"],
  "userExperience": "what the user sees",
  "implementation": {{"overview": "", "key_components": [], "challenges": [], "solutions": []}}
}}"""
