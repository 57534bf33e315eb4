"""Static app templates used when AI generation is off or unavailable."""

from __future__ import annotations

import json
import re
from typing import Mapping, Sequence

# A fenced block whose first line is a `// path` or `# path` comment.
_FILE_BLOCK_RE = re.compile(r"```(?:\w+)?\s*(?://|#)\s*([^\n]+)\n([\s\S]*?)```")
FALLBACK_FILENAME = "generated.tsx"


def parse_generated_code(content: str) -> dict[str, str]:
    """Split an LLM reply into files. A reply without labelled blocks becomes one file."""
    files: dict[str, str] = {}
    for match in _FILE_BLOCK_RE.finditer(content or ""):
        files[match.group(1).strip()] = match.group(2).strip()
    if not files:
        files[FALLBACK_FILENAME] = content or ""
    return files


def package_name(spec_name: str) -> str:
    slug = re.sub(r"\s+", "-", (spec_name or "generated-app").strip().lower())
    return slug or "generated-app"


def _readme(spec_name: str, label: str, endpoint_count: int) -> str:
    return (
        f"# {spec_name}\n\n"
        f"{label} generated from {endpoint_count} endpoints.\n\n"
        "## Install\n```bash\nnpm install\n```\n\n"
        "## Run\n```bash\nnpm start\n```\n"
    )


def react_app(spec_name: str, endpoints: Sequence[Mapping]) -> dict[str, str]:
    return {
        "src/api/client.ts": """import axios, { AxiosInstance } from 'axios';

export class ApiClient {
  private http: AxiosInstance;

  constructor(baseURL: string, token?: string) {
    this.http = axios.create({
      baseURL,
      headers: {
        'Content-Type': 'application/json',
        ...(token ? { Authorization: `Bearer ${token}` } : {}),
      },
    });
  }

  async get<T>(url: string): Promise<T> {
    return (await this.http.get<T>(url)).data;
  }

  async post<T>(url: string, body?: unknown): Promise<T> {
    return (await this.http.post<T>(url, body)).data;
  }

  async put<T>(url: string, body?: unknown): Promise<T> {
    return (await this.http.put<T>(url, body)).data;
  }

  async delete<T>(url: string): Promise<T> {
    return (await this.http.delete<T>(url)).data;
  }
}

export default new ApiClient(import.meta.env.VITE_API_BASE_URL ?? 'https://api.example.com');
""",
        "src/App.tsx": f"""import React from 'react';

export default function App() {{
  return (
    <main style={{{{ padding: 24 }}}}>
      <h1>{spec_name}</h1>
      <p>React client for {len(endpoints)} endpoints.</p>
    </main>
  );
}}
""",
        "package.json": json.dumps(
            {
                "name": package_name(spec_name),
                "version": "1.0.0",
                "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0", "axios": "^1.6.2"},
            },
            indent=2,
        ),
        "README.md": _readme(spec_name, "React app", len(endpoints)),
    }


def node_app(spec_name: str, endpoints: Sequence[Mapping]) -> dict[str, str]:
    title = spec_name.replace("'", "\\'")
    return {
        "src/index.ts": f"""import express from 'express';
import cors from 'cors';

const app = express();
const port = Number(process.env.PORT ?? 3000);

app.use(cors());
app.use(express.json());

app.get('/', (_req, res) => {{
  res.json({{ name: '{title}', endpoints: {len(endpoints)} }});
}});

app.listen(port, () => {{
  console.log(`listening on ${{port}}`);
}});
""",
        "package.json": json.dumps(
            {
                "name": package_name(spec_name),
                "version": "1.0.0",
                "dependencies": {"express": "^4.18.2", "cors": "^2.8.5"},
            },
            indent=2,
        ),
        "README.md": _readme(spec_name, "Node.js service", len(endpoints)),
    }


def render_template(framework: str, spec_name: str, endpoints: Sequence[Mapping]) -> dict[str, str]:
    framework = (framework or "").strip().lower()
    if framework == "react":
        return react_app(spec_name, endpoints)
    if framework in {"node", "express"}:
        return node_app(spec_name, endpoints)
    return {"README.md": f"# {spec_name}\n\nGenerated app for {framework or 'unknown framework'}\n"}


def basic_app_outline(intent: str, endpoints: Sequence[Mapping]) -> dict:
    """Offline answer for intent-driven builds: the first three endpoints, no code."""
    return {
        "understanding": f"Build functionality for: {intent}",
        "selectedEndpoints": [
            {
                "endpoint": f"{e.get('method', '').upper()} {e.get('path', '')}",
                "purpose": e.get("summary") or "API operation",
            }
            for e in list(endpoints)[:3]
        ],
        "message": "AI not available. Generated basic template.",
    }
