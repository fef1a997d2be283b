from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from minilox.diagnostics import Diagnostic, format_diagnostic
from minilox.engine import CompilationArtifacts, LoxEngine
from minilox.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

app = FastAPI(title="minilox", version="1.0.0")

STATIC_DIR = Path(__file__).parent / "static"
if STATIC_DIR.exists():
	app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


class CompileRequest(BaseModel):
	source: str


class RunRequest(BaseModel):
	source: str
	max_steps: int = Field(default=50_000, gt=0)


def _to_json(obj: Any, *, depth: int = 0, max_depth: int = 64) -> Any:
	"""Best-effort conversion of tokens and syntax trees to JSON-safe structures."""
	if depth > max_depth:
		return {"_truncated": True}
	if obj is None or isinstance(obj, (str, int, float, bool)):
		return obj
	if isinstance(obj, Enum):
		return obj.name
	if isinstance(obj, Token):
		return {"kind": obj.kind.name, "lexeme": obj.lexeme, "line": obj.line}
	if isinstance(obj, (list, tuple)):
		return [_to_json(x, depth=depth + 1, max_depth=max_depth) for x in obj]
	if isinstance(obj, dict):
		return {str(k): _to_json(v, depth=depth + 1, max_depth=max_depth) for k, v in obj.items()}
	if is_dataclass(obj):
		data: Dict[str, Any] = {"_type": obj.__class__.__name__}
		for f in fields(obj):
			data[f.name] = _to_json(getattr(obj, f.name), depth=depth + 1, max_depth=max_depth)
		return data
	return str(obj)


def _diagnostics_json(diagnostics: List[Diagnostic]) -> List[Dict[str, Any]]:
	return [
		{
			"stage": d.stage.name,
			"line": d.line,
			"message": d.message,
			"text": format_diagnostic(d),
		}
		for d in diagnostics
	]


def _compilation_json(art: CompilationArtifacts) -> Dict[str, Any]:
	return {
		"duration_ms": art.duration_ms,
		"token_count": len(art.tokens),
		"diagnostic_count": len(art.diagnostics),
		"diagnostics": _diagnostics_json(art.diagnostics),
		"tokens": [
			{"kind": t.kind.name, "lexeme": t.lexeme, "value": _to_json(t.value), "line": t.line}
			for t in art.tokens
			if t.kind != TokenKind.EOF
		],
		"ast": _to_json(art.statements),
	}


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
	index_path = STATIC_DIR / "index.html"
	if index_path.exists():
		return HTMLResponse(index_path.read_text(encoding="utf-8"))
	return HTMLResponse(
		"<h2>minilox API</h2><p>POST <code>/api/run</code> with JSON: <code>{\"source\": \"print 1 + 2;\"}</code></p>"
	)


@app.get("/health")
def health() -> Dict[str, str]:
	return {"status": "ok"}


@app.post("/api/compile")
def compile_source(req: CompileRequest) -> Dict[str, Any]:
	engine = LoxEngine()
	return _compilation_json(engine.compile(req.source))


@app.post("/api/run")
def run_source(req: RunRequest) -> Dict[str, Any]:
	engine = LoxEngine(max_steps=req.max_steps)
	result = engine.run(req.source)

	runtime_error: Optional[Dict[str, Any]] = None
	if result.runtime_error is not None:
		runtime_error = {"message": result.runtime_error.message, "line": result.runtime_error.line}
		logger.info("run failed: %s", result.runtime_error.message)

	response = _compilation_json(result.compilation)
	response["run"] = {
		"executed": not result.compilation.has_errors,
		"output": result.output,
		"steps": result.steps,
		"runtime_error": runtime_error,
	}
	return response


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
	import uvicorn

	uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
	serve()
