"""CLI entrypoint for Vector Agent."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Optional

import requests
import typer

from vector_agent.ingest.types import ChunkingStrategy

app = typer.Typer(name="vagent", help="Vector Agent command-line interface")
store_app = typer.Typer(name="store", help="Create and inspect vector stores")
app.add_typer(store_app, name="store")

DEFAULT_HOST = "http://127.0.0.1:10000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip("/")
    env_host = os.environ.get("VAGENT_HOST")
    if env_host:
        return env_host.rstrip("/")
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _echo(resp: requests.Response) -> None:
    typer.echo(json.dumps(resp.json(), indent=2))


def _retrieval_body(
    store_id: str,
    k: int,
    web: bool,
    hybrid: bool,
    threshold: Optional[float],
) -> dict[str, object]:
    body: dict[str, object] = {"vectorStoreId": store_id, "maxResults": k}
    if web:
        body["webSearch"] = {"enabled": True}
    if hybrid:
        body["hybridSearch"] = {"enabled": True}
    if threshold is not None:
        body["rankingOptions"] = {"score_threshold": threshold}
    return body


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(10000, "--port", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("vector_agent.app:app", host=host, port=port, reload=reload)


@store_app.command("create")
def create_store(
    name: str = typer.Argument(..., help="Vector store name"),
    expires_days: Optional[int] = typer.Option(None, "--expires-days", help="Expire after this many days"),
    anchor: str = typer.Option("created_at", "--anchor", help="created_at or last_active_at"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Create a vector store."""
    body: dict[str, object] = {"name": name}
    if expires_days:
        body["expiresAfter"] = {"anchor": anchor, "days": expires_days}
    _echo(_request("POST", "/api/vector-store/create-store", host=host, json=body))


@store_app.command("status")
def store_status(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    wait: bool = typer.Option(False, "--wait", help="Poll until no file is processing"),
    interval: float = typer.Option(5.0, "--interval", help="Polling interval in seconds"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Show aggregate processing status, optionally polling until it settles."""
    while True:
        resp = _request("POST", "/api/vector-store/check-status", host=host, json={"vectorStoreId": store_id})
        if not wait or resp.json().get("status") != "processing":
            _echo(resp)
            return
        time.sleep(interval)


@store_app.command("files")
def store_files(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """List per-file ingestion state."""
    _echo(_request("GET", f"/api/vector-store/{store_id}/files", host=host))


@app.command()
def upload(
    path: Optional[Path] = typer.Argument(None, help="Local file to upload"),
    url: Optional[str] = typer.Option(None, "--url", help="Fetch the file from this URL instead"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Upload a file from disk or a URL."""
    if url:
        _echo(_request("POST", "/api/file/upload-file", host=host, json={"fileUrl": url}))
        return
    if path is None:
        typer.echo("Provide a path or --url", err=True)
        raise typer.Exit(code=2)
    resolved = path.expanduser()
    with resolved.open("rb") as handle:
        _echo(_request("POST", "/api/file/upload-file", host=host, files={"file": (resolved.name, handle)}))


@app.command("add-file")
def add_file(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    file_id: str = typer.Argument(..., help="Uploaded file identifier"),
    max_chunk_size: Optional[int] = typer.Option(None, "--max-chunk-size", help="Chunk budget"),
    overlap: Optional[int] = typer.Option(None, "--overlap", help="Chunk overlap budget"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Attach an uploaded file to a vector store and start ingestion."""
    body: dict[str, object] = {"vectorStoreId": store_id, "fileId": file_id}
    if max_chunk_size is not None or overlap is not None:
        # A single option keeps the default for the other one.
        defaults = ChunkingStrategy()
        body["chunkingStrategy"] = {
            "max_chunk_size_tokens": max_chunk_size if max_chunk_size is not None else defaults.max_chunk_size_tokens,
            "chunk_overlap_tokens": overlap if overlap is not None else defaults.chunk_overlap_tokens,
        }
    _echo(_request("POST", "/api/file/add-file", host=host, json=body))


@app.command()
def search(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    q: str = typer.Argument(..., help="Query text"),
    k: int = typer.Option(5, "--k", help="Number of results to return"),
    web: bool = typer.Option(False, "--web", help="Include web search results"),
    hybrid: bool = typer.Option(False, "--hybrid", help="Blend keyword overlap into scores"),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Minimum similarity"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Search a vector store."""
    body = _retrieval_body(store_id, k, web, hybrid, threshold)
    body["query"] = q
    _echo(_request("POST", "/api/search/search", host=host, json=body))


@app.command()
def ask(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    question: str = typer.Argument(..., help="Question to answer"),
    k: int = typer.Option(5, "--k", help="Number of context results"),
    web: bool = typer.Option(False, "--web", help="Include web search results"),
    hybrid: bool = typer.Option(False, "--hybrid", help="Blend keyword overlap into scores"),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Minimum similarity"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Answer a single question from a vector store."""
    body = _retrieval_body(store_id, k, web, hybrid, threshold)
    body["question"] = question
    _echo(_request("POST", "/api/search/query", host=host, json=body))


@app.command()
def chat(
    store_id: str = typer.Argument(..., help="Vector store identifier"),
    k: int = typer.Option(5, "--k", help="Number of context results"),
    web: bool = typer.Option(False, "--web", help="Include web search results"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Interactive chat; an empty line exits."""
    messages: list[dict[str, str]] = []
    while True:
        line = typer.prompt("you", default="", show_default=False)
        if not line.strip():
            return
        messages.append({"role": "user", "content": line})
        body = _retrieval_body(store_id, k, web, False, None)
        body["messages"] = messages
        reply = _request("POST", "/api/search/chat", host=host, json=body).json()
        messages.append({"role": "assistant", "content": reply["response"]})
        typer.echo(reply["response"])


if __name__ == "__main__":
    app()
