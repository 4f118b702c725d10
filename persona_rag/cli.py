"""Command-line interface for Persona RAG."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config.logging import cli_logger, setup_logging
from .config.settings import Settings
from .core.exceptions import PersonaRagError
from .core.server import PersonaRagServer
from .rag.chunking import Chunker
from .rag.index import VectorIndex
from .rag.pipeline import RAGPipeline
from .utils.validation import persona_namespace, validate_namespace

app = typer.Typer(
    name="persona-rag",
    help="Persona RAG - knowledge-grounded answers for chat personas",
    add_completion=False,
)
console = Console()


def _load_settings(debug: bool = False) -> Settings:
    settings = Settings()
    if debug:
        settings.DEBUG = True
        settings.LOG_LEVEL = "DEBUG"
    return settings


def _run(settings: Settings, runner):
    """Run ``runner()`` with logging set up; typed errors exit with status 1."""
    settings.create_directories()
    setup_logging(settings)

    try:
        return asyncio.run(runner())
    except PersonaRagError as e:
        cli_logger.error("Command failed", error_code=e.error_code, error=e.message)
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _run_with_pipeline(settings: Settings, operation):
    """Run ``operation(pipeline)`` inside an initialized pipeline."""

    async def runner():
        async with RAGPipeline(settings) as pipeline:
            return await operation(pipeline)

    return _run(settings, runner)


def _run_with_index(settings: Settings, operation):
    """Run ``operation(index)`` against the vector index alone.

    Commands that never embed or generate do not need those services up.
    """

    async def runner():
        index = VectorIndex(settings)
        await index.initialize()
        try:
            return await operation(index)
        finally:
            await index.close()

    return _run(settings, runner)


def _target_namespace(settings: Settings, persona_id: str, namespace: Optional[str]) -> str:
    if namespace:
        return validate_namespace(namespace)
    return persona_namespace(settings.NAMESPACE_PREFIX, persona_id)


@app.command("serve")
def run_server(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Start the Persona RAG HTTP server."""
    try:
        settings = _load_settings(debug)
        if host:
            settings.SERVER_HOST = host
        if port:
            settings.SERVER_PORT = port

        console.print(
            f"[green]Starting Persona RAG server on "
            f"{settings.SERVER_HOST}:{settings.SERVER_PORT}[/green]"
        )

        server = PersonaRagServer(settings)
        asyncio.run(server.start())

    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Error starting server: {e}[/red]")
        sys.exit(1)


@app.command("ingest")
def ingest(
    persona_id: str = typer.Argument(..., help="Persona identifier"),
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Knowledge base text file"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Collection name"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Replace a persona's knowledge base with the contents of a file."""
    settings = _load_settings(debug)
    raw_text = source.read_text(encoding="utf-8")

    async def operation(pipeline: RAGPipeline):
        target = namespace or pipeline.namespace_for(persona_id)
        return await pipeline.ingest_knowledge(persona_id, target, raw_text)

    result = _run_with_pipeline(settings, operation)
    console.print(
        f"[green]Indexed {result.chunk_count} chunks into {result.namespace}[/green]"
    )


@app.command("ask")
def ask(
    persona_id: str = typer.Argument(..., help="Persona identifier"),
    message: str = typer.Argument(..., help="Question to ask the persona"),
    name: str = typer.Option("Assistant", "--name", help="Persona display name"),
    personality: Optional[str] = typer.Option(None, "--personality", help="Personality prompt"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Collection name"),
    top_k: Optional[int] = typer.Option(None, "--top-k", "-k", help="Chunks to retrieve"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Ask a persona a question and print the grounded answer."""
    settings = _load_settings(debug)

    async def operation(pipeline: RAGPipeline):
        target = namespace or pipeline.namespace_for(persona_id)
        return await pipeline.answer(
            persona_id, name, personality, target, message, top_k=top_k
        )

    reply = _run_with_pipeline(settings, operation)
    console.print(reply)


@app.command("forget")
def forget(
    persona_id: str = typer.Argument(..., help="Persona identifier"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Collection name"),
) -> None:
    """Drop a persona's knowledge base."""
    settings = _load_settings()

    async def operation(index: VectorIndex):
        target = _target_namespace(settings, persona_id, namespace)
        return target, await index.delete_collection(target)

    target, deleted = _run_with_index(settings, operation)
    if deleted:
        console.print(f"[green]Dropped {target}[/green]")
    else:
        console.print(f"[yellow]No knowledge stored in {target}[/yellow]")


@app.command("stats")
def stats(
    persona_id: str = typer.Argument(..., help="Persona identifier"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Collection name"),
) -> None:
    """Show what is indexed for a persona."""
    settings = _load_settings()

    async def operation(index: VectorIndex):
        return await index.collection_stats(_target_namespace(settings, persona_id, namespace))

    result = _run_with_index(settings, operation)

    table = Table(title=f"Knowledge in {result.namespace}")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("exists", str(result.exists))
    table.add_row("chunks", str(result.point_count))
    table.add_row("dimension", str(result.dimension) if result.dimension else "-")
    table.add_row("distance", result.distance or "-")
    console.print(table)


@app.command("chunk")
def preview_chunks(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file to chunk"),
    min_words: Optional[int] = typer.Option(None, "--min-words", help="Minimum words per chunk"),
    max_words: Optional[int] = typer.Option(None, "--max-words", help="Maximum words per chunk"),
    overlap: Optional[int] = typer.Option(None, "--overlap", help="Words shared by consecutive chunks"),
) -> None:
    """Preview how a file would be chunked, without embedding anything."""
    settings = _load_settings()
    try:
        chunker = Chunker(
            min_words=settings.CHUNK_MIN_WORDS if min_words is None else min_words,
            max_words=settings.CHUNK_MAX_WORDS if max_words is None else max_words,
            overlap_words=settings.CHUNK_OVERLAP_WORDS if overlap is None else overlap,
        )
    except PersonaRagError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    chunks = chunker.chunk(source.read_text(encoding="utf-8"))

    table = Table(title=f"{len(chunks)} chunks ({chunker!r})")
    table.add_column("#", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Range")
    table.add_column("Ends with")
    for chunk in chunks:
        table.add_row(
            str(chunk.ordinal),
            str(chunk.word_count),
            f"{chunk.start_word}-{chunk.end_word}",
            chunk.text[-40:],
        )
    console.print(table)


@app.command("init")
def init_project(
    directory: Path = typer.Argument(Path("."), help="Directory to initialize"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing files"),
) -> None:
    """Initialize a new Persona RAG project."""
    directory = directory.resolve()

    if not directory.exists():
        directory.mkdir(parents=True)

    config_file = directory / ".env"
    data_dir = directory / "data"

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration file already exists: {config_file}[/yellow]")
        console.print("Use --force to overwrite")
        return

    data_dir.mkdir(exist_ok=True)

    config_content = """# Persona RAG Configuration
SERVER_HOST=localhost
SERVER_PORT=8000
DEBUG=false
LOG_LEVEL=INFO
LOG_DIR=./logs

# Embeddings (OpenAI-compatible endpoint, or 'local' for sentence-transformers)
EMBEDDING_PROVIDER=api
EMBEDDING_MODEL=text-embedding-3-small
EMBEDDING_API_BASE=http://localhost:4000
EMBEDDING_API_KEY=
EMBEDDING_MAX_CONCURRENCY=1

# Generation ('echo' returns the prompt, for offline development)
GENERATION_PROVIDER=api
GENERATION_MODEL=gpt-4o-mini
GENERATION_API_BASE=http://localhost:4000
GENERATION_API_KEY=

# Vector index
VECTOR_INDEX_MODE=persistent
CHROMADB_PERSIST_DIRECTORY=./data/chroma
NAMESPACE_PREFIX=persona_

# Chunking and retrieval
CHUNK_MIN_WORDS=500
CHUNK_MAX_WORDS=800
CHUNK_OVERLAP_WORDS=100
RAG_TOP_K=3
"""

    config_file.write_text(config_content)
    console.print(f"[green]Initialized Persona RAG project in {directory}[/green]")
    console.print(f"Configuration file: {config_file}")
    console.print(f"Data directory: {data_dir}")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"Persona RAG version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
