"""Persona RAG service process and HTTP surface."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..config.logging import LoggerMixin, setup_logging
from ..config.settings import Settings
from ..models.knowledge import CollectionStats, IngestionResult, Persona
from ..models.requests import (
    ChatRequest,
    ChatResponse,
    DeleteKnowledgeResponse,
    KnowledgeBaseRequest,
)
from ..rag.pipeline import RAGPipeline
from .exceptions import ChunkingError, PersonaRagError, ValidationError

ASSISTANT_UNAVAILABLE = "The assistant is unavailable."
INGESTION_FAILED = "Knowledge base could not be processed."
INDEX_UNAVAILABLE = "Knowledge base is temporarily unavailable."


class PersonaRagServer(LoggerMixin):
    """Hosts one shared RAG pipeline behind a small HTTP API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pipeline: Optional[RAGPipeline] = None,
    ) -> None:
        """Initialize the server with configuration."""
        self.settings = settings or Settings()
        self.settings.create_directories()

        # Set up logging
        setup_logging(self.settings)
        self.logger.info("Initializing Persona RAG server", settings=repr(self.settings))

        self._owns_pipeline = pipeline is None
        self.pipeline = pipeline or RAGPipeline(self.settings)
        self.app: Optional[FastAPI] = None

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncGenerator[None, None]:
        """FastAPI lifespan context manager."""
        try:
            await self._startup()
            yield
        finally:
            await self._shutdown()

    async def _startup(self) -> None:
        self.logger.info("Starting Persona RAG server components")
        if not self.pipeline.is_initialized:
            await self.pipeline.initialize()
        self.logger.info("All server components started successfully")

    async def _shutdown(self) -> None:
        self.logger.info("Shutting down Persona RAG server")
        if self._owns_pipeline:
            await self.pipeline.close()
        self.logger.info("Server shutdown complete")

    def _namespace(self, persona_id: str, namespace: Optional[str]) -> str:
        return namespace or self.pipeline.namespace_for(persona_id)

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        from .. import __version__

        app = FastAPI(
            title="Persona RAG",
            description="Knowledge-grounded answers for chat personas",
            version=__version__,
            lifespan=self.lifespan,
        )

        @app.exception_handler(ValidationError)
        @app.exception_handler(ChunkingError)
        async def invalid_input_handler(request, exc: PersonaRagError):
            return JSONResponse(status_code=422, content=exc.to_dict())

        @app.exception_handler(Exception)
        async def general_exception_handler(request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error"}
            )

        @app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "status": "healthy" if self.pipeline.is_initialized else "starting",
                "version": __version__,
            }

        @app.put("/personas/{persona_id}/knowledge", response_model=IngestionResult)
        async def replace_knowledge(persona_id: str, body: KnowledgeBaseRequest):
            """Replace a persona's knowledge base."""
            namespace = self._namespace(persona_id, body.namespace)
            try:
                return await self.pipeline.ingest_knowledge(
                    persona_id, namespace, body.knowledge_base
                )
            except (ValidationError, ChunkingError):
                raise
            except PersonaRagError as e:
                return JSONResponse(
                    status_code=502,
                    content={"error": INGESTION_FAILED, "error_code": e.error_code},
                )

        @app.get("/personas/{persona_id}/knowledge", response_model=CollectionStats)
        async def describe_knowledge(persona_id: str, namespace: Optional[str] = None):
            """Describe a persona's indexed knowledge."""
            try:
                return await self.pipeline.knowledge_stats(self._namespace(persona_id, namespace))
            except ValidationError:
                raise
            except PersonaRagError as e:
                return JSONResponse(
                    status_code=502,
                    content={"error": INDEX_UNAVAILABLE, "error_code": e.error_code},
                )

        @app.delete("/personas/{persona_id}/knowledge", response_model=DeleteKnowledgeResponse)
        async def delete_knowledge(persona_id: str, namespace: Optional[str] = None):
            """Drop a persona's knowledge."""
            namespace = self._namespace(persona_id, namespace)
            try:
                deleted = await self.pipeline.delete_knowledge(namespace)
            except ValidationError:
                raise
            except PersonaRagError as e:
                return JSONResponse(
                    status_code=502,
                    content={"error": INDEX_UNAVAILABLE, "error_code": e.error_code},
                )
            return DeleteKnowledgeResponse(namespace=namespace, deleted=deleted)

        @app.post("/personas/{persona_id}/chat", response_model=ChatResponse)
        async def chat(persona_id: str, body: ChatRequest):
            """Answer a message from the persona's knowledge."""
            persona = Persona(
                id=persona_id,
                name=body.name,
                personality_prompt=body.personality_prompt,
                namespace=self._namespace(persona_id, body.namespace),
            )
            try:
                reply = await self.pipeline.answer_persona(persona, body.message)
            except ValidationError:
                raise
            except PersonaRagError as e:
                self.logger.warning(
                    "Chat request failed", persona_id=persona_id, error_code=e.error_code
                )
                return JSONResponse(
                    status_code=503,
                    content={"error": ASSISTANT_UNAVAILABLE, "error_code": e.error_code},
                )
            return ChatResponse(reply=reply)

        self.app = app
        return app

    async def start(self) -> None:
        """Start the server using uvicorn."""
        app = self.create_app()

        # Configure uvicorn
        config = uvicorn.Config(
            app,
            host=self.settings.SERVER_HOST,
            port=self.settings.SERVER_PORT,
            log_level=self.settings.LOG_LEVEL.lower(),
            access_log=self.settings.DEBUG,
        )

        server = uvicorn.Server(config)
        await server.serve()
