#!/usr/bin/env python3
"""
Main FastAPI application for the Kofi SMS assistant.

The messaging gateway treats any non-200 answer as a failed delivery, so the
webhook always answers 200 with a TwiML envelope; failures become reply text.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from twilio.twiml.messaging_response import MessagingResponse

from .config import Config
from .controller import Components, build_components
from .ingest import read_knowledge_file
from ..agents.meta_agent import CAPABILITIES
from ..schemas.io_models import IncomingMessage
from ..utils.logger import get_logger

logger = get_logger()

APOLOGY_REPLY = "Sorry, something went wrong on our side. Please try again in a moment."
TIMEOUT_REPLY = "Sorry, that took too long. Please try again in a moment."


def twiml_reply(text: str) -> Response:
    twiml = MessagingResponse()
    twiml.message(text)
    return Response(content=str(twiml), status_code=200, media_type="text/xml")


async def _run_startup_ingestion(components: Components):
    try:
        report = await components.ingestor.ingest_once()
        if not report.skipped:
            logger.info("Startup ingestion wrote %d chunks", report.chunk_count)
    except Exception as e:
        logger.error("Startup ingestion failed; answers will be ungrounded: %s", e)


def create_app(
    components: Optional[Components] = None,
    ingest_on_startup: Optional[bool] = None,
) -> FastAPI:
    components = components or build_components()
    if ingest_on_startup is None:
        ingest_on_startup = Config.INGEST_ON_STARTUP

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if ingest_on_startup and components.ingestor is not None:
            task = asyncio.create_task(_run_startup_ingestion(components))
        app.state.ingestion_task = task
        yield
        if task is not None and not task.done():
            task.cancel()

    app = FastAPI(
        title="Kofi SMS Assistant",
        description="Text-message assistant for menu, reservations, orders, loyalty and RAG answers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.components = components

    @app.post("/incoming")
    async def incoming(request: Request):
        """Messaging webhook: form fields From and Body in, TwiML out."""
        message = IncomingMessage(user_id="", text="")
        try:
            form = await request.form()
            message = IncomingMessage(
                user_id=str(form.get("From", "") or ""),
                text=str(form.get("Body", "") or ""),
            )
            if not message.text.strip():
                return twiml_reply(CAPABILITIES)

            reply = await asyncio.wait_for(
                components.controller.handle(message.user_id, message.text),
                timeout=Config.REQUEST_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error("Request from %s timed out; message: %r", message.user_id, message.text)
            reply = TIMEOUT_REPLY
        except Exception:
            logger.exception("Unhandled error for %s; message: %r", message.user_id, message.text)
            reply = APOLOGY_REPLY
        return twiml_reply(reply)

    @app.get("/")
    async def root():
        return JSONResponse("Deployment successful!")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/business-info")
    async def business_info():
        try:
            return PlainTextResponse(read_knowledge_file())
        except OSError as e:
            logger.error("Failed to read business info file: %s", e)
            return PlainTextResponse("Error reading business info file", status_code=500)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
