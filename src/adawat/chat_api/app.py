from __future__ import annotations

import json
import logging
import time
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from fastapi.responses import PlainTextResponse, StreamingResponse

from .chat import Chat
from .config import ApiConfig
from .errors import (
    ApiError,
    err_message_empty,
    err_network,
    err_no_model,
    err_ollama_api,
    err_unexpected,
)
from .logging_utils import JsonlLogger
from .models import ChatRequest, ChatResponse
from .ollama_client import (
    OllamaApiClient,
    OllamaApiError,
    OllamaConnectionError,
    OllamaError,
)

logger = logging.getLogger(__name__)


_cfg = ApiConfig.load()
_ollama = OllamaApiClient(
    _cfg.ollama_base_url,
    selected_model=_cfg.default_model or None,
    timeout=_cfg.request_timeout_ms / 1000,
)
_request_log = JsonlLogger(_cfg.log_path, _cfg.max_log_bytes, enabled=_cfg.log_requests)


def get_ollama_client() -> OllamaApiClient:
    """Process-wide Ollama client shared by every request."""
    return _ollama


def _resolve_model(requested: Optional[str], client: OllamaApiClient) -> str:
    if requested and requested.strip():
        return requested.strip()
    if client.selected_model and client.selected_model.strip():
        return client.selected_model
    raise err_no_model()


def _sse(payload: dict) -> bytes:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode()


router = APIRouter(prefix="/test", tags=["test"])
health_router = APIRouter(tags=["health"])


@router.get("")
async def list_models(client: OllamaApiClient = Depends(get_ollama_client)):
    """List the models installed on the Ollama server."""
    try:
        return await client.list_local_models()
    except OllamaApiError as exc:
        raise err_ollama_api(exc) from exc
    except OllamaConnectionError as exc:
        raise err_network(exc) from exc


@router.post("", response_model=ChatResponse, response_model_exclude_none=True)
async def generate(
    request: ChatRequest, client: OllamaApiClient = Depends(get_ollama_client)
):
    """Send ``message`` on top of ``history`` and return the buffered reply."""
    if not request.message or not request.message.strip():
        raise err_message_empty()
    model = _resolve_model(request.model, client)

    started_at = time.time()
    status = "ok"
    chat = Chat(client, model=model)
    chat.messages.extend(request.history)
    parts: list[str] = []
    try:
        async for fragment in chat.send(request.message):
            parts.append(fragment)
    except OllamaApiError as exc:
        status = "ollama_error"
        logger.warning("[chat-api] Ollama rejected chat for '%s': %s", model, exc)
        raise err_ollama_api(exc) from exc
    except OllamaConnectionError as exc:
        status = "network_error"
        logger.error("[chat-api] Cannot reach Ollama at %s: %s", client.base_url, exc)
        raise err_network(exc) from exc
    except Exception as exc:  # noqa: BLE001
        status = "error"
        logger.exception("[chat-api] Unexpected failure during chat")
        raise err_unexpected(exc) from exc
    finally:
        _request_log.log_chat(
            model=model,
            started_at=started_at,
            response_chars=sum(len(p) for p in parts),
            status=status,
            stream=False,
            history_len=len(request.history),
        )

    return ChatResponse(response="".join(parts), history=chat.messages)


@router.get("/stream-chat")
async def stream_chat(
    message: str = Query(""),
    model: Optional[str] = Query(None),
    client: OllamaApiClient = Depends(get_ollama_client),
):
    """Relay reply fragments as server-sent events while Ollama generates them."""
    if not message.strip():
        raise err_message_empty()
    model_to_use = _resolve_model(model, client)
    chat = Chat(client, model=model_to_use)

    async def event_gen() -> AsyncGenerator[bytes, None]:
        started_at = time.time()
        status = "ok"
        chars = 0
        try:
            async for fragment in chat.send(message):
                chars += len(fragment)
                yield _sse({"content": fragment})
            yield _sse({"done": True})
        except OllamaError as exc:
            status = "ollama_error"
            logger.warning("[chat-api] Stream for '%s' failed: %s", model_to_use, exc)
            yield _sse({"error": str(exc)})
        except Exception as exc:  # noqa: BLE001
            # Response headers are already sent.
            status = "error"
            logger.exception("[chat-api] Unexpected failure during stream")
            yield _sse({"error": f"An unexpected error occurred: {exc}"})
        finally:
            _request_log.log_chat(
                model=model_to_use,
                started_at=started_at,
                response_chars=chars,
                status=status,
                stream=True,
            )

    return StreamingResponse(
        event_gen(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@health_router.get("/health")
async def health(client: OllamaApiClient = Depends(get_ollama_client)):
    try:
        version: str | None = await client.version()
    except OllamaError as exc:
        logger.warning("[chat-api] Ollama health check failed: %s", exc)
        version = None
    return {"status": "ok", "ollama": version}


async def _api_error_handler(request: Request, exc: ApiError):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


def create_app(cfg: ApiConfig | None = None) -> FastAPI:
    """Build the FastAPI app; ``cfg`` decides docs exposure and HTTPS redirect."""
    cfg = cfg or _cfg
    application = FastAPI(
        title="Adawat Chat API",
        version="0.1",
        docs_url="/docs" if cfg.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if cfg.is_development else None,
    )
    if cfg.https_redirect:
        application.add_middleware(HTTPSRedirectMiddleware)
    application.include_router(router)
    application.include_router(health_router)
    application.add_exception_handler(ApiError, _api_error_handler)

    @application.on_event("shutdown")
    async def _shutdown():
        logger.info("[chat-api] Closing Ollama client")
        await _ollama.aclose()

    return application


app = create_app(_cfg)


def main():  # pragma: no cover
    import uvicorn

    from ..logging_utils import configure_logging

    configure_logging("chat_api")
    uvicorn.run(app, host=_cfg.host, port=_cfg.port)


if __name__ == "__main__":  # pragma: no cover
    main()
