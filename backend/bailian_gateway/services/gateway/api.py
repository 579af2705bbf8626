"""Gateway API endpoints for the Bailian gateway."""
import json
import logging
from typing import Optional
import httpx
from fastapi import APIRouter, HTTPException, Header, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from bailian_gateway.core.config import settings
from bailian_gateway.models.chat import ChatCompletionRequest, Usage
from bailian_gateway.models.embedding import EmbeddingRequest
from bailian_gateway.services.gateway.adapter import DashScopeAdapter
from bailian_gateway.services.gateway.auth.direct import DirectAuthenticator
from bailian_gateway.services.gateway.errors import GatewayError
from bailian_gateway.services.gateway.router import get_available_models, resolve_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gateway"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    provider: str
    api_key_configured: bool


async def _build_adapter(model: str, authorization: Optional[str]) -> DashScopeAdapter:
    context = resolve_context(model)
    logger.info(
        f"Resolved context: provider={context.provider}, model_name={context.model_name}, "
        f"vision={context.vision}, legacy_prompt={context.legacy_prompt}"
    )
    token = await DirectAuthenticator().get_token(authorization, context)
    return DashScopeAdapter(context, token, usage=Usage())


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Gateway health check endpoint."""
    return HealthResponse(
        status="healthy",
        provider="dashscope",
        api_key_configured=bool(settings.DASHSCOPE_API_KEY),
    )


@router.post("/v1/chat/completions")
async def chat_completions(
    request: ChatCompletionRequest,
    authorization: Optional[str] = Header(None, alias="Authorization"),
):
    """
    OpenAI-compatible chat completions endpoint.

    Vendor errors are raised as GatewayError and rendered by the app's
    exception handler.
    """
    adapter = None
    try:
        logger.info(
            f"Gateway received chat completion request: model={request.model}, "
            f"messages={len(request.messages)}, stream={request.stream}"
        )
        adapter = await _build_adapter(request.model, authorization)

        if request.stream:
            chunks = await adapter.create_chat_completion_stream(request)
            stream_adapter = adapter
            adapter = None  # closed by the stream

            async def generate_stream():
                try:
                    async for chunk in chunks:
                        yield f"data: {chunk.model_dump_json()}\n\n"
                    yield "data: [DONE]\n\n"
                except GatewayError as e:
                    logger.error(f"Stream terminated by error: {e}")
                    yield f"data: {json.dumps({'error': e.error.model_dump()})}\n\n"
                except httpx.RequestError as e:
                    logger.error(f"Network error during stream: {e}")
                    error = {"message": f"Network error connecting to provider: {e}", "type": "network_error"}
                    yield f"data: {json.dumps({'error': error})}\n\n"
                finally:
                    await chunks.aclose()
                    await stream_adapter.aclose()

            return StreamingResponse(
                generate_stream(),
                media_type="text/event-stream"
            )

        return await adapter.create_chat_completion(request)

    except GatewayError:
        raise
    except ValueError as e:
        logger.error(f"ValueError in chat_completions: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.RequestError as e:
        logger.error(f"Network error: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Network error connecting to provider: {str(e)}"
        )
    finally:
        if adapter is not None:
            await adapter.aclose()


@router.post("/v1/embeddings")
async def embeddings(
    request: EmbeddingRequest,
    authorization: Optional[str] = Header(None, alias="Authorization"),
):
    """OpenAI-compatible embeddings endpoint."""
    adapter = None
    try:
        logger.info(f"Gateway received embedding request: model={request.model}")
        adapter = await _build_adapter(request.model, authorization)
        return await adapter.create_embeddings(request)
    except GatewayError:
        raise
    except ValueError as e:
        logger.error(f"ValueError in embeddings: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.RequestError as e:
        logger.error(f"Network error: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Network error connecting to provider: {str(e)}"
        )
    finally:
        if adapter is not None:
            await adapter.aclose()


@router.get("/models")
async def list_models(
    model_type: Optional[str] = Query(None, alias="type", description="Filter by model type ('chat' or 'embedding')"),
):
    """List configured DashScope models."""
    models = get_available_models(model_type)
    return {
        "object": "list",
        "data": [{"id": model, "object": "model", "owned_by": "dashscope"} for model in models],
    }
