"""
Chat Endpoints

POST /chat turns a prompt into generated files (via the code generator)
or a plain chat reply. POST /chat/classify exposes the intent rules on
their own, which the frontend uses to pick a loading state.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from appcraft.api.deps import get_codegen_service
from appcraft.core.exceptions import CodeGenerationError, InvalidPromptError, error_response
from appcraft.core.logging_config import logger
from appcraft.core.rate_limiter import codegen_rate_limit
from appcraft.schemas.chat import ChatRequest, ClassifyResponse
from appcraft.services.codegen_service import CodeGenerationService
from appcraft.services.intent_classifier import classify_prompt

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("")
@codegen_rate_limit()
async def chat(
    request: Request,
    chat_request: ChatRequest,
    codegen_service: CodeGenerationService = Depends(get_codegen_service),
):
    logger.info(f"[Chat API] Received prompt: '{chat_request.prompt[:100]}'")

    try:
        response = await codegen_service.handle_prompt(chat_request.prompt)
    except CodeGenerationError as e:
        logger.log_error_with_context(e, context="chat code generation")
        content = error_response(e)
        content["source"] = "code_error"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    return response.to_response()


@router.post("/classify", response_model=ClassifyResponse)
async def classify(chat_request: ChatRequest):
    if not chat_request.prompt.strip():
        raise InvalidPromptError()

    return ClassifyResponse(**classify_prompt(chat_request.prompt).to_dict())
