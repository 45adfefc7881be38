"""
Code Generation Service

Routes a chat prompt either to the external code-generator API (through
the proxy, so it gets the same timeout/retry handling as every other
outbound call) or to a fixed chat reply.
"""

from typing import Any, Dict, Optional

from appcraft.core.config import settings
from appcraft.core.exceptions import CodeGenerationError, InvalidPromptError
from appcraft.core.logging_config import logger
from appcraft.modules.proxy.service import ProxyService
from appcraft.schemas.chat import ChatResponse
from appcraft.schemas.proxy import ProxyFailure, ProxyRequest
from appcraft.services.intent_classifier import PromptClassification, classify_prompt


CHAT_REPLY = (
    "I specialize in creating applications and tools! Try asking me to "
    "'make a calculator', 'create a todo app', 'build a weather dashboard', "
    "or describe any tool you'd like me to build for you."
)


class CodeGenerationService:
    def __init__(
        self,
        proxy_service: ProxyService,
        api_url: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        max_retries: Optional[int] = None,
        user_agent: Optional[str] = None,
    ):
        self.proxy_service = proxy_service
        self.api_url = api_url or settings.CODEGEN_API_URL
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.CODEGEN_TIMEOUT_MS
        self.max_retries = max_retries if max_retries is not None else settings.CODEGEN_MAX_RETRIES
        self.user_agent = user_agent or settings.CODEGEN_USER_AGENT

    @staticmethod
    def build_request_body(prompt: str, classification: PromptClassification) -> Dict[str, Any]:
        return {
            "description": prompt,
            "language": classification.language,
            "framework": classification.framework,
            "complexity": classification.complexity,
            "fileType": "multiple",
            "apiKey": "",
        }

    async def generate(self, prompt: str, classification: PromptClassification) -> ChatResponse:
        """
        Ask the code generator for files.

        Raises:
            CodeGenerationError: transport failure, non-2xx status, or a reply
                without a files list
        """
        request_body = self.build_request_body(prompt, classification)
        logger.info(
            f"[CodeGen] Generating code: language={classification.language}, "
            f"framework={classification.framework or '-'}, complexity={classification.complexity}"
        )

        result = await self.proxy_service.proxy(ProxyRequest(
            url=self.api_url,
            method="POST",
            headers={"Accept": "application/json", "User-Agent": self.user_agent},
            body=request_body,
            timeout_ms=self.timeout_ms,
            max_retries=self.max_retries,
            cache_ttl_ms=0,
        ))

        if isinstance(result, ProxyFailure):
            raise CodeGenerationError(result.message)
        if not result.success:
            raise CodeGenerationError(f"API responded with status {result.status}", status=result.status)

        data = result.data
        if not isinstance(data, dict):
            raise CodeGenerationError("Code generator returned a non-JSON response")

        files = data.get("files")
        if data.get("success") and isinstance(files, list):
            logger.info(f"[CodeGen] Received {len(files)} files")
            return ChatResponse(
                success=True,
                files=files,
                total_files=len(files),
                metadata=data.get("metadata") or {},
                source="api_enhanced",
            )

        raise CodeGenerationError(data.get("error") or "No files generated by API")

    async def handle_prompt(self, prompt: str) -> ChatResponse:
        if not prompt or not prompt.strip():
            raise InvalidPromptError()

        classification = classify_prompt(prompt)
        if classification.requires_generation:
            return await self.generate(prompt, classification)

        return ChatResponse(success=True, response=CHAT_REPLY, source="chat")
