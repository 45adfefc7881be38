from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ChatRequest(BaseModel):
    prompt: str = ""


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool = True
    response: Optional[str] = None
    files: Optional[List[Any]] = None
    total_files: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    source: str  # api_enhanced, chat

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ClassifyResponse(BaseModel):
    requires_generation: bool
    is_question: bool
    language: str
    framework: str
    complexity: str  # simple, intermediate, advanced
