"""
Wire types for the remote services.
All types are Pydantic models matching the Ollama REST API payloads.
"""

from typing import Optional
from pydantic import BaseModel, Field


# ----- Ollama /api/tags -----

class OllamaModelDetails(BaseModel):
    """Model metadata reported by Ollama."""
    format: str = ""
    family: str = ""
    families: Optional[list[str]] = None
    parameter_size: str = ""
    quantization_level: str = ""


class OllamaTagModel(BaseModel):
    """A locally available model as listed by /api/tags."""
    name: str
    model: str = ""
    modified_at: str = ""
    size: int = 0
    digest: str = ""
    details: OllamaModelDetails = Field(default_factory=OllamaModelDetails)
    # Only newer servers report capabilities in the tag listing
    capabilities: Optional[list[str]] = None


class OllamaTagsResponse(BaseModel):
    """Response body of GET /api/tags."""
    models: list[OllamaTagModel] = Field(default_factory=list)
