"""Domain models for persisted settings and transient service state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from core.constants import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_CONTEXT_SIZE,
    DEFAULT_DOCUMENT_MODEL,
    DEFAULT_OLLAMA_HOSTNAME,
    DEFAULT_OLLAMA_PORT,
    DEFAULT_VISION_MODEL,
)
from core.errors import InvalidInputError
from core.validation import is_valid_ipv6, parse_hostname, parse_port


class ServiceKind(str, Enum):
    """Remote services the app talks to."""

    OLLAMA = "ollama"
    DOCLING = "docling"

    @property
    def display_name(self) -> str:
        return "Ollama" if self is ServiceKind.OLLAMA else "Docling"


class ModelRole(str, Enum):
    """Roles a model preference can be selected for."""

    CHAT = "chat"
    DOCUMENT = "document"
    VISION = "vision"

    @property
    def requires_vision(self) -> bool:
        # Document processing needs image input for scanned pages
        return self is not ModelRole.CHAT


class ConnectionStatus(str, Enum):
    """Connection health of a remote service."""

    UNKNOWN = "unknown"
    TESTING = "testing"
    CONNECTED = "connected"
    FAILED = "failed"

    @property
    def display_text(self) -> str:
        return _STATUS_DISPLAY[self][0]

    @property
    def color(self) -> str:
        return _STATUS_DISPLAY[self][1]

    @property
    def icon(self) -> str:
        return _STATUS_DISPLAY[self][2]


_STATUS_DISPLAY = {
    ConnectionStatus.UNKNOWN: ("Not tested", "#8E8E93", "question-circle"),
    ConnectionStatus.TESTING: ("Testing...", "#0A84FF", "clock"),
    ConnectionStatus.CONNECTED: ("Connected", "#30D158", "check-circle"),
    ConnectionStatus.FAILED: ("Failed", "#FF453A", "x-circle"),
}


@dataclass
class Setting:
    """A configuration setting row."""

    key: str
    value: str
    category: str
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class ServiceEndpoint:
    """Hostname and port of a remote service."""

    hostname: str = DEFAULT_OLLAMA_HOSTNAME
    port: int = DEFAULT_OLLAMA_PORT

    def __post_init__(self) -> None:
        # Raises InvalidInputError so no out-of-range endpoint can exist
        object.__setattr__(self, "hostname", parse_hostname(self.hostname))
        object.__setattr__(self, "port", parse_port(self.port))

    @property
    def base_url(self) -> str:
        host = f"[{self.hostname}]" if is_valid_ipv6(self.hostname) else self.hostname
        return f"http://{host}:{self.port}"

    def to_dict(self) -> dict[str, object]:
        return {"hostname": self.hostname, "port": self.port}

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceEndpoint":
        if not isinstance(data, dict):
            raise InvalidInputError("Endpoint record must be an object")
        return cls(hostname=data.get("hostname", ""), port=data.get("port", 0))


@dataclass(frozen=True)
class ModelDescriptor:
    """A model reported by the model directory."""

    name: str
    display_name: str
    supports_vision: bool = False
    size: int = 0
    modified_at: str = ""

    @property
    def formatted_size(self) -> str:
        if self.size >= 1024 ** 3:
            return f"{self.size / 1024 ** 3:.1f} GB"
        return f"{self.size / 1024 ** 2:.1f} MB"


@dataclass(frozen=True)
class ModelOption:
    """One row of a role picker; unavailable rows keep a stale preference visible."""

    name: str
    label: str
    supports_vision: bool = False
    available: bool = True


@dataclass
class ModelPreferences:
    """Selected model names per role plus the context size limit."""

    chat_model: str = DEFAULT_CHAT_MODEL
    document_model: str = DEFAULT_DOCUMENT_MODEL
    vision_model: str = DEFAULT_VISION_MODEL
    context_size_limit: int = DEFAULT_CONTEXT_SIZE
    last_updated: datetime = field(default_factory=datetime.now)

    def model_for(self, role: ModelRole) -> str:
        if role is ModelRole.CHAT:
            return self.chat_model
        if role is ModelRole.DOCUMENT:
            return self.document_model
        return self.vision_model

    def set_model(self, role: ModelRole, name: str) -> None:
        if role is ModelRole.CHAT:
            self.chat_model = name
        elif role is ModelRole.DOCUMENT:
            self.document_model = name
        else:
            self.vision_model = name
        self.last_updated = datetime.now()

    def copy(self) -> "ModelPreferences":
        return ModelPreferences(
            chat_model=self.chat_model,
            document_model=self.document_model,
            vision_model=self.vision_model,
            context_size_limit=self.context_size_limit,
            last_updated=self.last_updated,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "chat_model": self.chat_model,
            "document_model": self.document_model,
            "vision_model": self.vision_model,
            "context_size_limit": self.context_size_limit,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class ModelSelectionState:
    """Snapshot of the model directory cache; replaced wholesale on every change."""

    available_models: tuple[ModelDescriptor, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None
    last_fetch_time: Optional[datetime] = None
