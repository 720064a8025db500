from dataclasses import dataclass
from enum import Enum


class ModelCapability(str, Enum):
    TEXT = "text"
    VISION = "vision"


class ChatMode(str, Enum):
    QUICK = "quick"
    THINK = "think"
    LEGACY = "legacy"


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    display_name: str
    capability: ModelCapability
    enabled: bool = True
