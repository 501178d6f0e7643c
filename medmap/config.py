import json
import os
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .helpers import load_file

PLACEHOLDER_API_KEY = "dummy-key-for-demo"
PATTERNS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "patterns")


def _default_profiles():
    return {
        "openai": LLMProfile(
            type="openai",
            api_key=os.getenv("OPENAI_API_KEY") or PLACEHOLDER_API_KEY,
            base_url=os.getenv("OPENAI_BASE_URL"),
        )
    }


class LLMProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["openai", "azure_openai", "anthropic"]
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    endpoint: Optional[str] = None
    api_version: str = "2024-08-01-preview"
    default_model: str = "gpt-4"
    options: Dict[str, Any] = Field(default_factory=dict)


class LLMConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_profile: str = "openai"
    profiles: Dict[str, LLMProfile] = Field(default_factory=_default_profiles)


class VerificationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reputable_sources: List[str] = [
        "ncbi.nlm.nih.gov",
        "mayoclinic.org",
        "who.int",
        "cdc.gov",
        "nih.gov",
    ]
    sources_per_concept: int = 2
    fetch_sources: bool = False
    fetch_timeout: int = 10
    max_workers: Optional[int] = None


class Config(BaseModel):
    model_config = ConfigDict(extra="forbid")

    loglevel: str = "INFO"
    pattern_paths: List[str] = Field(default_factory=lambda: [PATTERNS_PATH])
    max_upload_mb: Optional[int] = None
    llm: LLMConfig = Field(default_factory=LLMConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)

    def get(self, path: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. config.get("llm.default_profile")"""
        node: Any = self
        for key in path.split("."):
            if isinstance(node, BaseModel):
                node = getattr(node, key, None)
            elif isinstance(node, dict):
                node = node.get(key)
            else:
                node = None
            if node is None:
                return default
        return node


def load_config(config_path: Optional[str] = None) -> Config:
    """Load config from a JSON file; missing path means built-in defaults"""
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH")
    if not config_path:
        return Config()
    return Config(**json.loads(load_file(os.path.expanduser(config_path))))
