import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import openai
import tiktoken
from anthropic import Anthropic
from flask.logging import default_handler
from langchain_core.messages.chat import ChatMessage

from .config import PLACEHOLDER_API_KEY, Config, LLMProfile
from .helpers import load_file, merge_dicts
from .variable_handler import VariableHandler


class Generator:
    """Handle API connections and text generations using LLM providers"""

    def __init__(self, config: Config, variable_handler: Optional[VariableHandler] = None):
        self.config = config
        self.variable_handler = variable_handler or VariableHandler(config)

        self.logger = logging.getLogger("app.generator")
        self.logger.addHandler(default_handler)
        self.logger.setLevel(self.config.get("loglevel", default=logging.INFO))

        self._clients: Dict[str, Any] = {}

    def _load_profile(self, profile_name) -> LLMProfile:
        profile = self.config.get("llm.profiles", default={}).get(profile_name, None)
        if profile is None:
            raise ValueError(f"Profile '{profile_name}' not found in config")
        return profile

    def _get_profile(self, profile_name) -> Tuple[str, LLMProfile]:
        if profile_name is None:  # try default profile
            profile_name = self.config.get("llm.default_profile")
            if profile_name is None:
                raise ValueError("No default profile defined")

        return profile_name, self._load_profile(profile_name)

    def get_profile(self, profile_name: Optional[str] = None) -> Tuple[str, LLMProfile]:
        """Resolve a profile by name, the default profile when no name is given"""
        return self._get_profile(profile_name)

    @staticmethod
    def _api_key(profile: LLMProfile, env_var: str) -> str:
        # a missing key must not prevent startup, calls fail and fall back instead
        return profile.api_key or os.getenv(env_var) or PLACEHOLDER_API_KEY

    def _get_azure_openai_client(self, profile: LLMProfile):
        assert profile.endpoint is not None, "Endpoint for profile not found in config!"

        return openai.AzureOpenAI(
            azure_endpoint=profile.endpoint,
            api_key=self._api_key(profile, "AZURE_OPENAI_API_KEY"),
            api_version=profile.api_version,
        )

    def _get_openai_client(self, profile: LLMProfile):
        return openai.OpenAI(
            api_key=self._api_key(profile, "OPENAI_API_KEY"), base_url=profile.base_url
        )

    def _get_anthropic_client(self, profile: LLMProfile):
        return Anthropic(
            api_key=self._api_key(profile, "ANTHROPIC_API_KEY"),
            base_url=profile.endpoint or profile.base_url,
        )

    def _get_client(self, profile_name):
        if profile_name in self._clients:
            return self._clients[profile_name]

        _, profile = self._get_profile(profile_name)

        if profile.type == "azure_openai":
            self._clients[profile_name] = self._get_azure_openai_client(profile)
        elif profile.type == "openai":
            self._clients[profile_name] = self._get_openai_client(profile)
        elif profile.type == "anthropic":
            self._clients[profile_name] = self._get_anthropic_client(profile)
        else:
            raise ValueError(f"Unknown profile type: '{profile.type}'")

        return self._clients[profile_name]

    def _generate_openai(self, profile_name: str, model: str, messages: List[Dict], **kwargs) -> str:
        client = self._get_client(profile_name)
        response = client.chat.completions.create(model=model, messages=messages, **kwargs)
        return response.choices[0].message.content or ""

    def _generate_anthropic(
        self,
        profile_name: str,
        model: str,
        messages: List[Dict],
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        client = self._get_client(profile_name)

        system = None
        # Anthropic accepts system messages in a different way
        if messages and messages[0]["role"] == "system":
            system = messages[0]["content"]
            messages = messages[1:]

        kwargs = dict(options or {})
        if system is not None:
            kwargs["system"] = system

        response = client.messages.create(model=model, messages=messages, **kwargs)
        return "".join(block.text for block in response.content if block.type == "text")

    def translate_options(self, options: Dict[str, Any], flavor: str = "openai"):
        """Translate keys in options dict to OpenAI/Anthropic compatible keys
        Anything not found in mapping will be ignored!
        """
        mapping = {}
        if flavor == "openai":
            mapping = {
                "temperature": "temperature",
                "num_predict": "max_tokens",
                "top_p": "top_p",
                "presence_penalty": "presence_penalty",
                "frequency_penalty": "frequency_penalty",
            }
        elif flavor == "anthropic":
            mapping = {
                "temperature": "temperature",
                "num_predict": "max_tokens",
                "top_p": "top_p",
            }

        ignored = []
        translated = {}
        for key, val in options.items():
            if key in mapping:
                translated[mapping[key]] = val
            else:
                ignored.append(key)

        return translated, ignored

    @staticmethod
    def count_tokens(text: str, model: str = "gpt-4o-mini"):
        """Count tokens of text"""
        encoding = tiktoken.encoding_for_model(model)
        return len(encoding.encode(text))

    @staticmethod
    def _chatmessages_to_json(messages: List[ChatMessage]):
        """Convert langchain message format to JSON compatible with APIs"""
        return [{"role": msg.role, "content": copy.copy(msg.content)} for msg in messages]

    def _find_pattern(self, pattern: str) -> Path:
        for ppath in self.config.pattern_paths:
            pattern_path = Path(os.path.expanduser(ppath)) / pattern
            if pattern_path.is_dir():
                return pattern_path
        raise ValueError(f"Pattern not found: {pattern}")

    def build_messages(
        self,
        pattern: str,
        variables: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> List[ChatMessage]:
        """Combine a pattern's system/user prompts with variables and input data"""
        variables = variables or {}
        data = dict(data or {})
        pattern_path = self._find_pattern(pattern)

        has_input = bool(data)
        messages = []
        system_prompt = self.variable_handler.resolve(
            load_file(pattern_path / "system.md", "").strip(), variables, data
        )
        if len(system_prompt):
            messages.append(ChatMessage(content=system_prompt, role="system"))

        user_prompt = self.variable_handler.resolve(
            load_file(pattern_path / "user.md", "").strip(), variables, data, coalesce_data=True
        )
        # input data is the user turn even when it is empty
        if len(user_prompt) or has_input:
            messages.append(ChatMessage(content=user_prompt, role="user"))

        return messages

    def complete(
        self,
        pattern: str,
        variables: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
        options: Optional[Dict[str, Any]] = None,
        profile_name: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Run one chat completion for a pattern and return the reply text"""
        api_messages = self._chatmessages_to_json(self.build_messages(pattern, variables, data))
        profile_name, profile = self._get_profile(profile_name)

        if model is None:
            model = profile.default_model

        options = merge_dicts(options or {}, profile.options)

        self.logger.info(
            "pattern:%s // profile:%s // service:%s // model:%s // options:%s",
            pattern,
            profile_name,
            profile.type,
            model,
            options,
        )

        if profile.type in ("openai", "azure_openai"):
            translated_options, ignored_options = self.translate_options(options)
            if len(ignored_options):
                self.logger.debug("Ignored options in the request: %s", ignored_options)
            return self._generate_openai(profile_name, model, api_messages, **translated_options)

        if profile.type == "anthropic":
            translated_options, ignored_options = self.translate_options(options, flavor="anthropic")
            if len(ignored_options):
                self.logger.debug("Ignored options in the request: %s", ignored_options)
            if "max_tokens" not in translated_options:
                translated_options["max_tokens"] = 4096
            return self._generate_anthropic(profile_name, model, api_messages, translated_options)

        raise ValueError(f"Unknown service '{profile.type}'")
