import json

import pytest
from pydantic import ValidationError

from medmap.config import PATTERNS_PATH, Config, load_config
from medmap.helpers import merge_dicts, parse_json_response
from medmap.variable_handler import VariableHandler


def test_defaults(monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    config = load_config()
    assert config.pattern_paths == [PATTERNS_PATH]
    assert config.get("llm.default_profile") == "openai"
    assert config.get("llm.profiles")["openai"].default_model == "gpt-4"
    assert config.get("verification.reputable_sources")[:2] == ["ncbi.nlm.nih.gov", "mayoclinic.org"]
    assert config.get("verification.max_workers") is None
    assert config.get("does.not.exist", default=3) == 3


def test_load_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "loglevel": "DEBUG",
                "llm": {
                    "default_profile": "local",
                    "profiles": {"local": {"type": "openai", "base_url": "http://localhost:8080/v1"}},
                },
                "verification": {"fetch_sources": True, "sources_per_concept": 3},
            }
        )
    )
    config = load_config(str(path))
    assert config.loglevel == "DEBUG"
    assert config.get("llm.profiles")["local"].base_url == "http://localhost:8080/v1"
    assert config.verification.fetch_sources is True
    assert config.verification.sources_per_concept == 3


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        Config(**{"users": {}})
    with pytest.raises(ValidationError):
        Config(**{"llm": {"profiles": {"x": {"type": "groq"}}}})


def test_variable_handler_resolve(config):
    handler = VariableHandler(config)
    assert handler.resolve("{{ a }} and {{b}} and {{ c }}", {"a": 1, "b": "two"}) == "1 and two and {{ c }}"


def test_variable_handler_coalesces_leftover_data(config):
    handler = VariableHandler(config)
    data = {"input": "notes", "extra": "more"}
    assert handler.resolve("Header {{ extra }}", {}, data, coalesce_data=True) == "Header more\n\nnotes"
    assert handler.resolve("", {}, {"input": "only"}, coalesce_data=True) == "only"


def test_parse_json_response():
    assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_response('  {"a": [1, 2]} ') == {"a": [1, 2]}
    assert parse_json_response("") == {}
    with pytest.raises(ValueError):
        parse_json_response("Here you go: {")


def test_merge_dicts():
    assert merge_dicts({"a": 1, "b": None}, {"b": 2, "c": 3}) == {"a": 1, "b": 2, "c": 3}
