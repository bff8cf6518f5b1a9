import json

import pytest

from minusagent import config as config_mod
from minusagent.config import Config, LLMConfig, load_config
from minusagent.errors import ConfigError

ENV_KEYS = ["LLM_API_KEY", "LLM_BASE_URL", "LLM_MODEL", "LLM_MAX_TOKENS", "MINUSAGENT_MAX_ITERATIONS"]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MINUSAGENT_CONFIG", str(tmp_path / "missing.json"))
    monkeypatch.setattr(config_mod, "load_dotenv", lambda: False)


def test_env_fallback_defaults(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "k")
    cfg = load_config()
    llm = cfg.get_llm()
    assert llm.api_key == "k"
    assert llm.model == "codestral-2508"
    assert llm.base_url == "https://codestral.mistral.ai/v1/chat/completions"
    assert llm.max_tokens == 4096
    assert cfg.agent.max_iterations == 10


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "k")
    monkeypatch.setenv("LLM_MODEL", "other")
    monkeypatch.setenv("LLM_BASE_URL", "http://localhost:8080/v1/chat/completions")
    monkeypatch.setenv("MINUSAGENT_MAX_ITERATIONS", "4")
    cfg = load_config()
    assert cfg.get_llm().model == "other"
    assert cfg.get_llm("other").base_url.startswith("http://localhost")
    assert cfg.agent.max_iterations == 4


def test_missing_api_key():
    with pytest.raises(ConfigError):
        load_config()


def test_bad_integer(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "k")
    monkeypatch.setenv("MINUSAGENT_MAX_ITERATIONS", "many")
    with pytest.raises(ConfigError):
        load_config()


def test_config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "agent": {"default_llm": "b"},
                "llm": [
                    {"model": "a", "base_url": "http://a", "api_key": "ka"},
                    {"model": "b", "base_url": "http://b", "api_key": "kb", "max_tokens": 100},
                ],
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("MINUSAGENT_CONFIG", str(path))
    cfg = load_config()
    assert cfg.get_llm().model == "b"
    assert cfg.get_llm("a").api_key == "ka"
    assert cfg.agent.max_iterations == 10
    with pytest.raises(ConfigError):
        cfg.get_llm("c")


def test_invalid_config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text('{"llm": [{"model": "a"}]}', encoding="utf-8")
    monkeypatch.setenv("MINUSAGENT_CONFIG", str(path))
    with pytest.raises(ConfigError):
        load_config()


def test_get_llm_without_entries():
    with pytest.raises(ConfigError):
        Config().get_llm()
    assert Config(llm=[LLMConfig(model="m", api_key="k")]).get_llm().model == "m"


def test_model_argument_overrides_llm_model(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "k")
    monkeypatch.setenv("LLM_MODEL", "from-env")
    cfg = load_config("other-model")
    assert cfg.get_llm("other-model").model == "other-model"
    assert cfg.get_llm().model == "other-model"
    assert load_config().get_llm().model == "from-env"
