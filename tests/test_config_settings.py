import pytest

from coco_completion.config import DEFAULT_SETTINGS, load_settings, prompt_config_from_settings
from coco_completion.llm.types import ConfigError


def test_defaults_when_settings_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("COCO_MODEL_ID_OR_ENDPOINT", raising=False)
    monkeypatch.delenv("COCO_LOG_LEVEL", raising=False)
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings["completion"]["char_limit"] == DEFAULT_SETTINGS["completion"]["char_limit"]

    config = prompt_config_from_settings(settings)
    assert config.model_id_or_endpoint == "bigcode/starcoder"
    assert config.is_fill_mode is True
    assert config.stop_tokens == ("<|endoftext|>",)


def test_user_keys_override_template_preset(tmp_path, monkeypatch):
    monkeypatch.delenv("COCO_MODEL_ID_OR_ENDPOINT", raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text(
        "completion:\n"
        "  config_template: codellama/CodeLlama-13b-hf\n"
        "  model_id_or_endpoint: http://localhost:8080/generate\n"
        "  max_new_tokens: 128\n",
        encoding="utf-8",
    )

    config = prompt_config_from_settings(load_settings(str(path)))
    assert config.model_id_or_endpoint == "http://localhost:8080/generate"
    assert config.max_new_tokens == 128
    assert config.fill_mode_template == "<PRE> [PREFIX] <SUF>[SUFFIX] <MID>"
    assert config.stop_tokens == ("<EOT>",)


def test_env_override_for_endpoint(tmp_path, monkeypatch):
    monkeypatch.setenv("COCO_MODEL_ID_OR_ENDPOINT", "https://gateway.local/generate")
    monkeypatch.setenv("COCO_LOG_LEVEL", "debug")
    settings = load_settings(str(tmp_path / "missing.yaml"))

    assert settings["logging"]["level"] == "DEBUG"
    assert prompt_config_from_settings(settings).model_id_or_endpoint == "https://gateway.local/generate"


def test_no_preset_uses_completion_keys_directly():
    settings = {
        "completion": {
            "config_template": None,
            "model_id_or_endpoint": "my-model",
            "is_fill_mode": False,
            "autoregressive_mode_template": "// [PREFIX]",
            "fill_mode_template": "[PREFIX][SUFFIX]",
            "stop_tokens": ["\n\n"],
            "tokens_to_clear": [],
            "temperature": 0,
            "max_new_tokens": 20,
        }
    }
    config = prompt_config_from_settings(settings)
    assert config.autoregressive_template == "// [PREFIX]"
    assert config.temperature == 0.0
    assert config.tokens_to_clear == ()


def test_unknown_preset_is_config_error():
    with pytest.raises(ConfigError, match="Unknown config template"):
        prompt_config_from_settings({"completion": {"config_template": "nope"}})


def test_template_without_placeholder_is_config_error():
    settings = {
        "completion": {
            "config_template": None,
            "model_id_or_endpoint": "m",
            "is_fill_mode": True,
            "autoregressive_mode_template": "[PREFIX]",
            "fill_mode_template": "[PREFIX] only",
            "temperature": 0.1,
            "max_new_tokens": 60,
        }
    }
    with pytest.raises(ConfigError, match=r"missing \[SUFFIX\]"):
        prompt_config_from_settings(settings)


def test_negative_temperature_is_config_error():
    settings = {"completion": {"config_template": "bigcode/starcoder", "_explicit": ["temperature"], "temperature": -1}}
    with pytest.raises(ConfigError, match="temperature"):
        prompt_config_from_settings(settings)


def _explicit_settings(**overrides):
    completion = {
        "config_template": None,
        "model_id_or_endpoint": "m",
        "is_fill_mode": True,
        "autoregressive_mode_template": "[PREFIX]",
        "fill_mode_template": "[PREFIX][SUFFIX]",
        "temperature": 0.1,
        "max_new_tokens": 60,
    }
    completion.update(overrides)
    return {"completion": completion}


def test_bad_numeric_settings_are_config_errors():
    for overrides in [
        {"max_new_tokens": "abc"},
        {"max_new_tokens": float("inf")},
        {"max_new_tokens": None},
        {"temperature": "abc"},
        {"temperature": float("nan")},
    ]:
        with pytest.raises(ConfigError):
            prompt_config_from_settings(_explicit_settings(**overrides))


def test_yaml_infinity_is_config_error(tmp_path, monkeypatch):
    monkeypatch.delenv("COCO_MODEL_ID_OR_ENDPOINT", raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text("completion:\n  max_new_tokens: .inf\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid numeric"):
        prompt_config_from_settings(load_settings(str(path)))


def test_missing_completion_key_is_config_error():
    settings = _explicit_settings()
    del settings["completion"]["max_new_tokens"]
    with pytest.raises(ConfigError, match="Missing completion settings: max_new_tokens"):
        prompt_config_from_settings(settings)
