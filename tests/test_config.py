from texttoslides import config


def test_env_api_key_strips_quotes(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", ' "sk-ant-123" \n')
    assert config.env_api_key("anthropic") == "sk-ant-123"
    assert config.env_api_key("unknown") == ""


def test_upload_limit_and_output_name(monkeypatch):
    monkeypatch.delenv("TEXTTOSLIDES_MAX_UPLOAD_MB", raising=False)
    assert config.max_upload_bytes() == 50 * 1024 * 1024
    monkeypatch.setenv("TEXTTOSLIDES_MAX_UPLOAD_MB", "lots")
    assert config.max_upload_bytes() == 50 * 1024 * 1024
    monkeypatch.setenv("TEXTTOSLIDES_OUTPUT_NAME", "deck.pptx")
    assert config.output_filename() == "deck.pptx"


def test_every_provider_has_a_default_model():
    assert set(config.DEFAULT_MODELS) == set(config.PROVIDER_MODELS) == set(config.API_KEY_ENV_VARS)
    for provider, model in config.DEFAULT_MODELS.items():
        assert model in config.PROVIDER_MODELS[provider]
