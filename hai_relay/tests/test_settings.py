from hai_relay.config.settings import Settings


def test_defaults_match_relay_constants(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("PORT", "STREAM_CHUNK_SIZE", "FALLBACK_MODE_ID", "RELAY_CONFIG_FILE"):
        monkeypatch.delenv(key, raising=False)
    s = Settings()
    assert s.port == 8000
    assert s.stream_chunk_size == 50
    assert s.stream_chunk_delay == 0.05
    assert s.fallback_mode_id == 36
    assert s.default_model == "gpt-4o-mini"


def test_yaml_config_and_env_override(monkeypatch, tmp_path):
    cfg = tmp_path / "relay.yaml"
    cfg.write_text("port: 9100\nupstream_base_url: https://mirror.test/\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RELAY_CONFIG_FILE", str(cfg))
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("UPSTREAM_BASE_URL", raising=False)

    s = Settings()
    assert s.port == 9100
    assert s.upstream_base_url == "https://mirror.test"

    monkeypatch.setenv("PORT", "9200")
    assert Settings().port == 9200
