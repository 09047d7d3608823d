import backend.config_base as cfg


def test_clean_env_raw():
    assert cfg._clean_env_raw(None) is None
    assert cfg._clean_env_raw("  ") is None
    assert cfg._clean_env_raw("'value'") == "value"
    assert cfg._clean_env_raw('"value"') == "value"
    assert cfg._clean_env_raw("  value ") == "value"


def test_get_env_parsers(monkeypatch):
    monkeypatch.delenv("TEST_STR", raising=False)
    assert cfg._get_env_str("TEST_STR", "default") == "default"

    monkeypatch.setenv("TEST_STR", "  hello ")
    assert cfg._get_env_str("TEST_STR", "default") == "hello"

    monkeypatch.setenv("TEST_INT", "10")
    assert cfg._get_env_int("TEST_INT", 1) == 10
    monkeypatch.setenv("TEST_INT", "bad")
    assert cfg._get_env_int("TEST_INT", 1) == 1

    monkeypatch.setenv("TEST_FLOAT", "3.5")
    assert cfg._get_env_float("TEST_FLOAT", 1.0) == 3.5
    monkeypatch.setenv("TEST_FLOAT", "bad")
    assert cfg._get_env_float("TEST_FLOAT", 1.0) == 1.0

    monkeypatch.setenv("TEST_BOOL", "yes")
    assert cfg._get_env_bool("TEST_BOOL", False) is True
    monkeypatch.setenv("TEST_BOOL", "no")
    assert cfg._get_env_bool("TEST_BOOL", True) is False
    monkeypatch.setenv("TEST_BOOL", "maybe")
    assert cfg._get_env_bool("TEST_BOOL", True) is True


def test_caps():
    assert cfg._cap_int("CAP", 1, min_v=3, max_v=5) == 3
    assert cfg._cap_int("CAP", 10, min_v=3, max_v=5) == 5
    assert cfg._cap_int("CAP", 4, min_v=3, max_v=5) == 4

    assert cfg._cap_float_min("CAPF", 0.1, min_v=0.5) == 0.5
    assert cfg._cap_float_min("CAPF", 0.6, min_v=0.5) == 0.6



def test_get_env_secret_skips_placeholders_and_uses_fallbacks(monkeypatch):
    monkeypatch.setenv("TEST_PRIMARY_KEY", "YOUR_TMDB_API_KEY")
    monkeypatch.setenv("TEST_FALLBACK_KEY", " 'abc123' ")
    assert cfg._get_env_secret("TEST_PRIMARY_KEY", "TEST_FALLBACK_KEY") == "abc123"

    monkeypatch.setenv("TEST_PRIMARY_KEY", "real-key")
    assert cfg._get_env_secret("TEST_PRIMARY_KEY", "TEST_FALLBACK_KEY") == "real-key"

    monkeypatch.delenv("TEST_PRIMARY_KEY")
    monkeypatch.setenv("TEST_FALLBACK_KEY", "<put your key here>")
    assert cfg._get_env_secret("TEST_PRIMARY_KEY", "TEST_FALLBACK_KEY") is None
