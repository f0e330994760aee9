import pytest

from appender.config import Settings


def test_defaults_from_empty_environment():
    cfg = Settings.from_environment({})

    assert cfg.pod_name == "default-instance"
    assert cfg.target_url == ""
    assert not cfg.forwarding_enabled
    assert cfg.listen_addr == ":8080"
    assert (cfg.host, cfg.port) == ("0.0.0.0", 8080)
    assert cfg.static_dir == "."
    assert cfg.shutdown_timeout == 5.0
    assert cfg.otel_exporter == "none"


def test_values_from_environment():
    cfg = Settings.from_environment(
        {
            "POD_NAME": "test-pod",
            "TARGET_URL": "http://target:8080/append",
            "LISTEN_ADDR": "127.0.0.1:9000",
            "FORWARD_TIMEOUT": "2.5",
            "LOG_LEVEL": "debug",
            "OTEL_EXPORTER": "Console",
        }
    )

    assert cfg.pod_name == "test-pod"
    assert cfg.forwarding_enabled
    assert cfg.target_url == "http://target:8080/append"
    assert (cfg.host, cfg.port) == ("127.0.0.1", 9000)
    assert cfg.forward_timeout == 2.5
    assert cfg.log_level == "DEBUG"
    assert cfg.otel_exporter == "console"


def test_blank_values_count_as_unset():
    cfg = Settings.from_environment({"POD_NAME": "  ", "TARGET_URL": ""})

    assert cfg.pod_name == "default-instance"
    assert not cfg.forwarding_enabled


@pytest.mark.parametrize("addr", ["8080", "host:", "host:http"])
def test_invalid_listen_address(addr):
    cfg = Settings(listen_addr=addr)
    with pytest.raises(ValueError, match="listen address"):
        cfg.port


def test_settings_are_immutable():
    cfg = Settings()
    with pytest.raises(AttributeError):
        cfg.pod_name = "other"


def test_blank_numeric_and_level_values_use_defaults():
    cfg = Settings.from_environment({"FORWARD_TIMEOUT": " ", "LOG_LEVEL": "", "OTEL_EXPORTER": ""})

    assert cfg.forward_timeout == 10.0
    assert cfg.log_level == "INFO"
    assert cfg.otel_exporter == "none"


@pytest.mark.parametrize("value, expected", [("warn", "WARNING"), ("WARNING", "WARNING"), ("fatal", "CRITICAL")])
def test_log_level_aliases(value, expected):
    assert Settings.from_environment({"LOG_LEVEL": value}).log_level == expected


def test_unknown_log_level():
    with pytest.raises(ValueError, match="LOG_LEVEL"):
        Settings.from_environment({"LOG_LEVEL": "chatty"})
