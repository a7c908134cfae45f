import logging

from pudding.logconfig import (
    ENCODER_TYPE_CONSOLE,
    OUTPUT_CONSOLE,
    FileConfig,
    LogConfig,
    default_config,
    level_for,
)


def test_default_config_values():
    c = default_config()
    assert c.writers == [OUTPUT_CONSOLE]
    assert c.format == ENCODER_TYPE_CONSOLE
    assert c.level == "info"
    assert c.caller_skip == 1
    assert c.file_config == FileConfig()


def test_default_config_copies_are_independent():
    a = default_config()
    a.writers.append("file")
    a.level = "debug"
    b = default_config()
    assert b.writers == [OUTPUT_CONSOLE]
    assert b.level == "info"


def test_level_names():
    assert level_for("") == logging.DEBUG
    assert level_for("debug") == logging.DEBUG
    assert level_for("info") == logging.INFO
    assert level_for("warn") == logging.WARNING
    assert level_for("error") == logging.ERROR
    assert level_for("fatal") == logging.CRITICAL


def test_unknown_level_is_info():
    assert level_for("verbose") == level_for("info")


def test_empty_log_config():
    c = LogConfig()
    assert c.writers == []
    assert c.file_config.compress is False
    assert c.log_name == ""