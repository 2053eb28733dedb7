"""
Logging Tests

Tests for the console loggers, module configuration and structured sinks.

Run with: pytest tests/test_logging.py -v
"""

import json

import pytest

from syncdash import logging as sd_logging
from syncdash.logging import (
    FileSink,
    LogLevel,
    MemorySink,
    NullSink,
    configure_logging,
    create_sink_for_module,
    emit_record,
    get_logger,
    get_module_config,
    register_sink,
    set_default_sink,
    set_module_config,
)


# =============================================================================
# Console loggers
# =============================================================================

class TestConsoleLogger:
    """Level filtering and formatting."""

    def test_logger_is_cached(self):
        assert get_logger('sync_hub') is get_logger('sync_hub')

    def test_format(self, capsys):
        configure_logging(level='INFO')

        get_logger('unit').info("delay %.2f", 0.25)

        assert capsys.readouterr().out == "[unit] INFO: delay 0.25\n"

    def test_below_level_suppressed(self, capsys):
        configure_logging(level='WARNING')
        log = get_logger('unit')

        log.info("hidden")
        log.warning("shown")

        assert capsys.readouterr().out == "[unit] WARN: shown\n"

    def test_module_override(self, capsys):
        configure_logging(level='ERROR', modules={'scheduler': 'TRACE'})

        get_logger('scheduler').trace("verbose")
        get_logger('other').info("quiet")

        assert capsys.readouterr().out == "[scheduler] TRACE: verbose\n"

    def test_off(self, capsys):
        sd_logging.disable_logging()

        get_logger('unit').critical("nothing")

        assert capsys.readouterr().out == ""

    def test_bad_format_args_still_logged(self, capsys):
        configure_logging(level='DEBUG')

        get_logger('unit').debug("value %d", "not-a-number")

        assert "value %d" in capsys.readouterr().out

    def test_unknown_level_name_defaults_to_info(self):
        configure_logging(level='LOUD')

        assert get_logger('unit').level == LogLevel.INFO


# =============================================================================
# Sinks
# =============================================================================

class TestSinks:
    """Record routing through the sink registry."""

    def test_emit_without_sink(self):
        assert emit_record('nobody', {'type': 'x'}) is False

    def test_memory_sink(self):
        sink = MemorySink()
        register_sink('sync', sink)

        assert emit_record('sync', {'type': 'deliver', 'score': 3}) is True
        assert emit_record('sync', {'type': 'drop'}) is True

        assert sink.of_type('deliver') == [{'module': 'sync', 'type': 'deliver', 'score': 3}]
        assert len(sink.records) == 2

    def test_memory_sink_bounded(self):
        sink = MemorySink(max_records=2)

        for i in range(5):
            sink.emit('sync', {'i': i})

        assert [r['i'] for r in sink.records] == [3, 4]

    def test_default_sink(self):
        sink = MemorySink()
        set_default_sink(sink)

        emit_record('anything', {'type': 'x'})

        assert sink.records == [{'module': 'anything', 'type': 'x'}]

    def test_close_all_sinks(self):
        sink = MemorySink()
        register_sink('sync', sink)

        sd_logging.close_all_sinks()

        assert sink.closed is True
        assert sd_logging.get_sink('sync') is None

    def test_file_sink_writes_jsonl(self, tmp_path):
        sink = FileSink(log_dir=str(tmp_path), session_name="unit")

        sink.emit('sync', {'type': 'deliver', 'score': 1})
        path = sink.log_paths['sync']
        sink.close()

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert path.name == "unit_sync.jsonl"
        assert [r['type'] for r in lines] == ['header', 'deliver', 'footer']
        assert lines[1]['score'] == 1
        assert 'wall_time' in lines[1]

    def test_file_sink_uses_configured_dir(self, tmp_path):
        configure_logging(log_dir=str(tmp_path))
        sink = FileSink(session_name="cfg")

        sink.emit('sync', {'type': 'x'})
        sink.close()

        assert (tmp_path / "cfg_sync.jsonl").exists()


# =============================================================================
# Module configuration
# =============================================================================

class TestModuleConfig:
    """SYNCDASH_LOG_* and SYNCDASH_LOGGING_* handling."""

    def test_unconfigured_module(self):
        assert get_module_config('nothing_here') == {}

    def test_set_module_config(self):
        set_module_config('Sync', enabled=True, interval=5)

        assert get_module_config('sync') == {'enabled': True, 'interval': 5}

    def test_env_settings(self, monkeypatch):
        monkeypatch.setenv('SYNCDASH_LOGGING_SYNC_ENABLED', 'true')
        monkeypatch.setenv('SYNCDASH_LOGGING_SYNC_INTERVAL', '5')
        monkeypatch.setenv('SYNCDASH_LOG_SYNC_HUB', 'debug')
        monkeypatch.setenv('SYNCDASH_LOG_LEVEL', 'ERROR')

        sd_logging._load_env_config()

        assert get_module_config('sync') == {'enabled': True, 'interval': 5}
        assert get_logger('sync_hub').level == LogLevel.DEBUG
        assert get_logger('runner').level == LogLevel.ERROR

    def test_env_log_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv('SYNCDASH_LOG_DIR', str(tmp_path))

        sd_logging._load_env_config()

        assert sd_logging.get_log_dir() == str(tmp_path)

    @pytest.mark.parametrize("raw,parsed", [
        ('yes', True), ('off', False), ('12', 12), ('0.5', 0.5), ('path', 'path'),
    ])
    def test_parse_env_value(self, raw, parsed):
        assert sd_logging._parse_env_value(raw) == parsed

    def test_sink_for_disabled_module(self):
        assert isinstance(create_sink_for_module('sync'), NullSink)

    def test_sink_for_enabled_module(self, tmp_path):
        configure_logging(log_dir=str(tmp_path))
        set_module_config('sync', enabled=True)

        assert isinstance(create_sink_for_module('sync', "s"), FileSink)
