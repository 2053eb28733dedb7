"""
SyncDash logging.

Two channels share one configuration:

Console lines
    get_logger('sync_hub').info("delay %.2f", 0.1) prints
    "[sync_hub] INFO: delay 0.10" when the module's level allows it.
    Levels are per module, with a global default.

Structured records
    emit_record('sync', {...}) hands a JSON-serializable dict to the sink
    registered for that module: FileSink (JSONL, one file per module),
    MemorySink (kept in-process) or NullSink. Nothing is written when no
    sink is registered.

Environment:
    SYNCDASH_LOG_LEVEL=DEBUG              default console level
    SYNCDASH_LOG_<MODULE>=TRACE           level for one module
    SYNCDASH_LOG_DIR=./debug_logs         FileSink directory
    SYNCDASH_LOGGING_<MODULE>_<KEY>=value structured settings, e.g.
                                          SYNCDASH_LOGGING_SYNC_ENABLED=true

Programmatic:
    configure_logging(level='DEBUG', modules={'scheduler': 'TRACE'})
    set_module_config('sync', enabled=True, interval=5)
"""

import json
import os
import sys
import time
from abc import ABC, abstractmethod
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

ENV_PREFIX = 'SYNCDASH_LOG_'
SETTINGS_PREFIX = 'SYNCDASH_LOGGING_'


class LogLevel(IntEnum):
    """Console levels. Numeric values line up with the stdlib logging module."""
    TRACE = 5      # Per-snapshot detail
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    OFF = 100      # Nothing passes


_LEVEL_NAMES = {
    'TRACE': LogLevel.TRACE,
    'DEBUG': LogLevel.DEBUG,
    'INFO': LogLevel.INFO,
    'WARN': LogLevel.WARNING,
    'WARNING': LogLevel.WARNING,
    'ERROR': LogLevel.ERROR,
    'CRITICAL': LogLevel.CRITICAL,
    'OFF': LogLevel.OFF,
}

# Label printed for each level
_LEVEL_LABELS = {
    LogLevel.TRACE: 'TRACE',
    LogLevel.DEBUG: 'DEBUG',
    LogLevel.INFO: 'INFO',
    LogLevel.WARNING: 'WARN',
    LogLevel.ERROR: 'ERROR',
    LogLevel.CRITICAL: 'CRIT',
}


def _timestamp_fields(prefix: str) -> Dict[str, Any]:
    return {
        f"{prefix}_time": time.time(),
        f"{prefix}_time_iso": time.strftime("%Y-%m-%dT%H:%M:%S"),
    }


# =============================================================================
# Sinks
# =============================================================================

class LogSink(ABC):
    """Destination for structured records."""

    @abstractmethod
    def emit(self, module: str, record: Dict[str, Any]) -> None:
        """Accept one record from module."""

    @abstractmethod
    def flush(self) -> None:
        """Push buffered output to its destination."""

    @abstractmethod
    def close(self) -> None:
        """Release files or other resources."""

    def __enter__(self) -> 'LogSink':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class FileSink(LogSink):
    """
    JSON Lines output, one file per module.

    Files are named <session_name>_<module>.jsonl and opened on the first
    record for that module. A header line opens each file and close()
    appends a footer line.

    Args:
        log_dir: Target directory (resolved with get_log_dir() when omitted)
        session_name: File name prefix (current date and time when omitted)
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        session_name: Optional[str] = None,
    ):
        self._log_dir = Path(log_dir) if log_dir else None
        self._session_name = session_name or time.strftime("%Y%m%d_%H%M%S")
        self._handles: Dict[str, TextIO] = {}

    def _directory(self) -> Path:
        if self._log_dir is None:
            self._log_dir = Path(get_log_dir())
        self._log_dir.mkdir(parents=True, exist_ok=True)
        return self._log_dir

    def _path_for(self, module: str) -> Path:
        return self._directory() / f"{self._session_name}_{module}.jsonl"

    def _handle(self, module: str) -> TextIO:
        handle = self._handles.get(module)
        if handle is None:
            handle = open(self._path_for(module), 'a')
            self._handles[module] = handle
            self._write(handle, {
                "type": "header",
                "module": module,
                "session_name": self._session_name,
                **_timestamp_fields("start"),
            })
        return handle

    @staticmethod
    def _write(handle: TextIO, record: Dict[str, Any]) -> None:
        handle.write(json.dumps(record))
        handle.write("\n")

    def emit(self, module: str, record: Dict[str, Any]) -> None:
        if 'wall_time' not in record:
            record = {'wall_time': time.time(), **record}
        self._write(self._handle(module), record)

    def flush(self) -> None:
        for handle in self._handles.values():
            handle.flush()

    def close(self) -> None:
        for module, handle in self._handles.items():
            self._write(handle, {
                "type": "footer",
                "module": module,
                **_timestamp_fields("end"),
            })
            handle.close()
        self._handles.clear()

    @property
    def log_paths(self) -> Dict[str, Path]:
        """File path per module that has received records."""
        return {module: self._path_for(module) for module in self._handles}


class MemorySink(LogSink):
    """
    Keeps records in a list, each tagged with its module.

    Args:
        max_records: Keep only the newest this many (None keeps everything)
    """

    def __init__(self, max_records: Optional[int] = None):
        self._max_records = max_records
        self.records: List[Dict[str, Any]] = []
        self.closed = False

    def emit(self, module: str, record: Dict[str, Any]) -> None:
        self.records.append({'module': module, **record})
        if self._max_records is not None:
            overflow = len(self.records) - self._max_records
            if overflow > 0:
                del self.records[:overflow]

    def of_type(self, record_type: str) -> List[Dict[str, Any]]:
        return [r for r in self.records if r.get('type') == record_type]

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class NullSink(LogSink):
    """Discards everything."""

    def emit(self, module: str, record: Dict[str, Any]) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


_sinks: Dict[str, LogSink] = {}
_default_sink: Optional[LogSink] = None


def register_sink(module: str, sink: LogSink) -> None:
    """Route records from module to sink, replacing any previous sink."""
    _sinks[module] = sink


def set_default_sink(sink: Optional[LogSink]) -> None:
    """Fallback sink for modules with nothing registered (None removes it)."""
    global _default_sink
    _default_sink = sink


def get_sink(module: str) -> Optional[LogSink]:
    if module in _sinks:
        return _sinks[module]
    return _default_sink


def emit_record(module: str, record: Dict[str, Any]) -> bool:
    """
    Send a structured record to the module's sink.

    Returns:
        False when no sink (registered or default) is available
    """
    sink = get_sink(module)
    if sink is None:
        return False
    sink.emit(module, record)
    return True


def close_all_sinks() -> None:
    """Close and unregister every sink, including the default."""
    global _default_sink
    while _sinks:
        _, sink = _sinks.popitem()
        sink.close()
    if _default_sink is not None:
        _default_sink.close()
        _default_sink = None


def create_sink_for_module(
    module: str,
    session_name: Optional[str] = None,
) -> LogSink:
    """FileSink if structured logging is enabled for module, else NullSink."""
    if get_module_config(module).get('enabled', False):
        return FileSink(session_name=session_name)
    return NullSink()


# =============================================================================
# Configuration
# =============================================================================

_config: Dict[str, Any] = {
    'default_level': LogLevel.INFO,
    'module_levels': {},     # module key -> LogLevel
    'log_dir': None,         # None: SYNCDASH_LOG_DIR, then the platform default
    'modules': {},           # module -> structured settings
}


def _platform_log_dir() -> Path:
    if sys.platform == 'darwin':
        base = Path.home() / 'Library' / 'Application Support' / 'SyncDash'
    elif sys.platform == 'win32':
        base = Path(os.environ.get('APPDATA', str(Path.home()))) / 'SyncDash'
    else:
        data_home = os.environ.get('XDG_DATA_HOME') or str(Path.home() / '.local' / 'share')
        base = Path(data_home) / 'syncdash'
    return base / 'logs'


def get_log_dir() -> str:
    """Directory FileSink writes to.

    Checked in order: configure_logging(log_dir=...), SYNCDASH_LOG_DIR,
    then the per-user data directory of the platform.
    """
    configured = _config.get('log_dir') or os.environ.get('SYNCDASH_LOG_DIR')
    if configured:
        return str(Path(configured).expanduser())
    return str(_platform_log_dir())


def get_module_config(module: str) -> Dict[str, Any]:
    """Structured settings for module ({} when none are set).

    SYNCDASH_LOGGING_SYNC_INTERVAL=5 shows up here as
    get_module_config('sync') == {'interval': 5}.
    """
    return _config.get('modules', {}).get(module.lower(), {})


def set_module_config(module: str, **settings: Any) -> None:
    """Set structured settings for module in code."""
    _config['modules'].setdefault(module.lower(), {}).update(settings)


def _level_from_string(name: str) -> LogLevel:
    return _LEVEL_NAMES.get(name.upper(), LogLevel.INFO)


_TRUE_WORDS = ('true', 'yes', 'on')
_FALSE_WORDS = ('false', 'no', 'off')


def _parse_env_value(value: str) -> Any:
    """Environment string to bool, int, float or (failing those) str."""
    word = value.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def configure_logging(
    level: str = 'INFO',
    modules: Optional[Dict[str, str]] = None,
    log_dir: Optional[str] = None,
) -> None:
    """
    Set console levels and the FileSink directory.

    Args:
        level: Default level name for every module
        modules: Level name per module, overriding the default
        log_dir: FileSink directory (unchanged when None)
    """
    _config['default_level'] = _level_from_string(level)
    for module, module_level in (modules or {}).items():
        _config['module_levels'][module] = _level_from_string(module_level)
    if log_dir is not None:
        _config['log_dir'] = log_dir


def _load_env_config() -> None:
    """Apply SYNCDASH_LOG_* and SYNCDASH_LOGGING_* from os.environ.

    SYNCDASH_LOGGING_SYNC_ENABLED=true becomes modules['sync']['enabled'];
    further underscores nest deeper.
    """
    environ = os.environ

    if 'SYNCDASH_LOG_LEVEL' in environ:
        _config['default_level'] = _level_from_string(environ['SYNCDASH_LOG_LEVEL'])
    if 'SYNCDASH_LOG_DIR' in environ:
        _config['log_dir'] = environ['SYNCDASH_LOG_DIR']

    for key, value in environ.items():
        if key.startswith(SETTINGS_PREFIX):
            module, *path = key[len(SETTINGS_PREFIX):].lower().split('_')
            if not path:
                continue
            node = _config['modules'].setdefault(module, {})
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = _parse_env_value(value)
        elif key.startswith(ENV_PREFIX) and key not in ('SYNCDASH_LOG_LEVEL', 'SYNCDASH_LOG_DIR'):
            module = key[len(ENV_PREFIX):].lower()
            _config['module_levels'][module] = _level_from_string(value)


_load_env_config()


def reload_env_config() -> None:
    """Re-read SYNCDASH_LOG_* / SYNCDASH_LOGGING_* after the environment changed."""
    _load_env_config()


def enable_all_logging() -> None:
    """DEBUG for every module without its own level."""
    configure_logging(level='DEBUG')


def disable_logging() -> None:
    """Silence modules that have no level of their own."""
    _config['default_level'] = LogLevel.OFF


# =============================================================================
# Console loggers
# =============================================================================

class SyncDashLogger:
    """
    Console logger bound to one module name.

    The effective level is looked up on every call, so configuration
    changes apply to loggers that already exist.
    """

    def __init__(self, module: str):
        self.module = module
        self._key = module.lower().replace('.', '_').replace('/', '_')

    @property
    def level(self) -> LogLevel:
        return _config['module_levels'].get(self._key, _config['default_level'])

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def log(self, level: LogLevel, msg: str, *args, label: Optional[str] = None) -> None:
        if not self.is_enabled_for(level):
            return
        if args:
            try:
                msg = msg % args
            except (TypeError, ValueError):
                msg = f"{msg} {args}"
        print(f"[{self.module}] {label or _LEVEL_LABELS[level]}: {msg}")

    def trace(self, msg: str, *args) -> None:
        self.log(LogLevel.TRACE, msg, *args)

    def debug(self, msg: str, *args) -> None:
        self.log(LogLevel.DEBUG, msg, *args)

    def info(self, msg: str, *args) -> None:
        self.log(LogLevel.INFO, msg, *args)

    def warning(self, msg: str, *args) -> None:
        self.log(LogLevel.WARNING, msg, *args)

    warn = warning

    def error(self, msg: str, *args) -> None:
        self.log(LogLevel.ERROR, msg, *args)

    def critical(self, msg: str, *args) -> None:
        self.log(LogLevel.CRITICAL, msg, *args)

    def exception(self, msg: str, *args, exc_info: bool = True) -> None:
        """ERROR line, followed by the active traceback when there is one."""
        import traceback

        self.error(msg, *args)
        if not exc_info:
            return
        formatted = traceback.format_exc().strip()
        if formatted and formatted != 'NoneType: None':
            for line in formatted.splitlines():
                self.log(LogLevel.ERROR, line, label='TRACE')


@lru_cache(maxsize=64)
def get_logger(module: str) -> SyncDashLogger:
    """Shared logger for module (same instance on every call)."""
    return SyncDashLogger(module)
