import collections
import dataclasses
import functools
import logging
import logging.config
import pathlib
import shutil
import threading
import typing

LOG_FILENAME = "agentzero.log"
SMT2_FILENAME = "smt2_problems.smt2"

_config = collections.Counter(version=0)


@dataclasses.dataclass(slots=True)
class LevelFlag:
    """
    LevelFlag provides a cached boolean check for whether a logger is enabled
    for a given level.

    It avoids repeated calls to logger.isEnabledFor(level) while walking large
    expression trees, and refreshes its cache when the logging configuration
    changes.

    Example:
        logger = getLogger("AgentZero.translator")
        debug_on = LevelFlag(logger.name, logging.DEBUG)

        if debug_on:
            logger.debug("translated %s", expensive_render(node))
    """

    _logger_name: str
    _level: int
    _last_version: int = dataclasses.field(default=-1, init=False)
    _cached: bool = dataclasses.field(default=False, init=False)

    def __bool__(self) -> bool:
        current = self.get_config_version()
        if self._last_version != current:
            self._cached = getLogger(self._logger_name).isEnabledFor(self._level)
            self._last_version = current
        return self._cached

    def __repr__(self):
        lvlname = logging.getLevelName(self._level)
        return f"<LevelFlag {self._logger_name}≥{lvlname}>"

    @staticmethod
    def bump_config_version() -> None:
        _config["version"] += 1

    @staticmethod
    def get_config_version() -> int:
        return _config["version"]


class AgentZeroLogger(logging.Logger):
    """Logger that supports a per-thread Mapped Diagnostic Context (MDC)."""

    _mdc_local: "threading.local" = threading.local()

    @classmethod
    def mdc(cls) -> typing.Mapping[str, typing.Any]:
        if not getattr(cls._mdc_local, "mdc", None):
            cls.set_mdc({"expression": ""})
        return getattr(cls._mdc_local, "mdc", {})

    @classmethod
    def set_mdc(cls, d: dict[str, typing.Any]) -> None:
        cls._mdc_local.mdc = d

    @functools.cached_property
    def debug_on(self) -> LevelFlag:  # noqa: D401
        """Fast flag: is DEBUG enabled for this logger?"""
        return LevelFlag(self.name, logging.DEBUG)

    @functools.cached_property
    def info_on(self) -> LevelFlag:  # noqa: D401
        return LevelFlag(self.name, logging.INFO)

    # ---------------------------------------------------------------------
    # MDC helpers
    # ---------------------------------------------------------------------
    @classmethod
    def add_mdc(cls, key: str, value: typing.Any) -> None:
        """Add or update a key/value pair to the thread-local MDC."""
        d = dict(cls.mdc())
        d[key] = value
        cls.set_mdc(d)

    @classmethod
    def get_mdc(cls, key: str, default: typing.Any | None = None):
        """Return the value stored under *key* in the MDC (or *default*)."""
        return cls.mdc().get(key, default)

    @classmethod
    def remove_mdc(cls, key: str) -> None:
        """Remove *key* from the MDC if present."""
        d = dict(cls.mdc())
        d.pop(key, None)
        cls.set_mdc(d)

    # The expression under analysis is carried in the MDC so that every record
    # emitted while translating or solving it can be traced back to it.
    @classmethod
    def update_expression(cls, text: str) -> None:
        cls.add_mdc("expression", text)

    @classmethod
    def reset_expression(cls) -> None:
        cls.remove_mdc("expression")

    def makeRecord(
        self,
        name,
        level,
        fn,
        lno,
        msg,
        args,
        exc_info,
        func=None,
        extra: dict[str, typing.Any] | None = None,
        sinfo=None,
    ):
        """Inject the current MDC into every ``LogRecord`` that we create."""
        if not extra:
            extra = {}
        extra.update(self.mdc())
        return super().makeRecord(
            name,
            level,
            fn,
            lno,
            msg,
            args,
            exc_info,
            func=func,
            extra=extra,
            sinfo=sinfo,
        )


class AgentZeroFormatter(logging.Formatter):
    """Formatter that makes the MDC expression addressable in format strings."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        expression = getattr(record, "expression", "")
        if expression:
            record.expression = f" - [{expression}]"
        else:
            record.expression = ""

        return super().format(record)


# File paths for handlers are set to `None` initially and will be populated
# by the `configure_loggers` function.
conf: dict[str, typing.Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "AgentZeroFormatter": {
            "()": AgentZeroFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s%(expression)s - %(message)s",
        },
        "rawFormatter": {
            "format": "%(message)s",
        },
    },
    "handlers": {
        "consoleHandler": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "AgentZeroFormatter",
            "stream": "ext://sys.stderr",
        },
        "defaultFileHandler": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "AgentZeroFormatter",
            "filename": None,
        },
        "smt2FileHandler": {
            "class": "logging.FileHandler",
            "level": "INFO",
            "formatter": "rawFormatter",
            "filename": None,
        },
    },
    "loggers": {
        "AgentZero": {
            "level": "INFO",
            "handlers": ["consoleHandler", "defaultFileHandler"],
            "propagate": False,
        },
        "AgentZero.translator": {
            "level": "INFO",
            "handlers": ["consoleHandler", "defaultFileHandler"],
            "propagate": False,
        },
        "AgentZero.solver": {
            "level": "INFO",
            "handlers": ["defaultFileHandler"],
            "propagate": False,
        },
        "AgentZero.smt2": {
            "level": "INFO",
            "handlers": ["smt2FileHandler"],
            "propagate": False,
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["consoleHandler"],
    },
}


class LoggerConfigurator:
    """
    Utility to dynamically query and set logger levels at runtime.
    """

    @staticmethod
    def available_loggers(
        prefix: str | typing.Iterable[str] | None = None,
        case_insensitive: bool = False,
    ) -> list[str]:
        """
        Return a deduped, sorted list of all logger names, with optional prefix filtering.

        - Any module that has been imported and called getLogger(...) shows up.
        - Any logger statically declared in conf["loggers"] shows up as well.
        - If `prefix` is provided, filter to names equal to or starting with prefix + '.'.
        - If `prefix` is an iterable, match any of the prefixes.
        """
        mgr = logging.Logger.manager
        dyn = {
            name
            for name, logger in mgr.loggerDict.items()
            if isinstance(logger, logging.Logger)
        }
        stat = set(conf["loggers"].keys())

        all_names = dyn | stat

        if prefix is None:
            return sorted(all_names)

        if isinstance(prefix, str):
            prefixes = [prefix]
        else:
            prefixes = list(prefix)

        if case_insensitive:
            prefixes = [p.lower() for p in prefixes]

            def match(name: str) -> bool:
                lname = name.lower()
                return any(lname == p or lname.startswith(p + ".") for p in prefixes)

        else:

            def match(name: str) -> bool:
                return any(name == p or name.startswith(p + ".") for p in prefixes)

        return sorted(filter(match, all_names))

    @staticmethod
    def get_level(name: str) -> int:
        """Return the effective level for logger `name`."""
        return getLogger(name).getEffectiveLevel()

    @staticmethod
    def set_level(logger_name: str, level_name: str) -> None:
        """
        Change the level for `logger_name` to one of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        """
        lvl = getattr(logging, level_name.upper(), None)
        if not isinstance(lvl, int):
            raise ValueError(f"Unknown logging level: {level_name}")
        getLogger(logger_name, lvl).setLevel(lvl)
        # invalidate all LevelFlags
        LevelFlag.bump_config_version()


def clear_logs(log_dir: str | pathlib.Path) -> None:
    """Removes the log directory."""
    shutil.rmtree(log_dir, ignore_errors=True)


def configure_loggers(log_dir: str | pathlib.Path) -> None:
    """
    Configures the loggers using a dictionary, creating log files in the specified directory.
    """
    log_dir = pathlib.Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    conf["handlers"]["defaultFileHandler"]["filename"] = (
        log_dir / LOG_FILENAME
    ).as_posix()
    conf["handlers"]["smt2FileHandler"]["filename"] = (
        log_dir / SMT2_FILENAME
    ).as_posix()

    logging.config.dictConfig(conf)

    smt2_logger = logging.getLogger("AgentZero.smt2")
    smt2_logger.info("; problems submitted by agentzero, one check-sat per expression\n")
    LevelFlag.bump_config_version()


def getLogger(name: str, default_level: int = logging.INFO) -> AgentZeroLogger:
    """Return an :class:`AgentZeroLogger`.

    When wrapping an existing logger whose ``propagate`` flag is *False* and
    that has no handlers, records would be lost. ``propagate`` is flipped back
    to *True* so that messages bubble up to the root handlers.
    """

    name = name or __name__
    base = logging.getLogger(name)
    if isinstance(base, AgentZeroLogger):
        return base
    loglvl = base.level
    if loglvl == logging.NOTSET or loglvl < default_level:
        loglvl = default_level
    new = AgentZeroLogger(base.name, level=loglvl)
    new.handlers = list(base.handlers)
    new.filters = list(base.filters)
    new.propagate = base.propagate
    new.disabled = base.disabled
    # Keep the hierarchical parent so records still reach the root handlers.
    new.parent = base.parent
    if not new.handlers and not new.propagate:
        new.propagate = True

    logging.Logger.manager.loggerDict[name] = new
    return new
