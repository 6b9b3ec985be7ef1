import dataclasses
import json
import os
import pathlib
import typing

from .logging import getLogger

logger = getLogger("AgentZero.config")


def _get_default_user_dir() -> pathlib.Path:
    """Return the per-user agentzero directory.

    ``AGENTZERO_HOME`` overrides the default ``~/.agentzero``.
    """
    override = os.environ.get("AGENTZERO_HOME")
    if override:
        return pathlib.Path(override)
    return pathlib.Path.home() / ".agentzero"


DEFAULT_USER_DIR = _get_default_user_dir()


@dataclasses.dataclass(frozen=True, slots=True)
class ConfigConstants:
    OPTIONS_FILENAME: typing.ClassVar[str] = "options.json"
    DEFAULT_TIMEOUT_MS: typing.ClassVar[int] = 0

    @staticmethod
    def default_log_dir(user_dir: pathlib.Path | None = None) -> pathlib.Path:
        """Return the default log directory based on the user dir."""
        base = user_dir if user_dir is not None else _get_default_user_dir()
        return base / "logs"


@dataclasses.dataclass(frozen=True, slots=True)
class AnalysisOptions:
    """
    Per-run view of the configuration handed to an analysis session.

    >>> AnalysisOptions().timeout_ms
    0
    >>> AnalysisOptions(timeout_ms=250, report_satisfiable_hints=False).report_satisfiable_hints
    False
    """

    timeout_ms: int = ConfigConstants.DEFAULT_TIMEOUT_MS
    report_satisfiable_hints: bool = True

    def __post_init__(self):
        if self.timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {self.timeout_ms}")


class AnalyzerConfiguration:
    """
    Manages application-wide configuration from a JSON file, offering
    dictionary-like access.

    >>> import tempfile
    >>> temp_dir = tempfile.TemporaryDirectory()
    >>> config_path = pathlib.Path(temp_dir.name) / "options.json"
    >>> config_path.write_text('{"timeout_ms": 1500}')
    20
    >>> config = AnalyzerConfiguration(config_path)
    >>> config.timeout_ms
    1500
    >>> config["report_satisfiable_hints"] = False
    >>> config.save()
    >>> json.loads(config_path.read_text())["report_satisfiable_hints"]
    False
    >>> temp_dir.cleanup()
    """

    def __init__(
        self,
        config_path: pathlib.Path | str | None = None,
        *,
        user_dir: pathlib.Path | str | None = None,
    ):
        """
        Initializes and loads the configuration.

        Args:
            config_path: Path to the JSON config file. If None, defaults to
                         'options.json' in the user directory.
            user_dir: The agentzero user directory. If None, defaults to
                      ``~/.agentzero`` (or ``$AGENTZERO_HOME``).
        """
        self._user_dir = (
            pathlib.Path(user_dir) if user_dir is not None else _get_default_user_dir()
        )

        if config_path is not None:
            self.config_file = pathlib.Path(config_path)
            template_path: pathlib.Path | None = None
        else:
            self.config_file = self._user_dir / ConfigConstants.OPTIONS_FILENAME
            # Read-only template shipped with the package.
            template_path = (
                pathlib.Path(__file__).resolve().parent.parent
                / "conf"
                / ConfigConstants.OPTIONS_FILENAME
            )

        self._options: dict[str, typing.Any] = {}
        self._load(fallback_path=template_path)

    def _load(self, fallback_path: pathlib.Path | None = None) -> None:
        """Loads configuration from the JSON file, handling potential errors."""
        paths_to_try = [self.config_file]
        if fallback_path is not None and fallback_path not in paths_to_try:
            paths_to_try.append(fallback_path)

        for path in paths_to_try:
            try:
                with path.open("r", encoding="utf-8") as fp:
                    self._options = json.load(fp)
                logger.info("Loaded configuration from %s", path)
                break
            except FileNotFoundError:
                logger.debug("Configuration file %s not found", path)
            except json.JSONDecodeError:
                logger.error("Failed to parse config file: %s", path)

        else:
            logger.warning("No valid configuration found; using defaults in memory.")
            self._options = {}

    def save(self) -> None:
        """Saves the current configuration to the JSON file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with self.config_file.open("w", encoding="utf-8") as fp:
                json.dump(self._options, fp, indent=2)
            logger.info("Configuration saved to %s", self.config_file)
        except IOError as e:
            logger.error("Failed to save configuration to %s: %s", self.config_file, e)

    @property
    def user_dir(self) -> pathlib.Path:
        return self._user_dir

    @property
    def log_dir(self) -> pathlib.Path:
        """Returns the configured log directory, or the default one if not set."""
        path_str = self._options.get("log_dir")
        if not path_str:
            path_str = str(ConfigConstants.default_log_dir(self._user_dir))
            self._options["log_dir"] = path_str
        return pathlib.Path(path_str)

    @property
    def timeout_ms(self) -> int:
        """Solver timeout in milliseconds; 0 disables the timeout."""
        return int(self._options.get("timeout_ms", ConfigConstants.DEFAULT_TIMEOUT_MS))

    @property
    def report_satisfiable_hints(self) -> bool:
        return bool(self._options.get("report_satisfiable_hints", True))

    def analysis_options(self) -> AnalysisOptions:
        """Snapshot the settings that affect a single analysis run."""
        return AnalysisOptions(
            timeout_ms=self.timeout_ms,
            report_satisfiable_hints=self.report_satisfiable_hints,
        )

    def __getitem__(self, name: str) -> typing.Any:
        """Provides dictionary-style read access."""
        return self._options[name]

    def __setitem__(self, name: str, value: typing.Any) -> None:
        """Provides dictionary-style write access."""
        self._options[name] = value

    def get(self, name: str, default: typing.Any = None) -> typing.Any:
        """Provides dictionary-style read access with a default value."""
        return self._options.get(name, default)

    def set(self, name: str, value: typing.Any) -> None:
        """Provides dictionary-style write access."""
        self._options[name] = value
