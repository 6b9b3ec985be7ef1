"""
agentzero.core: solver-independent infrastructure.

Modules:
    bits    - integer and IEEE-754 bit-pattern helpers
    config  - AnalyzerConfiguration and AnalysisOptions
    logging - AgentZeroLogger with MDC support, configure_loggers
"""

from .logging import (
    AgentZeroLogger,
    LevelFlag,
    LoggerConfigurator,
    clear_logs,
    configure_loggers,
    getLogger,
)

from .config import (
    DEFAULT_USER_DIR,
    AnalysisOptions,
    AnalyzerConfiguration,
    ConfigConstants,
)

from .bits import (
    AND_TABLE,
    MSB_TABLE,
    bits_to_float,
    float_to_bits,
    get_msb,
    round_to_single,
    shortest_repr,
    signed_to_unsigned,
    unsigned_to_signed,
)

__all__ = [
    # logging
    "AgentZeroLogger",
    "getLogger",
    "configure_loggers",
    "clear_logs",
    "LoggerConfigurator",
    "LevelFlag",
    # config
    "AnalyzerConfiguration",
    "AnalysisOptions",
    "ConfigConstants",
    "DEFAULT_USER_DIR",
    # bits
    "AND_TABLE",
    "MSB_TABLE",
    "unsigned_to_signed",
    "signed_to_unsigned",
    "get_msb",
    "float_to_bits",
    "bits_to_float",
    "round_to_single",
    "shortest_repr",
]
