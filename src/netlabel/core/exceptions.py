from __future__ import annotations


class NetLabelError(Exception):
    """Base error for the network speed indicator."""


class ConfigError(NetLabelError):
    pass


class SourceUnavailableError(NetLabelError):
    """The counter source could not be read for this tick."""


class RowParseError(NetLabelError):
    pass
