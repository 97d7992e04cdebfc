"""Exceptions raised by the macro engine."""


class ConfigError(Exception):
    """The configuration cannot be loaded; nothing is constructed."""


class CompileError(ConfigError):
    """A script or block cannot be expanded into a program."""


class SynthesisError(Exception):
    """One primitive action failed at the action sink."""


class ListenError(Exception):
    """The global input listener cannot be established."""
