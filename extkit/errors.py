from __future__ import annotations


class ScaffoldError(RuntimeError):
    pass


class InvalidIdentifier(ScaffoldError):
    pass


class InvalidLanguageSelection(ScaffoldError):
    pass


class TargetAlreadyExists(ScaffoldError):
    pass


class TemplateNotFound(ScaffoldError):
    pass


class ConfigError(ScaffoldError):
    pass
