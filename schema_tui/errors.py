from __future__ import annotations


class SchemaTuiError(RuntimeError):
    pass


class SchemaError(SchemaTuiError):
    pass


class OptionError(SchemaTuiError):
    pass


class UnknownProviderError(OptionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown option provider: {name}")
        self.name = name


class ScriptError(OptionError):
    def __init__(self, message: str, *, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class GlobError(OptionError):
    pass


class PersistenceError(SchemaTuiError):
    pass
