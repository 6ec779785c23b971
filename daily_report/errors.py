from __future__ import annotations


class ConfigurationError(Exception):
    """Fatal problem with the run configuration. Aborts the run."""


class ExclusionsValidationError(ConfigurationError):
    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(f"{message}: {diagnostics}" if diagnostics else message)
        self.diagnostics = diagnostics


class DecryptionError(ConfigurationError):
    pass


class CsvFormatError(ValueError):
    """A whole CSV file cannot be used. Only that file is skipped."""


class EmptyCsvError(CsvFormatError):
    def __init__(self):
        super().__init__("CSV file is empty (no header row)")


class UnrecognizedHeaderError(CsvFormatError):
    def __init__(self, headers: list[str]):
        super().__init__(f"Unrecognized CSV header: {', '.join(headers)}")
        self.headers = headers
