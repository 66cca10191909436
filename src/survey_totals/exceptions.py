"""Error taxonomy for totals computation"""


class TotalsError(Exception):
    """Base class for fatal totals errors"""


class SchemaError(TotalsError, ValueError):
    """A named column is absent, misaligned, or holds values outside its levels"""

    def __init__(self, message: str, column: str = None):
        self.column = column
        super().__init__(message)


class WeightTypeError(TotalsError, TypeError):
    """A weight column holds non-numeric, negative or infinite values"""

    def __init__(self, message: str, column: str = None):
        self.column = column
        super().__init__(message)


class ConfigError(TotalsError, ValueError):
    """Contradictory or out-of-range configuration"""


class EmptyInputWarning(UserWarning):
    """Empty data, unobserved levels, or a zero percentage base"""
