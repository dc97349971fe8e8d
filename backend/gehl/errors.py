# backend/gehl/errors.py


class GehlError(Exception):
    """Base class for errors raised by the data-collection layer."""


class ValidationError(GehlError):
    """Input rejected before any statement is issued."""


class DataPointValidationError(ValidationError):
    pass


class UnknownFieldError(DataPointValidationError):
    def __init__(self, field: str):
        super().__init__(f"Unexpected key {field} in data point")
        self.field = field


class InvalidFieldValueError(DataPointValidationError):
    def __init__(self, field: str, value):
        super().__init__(f"invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


class UnsupportedFieldSelectionError(ValidationError):
    def __init__(self, fields):
        super().__init__(f"no table possible for selected fields: {sorted(set(fields))}")
        self.fields = list(fields)


class NotFoundError(GehlError):
    pass
