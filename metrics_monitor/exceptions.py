"""Exceptions raised by monitors, naming policies and the metric registry."""


class ConfigurationError(Exception):
    """Raised when configuration or a naming policy is invalid."""

    pass


class MetricsException(Exception):
    """Base exception class for metric naming and registry errors."""

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidNameException(MetricsException):
    """Exception raised when a scope or metric name is not a string."""

    def __init__(self, name: object) -> None:
        self.name = name
        message = f"Metric name must be a string, got {name!r}"
        super().__init__(message, error_code="INVALID_NAME")


class DuplicateMetricException(MetricsException):
    """Exception raised when registering a metric under a name that is taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        message = f"A metric named '{name}' already exists"
        super().__init__(message, error_code="DUPLICATE_METRIC")


class MetricTypeConflictException(MetricsException):
    """Exception raised when a name is already bound to a different metric kind."""

    def __init__(self, name: str, existing_kind: str, requested_kind: str) -> None:
        self.name = name
        self.existing_kind = existing_kind
        self.requested_kind = requested_kind
        message = (
            f"Cannot create {requested_kind} '{name}' because a {existing_kind} "
            f"is already registered under that name"
        )
        super().__init__(message, error_code="METRIC_TYPE_CONFLICT")


class MetricNameCollisionException(MetricsException):
    """Exception raised when two identifiers export clashing Prometheus series."""

    def __init__(
        self, name: str, existing_name: str | None, series_names: list[str]
    ) -> None:
        self.name = name
        self.existing_name = existing_name
        self.series_names = series_names
        series = ", ".join(series_names)
        if existing_name is None:
            message = (
                f"Metric '{name}' exports series ({series}) that are already "
                f"registered with the Prometheus registry"
            )
        else:
            message = (
                f"Metric '{name}' exports series ({series}) that clash with "
                f"metric '{existing_name}'"
            )
        super().__init__(message, error_code="METRIC_NAME_COLLISION")
