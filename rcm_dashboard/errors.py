"""Exception hierarchy for client loads."""


class ReportingError(Exception):
    """Base class for every error raised while resolving a client."""


class ConfigNotFound(ReportingError):
    def __init__(self, client_id: str):
        super().__init__(f"No config document for client '{client_id}'")
        self.client_id = client_id


class ConfigInvalid(ReportingError):
    """Config document failed validation.

    ``path`` is the offending field path, e.g. ``kpis[2].formulaKey``.
    """

    def __init__(self, client_id: str, path: str, detail: str):
        where = path or "<root>"
        super().__init__(f"Invalid config for client '{client_id}' at {where}: {detail}")
        self.client_id = client_id
        self.path = path
        self.detail = detail


class DataSourceMissing(ReportingError):
    """Source document does not exist (HTTP 404 or no such file).

    Fetchers raise it; loaders turn it into an empty dataset.
    """

    def __init__(self, location: str):
        super().__init__(f"Data source not found: {location}")
        self.location = location


class DataSourceFetchFailed(ReportingError):
    def __init__(self, location: str, reason: str):
        super().__init__(f"Failed to fetch {location}: {reason}")
        self.location = location
        self.reason = reason


class UnknownFormula(ReportingError):
    def __init__(self, formula_key: str):
        super().__init__(f"Formula '{formula_key}' is not registered")
        self.formula_key = formula_key
