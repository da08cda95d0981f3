class WorkflowError(Exception):
    """Base class for failures the workflow reports to Alfred."""


class FetchError(WorkflowError):
    """The license API could not be reached or returned an unusable response."""


class LicenseNotFoundError(FetchError):
    """The requested license key does not exist upstream."""

    def __init__(self, key: str):
        super().__init__(f"License '{key}' not found")
        self.key = key


class MissingInputError(WorkflowError):
    """A required query or license key was not supplied."""


class PlaceholderRulesError(WorkflowError):
    """The placeholder rule table is missing or malformed."""
