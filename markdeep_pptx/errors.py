"""Exception hierarchy for the converter.

Only fatal conditions are raised. A missing heading, an empty navigation
strip or an unparseable color is recovered where it is found and never
reaches these classes.
"""


class ConversionError(Exception):
    """Base class for fatal conversion failures."""


class AcquisitionError(ConversionError):
    """The rendered slide tree could not be obtained."""

    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Could not render {locator}: {reason}")


class SnapshotError(AcquisitionError):
    """Stamped HTML is missing the markup a render snapshot needs."""


class WriteError(ConversionError):
    """The presentation file could not be persisted."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write {path}: {reason}")
