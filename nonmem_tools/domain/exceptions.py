from collections.abc import Iterable


class NonmemToolsError(Exception):
    pass


class ConversionError(NonmemToolsError):
    pass


class MissingFieldError(ConversionError):
    def __init__(self, domain: str, missing: Iterable[str]) -> None:
        self.domain = domain
        self.missing = tuple(missing)
        super().__init__(
            f"{domain} domain missing required variables: {', '.join(self.missing)}"
        )


class TimeOriginError(ConversionError):
    """Raised when subjects have events but no dose to anchor TIME on."""

    def __init__(self, subjects: Iterable[str]) -> None:
        self.subjects = tuple(subjects)
        super().__init__(
            f"{len(self.subjects)} subject(s) have no dosing record to anchor TIME: "
            + ", ".join(self.subjects)
        )


class DuplicateSubjectError(ConversionError):
    def __init__(self, subjects: Iterable[str]) -> None:
        self.subjects = tuple(subjects)
        super().__init__(
            "DM domain must have one record per subject; duplicated USUBJID: "
            + ", ".join(self.subjects)
        )


class PKCalculationError(NonmemToolsError):
    pass


class InsufficientDataError(PKCalculationError):
    def __init__(self, n_points: int, required: int) -> None:
        self.n_points = n_points
        self.required = required
        super().__init__(
            f"Insufficient data points for PK calculations: {n_points} usable, {required} required"
        )
