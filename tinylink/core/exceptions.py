class LinkError(Exception):
    """Base class for link registry failures."""


class CodeExistsError(LinkError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"code already exists: {code}")


class CodeExhaustedError(CodeExistsError):
    """Every generated candidate collided with a live code."""

    def __init__(self, code: str, attempts: int):
        super().__init__(code)
        self.attempts = attempts
        self.args = (f"could not allocate a unique code after {attempts} attempts",)


class LinkNotFoundError(LinkError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"link not found: {code}")


class StorageUnavailableError(LinkError):
    """The storage backend could not be read or written."""


class CodeReservedError(CodeExistsError):
    """The code collides with one of the service's own routes."""

    def __init__(self, code: str):
        super().__init__(code)
        self.args = (f"code is reserved: {code}",)
