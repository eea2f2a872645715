class NotFoundException(Exception):
    def __init__(self, resource: str, identifier: str, status_code: int = 404):
        self.resource = resource
        self.identifier = identifier
        self.status_code = status_code

    def __str__(self):
        return f"{self.resource} '{self.identifier}' not found"


class ConflictException(Exception):
    status_code = 409


class DuplicateReference(ConflictException):
    pass


class PriceParseError(Exception):
    status_code = 422

    def __init__(self, raw_price):
        self.raw_price = raw_price
        super().__init__(f"could not read a price from {raw_price!r}")


class PersistenceError(Exception):
    status_code = 500


class Unauthorized(Exception):
    status_code = 401


class Forbidden(Exception):
    status_code = 403
