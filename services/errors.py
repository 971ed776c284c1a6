"""
Service-layer exceptions shared by repositories and route handlers.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ServiceError):
    """A record that must exist for the operation was not found."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str = None):
        self.entity = entity
        self.entity_id = entity_id
        label = entity.replace('_', ' ').capitalize()
        super().__init__(f"{label} not found" + (f": {entity_id}" if entity_id else ""))


class ConflictError(ServiceError):
    """The operation conflicts with the record's current state."""

    status_code = 409
