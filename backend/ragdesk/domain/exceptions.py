"""Domain-specific exceptions — framework-independent."""


class ValidationError(Exception):
    """Raised when input has the wrong shape or is out of range."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        self.message = message
        super().__init__(message)


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str, existing_id: str | None = None):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        self.existing_id = existing_id
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class InvalidStateTransition(Exception):
    """Raised when an action is not allowed from the request's current status."""

    def __init__(self, request_id: str, current_status: str, action: str):
        self.request_id = request_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} request '{request_id}' while it is {current_status}"
        )


class RequestAlreadyFinalized(InvalidStateTransition):
    """Raised on any transition attempt out of a terminal status."""

    def __init__(self, request_id: str, current_status: str, action: str):
        super().__init__(request_id, current_status, action)
        self.args = (f"Request already {current_status}",)


class ConcurrentModificationError(Exception):
    """Raised when a record changed between read and write."""

    def __init__(self, entity_type: str, entity_id: str, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity_type} '{entity_id}' was modified concurrently (expected version {expected_version})"
        )


class ProviderError(Exception):
    """Raised when an external provider returns an error.

    Provider-agnostic — works for OpenRouter, the vector store, etc.
    Never retried inside the core.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class EmbeddingProviderError(ProviderError):
    """The embedding model call failed or returned an unusable vector."""


class SearchError(ProviderError):
    """The vector similarity query failed."""

    def __init__(self, message: str, provider: str = "vector_store", status_code: int = 500):
        super().__init__(provider, status_code, message)
