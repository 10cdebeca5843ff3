# backend/services/errors.py
"""
Failure taxonomy of the stores.

Stores raise these inside a transaction; the transaction boundary in
``services.base`` rolls back and turns them into a failed ``StoreResult``.
"""


class StoreError(Exception):
    kind = "storage"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    kind = "validation"


class ConflictError(StoreError):
    kind = "conflict"


class InvalidCredentials(StoreError):
    kind = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials."):
        super().__init__(message)


class NotAuthenticated(StoreError):
    kind = "unauthenticated"

    def __init__(self, message: str = "You must be logged in."):
        super().__init__(message)


class NotFoundError(StoreError):
    kind = "not_found"


class PermissionDenied(StoreError):
    kind = "forbidden"


class StorageError(StoreError):
    kind = "storage"
