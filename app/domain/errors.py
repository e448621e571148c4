# app/domain/errors.py


class StoreError(Exception):
    """Bazowy blad domeny, status_code mapowany w API."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StoreError):
    status_code = 404


class InvalidState(StoreError):
    status_code = 400


class Unauthorized(StoreError):
    status_code = 401


class Forbidden(StoreError):
    status_code = 403


class ConcurrencyConflict(StoreError):
    status_code = 409


class PersistenceFailure(StoreError):
    status_code = 500


class DeliveryError(PersistenceFailure):
    """Zapis/odczyt powiadomien nie powiodl sie - caller decyduje o retry."""
