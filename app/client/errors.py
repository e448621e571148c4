# app/client/errors.py


class ApiError(Exception):
    """Blad odpowiedzi serwera (status != 2xx) albo transportu (status None)."""

    def __init__(self, status: int | None, message: str):
        super().__init__(f"{status}: {message}" if status else message)
        self.status = status
        self.message = message


class Unauthorized(ApiError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(401, message)


class DecodeError(ApiError):
    """Odpowiedz nie pasuje do schematu - nic nie jest uzupelniane domyslnie."""

    def __init__(self, message: str):
        super().__init__(None, message)
