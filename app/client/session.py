# app/client/session.py
from pathlib import Path

from app.utils.settings import CLIENT_TOKEN_FILE
from app.utils.logging import get_logger

logger = get_logger(__name__)


class Session:
    """
    Jawny stan sesji klienta, przekazywany do mirrora (bez globali).
    hydrate() przy starcie, logout() przy wylogowaniu.
    """

    def __init__(self, token_file: str | Path | None = None):
        self.token_file = Path(token_file or CLIENT_TOKEN_FILE)
        self.token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def hydrate(self) -> bool:
        if self.token_file.exists():
            self.token = self.token_file.read_text().strip() or None
        logger.info(f"Session hydrated, authenticated={self.is_authenticated}")
        return self.is_authenticated

    def login(self, token: str) -> None:
        self.token = token
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(token)

    def logout(self) -> None:
        self.token = None
        self.token_file.unlink(missing_ok=True)
        logger.info("Session cleared")

    def authorization_header(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
