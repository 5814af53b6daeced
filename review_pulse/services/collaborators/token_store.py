"""File-backed storage for the inference API token."""

from pathlib import Path
from typing import Optional, Union

from review_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class TokenStore:
    """
    Persists a single bearer token as a small text file.

    Read at startup, rewritten whenever the token changes. Saving a blank
    token removes the file, so calls go out without an auth header.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read token file", path=str(self.path), error=str(e))
            return None
        return token or None

    def save(self, token: Optional[str]) -> Optional[str]:
        """Store ``token`` (stripped) and return it; blank tokens clear the store."""
        token = (token or "").strip()
        if not token:
            self.clear()
            return None
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict token file permissions", path=str(self.path))
        logger.info("API token saved", path=str(self.path))
        return token

    def clear(self) -> None:
        try:
            self.path.unlink()
            logger.info("API token cleared", path=str(self.path))
        except FileNotFoundError:
            pass
