"""
Garmin Connect OAuth token persistence.

garminconnect (via garth) exchanges an email/password once for OAuth tokens.
We dump those tokens to a directory on disk so the password is only needed
during `python -m p2g setup`; every later run restores the tokens with
`Garmin().login(tokenstore)`.

Tokens last a long time but can still be revoked or expire, in which case
SessionExpiredError asks the user to re-run setup.
"""
import os
import stat
from pathlib import Path
from typing import Optional

import garminconnect

from p2g.config import get_settings

# ── Exceptions ────────────────────────────────────────────────────────────────

class NoSessionError(RuntimeError):
    """Raised when no saved tokens exist on disk."""


class SessionExpiredError(RuntimeError):
    """Raised when saved tokens are rejected by Garmin."""


# ── Main class ────────────────────────────────────────────────────────────────

class GarminAuth:
    """
    Manages the on-disk Garmin token store.

    Usage:
        auth = GarminAuth()
        if not auth.has_session():
            auth.authenticate_and_save(email, password)
        client = auth.build_client()   # → garminconnect.Garmin instance
    """

    def __init__(self, tokens_dir: Optional[Path] = None):
        self.tokens_dir = Path(tokens_dir or get_settings().garmin_tokens_dir)

    def has_session(self) -> bool:
        """Return True if the token directory holds any saved tokens."""
        return self.tokens_dir.is_dir() and any(self.tokens_dir.glob("*.json"))

    def clear(self) -> None:
        """Delete saved token files (does not raise if already absent)."""
        if not self.tokens_dir.is_dir():
            return
        for token_file in self.tokens_dir.glob("*.json"):
            token_file.unlink()

    def authenticate_and_save(self, email: str, password: str) -> garminconnect.Garmin:
        """
        Log in with email + password and dump the OAuth tokens to disk.

        Directory permissions are 0700, token files 0600.

        Raises:
            Any exception from garminconnect on auth failure.
        """
        api = garminconnect.Garmin(email, password)
        api.login()  # raises on bad credentials

        self.tokens_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.tokens_dir, stat.S_IRWXU)
        api.garth.dump(str(self.tokens_dir))
        for token_file in self.tokens_dir.glob("*.json"):
            os.chmod(token_file, stat.S_IRUSR | stat.S_IWUSR)
        return api

    def build_client(self) -> garminconnect.Garmin:
        """
        Build an authenticated Garmin client from the saved tokens.

        Raises:
            NoSessionError: if no tokens are saved.
            SessionExpiredError: if Garmin rejects the saved tokens.
        """
        if not self.has_session():
            raise NoSessionError(
                f"No Garmin tokens found at {self.tokens_dir}. "
                "Run `python -m p2g setup` to authenticate."
            )

        api = garminconnect.Garmin()
        try:
            api.login(str(self.tokens_dir))
        except Exception as exc:
            raise SessionExpiredError(
                "Garmin tokens were rejected. "
                "Run `python -m p2g setup` to re-authenticate."
            ) from exc
        return api
