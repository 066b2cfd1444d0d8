"""Sitzung und Rollen-Wächter.

Zustände:
  anonymous-viewer  → login_password()  → password-admin
  password-admin    → logout_local()    → anonymous-viewer
  *                 → sign_in(claims)   → identity-admin | identity-viewer
  identity-*        → sign_out()        → anonymous-viewer

sign_in() erwartet bereits geprüfte Claims. Die Signatur eines Tokens wird
hier NICHT geprüft – das muss eine vertrauenswürdige Stelle vorher tun.
sign_out() beendet nur die lokale Sitzung, nicht die beim Identity-Provider.
"""

import hmac
import logging
from typing import Any, Mapping, Optional

from config.schema import AuthConfig, hash_password
from data.local_store import LocalStore
from models.session import Identity, Role, Session, SessionState
from navigator.errors import CredentialError, PermissionDeniedError

logger = logging.getLogger(__name__)


def identity_from_claims(claims: Mapping[str, Any]) -> Identity:
    """Claims (sub, email, name, picture) → Identity.

    Raises:
        CredentialError: wenn claims kein Mapping ist oder 'sub' fehlt.
    """
    if not isinstance(claims, Mapping):
        raise CredentialError("Anmeldedaten nicht lesbar (kein Objekt)")
    sub = claims.get("sub")
    if sub is None or str(sub).strip() == "":
        raise CredentialError("Anmeldedaten unvollständig: 'sub' fehlt")
    picture = claims.get("picture")
    return Identity(
        external_id=str(sub),
        email=str(claims.get("email") or ""),
        display_name=str(claims.get("name") or ""),
        avatar_ref=str(picture) if picture else None,
    )


def role_for_email(email: str, admin_emails: list[str]) -> Role:
    """Admin genau dann, wenn die E-Mail in der Allowlist steht."""
    wanted = email.strip().casefold()
    if wanted and wanted in {e.strip().casefold() for e in admin_emails}:
        return Role.ADMIN
    return Role.VIEWER


class SessionGuard:
    """Hält die aktuelle Sitzung und schreibt sie bei jedem Wechsel in den Speicher."""

    def __init__(self, auth: AuthConfig, store: Optional[LocalStore] = None,
                 session: Optional[Session] = None) -> None:
        self.auth = auth
        self.store = store
        if session is None:
            session = store.load_session() if store is not None else Session()
        self.session = session

    @property
    def role(self) -> Role:
        return self.session.role

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def is_admin(self) -> bool:
        return self.session.is_admin

    def _set(self, session: Session) -> None:
        previous = self.session.state
        self.session = session
        if self.store is not None:
            self.store.save_session(session)
        logger.info(f"Sitzung: {previous.value} → {session.state.value}")

    # ─── Passwort ───

    def login_password(self, password: str) -> bool:
        """Admin per Passwort. False bei falschem Passwort (Zustand unverändert)."""
        given = hash_password(password)
        if not hmac.compare_digest(given, self.auth.admin_password_sha256.lower()):
            logger.warning("Admin-Anmeldung mit falschem Passwort")
            return False
        self._set(self.session.model_copy(update={"role": Role.ADMIN}))
        return True

    def logout_local(self) -> None:
        """Lokale Admin-Rolle abgeben; eine Identität bleibt angemeldet."""
        self._set(self.session.model_copy(update={"role": Role.VIEWER}))

    # ─── Identity-Provider ───

    def sign_in(self, claims: Mapping[str, Any]) -> Identity:
        """Anmeldung mit bereits geprüften Claims. Rolle aus der Allowlist."""
        identity = identity_from_claims(claims)
        role = role_for_email(identity.email, self.auth.admin_emails)
        self._set(Session(identity=identity, role=role))
        return identity

    def sign_out(self) -> None:
        self._set(Session())

    # ─── Prüfung ───

    def require_admin(self, action: str) -> None:
        """Prüft die Rolle zum Zeitpunkt des Aufrufs."""
        if not self.session.is_admin:
            logger.warning(f"Verweigert (Rolle {self.session.role.value}): {action}")
            raise PermissionDeniedError(action)
