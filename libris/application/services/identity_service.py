"""Identity lifecycle: signup, verification, password reset, login, logout.

One IdentityLifecycleManager per request, parameterized by an AccountKind.
Every operation runs validate -> mutate -> persist -> notify and returns an
Ok or Err; domain exceptions raised along the way are converted once, in
_run. Notifications are best-effort and never change the outcome; they are
staged during the operation and handed to the notifier only once it
succeeds (the HTTP layer further holds them until the commit).

Password hashing and comparison are CPU-bound and run in a worker thread.
"""

from __future__ import annotations

import asyncio
import secrets
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from libris.application.dtos.account import AccountView, LoginDeviceRecord, SessionTokens
from libris.application.dtos.result import Err, Ok, Result
from libris.application.interfaces.repositories import IAccountRepository
from libris.application.interfaces.services import (
    INotifier,
    IRevocationStore,
    ISessionTokenIssuer,
)
from libris.application.services.account_kinds import AccountKind
from libris.application.services.credential_policy import (
    normalize_email,
    validate_email_address,
    validate_password_confirmation,
    validate_password_strength,
)
from libris.application.services.token_service import VerificationTokenGenerator
from libris.core.config import Settings, get_settings
from libris.domain.enums import ErrorKind, SessionTokenType
from libris.domain.exceptions import (
    AccountLockedException,
    AuthenticationException,
    AuthorizationException,
    DuplicateAccountException,
    InvalidTokenException,
    LibrisException,
    ResourceNotFoundException,
    ValidationException,
)
from libris.shared.telemetry.logging import get_logger
from libris.shared.utils.datetime import isoformat_utc, utc_now
from libris.shared.utils.generators import generate_temp_password

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again later."


class IdentityLifecycleManager:
    """State machine for one account kind.

    Conceptual states (derived from stored fields): pending verification,
    verified without password, active, locked, password reset pending.
    """

    def __init__(
        self,
        kind: AccountKind,
        accounts: IAccountRepository,
        other_accounts: IAccountRepository,
        notifier: INotifier,
        session_issuer: ISessionTokenIssuer,
        hash_password: Callable[[str], str],
        check_password: Callable[[str, str | None], bool],
        settings: Settings | None = None,
        verify_tokens: VerificationTokenGenerator | None = None,
        reset_tokens: VerificationTokenGenerator | None = None,
        revocation_store: IRevocationStore | None = None,
    ) -> None:
        self.kind = kind
        self._accounts = accounts
        self._other_accounts = other_accounts
        self._notifier = notifier
        self._sessions = session_issuer
        self._hash_password = hash_password
        self._check_password = check_password
        self._settings = settings or get_settings()
        self._verify_tokens = verify_tokens or VerificationTokenGenerator(
            timedelta(minutes=self._settings.verify_email_token_expire_minutes)
        )
        self._reset_tokens = reset_tokens or VerificationTokenGenerator(
            timedelta(minutes=self._settings.reset_password_token_expire_minutes)
        )
        self._revocation = revocation_store
        self._staged: list[tuple[str, str, dict[str, Any]]] = []

    # ---- plumbing ----

    async def _run(self, operation: str, body: Callable[[], Awaitable[Result]]) -> Result:
        """Run one operation; convert domain exceptions to Err and anything else to a 500 Err.

        Emails staged by the operation reach the notifier only when it
        completes without raising; otherwise they are dropped.
        """
        self._staged.clear()
        try:
            result = await body()
        except LibrisException as e:
            self._staged.clear()
            logger.info(
                "%s %s rejected: %s (%s)", self.kind.name.value, operation, e.error_code, e.message
            )
            return Err(kind=e.kind, message=e.message, error_code=e.error_code, details=e.details)
        except Exception:
            self._staged.clear()
            logger.exception("%s %s failed", self.kind.name.value, operation)
            await self._accounts.discard_changes()
            return Err(
                kind=ErrorKind.INTERNAL,
                message=GENERIC_FAILURE_MESSAGE,
                error_code="INTERNAL_ERROR",
            )
        staged, self._staged = self._staged, []
        for to_address, template_key, context in staged:
            self._notifier.notify(to_address, template_key, context)
        return result

    def _notify(self, to_address: str, template_key: str, context: dict[str, Any]) -> None:
        self._staged.append((to_address, template_key, context))

    def _require_active(self, account: Any) -> None:
        if not account.is_active:
            raise AuthorizationException(
                "This account has been deactivated. Please contact support."
            )

    def _session_horizon(self, claims: Any) -> datetime:
        """Latest expiry of any token of the login session behind claims."""
        refresh_until = claims.issued_at + timedelta(days=self._settings.refresh_token_expire_days)
        return max(claims.expires_at, refresh_until)

    def _view(self, account: Any) -> AccountView:
        return self._accounts.to_view(account)

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_password, password)

    async def _matches(self, password: str, hashed: str | None) -> bool:
        return await asyncio.to_thread(self._check_password, password, hashed)

    def _send_verification(self, account: Any, plain_token: str) -> None:
        base = self._settings.public_base_url
        self._notify(
            account.email,
            "verify_email",
            {
                "name": account.name,
                "verification_link": self.kind.verify_link(base, plain_token),
                "resend_link": self.kind.resend_link(base, account.id),
                "expires_minutes": int(self._verify_tokens.ttl.total_seconds() // 60),
            },
        )

    async def _require_by_email(self, email: str) -> Any:
        account = await self._accounts.get_by_email(normalize_email(email))
        if account is None:
            raise ResourceNotFoundException(
                self._accounts.entity_type,
                normalize_email(email),
                "No account found with that email address. Please check your email "
                "address or register for a new account.",
            )
        return account

    # ---- operations ----

    async def signup(self, data: dict[str, Any], created_by: str | None = None) -> Result:
        """Create an unverified account and email a verification link (201)."""

        async def body() -> Result:
            email = validate_email_address(data.get("email") or "")
            if await self._accounts.get_by_email(email) is not None:
                raise DuplicateAccountException(
                    "This email address is already registered. Please log in or use the "
                    "forgot password option if you need to recover your password.",
                    other_kind=False,
                )
            if await self._other_accounts.get_by_email(email) is not None:
                raise DuplicateAccountException(
                    "This email address belongs to a different account type and cannot be reused.",
                    other_kind=True,
                )

            fields: dict[str, Any] = {
                "email": email,
                "name": data.get("name"),
                "mobile": data.get("mobile") or None,
                "created_by": created_by,
                "updated_by": created_by,
            }
            extras = {f: data[f] for f in self.kind.extra_fields if data.get(f)}
            if extras and created_by is None:
                raise AuthorizationException(
                    "Only a signed-in admin can assign a designation or permissions."
                )
            fields.update(extras)
            if self.kind.requires_password_on_signup:
                password = data.get("password") or ""
                validate_password_confirmation(password, data.get("confirm_password") or "")
                validate_password_strength(password)
                fields["hashed_password"] = await self._hash(password)

            token = self._verify_tokens.issue()
            fields["email_verify_token_hash"] = token.hashed_token
            fields["email_verify_token_expires_at"] = token.expires_at
            account = await self._accounts.create_account(**fields)
            logger.info("%s %s signed up", self.kind.name.value, account.id)

            self._send_verification(account, token.plain_token)
            return Ok(
                message=f"{self.kind.label} created successfully. Please verify your email.",
                data={"account": self._view(account).to_dict()},
                created=True,
            )

        return await self._run("signup", body)

    async def verify_email(self, token: str) -> Result:
        """Consume a verification token; admins also receive a temporary password."""

        async def body() -> Result:
            account = await self._accounts.get_by_email_verify_token_hash(
                VerificationTokenGenerator.hash_token(token or "")
            )
            if account is None or not self._verify_tokens.validate(
                token,
                account.email_verify_token_hash,
                account.email_verify_token_expires_at,
            ):
                raise InvalidTokenException(
                    "The verification link is invalid or has expired. "
                    "Please request a new verification email."
                )

            account.is_email_verified = True
            self._accounts.clear_email_verify_token(account)

            welcome: dict[str, Any] | None = None
            if self.kind.issues_temp_password_on_verify:
                temp_password = generate_temp_password()
                account.hashed_password = await self._hash(temp_password)
                account.must_change_password = True
                reset = self._reset_tokens.issue()
                self._accounts.set_reset_password_token(account, reset)
                welcome = {
                    "name": account.name,
                    "temp_password": temp_password,
                    "reset_link": self.kind.reset_link(
                        self._settings.public_base_url, reset.plain_token
                    ),
                    "expires_minutes": int(self._reset_tokens.ttl.total_seconds() // 60),
                }

            account = await self._accounts.update(account)
            logger.info("%s %s verified email", self.kind.name.value, account.id)
            if welcome is not None:
                self._notify(account.email, "admin_welcome", welcome)
            return Ok(message="Email has been successfully verified.")

        return await self._run("verify_email", body)

    async def resend_verification(self, account_id: str) -> Result:
        """Issue a fresh verification token; the previous one stops validating immediately."""

        async def body() -> Result:
            account = await self._accounts.get_by_id(account_id)
            if account is None:
                raise ResourceNotFoundException(
                    self._accounts.entity_type, account_id, f"{self.kind.label} not found."
                )
            if account.is_email_verified:
                raise AuthorizationException(
                    "This email address has already been verified. No further action is required."
                )
            token = self._verify_tokens.issue()
            self._accounts.set_email_verify_token(account, token)
            account = await self._accounts.update(account)
            self._send_verification(account, token.plain_token)
            return Ok(message="Verification email resent successfully.")

        return await self._run("resend_verification", body)

    async def request_password_reset(self, email: str) -> Result:
        """Issue a reset token for a verified account and email the reset link."""

        async def body() -> Result:
            account = await self._require_by_email(email)
            self._require_active(account)
            if not account.is_email_verified:
                raise AuthenticationException(
                    "Your email address has not been verified yet. "
                    "Please verify your email to proceed with password reset."
                )
            token = self._reset_tokens.issue()
            self._accounts.set_reset_password_token(account, token)
            account = await self._accounts.update(account)
            self._notify(
                account.email,
                "reset_password",
                {
                    "name": account.name,
                    "reset_link": self.kind.reset_link(
                        self._settings.public_base_url, token.plain_token
                    ),
                    "expires_minutes": int(self._reset_tokens.ttl.total_seconds() // 60),
                },
            )
            return Ok(message="Password reset email sent successfully. Please check your email.")

        return await self._run("request_password_reset", body)

    async def reset_password(
        self,
        token: str,
        old_password: str,
        new_password: str,
        confirm_new_password: str,
    ) -> Result:
        """Replace the password using a reset token and the current (or temporary) password."""

        async def body() -> Result:
            account = await self._accounts.get_by_reset_token_hash(
                VerificationTokenGenerator.hash_token(token or "")
            )
            if account is None or not self._reset_tokens.validate(
                token,
                account.reset_password_token_hash,
                account.reset_password_token_expires_at,
            ):
                raise InvalidTokenException(
                    "Your password reset link is invalid or has expired. "
                    "Please request a new password reset link."
                )
            self._require_active(account)
            if not account.hashed_password:
                raise AuthorizationException("Please set your password first.")
            if not await self._matches(old_password or "", account.hashed_password):
                raise ValidationException(
                    "Wrong old password. Please try again.", field="old_password"
                )
            if new_password != confirm_new_password:
                raise ValidationException(
                    "The new passwords do not match. Please try again.",
                    field="confirm_new_password",
                )
            validate_password_strength(new_password, field="new_password")
            if new_password == old_password:
                raise ValidationException(
                    "The new password must be different from the old password.",
                    field="new_password",
                )

            account.hashed_password = await self._hash(new_password)
            account.must_change_password = False
            account.failed_login_attempts = 0
            account.locked_until = None
            self._accounts.clear_reset_password_token(account)
            account = await self._accounts.update(account)
            logger.info("%s %s reset password", self.kind.name.value, account.id)

            self._notify(account.email, "reset_password_success", {"name": account.name})
            return Ok(message="Reset Password Successful.")

        return await self._run("reset_password", body)

    async def login(self, email: str, password: str, device: dict[str, Any]) -> Result:
        """Check every login gate, record the attempt and mint session tokens."""

        async def body() -> Result:
            account = await self._require_by_email(email)
            self._require_active(account)
            if not account.is_email_verified:
                raise AuthenticationException(
                    "Please verify your email address to proceed with logging in."
                )
            if not account.hashed_password:
                raise AuthorizationException("Please set your password first.")

            now = utc_now()
            locked_until = self._accounts.locked_until(account, now)
            if locked_until is not None:
                raise AccountLockedException(isoformat_utc(locked_until))
            if account.must_change_password:
                raise AuthorizationException(
                    "You must change your temporary password before logging in. "
                    "Use the reset link sent to your email."
                )

            record = LoginDeviceRecord(device=dict(device), at=now)
            if not await self._matches(password or "", account.hashed_password):
                await self._accounts.record_failed_login(
                    account,
                    record,
                    max_attempts=self._settings.max_login_attempts,
                    lock_duration=timedelta(hours=self._settings.lock_duration_hours),
                )
                logger.info("%s %s failed login", self.kind.name.value, account.id)
                return Err(
                    kind=ErrorKind.UNAUTHORIZED,
                    message="Incorrect password. Please try again or use the forgot "
                    "password option to reset it.",
                    error_code="INVALID_CREDENTIALS",
                )

            account = await self._accounts.record_successful_login(account, record)
            permissions = self.kind.permissions_for(account)
            # access and refresh tokens of one login share a session id; logout revokes it
            session_id = secrets.token_hex(16)
            access_token, access_expires = self._sessions.issue(
                account.id,
                self.kind.name.value,
                permissions,
                record.device,
                session_id=session_id,
            )
            refresh_token, _ = self._sessions.issue(
                account.id,
                self.kind.name.value,
                permissions,
                record.device,
                token_type=SessionTokenType.REFRESH,
                session_id=session_id,
            )
            tokens = SessionTokens(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=access_expires,
            )
            logger.info("%s %s logged in", self.kind.name.value, account.id)

            self._notify(
                account.email,
                "login_notification",
                {"name": account.name, "device": record.device, "at": isoformat_utc(now)},
            )
            return Ok(
                message=f"{self.kind.label} logged in successfully.",
                data={
                    "account": self._view(account).to_dict(),
                    "access_token": tokens.access_token,
                    "refresh_token": tokens.refresh_token,
                    "token_type": tokens.token_type,
                    "expires_at": isoformat_utc(tokens.expires_at),
                },
            )

        return await self._run("login", body)

    async def logout(self, bearer_token: str | None) -> Result:
        """Acknowledge logout; with a revocation store, revoke the whole login session.

        Access and refresh tokens of the session stop working together.
        """

        async def body() -> Result:
            if not bearer_token:
                raise AuthenticationException("No authentication token provided.")
            claims = self._sessions.validate(bearer_token, expected_type=None)
            if self._revocation is not None:
                await self._revocation.revoke(claims.session_id, self._session_horizon(claims))
                logger.info(
                    "%s %s session %s revoked",
                    self.kind.name.value,
                    claims.account_id,
                    claims.session_id,
                )
            return Ok(message="You have been logged out successfully.")

        return await self._run("logout", body)

    async def refresh_session(self, refresh_token: str) -> Result:
        """Exchange a refresh token for a new access token with the same claims."""

        async def body() -> Result:
            claims = self._sessions.validate(
                refresh_token, expected_type=SessionTokenType.REFRESH
            )
            if claims.account_kind != self.kind.name.value:
                raise AuthenticationException(
                    "Session token was issued for a different account type."
                )
            if self._revocation is not None and await self._revocation.is_revoked(
                claims.session_id
            ):
                raise AuthenticationException("Session has been revoked. Please log in again.")
            account = await self._accounts.get_by_id(claims.account_id)
            if account is None:
                raise ResourceNotFoundException(
                    self._accounts.entity_type, claims.account_id, f"{self.kind.label} not found."
                )
            self._require_active(account)
            access_token, expires_at = self._sessions.issue(
                account.id,
                self.kind.name.value,
                self.kind.permissions_for(account),
                claims.device,
                session_id=claims.session_id,
            )
            return Ok(
                message="Session refreshed successfully.",
                data={
                    "access_token": access_token,
                    "token_type": "bearer",
                    "expires_at": isoformat_utc(expires_at),
                },
            )

        return await self._run("refresh_session", body)

    async def get_account(self, account_id: str) -> Result:
        """Return the account view for the authenticated session."""

        async def body() -> Result:
            account = await self._accounts.get_by_id(account_id)
            if account is None:
                raise ResourceNotFoundException(
                    self._accounts.entity_type, account_id, f"{self.kind.label} not found."
                )
            return Ok(
                message=f"{self.kind.label} fetched successfully.",
                data={"account": self._view(account).to_dict()},
            )

        return await self._run("get_account", body)
