"""
ANGAGU Backend — SMS Verification Gateway Client
=================================================

What:  Sends one-time verification codes by SMS and checks them.
How:   Codes are generated here, stored in `sms_verifications` with a TTL,
       and delivered through an NCP SENS style message API. Each request is
       signed with HMAC-SHA256 over "<METHOD> <URI>\\n<timestamp>\\n<access key>".
Who:   POST /customer/signup/sms/code and /customer/signup/sms/verification,
       and the company password-reset flow.

Flow:
    send_code(phone)          check_code(phone, code)
    ┌─────────────────┐       ┌──────────────────────────────┐
    │ new 6-digit code│       │ row missing / expired → 401  │
    │ upsert row, TTL │       │ code differs          → 400  │
    │ POST provider   │       │ match → delete row, SUCCESS  │
    └─────────────────┘       └──────────────────────────────┘

The provider's `statusCode` is passed through unchanged; "202" means the
message was accepted. No retries: a failed send is reported to the client,
which may ask again.
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from angagu.config import settings
from angagu.error_codes import ErrCode
from angagu.exceptions import SmsGatewayError
from angagu.models.verification import SmsVerification
from angagu.services.result import ServiceResult, db_failure

logger = logging.getLogger(__name__)

ACCEPTED = "202"
CODE_LENGTH = 6


@dataclass(frozen=True)
class SendCodeResult:
    status_code: str

    @property
    def accepted(self) -> bool:
        return self.status_code == ACCEPTED


def generate_code() -> str:
    return "".join(secrets.choice("0123456789") for _ in range(CODE_LENGTH))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SmsGateway:
    """Client for the SMS provider plus the local code store."""

    @property
    def _uri(self) -> str:
        return f"/sms/v2/services/{settings.sms_service_id}/messages"

    def _signature(self, method: str, uri: str, timestamp: str) -> str:
        message = f"{method} {uri}\n{timestamp}\n{settings.sms_access_key}"
        digest = hmac.new(
            settings.sms_secret_key.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("utf-8")

    def _headers(self, method: str, uri: str) -> dict:
        timestamp = str(int(time.time() * 1000))
        return {
            "Content-Type": "application/json; charset=utf-8",
            "x-ncp-apigw-timestamp": timestamp,
            "x-ncp-iam-access-key": settings.sms_access_key,
            "x-ncp-apigw-signature-v2": self._signature(method, uri, timestamp),
        }

    async def _post_message(self, phone_number: str, content: str) -> str:
        """
        POST one SMS through the provider and return its `statusCode`.

        Raises:
            SmsGatewayError: Timeout, connection failure or a body without
                             a `statusCode`.
        """
        uri = self._uri
        payload = {
            "type": "SMS",
            "from": settings.sms_sender_number,
            "content": content,
            "messages": [{"to": phone_number}],
        }
        try:
            async with httpx.AsyncClient(
                base_url=settings.sms_base_url,
                timeout=settings.sms_timeout_seconds,
            ) as client:
                response = await client.post(uri, json=payload, headers=self._headers("POST", uri))
            body = response.json()
        except httpx.HTTPError as e:
            logger.error("SMS provider unreachable: %s", type(e).__name__)
            raise SmsGatewayError(context={"error": str(e)}) from e
        except ValueError as e:
            logger.error("SMS provider returned a non-JSON body (HTTP %d)", response.status_code)
            raise SmsGatewayError("SMS provider returned an unreadable response") from e

        status_code = body.get("statusCode") if isinstance(body, dict) else None
        if status_code is None:
            logger.warning("SMS provider response has no statusCode (HTTP %d)", response.status_code)
            raise SmsGatewayError("SMS provider response has no statusCode")

        logger.info("SMS provider answered statusCode=%s", status_code)
        return str(status_code)

    async def send_code(self, db: AsyncSession, phone_number: str) -> SendCodeResult:
        """
        Store a fresh code for `phone_number` and send it.

        A previous pending code for the same number is replaced.

        Raises:
            SmsGatewayError: Provider unreachable, or the code could not be
                             stored.
        """
        code = generate_code()
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.sms_code_ttl_seconds)
        try:
            await db.merge(
                SmsVerification(phone_number=phone_number, code=code, expires_at=expires_at, attempts=0)
            )
            await db.flush()
        except SQLAlchemyError as e:
            await db_failure(db, "send_code", e)
            raise SmsGatewayError("Verification code could not be stored") from e

        status_code = await self._post_message(
            phone_number, f"[ANGAGU] Your verification code is {code}."
        )
        if status_code != ACCEPTED:
            logger.warning("SMS provider did not accept the message (statusCode=%s)", status_code)
        return SendCodeResult(status_code=status_code)

    async def check_code(self, db: AsyncSession, phone_number: str, code: str) -> ServiceResult[None]:
        """
        Check a submitted code.

        Returns:
            SUCCESS, with the stored code consumed;
            ERROR err_code=400 when the code is wrong (it stays usable until expiry
                or until sms_max_attempts wrong guesses, which delete it);
            ERROR err_code=401 when there is no pending or unexpired code.
        """
        try:
            pending = await db.get(SmsVerification, phone_number)
            if pending is None:
                return ServiceResult.error(err="no pending code", err_code=ErrCode.VERIFY_FAILED)
            if _as_utc(pending.expires_at) <= datetime.now(timezone.utc):
                await db.delete(pending)
                await db.flush()
                return ServiceResult.error(err="code expired", err_code=ErrCode.VERIFY_FAILED)
            if not hmac.compare_digest(pending.code.encode("utf-8"), str(code).encode("utf-8")):
                pending.attempts = (pending.attempts or 0) + 1
                if pending.attempts >= settings.sms_max_attempts:
                    logger.warning("Verification code discarded after %d wrong attempts", pending.attempts)
                    await db.delete(pending)
                await db.flush()
                return ServiceResult.error(err="code mismatch", err_code=ErrCode.WRONG_VERIFY_CODE)

            await db.delete(pending)
            await db.flush()
            return ServiceResult.success()
        except SQLAlchemyError as e:
            result = await db_failure(db, "check_code", e)
            return ServiceResult.error(err=result.err, err_code=ErrCode.VERIFY_FAILED)


# ── Singleton Instance ────────────────────────────────────────────────────
sms_gateway = SmsGateway()
