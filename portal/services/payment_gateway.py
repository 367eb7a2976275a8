import base64
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from portal.core.config import settings
from portal.core.errors import PaymentError

logger = logging.getLogger(__name__)

PAY_ENDPOINT = "/pg/v1/pay"
SUCCESS_CODE = "PAYMENT_SUCCESS"


@dataclass(frozen=True)
class PaymentSession:
    merchant_transaction_id: str
    redirect_url: str


@dataclass(frozen=True)
class PaymentStatus:
    merchant_transaction_id: str
    code: Optional[str]
    amount_paise: int
    transaction_id: Optional[str]


def _checksum(value: str, salt_key: str, salt_index: str) -> str:
    digest = hashlib.sha256((value + salt_key).encode("utf-8")).hexdigest()
    return f"{digest}###{salt_index}"


class PhonePeGateway:
    """
    Thin client for the PhonePe PG v1 pay and status APIs.

    Amounts go over the wire in paise. Every failure (transport, timeout,
    non-success body) surfaces as PaymentError so no checkout commits on it.
    """

    def __init__(
        self,
        merchant_id: Optional[str],
        salt_key: Optional[str],
        salt_index: str = "1",
        api_url: str = "https://api-preprod.phonepe.com/apis/pg-sandbox",
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ):
        self.merchant_id = merchant_id
        self.salt_key = salt_key
        self.salt_index = salt_index
        self.api_url = api_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "PhonePeGateway":
        return cls(
            merchant_id=settings.PHONEPE_MERCHANT_ID,
            salt_key=settings.PHONEPE_SALT_KEY,
            salt_index=settings.PHONEPE_SALT_INDEX,
            api_url=settings.PHONEPE_API_URL,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        )

    def _require_config(self) -> None:
        if not self.merchant_id or not self.salt_key:
            raise PaymentError("Payment gateway is not configured")

    def _send(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._client.request(method, f"{self.api_url}{endpoint}", **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("Payment gateway timed out on %s", endpoint)
            raise PaymentError("Payment gateway timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Payment gateway unreachable on %s: %s", endpoint, e)
            raise PaymentError("Payment gateway unreachable") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("success"):
            logger.info("Payment gateway rejected %s (http %s, code %s)", endpoint, response.status_code, body.get("code"))
            raise PaymentError(
                "Payment gateway rejected the request",
                http_status=response.status_code,
                code=body.get("code"),
            )
        return body

    # ---------- PAY ----------

    def initiate_payment(
        self,
        merchant_transaction_id: str,
        amount_inr: int,
        merchant_user_id: str,
        redirect_url: str,
        callback_url: str,
        mobile_number: Optional[str] = None,
    ) -> PaymentSession:
        self._require_config()

        payload = {
            "merchantId": self.merchant_id,
            "merchantTransactionId": merchant_transaction_id,
            "merchantUserId": merchant_user_id,
            "amount": amount_inr * 100,
            "redirectUrl": redirect_url,
            "redirectMode": "REDIRECT",
            "callbackUrl": callback_url,
            "paymentInstrument": {"type": "PAY_PAGE"},
        }
        if mobile_number:
            payload["mobileNumber"] = mobile_number.removeprefix("+91")

        encoded = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
        body = self._send(
            "POST",
            PAY_ENDPOINT,
            json={"request": encoded},
            headers={"X-VERIFY": _checksum(encoded + PAY_ENDPOINT, self.salt_key, self.salt_index)},
        )

        redirect_info = ((body.get("data") or {}).get("instrumentResponse") or {}).get("redirectInfo") or {}
        url = redirect_info.get("url") or redirect_info.get("redirectUrl")
        if not url:
            raise PaymentError("Payment gateway redirect URL missing")

        return PaymentSession(merchant_transaction_id=merchant_transaction_id, redirect_url=url)

    # ---------- STATUS ----------

    def check_status(self, merchant_transaction_id: str) -> PaymentStatus:
        """Status of a transaction; raises PaymentError unless it was paid."""
        self._require_config()

        endpoint = f"/pg/v1/status/{self.merchant_id}/{merchant_transaction_id}"
        body = self._send(
            "GET",
            endpoint,
            headers={
                "X-VERIFY": _checksum(endpoint, self.salt_key, self.salt_index),
                "X-MERCHANT-ID": self.merchant_id,
            },
        )

        if body.get("code") != SUCCESS_CODE:
            raise PaymentError("Payment not completed", code=body.get("code"))

        data = body.get("data") or {}
        return PaymentStatus(
            merchant_transaction_id=merchant_transaction_id,
            code=body.get("code"),
            amount_paise=int(data.get("amount") or 0),
            transaction_id=data.get("transactionId"),
        )

    def close(self) -> None:
        self._client.close()
