import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from ..config import AwsConfig, AwsConfigErrorCode, ConfigurationError
from ..models import dumps_compact
from .log_utility import describe_error
from .sigv4 import SigningCredentials, sign_request

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SqsUtility:
    """Delivery client for the queue service JSON API.

    Signs each request with the hand-rolled SigV4 signer and retries
    transport failures a bounded number of times.
    """

    SEND_MESSAGE_TARGET: str = "AmazonSQS.SendMessage"
    GET_QUEUE_ATTRIBUTES_TARGET: str = "AmazonSQS.GetQueueAttributes"

    def __init__(
        self,
        credentials: SigningCredentials,
        host: str,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        clock: Callable[[], datetime] = _utc_now
    ) -> None:
        """Initialize the delivery client.

        Args:
            credentials: Signing key material and scope
            host: Regional service host, e.g. sqs.us-east-1.amazonaws.com
            max_attempts: Attempts per delivery before giving up
            retry_delay: Seconds to wait between attempts
            timeout: HTTP timeout in seconds
            clock: Source of the current UTC time, read once per attempt
        """
        self.credentials: SigningCredentials = credentials
        self.host: str = host
        self.max_attempts: int = max_attempts
        self.retry_delay: float = retry_delay
        self.timeout: float = timeout
        self.clock: Callable[[], datetime] = clock

    @classmethod
    def from_config(
        cls,
        aws: AwsConfig,
        max_attempts: int = 3,
        retry_delay: float = 1.0
    ) -> "SqsUtility":
        credentials = SigningCredentials(
            access_key_id=aws.access_key_id,
            secret_access_key=aws.secret_access_key,
            region=aws.region,
            service=AwsConfig.SERVICE_NAME,
        )
        return cls(credentials, aws.sqs_host, max_attempts=max_attempts, retry_delay=retry_delay)

    async def _post(self, target: str, body: str) -> httpx.Response:
        """Sign and send one request.

        The signature covers the exact body that is transmitted and is
        recomputed from the clock on every call.
        """
        request = sign_request(self.credentials, self.host, body, target, self.clock())
        async with httpx.AsyncClient() as client:
            logger.debug(f"Posting {target} to {request.url}")
            return await client.post(
                request.url,
                headers=request.headers,
                content=request.body.encode("utf-8"),
                timeout=self.timeout,
            )

    async def deliver(self, target: str, payload: dict[str, Any]) -> Any | None:
        """
        Deliver a payload, retrying transport failures.

        HTTP error statuses are not retried: any decodable response is
        returned to the caller as is.

        Args:
            target: X-Amz-Target operation name
            payload: JSON-serializable request body

        Returns:
            Decoded response body, or None when every attempt failed
        """
        body = dumps_compact(payload)

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self._post(target, body)
                return response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(
                    f"Error sending {target} (attempt {attempt}/{self.max_attempts}): "
                    f"{describe_error(e)}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay)

        logger.error(f"Delivery exhausted after {self.max_attempts} attempts: {target}")
        return None

    async def send_message(self, payload: dict[str, Any]) -> Any | None:
        return await self.deliver(self.SEND_MESSAGE_TARGET, payload)

    async def verify_queue(self, queue_url: str) -> str:
        """
        Probe the queue with a single GetQueueAttributes call.

        Args:
            queue_url: Queue to probe

        Returns:
            The queue ARN

        Raises:
            ConfigurationError: If the queue is unreachable or the request is rejected
        """
        body = dumps_compact({"QueueUrl": queue_url, "AttributeNames": ["QueueArn"]})
        try:
            response = await self._post(self.GET_QUEUE_ATTRIBUTES_TARGET, body)
            data: dict[str, Any] = response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as e:
            raise ConfigurationError(
                AwsConfigErrorCode.AWS_SERVICE_ERROR,
                f"Queue service unreachable: {e}"
            ) from e

        if response.is_error:
            # Error type arrives as e.g. "com.amazonaws.sqs#QueueDoesNotExist"
            error_type = str(data.get("__type", "")).split("#")[-1] or f"HTTP {response.status_code}"
            message = data.get("message") or data.get("Message") or "request rejected"
            raise ConfigurationError(
                AwsConfigErrorCode.AWS_SERVICE_ERROR,
                f"{error_type}: {message}"
            )

        queue_arn: str = data.get("Attributes", {}).get("QueueArn", "")
        logger.info(f"Queue reachable: {queue_arn or queue_url}")
        return queue_arn
