"""
TBURN Validator Registry Client

Fetches the full validator snapshot from the registry HTTP endpoint. Each
payload is validated independently: usable records are returned for ranking
and rejected payloads are reported alongside them.

The client performs a single request per call; retry policy belongs to the
caller.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import httpx

from .constants import LOG_INCLUDE_RESPONSE_CONTENT, LOG_MAX_PATH_LENGTH, TBURN_REGISTRY_URL
from .exceptions import InvalidValidatorRecord, RegistryError
from .logger import get_logger
from .validator.types import ValidatorRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    Result of one registry fetch.

    Attributes:
        records: Payloads that passed validation
        rejected: (payload, reason) for payloads that did not
        fetched_at: Time the response was received
    """
    records: Tuple[ValidatorRecord, ...]
    rejected: Tuple[Tuple[Any, str], ...]
    fetched_at: float

    def __len__(self) -> int:
        return len(self.records)


class RegistryClient:
    """
    Async client for the validator registry.

    Accepts a shared httpx.AsyncClient; when none is given the client owns
    one and closes it in `aclose()`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.url = (url or str(TBURN_REGISTRY_URL)).rstrip('/')
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, registry_config, client: Optional[httpx.AsyncClient] = None) -> "RegistryClient":
        """Create from a loaded [registry] section."""
        return cls(url=registry_config.url, client=client, timeout=registry_config.timeout)

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get_json(self) -> Any:
        """
        GET the registry URL and decode the JSON body.

        Network failures are logged and re-raised so the caller can tell
        an unreachable registry from a bad response.

        Raises:
            httpx.RequestError: registry unreachable
            RegistryError: error status or undecodable body
        """
        start_time = time.time()
        log_url = self.url
        if len(log_url) > LOG_MAX_PATH_LENGTH:
            log_url = log_url[:LOG_MAX_PATH_LENGTH] + "...[TRUNCATED]"

        logger.info(f"--> \"GET {log_url} HTTP/1.1\"")
        try:
            response = await self.client.get(self.url)
            process_time = time.time() - start_time
            response.raise_for_status()
            payload = response.json()
        except httpx.RequestError:
            process_time = time.time() - start_time
            logger.warning(f"<-- \"GET {log_url} HTTP/1.1\" NETWORK_ERROR ({process_time:.3f}s)")
            raise
        except (json.JSONDecodeError, httpx.HTTPStatusError) as e:
            process_time = time.time() - start_time
            status_code = getattr(e, 'response', None)
            status_code = status_code.status_code if status_code is not None else response.status_code
            logger.warning(f"<-- \"GET {log_url} HTTP/1.1\" {status_code} ERROR ({process_time:.3f}s): {e}")
            raise RegistryError(f"Registry returned an unusable response ({status_code}): {e}") from e

        response_body_log = ""
        if LOG_INCLUDE_RESPONSE_CONTENT:
            response_body_log = f"\n\nIncoming Response:\n\"{json.dumps(payload, indent=2)}\"\n"
        logger.info(f"<-- \"GET {log_url} HTTP/1.1\" {response.status_code} ({process_time:.3f}s){response_body_log}")
        return payload

    @staticmethod
    def parse_payload(payload: Any) -> Tuple[List[ValidatorRecord], List[Tuple[Any, str]]]:
        """
        Split a registry body into valid records and rejected payloads.

        The body is either a list of validator objects or an object with a
        ``validators`` list.

        Raises:
            RegistryError: if the body has neither shape
        """
        if isinstance(payload, dict):
            payload = payload.get('validators')
        if not isinstance(payload, list):
            raise RegistryError("Registry response has no validator list")

        records: List[ValidatorRecord] = []
        rejected: List[Tuple[Any, str]] = []
        for item in payload:
            try:
                records.append(ValidatorRecord.from_dict(item))
            except InvalidValidatorRecord as e:
                rejected.append((item, str(e)))
        return records, rejected

    async def fetch_validators(self) -> RegistrySnapshot:
        """
        Fetch and validate the current validator set.

        Returns:
            RegistrySnapshot with valid records and rejected payloads
        """
        payload = await self._get_json()
        records, rejected = self.parse_payload(payload)
        if rejected:
            logger.warning(f"Registry returned {len(rejected)} invalid validator payloads")
        logger.debug(f"Fetched {len(records)} validators from {self.url}")
        return RegistrySnapshot(
            records=tuple(records),
            rejected=tuple(rejected),
            fetched_at=time.time(),
        )
