import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from fairvalue_engine import FinancialRecord, ValidationError, validate_record

logger = logging.getLogger(__name__)


class AcquisitionErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    MALFORMED_RESPONSE = "MalformedResponse"
    INVALID_DATA = "InvalidData"


class AcquisitionError(Exception):
    """A lookup failed at the provider boundary. Scoped to a single ticker."""

    def __init__(
        self,
        kind: AcquisitionErrorKind,
        message: str,
        detail: Optional[str] = None,
        field: Optional[str] = None,
    ):
        self.kind = kind
        self.detail = detail
        self.field = field
        super().__init__(message)

    @classmethod
    def provider_unavailable(cls, ticker: str, detail: str) -> "AcquisitionError":
        return cls(
            AcquisitionErrorKind.PROVIDER_UNAVAILABLE,
            f"Data provider unavailable while fetching {ticker}: {detail}",
            detail=detail,
        )

    @classmethod
    def malformed_response(cls, detail: str) -> "AcquisitionError":
        return cls(
            AcquisitionErrorKind.MALFORMED_RESPONSE,
            "Failed to process the stock data returned by the provider.",
            detail=detail,
        )

    @classmethod
    def invalid_data(cls, error: ValidationError) -> "AcquisitionError":
        return cls(
            AcquisitionErrorKind.INVALID_DATA,
            f"Provider returned invalid data ({error.field}: {error.reason}).",
            detail=error.reason,
            field=error.field,
        )


@dataclass(frozen=True)
class GroundingSource:
    """Citation returned by the provider. Either part may be missing."""

    title: Optional[str] = None
    uri: Optional[str] = None


@dataclass(frozen=True)
class Acquisition:
    record: FinancialRecord
    sources: Tuple[GroundingSource, ...] = ()


def decode_payload(text: Optional[str]) -> Dict[str, Any]:
    """
    Decode the provider's response body into a JSON object.

    Tolerates a markdown code fence or prose around a single JSON object;
    anything else raises ``AcquisitionError`` (MalformedResponse).
    """
    if not text or not text.strip():
        raise AcquisitionError.malformed_response("empty response body")

    body = text.strip()
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError):
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            raise AcquisitionError.malformed_response("no JSON object in response body")
        try:
            payload = json.loads(body[start : end + 1])
        except (ValueError, RecursionError) as e:
            raise AcquisitionError.malformed_response(f"invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise AcquisitionError.malformed_response(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def to_record(payload: Dict[str, Any]) -> FinancialRecord:
    """Run a decoded payload through the data contract."""
    try:
        return validate_record(payload)
    except ValidationError as e:
        logger.warning(f"Provider payload rejected: {e}")
        raise AcquisitionError.invalid_data(e) from e


def dedupe_sources(sources: List[GroundingSource]) -> Tuple[GroundingSource, ...]:
    """Drop repeated URIs, keeping first-seen order."""
    seen = set()
    unique = []
    for source in sources:
        key = source.uri or source.title
        if key is None or key in seen:
            continue
        seen.add(key)
        unique.append(source)
    return tuple(unique)


class BaseConnector(ABC):
    """Abstract base class for data connectors."""

    @abstractmethod
    async def fetch(self, ticker: str) -> Acquisition:
        """
        Fetch a validated record and its citation sources for ``ticker``.

        One outbound call per invocation, no retry.  Every failure is raised
        as ``AcquisitionError``.
        """
        pass


class ConnectorFactory:
    """Simple factory to manage data connectors (Singleton Pattern)."""

    _connector_classes: Dict[str, Type[BaseConnector]] = {}
    _instances: Dict[str, BaseConnector] = {}

    @classmethod
    def register(cls, name: str, connector_cls: Type[BaseConnector]) -> None:
        cls._connector_classes[name] = connector_cls
        cls._instances.pop(name, None)

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._connector_classes)

    @classmethod
    def get_connector(cls, name: str) -> BaseConnector:
        # Check cache first
        if name in cls._instances:
            return cls._instances[name]

        # Create new instance if registered
        connector_cls = cls._connector_classes.get(name)
        if not connector_cls:
            raise ValueError(f"Connector '{name}' not found.")

        instance = connector_cls()
        cls._instances[name] = instance
        return instance
