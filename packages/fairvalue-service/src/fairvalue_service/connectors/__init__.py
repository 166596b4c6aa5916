from fairvalue_service.connectors.base import (
    Acquisition,
    AcquisitionError,
    AcquisitionErrorKind,
    BaseConnector,
    ConnectorFactory,
    GroundingSource,
    decode_payload,
    to_record,
)
from fairvalue_service.connectors.claude import ClaudeSearchConnector
from fairvalue_service.connectors.yahoo import YahooFinanceConnector

__all__ = [
    "Acquisition",
    "AcquisitionError",
    "AcquisitionErrorKind",
    "BaseConnector",
    "ClaudeSearchConnector",
    "ConnectorFactory",
    "GroundingSource",
    "YahooFinanceConnector",
    "decode_payload",
    "to_record",
]
