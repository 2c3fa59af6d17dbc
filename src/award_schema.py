#!/usr/bin/env python3
"""
Pydantic schemas for award documents stored by ornode.

Raw documents are never used directly: each one passes through
`validate_award_document`, which returns either a typed DatabaseAwardRecord
or the validation detail explaining why the document was rejected.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, StrictInt, StrictStr, ValidationError, field_validator

from audit_models import AwardSchemaError, DatabaseAwardRecord
from token_id_codec import normalize_token_id


HEX_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
HEX_TOKEN_ID_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")
HEX_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


# =============================================================
# SCHEMAS
# =============================================================

class BurnData(BaseModel):
    burnTxHash: Optional[StrictStr] = None
    burnReason: Optional[StrictStr] = None


class AwardProperties(BaseModel):
    tokenId: StrictStr
    recipient: StrictStr
    mintType: StrictInt
    denomination: StrictInt
    periodNumber: StrictInt
    groupNum: Optional[StrictInt] = None
    level: Optional[StrictInt] = None
    reason: Optional[StrictStr] = None
    title: Optional[StrictStr] = None
    mintTs: Optional[StrictInt] = None
    mintTxHash: Optional[StrictStr] = None
    burn: Optional[BurnData] = None

    @field_validator("mintType", "denomination", "periodNumber", "groupNum", "level", "mintTs", mode="before")
    @classmethod
    def accept_whole_doubles(cls, value: Any) -> Any:
        # BSON doubles come back as float; whole ones are ints, the rest fail StrictInt
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("tokenId")
    @classmethod
    def check_token_id(cls, value: str) -> str:
        if not HEX_TOKEN_ID_RE.match(value):
            raise ValueError("tokenId must be a 0x-prefixed hex string of at most 32 bytes")
        return normalize_token_id(value)

    @field_validator("recipient")
    @classmethod
    def check_recipient(cls, value: str) -> str:
        if not HEX_ADDRESS_RE.match(value):
            raise ValueError("recipient must be a 0x-prefixed 20-byte hex address")
        return value

    @field_validator("mintType", "denomination", "periodNumber")
    @classmethod
    def check_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be non-negative")
        return value

    @field_validator("mintTxHash")
    @classmethod
    def check_tx_hash(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not HEX_TX_HASH_RE.match(value):
            raise ValueError("mintTxHash must be a 0x-prefixed 32-byte hex string")
        return value


class RespectAwardDocument(BaseModel):
    name: StrictStr
    description: Optional[StrictStr] = None
    image: Optional[StrictStr] = None
    properties: AwardProperties

    def to_record(self) -> DatabaseAwardRecord:
        props = self.properties
        return DatabaseAwardRecord(
            token_id=props.tokenId,
            recipient=props.recipient,
            denomination=props.denomination,
            period_number=props.periodNumber,
            mint_type=props.mintType,
            mint_tx_hash=props.mintTxHash,
            burned=props.burn is not None,
        )


# =============================================================
# VALIDATED DECODE
# =============================================================

@dataclass(frozen=True)
class AwardValidation:
    ok: bool
    record: Optional[DatabaseAwardRecord] = None
    error: Optional[str] = None


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()))
        parts.append(f"{location or '<document>'}: {err.get('msg')}")
    return "; ".join(parts)


def validate_award_document(document: Dict[str, Any]) -> AwardValidation:
    try:
        parsed = RespectAwardDocument.model_validate(document)
    except ValidationError as exc:
        return AwardValidation(ok=False, error=_format_errors(exc))
    return AwardValidation(ok=True, record=parsed.to_record())


def load_award_records(documents: Iterable[Dict[str, Any]]) -> List[DatabaseAwardRecord]:
    """Validate every document; the first malformed one aborts with AwardSchemaError"""
    records = []
    for index, document in enumerate(documents):
        result = validate_award_document(document)
        if not result.ok:
            raise AwardSchemaError(index, result.error or "unknown validation error")
        records.append(result.record)
    return records
