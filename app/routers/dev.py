# =============================================================================
# app/routers/dev.py - Development Tools
# =============================================================================
# Local diagnostics and credential setup. Every endpoint here answers 404 in
# production.
#
#   GET  /api/v1/dev/airtable/status   - connectivity check (Metadata API)
#   GET  /api/v1/dev/airtable/inspect  - raw records + attachments + curl
#        (?recordId= for one record, ?byFieldId=true to read by field ID)
#   POST /api/v1/dev/airtable-config   - set the in-process PAT/base override
#   GET  /setup?c=BASE64(JSON({baseId, pat}))  - same, from a shareable link
# =============================================================================

import base64
import binascii
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.config import settings
from app.exceptions import (
    AirtableNotConfiguredError,
    DevToolsDisabledError,
    InvalidSetupPayloadError,
    UpstreamServiceError,
)
from lib.airtable_client import (
    AirtableClient,
    AirtableClientError,
    ConnectivityResult,
    get_credentials,
    set_credential_override,
)
from lib.airtable_schema import field_labels, resolve_table
from lib.cell_values import extract_attachments
from lib.utils import mask_secret

logger = logging.getLogger(__name__)


def require_dev_tools() -> None:
    """Hide dev tools in production."""
    if settings.is_production:
        raise DevToolsDisabledError()


router = APIRouter(dependencies=[Depends(require_dev_tools)])
setup_router = APIRouter(dependencies=[Depends(require_dev_tools)])


# =============================================================================
# Request / Response Models
# =============================================================================

class AirtableConfigRequest(BaseModel):
    baseId: str = Field(..., min_length=1)
    pat: str = Field(..., min_length=1)


class AirtableStatusResponse(BaseModel):
    baseId: str
    token: str
    connectivity: dict[str, Any]


class InspectRecord(BaseModel):
    id: str
    createdTime: Optional[str] = None
    fields: dict[str, Any] = Field(default_factory=dict)
    attachments: list[dict[str, Any]] = Field(default_factory=list)


class InspectResponse(BaseModel):
    table: str
    records: list[InspectRecord] = Field(default_factory=list)
    offset: Optional[str] = None
    curl: str


# =============================================================================
# Helpers
# =============================================================================

def check_connectivity() -> AirtableStatusResponse:
    """Test the effective credentials; never raises for Airtable failures."""
    creds = get_credentials()

    if not creds.api_key:
        result = ConnectivityResult(ok=False, problem="no_token", message="Airtable PAT missing.")
    elif not creds.base_id:
        result = ConnectivityResult(ok=False, problem="no_base", message="Airtable base ID missing.")
    else:
        with AirtableClient(api_key=creds.api_key, base_id=creds.base_id) as client:
            result = client.test_connectivity()

    logger.info(f"Airtable connectivity: ok={result.ok} problem={result.problem}")
    return AirtableStatusResponse(
        baseId=creds.base_id,
        token=mask_secret(creds.api_key),
        connectivity=result.to_dict(),
    )


def decode_setup_payload(encoded: Optional[str]) -> AirtableConfigRequest:
    """
    Decode ?c=BASE64(JSON({"baseId": ..., "pat": ...})).

    Raises:
        InvalidSetupPayloadError: If missing or not decodable
    """
    if not encoded:
        raise InvalidSetupPayloadError()
    try:
        raw = base64.b64decode(encoded, validate=False).decode("utf-8")
        data = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
        raise InvalidSetupPayloadError()

    if not isinstance(data, dict) or not isinstance(data.get("baseId"), str) or not isinstance(data.get("pat"), str):
        raise InvalidSetupPayloadError()
    if not data["baseId"].strip() or not data["pat"].strip():
        raise InvalidSetupPayloadError()

    return AirtableConfigRequest(baseId=data["baseId"], pat=data["pat"])


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/airtable/status", response_model=AirtableStatusResponse)
def airtable_status() -> AirtableStatusResponse:
    """Which credentials are in effect, and whether they work."""
    return check_connectivity()


@router.get("/airtable/inspect", response_model=InspectResponse)
def airtable_inspect(
    table: str = Query(..., min_length=1, description="Table name, alias or tbl ID"),
    limit: int = Query(10, ge=1, le=100),
    view: Optional[str] = Query(None),
    filterByFormula: Optional[str] = Query(None),
    recordId: Optional[str] = Query(None, description="Fetch this one record instead of a page"),
    byFieldId: bool = Query(False, description="Read by field ID and relabel known columns"),
) -> InspectResponse:
    """
    One page of raw records (or one record) with any attachments pulled
    out, plus the equivalent curl command.

    With byFieldId, Airtable returns fields keyed by fld... IDs; the ones
    in the base layout are mapped back to their column names.
    """
    creds = get_credentials()
    if not creds.complete:
        raise AirtableNotConfiguredError()

    table_ref = resolve_table(table)
    labels = field_labels(table) if byFieldId else {}

    with AirtableClient(api_key=creds.api_key, base_id=creds.base_id) as client:
        try:
            if recordId:
                page = {"records": [client.get_record(table_ref, recordId, return_fields_by_field_id=byFieldId)]}
                curl = client.curl_command(table_ref, record_id=recordId, return_fields_by_field_id=byFieldId)
            else:
                kwargs = {
                    "page_size": limit,
                    "view": view or None,
                    "filter_by_formula": filterByFormula or None,
                    "return_fields_by_field_id": byFieldId,
                }
                page = client.list_records(table_ref, **kwargs)
                curl = client.curl_command(table_ref, **kwargs)
        except AirtableClientError as e:
            logger.error(f"Inspect {table_ref} failed: {e}")
            raise UpstreamServiceError("airtable")

    records = []
    for record in page["records"]:
        fields = {labels.get(key, key): value for key, value in record.get("fields", {}).items()}
        records.append(
            InspectRecord(
                id=record["id"],
                createdTime=record.get("createdTime"),
                fields=fields,
                attachments=[a.to_dict() for a in extract_attachments(fields)],
            )
        )
    return InspectResponse(table=table_ref, records=records, offset=page.get("offset"), curl=curl)


@router.post("/airtable-config", response_model=AirtableStatusResponse)
def set_airtable_config(body: AirtableConfigRequest) -> AirtableStatusResponse:
    """Store the PAT/base override for this process and test it."""
    set_credential_override(api_key=body.pat, base_id=body.baseId)
    return check_connectivity()


@setup_router.get("/setup", response_model=AirtableStatusResponse)
def setup(c: Optional[str] = Query(None)) -> AirtableStatusResponse:
    """One-link local setup: decode, store the override, test it."""
    payload = decode_setup_payload(c)
    set_credential_override(api_key=payload.pat, base_id=payload.baseId)
    return check_connectivity()
