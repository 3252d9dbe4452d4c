import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from pydantic import ValidationError

from ..auth import get_current_user
from ..config import settings
from ..database import DatabaseClient, get_db
from ..invoices import build_invoice, merge_invoice, summarize_invoices
from ..models import APIResponse
from ..uploads import INVOICE_ASSET_FIELDS, read_payload, stored_uploads

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/invoice",
    tags=["invoices"]
)


def _invalid(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


@router.get("", response_model=APIResponse)
async def get_invoices(
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    invoices = db.list_invoices(owner)
    return APIResponse(success=True, data=invoices)


@router.get("/summary", response_model=APIResponse)
async def get_invoices_summary(
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    summary = summarize_invoices(db.list_invoices(owner))
    return APIResponse(success=True, data=summary.model_dump(by_alias=True))


@router.get("/{invoice_id}", response_model=APIResponse)
async def get_invoice(
    invoice_id: str = Path(..., description="Store id or invoice number (e.g., INV-1718000000000)"),
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    # Invoice numbers are only unique per owner
    invoice = db.get_invoice(invoice_id, owner)
    if invoice:
        return APIResponse(success=True, data=invoice)
    if db.get_invoice(invoice_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    raise HTTPException(status_code=404, detail="Invoice not found")


@router.post("", response_model=APIResponse, status_code=201)
async def create_invoice(
    request: Request,
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    body, files = await read_payload(request)
    try:
        invoice = build_invoice(owner, body, settings.invoice_defaults)
    except ValidationError as e:
        raise _invalid(e)

    with stored_uploads(files, INVOICE_ASSET_FIELDS, settings.upload_dir, settings.public_url) as file_urls:
        invoice.update(file_urls)
        created = db.insert_invoice(invoice)

    logger.info("Created invoice %s for %s (total=%s)", created.get("invoiceNumber"), owner, created.get("total"))
    return APIResponse(success=True, message="Invoice created", data=created)


@router.put("/{invoice_id}", response_model=APIResponse)
async def update_invoice(
    request: Request,
    invoice_id: str = Path(..., description="Store id or invoice number to update"),
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    existing = db.get_invoice(invoice_id, owner)
    if not existing:
        raise HTTPException(status_code=404, detail="Invoice not found")

    body, files = await read_payload(request)
    try:
        invoice = merge_invoice(existing, body)
    except ValidationError as e:
        raise _invalid(e)

    with stored_uploads(files, INVOICE_ASSET_FIELDS, settings.upload_dir, settings.public_url) as file_urls:
        invoice.update(file_urls)
        updated = db.update_invoice(existing["id"], owner, invoice)
        if not updated:
            raise HTTPException(status_code=404, detail="Invoice not found")

    logger.info("Updated invoice %s (total=%s)", updated.get("invoiceNumber"), updated.get("total"))
    return APIResponse(success=True, message="Invoice updated", data=updated)


@router.delete("/{invoice_id}", response_model=APIResponse)
async def delete_invoice(
    invoice_id: str = Path(..., description="Store id or invoice number to delete"),
    owner: str = Depends(get_current_user),
    db: DatabaseClient = Depends(get_db),
):
    deleted = db.delete_invoice(invoice_id, owner)
    if not deleted:
        raise HTTPException(status_code=404, detail="Invoice not found")
    logger.info("Deleted invoice %s for %s", deleted.get("invoiceNumber"), owner)
    return APIResponse(success=True, message="Invoice deleted successfully")
