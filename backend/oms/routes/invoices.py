# Overview: Flask API routes for invoices; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..errors import OmsError, ValidationError, error_response, internal_error_response
from ..services import invoice_service
from ..uploads import read_upload
from ..validation import parse_invoice, unwrap

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@invoices_bp.get("/")
@require_auth
def list_invoices_route():
    try:
        return jsonify({"invoices": invoice_service.list_invoices(g.merchant_id)})
    except Exception as e:
        return internal_error_response(e, "Failed to fetch invoices")


@invoices_bp.post("/add-manual")
@require_auth
def add_manual_invoice_route():
    """Body: {orderId, dueDate, status?}."""
    try:
        data = unwrap(parse_invoice(request.get_json(silent=True)))
        invoice = invoice_service.add_manual_invoice(g.merchant_id, data)
        return jsonify({"message": "Invoice created successfully", "invoice": invoice}), 201
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to create invoice")


@invoices_bp.post("/upload-csv")
@require_auth
def upload_invoices_route():
    """Columns: order_id, due_date, status."""
    try:
        file = request.files.get("file")
        if not file:
            raise ValidationError("No file uploaded")
        return jsonify(invoice_service.import_invoices(g.merchant_id, read_upload(file)))
    except OmsError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, "Failed to process invoice upload")
