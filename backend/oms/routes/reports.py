from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..errors import OmsError, error_response, internal_error_response
from ..services import reporting_service
from ..validation import parse_date_range, unwrap


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("")
@reports_bp.get("/")
@require_auth
def order_report():
    """?type=daily|monthly|yearly&startDate=YYYY-MM-DD&endDate=YYYY-MM-DD"""
    try:
        dates = unwrap(parse_date_range(request.args))
        report = reporting_service.order_report(
            g.merchant_id, request.args.get("type", "daily"), dates
        )
        return jsonify(report), 200
    except OmsError as exc:
        return error_response(exc)
    except Exception as exc:
        return internal_error_response(exc, "Failed to generate report")


@reports_bp.get("/dashboard")
@require_auth
def dashboard():
    try:
        return jsonify(reporting_service.dashboard(g.merchant_id)), 200
    except Exception as exc:
        return internal_error_response(exc, "Failed to build dashboard")


@reports_bp.get("/sales")
@require_auth
def sales_report():
    try:
        dates = unwrap(parse_date_range(request.args))
        channel = (request.args.get("channel") or "").strip()
        report = reporting_service.sales_report(
            g.merchant_id,
            dates,
            channel=None if channel in ("", "all") else channel,
            group_by=request.args.get("groupBy", "day"),
        )
        return jsonify(report), 200
    except OmsError as exc:
        return error_response(exc)
    except Exception as exc:
        return internal_error_response(exc, "Failed to generate sales report")
