"""Reports Router - Kassenabgleich und Platznutzung"""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from courtdesk.database import get_db
from courtdesk.dependencies import ClubContext, get_club_context, require_admin
from courtdesk.models import Payment
from courtdesk.services.reconciliation_report import ReconciliationReportBuilder, load_club_payments
from courtdesk.services.report_export import ExcelService
from courtdesk.utils.error_handler import handle_db_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/reconciliation")
async def reconciliation_report(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    """
    Abrechnungsbericht für einen Zeitraum.

    Summen, Anzahl je Status, Service-Gebühr und Aufteilung nach Zahlungsart.
    """
    require_admin(context)
    try:
        payments = load_club_payments(db, context.club_id, start_date, end_date)
        return ReconciliationReportBuilder().build(payments, start_date, end_date)
    except Exception as e:
        raise handle_db_exception(e, "Building reconciliation report")


@router.get("/reconciliation/export")
async def export_reconciliation_report(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    """Abrechnungsbericht als Excel-Datei"""
    require_admin(context)
    try:
        builder = ReconciliationReportBuilder()
        payments = load_club_payments(db, context.club_id, start_date, end_date)
        report = builder.build(payments, start_date, end_date)
        in_range = [p for p in payments if builder.in_period(p, start_date, end_date)]
        content = ExcelService.export_reconciliation_report(report, in_range)
    except Exception as e:
        raise handle_db_exception(e, "Exporting reconciliation report")

    suffix = f"{start_date or 'alle'}_{end_date or 'heute'}"
    logger.info(f"Abrechnungsbericht exportiert für Verein {context.club_id} ({len(in_range)} Zahlungen)")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=abrechnung_{suffix}.xlsx"}
    )


@router.get("/court-usage")
async def court_usage_report(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context),
    year: Optional[int] = None
):
    """Monatliche Platzgebühren je Mitglied (nur erfasste Zahlungen)"""
    require_admin(context)
    payments = db.query(Payment).filter(
        Payment.club_id == context.club_id,
        Payment.payment_type == "court_usage",
        Payment.status == "record"
    ).all()

    rows = ReconciliationReportBuilder.court_usage_summary(payments)
    if year:
        rows = [row for row in rows if row["year"] == year]
    return rows
