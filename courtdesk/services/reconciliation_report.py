"""Abrechnungs-Berichte über Zahlungen (Kassenabgleich)"""
import logging
from collections import OrderedDict, defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.orm import Session

from courtdesk.config import settings
from courtdesk.models.payment import Payment
from courtdesk.utils.money import round_money, to_decimal

logger = logging.getLogger(__name__)


class ReconciliationReportBuilder:
    """
    Aggregiert Zahlungen eines Zeitraums zu Kennzahlen.

    Rein lesend, ohne Cache: jeder Aufruf rechnet neu.
    """

    def __init__(self, service_fee_percent: Optional[float] = None):
        if service_fee_percent is None:
            service_fee_percent = settings.service_fee_percent
        if service_fee_percent < 0 or service_fee_percent > 100:
            raise ValueError("Service-Gebühr muss zwischen 0 und 100 Prozent liegen")
        self.service_fee_rate = to_decimal(service_fee_percent) / 100

    @staticmethod
    def in_period(payment, start_date: Optional[date], end_date: Optional[date]) -> bool:
        day = payment.report_date
        if day is None:
            return False
        if start_date and day < start_date:
            return False
        if end_date and day > end_date:
            return False
        return True

    def build(
        self,
        payments: Iterable[Payment],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Erstellt den Abrechnungsbericht.

        Args:
            payments: Zahlungen (werden zusätzlich auf den Zeitraum gefiltert)
            start_date: Beginn (inklusive), optional
            end_date: Ende (inklusive), optional

        Returns:
            JSON-serialisierbares Dictionary mit summary, payment_method_breakdown, period
        """
        if start_date and end_date and start_date > end_date:
            raise ValueError("Startdatum muss vor dem Enddatum liegen")

        in_range = [p for p in payments if self.in_period(p, start_date, end_date)]
        paid = [p for p in in_range if p.is_paid]

        total_amount = sum((to_decimal(p.amount) for p in paid), Decimal("0"))
        service_fees = total_amount * self.service_fee_rate

        summary = {
            "total_payments": len(paid),
            "total_amount": float(round_money(total_amount)),
            "pending_payments": sum(1 for p in in_range if p.status == "pending"),
            "completed_payments": sum(1 for p in in_range if p.status == "completed"),
            "recorded_payments": sum(1 for p in in_range if p.status == "record"),
            "total_service_fees": float(round_money(service_fees)),
            "total_court_revenue": float(round_money(total_amount - service_fees)),
        }

        logger.debug(f"Abrechnungsbericht {start_date} - {end_date}: {summary}")

        return {
            "summary": summary,
            "payment_method_breakdown": self.payment_method_breakdown(in_range),
            "period": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
            },
        }

    @staticmethod
    def payment_method_breakdown(payments: Iterable[Payment]) -> List[Dict[str, Any]]:
        """Anzahl und Summe je Zahlungsart (alle Status, in Reihenfolge des ersten Auftretens)"""
        methods: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for payment in payments:
            entry = methods.setdefault(payment.payment_method, {"count": 0, "total": Decimal("0")})
            entry["count"] += 1
            entry["total"] += to_decimal(payment.amount)

        return [
            {
                "payment_method": method,
                "count": data["count"],
                "total_amount": float(round_money(data["total"])),
            }
            for method, data in methods.items()
        ]

    @staticmethod
    def court_usage_summary(payments: Iterable[Payment]) -> List[Dict[str, Any]]:
        """
        Monatliche Summen der erfassten Platzgebühren je Mitglied und Jahr.

        Returns:
            Liste von {user_id, year, monthly_amounts: {"YYYY-MM": betrag}, total}
        """
        aggregate: Dict[tuple, Dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
        for payment in payments:
            if payment.status != "record" or payment.payment_type != "court_usage":
                continue
            day = payment.report_date
            if day is None:
                continue
            month_key = f"{day.year}-{day.month:02d}"
            aggregate[(payment.user_id, day.year)][month_key] += to_decimal(payment.amount)

        rows = []
        for (user_id, year), months in sorted(aggregate.items()):
            rows.append({
                "user_id": user_id,
                "year": year,
                "monthly_amounts": {k: float(round_money(v)) for k, v in sorted(months.items())},
                "total": float(round_money(sum(months.values(), Decimal("0")))),
            })
        return rows

    @staticmethod
    def list_overdue(payments: Iterable[Payment], as_of: date) -> List[Payment]:
        """Offene Zahlungen, deren Fälligkeit vor dem Stichtag liegt"""
        overdue = [
            p for p in payments
            if p.status == "pending" and p.due_date is not None and p.due_date < as_of
        ]
        return sorted(overdue, key=lambda p: (p.due_date, p.id or 0))


def load_club_payments(
    db: Session,
    club_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Payment]:
    """
    Lädt die Zahlungen eines Vereins, grob vorgefiltert auf den Zeitraum.

    Die exakte Zuordnung (Zahldatum, sonst Fälligkeit) macht der Builder.
    """
    query = db.query(Payment).filter(Payment.club_id == club_id)
    if start_date:
        query = query.filter(
            (Payment.paid_date >= start_date)
            | ((Payment.paid_date == None) & ((Payment.due_date == None) | (Payment.due_date >= start_date)))  # noqa: E711
        )
    if end_date:
        query = query.filter(
            (Payment.paid_date <= end_date)
            | ((Payment.paid_date == None) & ((Payment.due_date == None) | (Payment.due_date <= end_date)))  # noqa: E711
        )
    return query.order_by(Payment.id).all()
