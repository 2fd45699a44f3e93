"""Excel-Export des Abrechnungsberichts"""
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.worksheet.worksheet import Worksheet

from courtdesk.models.payment import Payment


class ExcelService:
    """
    Wiederverwendbare Excel-Formatierungen (Header, Summenzeile, Spaltenbreiten)
    und der Export des Abrechnungsberichts.
    """

    HEADER_COLOR = "4472C4"  # Blau
    SUMMARY_COLOR = "D9E1F2"  # Hellblau
    WHITE_COLOR = "FFFFFF"

    MONEY_FORMAT = '#,##0.00'

    @staticmethod
    def apply_header_row(
        ws: Worksheet,
        headers: List[str],
        column_widths: Optional[Dict[int, int]] = None,
        row: int = 1
    ) -> None:
        """
        Wendet Header-Formatierung auf eine Zeile an.

        Args:
            ws: Worksheet-Objekt
            headers: Liste der Header-Texte
            column_widths: Optional - Dictionary mit {Spalten-Index: Breite}
            row: Zeilennummer (default: 1)
        """
        fill = PatternFill(start_color=ExcelService.HEADER_COLOR, end_color=ExcelService.HEADER_COLOR, fill_type="solid")
        font = Font(color=ExcelService.WHITE_COLOR, bold=True, size=11)
        alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

        for col_num, header_text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col_num, value=header_text)
            cell.fill = fill
            cell.font = font
            cell.alignment = alignment

        if column_widths:
            for col_num, width in column_widths.items():
                column_letter = ws.cell(row=row, column=col_num).column_letter
                ws.column_dimensions[column_letter].width = width

    @staticmethod
    def apply_summary_row(
        ws: Worksheet,
        row: int,
        values: Dict[int, Any],
        label_column: int = 1,
        label_text: str = "GESAMT"
    ) -> None:
        """Summenzeile (fett, hellblau hinterlegt)"""
        fill = PatternFill(start_color=ExcelService.SUMMARY_COLOR, end_color=ExcelService.SUMMARY_COLOR, fill_type="solid")

        label_cell = ws.cell(row=row, column=label_column, value=label_text)
        label_cell.font = Font(bold=True)
        label_cell.fill = fill

        for col_num, value in values.items():
            cell = ws.cell(row=row, column=col_num, value=value)
            cell.font = Font(bold=True)
            cell.fill = fill
            if isinstance(value, float):
                cell.number_format = ExcelService.MONEY_FORMAT

    @staticmethod
    def export_reconciliation_report(report: Dict[str, Any], payments: Iterable[Payment]) -> bytes:
        """
        Erstellt eine Arbeitsmappe mit drei Blättern: Übersicht,
        Zahlungsarten und Einzelzahlungen.

        Returns:
            xlsx-Datei als Bytes
        """
        wb = Workbook()

        # === Übersicht ===
        ws = wb.active
        ws.title = "Übersicht"
        ExcelService.apply_header_row(ws, ["Kennzahl", "Wert"], {1: 32, 2: 18})

        period = report["period"]
        summary = report["summary"]
        rows = [
            ("Zeitraum von", period.get("start_date") or "-"),
            ("Zeitraum bis", period.get("end_date") or "-"),
            ("Bezahlte Zahlungen", summary["total_payments"]),
            ("Gesamtbetrag", summary["total_amount"]),
            ("Offen (pending)", summary["pending_payments"]),
            ("Freigegeben (completed)", summary["completed_payments"]),
            ("Erfasst (record)", summary["recorded_payments"]),
            ("Service-Gebühren", summary["total_service_fees"]),
            ("Umsatz Platzbetreiber", summary["total_court_revenue"]),
        ]
        for row_num, (label, value) in enumerate(rows, 2):
            ws.cell(row=row_num, column=1, value=label)
            cell = ws.cell(row=row_num, column=2, value=value)
            if isinstance(value, float):
                cell.number_format = ExcelService.MONEY_FORMAT

        # === Zahlungsarten ===
        ws_methods = wb.create_sheet("Zahlungsarten")
        ExcelService.apply_header_row(ws_methods, ["Zahlungsart", "Anzahl", "Summe"], {1: 20, 2: 12, 3: 16})
        row_num = 2
        total_count = 0
        total_amount = 0.0
        for entry in report["payment_method_breakdown"]:
            ws_methods.cell(row=row_num, column=1, value=entry["payment_method"])
            ws_methods.cell(row=row_num, column=2, value=entry["count"])
            amount_cell = ws_methods.cell(row=row_num, column=3, value=entry["total_amount"])
            amount_cell.number_format = ExcelService.MONEY_FORMAT
            total_count += entry["count"]
            total_amount += entry["total_amount"]
            row_num += 1
        ExcelService.apply_summary_row(ws_methods, row_num, {2: total_count, 3: round(total_amount, 2)})

        # === Einzelzahlungen ===
        ws_payments = wb.create_sheet("Zahlungen")
        headers = ["ID", "Datum", "Mitglied", "Art", "Zahlungsart", "Status", "Betrag", "Beschreibung"]
        ExcelService.apply_header_row(
            ws_payments, headers, {1: 8, 2: 12, 3: 20, 4: 16, 5: 16, 6: 12, 7: 14, 8: 50}
        )
        for row_num, payment in enumerate(payments, 2):
            report_date = payment.report_date
            ws_payments.cell(row=row_num, column=1, value=payment.id)
            ws_payments.cell(row=row_num, column=2, value=report_date.isoformat() if report_date else "")
            ws_payments.cell(row=row_num, column=3, value=payment.user_id)
            ws_payments.cell(row=row_num, column=4, value=payment.payment_type)
            ws_payments.cell(row=row_num, column=5, value=payment.payment_method)
            ws_payments.cell(row=row_num, column=6, value=payment.status)
            amount_cell = ws_payments.cell(row=row_num, column=7, value=float(payment.amount))
            amount_cell.number_format = ExcelService.MONEY_FORMAT
            ws_payments.cell(row=row_num, column=8, value=payment.description or "")

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
