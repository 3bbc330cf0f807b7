"""
Payment API routes including the Excel export.
"""

import io

from flask import Response, current_app
from flask_login import login_required, current_user

from utils.decorators import permission_required
from database import get_store
from models.payment import (
    record_payment, get_all_payments, get_payment_by_id, get_payments_by_reservation,
    get_total_paid, update_payment, delete_payment
)
from models.reservation import get_reservation_by_id
from utils.api_response import api_success, api_error
from utils.datetime_helpers import get_today
from utils.helpers import get_json_body, strip_private_fields
from utils.messages import MESSAGES
from utils.permissions import can_access_reservation, filter_writable_fields, has_permission


def register_routes(bp):
    """Register payment API routes on the blueprint."""

    @bp.route('/payments')
    @login_required
    @permission_required('payments.view', 'payments.view_own')
    def list_payments():
        """Staff see every payment; guests see payments on their reservations."""
        if has_permission(current_user, 'payments.view'):
            payments = get_all_payments()
        else:
            own = get_store().find('reservations', {'guest_id': current_user.entity_id})
            payments = get_store().find(
                'payments',
                {'reservation_id__in': [r['reservation_id'] for r in own]},
                order_by=['-payment_date', '-payment_id']
            )
        return api_success(data=strip_private_fields(payments), count=len(payments))

    @bp.route('/reservations/<int:reservation_id>/payments')
    @login_required
    @permission_required('payments.view', 'payments.view_own')
    def reservation_payments(reservation_id):
        reservation = get_reservation_by_id(reservation_id)
        if reservation is None or not can_access_reservation(current_user, reservation):
            return api_error(MESSAGES['not_found'].format(entity='Reservation'), status=404)

        return api_success(
            data=get_payments_by_reservation(reservation_id),
            total_paid=get_total_paid(reservation_id)
        )

    @bp.route('/payments', methods=['POST'])
    @login_required
    @permission_required('payments.record', 'payments.record_own')
    def record_payment_route():
        """
        Body: reservation_id, amount_paid, payment_method, payment_date,
        transaction_id, payment_status, notes
        """
        data = get_json_body()
        reservation_id = data.get('reservation_id')
        if not reservation_id:
            return api_error(MESSAGES['field_required'].format(field='reservation_id'), status=400)

        reservation = get_reservation_by_id(reservation_id)
        if reservation is None or not can_access_reservation(current_user, reservation):
            return api_error(MESSAGES['not_found'].format(entity='Reservation'), status=404)

        payment = record_payment(
            reservation_id,
            data.get('amount_paid'),
            data.get('payment_method'),
            payment_date=data.get('payment_date'),
            transaction_id=data.get('transaction_id'),
            payment_status=data.get('payment_status') or 'Completed',
            notes=data.get('notes'),
        )
        return api_success(data=payment, message=MESSAGES['payment_recorded'], status=201)

    @bp.route('/payments/<int:payment_id>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('payments.edit')
    def update_payment_route(payment_id):
        fields = filter_writable_fields(current_user.role, 'payments', get_json_body())
        payment = update_payment(payment_id, fields)
        return api_success(data=payment, message=MESSAGES['payment_updated'])

    @bp.route('/payments/<int:payment_id>', methods=['DELETE'])
    @login_required
    @permission_required('payments.delete')
    def delete_payment_route(payment_id):
        delete_payment(payment_id)
        return api_success(message=MESSAGES['payment_deleted'])

    @bp.route('/payments/<int:payment_id>')
    @login_required
    @permission_required('payments.view')
    def payment_detail(payment_id):
        payment = get_payment_by_id(payment_id)
        if not payment:
            return api_error(MESSAGES['not_found'].format(entity='Payment'), status=404)
        return api_success(data=strip_private_fields(payment))

    @bp.route('/payments/export')
    @login_required
    @permission_required('payments.export')
    def export_payments():
        """Export all payments to Excel."""
        return export_payments_handler()


def export_payments_handler() -> Response:
    """
    Build the payments workbook and return it as a download.

    Returns:
        Response: Excel file download response
    """
    from openpyxl import Workbook
    from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

    payments = get_all_payments()
    currency = current_app.config.get('CURRENCY', 'PHP')

    wb = Workbook()
    ws = wb.active
    ws.title = "Payments"

    # Styles
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1A3A5C", end_color="1A3A5C", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    thin_border = Border(
        left=Side(style='thin', color="D4D4D4"),
        right=Side(style='thin', color="D4D4D4"),
        top=Side(style='thin', color="D4D4D4"),
        bottom=Side(style='thin', color="D4D4D4")
    )
    alt_fill = PatternFill(start_color="F5F5F5", end_color="F5F5F5", fill_type="solid")

    # Title row
    ws.merge_cells('A1:H1')
    title_cell = ws.cell(
        row=1, column=1,
        value=f"Payments - {current_app.config.get('APP_NAME', 'Grand Hotel')}"
    )
    title_cell.font = Font(bold=True, size=14, color="1A3A5C")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    ws.merge_cells('A2:H2')
    subtitle_cell = ws.cell(
        row=2, column=1,
        value=f"Generated {get_today().isoformat()} | Total: {len(payments)} payments"
    )
    subtitle_cell.font = Font(size=10, color="666666")
    subtitle_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Headers (row 4)
    header_row = 4
    headers = [
        "Payment ID", "Date", "Reservation", "Guest",
        f"Amount ({currency})", "Method", "Status", "Transaction ID"
    ]
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border

    ws.freeze_panes = f'A{header_row + 1}'

    # Data rows
    total = 0.0
    for row_idx, payment in enumerate(payments, header_row + 1):
        reservation = payment.get('reservation') or {}
        guest = reservation.get('guest') or {}
        guest_name = f"{guest.get('first_name', '')} {guest.get('last_name', '')}".strip()

        values = [
            payment['payment_id'],
            payment['payment_date'],
            payment['reservation_id'],
            guest_name,
            payment['amount_paid'],
            payment['payment_method'],
            payment['payment_status'],
            payment.get('transaction_id') or '',
        ]
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = thin_border
            if (row_idx - header_row) % 2 == 0:
                cell.fill = alt_fill
        ws.cell(row=row_idx, column=5).number_format = '#,##0.00'
        total += payment['amount_paid']

    # Total row
    total_row = header_row + len(payments) + 1
    ws.cell(row=total_row, column=4, value="Total").font = Font(bold=True)
    total_cell = ws.cell(row=total_row, column=5, value=round(total, 2))
    total_cell.font = Font(bold=True)
    total_cell.number_format = '#,##0.00'

    # Column widths
    for col_letter, width in zip('ABCDEFGH', (12, 14, 13, 28, 16, 16, 13, 28)):
        ws.column_dimensions[col_letter].width = width

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)

    filename = f"payments_{get_today().strftime('%Y%m%d')}.xlsx"
    return Response(
        output.getvalue(),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )
