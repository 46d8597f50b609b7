# marketplace/services/export_service.py
from datetime import date
from io import BytesIO

import pandas as pd
from fpdf import FPDF

from marketplace.models.catalog import CATALOG_TABLES
from marketplace.models.booking import Booking
from marketplace.services.errors import ItemNotFound

EXPORT_TABLES = dict(CATALOG_TABLES, bookings=Booking)
EXPORT_FORMATS = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

def fetch_rows(kind, scope):
    """Rows of one table as plain dicts, filtered by the caller's AccessScope."""
    model = EXPORT_TABLES.get(kind)
    if model is None:
        raise ItemNotFound(f"Unknown dataset: {kind}")
    query = scope.apply(model.query, model).order_by(model.id)
    return [row.to_dict() for row in query.all()]

def fetch_all(scope):
    return {kind: fetch_rows(kind, scope) for kind in EXPORT_TABLES}

def summarize(datasets):
    bookings = datasets.get('bookings', [])
    return {
        'counts': {kind: len(rows) for kind, rows in datasets.items()},
        'total_revenue': sum(b.get('total_amount') or 0 for b in bookings),
        'pending_bookings': sum(1 for b in bookings if b.get('payment_status') == 'pending'),
        'completed_bookings': sum(1 for b in bookings if b.get('payment_status') == 'paid'),
    }

def export_filename(kind, fmt, today=None):
    today = today or date.today()
    return f"{kind}-export-{today.isoformat()}.{fmt}"

def _flatten(value):
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    if isinstance(value, dict):
        return ', '.join(f"{k}={v}" for k, v in value.items())
    return value

def _frame(rows):
    df = pd.DataFrame(rows)
    for column in df.columns:
        df[column] = df[column].map(_flatten)
    return df

def rows_to_csv(rows):
    return _frame(rows).to_csv(index=False).encode('utf-8')

def rows_to_excel(rows, sheet_name='export'):
    buffer = BytesIO()
    # sheet names are capped at 31 characters by Excel
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        _frame(rows).to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return buffer.getvalue()

def _latin1(text):
    # core PDF fonts only cover latin-1
    return str(text).encode('latin-1', 'replace').decode('latin-1')

# line templates for the detailed section of the PDF report
REPORT_LINES = {
    'cars': lambda r: f"{r.get('name')} - {r.get('brand') or 'N/A'} ({r.get('transmission') or 'N/A'})",
    'tours': lambda r: f"{r.get('name')} - {r.get('region') or 'N/A'} ({r.get('hours') or 'N/A'} hrs)",
    'attractions': lambda r: f"{r.get('name')} - {r.get('region') or 'N/A'}",
}

def build_pdf_report(datasets, company_name, company_address, scope_label='', rows_per_table=10, today=None):
    """A4 report: company header, summary, first rows of each catalog table, footer."""
    today = today or date.today()
    summary = summarize(datasets)

    pdf = FPDF(orientation='P', unit='mm', format='A4')
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font('Helvetica', size=18)
    pdf.text(14, 20, _latin1(company_name))
    pdf.set_font('Helvetica', size=11)
    pdf.text(14, 28, _latin1(company_address))
    pdf.line(14, 32, 200, 32)
    pdf.set_xy(14, 38)

    pdf.set_font('Helvetica', 'B', 14)
    pdf.cell(0, 8, 'Summary', new_x='LMARGIN', new_y='NEXT')
    pdf.set_font('Helvetica', size=11)
    if scope_label:
        pdf.cell(0, 6, _latin1(scope_label), new_x='LMARGIN', new_y='NEXT')
    for kind, count in summary['counts'].items():
        pdf.cell(0, 6, f"{kind.capitalize()}: {count}", new_x='LMARGIN', new_y='NEXT')
    pdf.cell(0, 6, f"Total revenue: ${summary['total_revenue']:.2f}", new_x='LMARGIN', new_y='NEXT')
    pdf.cell(0, 6, f"Pending bookings: {summary['pending_bookings']}", new_x='LMARGIN', new_y='NEXT')
    pdf.cell(0, 6, f"Completed bookings: {summary['completed_bookings']}", new_x='LMARGIN', new_y='NEXT')

    pdf.ln(6)
    pdf.set_font('Helvetica', 'B', 14)
    pdf.cell(0, 8, 'Detailed Data', new_x='LMARGIN', new_y='NEXT')
    for kind, line in REPORT_LINES.items():
        rows = datasets.get(kind) or []
        if not rows:
            continue
        pdf.set_font('Helvetica', 'B', 12)
        pdf.cell(0, 7, kind.capitalize(), new_x='LMARGIN', new_y='NEXT')
        pdf.set_font('Helvetica', size=11)
        for i, row in enumerate(rows[:rows_per_table], start=1):
            pdf.cell(0, 6, _latin1(f"   {i}. {line(row)}"), new_x='LMARGIN', new_y='NEXT')
        if len(rows) > rows_per_table:
            pdf.cell(0, 6, f"   ... and {len(rows) - rows_per_table} more {kind}", new_x='LMARGIN', new_y='NEXT')
        pdf.ln(4)

    pdf.set_font('Helvetica', size=10)
    pdf.cell(0, 6, f"Generated on {today.strftime('%d/%m/%Y')}", new_x='LMARGIN', new_y='NEXT')
    return bytes(pdf.output())

def report_filename(today=None):
    today = today or date.today()
    return f"admin-report-{today.isoformat()}.pdf"
