from datetime import date
from html import escape
from io import BytesIO
from typing import Optional
import json
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.models.quotation import Quotation
from app.services.pricing import PriceEngine

logger = logging.getLogger(__name__)

FEATURE_LABELS = {
    "seo_optimization": "SEO Optimization",
    "cms_support": "CMS Support",
    "admin_panel": "Admin Panel",
    "hosting_support": "Hosting Support",
}

NO_QUOTATION_MESSAGE = "No quotation found. Create a new quotation to get started."


def money(value) -> str:
    sign = "-" if value < 0 else ""
    value = abs(value)
    if float(value).is_integer():
        return f"{sign}${int(value):,}"
    return f"{sign}${value:,.2f}"


def signed_money(value) -> str:
    """Modifier amounts: an explicit "+" for charges, "-" for discounts."""
    return money(value) if value < 0 else f"+{money(value)}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def export_filename(ext: str, today: Optional[date] = None) -> str:
    return f"quotation_{(today or date.today()).isoformat()}.{ext}"


def quotation_json(quotation: Quotation) -> str:
    return json.dumps(quotation.to_document(), indent=2)


def _page_lines(engine: PriceEngine, quotation: Quotation):
    """(page, breakdown, detail strings) for every page, in display order."""
    for page in quotation.pages:
        parts = engine.page_breakdown(page, quotation.pricing)
        details = [f"{page.tier.capitalize()} tier ({money(parts['base'])})"]
        if page.is_long_page:
            details.append(f"Long Page ({signed_money(parts['long_page'])})")
        if page.animations:
            details.append(f"{_plural(page.animations, 'Animation')} ({signed_money(parts['animations'])})")
        if page.api_integrations:
            details.append(f"{_plural(page.api_integrations, 'API Integration')} ({signed_money(parts['api_integrations'])})")
        if page.reused_components:
            details.append(f"{_plural(page.reused_components, 'Reused Component')} ({money(parts['reused_components'])})")
        yield page, parts, details


def _selected_features(quotation: Quotation):
    fees = quotation.pricing.optional_features
    return [(FEATURE_LABELS.get(f, f), fees[f]) for f, on in quotation.optional_features.model_dump().items() if on]


def quotation_html(quotation: Quotation) -> str:
    engine = PriceEngine()
    created = quotation.created_at.strftime("%B %d, %Y").replace(" 0", " ")
    badge = " &middot; Generated from Figma analysis" if quotation.source == "figma_analysis" else ""

    rows_html = ''.join([
        f"<tr><td>{escape(page.name)}</td><td>{escape('; '.join(details))}</td><td>{money(parts['total'])}</td></tr>"
        for page, parts, details in _page_lines(engine, quotation)
    ])
    features = _selected_features(quotation)
    features_html = ''.join([f"<li>{escape(label)}: {money(fee)}</li>" for label, fee in features]) or "<li>None selected</li>"

    return f"""
<!doctype html>
<html><head><meta charset='utf-8' /><title>Quotation</title>
<style>body{{font-family:Inter,system-ui, -apple-system, 'Segoe UI', Roboto; background:#f3f4f6; padding:24px}} table{{width:100%; border-collapse:collapse; background:white}}th,td{{padding:12px;border-bottom:1px solid #eef2f7;text-align:left}}thead{{background:#f9fafb}} .total{{font-size:28px;font-weight:700;margin-top:16px}}</style>
</head><body><div class='container'>
<h1>Website Development Quotation</h1>
<p>Created on {created}{badge}</p>
<table><thead><tr><th>Page</th><th>Details</th><th>Price</th></tr></thead><tbody>{rows_html}</tbody></table>
<h2>Optional Features</h2><ul>{features_html}</ul>
<div class='total'>Total: {money(quotation.total_price)}</div>
</div></body></html>
"""


def empty_state_html() -> str:
    return f"""
<!doctype html>
<html><head><meta charset='utf-8' /><title>Quotation</title></head>
<body style="font-family:Inter,system-ui; background:#f3f4f6; padding:24px">
<h1>No Quotation Found</h1>
<p>{NO_QUOTATION_MESSAGE}</p>
<p>Start a manual quotation, or upload a Figma design to have the pages suggested for you.</p>
</body></html>
"""


def quotation_pdf(quotation: Quotation) -> bytes:
    """Render a printable A4 quote."""
    engine = PriceEngine()
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4

    margin = 18 * mm
    col_name = margin
    col_details = margin + 45 * mm
    col_price = width - margin

    def table_header(y, title):
        c.setFont("Helvetica-Bold", 12)
        c.drawString(margin, y, title)
        y -= 7 * mm
        c.setFont("Helvetica-Bold", 9)
        c.drawString(col_name, y, "Page")
        c.drawString(col_details, y, "Details")
        c.drawRightString(col_price, y, "Price")
        y -= 3 * mm
        c.setLineWidth(0.5)
        c.line(margin, y, width - margin, y)
        c.setFont("Helvetica", 9)
        return y - 5 * mm

    y = height - margin
    c.setFont("Helvetica-Bold", 16)
    c.drawString(margin, y, "Website Development Quotation")
    y -= 8 * mm

    c.setFont("Helvetica", 10)
    c.drawString(margin, y, f"Created: {quotation.created_at.strftime('%Y-%m-%d %H:%M')} UTC")
    if quotation.source == "figma_analysis":
        c.drawRightString(width - margin, y, "Source: Figma analysis")
    y -= 12 * mm

    y = table_header(y, "Pages")
    pages_total = 0
    for page, parts, details in _page_lines(engine, quotation):
        pages_total += parts["total"]
        for i, line in enumerate(details):
            if y < margin + 25 * mm:
                c.showPage()
                y = table_header(height - margin, "Pages (cont.)")
            if i == 0:
                c.drawString(col_name, y, page.name[:28])
                c.drawRightString(col_price, y, money(parts["total"]))
            c.drawString(col_details, y, line)
            y -= 5 * mm
        y -= 2 * mm

    c.setFont("Helvetica-Bold", 10)
    c.drawString(margin, y, "Pages subtotal")
    c.drawRightString(col_price, y, money(pages_total))
    y -= 10 * mm

    features = _selected_features(quotation)
    if features:
        if y < margin + (len(features) + 4) * 6 * mm:
            c.showPage()
            y = height - margin
        c.setFont("Helvetica-Bold", 12)
        c.drawString(margin, y, "Optional Features")
        y -= 7 * mm
        c.setFont("Helvetica", 9)
        for label, fee in features:
            c.drawString(col_name, y, label)
            c.drawRightString(col_price, y, money(fee))
            y -= 5 * mm
        y -= 5 * mm

    c.setLineWidth(1)
    c.line(margin, y + 3 * mm, width - margin, y + 3 * mm)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(margin, y - 3 * mm, "Total")
    c.drawRightString(col_price, y - 3 * mm, money(quotation.total_price))

    c.setFont("Helvetica-Oblique", 8)
    c.drawString(margin, margin * 0.6, "Prices are estimates based on the pricing configuration embedded in this quotation.")

    c.showPage()
    c.save()

    logger.info("Rendered quotation PDF pages=%s bytes=%s", len(quotation.pages), buf.tell())
    buf.seek(0)
    return buf.read()
