from __future__ import annotations

import base64
import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..dictionaries import PDF_FILENAME_TEMPLATE
from ..formatting import format_brl
from ..models.document import ProposalDocument
from ..models.party import DEFAULT_PRIMARY_COLOR

logger = logging.getLogger(__name__)


def pdf_filename(document: ProposalDocument) -> str:
    return PDF_FILENAME_TEMPLATE.format(number=document.header.number, client_name=document.client.name)


def _decode_data_url(url: str | None) -> bytes | None:
    if not url or not url.startswith("data:") or "," not in url:
        return None
    header, payload = url.split(",", 1)
    if not header.endswith(";base64"):
        return None
    try:
        return base64.b64decode(payload)
    except ValueError:
        return None


def _image(url: str | None, *, width: float, height: float) -> Image | None:
    raw = _decode_data_url(url)
    if raw is None:
        return None
    try:
        return Image(io.BytesIO(raw), width=width, height=height, kind="proportional")
    except Exception:
        logger.warning("Skipping unreadable image in PDF export", exc_info=True)
        return None


def _primary_color(value: str) -> colors.Color:
    try:
        return colors.HexColor(value)
    except (TypeError, ValueError, IndexError):
        return colors.HexColor(DEFAULT_PRIMARY_COLOR)


def render_pdf(document: ProposalDocument) -> bytes:
    """Render the proposal snapshot as an A4 PDF."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=24, rightMargin=24, topMargin=30, bottomMargin=24)
    styles = getSampleStyleSheet()
    primary = _primary_color(document.header.primary_color)
    body = ParagraphStyle("body", parent=styles["Normal"], fontSize=9, leading=11)
    body_right = ParagraphStyle("body_right", parent=body, alignment=2)
    section = ParagraphStyle("section", parent=styles["Heading4"], textColor=primary, spaceBefore=8, spaceAfter=4)

    header = document.header
    elems = []
    logo = _image(header.logo_url, width=4 * cm, height=2.5 * cm)
    if logo is not None:
        elems.append(logo)
        elems.append(Spacer(1, 6))
    elems.append(Paragraph(f"COTAÇÃO #{header.number}", styles["Title"]))
    company_lines = [f"<b>{escape(header.company_name)}</b>", escape(header.company_cnpj), escape(header.company_email)]
    if header.company_phone:
        company_lines.append(f"Tel: {escape(header.company_phone)}")
    if header.company_whatsapp:
        company_lines.append(f"WhatsApp: {escape(header.company_whatsapp)}")
    elems.append(Paragraph("<br/>".join(company_lines), body))

    client = document.client
    elems.append(Paragraph("DADOS DO CLIENTE", section))
    client_lines = [
        f"<b>Razão Social:</b> {escape(client.name)}",
        f"<b>CNPJ/CPF:</b> {escape(client.doc)}",
        f"<b>Email:</b> {escape(client.email)}",
    ]
    for label, value in (("Telefone", client.phone), ("Celular", client.cell), ("WhatsApp", client.whatsapp)):
        if value is not None:
            client_lines.append(f"<b>{label}:</b> {escape(value)}")
    client_lines.append(f"<b>Endereço:</b> {escape(client.address_line)}")
    elems.append(Paragraph("<br/>".join(client_lines), body))

    elems.append(Paragraph("ITENS E PRODUTOS", section))
    cab = ["ITEM", "NCM", "EMBALAGEM", "QTD", "VL. UNIT", "TOTAL"]
    rows = [
        [
            Paragraph(escape(row.name), body),
            Paragraph(escape(row.ncm), body),
            Paragraph(escape(row.packaging), body),
            Paragraph(f"{row.quantity:g}", body),
            Paragraph(format_brl(row.unit_price), body_right),
            Paragraph(format_brl(row.total_price), body_right),
        ]
        for row in document.items
    ]
    totals = document.totals
    rows.append(["", "", "", "", Paragraph("<b>TOTAL ITENS:</b>", body_right), Paragraph(format_brl(totals.subtotal), body_right)])
    if totals.freight is not None:
        rows.append(["", "", "", "", Paragraph(f"<b>{escape(totals.freight.label)}:</b>", body_right), Paragraph(format_brl(totals.freight.amount), body_right)])
    rows.append(["", "", "", "", Paragraph("<b>VALOR TOTAL:</b>", body_right), Paragraph(f"<b>{format_brl(totals.grand_total)}</b>", body_right)])

    t = Table([cab] + rows, colWidths=[200, 55, 70, 35, 90, 90], repeatRows=1)
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), primary),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("LINEBELOW", (0, 1), (-1, -1), 0.25, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    elems.append(t)

    terms = document.terms
    elems.append(Paragraph("CONDIÇÕES COMERCIAIS", section))
    elems.append(Paragraph(
        "<br/>".join([
            f"<b>Frete:</b> {terms.freight_type.value}",
            f"<b>Prazo de Entrega:</b> {terms.delivery_days} {terms.delivery_label}",
            f"<b>Validade da Proposta:</b> {terms.validity_days} dias",
        ]),
        body,
    ))

    payment = document.payment
    elems.append(Paragraph("FORMA DE PAGAMENTO", section))
    payment_lines = [f"<b>{escape(payment.label)}</b>"]
    if payment.boleto_condition is not None:
        payment_lines.append(f"Condição: {escape(payment.boleto_condition)}")
    if payment.pix_total is not None:
        payment_lines.append(f"<b>Valor para pagamento PIX Antecipado: {format_brl(payment.pix_total)}</b>")
    elems.append(Paragraph("<br/>".join(payment_lines), body))

    signatures = document.signatures
    elems.append(Spacer(1, 30))
    signature = _image(signatures.signature_url, width=5 * cm, height=2 * cm)
    sign_table = Table(
        [
            [signature or "", ""],
            [Paragraph(escape(signatures.company_name), body), Paragraph(escape(signatures.client_name), body)],
        ],
        colWidths=[260, 260],
    )
    sign_table.setStyle(TableStyle([
        ("LINEABOVE", (0, 1), (-1, 1), 0.5, colors.black),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ]))
    elems.append(sign_table)
    elems.append(Spacer(1, 12))
    elems.append(Paragraph(escape(document.footer), ParagraphStyle("footer", parent=body, fontSize=7, textColor=colors.grey, alignment=1)))

    doc.build(elems)
    return buf.getvalue()


__all__ = ["pdf_filename", "render_pdf"]
