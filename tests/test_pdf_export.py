import base64
import io

from PIL import Image

from smart_quote.document_builder import ProposalBuilder
from smart_quote.exporters.pdf import pdf_filename, render_pdf
from smart_quote.models.party import Client, Company
from smart_quote.models.quote import FreightEstimate, PaymentMethod, QuoteConfig, QuoteItem
from smart_quote.models.session import QuoteSession
from smart_quote.pricing import recompute_line


def _logo_data_url() -> str:
    buf = io.BytesIO()
    Image.new("RGB", (40, 20), (37, 99, 235)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _session() -> QuoteSession:
    item = QuoteItem(name="Caixa <organizadora> & tampa", ncm="3923.10.90", packaging="CX000012")
    for field, value in (("unit_cost", 35.5), ("markup", 40), ("quantity", 12)):
        item = recompute_line(item, field, value)
    return QuoteSession(
        id="quote_pdf",
        company=Company(name="Fornecedora LTDA", logo_url=_logo_data_url(), primary_color="not-a-color"),
        client=Client(name="Cliente SA", phone="(21) 2222-1111", hide_contacts=True),
        items=[item],
        config=QuoteConfig(
            number=1042,
            payment_method=PaymentMethod.boleto,
            boleto_condition="28ddl",
            freight=FreightEstimate(distance_km=120, cost=216),
        ),
    )


def test_render_pdf_produces_a_pdf():
    document = ProposalBuilder().build(_session()).document

    pdf = render_pdf(document)

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_render_pdf_without_items_or_images():
    session = QuoteSession(id="quote_empty")

    pdf = render_pdf(ProposalBuilder().build(session).document)

    assert pdf.startswith(b"%PDF")


def test_pdf_filename():
    document = ProposalBuilder().build(_session()).document

    assert pdf_filename(document) == "Cotacao_1042_Cliente SA.pdf"
