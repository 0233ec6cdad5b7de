import pytest

from smart_quote.document_builder import ProposalBuilder
from smart_quote.models.party import Address, Client, Company
from smart_quote.models.quote import (
    DeliveryType,
    FreightEstimate,
    FreightType,
    PaymentMethod,
    QuoteConfig,
    QuoteItem,
)
from smart_quote.models.session import QuoteSession
from smart_quote.pricing import recompute_line


def _priced_item(name="Parafuso", cost=100, markup=20, qty=3) -> QuoteItem:
    item = QuoteItem(name=name, ncm="7318.15.00", packaging="CX000100")
    for field, value in (("unit_cost", cost), ("markup", markup), ("quantity", qty)):
        item = recompute_line(item, field, value)
    return item


def _session(**config) -> QuoteSession:
    return QuoteSession(
        id="quote_test",
        company=Company(
            cnpj="12.345.678/0001-90",
            name="Fornecedora LTDA",
            email="vendas@fornecedora.com.br",
            phone="(11) 3333-4444",
            whatsapp="",
        ),
        client=Client(
            doc="98.765.432/0001-10",
            name="Cliente SA",
            email="compras@cliente.com.br",
            phone="(21) 2222-1111",
            cell="(21) 99999-0000",
            whatsapp="(21) 98888-7777",
            address=Address(
                street="Av. Rio Branco",
                number="100",
                neighborhood="Centro",
                city="Rio de Janeiro",
                state="RJ",
            ),
        ),
        items=[_priced_item()],
        config=QuoteConfig(**config),
    )


def test_end_to_end_totals_with_freight_and_pix():
    session = _session(freight=FreightEstimate(distance_km=50, cost=90), payment_method=PaymentMethod.pix)

    document = ProposalBuilder().build(session).document

    row = document.items[0]
    assert row.unit_price == pytest.approx(120.00)
    assert row.total_price == pytest.approx(360.00)
    assert document.totals.subtotal == pytest.approx(360)
    assert document.totals.freight.amount == pytest.approx(90)
    assert document.totals.freight.label == "FRETE (CIF)"
    assert document.totals.grand_total == pytest.approx(450)
    assert document.payment.pix_total == pytest.approx(405.00)
    assert document.payment.boleto_condition is None


def test_item_rows_never_expose_cost_or_markup():
    document = ProposalBuilder().build(_session()).document
    dumped = document.model_dump()

    for row in dumped["items"]:
        assert set(row) == {"name", "ncm", "packaging", "quantity", "unit_price", "total_price"}
    assert "unit_cost" not in str(dumped)
    assert "markup" not in str(dumped)


def test_hidden_contacts_are_omitted_but_name_and_address_remain():
    session = _session()
    session.client.hide_contacts = True

    client = ProposalBuilder().build(session).document.client

    assert client.phone is None
    assert client.cell is None
    assert client.whatsapp is None
    assert client.name == "Cliente SA"
    assert client.address_line == "Av. Rio Branco, 100 - Centro, Rio de Janeiro/RJ"


def test_visible_contacts_are_copied():
    client = ProposalBuilder().build(_session()).document.client

    assert client.phone == "(21) 2222-1111"
    assert client.cell == "(21) 99999-0000"
    assert client.whatsapp == "(21) 98888-7777"


def test_freight_line_hidden_when_not_calculated():
    document = ProposalBuilder().build(_session()).document

    assert document.totals.freight is None
    assert document.totals.grand_total == document.totals.subtotal


def test_fob_freight_label():
    session = _session(freight=FreightEstimate(distance_km=100, cost=180), freight_type=FreightType.fob)

    totals = ProposalBuilder().build(session).document.totals

    assert totals.freight.label == "FRETE (FOB)"


def test_boleto_payment_shows_condition_only():
    session = _session(payment_method=PaymentMethod.boleto, boleto_condition="30/60/90ddl")

    payment = ProposalBuilder().build(session).document.payment

    assert payment.label == "BOLETO"
    assert payment.boleto_condition == "30/60/90DDL"
    assert payment.pix_total is None


def test_credit_card_label_and_no_extras():
    payment = ProposalBuilder().build(_session(payment_method=PaymentMethod.credit_card)).document.payment

    assert payment.label == "CREDIT CARD"
    assert payment.boleto_condition is None
    assert payment.pix_total is None


def test_terms_validity_follows_delivery_days():
    session = _session(delivery_days=12, delivery_type=DeliveryType.calendar)

    terms = ProposalBuilder().build(session).document.terms

    assert terms.delivery_days == 12
    assert terms.delivery_label == "Dias Corridos"
    assert terms.validity_days == 12
    assert terms.freight_type == FreightType.cif


def test_header_and_signatures():
    session = _session()
    session.client.name = ""

    document = ProposalBuilder().build(session).document

    assert document.header.number == 1001
    assert document.header.company_phone == "(11) 3333-4444"
    assert document.header.company_whatsapp is None
    assert document.header.logo_url is None
    assert document.signatures.client_name == "CLIENTE"
    assert document.signatures.company_name == "Fornecedora LTDA"


def test_build_does_not_mutate_session():
    session = _session(freight=FreightEstimate(distance_km=50, cost=90))
    before = session.model_dump()

    ProposalBuilder().build(session)

    assert session.model_dump() == before


def test_share_summary_and_markdown():
    session = _session(freight=FreightEstimate(distance_km=50, cost=90))

    bundle = ProposalBuilder().build(session)

    assert bundle.share.message == "Quote #1001 for Cliente SA. Total: R$ 360,00"
    assert bundle.share.formatted_discounted_total == "R$ 405,00"
    assert bundle.share.url.startswith("https://wa.me/21988887777?text=Quote%20%231001")
    assert "## Cotação #1001" in bundle.summary_markdown
    assert "FRETE (CIF): R$ 90,00" in bundle.summary_markdown
    assert "Valor PIX antecipado: R$ 405,00" in bundle.summary_markdown
    assert set(bundle.model_dump()) == {"document", "share", "summary"}
