from __future__ import annotations

from dataclasses import dataclass

from .dictionaries import (
    CLIENT_PLACEHOLDER_NAME,
    DELIVERY_TYPE_LABELS,
    DOCUMENT_FOOTER,
    freight_line_label,
    payment_method_label,
)
from .exporters.share import build_share_summary
from .formatting import format_brl
from .models.document import (
    ClientBlock,
    FreightLine,
    HeaderBlock,
    ItemRow,
    PaymentBlock,
    ProposalDocument,
    ShareSummary,
    SignatureBlock,
    TermsBlock,
    TotalsBlock,
)
from .models.party import Client, Company
from .models.quote import PaymentMethod, QuoteConfig, QuoteItem
from .models.session import QuoteSession
from .pricing import discounted_total, total_value


@dataclass
class ProposalBundle:
    document: ProposalDocument
    share: ShareSummary
    summary_markdown: str

    def model_dump(self) -> dict[str, object]:
        return {
            "document": self.document.model_dump(mode="json"),
            "share": self.share.model_dump(mode="json"),
            "summary": self.summary_markdown,
        }


def format_address(company_or_client: Company | Client) -> str:
    address = company_or_client.address
    return f"{address.street}, {address.number} - {address.neighborhood}, {address.city}/{address.state}"


class ProposalBuilder:
    """Projects a quote session into the read-only proposal snapshot.

    Only the client-facing fields are copied out: item cost and markup never
    reach the document, and the client's phone numbers are dropped when the
    client asked to hide them.
    """

    def __init__(self, *, footer: str = DOCUMENT_FOOTER) -> None:
        self._footer = footer

    def build(self, session: QuoteSession) -> ProposalBundle:
        with session.lock:
            company, client, items, config = session.company, session.client, list(session.items), session.config
        document = self.build_document(company, client, items, config)
        share = build_share_summary(
            number=config.number,
            client_name=client.name,
            whatsapp=client.whatsapp,
            total=total_value(items),
            discounted_total=discounted_total(items, config.calculated_freight, config.payment_method),
        )
        summary = self._build_summary(document)
        return ProposalBundle(document=document, share=share, summary_markdown=summary)

    def build_document(
        self,
        company: Company,
        client: Client,
        items: list[QuoteItem],
        config: QuoteConfig,
    ) -> ProposalDocument:
        return ProposalDocument(
            header=self._build_header(company, config),
            client=self._build_client(client),
            items=tuple(self._build_row(item) for item in items),
            totals=self._build_totals(items, config),
            terms=self._build_terms(config),
            payment=self._build_payment(items, config),
            signatures=SignatureBlock(
                signature_url=company.signature_url or None,
                company_name=company.name,
                client_name=client.name or CLIENT_PLACEHOLDER_NAME,
            ),
            footer=self._footer,
        )

    def _build_header(self, company: Company, config: QuoteConfig) -> HeaderBlock:
        return HeaderBlock(
            logo_url=company.logo_url or None,
            primary_color=company.primary_color,
            number=config.number,
            company_name=company.name,
            company_cnpj=company.cnpj,
            company_email=company.email,
            company_phone=company.phone or None,
            company_whatsapp=company.whatsapp or None,
        )

    def _build_client(self, client: Client) -> ClientBlock:
        contacts = {}
        if not client.hide_contacts:
            contacts = {"phone": client.phone, "cell": client.cell, "whatsapp": client.whatsapp}
        return ClientBlock(
            name=client.name,
            doc=client.doc,
            email=client.email,
            address_line=format_address(client),
            **contacts,
        )

    def _build_row(self, item: QuoteItem) -> ItemRow:
        return ItemRow(
            name=item.name,
            ncm=item.ncm,
            packaging=item.packaging,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )

    def _build_totals(self, items: list[QuoteItem], config: QuoteConfig) -> TotalsBlock:
        subtotal = total_value(items)
        freight = None
        if config.calculated_freight > 0:
            freight = FreightLine(label=freight_line_label(config.freight_type), amount=config.calculated_freight)
        return TotalsBlock(
            subtotal=subtotal,
            freight=freight,
            grand_total=subtotal + config.calculated_freight,
        )

    def _build_terms(self, config: QuoteConfig) -> TermsBlock:
        return TermsBlock(
            freight_type=config.freight_type,
            delivery_days=config.delivery_days,
            delivery_type=config.delivery_type,
            delivery_label=DELIVERY_TYPE_LABELS[config.delivery_type],
            validity_days=config.delivery_days,
        )

    def _build_payment(self, items: list[QuoteItem], config: QuoteConfig) -> PaymentBlock:
        method = config.payment_method
        boleto_condition = None
        pix_total = None
        if method == PaymentMethod.boleto:
            boleto_condition = config.boleto_condition.upper()
        elif method == PaymentMethod.pix:
            pix_total = discounted_total(items, config.calculated_freight, method)
        return PaymentBlock(
            method=method,
            label=payment_method_label(method),
            boleto_condition=boleto_condition,
            pix_total=pix_total,
        )

    def _build_summary(self, document: ProposalDocument) -> str:
        totals = document.totals
        freight = (
            f"- {totals.freight.label}: {format_brl(totals.freight.amount)}"
            if totals.freight
            else "- Frete: não calculado"
        )
        items = "\n".join(
            f"- {row.name or '(sem nome)'} × {row.quantity:g}: {format_brl(row.total_price)}"
            for row in document.items
        ) or "- nenhum item"

        summary_lines = [
            f"## Cotação #{document.header.number}",
            f"- Cliente: {document.client.name or CLIENT_PLACEHOLDER_NAME}",
            f"- Itens: {len(document.items)}",
            f"- Total itens: {format_brl(totals.subtotal)}",
            freight,
            f"- Valor total: {format_brl(totals.grand_total)}",
            "",
            "## Itens",
            items,
            "",
            "## Condições",
            f"- Prazo de entrega: {document.terms.delivery_days} {document.terms.delivery_label}",
            f"- Validade da proposta: {document.terms.validity_days} dias",
            f"- Pagamento: {document.payment.label}",
        ]
        if document.payment.boleto_condition:
            summary_lines.append(f"- Condição: {document.payment.boleto_condition}")
        if document.payment.pix_total is not None:
            summary_lines.append(f"- Valor PIX antecipado: {format_brl(document.payment.pix_total)}")
        return "\n".join(summary_lines)


__all__ = ["ProposalBuilder", "ProposalBundle", "format_address"]
