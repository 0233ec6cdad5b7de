import requests

from smart_quote.ingestors.cnpj import CnpjIngestor

BRASILAPI_PAYLOAD = {
    "cnpj": "19131243000197",
    "razao_social": "OPEN KNOWLEDGE BRASIL",
    "nome_fantasia": "REDE PELO CONHECIMENTO LIVRE",
    "email": None,
    "ddd_telefone_1": "1123851939",
    "cep": "01311902",
    "logradouro": "PAULISTA 37",
    "numero": "37",
    "complemento": "ANDAR 4",
    "bairro": "BELA VISTA",
    "municipio": "SAO PAULO",
    "uf": "SP",
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []

    def get(self, url, timeout):
        self.urls.append(url)
        if self.exc:
            raise self.exc
        return self.response


def test_lookup_maps_brasilapi_fields():
    session = FakeSession(FakeResponse(BRASILAPI_PAYLOAD))
    ingestor = CnpjIngestor(session=session)

    result = ingestor.lookup("19.131.243/0001-97")

    assert session.urls == ["https://brasilapi.com.br/api/cnpj/v1/19131243000197"]
    assert result.name == "OPEN KNOWLEDGE BRASIL"
    assert result.email == ""
    assert result.phone == "1123851939"
    assert result.address.cep == "01311902"
    assert result.address.street == "PAULISTA 37"
    assert result.address.complement == "ANDAR 4"
    assert result.address.city == "SAO PAULO"
    assert result.address.state == "SP"


def test_lookup_falls_back_to_trade_name():
    payload = {**BRASILAPI_PAYLOAD, "razao_social": ""}
    ingestor = CnpjIngestor(session=FakeSession(FakeResponse(payload)))

    assert ingestor.lookup("19131243000197").name == "REDE PELO CONHECIMENTO LIVRE"


def test_invalid_length_skips_the_request():
    session = FakeSession(FakeResponse(BRASILAPI_PAYLOAD))
    ingestor = CnpjIngestor(session=session)

    assert ingestor.lookup("123.456.789-01") is None
    assert session.urls == []


def test_http_error_returns_none():
    ingestor = CnpjIngestor(session=FakeSession(FakeResponse({"message": "not found"}, status_code=404)))

    assert ingestor.lookup("19131243000197") is None


def test_network_error_returns_none():
    ingestor = CnpjIngestor(session=FakeSession(exc=requests.ConnectionError("offline")))

    assert ingestor.lookup("19131243000197") is None


def test_bad_json_returns_none():
    ingestor = CnpjIngestor(session=FakeSession(FakeResponse(None)))

    assert ingestor.lookup("19131243000197") is None
