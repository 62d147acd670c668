from bs4 import BeautifulSoup

from imobi.services.locators import ContainerCascade, Locator, absolute_url, locate, locate_container


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _articles(count: int) -> BeautifulSoup:
    return _soup("".join(f"<article><h2>Imóvel {index}</h2></article>" for index in range(count)))


def test_locate_returns_first_non_empty_match_in_order():
    card = _soup('<div><h2>  </h2><span class="title">Casa</span><h3>Outro título</h3></div>')
    locators = (Locator("h2"), Locator(".title"), Locator("h3"))
    assert locate(card, locators) == "Casa"


def test_locate_tries_every_node_of_a_selector():
    card = _soup("<div><h2></h2><h2>Segundo</h2></div>")
    assert locate(card, (Locator("h2"),)) == "Segundo"


def test_locate_returns_empty_string_when_nothing_matches():
    card = _soup("<div><p>texto</p></div>")
    assert locate(card, (Locator(".price"), Locator("h2"))) == ""
    assert locate(card, ()) == ""


def test_locate_reads_attributes():
    card = _soup('<div><img alt="sem foto"><img data-src="/foto.jpg"><a href="/anuncio/1">ver</a></div>')
    assert locate(card, (Locator("img", attribute="src"), Locator("img", attribute="data-src"))) == "/foto.jpg"
    assert locate(card, (Locator("a", attribute="href"),)) == "/anuncio/1"


def test_locate_applies_pattern_and_captured_group():
    card = _soup("<ul><li>120 m²</li><li>3 Quartos</li><li>2 banheiros</li></ul>")
    assert locate(card, (Locator("li", pattern=r"(\d+)\s*quarto"),)) == "3"
    assert locate(card, (Locator("li", pattern=r"\d+\s*banheiro"),)) == "2 banheiro"
    assert locate(card, (Locator("li", pattern=r"(\d+)\s*vaga"),)) == ""


def test_locate_skips_invalid_selectors():
    card = _soup('<div><span class="price">R$ 100</span></div>')
    assert locate(card, (Locator("[[["), Locator(".price"))) == "R$ 100"


def test_locate_container_prefers_primary_selectors_in_order():
    document = _soup('<div class="card">a</div><div class="property-card">b</div><div class="property-card">c</div>')
    cascade = ContainerCascade(primary=(".missing", ".property-card", ".card"), generic=("div",))
    containers = locate_container(document, cascade)
    assert [node.get_text() for node in containers] == ["b", "c"]


def test_locate_container_single_primary_match_is_enough():
    document = _soup('<div class="property-card">only</div>')
    assert len(locate_container(document, ContainerCascade(primary=(".property-card",)))) == 1


def test_locate_container_ignores_generic_matches_below_threshold():
    cascade = ContainerCascade(primary=(".property-card",), generic=("article",), min_generic_count=6)
    assert locate_container(_articles(5), cascade) == []


def test_locate_container_accepts_generic_matches_at_threshold():
    cascade = ContainerCascade(primary=(".property-card",), generic=("article",), min_generic_count=6)
    assert len(locate_container(_articles(6), cascade)) == 6


def test_locate_container_falls_through_generic_selectors():
    document = _soup("<article></article>" + "<div class='item'></div>" * 7)
    cascade = ContainerCascade(primary=(), generic=("article", ".item"))
    containers = locate_container(document, cascade)
    assert len(containers) == 7
    assert all(node.name == "div" for node in containers)


def test_locate_container_skips_invalid_selectors():
    document = _soup('<div class="listing">x</div>')
    assert len(locate_container(document, ContainerCascade(primary=("[[[", ".listing")))) == 1


def test_absolute_url():
    assert absolute_url("https://www.vivareal.com.br", "/imovel/1") == "https://www.vivareal.com.br/imovel/1"
    assert absolute_url("https://imoveis.example.com/", "anuncio/2") == "https://imoveis.example.com/anuncio/2"
    cdn = "https://cdn.example.com/a.jpg"
    assert absolute_url("https://www.vivareal.com.br", cdn) == cdn
    assert absolute_url("https://www.vivareal.com.br", "") == ""
    assert absolute_url("https://www.vivareal.com.br", None) == ""
