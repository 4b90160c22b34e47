import pytest

from giftlist.parsers.errors import MissingTitleError, UnsupportedSiteError
from giftlist.parsers.factory import ExtractorFactory
from giftlist.parsers.scraper import ProductScraper
from giftlist.parsers.sites import AmazonExtractor, FnacExtractor

AMAZON_HTML = """
<html>
  <head><meta name="description" content="Meta description"></head>
  <body>
    <div id="wayfinding-breadcrumbs_feature_div">
      <ul><li><a> Jeux vidéo </a></li><li><a>Accessoires</a></li></ul>
    </div>
    <span id="productTitle">  Manette sans fil
       Xbox </span>
    <div class="a-price"><span class="a-offscreen">59,99 €</span></div>
    <img id="landingImage" src="https://m.media-amazon.com/images/I/61x._AC_SX425_.jpg">
    <div id="feature-bullets">
      <ul>
        <li><span>Bluetooth</span></li>
        <li>Autonomie 40h</li>
        <li>USB-C</li>
        <li>Garantie 2 ans</li>
      </ul>
    </div>
  </body>
</html>
"""

FNAC_HTML = """
<html>
  <head>
    <meta property="og:title" content="Le Petit Prince">
  </head>
  <body>
    <nav>
      <a class="f-breadcrumb-link">Accueil</a>
      <a class="f-breadcrumb-link">Livres</a>
      <a class="f-breadcrumb-link">Jeunesse</a>
    </nav>
    <span itemprop="price" content="8.90"></span>
    <div class="f-productVisuals-mainImage">
      <img src="https://static.fnac-static.com/multimedia/Images/FR/NR/1a/2b/3c/123_1_340x340.jpg">
    </div>
    <div class="f-productDescription-text">Un classique de la littérature.</div>
  </body>
</html>
"""


def _page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def test_amazon_extraction():
    record = ProductScraper().extract(AmazonExtractor(), AMAZON_HTML)

    assert record.title == "Manette sans fil Xbox"
    assert record.price == 59.99
    assert record.image_url == "https://m.media-amazon.com/images/I/61x._AC_SL1500_.jpg"
    assert record.description == "Bluetooth • Autonomie 40h • USB-C"
    assert record.categories == ["Jeux vidéo", "Accessoires"]
    assert record.source == "Amazon"


def test_amazon_falls_back_to_meta_description():
    html = _page(
        '<span id="productTitle">Livre</span>',
        head=f'<meta name="description" content="{"d" * 250}">',
    )
    record = ProductScraper().extract(AmazonExtractor(), html)

    assert len(record.description) == 200
    assert record.price == 0.0
    assert record.image_url == ""
    assert record.categories == []


def test_amazon_price_whole_fallback():
    html = _page('<span id="productTitle">Lampe</span><span class="a-price-whole">24,</span>')
    assert ProductScraper().extract(AmazonExtractor(), html).price == 24.0


def test_title_is_truncated_to_200_characters():
    html = _page(f'<span id="productTitle">{"t" * 300}</span>')
    record = ProductScraper().extract(AmazonExtractor(), html)
    assert record.title == "t" * 200


def test_default_description_when_page_has_none():
    html = _page('<span id="productTitle">Lampe</span>')
    scraper = ProductScraper()

    assert scraper.extract(AmazonExtractor(), html).description == "Produit"
    assert scraper.extract(AmazonExtractor(), html, "Produit Amazon").description == "Produit Amazon"


def test_missing_title_raises():
    with pytest.raises(MissingTitleError) as exc_info:
        ProductScraper().extract(AmazonExtractor(), _page("<p>Captcha</p>"))
    assert exc_info.value.http_status == 400
    assert exc_info.value.message == "Impossible d'extraire le titre du produit"


def test_fnac_extraction():
    record = ProductScraper().extract(FnacExtractor(), FNAC_HTML)

    assert record.title == "Le Petit Prince"
    assert record.price == 8.9
    assert record.image_url == (
        "https://static.fnac-static.com/multimedia/Images/FR/NR/1a/2b/3c/123_1_2000x2000.jpg"
    )
    assert record.description == "Un classique de la littérature."
    assert record.categories == ["Livres", "Jeunesse"]
    assert record.source == "Fnac"


def test_fnac_prefers_header_title_over_og_title():
    html = _page(
        '<h1 class="f-productHeader-Title">Dune - Tome 1</h1><div class="f-priceBox-price">12,50 €</div>',
        head='<meta property="og:title" content="Dune | Fnac">',
    )
    record = ProductScraper().extract(FnacExtractor(), html)
    assert record.title == "Dune - Tome 1"
    assert record.price == 12.5


def test_fnac_feature_list_wins_over_text():
    html = _page(
        '<h1 itemprop="name">Casque</h1>'
        '<ul class="f-productDescription-list"><li>Sans fil</li><li>Réduction de bruit</li></ul>'
        '<div class="f-productDescription-text">Texte long</div>'
    )
    assert ProductScraper().extract(FnacExtractor(), html).description == "Sans fil • Réduction de bruit"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.amazon.fr/dp/B0ABC", AmazonExtractor),
        ("https://amazon.com/gp/product/B0ABC", AmazonExtractor),
        ("https://www.fnac.com/a123/Le-Petit-Prince", FnacExtractor),
        ("https://livre.fnac.fr/a456", FnacExtractor),
    ],
)
def test_factory_picks_extractor(url, expected):
    assert isinstance(ExtractorFactory.get_extractor(url), expected)


def test_factory_rejects_other_sites():
    with pytest.raises(UnsupportedSiteError) as exc_info:
        ExtractorFactory.get_extractor("https://www.darty.com/nav/achat/123.html")
    assert exc_info.value.message == "URL non supportée. Seuls Amazon et Fnac sont supportés."


def test_factory_respects_allowed_sites():
    with pytest.raises(UnsupportedSiteError):
        ExtractorFactory.get_extractor("https://www.fnac.com/a123", allowed=("Amazon",))
