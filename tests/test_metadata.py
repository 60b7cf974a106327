import httpx
import pytest
from bs4 import BeautifulSoup

from linkblog.schemas import LinkMetadata
from linkblog.services import metadata
from linkblog.services.metadata import MetadataService, absolute_image_url


def soup_of(html):
    return BeautifulSoup(html, "html.parser")


def service_serving(html, status_code=200):
    def handler(request):
        return httpx.Response(
            status_code, text=html, headers={"Content-Type": "text/html"}
        )

    return MetadataService(transport=httpx.MockTransport(handler))


def failing_service(exc_type):
    def handler(request):
        raise exc_type("boom", request=request)

    return MetadataService(transport=httpx.MockTransport(handler))


class TestTitleRules:
    def test_title_tag_wins(self):
        soup = soup_of(
            "<head><title>  Page \n</title>"
            '<meta property="og:title" content="OG"></head>'
        )
        assert metadata.first_match(metadata.TITLE_RULES, soup, "") == "Page"

    def test_og_title_when_title_is_blank(self):
        soup = soup_of(
            "<head><title>   </title>"
            '<meta property="og:title" content=" OG title "></head>'
        )
        assert metadata.first_match(metadata.TITLE_RULES, soup, "") == "OG title"

    def test_meta_name_title_last(self):
        soup = soup_of('<head><meta name="title" content="Named"></head>')
        assert metadata.first_match(metadata.TITLE_RULES, soup, "") == "Named"

    def test_no_title(self):
        assert metadata.first_match(metadata.TITLE_RULES, soup_of("<p>x</p>"), "") is None


class TestImageRules:
    def test_og_image_before_twitter_image(self):
        soup = soup_of(
            '<meta name="twitter:image" content="https://t.example/t.png">'
            '<meta property="og:image" content="https://o.example/o.png">'
        )
        assert (
            metadata.first_match(metadata.IMAGE_RULES, soup, "https://site.com")
            == "https://o.example/o.png"
        )

    def test_twitter_image_before_img_tags(self):
        soup = soup_of(
            '<meta name="twitter:image" content="https://t.example/t.png">'
            '<img src="https://site.com/a.png">'
        )
        assert (
            metadata.first_match(metadata.IMAGE_RULES, soup, "https://site.com")
            == "https://t.example/t.png"
        )

    def test_root_relative_img(self):
        soup = soup_of('<body><img src="/logo.png"></body>')
        assert (
            metadata.first_image(soup, "https://site.com/post")
            == "https://site.com/logo.png"
        )

    def test_skips_unusable_sources(self):
        soup = soup_of(
            '<img alt="no source">'
            '<img src="data:image/png;base64,AAAA">'
            '<img src="images/relative.png">'
            '<img src="//cdn.example/pic.png">'
            '<img src="https://site.com/later.png">'
        )
        assert metadata.first_image(soup, "https://site.com") == "https://cdn.example/pic.png"

    def test_no_images(self):
        assert metadata.first_image(soup_of("<p>text</p>"), "https://site.com") is None


class TestAbsoluteImageUrl:
    def test_protocol_relative(self):
        assert absolute_image_url("//cdn.example/a.png", "http://site.com") == (
            "https://cdn.example/a.png"
        )

    def test_keeps_port_and_drops_userinfo(self):
        assert absolute_image_url("/a.png", "http://me:pw@site.com:8080/x") == (
            "http://site.com:8080/a.png"
        )

    def test_absolute(self):
        assert absolute_image_url("http://a.example/x.png", "") == "http://a.example/x.png"

    @pytest.mark.parametrize("page_url", ["http://[::1", "site.com/page", ""])
    def test_malformed_page_url_skips_candidate(self, page_url):
        assert absolute_image_url("/a.png", page_url) is None


async def test_extract_title_and_image():
    service = service_serving(
        "<html><head><title>Ex</title>"
        '<meta property="og:image" content="https://ex.com/a.png"></head></html>'
    )

    result = await service.extract("https://ex.com")

    assert result == LinkMetadata(title="Ex", image_url="https://ex.com/a.png")


async def test_extract_resolves_relative_image_against_page():
    service = service_serving('<html><body><img src="/logo.png"></body></html>')

    result = await service.extract("https://site.com/post")

    assert result.image_url == "https://site.com/logo.png"
    assert result.title is None


async def test_extract_parses_error_pages():
    service = service_serving("<title>Not Found</title>", status_code=404)

    result = await service.extract("https://site.com/missing")

    assert result.title == "Not Found"


@pytest.mark.parametrize("exc_type", [httpx.ReadTimeout, httpx.ConnectError])
async def test_extract_returns_empty_result_on_transport_failure(exc_type, caplog):
    result = await failing_service(exc_type).extract("https://ex.com")

    assert result == LinkMetadata()
    assert "https://ex.com" in caplog.text


async def test_extract_sends_user_agent():
    seen = {}

    def handler(request):
        seen["user-agent"] = request.headers["user-agent"]
        return httpx.Response(200, text="<title>x</title>")

    await MetadataService(transport=httpx.MockTransport(handler)).extract("https://ex.com")

    assert seen["user-agent"] == metadata.USER_AGENT


async def test_timeout_is_configurable():
    assert MetadataService().timeout == metadata.DEFAULT_TIMEOUT == 10.0
    assert MetadataService(timeout=2.5).timeout == 2.5


def test_empty_og_image_falls_through():
    soup = soup_of(
        '<meta property="og:image" content="">'
        '<meta name="twitter:image" content="https://t.example/t.png">'
    )
    assert (
        metadata.first_match(metadata.IMAGE_RULES, soup, "https://site.com")
        == "https://t.example/t.png"
    )


async def test_extract_absorbs_unexpected_errors(caplog):
    def handler(request):
        raise OverflowError("connect(): port must be 0-65535")

    service = MetadataService(transport=httpx.MockTransport(handler))

    result = await service.extract("http://localhost:99999/")

    assert result == LinkMetadata()
    assert "port must be 0-65535" in caplog.text
