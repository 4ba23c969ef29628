from auth.callback_page import CAPTURE_MESSAGE, render_callback_page


def test_capture_page_shows_url_and_steps() -> None:
    url = "http://localhost:8045/auth/callback?code=abc&state=xyz"

    page = render_callback_page(True, CAPTURE_MESSAGE, url)

    assert 'id="urlText"' in page
    assert "code=abc&amp;state=xyz" in page
    assert "navigator.clipboard.writeText" in page
    assert page.count("<li>") == 4


def test_denial_page_has_no_instructions() -> None:
    page = render_callback_page(False, "授权失败: access_denied")

    assert "授权失败: access_denied" in page
    assert 'class="instructions"' not in page
    assert "copyUrl" not in page


def test_values_are_escaped() -> None:
    page = render_callback_page(False, "<script>alert(1)</script>")

    assert "<script>alert(1)</script>" not in page
    assert "&lt;script&gt;" in page
