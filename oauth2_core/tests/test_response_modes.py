"""Tests for query, fragment and form_post response modes."""
from oauth2_core.response_modes import form_post, fragment, query


def test_query_appends_params():
    response = query("https://client.example.com/cb", {"code": "abc", "state": "s1"})
    assert response.status_code == 302
    assert response.headers["location"] == "https://client.example.com/cb?code=abc&state=s1"


def test_query_merges_existing_query_and_keeps_fragment():
    response = query("https://client.example.com/cb?foo=bar&code=old#frag", {"code": "new"})
    assert response.headers["location"] == "https://client.example.com/cb?foo=bar&code=new#frag"


def test_query_keeps_repeated_existing_params():
    response = query("https://client.example.com/cb?a=1&a=2&code=old", {"code": "new"})
    assert response.headers["location"] == "https://client.example.com/cb?a=1&a=2&code=new"


def test_query_skips_none_values():
    response = query("https://client.example.com/cb", {"code": "abc", "state": None})
    assert response.headers["location"] == "https://client.example.com/cb?code=abc"


def test_fragment_encodes_params():
    response = fragment("https://client.example.com/cb", {"access_token": "at 1", "token_type": "Bearer"})
    assert response.status_code == 302
    assert response.headers["location"] == "https://client.example.com/cb#access_token=at+1&token_type=Bearer"


def test_fragment_keeps_query():
    response = fragment("https://client.example.com/cb?x=1", {"error": "access_denied"})
    assert response.headers["location"] == "https://client.example.com/cb?x=1#error=access_denied"


def test_form_post_renders_auto_submit_form():
    response = form_post("https://client.example.com/cb", {"code": "abc", "state": "s1"})
    body = response.body.decode()
    assert response.status_code == 200
    assert response.headers["content-type"] == "text/html;charset=UTF-8"
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["pragma"] == "no-cache"
    assert 'action="https://client.example.com/cb"' in body
    assert '<input type="hidden" name="code" value="abc"/>' in body
    assert "document.forms[0].submit()" in body


def test_form_post_escapes_injected_values():
    response = form_post('https://client.example.com/cb?a="x"', {"state": '"><script>alert(1)</script>'})
    body = response.body.decode()
    assert "<script>alert(1)</script>" not in body
    assert "&quot;&gt;&lt;script&gt;" in body
    assert 'action="https://client.example.com/cb?a=&quot;x&quot;"' in body
