"""
Pytest tests for login, the authorization endpoint and the decision endpoint.
"""
import re
from urllib.parse import parse_qs, urlsplit

WEB_APP_CALLBACK = "https://app.example.com/cb"
FIRST_PARTY_CALLBACK = "https://first.example.com/cb"


def _params(location: str, part: str = "query") -> dict:
    parts = urlsplit(location)
    return {k: v[0] for k, v in parse_qs(getattr(parts, part)).items()}


def _transaction_id(html: str) -> str:
    match = re.search(r'name="transaction_id" value="([^"]+)"', html)
    assert match, "consent page has no transaction_id"
    return match.group(1)


def _authorize(client, **params):
    query = {"response_type": "code", "client_id": "web-app", "redirect_uri": WEB_APP_CALLBACK}
    query.update(params)
    return client.get("/dialog/authorize", params=query, follow_redirects=False)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# --- login ---


def test_login_wrong_password(login):
    response = login(password="nope")
    assert response.status_code == 401
    assert "Invalid username or password" in response.text


def test_login_rejects_offsite_return_to(client, seeded_db):
    response = client.post(
        "/login",
        data={"username": "alice", "password": "wonderland", "return_to": "//evil.example.com/"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_authorize_requires_login(client, seeded_db):
    response = _authorize(client, state="xyz")
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("/login?")
    return_to = _params(location)["return_to"]
    assert return_to.startswith("/dialog/authorize?")

    response = client.post(
        "/login",
        data={"username": "alice", "password": "wonderland", "return_to": return_to},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == return_to


# --- authorization code flow with consent ---


def test_consent_page_then_allow(client, login):
    login()
    response = _authorize(client, scope="profile api.read", state="xyz")
    assert response.status_code == 200
    assert "Web App" in response.text
    assert "api.read" in response.text

    tid = _transaction_id(response.text)
    response = client.post(
        "/dialog/authorize/decision",
        data={"transaction_id": tid, "scope": "profile api.read"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(WEB_APP_CALLBACK + "?")
    params = _params(location)
    assert params["code"]
    assert params["state"] == "xyz"


def test_deny_redirects_access_denied(client, login):
    login()
    response = _authorize(client, scope="profile", state="st")
    tid = _transaction_id(response.text)

    response = client.post(
        "/dialog/authorize/decision",
        data={"transaction_id": tid, "scope": "profile", "cancel": "Deny"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    params = _params(response.headers["location"])
    assert params["error"] == "access_denied"
    assert params["state"] == "st"
    assert "code" not in params


def test_transaction_is_single_use(client, login):
    login()
    tid = _transaction_id(_authorize(client, scope="profile").text)
    first = client.post("/dialog/authorize/decision", data={"transaction_id": tid}, follow_redirects=False)
    assert first.status_code == 302

    second = client.post("/dialog/authorize/decision", data={"transaction_id": tid}, follow_redirects=False)
    assert second.status_code == 403
    assert "Unable to load OAuth 2.0 transaction" in second.text


def test_forged_transaction_id_forbidden(client, login):
    login()
    _authorize(client, scope="profile")
    response = client.post(
        "/dialog/authorize/decision",
        data={"transaction_id": "forged-id"},
        follow_redirects=False,
    )
    assert response.status_code == 403
    assert "forged-id" in response.text


def test_decision_requires_login(client, seeded_db):
    response = client.post("/dialog/authorize/decision", data={"transaction_id": "x"}, follow_redirects=False)
    assert response.status_code == 403


def test_decision_cannot_widen_scope(client, login):
    login()
    tid = _transaction_id(_authorize(client, scope="profile", state="w").text)
    response = client.post(
        "/dialog/authorize/decision",
        data={"transaction_id": tid, "scope": "profile api.write"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    params = _params(response.headers["location"])
    assert params["error"] == "invalid_scope"
    assert params["state"] == "w"


def test_second_registered_redirect_uri(client, login):
    login()
    response = _authorize(client, redirect_uri="https://app.example.com/alt", scope="profile")
    tid = _transaction_id(response.text)
    response = client.post("/dialog/authorize/decision", data={"transaction_id": tid}, follow_redirects=False)
    assert response.headers["location"].startswith("https://app.example.com/alt?code=")


# --- validation failures are shown, not redirected ---


def test_unknown_client_not_redirected(client, login):
    login()
    response = _authorize(client, client_id="nobody")
    assert response.status_code == 403
    assert "Unknown client_id" in response.text


def test_unregistered_redirect_uri_not_redirected(client, login):
    login()
    response = _authorize(client, redirect_uri="https://evil.example.com/cb")
    assert response.status_code == 400
    assert "redirect_uri not allowed" in response.text


def test_ambiguous_default_redirect_uri(client, login):
    login()
    response = client.get(
        "/dialog/authorize",
        params={"response_type": "code", "client_id": "web-app"},
        follow_redirects=False,
    )
    assert response.status_code == 400


def test_missing_response_type(client, login):
    login()
    response = client.get("/dialog/authorize", params={"client_id": "web-app"}, follow_redirects=False)
    assert response.status_code == 400
    assert "response_type" in response.text


def test_unsupported_response_type(client, login):
    login()
    response = _authorize(client, response_type="id_token")
    assert response.status_code == 501
    assert "Unsupported response type: id_token" in response.text


def test_invalid_scope_redirected_to_client(client, login):
    login()
    response = _authorize(client, scope="profile admin", state="s")
    assert response.status_code == 302
    params = _params(response.headers["location"])
    assert params["error"] == "invalid_scope"
    assert "admin" in params["error_description"]
    assert params["state"] == "s"


# --- trusted clients skip consent ---


def test_trusted_client_code_immediately(client, login):
    login()
    response = client.get(
        "/dialog/authorize",
        params={"response_type": "code", "client_id": "first-party", "scope": "profile", "state": "t"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(FIRST_PARTY_CALLBACK + "?")
    params = _params(location)
    assert params["code"]
    assert params["state"] == "t"


def test_implicit_token_in_fragment(client, login):
    login()
    response = client.get(
        "/dialog/authorize",
        params={"response_type": "token", "client_id": "first-party", "scope": "profile email", "state": "i"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    location = response.headers["location"]
    assert urlsplit(location).query == ""
    params = _params(location, "fragment")
    assert params["access_token"]
    assert params["token_type"] == "Bearer"
    assert params["expires_in"] == "600"
    assert params["scope"] == "profile email"
    assert params["state"] == "i"


def test_response_mode_form_post(client, login):
    login()
    response = client.get(
        "/dialog/authorize",
        params={
            "response_type": "code",
            "client_id": "first-party",
            "response_mode": "form_post",
            "state": "<fp>",
        },
        follow_redirects=False,
    )
    assert response.status_code == 200
    assert f'action="{FIRST_PARTY_CALLBACK}"' in response.text
    assert 'name="code"' in response.text
    assert "&lt;fp&gt;" in response.text
