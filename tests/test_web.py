"""Tests for the HTTP pages and form posts."""

from fastapi.testclient import TestClient

from eatin.api.app import create_app
from eatin.containers import AppContainer
from eatin.domain.errors import AuthError
from eatin.services.views import ViewRegistry
from tests.conftest import TODAY, FakeBackendFactory


def _signed_in_client(container, backend_factory: FakeBackendFactory) -> TestClient:
    backend_factory.register("alice@example.com", "secret")
    client = TestClient(create_app(container))
    client.post("/auth", data={"email": "alice@example.com", "password": "secret"})
    return client


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_entry_without_session_redirects_to_auth(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth"
    assert "eatin_view" in response.cookies


def test_dashboard_requires_sign_in(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/dashboard")

    assert response.url.path == "/auth"
    assert "Sign in to your account" in response.text


def test_sign_in_redirects_to_dashboard(container, backend_factory) -> None:
    backend_factory.register("alice@example.com", "secret")
    client = TestClient(create_app(container))
    client.get("/auth")

    response = client.post(
        "/auth",
        data={"email": "alice@example.com", "password": "secret"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    page = client.get("/dashboard")
    assert page.status_code == 200
    assert "alice@example.com" in page.text
    assert "No restaurant visits yet." in page.text


def test_signed_in_user_is_moved_off_auth_page(container, backend_factory) -> None:
    client = _signed_in_client(container, backend_factory)

    response = client.get("/auth", follow_redirects=False)

    assert response.headers["location"] == "/dashboard"


def test_invalid_credentials_stay_on_auth_page(container, backend_factory) -> None:
    backend_factory.register("alice@example.com", "secret")
    client = TestClient(create_app(container))

    response = client.post(
        "/auth", data={"email": "alice@example.com", "password": "nope"}
    )

    assert response.url.path == "/auth"
    assert "Invalid login credentials" in response.text


def test_sign_up_mode_shows_confirmation_message(container, backend_factory) -> None:
    client = TestClient(create_app(container))
    client.post("/auth/mode")

    response = client.post(
        "/auth", data={"email": "new@example.com", "password": "secret"}
    )

    assert "Create your account" in response.text
    assert "Check your email for the confirmation link!" in response.text
    assert "new@example.com" in backend_factory.accounts


def test_add_edit_and_delete_visit(container, backend_factory) -> None:
    client = _signed_in_client(container, backend_factory)

    page = client.post(
        "/dashboard/visits",
        data={"restaurant_name": "Joe's Pizza", "visited_on": "2024-01-15", "notes": ""},
    )
    assert "Visit added!" in page.text
    assert "Joe&#x27;s Pizza" in page.text
    assert "Monday, January 15, 2024" in page.text
    [visit] = backend_factory.rows.values()

    page = client.post(f"/dashboard/visits/{visit.id}/edit")
    assert "Edit Visit" in page.text

    page = client.post(
        "/dashboard/visits",
        data={
            "restaurant_name": "Joe's Pizza",
            "visited_on": "2024-01-15",
            "notes": "Great crust",
        },
    )
    assert "Visit updated!" in page.text
    assert "Great crust" in page.text
    assert backend_factory.rows[visit.id].notes == "Great crust"

    page = client.post(f"/dashboard/visits/{visit.id}/delete")
    assert "Are you sure you want to delete this visit" in page.text
    assert visit.id in backend_factory.rows

    page = client.post("/dashboard/delete/confirm")
    assert "Visit deleted" in page.text
    assert backend_factory.rows == {}


def test_invalid_visit_keeps_form_contents(container, backend_factory) -> None:
    client = _signed_in_client(container, backend_factory)

    page = client.post(
        "/dashboard/visits",
        data={"restaurant_name": "Future Grill", "visited_on": "2099-01-01"},
    )

    assert "Visit date cannot be in the future." in page.text
    assert 'value="Future Grill"' in page.text
    assert backend_factory.rows == {}


def test_sign_out_lands_on_auth(container, backend_factory) -> None:
    client = _signed_in_client(container, backend_factory)

    response = client.post("/signout", follow_redirects=False)

    assert response.headers["location"] == "/auth"
    assert client.get("/dashboard").url.path == "/auth"


def test_visits_are_scoped_to_their_owner(container, backend_factory) -> None:
    alice = _signed_in_client(container, backend_factory)
    alice.post(
        "/dashboard/visits",
        data={"restaurant_name": "Joe's Pizza", "visited_on": "2024-01-15"},
    )
    backend_factory.register("bob@example.com", "hunter2")
    bob = TestClient(create_app(container))
    bob.post("/auth", data={"email": "bob@example.com", "password": "hunter2"})

    page = bob.get("/dashboard")

    assert "bob@example.com" in page.text
    assert "Joe&#x27;s Pizza" not in page.text
    assert len(backend_factory.rows) == 1


def test_failed_revoke_still_lands_on_auth(container, backend_factory) -> None:
    client = _signed_in_client(container, backend_factory)
    backend_factory.gateways[0].sign_out_error = AuthError("network down")

    response = client.post("/signout")

    assert response.url.path == "/auth"
    assert "Sign in to your account" in response.text
    assert client.get("/dashboard").url.path == "/auth"


def test_cookieless_requests_do_not_accumulate_views(
    settings, backend_factory
) -> None:
    views = ViewRegistry(backend_factory, max_views=5, today=lambda: TODAY)
    container = AppContainer(
        settings=settings, views=views, close_resources=views.close_all
    )
    app = create_app(container)

    for _ in range(50):
        TestClient(app).get("/", follow_redirects=False)

    assert len(views) == 5
    assert backend_factory.closed == 45
