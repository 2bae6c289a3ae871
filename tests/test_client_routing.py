import pytest

from carhub.client.routing import Redirect, Router, ViewMatch, resolve
from carhub.client.store import LoggedOut, LoginSucceeded, Store


@pytest.mark.parametrize(
    "path, view, params",
    [
        ("/cars/new", "car_create", {}),
        ("/cars/42/edit", "car_edit", {"id": "42"}),
        ("/cars/42", "car_detail", {"id": "42"}),
        ("/cars", "car_list", {}),
        ("/cars/", "car_list", {}),
        ("/cars?page=2", "car_list", {}),
    ],
)
def test_private_routes_when_signed_in(path, view, params):
    match = resolve(path, authenticated=True)
    assert isinstance(match, ViewMatch)
    assert match.view == view
    assert match.params == params
    assert match.layout


@pytest.mark.parametrize("authenticated", [True, False])
@pytest.mark.parametrize("path, view", [("/login", "login"), ("/register", "register")])
def test_public_routes_always_render(path, view, authenticated):
    match = resolve(path, authenticated)
    assert match == ViewMatch(view, path, {})


@pytest.mark.parametrize("path", ["/", "/cars/1/edit/extra", "/settings"])
def test_unknown_paths_fall_back_to_list_when_signed_in(path):
    assert resolve(path, authenticated=True) == Redirect("/cars")


@pytest.mark.parametrize("path", ["/", "/cars", "/cars/new", "/cars/9/edit", "/anything"])
def test_everything_else_goes_to_login_when_signed_out(path):
    outcome = resolve(path, authenticated=False)
    assert outcome == Redirect("/login", from_path=path)


def test_router_returns_to_requested_page_after_login():
    store = Store()
    router = Router(store, "/cars/42/edit")

    assert router.current.view == "login"
    assert router.location_state == {"from": "/cars/42/edit"}

    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))

    assert router.current.view == "car_edit"
    assert router.current.params == {"id": "42"}
    assert router.location == "/cars/42/edit"
    # login was replaced, not stacked
    assert router.history == ["/cars/42/edit"]


def test_router_login_without_origin_lands_on_list():
    store = Store()
    router = Router(store, "/login")
    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))
    assert router.location == "/cars"


def test_router_redirects_to_login_on_logout():
    store = Store()
    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))
    router = Router(store, "/cars/7")
    assert router.current.view == "car_detail"

    store.dispatch(LoggedOut())
    assert router.current.view == "login"
    assert router.location_state == {"from": "/cars/7"}

    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok2"))
    assert router.location == "/cars/7"


def test_router_ignores_unrelated_store_changes():
    store = Store()
    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))
    router = Router(store, "/cars")
    store.notify("hello")
    assert router.history == ["/cars"]


def test_signed_in_user_can_still_open_login():
    store = Store()
    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))
    router = Router(store, "/cars")
    router.navigate("/login")
    assert router.current.view == "login"
    assert router.history == ["/cars", "/login"]


def test_router_close_stops_listening():
    store = Store()
    router = Router(store, "/cars/3")
    router.close()
    store.dispatch(LoginSucceeded(user={"id": 1}, token="tok"))
    assert router.current.view == "login"
