import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from carhub.client.store import LoggedOut, LoginSucceeded, Store

logger = logging.getLogger(__name__)

# (filename, content, content_type)
ImageUpload = Tuple[str, bytes, str]


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class CarsApi:
    """
    What the pages call to talk to the backend. Failures surface through the
    store's notification queue before ``ApiError`` is raised, and a 401 also
    clears the signed-in identity.
    """

    def __init__(self, http: httpx.Client, store: Store):
        self.http = http
        self.store = store

    # --- plumbing ---

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        token = token or self.store.state.auth.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, url: str, token: Optional[str] = None, **kwargs) -> httpx.Response:
        response = self.http.request(method, url, headers=self._headers(token), **kwargs)
        if response.is_success:
            return response

        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail", response.text) if isinstance(body, dict) else response.text
        if not isinstance(detail, str):
            # FastAPI request-validation errors come back as a list
            detail = str(detail)

        logger.warning("%s %s failed with %s: %s", method, url, response.status_code, detail)
        if response.status_code == 401 and self.store.state.auth.is_authenticated:
            self.store.dispatch(LoggedOut())
        self.store.notify(detail, "error")
        raise ApiError(response.status_code, detail)

    @staticmethod
    def _form(
        title: Optional[str],
        description: Optional[str],
        tags: Optional[Sequence[str]],
        images: Sequence[ImageUpload],
    ) -> Dict[str, Any]:
        data: Dict[str, str] = {}
        if title is not None:
            data["title"] = title
        if description is not None:
            data["description"] = description
        if tags is not None:
            data["tags"] = ",".join(tags)
        kwargs: Dict[str, Any] = {"data": data}
        if images:
            kwargs["files"] = [("images", img) for img in images]
        return kwargs

    # --- auth ---

    def register(self, email: str, password: str) -> Dict[str, Any]:
        user = self._request("POST", "/auth/register", json={"email": email, "password": password}).json()
        self.store.notify("Registration successful, please log in", "success")
        return user

    def login(self, email: str, password: str) -> Dict[str, Any]:
        token = self._request("POST", "/auth/login", json={"email": email, "password": password}).json()
        access_token = token["access_token"]
        user = self._request("GET", "/auth/me", token=access_token).json()
        self.store.dispatch(LoginSucceeded(user=user, token=access_token))
        self.store.notify("Logged in", "success")
        return user

    def logout(self) -> None:
        self.store.dispatch(LoggedOut())
        self.store.notify("Logged out", "info")

    # --- cars ---

    def list_cars(
        self,
        search: Optional[str] = None,
        my_cars_only: bool = False,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if search:
            params["search"] = search
        if my_cars_only:
            params["myCarsOnly"] = "true"
        return self._request("GET", "/cars", params=params).json()

    def get_car(self, car_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/cars/{car_id}").json()

    def create_car(
        self,
        title: str,
        description: str,
        tags: Optional[Sequence[str]] = None,
        images: Sequence[ImageUpload] = (),
    ) -> Dict[str, Any]:
        car = self._request("POST", "/cars", **self._form(title, description, tags, images)).json()
        self.store.notify("Car created", "success")
        return car

    def update_car(
        self,
        car_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        images: Sequence[ImageUpload] = (),
    ) -> Dict[str, Any]:
        car = self._request("PUT", f"/cars/{car_id}", **self._form(title, description, tags, images)).json()
        self.store.notify("Car updated", "success")
        return car

    def delete_car(self, car_id: str) -> None:
        body = self._request("DELETE", f"/cars/{car_id}").json()
        self.store.notify(body.get("message", "Car deleted"), "success")
