import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests


class ApiError(Exception):
    """Non-2xx answer from the API; `message` is the server's text."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class NotAuthenticated(Exception):
    pass


class SessionStore:
    """Keeps the token and user profile between runs, like browser local storage."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, token: str, user: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump({"token": token, "user": user}, f)
        os.replace(tmp, self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class FinanceClient:
    """
    Thin client for the finance tracker API.

    `http` can be anything with requests-style get/post methods; it
    defaults to a requests.Session.
    """

    def __init__(self, base_url: str, store: SessionStore, http=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.http = http or requests.Session()
        self.timeout = timeout

    # ---------- session ----------
    @property
    def token(self) -> Optional[str]:
        return self.store.load().get("token")

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.store.load().get("user")

    def is_authenticated(self) -> bool:
        # no client-side expiry check, the server rejects stale tokens
        return bool(self.token)

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        data = self._call("post", "/api/auth/register", {"name": name, "email": email, "password": password})
        self.store.save(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._call("post", "/api/auth/login", {"email": email, "password": password})
        self.store.save(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.store.clear()

    # ---------- resources ----------
    def add_expense(self, description: str, amount: float, category: str, date: str) -> Dict[str, Any]:
        return self._add("/api/expenses", description, amount, category, date)

    def list_expenses(self) -> List[Dict[str, Any]]:
        return self._call("get", "/api/expenses", auth=True)

    def add_income(self, description: str, amount: float, category: str, date: str) -> Dict[str, Any]:
        return self._add("/api/incomes", description, amount, category, date)

    def list_incomes(self) -> List[Dict[str, Any]]:
        return self._call("get", "/api/incomes", auth=True)

    def _add(self, path, description, amount, category, date):
        body = {"description": description, "amount": amount, "category": category, "date": date}
        return self._call("post", path, body, auth=True)

    def _call(self, method: str, path: str, body=None, auth: bool = False):
        headers = {}
        if auth:
            token = self.token
            if not token:
                raise NotAuthenticated("log in first")
            headers["Authorization"] = f"Bearer {token}"

        kwargs = {"headers": headers, "timeout": self.timeout}
        if body is not None:
            kwargs["json"] = body
        resp = getattr(self.http, method)(self.base_url + path, **kwargs)

        if resp.status_code >= 400:
            try:
                data = resp.json()
            except ValueError:
                data = None
            message = data.get("message", resp.text) if isinstance(data, dict) else resp.text
            raise ApiError(resp.status_code, message)
        return resp.json()
