"""Remote store: Supabase auth and PostgREST tables over plain HTTP.

Every call is synchronous and raises a StoreError subclass on failure. Nothing
is retried here; callers decide what to tell the user.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from tt.common.logger import log
from tt.core.entries import TimeEntry, draft_to_row

ENTRIES_TABLE = "time_entries"
PROFILES_TABLE = "profiles"


class StoreError(Exception):
    """Network or backend failure."""


class AuthError(StoreError):
    """Sign in / sign up was refused."""


class InvalidCredentialsError(AuthError):
    pass


class AlreadyRegisteredError(AuthError):
    pass


@dataclass
class Session:
    user_id: str
    email: str
    access_token: str
    refresh_token: str = ""
    username: str = ""


@dataclass
class Profile:
    user_id: str
    username: str
    role: str = "user"
    is_admin: bool = False

    @property
    def admin(self):
        return self.is_admin is True or self.role == "admin"

    @staticmethod
    def from_row(row):
        return Profile(
            user_id=str(row.get("user_id") or row.get("id")),
            username=row.get("username") or "",
            role=row.get("role") or "user",
            is_admin=row.get("is_admin") is True,
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return response.text[:200]


class SupabaseStore:

    def __init__(self, url: str, api_key: str, timeout: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        if not url or not api_key:
            raise StoreError("Backend is not configured. Set the Supabase URL and key in Settings.")
        self._base_url = url.rstrip("/")
        self._api_key = api_key
        self._client = httpx.Client(base_url=self._base_url, timeout=timeout, transport=transport)
        self.session: Session | None = None

    def close(self):
        self._client.close()

    # ------------------------------------------------------------------ #
    #  Plumbing                                                            #
    # ------------------------------------------------------------------ #

    def _headers(self, extra=None) -> dict[str, str]:
        token = self.session.access_token if self.session else self._api_key
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, path, *, params=None, json=None, prefer=None) -> Any:
        extra = {"Prefer": prefer} if prefer else None
        log.debug(f"{method} {path} params={params}")
        try:
            response = self._client.request(method, path, params=params, json=json, headers=self._headers(extra))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            log.warning(f"{method} {path} failed with HTTP {e.response.status_code}: {message}")
            raise StoreError(f"HTTP {e.response.status_code}: {message}") from e
        except httpx.RequestError as e:
            log.warning(f"{method} {path} failed: {e}")
            raise StoreError(f"Connection error: {e}") from e
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            log.warning(f"{method} {path} returned a body that isn't JSON: {response.text[:200]!r}")
            raise StoreError("Backend returned an unreadable response") from e

    def _auth_request(self, path, *, params=None, json=None):
        try:
            response = self._client.post(f"/auth/v1/{path}", params=params, json=json, headers=self._headers())
        except httpx.RequestError as e:
            log.warning(f"Auth request '{path}' failed: {e}")
            raise StoreError(f"Connection error: {e}") from e
        if response.is_error:
            message = _error_message(response)
            log.info(f"Auth request '{path}' refused with HTTP {response.status_code}: {message}")
            lowered = message.lower()
            if "invalid login credentials" in lowered or "invalid_credentials" in lowered:
                raise InvalidCredentialsError("Invalid credentials")
            if "already registered" in lowered or "user_already_exists" in lowered:
                raise AlreadyRegisteredError("This user is already registered")
            raise AuthError(message or "Authentication failed")
        return response.json() if response.content else {}

    @staticmethod
    def _session_from(body) -> Session | None:
        user = body.get("user") or {}
        if not body.get("access_token") or not user.get("id"):
            return None
        return Session(
            user_id=str(user["id"]),
            email=user.get("email") or "",
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token") or "",
            username=(user.get("user_metadata") or {}).get("username") or "",
        )

    # ------------------------------------------------------------------ #
    #  Auth                                                                #
    # ------------------------------------------------------------------ #

    def sign_in(self, email, password) -> Session:
        body = self._auth_request("token", params={"grant_type": "password"},
                                  json={"email": email, "password": password})
        session = self._session_from(body)
        if session is None:
            raise AuthError("Authentication failed")
        self.session = session
        log.info(f"Signed in as '{email}'")
        return session

    # Returns the new user's id. Email confirmation may mean no session comes back, in which case the user
    # still has to sign in afterwards.
    def sign_up(self, email, password, username) -> str:
        body = self._auth_request("signup", json={
            "email": email,
            "password": password,
            "data": {"username": username},
        })
        session = self._session_from(body)
        if session is not None:
            self.session = session
            user_id = session.user_id
        else:
            user_id = str((body.get("user") or body).get("id") or "")
        if not user_id:
            raise AuthError("Registration failed")
        log.info(f"Registered new user '{email}'")
        return user_id

    def sign_out(self):
        if self.session is None:
            return
        try:
            self._auth_request("logout")
        finally:
            log.info(f"Signed out '{self.session.email}'")
            self.session = None

    # ------------------------------------------------------------------ #
    #  Profiles                                                            #
    # ------------------------------------------------------------------ #

    def get_profile(self, user_id) -> Profile | None:
        rows = self._request("GET", f"/rest/v1/{PROFILES_TABLE}",
                             params={"select": "*", "user_id": f"eq.{user_id}", "limit": "1"})
        return Profile.from_row(rows[0]) if rows else None

    def create_profile(self, user_id, username, admin=False):
        self._request("POST", f"/rest/v1/{PROFILES_TABLE}", json={
            "id": user_id,
            "user_id": user_id,
            "username": username,
            "role": "admin" if admin else "user",
            "is_admin": bool(admin),
        })

    def list_profiles(self) -> list[Profile]:
        rows = self._request("GET", f"/rest/v1/{PROFILES_TABLE}",
                             params={"select": "*", "order": "username"}) or []
        return [Profile.from_row(r) for r in rows]

    def set_admin(self, user_id, is_admin):
        self._request("PATCH", f"/rest/v1/{PROFILES_TABLE}",
                      params={"user_id": f"eq.{user_id}"},
                      json={"role": "admin" if is_admin else "user", "is_admin": bool(is_admin)})

    # ------------------------------------------------------------------ #
    #  Entries                                                             #
    # ------------------------------------------------------------------ #

    def list_entries(self, user_id) -> list[dict]:
        return self._request("GET", f"/rest/v1/{ENTRIES_TABLE}", params={
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }) or []

    def insert_entry(self, user_id, draft) -> dict:
        rows = self._request("POST", f"/rest/v1/{ENTRIES_TABLE}",
                             json=draft_to_row(draft, user_id),
                             prefer="return=representation")
        if not rows:
            raise StoreError("Insert returned no row")
        return rows[0] if isinstance(rows, list) else rows

    def update_entry(self, user_id, entry: TimeEntry):
        self._request("PATCH", f"/rest/v1/{ENTRIES_TABLE}",
                      params={"id": f"eq.{entry.id}", "user_id": f"eq.{user_id}"},
                      json=entry.to_row())

    # ------------------------------------------------------------------ #
    #  Client / task lists                                                 #
    # ------------------------------------------------------------------ #

    def list_names(self, table) -> list[str]:
        rows = self._request("GET", f"/rest/v1/{table}", params={"select": "nombre", "order": "nombre"}) or []
        return [r["nombre"] for r in rows]

    def insert_name(self, table, name):
        self._request("POST", f"/rest/v1/{table}", json={"nombre": name})

    def delete_name(self, table, name):
        self._request("DELETE", f"/rest/v1/{table}", params={"nombre": f"eq.{name}"})
