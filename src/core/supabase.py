from __future__ import annotations

from threading import Lock
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

import httpx

from src.core.config import get_settings


class SupabaseClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(self) -> None:
        settings = get_settings()
        self.base_url = settings.supabase_url.rstrip("/") + "/rest/v1"
        self.storage_url = settings.supabase_url.rstrip("/") + "/storage/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self._client = self._get_shared_client()

    @classmethod
    def _get_shared_client(cls) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=30.0,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return cls._shared_client

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    @staticmethod
    def _as_rows(response: httpx.Response) -> List[Dict[str, Any]]:
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []

    def select(
        self,
        table: str,
        select: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        limit: Optional[int] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: List[Tuple[str, str]] = [("select", select)]
        if filters:
            params.extend(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        if order:
            params.append(("order", order))

        url = f"{self.base_url}/{table}?{urlencode(params, doseq=True)}"
        response = self._client.get(url, headers=self._auth_headers())
        response.raise_for_status()
        return self._as_rows(response)

    def insert(self, table: str, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}"
        headers = {
            **self._auth_headers(),
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        response = self._client.post(url, headers=headers, json=payload)
        response.raise_for_status()
        return self._as_rows(response)

    def update(
        self,
        table: str,
        payload: Dict[str, Any],
        filters: List[Tuple[str, str]],
    ) -> List[Dict[str, Any]]:
        params: List[Tuple[str, str]] = []
        if filters:
            params.extend(filters)
        url = f"{self.base_url}/{table}?{urlencode(params, doseq=True)}"
        headers = {
            **self._auth_headers(),
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        response = self._client.patch(url, headers=headers, json=payload)
        response.raise_for_status()
        return self._as_rows(response)

    def delete(self, table: str, filters: List[Tuple[str, str]]) -> List[Dict[str, Any]]:
        # PostgREST refuses an unfiltered DELETE; callers always scope by id.
        if not filters:
            raise ValueError("Delete requires at least one filter")
        url = f"{self.base_url}/{table}?{urlencode(filters, doseq=True)}"
        headers = {**self._auth_headers(), "Prefer": "return=representation"}
        response = self._client.delete(url, headers=headers)
        response.raise_for_status()
        return self._as_rows(response)

    def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> str:
        url = f"{self.storage_url}/object/{bucket}/{quote(path)}"
        headers = {
            **self._auth_headers(),
            "Content-Type": content_type,
            "x-upsert": "true" if upsert else "false",
        }
        response = self._client.post(url, headers=headers, content=content)
        response.raise_for_status()
        return path

    def remove_files(self, bucket: str, paths: List[str]) -> None:
        if not paths:
            return
        url = f"{self.storage_url}/object/{bucket}"
        headers = {**self._auth_headers(), "Content-Type": "application/json"}
        response = self._client.request("DELETE", url, headers=headers, json={"prefixes": paths})
        response.raise_for_status()
