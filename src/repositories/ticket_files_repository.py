from __future__ import annotations

from src.core.config import get_settings
from src.core.supabase import SupabaseClient


class TicketFilesRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()
        self.bucket = get_settings().ticket_files_bucket

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        return self.client.upload_file(self.bucket, path, content, content_type)

    def remove(self, path: str) -> None:
        self.client.remove_files(self.bucket, [path])
