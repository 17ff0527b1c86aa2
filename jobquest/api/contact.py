"""Endpoints under /api/contact."""
from __future__ import annotations

from jobquest.api.base import ApiResource
from jobquest.models import ContactMessage


class ContactApi(ApiResource):
    prefix = "/api/contact"

    def submit(self, payload: dict) -> dict:
        return self.client.post(self.path("submit"), payload, auth=False)

    def list(self, page: int = 1, limit: int = 10, status: str = "") -> tuple[list[ContactMessage], dict]:
        data = self.client.get(self.path(), {"page": page, "limit": limit, "status": status}) or {}
        messages = [ContactMessage.from_api(c) for c in data.get("contacts", [])]
        return messages, data.get("pagination", {})

    def stats(self) -> dict:
        return self.client.get(self.path("stats", "summary")) or {}

    def detail(self, contact_id: str) -> ContactMessage:
        data = self.client.get(self.path(contact_id)) or {}
        return ContactMessage.from_api(data.get("contact", data))

    def reply(self, contact_id: str, reply: str) -> dict:
        return self.client.put(self.path(contact_id, "reply"), {"reply": reply})

    def update_status(self, contact_id: str, status: str) -> dict:
        return self.client.put(self.path(contact_id, "status"), {"status": status})

    def delete(self, contact_id: str) -> dict:
        return self.client.delete(self.path(contact_id))
