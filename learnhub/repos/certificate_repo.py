from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4


class CertificateRepo(Protocol):
    async def insert(self, record: dict) -> dict: ...
    async def list_for_user(self, user_id: str) -> list[dict]: ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._rows: list[dict] = []

    async def insert(self, record: dict) -> dict:
        code = record.get("verification_code")
        if any(r["verification_code"] == code for r in self._rows):
            raise ValueError("verification code already exists")

        cert_id = str(uuid4())
        row = {
            "id": cert_id,
            "issued_at": datetime.now(UTC).isoformat(),
            "certificate_url": f"/certificates/{cert_id}.pdf",
            **record,
        }
        self._rows.append(row)
        return dict(row)

    async def list_for_user(self, user_id: str) -> list[dict]:
        return [dict(r) for r in self._rows if r["user_id"] == user_id]
