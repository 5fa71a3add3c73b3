from __future__ import annotations

import asyncio
import re

import pytest

from learnhub.repos.certificate_repo import InMemoryCertificateRepo
from learnhub.repos.course_directory import InMemoryCourseDirectory
from learnhub.repos.enrollment_repo import InMemoryEnrollmentRepo
from learnhub.repos.payment_repo import InMemoryPaymentRepo, new_transaction_id


def _payment(payment_id, user_id, course_id, amount, method, **extra) -> dict:
    return {
        "id": payment_id,
        "user_id": user_id,
        "course_id": course_id,
        "amount": amount,
        "payment_method": method,
        **extra,
    }


def test_transaction_id_format() -> None:
    assert re.fullmatch(r"txn_\d{13}_[0-9a-z]{9}", new_transaction_id())


def test_course_directory_lists_only_published_and_approved() -> None:
    directory = InMemoryCourseDirectory(
        [
            {"id": "a", "is_published": True, "is_approved": True},
            {"id": "b", "is_published": True, "is_approved": False},
        ]
    )
    directory.add({"id": "c", "is_published": False, "is_approved": True})
    rows = asyncio.run(directory.list_published_courses())
    assert [r["id"] for r in rows] == ["a"]


def test_enrollment_repo_enforces_one_per_user_and_course() -> None:
    async def run():
        repo = InMemoryEnrollmentRepo()
        await repo.create("u1", "c1", "pay_1", 10)
        with pytest.raises(ValueError, match="already exists"):
            await repo.create("u1", "c1", "pay_2", 10)
        await repo.create("u2", "c1", "pay_3", 10)
        return repo

    repo = asyncio.run(run())
    assert len(repo._by_id) == 2


def test_enrollment_repo_update_progress() -> None:
    async def run():
        repo = InMemoryEnrollmentRepo()
        row = await repo.create("u1", "c1", "pay_1", 10)
        updated = await repo.update_progress(row["id"], 50, ["l1", "l2"])
        with pytest.raises(KeyError):
            await repo.update_progress("missing", 10, [])
        return updated

    updated = asyncio.run(run())
    assert updated["progress"] == 50
    assert updated["completed_lessons"] == ["l1", "l2"]


def test_payment_repo_splits_fee() -> None:
    async def run():
        repo = InMemoryPaymentRepo(platform_fee_rate=0.3)
        await repo.create(
            _payment("pay_1", "u1", "c1", 100, "bank", transaction_id="txn_1")
        )
        await repo.create(_payment("pay_2", "u2", "c1", 5, "card"))
        return await repo.list_for_user("u1")

    (row,) = asyncio.run(run())
    assert row["platform_fee"] == 30.0
    assert row["instructor_earnings"] == 70.0
    assert row["status"] == "completed"
    assert (row["id"], row["transaction_id"]) == ("pay_1", "txn_1")


def test_certificate_repo_rejects_duplicate_verification_code() -> None:
    record = {
        "user_id": "u1",
        "course_id": "c1",
        "course_name": "Course",
        "instructor_name": "Ada",
        "verification_code": "LH-PR-2024-001",
    }

    async def run():
        repo = InMemoryCertificateRepo()
        row = await repo.insert(dict(record))
        with pytest.raises(ValueError, match="verification code"):
            await repo.insert(dict(record, user_id="u2"))
        return row

    row = asyncio.run(run())
    assert row["certificate_url"] == f"/certificates/{row['id']}.pdf"
    assert row["issued_at"]


def test_enrollment_repo_lists_by_course() -> None:
    async def run():
        repo = InMemoryEnrollmentRepo()
        await repo.create("u1", "c1", "pay_1", 10)
        await repo.create("u2", "c1", "pay_2", 10)
        await repo.create("u1", "c2", "pay_3", 10)
        return await repo.list_for_course("c1")

    rows = asyncio.run(run())
    assert sorted(r["user_id"] for r in rows) == ["u1", "u2"]


def test_payment_repo_lists_by_instructor() -> None:
    directory = InMemoryCourseDirectory(
        [
            {"id": "c1", "instructor": {"id": "inst-1", "name": "Ada"}},
            {"id": "c2", "instructor_id": "inst-2"},
        ]
    )

    async def run():
        repo = InMemoryPaymentRepo(0.4, instructor_of=directory.instructor_of)
        for pid, course_id in (("p1", "c1"), ("p2", "c2"), ("p3", "c1")):
            await repo.create(_payment(pid, "u1", course_id, 10, "card"))
        return await repo.list_for_instructor("inst-1")

    rows = asyncio.run(run())
    assert [r["id"] for r in rows] == ["p3", "p1"]
    assert directory.instructor_of("missing") is None
