"""API tests for leave requests and the one-way approval action."""

import pytest
from httpx import AsyncClient

from conftest import create_employee


async def _file_leave(client: AsyncClient, user_id: int, **extra) -> dict:
    body = {"user_id": user_id, "start_date": "2024-02-01", "end_date": "2024-02-03", **extra}
    resp = await client.post("/api/leaves", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_new_leave_is_pending(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"], leave_type="sick", reason="Flu")
    assert leave["status"] == "pending"
    assert leave["approved_by"] is None
    assert leave["leave_type"] == "sick"


@pytest.mark.asyncio
async def test_status_in_create_body_is_ignored(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"], status="approved")
    assert leave["status"] == "pending"


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(async_client: AsyncClient):
    emp = await create_employee(async_client)
    resp = await async_client.post(
        "/api/leaves",
        json={"user_id": emp["id"], "start_date": "2024-02-05", "end_date": "2024-02-01"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("decision", ["approved", "rejected"])
async def test_decide_leave(async_client: AsyncClient, decision):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])

    resp = await async_client.post(
        f"/api/leaves/{leave['id']}/approve", json={"status": decision, "approved_by": emp["id"]}
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == decision
    assert resp.json()["approved_by"] == emp["id"]


@pytest.mark.asyncio
async def test_approver_defaults_to_caller(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])

    resp = await async_client.post(f"/api/leaves/{leave['id']}/approve", json={"status": "approved"})
    # The admin principal of the test client has id 1
    assert resp.json()["approved_by"] == 1


@pytest.mark.asyncio
async def test_invalid_decision_leaves_request_untouched(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])

    resp = await async_client.post(f"/api/leaves/{leave['id']}/approve", json={"status": "maybe"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Status must be 'approved' or 'rejected'"

    current = (await async_client.get(f"/api/leaves/{leave['id']}")).json()
    assert current["status"] == "pending"


@pytest.mark.asyncio
async def test_pending_is_not_a_decision(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])

    resp = await async_client.post(f"/api/leaves/{leave['id']}/approve", json={"status": "pending"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_decision_cannot_be_changed(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])
    await async_client.post(f"/api/leaves/{leave['id']}/approve", json={"status": "rejected"})

    resp = await async_client.post(f"/api/leaves/{leave['id']}/approve", json={"status": "approved"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Leave request is already rejected"


@pytest.mark.asyncio
async def test_decide_unknown_leave_is_404(async_client: AsyncClient):
    resp = await async_client.post("/api/leaves/999/approve", json={"status": "approved"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_and_list_leaves(async_client: AsyncClient):
    a = await create_employee(async_client, email="a@example.com", name="A")
    b = await create_employee(async_client, email="b@example.com", name="B")
    leave = await _file_leave(async_client, a["id"])
    await _file_leave(async_client, b["id"])

    resp = await async_client.patch(
        f"/api/leaves/{leave['id']}", json={"end_date": "2024-02-10", "reason": "Family event"}
    )
    assert resp.status_code == 200
    assert resp.json()["end_date"] == "2024-02-10"
    assert resp.json()["status"] == "pending"

    bad = await async_client.patch(f"/api/leaves/{leave['id']}", json={"end_date": "2024-01-01"})
    assert bad.status_code == 400

    mine = (await async_client.get(f"/api/leaves?user_id={a['id']}")).json()
    assert [x["id"] for x in mine] == [leave["id"]]
    assert len((await async_client.get("/api/leaves")).json()) == 2


@pytest.mark.asyncio
async def test_delete_leave(async_client: AsyncClient):
    emp = await create_employee(async_client)
    leave = await _file_leave(async_client, emp["id"])

    resp = await async_client.delete(f"/api/leaves/{leave['id']}")
    assert resp.json() == {"success": True, "message": "Leave request deleted successfully"}
    assert (await async_client.get(f"/api/leaves/{leave['id']}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("start", ["2024-02-01\n", "٢٠٢٤-٠٢-٠١", "2024-2-1"])
async def test_malformed_dates_are_rejected(async_client: AsyncClient, start):
    emp = await create_employee(async_client)
    resp = await async_client.post(
        "/api/leaves", json={"user_id": emp["id"], "start_date": start, "end_date": "2024-02-03"}
    )
    assert resp.status_code == 400
    assert "start_date" in {e["field"] for e in resp.json()["errors"]}
