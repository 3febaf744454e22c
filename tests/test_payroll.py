"""API tests for payroll generation, finalization and export."""

import logging
import math
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.services import payroll as payroll_service

from conftest import WIB, create_employee, create_position

OFFICE = {"lat": -2.9795731113284303, "lng": 104.73111003716011}


async def _approved_day(client: AsyncClient, clock, user_id: int, day: int = 10) -> None:
    """Clock in 08:15, clock out 17:00 and approve the record."""
    clock.current = datetime(2024, 1, day, 8, 15, tzinfo=WIB)
    resp = await client.post("/api/attendance/clock-in", json={"user_id": user_id, **OFFICE})
    assert resp.status_code == 201, resp.text
    record_id = resp.json()["id"]

    clock.current = datetime(2024, 1, day, 17, 0, tzinfo=WIB)
    resp = await client.post("/api/attendance/clock-out", json={"user_id": user_id, **OFFICE})
    assert resp.status_code == 200, resp.text

    resp = await client.patch(f"/api/attendance/{record_id}", json={"approval_status": "approved"})
    assert resp.status_code == 200, resp.text


@pytest.mark.asyncio
async def test_generate_reference_day(async_client: AsyncClient, clock):
    pos = await create_position(async_client, hourly_rate=20000)
    emp = await create_employee(async_client, position_id=pos["id"])
    await _approved_day(async_client, clock, emp["id"])

    resp = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["count"] == 1

    row = data["payrolls"][0]
    basic = 155000  # 465 paid minutes at 20000/h
    bpjs = math.floor(basic * (0.01 + 0.02))
    pph21 = math.floor(basic * 0.05)
    assert row["user_id"] == emp["id"]
    assert row["period"] == "2024-01"
    assert row["status"] == "draft"
    assert row["basic_salary"] == basic
    assert row["overtime_pay"] == 30000
    assert row["late_deduction"] == 30000
    assert row["bpjs_deduction"] == bpjs
    assert row["pph21_deduction"] == pph21
    assert row["bonus"] == 0
    assert row["other_deduction"] == 0
    assert row["total_net"] == basic + 30000 - 30000 - bpjs - pph21


@pytest.mark.asyncio
async def test_unapproved_and_incomplete_days_are_not_paid(async_client: AsyncClient, clock):
    pos = await create_position(async_client)
    emp = await create_employee(async_client, position_id=pos["id"])

    # Complete but still pending
    await async_client.post("/api/attendance/clock-in", json={"user_id": emp["id"], **OFFICE})
    clock.current = datetime(2024, 1, 10, 16, 0, tzinfo=WIB)
    await async_client.post("/api/attendance/clock-out", json={"user_id": emp["id"], **OFFICE})

    # Approved but never clocked out
    clock.current = datetime(2024, 1, 11, 8, 0, tzinfo=WIB)
    resp = await async_client.post("/api/attendance/clock-in", json={"user_id": emp["id"], **OFFICE})
    await async_client.patch(
        f"/api/attendance/{resp.json()['id']}", json={"approval_status": "approved"}
    )

    resp = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    row = resp.json()["payrolls"][0]
    assert row["basic_salary"] == 0
    assert row["total_net"] == 0


@pytest.mark.asyncio
async def test_days_outside_period_are_ignored(async_client: AsyncClient, clock):
    pos = await create_position(async_client)
    emp = await create_employee(async_client, position_id=pos["id"])
    await _approved_day(async_client, clock, emp["id"])

    resp = await async_client.post("/api/payroll/generate", json={"period": "2024-02"})
    assert resp.json()["payrolls"][0]["basic_salary"] == 0


@pytest.mark.asyncio
async def test_admins_get_no_payroll(async_client: AsyncClient, clock):
    await create_employee(async_client, email="boss@example.com", name="Boss", role="admin")
    emp = await create_employee(async_client)

    resp = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    data = resp.json()
    assert data["count"] == 1
    assert [r["user_id"] for r in data["payrolls"]] == [emp["id"]]


@pytest.mark.asyncio
async def test_employee_without_position_is_paid_zero(async_client: AsyncClient, clock):
    emp = await create_employee(async_client)
    await _approved_day(async_client, clock, emp["id"])

    resp = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    row = resp.json()["payrolls"][0]
    assert row["basic_salary"] == 0
    assert row["overtime_pay"] == 0
    # Lateness is still charged at the flat per-minute penalty
    assert row["late_deduction"] == 30000
    assert row["total_net"] == -30000


@pytest.mark.asyncio
async def test_regenerate_replaces_period_rows(async_client: AsyncClient, clock):
    pos = await create_position(async_client)
    emp = await create_employee(async_client, position_id=pos["id"])
    first = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    payroll_id = first.json()["payrolls"][0]["id"]

    final = await async_client.post(f"/api/payroll/{payroll_id}/finalize")
    assert final.json()["status"] == "final"

    await _approved_day(async_client, clock, emp["id"])
    second = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    assert second.status_code == 201

    rows = (await async_client.get("/api/payroll?period=2024-01")).json()
    assert len(rows) == 1
    assert rows[0]["status"] == "draft"
    assert rows[0]["basic_salary"] == 155000
    assert rows[0]["id"] != payroll_id
    assert (await async_client.get(f"/api/payroll/{payroll_id}")).status_code == 404


@pytest.mark.asyncio
async def test_regenerate_warns_about_finalized_rows(async_client: AsyncClient, clock, caplog):
    await create_employee(async_client)
    first = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    await async_client.post(f"/api/payroll/{first.json()['payrolls'][0]['id']}/finalize")

    with caplog.at_level(logging.WARNING, logger="app.services.payroll"):
        await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    warnings = [
        r.getMessage()
        for r in caplog.records
        if r.name == "app.services.payroll" and r.levelno == logging.WARNING
    ]
    assert warnings == ["Regenerating 2024-01 deletes 1 finalized payroll row(s)"]


@pytest.mark.asyncio
async def test_drafts_only_regeneration_does_not_warn(async_client: AsyncClient, clock, caplog):
    await create_employee(async_client)
    await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    with caplog.at_level(logging.WARNING, logger="app.services.payroll"):
        await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    assert not [
        r for r in caplog.records
        if r.name == "app.services.payroll" and r.levelno == logging.WARNING
    ]


@pytest.mark.asyncio
async def test_generation_logs_minutes_per_employee(async_client: AsyncClient, clock, caplog):
    pos = await create_position(async_client)
    emp = await create_employee(async_client, position_id=pos["id"])
    await _approved_day(async_client, clock, emp["id"])

    with caplog.at_level(logging.DEBUG, logger="app.services.payroll"):
        await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    assert f"user={emp['id']} days=1 work_min=465 late_min=15" in caplog.text


@pytest.mark.asyncio
async def test_failed_generation_keeps_previous_rows(
    async_client: AsyncClient, db_session: AsyncSession, clock, monkeypatch
):
    await create_employee(async_client, email="a@example.com", name="A")
    await create_employee(async_client, email="b@example.com", name="B")
    first = await async_client.post("/api/payroll/generate", json={"period": "2024-01"})
    before = sorted(r["id"] for r in first.json()["payrolls"])
    assert len(before) == 2

    original = payroll_service.compute_payroll
    calls = []

    def fail_on_second_employee(days, hourly_rate, config):
        calls.append(hourly_rate)
        if len(calls) == 2:
            raise RuntimeError("compute failed")
        return original(days, hourly_rate, config)

    monkeypatch.setattr(payroll_service, "compute_payroll", fail_on_second_employee)
    with pytest.raises(RuntimeError):
        await payroll_service.generate_payroll(db_session, "2024-01", clock)
    monkeypatch.undo()

    rows = (await async_client.get("/api/payroll?period=2024-01")).json()
    assert sorted(r["id"] for r in rows) == before


@pytest.mark.asyncio
async def test_regenerate_leaves_other_periods_alone(async_client: AsyncClient, clock):
    emp = await create_employee(async_client)
    resp = await async_client.post(
        "/api/payroll", json={"user_id": emp["id"], "period": "2023-12", "bonus": 500000}
    )
    assert resp.status_code == 201

    await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    december = (await async_client.get("/api/payroll?period=2023-12")).json()
    assert len(december) == 1
    assert december[0]["bonus"] == 500000


@pytest.mark.asyncio
@pytest.mark.parametrize("period", ["2024-1", "January", "", "2024-13", "2024-01\n", "٢٠٢٤-٠١"])
async def test_generate_rejects_bad_period(async_client: AsyncClient, clock, period):
    resp = await async_client.post("/api/payroll/generate", json={"period": period})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Valid period (YYYY-MM) required"


@pytest.mark.asyncio
async def test_duplicate_manual_row_conflicts(async_client: AsyncClient, clock):
    emp = await create_employee(async_client)
    body = {"user_id": emp["id"], "period": "2024-01"}
    assert (await async_client.post("/api/payroll", json=body)).status_code == 201
    assert (await async_client.post("/api/payroll", json=body)).status_code == 409


@pytest.mark.asyncio
async def test_update_and_delete_payroll(async_client: AsyncClient, clock):
    emp = await create_employee(async_client)
    created = (
        await async_client.post("/api/payroll", json={"user_id": emp["id"], "period": "2024-01"})
    ).json()

    resp = await async_client.patch(
        f"/api/payroll/{created['id']}", json={"bonus": 250000, "total_net": 250000}
    )
    assert resp.status_code == 200
    assert resp.json()["bonus"] == 250000

    resp = await async_client.delete(f"/api/payroll/{created['id']}")
    assert resp.json()["success"] is True
    assert (await async_client.get(f"/api/payroll/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_export_csv(async_client: AsyncClient, clock):
    pos = await create_position(async_client)
    emp = await create_employee(async_client, name="Budi, Jr.", position_id=pos["id"])
    await _approved_day(async_client, clock, emp["id"])
    await async_client.post("/api/payroll/generate", json={"period": "2024-01"})

    resp = await async_client.get("/api/payroll/export/csv?period=2024-01")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "payroll_2024-01.csv" in resp.headers["content-disposition"]

    lines = resp.text.strip().split("\n")
    assert lines[0].startswith("id,user_id,name,period,basic_salary")
    assert len(lines) == 2
    assert '"Budi, Jr."' in lines[1]
    assert ",2024-01,155000," in lines[1]


@pytest.mark.asyncio
async def test_export_csv_requires_valid_period(async_client: AsyncClient, clock):
    resp = await async_client.get("/api/payroll/export/csv?period=2024")
    assert resp.status_code == 400
