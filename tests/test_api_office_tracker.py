"""API tests for the office tracker endpoints."""

from datetime import date

from conftest import make_token

BASE = "/api/v1/office-tracker"
FEB = f"{BASE}/2026-02"
APR = f"{BASE}/2026-04"

# Weekdays of February 2026 (the 1st is a Sunday)
FEB_WEEKDAYS = [
    f"2026-02-{d:02d}"
    for d in range(1, 29)
    if date(2026, 2, d).weekday() < 5
]


def _full_month(office_days, pct=60, excluded=None):
    return {
        "required_percentage": pct,
        "exclude_weekends": True,
        "exclude_bank_holidays": True,
        "office_days": office_days,
        "excluded_days": excluded or {},
    }


class TestAuth:
    async def test_requires_token(self, client):
        resp = await client.get(FEB)
        assert resp.status_code == 401

    async def test_rejects_foreign_signature(self, client):
        token = make_token("intruder", secret="not-the-right-key")
        resp = await client.get(FEB, headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestMonth:
    async def test_defaults_for_untracked_month(self, client, signed_in_user):
        resp = await client.get(FEB, headers=signed_in_user["headers"])
        assert resp.status_code == 200
        data = resp.json()
        assert data["month_label"] == "February 2026"
        assert data["record"]["required_percentage"] == 60
        assert data["record"]["office_days"] == []
        compliance = data["compliance"]
        assert compliance["range_label"] == "1 Feb 2026 – 28 Feb 2026"
        assert compliance["weekend_count"] == 8
        assert compliance["working_days"] == 20
        assert compliance["required_office_days"] == 12
        assert compliance["selected_office_days"] == 0
        assert compliance["status"] == "not-meeting"

    async def test_invalid_month_key(self, client, signed_in_user):
        resp = await client.get(f"{BASE}/2026-13", headers=signed_in_user["headers"])
        assert resp.status_code == 422

    async def test_year_zero_rejected(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.get(f"{BASE}/0000-01", headers=headers)
        assert resp.status_code == 422
        resp = await client.get(f"{BASE}/0000-01/calendar", headers=headers)
        assert resp.status_code == 422

    async def test_last_month_without_full_grid_rejected(self, client, signed_in_user):
        resp = await client.get(f"{BASE}/9999-12", headers=signed_in_user["headers"])
        assert resp.status_code == 422

    async def test_save_and_reload(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.put(FEB, json=_full_month(FEB_WEEKDAYS[:12]), headers=headers)
        assert resp.status_code == 200
        assert resp.json()["compliance"]["status"] == "on-track"
        assert resp.json()["compliance"]["progress_percentage"] == 100

        resp = await client.get(FEB, headers=headers)
        assert resp.json()["record"]["office_days"] == FEB_WEEKDAYS[:12]

        resp = await client.get(f"{BASE}/", headers=headers)
        assert resp.json() == ["2026-02"]

    async def test_at_risk(self, client, signed_in_user):
        resp = await client.put(
            FEB, json=_full_month(FEB_WEEKDAYS[:9]), headers=signed_in_user["headers"]
        )
        assert resp.json()["compliance"]["status"] == "at-risk"
        assert resp.json()["compliance"]["progress_percentage"] == 75

    async def test_overlap_rejected(self, client, signed_in_user):
        day = FEB_WEEKDAYS[0]
        resp = await client.put(
            FEB,
            json=_full_month([day], excluded={day: "excluded"}),
            headers=signed_in_user["headers"],
        )
        assert resp.status_code == 422

    async def test_users_are_isolated(self, client, signed_in_user):
        await client.put(FEB, json=_full_month(FEB_WEEKDAYS[:3]), headers=signed_in_user["headers"])
        other = {"Authorization": f"Bearer {make_token('someone-else')}"}
        resp = await client.get(FEB, headers=other)
        assert resp.json()["record"]["office_days"] == []


class TestSettings:
    async def test_zero_percent_is_on_track(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        await client.put(FEB, json=_full_month(FEB_WEEKDAYS[:2]), headers=headers)
        resp = await client.patch(f"{FEB}/settings", json={"required_percentage": 0}, headers=headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["record"]["office_days"] == FEB_WEEKDAYS[:2]
        assert data["compliance"]["required_office_days"] == 0
        assert data["compliance"]["status"] == "on-track"

    async def test_bank_holiday_toggle(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.get(APR, headers=headers)
        assert resp.json()["compliance"]["bank_holiday_count"] == 2
        assert resp.json()["compliance"]["working_days"] == 20

        resp = await client.patch(
            f"{APR}/settings", json={"exclude_bank_holidays": False}, headers=headers
        )
        assert resp.json()["compliance"]["bank_holiday_count"] == 0
        assert resp.json()["compliance"]["working_days"] == 22

    async def test_percentage_out_of_range(self, client, signed_in_user):
        resp = await client.patch(
            f"{FEB}/settings", json={"required_percentage": 101}, headers=signed_in_user["headers"]
        )
        assert resp.status_code == 422


class TestInteractions:
    async def test_tap_toggles_office_day(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.post(f"{FEB}/days/2026-02-02/tap", headers=headers)
        assert resp.json()["record"]["office_days"] == ["2026-02-02"]
        resp = await client.post(f"{FEB}/days/2026-02-02/tap", headers=headers)
        assert resp.json()["record"]["office_days"] == []

    async def test_tap_on_weekend_is_ignored(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.post(f"{FEB}/days/2026-02-07/tap", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["record"]["office_days"] == []
        resp = await client.get(f"{BASE}/", headers=headers)
        assert resp.json() == []

    async def test_tap_outside_month(self, client, signed_in_user):
        resp = await client.post(f"{FEB}/days/2026-03-02/tap", headers=signed_in_user["headers"])
        assert resp.status_code == 422

    async def test_hold_excludes_and_drops_mark(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        await client.post(f"{FEB}/days/2026-02-02/tap", headers=headers)
        resp = await client.post(f"{FEB}/days/2026-02-02/hold", headers=headers)
        data = resp.json()
        assert data["record"]["office_days"] == []
        assert data["record"]["excluded_days"] == {"2026-02-02": "excluded"}
        assert data["compliance"]["manual_excluded_count"] == 1
        assert data["compliance"]["working_days"] == 19

    async def test_tap_clears_exclusion(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        await client.post(f"{FEB}/days/2026-02-02/hold", headers=headers)
        resp = await client.post(f"{FEB}/days/2026-02-02/tap", headers=headers)
        data = resp.json()
        assert data["record"]["excluded_days"] == {}
        assert data["record"]["office_days"] == []

    async def test_exclusion_endpoints(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        await client.post(f"{FEB}/days/2026-02-03/tap", headers=headers)
        resp = await client.post(
            f"{FEB}/exclusions", json={"date": "2026-02-03", "type": "holiday"}, headers=headers
        )
        assert resp.json()["record"]["excluded_days"] == {"2026-02-03": "holiday"}
        assert resp.json()["record"]["office_days"] == []

        resp = await client.delete(f"{FEB}/exclusions/2026-02-03", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["record"]["excluded_days"] == {}
        assert resp.json()["record"]["office_days"] == []

        resp = await client.delete(f"{FEB}/exclusions/2026-02-03", headers=headers)
        assert resp.status_code == 404

    async def test_mark_today(self, client, signed_in_user):
        today = date.today()
        url = f"{BASE}/{today:%Y-%m}/mark-today"
        resp = await client.post(url, headers=signed_in_user["headers"])
        assert resp.status_code == 200
        assert resp.json()["record"]["office_days"] == [today.isoformat()]

    async def test_mark_today_in_other_month(self, client, signed_in_user):
        resp = await client.post(f"{BASE}/2020-01/mark-today", headers=signed_in_user["headers"])
        assert resp.status_code == 409


class TestLeaveOverlay:
    async def test_booked_leave_shrinks_pool(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        resp = await client.post(
            "/api/v1/leave/entries",
            json={"from_date": "2026-02-02", "to_date": "2026-02-06"},
            headers=headers,
        )
        assert resp.status_code == 201

        resp = await client.get(FEB, headers=headers)
        compliance = resp.json()["compliance"]
        assert compliance["leave_excluded_count"] == 5
        assert compliance["working_days"] == 15
        assert compliance["required_office_days"] == 9

        resp = await client.get(FEB, params={"overlay_leave": False}, headers=headers)
        assert resp.json()["compliance"]["leave_excluded_count"] == 0
        assert resp.json()["compliance"]["working_days"] == 20

    async def test_booking_across_months_counts_only_this_month(self, client, signed_in_user):
        headers = signed_in_user["headers"]
        await client.post(
            "/api/v1/leave/entries",
            json={"from_date": "2026-01-19", "to_date": "2026-02-06"},
            headers=headers,
        )
        resp = await client.get(FEB, headers=headers)
        assert resp.json()["compliance"]["leave_excluded_count"] == 5

        resp = await client.get(f"{FEB}/calendar", headers=headers)
        statuses = {c["date"]: c["status"] for c in resp.json()["cells"] if c["date"]}
        assert statuses["2026-02-06"] == "leave"
        assert statuses["2026-02-09"] == "home"


class TestCalendar:
    async def test_february_grid(self, client, signed_in_user):
        resp = await client.get(f"{FEB}/calendar", headers=signed_in_user["headers"])
        assert resp.status_code == 200
        data = resp.json()
        assert data["day_headers"] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        cells = data["cells"]
        assert len(cells) == 35
        assert all(c["date"] is None for c in cells[:6])
        assert cells[6]["date"] == "2026-02-01"
        assert cells[6]["status"] == "weekend"
        assert cells[6]["interactive"] is False
        assert cells[7]["status"] == "home"
        assert cells[7]["interactive"] is True

    async def test_bank_holiday_cell(self, client, signed_in_user):
        resp = await client.get(f"{APR}/calendar", headers=signed_in_user["headers"])
        good_friday = next(c for c in resp.json()["cells"] if c["date"] == "2026-04-03")
        assert good_friday["status"] == "holiday"
        assert good_friday["bank_holiday_name"] == "Good Friday"
        assert good_friday["interactive"] is False
