"""
API tests for the attendance ledger backend.

Run with:
    python3 -m pytest api/test_api.py -v
"""

from fastapi.testclient import TestClient

from api.main import app

client = TestClient(app)

PICKUPS = "Approve Reject John Smith Monday, January 12, 2026 5:15pm - 9:05pm Door Host\n"

CALLOFFS = (
    "Approve Deny John Smith Monday, January 5, 2026 6:00pm - 9:00pm Published can't make it Jan-4-9:00a\n"
    "Approve Deny Jane Doe Wednesday, January 7, 2026 6:00pm - 9:00pm Published running a fever Jan-7-3:00p\n"
)

GRID_TSV = b"Name\t1/5/2026\t1/10/2026\nSmith, John\tNS/LC\tNS/NC\n"
SUMMARY_TSV = b"Name\tNS/C\tNS/LC\tNS/NC\tTotal\nSmith, John\t0\t1\t1\t5\nDoe, Jane\t0\t0\t0\t0\n"
WORKOFF_TSV = b"Full Name\tDate\t\tPartial Name\tDate\nSmith, John\t1/12/2026\t\t\t\n"


# ============================================================================
# 1. Health
# ============================================================================

class TestHealth:

    def test_health(self):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


# ============================================================================
# 2. Ledger
# ============================================================================

class TestLedgerEndpoint:

    def test_ledger(self):
        response = client.post("/api/ledger", data={
            "pickup_text": PICKUPS,
            "calloff_text": CALLOFFS,
            "now": "2026-01-04T12:00:00",
        })
        assert response.status_code == 200
        data = response.json()
        assert [row["code"] for row in data["rows"]] == ["NS/LC", "NS/S", "WO Host"]
        assert [row["bucket"] for row in data["rows"]] == ["infraction", "sick", "work_off"]
        assert [row["cancelled"] for row in data["rows"]] == [True, False, True]
        assert data["rows"][1]["requested_at"] == "2026-01-07T15:00:00"
        assert data["summary"]["points"] == 0
        assert "cell_plan" not in data

    def test_policy_fields(self):
        response = client.post("/api/ledger", data={
            "calloff_text": CALLOFFS,
            "notice_window_hours": "24",
            "now": "2026-01-04T12:00:00",
        })
        assert response.status_code == 200
        assert response.json()["rows"][0]["code"] == "NS/C"

    def test_grid_text_adds_cell_plan(self):
        response = client.post("/api/ledger", data={
            "calloff_text": CALLOFFS,
            "grid_text": "Name\t1/5/2026\nSmith, John\t\n",
        })
        plan = response.json()["cell_plan"]
        assert plan["writes"][0]["employee_name"] == "Smith, John"
        assert plan["missing_employees"] == ["Doe, Jane"]

    def test_empty_pages(self):
        response = client.post("/api/ledger", data={"pickup_text": "  ", "calloff_text": ""})
        assert response.status_code == 400

    def test_notice_window_out_of_range(self):
        response = client.post("/api/ledger", data={"calloff_text": CALLOFFS, "notice_window_hours": "100"})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["context"]["field"] == "notice_window_hours"

    def test_bad_now(self):
        response = client.post("/api/ledger", data={"calloff_text": CALLOFFS, "now": "yesterday"})
        assert response.status_code == 422


# ============================================================================
# 3. Notices
# ============================================================================

class TestNoticesEndpoint:

    def _post(self, files, **fields):
        data = {"now": "2026-02-01T09:00:00", **fields}
        return client.post("/api/notices", data=data, files=files)

    def test_notices(self):
        response = self._post(
            {
                "grid_file": ("grid.tsv", GRID_TSV, "text/tab-separated-values"),
                "summary_file": ("summary.tsv", SUMMARY_TSV, "text/tab-separated-values"),
                "workoff_file": ("workoffs.tsv", WORKOFF_TSV, "text/tab-separated-values"),
            },
            manager_display_name="Pat Lee",
        )
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        notice = data["notices"][0]
        assert notice["name"] == "Smith, John"
        assert notice["first_name"] == "John"
        assert notice["total_points"] == 5
        assert [(line["date"], line["points"], line["status"]) for line in notice["lines"]] == [
            ("2026-01-05", 1, "(already made up)"),
            ("2026-01-10", 3, "(can no longer make up at this time)"),
        ]
        assert notice["body"].endswith("Thank you,\nPat Lee")

    def test_workoff_file_optional(self):
        response = self._post({
            "grid_file": ("grid.tsv", GRID_TSV, "text/plain"),
            "summary_file": ("summary.tsv", SUMMARY_TSV, "text/plain"),
        })
        assert response.status_code == 200
        lines = response.json()["notices"][0]["lines"]
        assert all(line["status"] == "(can no longer make up at this time)" for line in lines)

    def test_unsupported_upload(self):
        response = self._post({
            "grid_file": ("grid.pdf", b"%PDF-1.4", "application/pdf"),
            "summary_file": ("summary.tsv", SUMMARY_TSV, "text/plain"),
        })
        assert response.status_code == 400

    def test_summary_required(self):
        response = self._post({"grid_file": ("grid.tsv", GRID_TSV, "text/plain")})
        assert response.status_code == 422
