"""
Tests for the admin dashboard endpoints.
"""

import csv
import io

from intake import AIAnalysis, Department, Sentiment, Status


def _client(dashboard_app):
    return dashboard_app.app.test_client()


class TestDepartments:
    def test_lists_departments_with_tables(self, dashboard_app):
        data = _client(dashboard_app).get("/departments").get_json()
        assert {"key": "HR", "label": "HR", "table": "Artwin_HR_Feedback"} in data

    def test_unknown_department_is_404(self, dashboard_app):
        resp = _client(dashboard_app).get("/departments/MARKETING/items")
        assert resp.status_code == 404


class TestItems:
    def test_lists_local_items(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)

        data = _client(dashboard_app).get("/departments/hr/items").get_json()

        assert data["table"] == "Artwin_HR_Feedback"
        assert [i["id"] for i in data["items"]] == [item.id]

    def test_status_filter(self, dashboard_app, store, make_item):
        fresh = make_item()
        done = make_item(status=Status.RESOLVED)
        store.append(Department.HR, fresh)
        store.append(Department.HR, done)
        client = _client(dashboard_app)

        for query in ("RESOLVED", "Решена"):
            data = client.get("/departments/HR/items", query_string={"status": query}).get_json()
            assert [i["id"] for i in data["items"]] == [done.id]

        everything = client.get("/departments/HR/items?status=ALL").get_json()
        assert [i["id"] for i in everything["items"]] == [done.id, fresh.id]

    def test_unknown_status_filter_is_400(self, dashboard_app):
        resp = _client(dashboard_app).get("/departments/HR/items?status=Lost")
        assert resp.status_code == 400

    def test_load_refreshes_from_sheet(self, dashboard_app, store, sheets, make_item):
        store.save_sheet_config(Department.HR, sheet_id="sheet123", access_token="tok")
        store.append(Department.HR, make_item(id="local"))
        sheets.fetch_all.return_value = [make_item(id="remote")]

        data = _client(dashboard_app).get("/departments/HR/items").get_json()

        assert [i["id"] for i in data["items"]] == ["remote"]
        assert [i.id for i in store.get_by_department(Department.HR)] == ["remote"]

    def test_change_status(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)

        resp = _client(dashboard_app).patch(
            f"/departments/HR/items/{item.id}/status", json={"status": "RESOLVED"}
        )

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "Решена"
        assert store.get_item(Department.HR, item.id).status == Status.RESOLVED

    def test_change_status_unknown_item(self, dashboard_app):
        resp = _client(dashboard_app).patch("/departments/HR/items/missing/status", json={"status": "RESOLVED"})
        assert resp.status_code == 404

    def test_change_status_invalid_value(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)
        resp = _client(dashboard_app).patch(f"/departments/HR/items/{item.id}/status", json={"status": "Lost"})
        assert resp.status_code == 400

    def test_add_comment(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)

        resp = _client(dashboard_app).post(f"/departments/HR/items/{item.id}/comments", json={"text": "Called them"})

        assert resp.status_code == 201
        assert resp.get_json()["author"] == "HR Админ"
        assert [c.text for c in store.get_item(Department.HR, item.id).comments] == ["Called them"]

    def test_add_blank_comment(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)
        resp = _client(dashboard_app).post(f"/departments/HR/items/{item.id}/comments", json={"text": ""})
        assert resp.status_code == 400


class TestAIEndpoints:
    def test_analyze_with_fallback_assistant(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)

        data = _client(dashboard_app).post(f"/departments/HR/items/{item.id}/analyze").get_json()

        assert data["aiAnalysis"] == {
            "sentiment": "neutral",
            "summary": "AI Analysis unavailable",
            "suggestedAction": "Review manually",
            "urgencyScore": 5,
        }
        saved = store.get_item(Department.HR, item.id)
        assert saved.ai_analysis == AIAnalysis(Sentiment.NEUTRAL, "AI Analysis unavailable", "Review manually", 5)
        assert saved.comments[-1].author == "Claude AI"

    def test_analyze_unknown_item(self, dashboard_app):
        assert _client(dashboard_app).post("/departments/HR/items/missing/analyze").status_code == 404

    def test_draft(self, dashboard_app, store, make_item):
        item = make_item()
        store.append(Department.HR, item)
        data = _client(dashboard_app).post(f"/departments/HR/items/{item.id}/draft").get_json()
        assert data == {"draft": "Service unavailable."}

    def test_report_without_items(self, dashboard_app):
        data = _client(dashboard_app).post("/departments/FINANCE/report").get_json()
        assert data == {"report": "No data available to generate a report."}


class TestSendReport:
    def test_sends_through_notifier(self, dashboard_app):
        dashboard_app.notifier.send_report.return_value = True

        resp = _client(dashboard_app).post("/departments/HR/report/send", json={"report": "All calm"})

        assert resp.get_json() == {"sent": True}
        dashboard_app.notifier.send_report.assert_called_once_with("All calm", Department.HR)

    def test_missing_telegram_config_is_400(self, dashboard_app):
        from intake import ValidationError

        dashboard_app.notifier.send_report.side_effect = ValidationError("Please configure Telegram before sending a report")
        resp = _client(dashboard_app).post("/departments/HR/report/send", json={"report": "All calm"})

        assert resp.status_code == 400
        assert "configure Telegram" in resp.get_json()["error"]

    def test_delivery_failure_is_502(self, dashboard_app):
        dashboard_app.notifier.send_report.return_value = False
        resp = _client(dashboard_app).post("/departments/HR/report/send", json={"report": "All calm"})
        assert resp.status_code == 502

    def test_empty_report_is_400(self, dashboard_app):
        resp = _client(dashboard_app).post("/departments/HR/report/send", json={"report": ""})
        assert resp.status_code == 400


class TestConfig:
    def test_sheet_config_lifecycle(self, dashboard_app, store):
        client = _client(dashboard_app)

        assert client.get("/departments/SUPPLY/sheet-config").get_json() == {
            "connected": False, "defaultTab": "Artwin_Supply_Feedback"
        }

        saved = client.put(
            "/departments/SUPPLY/sheet-config",
            json={"sheetId": "https://docs.google.com/spreadsheets/d/abc123/edit", "accessToken": "tok"},
        ).get_json()
        assert saved == {
            "connected": True, "syncEnabled": True, "sheetId": "abc123", "tabName": "Artwin_Supply_Feedback"
        }

        client.delete("/departments/SUPPLY/sheet-config")
        assert store.get_sheet_config(Department.SUPPLY) is None

    def test_sheet_config_requires_id(self, dashboard_app):
        resp = _client(dashboard_app).put("/departments/HR/sheet-config", json={"sheetId": ""})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Sheet ID is required"

    def test_telegram_config(self, dashboard_app, store):
        client = _client(dashboard_app)
        assert client.get("/telegram-config").get_json() == {"configured": False}

        resp = client.put("/telegram-config", json={"botToken": "123:ABC", "chatId": "42"})

        assert resp.get_json() == {"configured": True, "chatId": "42"}
        assert store.get_telegram_config().bot_token == "123:ABC"

    def test_telegram_config_requires_both(self, dashboard_app):
        resp = _client(dashboard_app).put("/telegram-config", json={"botToken": "123:ABC"})
        assert resp.status_code == 400


class TestExport:
    def test_csv_covers_all_departments(self, dashboard_app, store, make_item):
        store.append(Department.HR, make_item(id="a", created_at=1000))
        store.append(Department.SUPPLY, make_item(id="b", created_at=2000, department=Department.SUPPLY))

        resp = _client(dashboard_app).get("/export.csv")

        assert resp.status_code == 200
        assert "artwin_backup_" in resp.headers["Content-Disposition"]
        text = resp.data.decode("utf-8")
        rows = list(csv.reader(io.StringIO(text[1:])))
        assert rows[0][0] == "ID"
        assert [r[0] for r in rows[1:]] == ["b", "a"]
