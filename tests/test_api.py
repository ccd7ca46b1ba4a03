from arogya.config import get_settings

from conftest import ASSESSMENT_REPLY


def _start(client) -> str:
    response = client.post("/api/sessions", json={"language": "english"})
    assert response.status_code == 200
    return response.json()["session_id"]


def test_keys_relay(client, monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
    get_settings.cache_clear()

    response = client.get("/api/keys")

    assert response.status_code == 200
    assert response.json() == {"groq": "gsk-test", "perplexity": "", "gemini": ""}


def test_entry_page_for_any_path(client):
    for path in ("/", "/consultation/123"):
        response = client.get(path)
        assert response.status_code == 200
        assert "Dr. Arogya" in response.text


def test_unknown_session_is_404(client):
    assert client.get("/api/sessions/missing").status_code == 404
    response = client.post("/api/sessions/missing/messages", json={"message": "hi"})
    assert response.status_code == 404


def test_close_session(client, service):
    session_id = _start(client)

    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert service.session_count == 0
    assert client.get(f"/api/sessions/{session_id}").status_code == 404
    assert client.delete(f"/api/sessions/{session_id}").status_code == 404


def test_report_before_consultation_is_409(client):
    session_id = _start(client)
    assert client.get(f"/api/sessions/{session_id}").json()["emergency_numbers"] is None
    response = client.get(f"/api/sessions/{session_id}/report")
    assert response.status_code == 409
    assert "consultation" in response.json()["detail"]


def test_consultation_to_download(client, fake_llm):
    fake_llm.replies = [ASSESSMENT_REPLY]
    session_id = _start(client)

    response = client.post(
        f"/api/sessions/{session_id}/messages",
        json={"message": "I have chest pain and a fever since yesterday"},
    )
    body = response.json()
    assert response.status_code == 200
    assert body["emergency"] is True
    assert body["status"]["stage"] == "info_collection"
    assert body["status"]["missing_fields"] == ["name", "age", "gender"]
    assert body["status"]["emergency_numbers"] == "102/108/112"

    response = client.post(
        f"/api/sessions/{session_id}/messages",
        json={"message": "My name is Priya Singh, I'm 29, female"},
    )
    status = response.json()["status"]
    assert status["stage"] == "report_ready"
    assert status["report_generated"] is True
    assert status["patient"]["name"] == "Priya Singh"

    report = client.get(f"/api/sessions/{session_id}/report").json()
    assert report["patient"]["gender"] == "Female"
    assert report["emergency_banner"]

    pdf = client.get(f"/api/sessions/{session_id}/report.pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert "attachment" in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")

    txt = client.get(f"/api/sessions/{session_id}/report.txt")
    assert txt.status_code == 200
    assert "Name: Priya Singh" in txt.text


def test_language_change(client):
    session_id = _start(client)
    response = client.put(f"/api/sessions/{session_id}/language", json={"language": "marathi"})
    body = response.json()
    assert response.status_code == 200
    assert body["greeting"].startswith("नमस्कार")
    assert body["status"]["language"] == "marathi"


def test_empty_message_is_rejected(client):
    session_id = _start(client)
    response = client.post(f"/api/sessions/{session_id}/messages", json={"message": ""})
    assert response.status_code == 422
