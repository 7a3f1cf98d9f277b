from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from app.api.dependencies import get_workspace
from app.main import app
from app.services.answer_generator import GenerationError
from app.services.store import StateStore
from app.services.workspace import AnswerWorkspace


client = TestClient(app)


class FakeGenerator:
    def __init__(self):
        self.calls = []
        self.fail_on = None

    def __call__(self, question, marks, style, custom_instruction=None):
        self.calls.append((question, marks, style, custom_instruction))
        if self.fail_on == len(self.calls):
            raise GenerationError("Failed to generate answer. Please check your connection.")
        return f"1) Point** for {question}"


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def suggester() -> MagicMock:
    return MagicMock(return_value="1. Define OS\n2. Explain paging\n3. Explain deadlock")


@pytest.fixture(autouse=True)
def workspace(tmp_path: Path, generator: FakeGenerator, suggester: MagicMock):
    ws = AnswerWorkspace(StateStore.open(tmp_path), generator=generator, suggester=suggester)
    app.dependency_overrides[get_workspace] = lambda: ws
    try:
        yield ws
    finally:
        app.dependency_overrides.pop(get_workspace, None)


def test_root():
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "operational"


def test_parse_batch():
    response = client.post("/answers/parse", json={"text": "1. Define OS\n2. Define kernel", "batch_mode": True})

    assert response.status_code == 200
    assert response.json() == {"questions": ["1. Define OS", "2. Define kernel"], "count": 2}


def test_generate_single(generator: FakeGenerator):
    response = client.post("/answers/generate", json={"text": "What is a compiler?", "marks": "2"})

    assert response.status_code == 201
    data = response.json()
    assert len(data["answers"]) == 1
    assert data["answers"][0]["marks"] == "2"
    assert data["answers"][0]["style"] == "SPPU Model Answer"
    assert data["current_answer_id"] == data["answers"][0]["id"]
    assert data["history_count"] == 1

    current = client.get("/answers/current").json()
    assert current["id"] == data["current_answer_id"]


def test_generate_batch_order():
    response = client.post(
        "/answers/generate",
        json={"text": "1. Define OS\n2. Define kernel\n3. Explain scheduling", "batch_mode": True},
    )
    answers = response.json()["answers"]

    history = client.get("/answers/history").json()
    assert history["capacity"] == 20
    assert [item["id"] for item in history["items"]] == [a["id"] for a in reversed(answers)]


def test_generate_invalid_question(generator: FakeGenerator):
    response = client.post("/answers/generate", json={"text": "hi"})

    assert response.status_code == 422
    assert response.json()["detail"] == "Please enter a valid question."
    assert generator.calls == []


def test_generate_invalid_marks():
    response = client.post("/answers/generate", json={"text": "What is a compiler?", "marks": "7"})

    assert response.status_code == 422


def test_generate_failure_discards_batch(generator: FakeGenerator):
    generator.fail_on = 2

    response = client.post(
        "/answers/generate",
        json={"text": "1. Define OS\n2. Define kernel\n3. Explain scheduling", "batch_mode": True},
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to generate answer. Please check your connection."
    assert client.get("/answers/history").json()["items"] == []
    assert client.get("/answers/current").status_code == 404


def test_generate_while_in_progress(workspace: AnswerWorkspace):
    workspace._in_progress.acquire()
    try:
        response = client.post("/answers/generate", json={"text": "What is a compiler?"})
    finally:
        workspace._in_progress.release()

    assert response.status_code == 409


def test_delete_history_item():
    answer_id = client.post("/answers/generate", json={"text": "What is a compiler?"}).json()["current_answer_id"]

    assert client.delete(f"/answers/history/{answer_id}").status_code == 204
    assert client.delete(f"/answers/history/{answer_id}").status_code == 404
    assert client.get("/answers/current").status_code == 404


def test_select_answer():
    first = client.post("/answers/generate", json={"text": "What is a compiler?"}).json()["current_answer_id"]
    client.post("/answers/generate", json={"text": "What is an interpreter?"})

    assert client.put(f"/answers/current/{first}").json()["id"] == first
    assert client.get("/answers/current").json()["id"] == first
    assert client.put("/answers/current/missing").status_code == 404


def test_history_digest():
    client.post("/answers/generate", json={"text": "What is a compiler?", "marks": "10"})

    text = client.get("/answers/history/digest").json()["text"]

    assert text.startswith("1. QUESTION: What is a compiler?\n(Marks: 10, Style: SPPU Model Answer)")


@pytest.mark.parametrize(
    "fmt, media_type, magic",
    [
        ("pdf", "application/pdf", b"%PDF"),
        ("docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", b"PK"),
        ("doc", "application/msword", "\ufeff".encode("utf-8")),
    ],
)
def test_export(fmt, media_type, magic):
    answer_id = client.post("/answers/generate", json={"text": "What is a compiler?"}).json()["current_answer_id"]

    response = client.get(f"/answers/{answer_id}/export/{fmt}")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(media_type)
    assert f"SPPU_Answer_{answer_id}.{fmt}" in response.headers["content-disposition"]
    assert response.content.startswith(magic)


def test_export_unknown_answer_or_format():
    assert client.get("/answers/missing/export/pdf").status_code == 404

    answer_id = client.post("/answers/generate", json={"text": "What is a compiler?"}).json()["current_answer_id"]
    assert client.get(f"/answers/{answer_id}/export/odt").status_code == 422


def test_suggest(workspace: AnswerWorkspace):
    response = client.post("/answers/suggest", json={"topic": "Operating Systems"})

    assert response.status_code == 200
    assert response.json()["count"] == 3
    assert workspace.batch_mode is True


def test_suggest_failure(suggester: MagicMock):
    suggester.return_value = ""

    response = client.post("/answers/suggest", json={"topic": "Operating Systems"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to suggest questions."


def test_suggest_blank_topic(suggester: MagicMock):
    assert client.post("/answers/suggest", json={"topic": "  "}).status_code == 422
    suggester.assert_not_called()


def test_generate_uses_suggested_batch(generator: FakeGenerator):
    client.post("/answers/suggest", json={"topic": "Operating Systems"})

    response = client.post("/answers/generate", json={})

    assert response.status_code == 201
    assert [call[0] for call in generator.calls] == ["1. Define OS", "2. Explain paging", "3. Explain deadlock"]
    assert len(response.json()["answers"]) == 3


def test_custom_style_lifecycle(generator: FakeGenerator):
    created = client.post("/styles", json={"name": "Tabular", "instruction": "Answer as a table"})
    assert created.status_code == 201
    style_id = created.json()["id"]

    listing = client.get("/styles").json()
    assert listing["active_style"] == "Tabular"
    assert listing["available"][-1] == "Tabular"

    client.post("/answers/generate", json={"text": "What is a compiler?"})
    assert generator.calls[-1][2:] == ("Tabular", "Answer as a table")

    renamed = client.put(f"/styles/{style_id}", json={"name": "Table Form", "instruction": "Answer as a table"})
    assert renamed.status_code == 200
    assert client.get("/styles/active").json() == {"active_style": "Table Form"}

    assert client.delete(f"/styles/{style_id}").status_code == 204
    assert client.get("/styles/active").json() == {"active_style": "SPPU Model Answer"}
    assert client.delete(f"/styles/{style_id}").status_code == 404


def test_custom_style_validation():
    response = client.post("/styles", json={"name": "  ", "instruction": "Answer as a table"})

    assert response.status_code == 422
    assert client.get("/styles").json()["custom_styles"] == []


def test_set_active_style():
    assert client.put("/styles/active", json={"style": "Brief"}).json() == {"active_style": "Brief"}
    assert client.put("/styles/active", json={"style": "Unknown"}).status_code == 404


def test_theme():
    assert client.get("/styles/theme").json() == {"theme": "light"}
    assert client.put("/styles/theme", json={"theme": "dark"}).json() == {"theme": "dark"}
    assert client.put("/styles/theme", json={"theme": "sepia"}).status_code == 422
