import pytest
from fastapi.testclient import TestClient

from code_archaeology.core.models import GamePhase
from code_archaeology.core.progression_controller import ProgressionController
from code_archaeology.server.api_server import create_api_app

from conftest import dig_out_board


@pytest.fixture
def client(controller: ProgressionController) -> TestClient:
    return TestClient(create_api_app(controller))


def test_state_describes_a_fresh_game(client: TestClient) -> None:
    response = client.get("/state")
    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "digging"
    assert body["current_era"] == "fortran"
    assert body["unlocked_eras"] == ["fortran"]
    assert len(body["cells"]) == 12
    assert body["question"] is None


def test_digging_returns_events_and_state(client: TestClient) -> None:
    response = client.post("/cells/0")
    assert response.status_code == 200
    body = response.json()
    assert body["events"][0]["type"] == "FragmentFound"
    assert body["events"][0]["fragment"]["id"].startswith("fortran-")
    assert body["state"]["fragments_found"] == [0]

    detail = client.get("/cells/0").json()
    assert 'class="language-fortran"' in detail["code_html"]
    assert detail["description_html"].startswith("<p>")


def test_hidden_cell_has_no_fragment(client: TestClient) -> None:
    assert client.get("/cells/5").status_code == 404


@pytest.mark.parametrize(
    "method, path, payload, status",
    [
        ("post", "/cells/99", None, 422),
        ("post", "/era", {"era_id": "python"}, 403),
        ("post", "/era", {"era_id": "cobol"}, 404),
        ("post", "/answer", {"selected_option_index": 0}, 409),
        ("post", "/quiz/next", None, 409),
    ],
)
def test_rejected_actions_map_to_http_errors(
    client: TestClient, method: str, path: str, payload: dict | None, status: int
) -> None:
    before = client.get("/state").json()
    response = getattr(client, method)(path, json=payload)
    assert response.status_code == status
    assert response.json()["detail"]
    assert client.get("/state").json() == before


def test_quiz_round_trip_over_http(client: TestClient, controller: ProgressionController, catalog) -> None:
    dig_out_board(controller)
    state = client.get("/state").json()
    assert state["phase"] == GamePhase.QUIZZING.value
    question = state["question"]
    fragment = next(f for f in catalog.fragments("fortran") if f.id == question["fragment_id"])

    answered = client.post("/answer", json={"selected_option_index": fragment.question.correct_index}).json()
    event = answered["events"][0]
    assert event["type"] == "AnswerEvaluated"
    assert event["points_awarded"] == 10
    assert event["explanation_html"].startswith("<p>")
    assert answered["state"]["score"] == 10

    again = client.post("/answer", json={"selected_option_index": 0})
    assert again.status_code == 409

    following = client.post("/quiz/next").json()
    assert following["events"][0]["type"] == "NextQuestion"


def test_museum_lists_discoveries_per_era(client: TestClient) -> None:
    client.post("/cells/0")
    museum = client.get("/museum").json()
    assert list(museum) == ["fortran", "c", "python"]
    assert museum["fortran"]["name"] == "FORTRAN (1957)"
    assert len(museum["fortran"]["fragments"]) == 1
    assert museum["c"]["fragments"] == []


def test_reset_and_restart(client: TestClient) -> None:
    client.post("/cells/0")
    restarted = client.post("/board/restart").json()
    assert restarted["events"][0] == {"type": "BoardReset", "era_id": "fortran", "reason": "restart"}

    reset = client.post("/reset").json()
    assert reset["events"] == [{"type": "ProgressReset"}]
    assert reset["state"]["score"] == 0


def test_help_is_rendered(client: TestClient) -> None:
    body = client.get("/help").json()
    assert body["help"]
    assert body["help_html"].startswith("<")
