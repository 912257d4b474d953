"""FastAPI server that forwards browser actions into the progression controller."""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import uvicorn

from code_archaeology.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from code_archaeology.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from code_archaeology.core.errors import (
    BoardNotActive,
    EraLocked,
    GameError,
    InvalidAnswer,
    InvalidCellPosition,
    QuestionAlreadyAnswered,
    SessionNotActive,
    UnknownEra,
)
from code_archaeology.core.events import (
    AnswerEvaluated,
    TurnResult,
    event_to_dict,
    snapshot_to_dict,
)
from code_archaeology.core.markdown_renderer import renderer
from code_archaeology.core.models import Fragment
from code_archaeology.core.progression_controller import ProgressionController

_STATUS_BY_ERROR: dict[type[GameError], int] = {
    InvalidCellPosition: 422,
    InvalidAnswer: 422,
    UnknownEra: 404,
    EraLocked: 403,
    BoardNotActive: 409,
    SessionNotActive: 409,
    QuestionAlreadyAnswered: 409,
}


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    selected_option_index: int


class EraPayload(BaseModel):
    """Payload schema for era switching."""

    era_id: str


def _get_controller_dependency(controller: ProgressionController):
    def dependency() -> ProgressionController:
        return controller

    return dependency


def _http_error(exc: GameError) -> HTTPException:
    status = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        400,
    )
    return HTTPException(status_code=status, detail=str(exc))


def _fragment_detail(fragment: Fragment, era_id: str) -> dict[str, object]:
    return {
        "id": fragment.id,
        "title": fragment.title,
        "code": fragment.code,
        "code_html": renderer.render_code(fragment.code, era_id),
        "description": fragment.description,
        "description_html": renderer.render_fragment(fragment.description),
    }


def _turn_payload(result: TurnResult) -> dict[str, object]:
    events = []
    for event in result.events:
        payload = event_to_dict(event)
        if isinstance(event, AnswerEvaluated):
            payload["explanation_html"] = renderer.render_fragment(event.feedback.explanation)
        events.append(payload)
    return {
        "events": events,
        "state": snapshot_to_dict(result.snapshot) if result.snapshot is not None else None,
    }


def create_api_app(controller: ProgressionController) -> FastAPI:
    """Create a FastAPI application wired to the provided controller."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    controller_dep = _get_controller_dependency(controller)

    @app.get("/state")
    def get_state(game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        return snapshot_to_dict(game.snapshot())

    @app.post("/cells/{position}")
    def click_cell(position: int, game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        try:
            result = game.cell_clicked(position)
        except GameError as exc:
            raise _http_error(exc) from exc
        return _turn_payload(result)

    @app.get("/cells/{position}")
    def get_fragment(position: int, game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        try:
            fragment = game.open_fragment(position)
        except GameError as exc:
            raise _http_error(exc) from exc
        if fragment is None:
            raise HTTPException(status_code=404, detail="No excavated fragment at this cell.")
        return _fragment_detail(fragment, game.snapshot().current_era)

    @app.post("/answer")
    def submit_answer(
        payload: AnswerPayload,
        game: ProgressionController = Depends(controller_dep),
    ) -> dict[str, object]:
        try:
            result = game.answer_selected(payload.selected_option_index)
        except GameError as exc:
            raise _http_error(exc) from exc
        return _turn_payload(result)

    @app.post("/quiz/next")
    def next_question(game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        try:
            result = game.next_question()
        except GameError as exc:
            raise _http_error(exc) from exc
        return _turn_payload(result)

    @app.post("/era")
    def switch_era(payload: EraPayload, game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        try:
            result = game.switch_era(payload.era_id)
        except GameError as exc:
            raise _http_error(exc) from exc
        return _turn_payload(result)

    @app.post("/board/restart")
    def restart_board(game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        try:
            result = game.restart_board()
        except GameError as exc:
            raise _http_error(exc) from exc
        return _turn_payload(result)

    @app.post("/reset")
    def reset(game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        return _turn_payload(game.reset_all())

    @app.get("/museum")
    def museum(game: ProgressionController = Depends(controller_dep)) -> dict[str, object]:
        catalog = game.get_catalog()
        return {
            era_id: {
                "name": catalog.get(era_id).display_name,
                "fragments": [_fragment_detail(fragment, era_id) for fragment in fragments],
            }
            for era_id, fragments in game.museum().items()
        }

    @app.get("/help")
    def help_text() -> dict[str, str]:
        return {
            "about": APP_ABOUT_TEXT,
            "license": APP_LICENSE,
            "help": HELP_TEXT,
            "help_html": renderer.render_fragment(HELP_TEXT),
        }

    return app


def run_api_server(
    controller: ProgressionController,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the foreground until interrupted."""
    app = create_api_app(controller)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    uvicorn.Server(config).run()
