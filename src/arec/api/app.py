"""FastAPI app with run, SSE streaming and event inspection endpoints."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from arec.config import Settings, load_settings
from arec.errors import ConfigError
from arec.events import RunEvent
from arec.logging import configure_logging, get_logger
from arec.orchestrator.runner import AgentLoop, build_loop
from arec.recording.file_recorder import iter_events, run_events_path


class RunRequest(BaseModel):
    """Run request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    goal: str = Field(min_length=1)
    offline: bool = False
    max_cycles: int | None = Field(default=None, ge=1)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI app."""

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    app = FastAPI(title="arec", version="0.1.0")

    def _loop_for(req: RunRequest) -> AgentLoop:
        try:
            return build_loop(req.goal, settings, offline=req.offline, max_cycles=req.max_cycles)
        except ConfigError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/runs")
    async def runs(req: RunRequest) -> dict:
        logger.info("API run requested", extra={"goal_len": len(req.goal)})
        result = await _loop_for(req).run()
        return result.to_dict()

    @app.post("/runs/stream")
    def runs_stream(req: RunRequest) -> StreamingResponse:
        logger.info("API streaming run requested", extra={"goal_len": len(req.goal)})
        loop = _loop_for(req)

        async def gen() -> AsyncGenerator[bytes, None]:
            async for ev in loop.stream():
                yield f"data: {ev.model_dump_json()}\n\n".encode("utf-8")

        return StreamingResponse(gen(), media_type="text/event-stream")

    @app.get("/runs/{run_id}/events")
    def run_events(run_id: str) -> list[RunEvent]:
        events = list(iter_events(run_events_path(settings.artifacts_dir, run_id)))
        if not events:
            raise HTTPException(status_code=404, detail=f"no recorded events for run {run_id}")
        return events

    return app
