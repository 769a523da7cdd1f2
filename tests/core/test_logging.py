from __future__ import annotations

from uuid import uuid4

import structlog

from rankvote.core.logging import (
    bind_tournament_context,
    clear_tournament_context,
    configure_logging,
)


def test_configure_logging_renders_json_with_context() -> None:
    configure_logging("DEBUG")
    processors = structlog.get_config()["processors"]

    assert processors[0] is structlog.contextvars.merge_contextvars
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_configure_logging_console_renderer() -> None:
    configure_logging("INFO", json_output=False)

    assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
    configure_logging("INFO")


def test_tournament_context_is_bound_and_cleared() -> None:
    tournament_id = uuid4()

    bind_tournament_context(tournament_id)
    assert structlog.contextvars.get_contextvars()["tournament_id"] == str(tournament_id)

    clear_tournament_context()
    assert "tournament_id" not in structlog.contextvars.get_contextvars()
