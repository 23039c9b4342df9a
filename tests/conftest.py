"""
Pytest fixtures for recognition engine tests. Uses a temporary SQLite DB per test.
"""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def recognition_db(tmp_path, monkeypatch):
    """
    Point the engine at a temporary SQLite DB and create tables.
    Resets settings and engine caches so each test gets a fresh DB. Unset DATABASE_URL so we use SQLite.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("RECOGNITION_DB_URL", raising=False)
    monkeypatch.setenv("RECOGNITION_DB_PATH", str(tmp_path / "recognition.db"))

    from recognition_engine.config import reset_settings_cache
    from recognition_engine.database import session as db_session

    reset_settings_cache()
    db_session.reset_engine_for_test()
    db_session.init_db()
    yield db_session
    db_session.reset_engine_for_test()
    reset_settings_cache()


@pytest.fixture
def seed_cycle(recognition_db):
    """
    Factory inserting a cycle with themes, criteria, nominations and votes.

    themes: {theme_id: {"criteria": {criterion_id: weight},
                        "nominations": [{"id", "nominee_id", "nominator_id"?, "status"?}],
                        "votes": [{"nomination_id", "voter_id", "scores": {...}}]}}
    """
    from recognition_engine.database import (
        AwardCycle,
        AwardTheme,
        JudgingCriterion,
        Nomination,
        Vote,
        session_scope,
    )

    def _seed(
        cycle_id: str = "cycle-1",
        themes: dict[str, dict[str, Any]] | None = None,
        *,
        status: str = "voting",
        fairness_config: dict[str, Any] | None = None,
    ) -> str:
        with session_scope() as session:
            session.add(
                AwardCycle(
                    id=cycle_id,
                    tenant_id="tenant-1",
                    status=status,
                    fairness_config=fairness_config,
                )
            )
            for theme_id, theme_def in (themes or {}).items():
                session.add(AwardTheme(id=theme_id, cycle_id=cycle_id, name=theme_def.get("name", theme_id)))
                for criterion_id, weight in theme_def.get("criteria", {}).items():
                    session.add(JudgingCriterion(id=criterion_id, theme_id=theme_id, weight=weight))
                for nom in theme_def.get("nominations", []):
                    session.add(
                        Nomination(
                            id=nom["id"],
                            theme_id=theme_id,
                            nominee_id=nom["nominee_id"],
                            nominator_id=nom.get("nominator_id"),
                            status=nom.get("status", "endorsed"),
                        )
                    )
                for vote in theme_def.get("votes", []):
                    session.add(
                        Vote(
                            nomination_id=vote["nomination_id"],
                            voter_id=vote["voter_id"],
                            criteria_scores=vote["scores"],
                        )
                    )
        return cycle_id

    return _seed


@pytest.fixture
def two_theme_cycle(seed_cycle):
    """Cycle with an 'innovation' theme (3 nominations) and a 'teamwork' theme (2 nominations)."""
    return seed_cycle(
        "cycle-1",
        {
            "innovation": {
                "name": "Innovation",
                "criteria": {"c1": 60, "c2": 40},
                "nominations": [
                    {"id": "n1", "nominee_id": "e1"},
                    {"id": "n2", "nominee_id": "e2"},
                    {"id": "n3", "nominee_id": "e3"},
                    {"id": "n-draft", "nominee_id": "e4", "status": "submitted"},
                ],
                "votes": [
                    {"nomination_id": "n1", "voter_id": "v1", "scores": {"c1": 5, "c2": 3}},
                    {"nomination_id": "n1", "voter_id": "v2", "scores": {"c1": 4, "c2": 4}},
                    {"nomination_id": "n2", "voter_id": "v1", "scores": {"c1": 5, "c2": 5}},
                    {"nomination_id": "n2", "voter_id": "v3", "scores": {"c1": 3, "c2": 4}},
                ],
            },
            "teamwork": {
                "name": "Teamwork",
                "criteria": {"c3": 1},
                "nominations": [
                    {"id": "n4", "nominee_id": "e1"},
                    {"id": "n5", "nominee_id": "e5"},
                ],
                "votes": [
                    {"nomination_id": "n4", "voter_id": "v1", "scores": {"c3": 1}},
                    {"nomination_id": "n5", "voter_id": "v2", "scores": {"c3": 4}},
                ],
            },
        },
        fairness_config={"clique_threshold": 3, "visibility_bias": True},
    )


@pytest.fixture
def client(recognition_db):
    """FastAPI TestClient. Depends on recognition_db so the temp DB is set before the app runs."""
    from fastapi.testclient import TestClient

    from recognition_engine.api_server.server import app

    return TestClient(app)
