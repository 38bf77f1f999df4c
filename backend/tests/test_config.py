"""
Tests for environment-driven settings and trace sinks.
"""
from __future__ import annotations

import logging
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from backend import config
from backend.apa.rack_session import RackScoringSession
from backend.apa.schemas import MatchContext, OneAwayScope
from backend.apa.trace import LoggingTraceSink, RecordingTraceSink, TraceEvent


def _context() -> MatchContext:
    return MatchContext(player1_current_points=0, player2_current_points=0, player1_target=31, player2_target=31)


class TestOneAwayScopeSetting:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("APA_ONE_AWAY_SCOPE", raising=False)
        assert config.one_away_scope() is OneAwayScope.PLAYER

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("APA_ONE_AWAY_SCOPE", "Target")
        assert config.one_away_scope() is OneAwayScope.TARGET

    def test_unknown_falls_back_with_warning(self, monkeypatch, caplog):
        monkeypatch.setenv("APA_ONE_AWAY_SCOPE", "table")
        with caplog.at_level(logging.WARNING, logger="backend.config"):
            assert config.one_away_scope() is OneAwayScope.PLAYER
        assert "APA_ONE_AWAY_SCOPE" in caplog.text

    def test_session_uses_env_default(self, monkeypatch):
        monkeypatch.setenv("APA_ONE_AWAY_SCOPE", "rack")
        session = RackScoringSession(_context(), lambda r: None)
        assert session.one_away_scope is OneAwayScope.RACK


class TestTraceSetting:
    def test_trace_off_by_default(self, monkeypatch):
        monkeypatch.delenv("APA_TRACE", raising=False)
        assert not config.trace_enabled()
        assert RackScoringSession(_context(), lambda r: None).trace is None

    def test_trace_on_attaches_logging_sink(self, monkeypatch, caplog):
        monkeypatch.setenv("APA_TRACE", "1")
        session = RackScoringSession(_context(), lambda r: None)
        assert isinstance(session.trace, LoggingTraceSink)
        with caplog.at_level(logging.DEBUG, logger="backend.apa.trace"):
            session.click_ball(1)
        assert "ball_click" in caplog.text

    def test_injected_sink_wins(self, monkeypatch):
        monkeypatch.setenv("APA_TRACE", "1")
        sink = RecordingTraceSink()
        session = RackScoringSession(_context(), lambda r: None, trace=sink)
        session.click_ball(1)
        assert sink.kinds() == ["ball_click"]
        assert sink.events[0] == TraceEvent(
            "ball_click", 1, {"ball": 1, "state": "unscored", "player": "A", "dead_ball_mode": False}
        )
        sink.clear()
        assert sink.events == []


class TestCorsOrigins:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("APA_CORS_ORIGINS", raising=False)
        assert config.cors_origins() == list(config.DEFAULT_CORS_ORIGINS)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("APA_CORS_ORIGINS", "https://a.example, https://b.example,")
        assert config.cors_origins() == ["https://a.example", "https://b.example"]
