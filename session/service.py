# SPDX-License-Identifier: AGPL-3.0-only

"""
Study session service.

Opens sessions from explain results, manages perspective columns and routes
questions to the chat service. Model calls happen outside the store lock, so
several columns (or several questions in one column) can be in flight at
once; a per-column request counter decides which answer is still wanted.
"""

import logging
from typing import Any, Dict, Optional

from chat.service import ChatService
from common.config import config
from common.errors import NotFoundError
from explain.service import ExplainService
from .context import (
    DEFAULT_PERSPECTIVES,
    EXTRA_PERSPECTIVE_INSTRUCTION,
    MAX_SUGGESTED_FOLLOWUPS,
    PRIMARY_COLUMN_TITLE,
    QUICK_ACTIONS,
    build_context_base,
    clean_answer,
    next_perspective_title,
)
from .models import ChatMsg, Column, StudySession
from .store import SessionStore, sessions as default_store

logger = logging.getLogger(__name__)


class StudySessionService:
    """Service behind the /api/sessions endpoints."""

    def __init__(self, store: Optional[SessionStore] = None, explain_service: Optional[ExplainService] = None,
                 chat_service: Optional[ChatService] = None, history_limit: int = None):
        self.store = store if store is not None else default_store
        self._explain_service = explain_service
        self._chat_service = chat_service
        self.history_limit = config.history_limit if history_limit is None else history_limit

    # Services are created lazily so the store can be used without an API key.
    @property
    def explain_service(self) -> ExplainService:
        if self._explain_service is None:
            self._explain_service = ExplainService()
        return self._explain_service

    @property
    def chat_service(self) -> ChatService:
        if self._chat_service is None:
            self._chat_service = ChatService()
        return self._chat_service

    # ── lifecycle ──────────────────────────────────────────────

    def open_session(self, result: Dict[str, Any]) -> Dict[str, Any]:
        """Create a session with one column per default perspective."""
        columns = [self._new_column(result, p["title"], p["instruction"]) for p in DEFAULT_PERSPECTIVES]
        session = self.store.add(StudySession(result=dict(result), columns=columns))
        logger.info("Opened session %s (%s)", session.id, result.get("category"))
        return session.to_dict()

    def start(self, image_data_url: str, instruction: str = "") -> Dict[str, Any]:
        """Explain a captured region and open a session on the result."""
        return self.open_session(self.explain_service.process(image_data_url, instruction))

    def get(self, session_id: str) -> Dict[str, Any]:
        with self.store.lock:
            return self.store.get(session_id).to_dict()

    def end(self, session_id: str) -> None:
        """Discard the session and all of its columns."""
        self.store.remove(session_id)
        logger.info("Ended session %s", session_id)

    def end_all(self) -> int:
        """Discard every open session; returns how many were closed."""
        count = self.store.clear()
        logger.info("Ended %d session(s)", count)
        return count

    # ── columns ────────────────────────────────────────────────

    def add_perspective(self, session_id: str, title: str = None, instruction: str = None) -> Dict[str, Any]:
        with self.store.lock:
            session = self.store.get(session_id)
            title = (title or "").strip() or next_perspective_title(len(session.columns))
            instruction = (instruction or "").strip() or EXTRA_PERSPECTIVE_INSTRUCTION
            column = self._new_column(session.result, title, instruction)
            session.columns.append(column)
            return column.model_dump()

    def remove_column(self, session_id: str, column_id: str) -> None:
        with self.store.lock:
            session = self.store.get(session_id)
            column = self._column(session, column_id)
            session.columns.remove(column)

    def set_input(self, session_id: str, column_id: str, value: str) -> Dict[str, Any]:
        with self.store.lock:
            column = self._column(self.store.get(session_id), column_id)
            column.input = str(value or "")
            return column.model_dump()

    # ── asking ─────────────────────────────────────────────────

    def ask(self, session_id: str, column_id: str, text: str = None) -> Dict[str, Any]:
        """
        Ask a question in one column.

        `text` defaults to the column's draft input. Returns the column state
        and whether the answer was applied; a reply that was overtaken by a
        newer question in the same column is dropped.
        """
        with self.store.lock:
            session = self.store.get(session_id)
            column = self._column(session, column_id)
            question = str(column.input if text is None else text).strip()
            if not question:
                return {"column": column.model_dump(), "applied": False}

            history = [m.model_dump(include={"role", "text"}) for m in column.chat[-self.history_limit:]]
            column.chat.append(ChatMsg(role="user", text=question))
            column.input = ""
            column.loading = True
            column.request_seq += 1
            my_req = column.request_seq
            context = column.context_base
            session.error = ""

        try:
            reply = self.chat_service.answer(context, question, history)
        except Exception as e:
            with self.store.lock:
                session = self.store.find(session_id)
                column = session.find_column(column_id) if session else None
                if session is not None:
                    session.error = getattr(e, "message", None) or str(e) or "Unknown error"
                if column is not None and column.request_seq == my_req:
                    column.loading = False
            raise

        with self.store.lock:
            session = self.store.find(session_id)
            column = session.find_column(column_id) if session else None
            if column is None:
                logger.info("Dropping answer for closed column %s", column_id)
                return {"column": None, "applied": False}
            if column.request_seq != my_req:
                logger.info("Dropping stale answer %d in column %s (current %d)", my_req, column_id, column.request_seq)
                return {"column": column.model_dump(), "applied": False}

            column.chat.append(ChatMsg(role="assistant", text=clean_answer(reply.get("answer"))))
            column.loading = False
            return {"column": column.model_dump(), "applied": True, "followups": reply.get("followups", [])}

    def quick_action(self, session_id: str, column_id: str, action: str) -> Dict[str, Any]:
        if action not in QUICK_ACTIONS:
            raise NotFoundError(f"Unknown action: {action}")
        return self.ask(session_id, column_id, QUICK_ACTIONS[action])

    def ask_followup(self, session_id: str, index: int) -> Dict[str, Any]:
        """Ask one of the suggested follow-ups in the Explain column (or the first column)."""
        with self.store.lock:
            session = self.store.get(session_id)
            suggested = (session.result.get("followups") or [])[:MAX_SUGGESTED_FOLLOWUPS]
            if not 0 <= index < len(suggested):
                raise NotFoundError("Follow-up not found")
            target = next((c for c in session.columns if c.title == PRIMARY_COLUMN_TITLE), None)
            if target is None and session.columns:
                target = session.columns[0]
            if target is None:
                raise NotFoundError("No column to ask in")
            column_id = target.id
        return self.ask(session_id, column_id, suggested[index])

    # ── helpers ────────────────────────────────────────────────

    @staticmethod
    def _new_column(result: Dict[str, Any], title: str, instruction: str) -> Column:
        return Column(
            title=title,
            instruction=instruction,
            context_base=build_context_base(result, title, instruction),
        )

    @staticmethod
    def _column(session: StudySession, column_id: str) -> Column:
        column = session.find_column(column_id)
        if column is None:
            raise NotFoundError("Column not found")
        return column
