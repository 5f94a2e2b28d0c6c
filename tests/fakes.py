from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator
from unittest.mock import patch

from resume_ranker.store import score_store


class FakeLLM:
    """In-memory JsonCompleter; answers by purpose and records every prompt."""

    def __init__(self, responses: dict[str, Any] | None = None, error: Exception | None = None):
        self.responses = responses or {}
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def complete_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int = 900,
        purpose: str = "unknown",
    ) -> dict[str, Any] | None:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_output_tokens": max_output_tokens,
                "purpose": purpose,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.get(purpose)


@contextmanager
def temporary_score_store() -> Iterator[str]:
    """Points the score store at a throwaway SQLite file for the duration of the block."""
    with tempfile.TemporaryDirectory() as tmp:
        db_path = os.path.join(tmp, "resume_scores.db")
        with patch.object(score_store, "settings", replace(score_store.settings, scores_db_path=db_path)):
            score_store.close_store()
            try:
                yield db_path
            finally:
                score_store.close_store()
