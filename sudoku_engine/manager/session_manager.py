"""Async manager for many isolated game sessions.

Puzzle generation is CPU bound, so it runs on a worker thread. Asking for a
new game while the previous request for the same session is still generating
abandons the older one; an abandoned generation never touches session state.
"""
from __future__ import annotations

import asyncio
import copy
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np

from sudoku_engine.common.config import Config
from sudoku_engine.common.constants import Difficulty
from sudoku_engine.common.grid import GenerationCancelled
from sudoku_engine.puzzle.generator import GeneratedPuzzle, SudokuGenerator
from sudoku_engine.puzzle.session import GameSession, GameState, NewGame
from sudoku_engine.utils.log import get_logger


@dataclass
class PendingGeneration:
    task: asyncio.Task
    cancel_event: threading.Event
    superseded: bool = False

    def cancel(self) -> None:
        self.superseded = True
        self.cancel_event.set()
        self.task.cancel()


class SessionManager:
    """Holds sessions by id and runs their generation off the event loop."""

    def __init__(self, config: Optional[Config] = None, max_workers: int = 2):
        self.config = config or Config()
        self.sessions: Dict[str, GameSession] = {}
        self.pending: Dict[str, PendingGeneration] = {}
        self.executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="sudoku-generation"
        )
        self.logger = get_logger(__name__)

    def create_session(
        self, session_id: Optional[str] = None, config: Optional[Config] = None
    ) -> str:
        """Register an idle session; call `new_game` to give it a puzzle."""
        session_id = session_id or uuid.uuid4().hex
        if session_id in self.sessions:
            raise KeyError(f"Session {session_id} already exists")
        session_config = copy.deepcopy(config or self.config)
        self.sessions[session_id] = GameSession(config=session_config, start=False)
        self.logger.debug(f"Session {session_id} created")
        return session_id

    def get(self, session_id: str) -> GameSession:
        try:
            return self.sessions[session_id]
        except KeyError:
            raise KeyError(f"Unknown session {session_id}") from None

    def list_sessions(self) -> List[str]:
        return list(self.sessions)

    def is_generating(self, session_id: str) -> bool:
        return session_id in self.pending

    def close_session(self, session_id: str) -> None:
        pending = self.pending.pop(session_id, None)
        if pending is not None:
            pending.cancel()
        self.sessions.pop(session_id, None)
        self.logger.debug(f"Session {session_id} closed")

    async def new_game(
        self,
        session_id: str,
        difficulty: Optional[Union[Difficulty, str]] = None,
        size: Optional[int] = None,
    ) -> Optional[GameState]:
        """Generate a fresh puzzle for the session on a worker thread.

        Returns:
            The new state, or None if a later `new_game` call for the same
            session superseded this one.
        """
        session = self.get(session_id)
        previous = self.pending.get(session_id)
        if previous is not None:
            self.logger.info(f"Session {session_id}: abandoning in-flight generation")
            previous.cancel()

        difficulty = Difficulty(difficulty) if difficulty is not None else session.difficulty
        # child random source drawn here so the worker never shares the session's generator
        rng = np.random.default_rng(int(session.rng.integers(2**62)))
        generator = session.make_generator(size or session.size, rng=rng)
        cancel_event = threading.Event()
        task = asyncio.create_task(self._generate(generator, difficulty, cancel_event))
        pending = PendingGeneration(task=task, cancel_event=cancel_event)
        self.pending[session_id] = pending

        completed = False
        try:
            generated = await task
            completed = True
        except (asyncio.CancelledError, GenerationCancelled):
            if pending.superseded:
                return None
            raise
        finally:
            if not completed:
                # cancelling the task does not stop its worker thread
                pending.cancel_event.set()
            if self.pending.get(session_id) is pending:
                del self.pending[session_id]

        if pending.superseded or self.sessions.get(session_id) is not session:
            return None
        return session.apply(NewGame(puzzle=generated))

    async def _generate(
        self,
        generator: SudokuGenerator,
        difficulty: Difficulty,
        cancel_event: threading.Event,
    ) -> GeneratedPuzzle:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor, generator.generate, difficulty, cancel_event
        )

    async def shutdown(self) -> None:
        pending = list(self.pending.values())
        for item in pending:
            item.cancel()
        if pending:
            await asyncio.gather(*(item.task for item in pending), return_exceptions=True)
        self.pending.clear()
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.logger.info("Session manager stopped")
