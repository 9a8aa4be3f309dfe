import asyncio
from typing import List
from battle.engine import Engine, Phase
from battle.model import Event
from .eventlog import EventLog
from .schemas import RunnerSettings


class BattleRunner:
    """Async driver that plays a battle one round at a time.

    Stopping the runner cancels its task; the cancellation lands between
    rounds, never in the middle of one.
    """

    def __init__(self, engine: Engine, round_delay_ms: int = 0):
        self.engine = engine
        self.round_delay_ms = round_delay_ms
        self.sleep_s = round_delay_ms / 1000.0
        self.events = EventLog()
        self._task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, engine: Engine, settings: RunnerSettings) -> "BattleRunner":
        return cls(engine, round_delay_ms=settings.round_delay_ms)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the round loop."""
        if self._task:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the round loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            print(f"[BattleRunner] Stopped after round {self.engine.round_no}")
        self._task = None

    async def wait(self) -> Engine:
        """Wait for the battle to finish and return the engine."""
        if self._task:
            await self._task
        return self.engine

    async def _loop(self):
        """Main round loop - play a round, log its events, yield."""
        while self.engine.phase is not Phase.BATTLE_OVER:
            evts: List[Event] = self.engine.play_round()
            if evts:
                print(f"[BattleRunner] Round {self.engine.round_no} produced {len(evts)} events")
            self.events.append_many(evts)
            await asyncio.sleep(self.sleep_s)
        print(f"[BattleRunner] Battle over after {self.engine.round_no} rounds, winner: {self.engine.winner}")
