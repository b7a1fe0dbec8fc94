import asyncio
import logging
from enum import Enum
from typing import Callable, Protocol

from yomiage.middleware.metrics import READOUTS, TUNING_TIER
from yomiage.services.tuning import SynthesisParameters, base_parameters, tune

logger = logging.getLogger("yomiage")


class ReadoutState(str, Enum):
    IDLE = "idle"
    SYNTHESIZING = "synthesizing"
    PLAYING = "playing"


class BusyPolicy(str, Enum):
    CANCEL = "cancel"
    REJECT = "reject"


class ReadoutBusyError(Exception):
    pass


class Synthesizer(Protocol):
    async def synthesize(self, text: str, params: SynthesisParameters) -> bytes: ...


class Player(Protocol):
    def play(self, audio: bytes, on_finished: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def is_playing(self) -> bool: ...


class ReadoutController:
    """Single-flight synthesis and playback of one phrase at a time.

    IDLE -> SYNTHESIZING -> PLAYING -> IDLE. Leaving PLAYING only happens
    through the player's completion callback or stop(); callbacks from an
    utterance that has since been stopped are ignored.
    """

    def __init__(
        self,
        synthesizer: Synthesizer,
        player: Player,
        policy: BusyPolicy = BusyPolicy.CANCEL,
        reference_duration_s: float = 10.0,
    ):
        self._synthesizer = synthesizer
        self._player = player
        self._policy = BusyPolicy(policy)
        self._reference_duration_s = reference_duration_s
        self._state = ReadoutState.IDLE
        self._generation = 0
        self._synthesis: asyncio.Future | None = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._player_lock = asyncio.Lock()
        self._last_parameters: SynthesisParameters | None = None

    @property
    def state(self) -> ReadoutState:
        return self._state

    @property
    def policy(self) -> BusyPolicy:
        return self._policy

    @property
    def last_parameters(self) -> SynthesisParameters | None:
        """Parameters sent with the most recent speak() call."""
        return self._last_parameters

    @property
    def is_speaking(self) -> bool:
        return self._state is not ReadoutState.IDLE

    def _transition(self, state: ReadoutState):
        if state is self._state:
            return
        logger.debug("Readout: %s -> %s", self._state.value, state.value)
        self._state = state
        if state is ReadoutState.IDLE:
            self._idle.set()
        else:
            self._idle.clear()

    def parameters_for(
        self, text: str, duration_s: float | None = None
    ) -> SynthesisParameters:
        base = base_parameters(duration_s, self._reference_duration_s)
        return tune(text, base)

    async def speak(self, text: str, duration_s: float | None = None) -> bool:
        """Synthesize and start playing ``text``.

        Returns False if the utterance was superseded by stop() before it
        reached the player. Synthesis and playback errors propagate after
        the controller is back in IDLE.
        """
        if self.is_speaking:
            if self._policy is BusyPolicy.REJECT:
                READOUTS.labels(outcome="rejected").inc()
                raise ReadoutBusyError(f"Readout already {self._state.value}")
            logger.info("Readout busy (%s), cancelling previous", self._state.value)
            self.stop()

        self._loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation

        params = self.parameters_for(text, duration_s)
        self._last_parameters = params
        TUNING_TIER.labels(tier=str(params.tier)).inc()

        self._transition(ReadoutState.SYNTHESIZING)
        synthesis = asyncio.ensure_future(self._synthesizer.synthesize(text, params))
        self._synthesis = synthesis
        try:
            audio = await synthesis
        except asyncio.CancelledError:
            if generation != self._generation:
                READOUTS.labels(outcome="superseded").inc()
                return False
            self._transition(ReadoutState.IDLE)
            raise
        except Exception:
            if generation == self._generation:
                self._transition(ReadoutState.IDLE)
            READOUTS.labels(outcome="synthesis_failed").inc()
            raise
        finally:
            if self._synthesis is synthesis:
                self._synthesis = None

        if generation != self._generation:
            READOUTS.labels(outcome="superseded").inc()
            return False

        self._transition(ReadoutState.PLAYING)
        # one play() at a time; stop() may land while it runs in the thread
        async with self._player_lock:
            if generation != self._generation:
                READOUTS.labels(outcome="superseded").inc()
                return False
            try:
                await asyncio.to_thread(
                    self._player.play,
                    audio,
                    lambda: self._finished_threadsafe(generation),
                )
            except Exception:
                if generation == self._generation:
                    self._transition(ReadoutState.IDLE)
                READOUTS.labels(outcome="playback_failed").inc()
                raise
            if generation != self._generation:
                self._player.stop()
                READOUTS.labels(outcome="superseded").inc()
                return False
        return True

    def _finished_threadsafe(self, generation: int):
        # Players may call back from their own thread
        self._loop.call_soon_threadsafe(self._on_finished, generation)

    def _on_finished(self, generation: int):
        if generation != self._generation:
            logger.debug("Ignoring completion of stopped readout #%d", generation)
            return
        READOUTS.labels(outcome="completed").inc()
        self._transition(ReadoutState.IDLE)

    def stop(self):
        """Cancel any in-flight synthesis and stop playback."""
        self._generation += 1
        if self._synthesis is not None and not self._synthesis.done():
            self._synthesis.cancel()
        self._synthesis = None
        if self._state is ReadoutState.PLAYING or self._player.is_playing():
            self._player.stop()
        self._transition(ReadoutState.IDLE)

    async def wait_until_idle(self):
        await self._idle.wait()
