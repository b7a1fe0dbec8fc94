import io
import logging
import threading
from typing import Callable, Optional

import numpy as np
import pyaudio
import soundfile as sf

from yomiage.services.audio import PlaybackError

logger = logging.getLogger("yomiage")

CHUNK_FRAMES = 1024


class PyAudioPlayer:
    """Plays WAV bytes on the default output device from a worker thread.

    ``on_finished`` fires once the last frame has been written. It does not
    fire for playback cut short by stop().
    """

    def __init__(self, chunk_frames: int = CHUNK_FRAMES):
        self.chunk_frames = chunk_frames
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._pyaudio: Optional[pyaudio.PyAudio] = None

    def _ensure_backend(self) -> pyaudio.PyAudio:
        if self._pyaudio is None:
            self._pyaudio = pyaudio.PyAudio()
        return self._pyaudio

    def play(self, audio: bytes, on_finished: Callable[[], None] = lambda: None):
        self.stop()

        try:
            samples, sr = sf.read(io.BytesIO(audio), dtype="int16")
        except Exception as e:
            raise PlaybackError(f"Cannot decode audio: {e}")

        samples = np.ascontiguousarray(samples)
        channels = 1 if samples.ndim == 1 else samples.shape[1]

        try:
            stream = self._ensure_backend().open(
                format=pyaudio.paInt16,
                channels=channels,
                rate=sr,
                output=True,
            )
        except OSError as e:
            raise PlaybackError(f"Cannot open output device: {e}")

        stop_event = threading.Event()
        worker = threading.Thread(
            target=self._run,
            args=(stream, samples.tobytes(), 2 * channels, stop_event, on_finished),
            daemon=True,
        )
        with self._lock:
            self._stop_event = stop_event
            self._worker = worker
        worker.start()
        logger.debug("Playback started: %.2fs", len(samples) / sr)

    def _run(self, stream, data: bytes, frame_size: int, stop_event, on_finished):
        step = self.chunk_frames * frame_size
        try:
            for offset in range(0, len(data), step):
                if stop_event.is_set():
                    break
                stream.write(data[offset:offset + step])
        except OSError:
            # still signal completion below so the caller leaves PLAYING
            logger.exception("Playback stream error")
        finally:
            try:
                stream.stop_stream()
            finally:
                stream.close()

        if not stop_event.is_set():
            on_finished()

    def stop(self) -> Optional[threading.Thread]:
        """Signal the current worker to stop; returns it without joining.

        The worker closes its own stream after the chunk in flight.
        """
        with self._lock:
            worker, stop_event = self._worker, self._stop_event
            self._worker = None
            self._stop_event = None
        if stop_event is not None:
            stop_event.set()
        return worker

    def is_playing(self) -> bool:
        with self._lock:
            return self._worker is not None and self._worker.is_alive()

    def shutdown(self):
        worker = self.stop()
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=1.0)
        if self._pyaudio is not None:
            try:
                self._pyaudio.terminate()
            finally:
                self._pyaudio = None
