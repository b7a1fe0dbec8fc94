"""
Local soroban dictation drill: generate a problem, read it aloud through
VOICEVOX, then show the answer.

Usage:
    python3 scripts/drill.py
    python3 scripts/drill.py --operands 5 --min-digits 2 --max-digits 4
    python3 scripts/drill.py --duration 20 --speaker 3 --no-audio
"""
import argparse
import asyncio
import logging
import sys

from yomiage.config import settings
from yomiage.models.voicevox import VoicevoxClient, VoicevoxError
from yomiage.services.audio import PlaybackError
from yomiage.services.expression import assemble, assemble_for_display
from yomiage.services.generator import ConfigurationError, generate
from yomiage.services.readout import BusyPolicy, ReadoutController
from yomiage.services.verbalize import verbalize_signed


class _SpeakerSynthesizer:
    """Binds a VOICEVOX speaker id to the controller's synthesize() call."""

    def __init__(self, client: VoicevoxClient, speaker: int | None):
        self._client = client
        self._speaker = speaker

    async def synthesize(self, text, params) -> bytes:
        return await self._client.synthesize(text, params, speaker=self._speaker)


async def run(args) -> int:
    client = VoicevoxClient(
        args.voicevox_url,
        speaker_id=settings.voicevox_speaker_id,
        timeout_s=settings.voicevox_timeout_s,
    )
    controller = None
    player = None
    if not args.no_audio:
        from yomiage.models.player import PyAudioPlayer

        player = PyAudioPlayer()
        controller = ReadoutController(
            _SpeakerSynthesizer(client, args.speaker),
            player,
            policy=BusyPolicy(settings.readout_busy_policy),
            reference_duration_s=settings.speech_reference_duration_s,
        )

    try:
        for n in range(1, args.count + 1):
            try:
                calc = generate(args.operands, args.min_digits, args.max_digits)
            except ConfigurationError as e:
                print("Invalid settings: {}".format(e), file=sys.stderr)
                return 2

            print("\n=== 問題 {} ===".format(n))
            print(assemble_for_display(calc))

            if controller is not None:
                try:
                    await controller.speak(assemble(calc), args.duration)
                    await controller.wait_until_idle()
                except (VoicevoxError, PlaybackError) as e:
                    # keep the problem on screen, skip the readout
                    print("読み上げできません ({})".format(e), file=sys.stderr)

            await asyncio.to_thread(input, "Enter で答えを表示...")
            print("{} = {}".format(calc.expression, calc.result))
            print(verbalize_signed(calc.result))
    finally:
        if controller is not None:
            controller.stop()
        if player is not None:
            player.shutdown()
        await client.close()
    return 0


def main():
    parser = argparse.ArgumentParser(description="読上算ドリル")
    parser.add_argument("--operands", type=int, default=settings.default_operand_count)
    parser.add_argument("--min-digits", type=int, default=settings.default_min_digits)
    parser.add_argument("--max-digits", type=int, default=settings.default_max_digits)
    parser.add_argument("--duration", type=float, default=settings.default_speech_duration_s,
                        help="Target readout duration in seconds (3-30)")
    parser.add_argument("--count", type=int, default=1, help="Number of problems")
    parser.add_argument("--speaker", type=int, default=None, help="VOICEVOX style id")
    parser.add_argument("--voicevox-url", default=settings.voicevox_url)
    parser.add_argument("--no-audio", action="store_true", help="Print problems only")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
