"""Command line front end.

Commands:
    chat       Talk to the pipeline from the terminal (Enter starts/stops recording);
               --metrics-file dumps the session counters on exit
    providers  Show which providers are callable with the current configuration
    prefs      Show or change the persisted preferences
    encrypt    Produce an enc:v1: value for .env
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderDescriptor, Stage, providers_for
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.credentials import CredentialGate
from polyvoice.core.exceptions import PipelineError
from polyvoice.core.pipeline import ConversationLog, LogMessage
from polyvoice.core.preferences import PreferencesStore
from polyvoice.logging_config import mask_secret, setup_logging
from polyvoice.main import VoiceApp, build_app
from polyvoice.observability.metrics import get_metrics
from polyvoice.security import ConfigDecryptError, encrypt_value, generate_passphrase
from polyvoice.services.exceptions import ProviderCallError
from polyvoice.services.stt.protocol import AudioPayload

STAGE_TITLES = {
    Stage.STT: "Speech-to-text",
    Stage.AI: "Response generation",
    Stage.TTS: "Text-to-speech",
}


def _print_messages(messages: list[LogMessage] | tuple[LogMessage, ...]) -> None:
    for message in messages:
        stamp = message.time.astimezone().strftime("%H:%M:%S")
        if message.is_system:
            print(f"  ℹ️  [{stamp}] {message.content}")
        elif message.role == "user":
            print(f"👤 You ({message.provider}): {message.content}")
        else:
            print(f"🤖 Bot ({message.provider}): {message.content}")


def _provider_status(gate: CredentialGate, descriptor: ProviderDescriptor) -> tuple[str, str]:
    try:
        note = gate.fallback_note(descriptor)
        ready = descriptor.implemented and gate.is_available(descriptor)
    except ConfigDecryptError as e:
        return "🔒", str(e)
    return ("✅" if ready else "⚠️ "), note


# =============================================================================
# providers
# =============================================================================


def cmd_providers(args: argparse.Namespace, settings: Settings) -> int:
    config = ConfigAccessor.from_env(settings.env_file)
    gate = CredentialGate(config)

    for stage, title in STAGE_TITLES.items():
        print(f"\n{title}")
        print("-" * 60)
        for descriptor in providers_for(stage):
            icon, note = _provider_status(gate, descriptor)
            suffix = " (long-running)" if descriptor.long_running else ""
            print(f"  {icon} {descriptor.name}{suffix}: {note}")
            if args.show_keys:
                for key in descriptor.required_config_keys:
                    try:
                        value = config.get(key)
                    except ConfigDecryptError:
                        value = "<undecryptable>"
                    print(f"       {key}={mask_secret(value) if value else '<unset>'}")
    print()
    return 0


# =============================================================================
# prefs
# =============================================================================


def cmd_prefs(args: argparse.Namespace, settings: Settings) -> int:
    store = PreferencesStore(settings=settings)
    preferences = store.load()

    changes = {
        field_name: value
        for field_name, value in (
            ("user_name", args.name),
            ("stt_service", args.stt),
            ("ai_service", args.ai),
            ("tts_service", args.tts),
            ("elevenlabs_voice_id", args.elevenlabs_voice),
            ("murf_tts_voice_id", args.murf_voice),
        )
        if value is not None
    }
    if changes:
        try:
            preferences = store.update(preferences, **changes)
        except (KeyError, ValueError) as e:
            print(f"❌ {e}")
            return 2
        except OSError as e:
            print(f"❌ Could not save preferences to {store.path}: {e}")
            return 1
        print(f"💾 Saved to {store.path}")

    for key, value in preferences.to_dict().items():
        print(f"  {key}: {value or '<empty>'}")
    return 0


# =============================================================================
# encrypt
# =============================================================================


def cmd_encrypt(args: argparse.Namespace, settings: Settings) -> int:
    if args.generate_key:
        print(f"ENV_CRYPTO_KEY={generate_passphrase()}")
        return 0

    if not args.value:
        print("❌ Provide a value to encrypt (or --generate-key)")
        return 2

    passphrase = args.key or ConfigAccessor.from_env(settings.env_file).encryption_key
    print(encrypt_value(args.value, passphrase))
    return 0


# =============================================================================
# chat
# =============================================================================


async def _run_file_turn(app: VoiceApp, path: Path, local_transcript: str) -> None:
    mime_type = mimetypes.guess_type(path.name)[0] or "audio/wav"
    payload = AudioPayload(data=path.read_bytes(), mime_hint=mime_type)
    await app.pipeline.run_turn(payload, local_transcript)


async def _record_turn(app: VoiceApp) -> None:
    await app.pipeline.start_recording(app.new_recording())
    print("🎙️  Listening... press Enter to stop")
    await asyncio.to_thread(input)
    print("⏳ Processing...")
    await app.pipeline.stop_recording()


async def _chat(args: argparse.Namespace, settings: Settings) -> int:
    app = build_app(settings, enable_local_recognizer=not args.no_local_stt)
    log: ConversationLog = app.pipeline.log
    shown = 0

    def flush() -> None:
        nonlocal shown
        _print_messages(log.messages[shown:])
        shown = len(log)

    prefs = app.pipeline.preferences
    print("=" * 60)
    print("🗣️  polyvoice")
    print("=" * 60)
    print(f"STT: {prefs.stt_service.value} | AI: {prefs.ai_service.value} | TTS: {prefs.tts_service.value}")
    flush()

    try:
        if args.file:
            try:
                await _run_file_turn(app, args.file, args.local_transcript or "")
            except (PipelineError, ProviderCallError, ConfigDecryptError) as e:
                print(f"\n❌ Error: {e}")
                return 1
            finally:
                flush()
            return 0

        print("\nPress Enter to start recording, type /quit to exit.\n")
        while True:
            command = (await asyncio.to_thread(input, "> ")).strip().lower()
            if command in ("/quit", "/exit", "q"):
                print("\n👋 Goodbye!")
                return 0

            try:
                await _record_turn(app)
            except (PipelineError, ProviderCallError, ConfigDecryptError) as e:
                print(f"\n❌ Error: {e}\n")
            except OSError as e:
                print(f"\n❌ Audio device error: {e}\n")
            flush()
            print(f"   state: {app.pipeline.state.name}\n")

    except (KeyboardInterrupt, EOFError):
        print("\n👋 Goodbye!")
        return 0
    finally:
        await app.close()
        if args.metrics_file:
            args.metrics_file.write_bytes(get_metrics())


def cmd_chat(args: argparse.Namespace, settings: Settings) -> int:
    return asyncio.run(_chat(args, settings))


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polyvoice",
        description="Multi-provider voice chatbot (STT -> AI -> TTS)",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chat = subparsers.add_parser("chat", help="Talk to the bot")
    chat.add_argument("--file", type=Path, help="Run one turn on a recorded audio file")
    chat.add_argument(
        "--local-transcript",
        help="Fallback transcript to use with --file if the cloud STT call fails",
    )
    chat.add_argument(
        "--no-local-stt",
        action="store_true",
        help="Do not run the on-device recognizer while recording",
    )
    chat.add_argument(
        "--metrics-file",
        type=Path,
        help="Write Prometheus metrics for the session here on exit (textfile collector format)",
    )
    chat.set_defaults(handler=cmd_chat)

    providers = subparsers.add_parser("providers", help="Show provider availability")
    providers.add_argument("--show-keys", action="store_true", help="List masked key values")
    providers.set_defaults(handler=cmd_providers)

    prefs = subparsers.add_parser("prefs", help="Show or change preferences")
    prefs.add_argument("--name", help="User name used in replies")
    prefs.add_argument("--stt", help="Speech-to-text provider display name")
    prefs.add_argument("--ai", help="Response generation provider display name")
    prefs.add_argument("--tts", help="Text-to-speech provider display name")
    prefs.add_argument("--elevenlabs-voice", help="ElevenLabs voice ID override")
    prefs.add_argument("--murf-voice", help="Murf voice ID override")
    prefs.set_defaults(handler=cmd_prefs)

    encrypt = subparsers.add_parser("encrypt", help="Encrypt a value for .env")
    encrypt.add_argument("value", nargs="?", help="Plaintext value")
    encrypt.add_argument("--key", help="Passphrase (defaults to ENV_CRYPTO_KEY)")
    encrypt.add_argument("--generate-key", action="store_true", help="Print a new passphrase")
    encrypt.set_defaults(handler=cmd_encrypt)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(
        level=(args.log_level or settings.log_level).upper(),
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file,
    )
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
