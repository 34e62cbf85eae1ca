"""Main application entry point for Whispr."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .config import DEFAULT_PHRASE, WhisprConfig
from .engine import AbstractSpeechEngine, ScriptedSpeechEngine, WaveAudioSource
from .models.session import SessionSnapshot, SessionState
from .services import ConsoleShareService, Dispatcher, InMemoryClipboard, SessionController
from .ui import TranscriptionScreen

logger = logging.getLogger(__name__)

ENGINE_TYPES = ("scripted", "google")


def create_engine(config: WhisprConfig) -> AbstractSpeechEngine:
    """Build the speech engine named by engine.type."""
    engine_type = config.get('engine.type', 'scripted')

    if engine_type == "scripted":
        return ScriptedSpeechEngine(
            phrase=config.get('engine.scripted.phrase', DEFAULT_PHRASE),
            word_delay=float(config.get('engine.scripted.word_delay_seconds', 0.2)),
            language=config.get('google_cloud.language', 'en-US'),
        )

    if engine_type == "google":
        from .engine.google_backend import GoogleSpeechEngine
        try:
            credentials_path = config.get_google_credentials_path()
        except (ValueError, FileNotFoundError) as e:
            # Without credentials the engine refuses to start and the screen shows a notice
            logger.warning(f"Google credentials unavailable: {e}")
            credentials_path = None
        return GoogleSpeechEngine(
            credentials_path=credentials_path,
            sample_rate=config.get('audio.sample_rate', 16000),
            language=config.get('google_cloud.language', 'en-US'),
            use_enhanced=config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
        )

    raise ValueError(f"Unknown engine type '{engine_type}', expected one of {ENGINE_TYPES}")


class App:
    """Wires configuration, engine, controller and screen together."""

    def __init__(self, config: WhisprConfig, audio_file: Optional[str] = None,
                 console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.audio_file = audio_file
        self.audio_source: Optional[WaveAudioSource] = None
        self.last_state = SessionState.IDLE

        self.engine = create_engine(config)
        if not self.engine.initialize():
            # The controller reports start failures as notices
            logger.warning(f"{type(self.engine).__name__} failed to initialize")

        if audio_file:
            self.audio_source = WaveAudioSource(audio_file, chunk_size=config.get('audio.chunk_size', 1024))

        self.dispatcher = Dispatcher()
        self.clipboard = InMemoryClipboard()
        self.controller = SessionController(
            engine=self.engine,
            clipboard=self.clipboard,
            share=ConsoleShareService(self.console),
            dispatcher=self.dispatcher,
            separator=config.get_separator(),
            topic=config.get_topic(),
        )
        self.controller.subscribe(self.on_snapshot)
        self.screen = TranscriptionScreen(self.controller, console=self.console)

    def on_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Feed the audio file to the engine whenever a recording starts."""
        entered_recording = snapshot.is_recording and self.last_state is not SessionState.RECORDING
        self.last_state = snapshot.state
        if not entered_recording or self.audio_source is None:
            return
        feed_audio = getattr(self.engine, "feed_audio", None)
        if feed_audio is None:
            logger.debug("Engine does not take fed audio, ignoring audio file")
            return
        chunks = self.audio_source.feed(feed_audio)
        logger.info(f"Fed {chunks} audio chunks from {self.audio_source.file_path.name}")

    def run(self) -> None:
        try:
            self.screen.run()
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        self.controller.cancel()
        self.controller.unsubscribe(self.on_snapshot)
        self.controller.close()
        try:
            self.engine.cleanup()
        except Exception as e:
            logger.error(f"Error cleaning up engine: {e}")


def setup_logging(config: WhisprConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/whispr.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Whispr starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Whispr - transform your voice into text",
        epilog="Keys: SPACE=record/stop, c=copy, p=paste, s=share, x=cancel, d=dismiss, q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--engine",
        type=str,
        choices=ENGINE_TYPES,
        help="Speech engine to use (overrides config)"
    )

    parser.add_argument(
        "--audio-file",
        type=str,
        help="16-bit WAV file fed to the engine each time recording starts"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Whispr v0.1.0"
    )

    return parser


def main(argv: Optional[list] = None) -> None:
    """Main entry point for Whispr."""
    args = build_parser().parse_args(argv)

    try:
        config = WhisprConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(2)

    if args.engine:
        config.set('engine.type', args.engine)
    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

    try:
        app = App(config, audio_file=args.audio_file)
        app.run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
