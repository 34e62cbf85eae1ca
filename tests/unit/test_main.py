"""Unit tests for application wiring and the command line."""

import io
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from rich.console import Console

from whispr.config import DEFAULT_PHRASE, WhisprConfig
from whispr.engine import ScriptedSpeechEngine
from whispr.errors import PermissionDenied
from whispr.main import App, build_parser, create_engine, main
from whispr.models.session import NoticeKind, SessionState


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=80, record=True, color_system=None)


@pytest.fixture
def scripted_config():
    config = WhisprConfig()
    config.set('engine.scripted.phrase', "testing one two")
    config.set('engine.scripted.word_delay_seconds', 0)
    return config


@pytest.mark.unit
class TestCreateEngine:

    def test_default_is_scripted(self):
        engine = create_engine(WhisprConfig())

        assert isinstance(engine, ScriptedSpeechEngine)
        assert engine.phrase == DEFAULT_PHRASE

    def test_scripted_settings_applied(self, scripted_config):
        engine = create_engine(scripted_config)

        assert engine.words == ["testing", "one", "two"]
        assert engine.word_delay == 0

    def test_google_engine(self):
        from whispr.engine.google_backend import GoogleSpeechEngine

        config = WhisprConfig()
        config.set('engine.type', 'google')
        config.set('google_cloud.language', 'de-DE')
        engine = create_engine(config)

        assert isinstance(engine, GoogleSpeechEngine)
        assert engine.language == 'de-DE'

    def test_google_credentials_resolved(self, temp_data_dir):
        credentials = Path(temp_data_dir) / "credentials.json"
        credentials.write_text("{}")
        config = WhisprConfig()
        config.set('engine.type', 'google')
        config.set('google_cloud.credentials_path', str(credentials))

        engine = create_engine(config)

        assert engine.credentials_path == str(credentials.absolute())

    def test_missing_google_credentials_refuse_to_start(self, temp_data_dir, make_controller):
        config = WhisprConfig()
        config.set('engine.type', 'google')
        config.set('google_cloud.credentials_path', str(Path(temp_data_dir) / "absent.json"))

        engine = create_engine(config)
        assert engine.credentials_path is None
        assert engine.initialize() is False
        with pytest.raises(PermissionDenied):
            engine.start()

        controller = make_controller(engine)
        assert controller.begin_recording() is False
        assert controller.state is SessionState.IDLE
        assert controller.notice.kind is NoticeKind.PERMISSION_DENIED

    def test_unknown_engine(self):
        config = WhisprConfig()
        config.set('engine.type', 'telepathy')
        with pytest.raises(ValueError, match="telepathy"):
            create_engine(config)


@pytest.mark.unit
class TestParser:

    def test_arguments(self):
        args = build_parser().parse_args(
            ["--config", "whispr.yaml", "--engine", "google", "--log-level", "DEBUG", "--audio-file", "a.wav"]
        )
        assert args.config == "whispr.yaml"
        assert args.engine == "google"
        assert args.log_level == "DEBUG"
        assert args.audio_file == "a.wav"

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config is None
        assert args.engine is None

    def test_rejects_unknown_engine(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--engine", "telepathy"])

    def test_missing_config_exits(self, temp_data_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(Path(temp_data_dir) / "absent.yaml")])
        assert exc_info.value.code == 2


@pytest.mark.unit
class TestApp:

    def test_scripted_session(self, scripted_config, console):
        app = App(scripted_config, console=console)
        try:
            controller = app.controller
            assert controller.begin_recording() is True
            assert controller.end_recording() is True

            app.dispatcher.drain()
            assert controller.state is SessionState.COMPLETE
            assert controller.transcript == "testing one two "

            assert controller.copy_transcript() is True
            assert app.clipboard.read() == "testing one two "

            assert controller.share_transcript() is True
            assert "Shared transcript" in console.export_text()
        finally:
            app.cleanup()

    def test_separator_and_topic_from_config(self, scripted_config, console):
        scripted_config.set('transcript.separator', '\n')
        scripted_config.set('events.topic', 'custom.topic')
        app = App(scripted_config, console=console)
        try:
            assert app.controller.separator == '\n'
            assert app.controller.changed_topic == 'custom.topic.changed'
        finally:
            app.cleanup()

    def test_audio_file_fed_on_recording(self, sample_audio_file, sample_audio_chunk, temp_data_dir, console):
        credentials = Path(temp_data_dir) / "credentials.json"
        credentials.write_text("{}")
        config = WhisprConfig()
        config.set('engine.type', 'google')
        config.set('google_cloud.credentials_path', str(credentials))

        with patch("whispr.engine.google_backend.service_account.Credentials.from_service_account_file") as mock_creds, \
             patch("whispr.engine.google_backend.speech.SpeechClient"):
            mock_creds.return_value = Mock(project_id="test-project")
            app = App(config, audio_file=sample_audio_file, console=console)
            try:
                assert app.controller.begin_recording() is True
                assert len(app.engine.audio_buffer) == len(sample_audio_chunk) * 10
            finally:
                app.cleanup()

    def test_cleanup_cancels_active_session(self, scripted_config, console):
        app = App(scripted_config, console=console)
        app.controller.begin_recording()

        app.cleanup()

        assert app.controller.state is SessionState.IDLE
        assert app.engine.is_capturing is False
