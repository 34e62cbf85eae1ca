"""Unit tests for the terminal transcription screen."""

import io

import pytest
from rich.console import Console

from whispr.models.session import Notice, NoticeKind, SessionSnapshot, SessionState
from whispr.ui.keyboard_input import LineInputHandler
from whispr.ui.transcription_screen import TranscriptionScreen


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=80, record=True, color_system=None)


@pytest.fixture
def screen(controller, console):
    screen = TranscriptionScreen(controller, console=console)
    yield screen
    screen.cleanup()


def rendered(console, renderable):
    console.print(renderable)
    return console.export_text()


@pytest.mark.unit
class TestRendering:

    def test_empty_state_hint(self, screen, console):
        text = rendered(console, screen.render_transcript(SessionSnapshot()))
        assert "Press SPACE to start recording" in text
        assert "paste" in text

    def test_transcript_shown(self, screen, console):
        snapshot = SessionSnapshot(state=SessionState.COMPLETE, transcript="hello world ")
        text = rendered(console, screen.render_transcript(snapshot))
        assert "hello world" in text
        assert "Press SPACE" not in text

    def test_recording_shows_listening_and_stop(self, screen, console):
        snapshot = SessionSnapshot(state=SessionState.RECORDING)
        assert "Listening" in rendered(console, screen.render_transcript(snapshot))
        assert "Stop" in rendered(console, screen.render_controls(snapshot))

    def test_processing_without_text(self, screen, console):
        snapshot = SessionSnapshot(state=SessionState.PROCESSING)
        assert "Transcribing audio" in rendered(console, screen.render_transcript(snapshot))

    def test_actions_only_with_transcript(self, screen, console):
        empty = rendered(console, screen.render_controls(SessionSnapshot()))
        assert "Copy" not in empty

        snapshot = SessionSnapshot(state=SessionState.COMPLETE, transcript="text")
        full = rendered(console, screen.render_controls(snapshot))
        assert "Copy" in full
        assert "Paste" in full
        assert "Share" in full

    def test_notice_shown(self, screen, console):
        snapshot = SessionSnapshot(notice=Notice(NoticeKind.PERMISSION_DENIED, "Microphone access was denied"))
        text = rendered(console, screen.render_controls(snapshot))
        assert "Microphone access was denied" in text
        assert "dismiss" in text

    @pytest.mark.parametrize("state,badge", [
        (SessionState.IDLE, "READY"),
        (SessionState.RECORDING, "RECORDING"),
        (SessionState.PROCESSING, "TRANSCRIBING"),
        (SessionState.COMPLETE, "DONE"),
    ])
    def test_header_badge(self, screen, console, state, badge):
        text = rendered(console, screen.render_header(SessionSnapshot(state=state)))
        assert "Whispr" in text
        assert badge in text

    def test_header_shows_engine(self, make_controller, scripted_engine, console):
        screen = TranscriptionScreen(make_controller(scripted_engine), console=console)
        try:
            text = rendered(console, screen.render_header(SessionSnapshot()))
            assert "Whispr (scripted)" in text
        finally:
            screen.cleanup()

    def test_completed_without_speech(self, screen, console):
        snapshot = SessionSnapshot(state=SessionState.COMPLETE, transcript="")
        text = rendered(console, screen.render_transcript(snapshot))
        assert "No speech detected" in text
        assert "Press SPACE to start recording" not in text

    def test_update_layout_clears_dirty(self, screen):
        layout = screen.create_layout()
        assert screen.dirty is True
        screen.update_layout(layout)
        assert screen.dirty is False


@pytest.mark.unit
class TestInput:

    def test_screen_follows_controller(self, screen, controller):
        controller.paste_text("observed")
        assert screen.snapshot.transcript == "observed"
        assert screen.dirty is True

    def test_keys_post_actions(self, screen, controller):
        assert screen.handle_key_input(" ") is True
        # Nothing happens until the UI thread drains
        assert controller.state is SessionState.IDLE

        controller.dispatcher.drain()
        assert controller.state is SessionState.RECORDING

    def test_paste_key_reads_clipboard(self, screen, controller, clipboard):
        clipboard.write("from the clipboard")
        screen.handle_key_input("p")
        controller.dispatcher.drain()
        assert controller.transcript == "from the clipboard"

    def test_unknown_key_ignored(self, screen, controller):
        assert screen.handle_key_input("z") is True
        assert controller.dispatcher.pending() == 0

    def test_quit_key(self, screen):
        screen.running = True
        assert screen.handle_key_input("q") is False
        assert screen.running is False


@pytest.mark.unit
class TestLineInputHandler:

    def test_lines_become_keys(self):
        keys = []

        def callback(key):
            keys.append(key)
            return key != "q"

        handler = LineInputHandler(callback, stream=io.StringIO("\nCopy\nq\nignored\n"))
        handler.start()
        handler.thread.join(timeout=2.0)

        assert keys == [" ", "c", "q"]

    def test_end_of_input_quits(self):
        keys = []
        handler = LineInputHandler(lambda key: keys.append(key) or True, stream=io.StringIO("s\n"))
        handler.start()
        handler.thread.join(timeout=2.0)

        assert keys == ["s", "q"]
