"""Terminal-based transcription screen."""

import logging
from typing import Optional

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.session import SessionSnapshot, SessionState
from ..services.session_controller import SessionController
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)

EMPTY_STATE_HINT = "Press SPACE to start recording\nor 'p' to paste text from the clipboard"
NO_SPEECH_HINT = "No speech detected\nPress SPACE to try again"

STATE_BADGES = {
    SessionState.IDLE: ("🎤 READY", "bold green"),
    SessionState.RECORDING: ("🔴 RECORDING", "bold red"),
    SessionState.PROCESSING: ("⚙️  TRANSCRIBING", "bold yellow"),
    SessionState.COMPLETE: ("✅ DONE", "bold blue"),
}

# Keys mapped to controller actions; all run on the UI thread via the dispatcher
KEY_ACTIONS = {
    " ": "toggle_recording",
    "\r": "toggle_recording",
    "\n": "toggle_recording",
    "c": "copy_transcript",
    "p": "paste_text",
    "s": "share_transcript",
    "x": "cancel",
    "d": "dismiss_notice",
}


class TranscriptionScreen:
    """Renders controller snapshots and turns keypresses into actions."""

    def __init__(self, controller: SessionController, console: Optional[Console] = None,
                 refresh_interval: float = 0.1):
        """Initialize transcription screen.

        Args:
            controller: Session controller to observe and drive
            console: Rich console to draw on
            refresh_interval: Seconds to wait for engine events between redraws
        """
        self.controller = controller
        self.console = console or Console()
        self.refresh_interval = refresh_interval
        self.snapshot = controller.snapshot
        self.dirty = True
        self.running = False
        self.input_handler = None

        controller.subscribe(self.on_snapshot)
        logger.info("TranscriptionScreen initialized")

    def on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot
        self.dirty = True

    def handle_key_input(self, key: str) -> bool:
        """Handle keyboard input. Returns True to continue, False to quit.

        Called on the input thread; actions are posted to the dispatcher.
        """
        if key == "q":
            logger.info("Quit key pressed")
            self.running = False
            return False

        action = KEY_ACTIONS.get(key)
        if action is None:
            logger.debug(f"Unhandled key: '{key}'")
            return True

        logger.debug(f"Key '{key}' -> {action}")
        self.controller.dispatcher.post(getattr(self.controller, action))
        return True

    def render_header(self, snapshot: SessionSnapshot) -> Panel:
        badge, style = STATE_BADGES[snapshot.state]
        engine_info = self.controller.engine.get_display_info()
        header_text = Text.assemble(
            ("Whispr", "bold blue"), (engine_info, "dim"), "  |  ", (badge, style)
        )
        return Panel(Align.center(header_text), style="bright_blue")

    def render_transcript(self, snapshot: SessionSnapshot) -> Panel:
        if snapshot.show_empty_state:
            body = Align.center(Group(
                Text("〰️", justify="center"),
                Text(EMPTY_STATE_HINT, style="dim white italic", justify="center"),
            ), vertical="middle")
        elif snapshot.state is SessionState.RECORDING:
            body = Text("Listening...", style="red italic")
        elif snapshot.state is SessionState.PROCESSING and not snapshot.has_transcript:
            body = Text("Transcribing audio...", style="yellow italic")
        elif snapshot.state is SessionState.COMPLETE and not snapshot.has_transcript:
            body = Align.center(Text(NO_SPEECH_HINT, style="dim white italic", justify="center"),
                                vertical="middle")
        else:
            body = Text(snapshot.transcript.rstrip(), style="white")

        return Panel(body, title="📝 Transcription", border_style="blue")

    def render_controls(self, snapshot: SessionSnapshot) -> Panel:
        if snapshot.is_recording:
            record = Text("[SPACE] ■ Stop", style="bold white on red")
        elif snapshot.state is SessionState.PROCESSING:
            record = Text("[SPACE] 🎙 Record", style="dim")
        else:
            record = Text("[SPACE] 🎙 Record", style="bold white on blue")

        lines = [Align.center(record)]
        if snapshot.show_actions:
            lines.append(Align.center(Text.assemble(
                ("[c]", "bold cyan"), " Copy   ",
                ("[p]", "bold cyan"), " Paste   ",
                ("[s]", "bold cyan"), " Share",
            )))
        if snapshot.notice:
            lines.append(Align.center(Text(
                f"⚠️  {snapshot.notice.message}  (d to dismiss)", style="bold red"
            )))

        return Panel(Group(*lines), border_style="bright_black")

    def render_footer(self) -> Panel:
        controls = Text.assemble(
            ("SPACE", "bold green"), " Record/Stop  ",
            ("P", "bold cyan"), " Paste  ",
            ("X", "bold yellow"), " Cancel  ",
            ("Q", "bold red"), " Quit"
        )
        return Panel(Align.center(controls), style="bright_black")

    def create_layout(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="transcript", ratio=1),
            Layout(name="controls", size=5),
            Layout(name="footer", size=3)
        )
        return layout

    def update_layout(self, layout: Layout) -> None:
        snapshot = self.snapshot
        layout["header"].update(self.render_header(snapshot))
        layout["transcript"].update(self.render_transcript(snapshot))
        layout["controls"].update(self.render_controls(snapshot))
        layout["footer"].update(self.render_footer())
        self.dirty = False

    def run(self) -> None:
        """Run the screen until quit."""
        self.running = True
        layout = self.create_layout()
        self.update_layout(layout)

        self.input_handler = create_input_handler(self.handle_key_input)
        self.input_handler.start()

        try:
            with Live(layout, console=self.console, refresh_per_second=10) as live:
                while self.running:
                    self.controller.dispatcher.drain(timeout=self.refresh_interval)
                    if self.dirty:
                        self.update_layout(layout)
                        live.refresh()
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        self.running = False
        if self.input_handler:
            self.input_handler.stop()
        try:
            self.controller.unsubscribe(self.on_snapshot)
        except Exception as e:
            logger.debug(f"Unsubscribe on cleanup failed: {e}")
        logger.info("TranscriptionScreen cleanup completed")
