"""
Terminal utilities for the decision server.

Normal log lines scroll as usual; a Rich live footer stays at the bottom and
shows the controller's current status (frames, rudder, latches).
"""

import threading

from rich.console import Console
from rich.live import Live
from rich.table import Table


class TerminalDisplay:
    """
    Manages terminal display with a persistent status footer.

    Similar to how npm/apt show progress during installation.
    """

    def __init__(self, enable_footer: bool = True):
        """
        Initialize terminal display.

        Args:
            enable_footer: Whether to enable the persistent footer
        """
        self.enable_footer = enable_footer
        self.lock = threading.Lock()

        self.console = Console()
        self.live_display: Live | None = None

        self.status: dict = {}

    def print(self, message: str, prefix: str = ""):
        """
        Print a message to the main content area.

        Args:
            message: Message to print
            prefix: Optional prefix (e.g., "[Decision]")
        """
        if prefix:
            print(f"{prefix} {message}")
        else:
            print(message)

    def init_footer(self):
        """Initialize Rich live footer display."""
        if not self.enable_footer or self.live_display is not None:
            return

        with self.lock:
            self.live_display = Live(
                self._generate_footer_table(),
                console=self.console,
                refresh_per_second=4,
                vertical_overflow="visible",
            )
            self.live_display.start()

    def _generate_footer_table(self) -> Table:
        """Generate footer table from the latest controller status."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", no_wrap=True)
        table.add_column(style="magenta", no_wrap=True)
        table.add_column(style="yellow", no_wrap=True)
        table.add_column(no_wrap=True)

        if not self.status:
            table.add_row("[dim]Waiting for lane summaries[/dim]")
            return table

        status = self.status
        table.add_row(
            f"[bold]Frames:[/bold] {status.get('frame_count', 0)}",
            f"[bold]FPS:[/bold] {status.get('fps', 0.0):5.1f}",
            f"[bold]Rudder:[/bold] {status.get('last_rudder_sent', 0.0):+7.2f}",
            "  ".join([
                _latch("ZONE", status.get('stopping_zone_detected', False)),
                _latch("E-STOP", status.get('emergency_stop_activated', False)),
            ]),
        )
        return table

    def update_footer(self, status: dict | None = None):
        """
        Update the persistent footer with controller status.

        Args:
            status: Controller status (see SteeringController.status())
        """
        if not self.enable_footer:
            return

        with self.lock:
            if status is not None:
                self.status.update(status)

            if self.live_display is not None:
                self.live_display.update(self._generate_footer_table())

    def clear_footer(self):
        """Stop the live footer."""
        if not self.enable_footer:
            return

        with self.lock:
            if self.live_display is not None:
                try:
                    self.live_display.stop()
                finally:
                    self.live_display = None
                    print()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup."""
        self.clear_footer()


def _latch(label: str, active: bool) -> str:
    if active:
        return f"[bold red]● {label}[/bold red]"
    return f"[dim]○ {label}[/dim]"


def format_decision_stats(
    fps: float,
    frame_id: int,
    processing_time_ms: float,
    rudder: float | None,
) -> str:
    """
    Format one-line decision statistics.

    Args:
        fps: Frames per second
        frame_id: Current frame ID
        processing_time_ms: Time spent in the controller
        rudder: Last rudder sent, None if none yet

    Returns:
        Formatted stats string
    """
    rudder_text = "   n/a" if rudder is None else f"{rudder:+6.2f}"
    return (f"{fps:5.1f} FPS | Frame {frame_id:6d} | "
            f"Decision: {processing_time_ms:6.3f}ms | Rudder: {rudder_text}")
