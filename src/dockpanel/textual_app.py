"""Textual-based UI for dockpanel."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional

from rich.markup import escape as rich_escape
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import (
    Button, Checkbox, Footer, Header, Input, Label, ListItem, ListView, Static, TabbedContent, TabPane,
)

from . import configure_logging
from .backend import DockerBackend
from .config import ConfigManager
from .connection import ClientRegistry
from .errors import ConnectionSetupError, EngineError
from .model import ConnectionConfig
from .parsing import build_container_spec
from .state import ResourcePanel
from .stats import format_stats
from .ui import format_container_row, format_image_row, format_inspect, format_network_row, format_volume_row

logger = logging.getLogger(__name__)

KINDS = ["containers", "images", "volumes", "networks"]

PANEL_BUTTONS = {
    "containers": [
        ("Refresh", "refresh"), ("Start", "start"), ("Stop", "stop"), ("Logs", "logs"),
        ("Remove", "remove"), ("Inspect", "inspect"), ("Stats", "stats"),
        ("Run Alpine", "run_alpine"), ("Run Custom Container", "run_custom"),
    ],
    "images": [("Refresh", "refresh"), ("Pull Image", "pull"), ("Remove Image", "remove")],
    "volumes": [("Refresh", "refresh"), ("Create Volume", "create"), ("Remove Volume", "remove")],
    "networks": [("Refresh", "refresh"), ("Create Network", "create"), ("Remove Network", "remove")],
}


@dataclass
class FormField:
    name: str
    label: str
    default: str = ""
    placeholder: str = ""
    required: bool = False
    checkbox: bool = False


class ConfirmScreen(ModalScreen[bool]):
    def __init__(self, question: str) -> None:
        super().__init__()
        self.question = question

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static("Confirm", classes="modal_title"),
            Static(self.question, classes="modal_body", markup=False),
            Static("[Enter/Y] Yes    [Esc/N] No", classes="modal_hint", markup=False),
            id="modal",
        )

    async def on_key(self, event: events.Key) -> None:
        if event.key in ("enter", "y", "Y"):
            self.dismiss(True)
        elif event.key in ("escape", "n", "N"):
            self.dismiss(False)


class MessageScreen(ModalScreen[None]):
    """Information or error dialog."""

    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, title: str, message: str, error: bool = False) -> None:
        super().__init__()
        self.title_text = title
        self.message = message
        self.error = error

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self.title_text, classes="modal_title error" if self.error else "modal_title", markup=False),
            Static(self.message, classes="modal_body", markup=False),
            Button("OK", id="message_ok", variant="error" if self.error else "primary"),
            id="modal",
        )

    def on_mount(self) -> None:
        self.query_one("#message_ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class TextViewerScreen(ModalScreen[None]):
    """Read-only, scrollable one-shot output (logs, stats, inspect)."""

    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, title: str, text: str) -> None:
        super().__init__()
        self.title_text = title
        self.text = text

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self.title_text, classes="modal_title", markup=False),
            VerticalScroll(Static(self.text or "(empty)", id="viewer_text", markup=False), id="viewer_scroll"),
            Button("Close", id="viewer_close"),
            id="viewer",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)


class FormScreen(ModalScreen[bool]):
    """
    Modal form that runs ``submit`` off the UI thread.

    On failure an error dialog is shown on top and the form stays open; on
    success the form is dismissed with True.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, title: str, fields: list[FormField], submit: Callable[[dict[str, Any]], Any],
                 submit_label: str = "Submit") -> None:
        super().__init__()
        self.form_title = title
        self.fields = fields
        self.submit = submit
        self.submit_label = submit_label

    def compose(self) -> ComposeResult:
        with Vertical(id="modal"):
            yield Static(self.form_title, classes="modal_title", markup=False)
            for f in self.fields:
                if f.checkbox:
                    yield Checkbox(f.label, value=f.default == "true", id=f"field_{f.name}")
                else:
                    yield Label(f.label)
                    yield Input(value=f.default, placeholder=f.placeholder, id=f"field_{f.name}")
            with Horizontal(classes="buttons"):
                yield Button(self.submit_label, id="form_submit", variant="primary")
                yield Button("Cancel", id="form_cancel")

    def on_mount(self) -> None:
        inputs = self.query(Input)
        if inputs:
            inputs.first().focus()

    def values(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for f in self.fields:
            if f.checkbox:
                values[f.name] = self.query_one(f"#field_{f.name}", Checkbox).value
            else:
                values[f.name] = self.query_one(f"#field_{f.name}", Input).value
        return values

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "form_cancel":
            self.dismiss(False)
        elif event.button.id == "form_submit":
            self.run_worker(self._submit_flow(), group="form", exclusive=True)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.run_worker(self._submit_flow(), group="form", exclusive=True)

    def action_cancel(self) -> None:
        self.dismiss(False)

    async def _submit_flow(self) -> None:
        values = self.values()
        missing = [f.label for f in self.fields if f.required and not str(values[f.name]).strip()]
        if missing:
            self.app.push_screen(MessageScreen("Error", f"{missing[0]} is required", error=True))
            return

        button = self.query_one("#form_submit", Button)
        button.disabled = True
        try:
            await asyncio.to_thread(self.submit, values)
        except EngineError as e:
            self.app.push_screen(MessageScreen("Error", str(e), error=True))
            return
        finally:
            button.disabled = False
        self.dismiss(True)


class ResourcePanelView(Vertical):
    """List of one resource kind plus its action buttons."""

    def __init__(self, panel: ResourcePanel, buttons: list[tuple[str, str]]) -> None:
        super().__init__(id=f"panel-{panel.kind}", classes="panel")
        self.panel = panel
        self.buttons = buttons
        self._rendered_lines: Optional[list[str]] = None
        self._calls_in_flight = 0

    def compose(self) -> ComposeResult:
        yield ListView(id=f"{self.panel.kind}-list")
        with Horizontal(classes="buttons"):
            for label, action in self.buttons:
                yield Button(label, id=f"{self.panel.kind}__{action}")

    @property
    def list_view(self) -> ListView:
        return self.query_one(ListView)

    async def sync(self) -> None:
        """Re-render rows if the snapshot changed."""
        lines = self.panel.lines
        if lines == self._rendered_lines:
            return
        self._rendered_lines = lines
        list_view = self.list_view
        await list_view.clear()
        await list_view.extend([ListItem(Label(line, markup=False)) for line in lines])
        position = self.panel.display_index()
        if position is not None:
            list_view.index = position

    @property
    def busy(self) -> bool:
        return self._calls_in_flight > 0

    def set_busy(self, busy: bool) -> None:
        """Count calls in flight; buttons come back only when the last one ends."""
        self._calls_in_flight = max(0, self._calls_in_flight + (1 if busy else -1))
        for button in self.query(Button):
            button.disabled = self.busy


class SettingsPanel(Vertical):
    def __init__(self, config: ConnectionConfig) -> None:
        super().__init__(id="settings")
        self.config = config

    def compose(self) -> ComposeResult:
        yield Label("Docker Host")
        yield Input(value=self.config.host, id="settings_host")
        yield Label("CA Cert Path")
        yield Input(value=self.config.ca_cert, id="settings_ca")
        yield Label("Client Cert Path")
        yield Input(value=self.config.client_cert, id="settings_cert")
        yield Label("Client Key Path")
        yield Input(value=self.config.client_key, id="settings_key")
        yield Button("Submit", id="settings__submit", variant="primary")

    def read(self, timeout: int) -> ConnectionConfig:
        return ConnectionConfig(
            host=self.query_one("#settings_host", Input).value.strip(),
            ca_cert=self.query_one("#settings_ca", Input).value.strip(),
            client_cert=self.query_one("#settings_cert", Input).value.strip(),
            client_key=self.query_one("#settings_key", Input).value.strip(),
            timeout=timeout,
        )


class DockPanelApp(App[None]):
    TITLE = "Docker Dashboard"
    SUB_TITLE = "dockpanel"

    CSS = """
    .panel {
      height: 1fr;
    }

    .panel ListView {
      height: 1fr;
      border: round $accent;
    }

    .buttons {
      height: auto;
    }

    .buttons Button {
      margin: 0 1 0 0;
    }

    #settings {
      padding: 1 2;
    }

    #modal {
      width: 70;
      height: auto;
      border: round $accent;
      background: $surface;
      padding: 1 2;
    }

    #viewer {
      width: 90%;
      height: 80%;
      border: round $accent;
      background: $surface;
      padding: 1 2;
    }

    #viewer_scroll {
      height: 1fr;
    }

    ModalScreen {
      align: center middle;
    }

    .modal_title {
      text-style: bold;
      margin-bottom: 1;
    }

    .modal_title.error {
      color: $error;
    }

    .modal_body {
      margin-bottom: 1;
    }

    .modal_hint {
      color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh_all", "Refresh"),
        Binding("escape", "cancel", "Cancel call"),
    ]

    def __init__(self, backend: DockerBackend, config_manager: Optional[ConfigManager] = None) -> None:
        super().__init__()
        self.backend = backend
        self.registry = backend.registry
        self.config_manager = config_manager or ConfigManager()
        track_by = self.config_manager.get_track_by()
        self.panels: dict[str, ResourcePanel] = {
            "containers": ResourcePanel("containers", backend.get_containers, format_container_row, track_by),
            "images": ResourcePanel("images", backend.get_images, format_image_row, track_by),
            "volumes": ResourcePanel("volumes", backend.get_volumes, format_volume_row, track_by),
            "networks": ResourcePanel("networks", backend.get_networks, format_network_row, track_by),
        }
        self.handlers: dict[tuple[str, str], Callable[[str], Any]] = {
            ("containers", "start"): self._container_start,
            ("containers", "stop"): self._container_stop,
            ("containers", "remove"): self._remove,
            ("containers", "logs"): self._container_logs,
            ("containers", "inspect"): self._container_inspect,
            ("containers", "stats"): self._container_stats,
            ("containers", "run_alpine"): self._run_alpine,
            ("containers", "run_custom"): self._run_custom,
            ("images", "pull"): self._pull_image,
            ("images", "remove"): self._remove,
            ("volumes", "create"): self._create_volume,
            ("volumes", "remove"): self._remove,
            ("networks", "create"): self._create_network,
            ("networks", "remove"): self._remove,
        }

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(initial="tab-containers"):
            for kind in KINDS:
                with TabPane(kind.capitalize(), id=f"tab-{kind}"):
                    yield ResourcePanelView(self.panels[kind], PANEL_BUTTONS[kind])
            with TabPane("Settings", id="tab-settings"):
                yield SettingsPanel(self.registry.config)
        yield Footer()

    def on_mount(self) -> None:
        self.action_refresh_all()

    def _view(self, kind: str) -> ResourcePanelView:
        return self.query_one(f"#panel-{kind}", ResourcePanelView)

    # --- ENGINE CALL DISPATCH ---

    def _dispatch(self, kind: str, work: Any) -> None:
        self.run_worker(work, group=f"engine-{kind}")

    async def _run_engine(self, func: Callable, *args: Any) -> Any:
        return await asyncio.to_thread(func, *args)

    async def _refresh_flow(self, kind: str) -> None:
        view = self._view(kind)
        view.set_busy(True)
        try:
            ok = await self._run_engine(self.panels[kind].refresh)
            if not ok:
                self.notify(f"Could not list {kind}", severity="error")
            await view.sync()
        finally:
            view.set_busy(False)

    async def _action_flow(self, kind: str, action: str) -> None:
        view = self._view(kind)
        handler = self.handlers[(kind, action)]
        view.set_busy(True)
        try:
            await handler(kind)
            await view.sync()
        except EngineError as e:
            self.notify(rich_escape(str(e)), title=f"{action.capitalize()} failed", severity="error")
        finally:
            view.set_busy(False)

    # --- PANEL ACTIONS ---

    async def _perform(self, kind: str, operation: Callable[[str], Any], refresh: bool = True) -> Any:
        result = await self._run_engine(self.panels[kind].action, operation, refresh)
        return result

    async def _container_start(self, kind: str) -> None:
        await self._perform(kind, self.backend.start_container)

    async def _container_stop(self, kind: str) -> None:
        await self._perform(kind, self.backend.stop_container)

    async def _remove(self, kind: str) -> None:
        operation = {
            "containers": self.backend.remove_container,
            "images": self.backend.remove_image,
            "volumes": self.backend.remove_volume,
            "networks": self.backend.remove_network,
        }[kind]
        if self.config_manager.get_config().ui.confirm_remove:
            selection = self.panels[kind].selection
            if selection.is_empty:
                return
            if not await self.push_screen_wait(ConfirmScreen(f"Remove selected {kind[:-1]}?")):
                return
        await self._perform(kind, operation)

    async def _container_logs(self, kind: str) -> None:
        tail = self.config_manager.get_logs_tail()
        result = await self._perform(kind, lambda cid: self.backend.get_logs(cid, tail), refresh=False)
        if result.performed:
            self.push_screen(TextViewerScreen("Logs", result.value))

    async def _container_inspect(self, kind: str) -> None:
        result = await self._perform(kind, self.backend.inspect_container, refresh=False)
        if result.performed:
            self.push_screen(TextViewerScreen("Inspect Container", format_inspect(result.value)))

    async def _container_stats(self, kind: str) -> None:
        result = await self._perform(kind, self.backend.get_container_stats, refresh=False)
        if result.performed:
            self.push_screen(TextViewerScreen("Container Stats", format_stats(result.value)))

    async def _run_alpine(self, kind: str) -> None:
        try:
            await self._run_engine(self.backend.run_alpine)
        except EngineError as e:
            self.push_screen(MessageScreen("Error", str(e), error=True))
            return
        await self._run_engine(self.panels[kind].refresh)

    async def _open_form(self, kind: str, title: str, fields: list[FormField],
                         submit: Callable[[dict[str, Any]], Any]) -> None:
        if await self.push_screen_wait(FormScreen(title, fields, submit)):
            await self._run_engine(self.panels[kind].refresh)

    async def _run_custom(self, kind: str) -> None:
        fields = [
            FormField("image", "Image", default="alpine", required=True),
            FormField("command", "Command", default="echo hello world"),
            FormField("env", "Env (comma-separated)", default="KEY=value,FOO=bar"),
            FormField("ports", "Ports (comma-separated, e.g. 8080:80)", default="8080:80"),
            FormField("memory", "Memory (MB)", placeholder="e.g. 256 (MB)"),
            FormField("cpu_shares", "CPU Shares", placeholder="e.g. 1024"),
            FormField("privileged", "Privileged Mode", checkbox=True),
        ]

        def submit(values: dict[str, Any]) -> None:
            spec = build_container_spec(
                values["image"], values["command"], values["env"], values["ports"],
                values["memory"], values["cpu_shares"], bool(values["privileged"]),
            )
            self.backend.run_container(spec)

        await self._open_form(kind, "Run Custom Container", fields, submit)

    async def _pull_image(self, kind: str) -> None:
        fields = [FormField("image", "Image Name (e.g. alpine:latest)", default="alpine", required=True)]
        await self._open_form(kind, "Pull Image", fields,
                              lambda values: self.backend.pull_image(values["image"].strip()))

    async def _create_volume(self, kind: str) -> None:
        fields = [FormField("name", "Volume Name", required=True)]
        await self._open_form(kind, "Create Volume", fields,
                              lambda values: self.backend.create_volume(values["name"].strip()))

    async def _create_network(self, kind: str) -> None:
        fields = [
            FormField("name", "Network Name", required=True),
            FormField("driver", "Driver", default="bridge", required=True),
            FormField("parent", "Macvlan Parent", placeholder="Optional: macvlan parent (e.g. eth0)"),
        ]
        await self._open_form(
            kind, "Create Network", fields,
            lambda values: self.backend.create_network(
                values["name"].strip(), values["driver"].strip(), values["parent"].strip()
            ),
        )

    # --- SETTINGS ---

    async def _reconnect_flow(self) -> None:
        settings = self.query_one(SettingsPanel)
        button = self.query_one("#settings__submit", Button)
        config = settings.read(self.registry.config.timeout)
        button.disabled = True
        try:
            await self._run_engine(self.registry.connect, config)
        except ConnectionSetupError as e:
            logger.error(str(e))
            self.push_screen(MessageScreen("Error", str(e), error=True))
            return
        finally:
            button.disabled = False
        self.push_screen(MessageScreen("Settings", "Docker client updated successfully"))
        self.action_refresh_all()

    # --- EVENTS ---

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if "__" not in button_id:
            return
        kind, action = button_id.split("__", 1)
        if kind == "settings":
            self.run_worker(self._reconnect_flow(), group="engine-settings", exclusive=True)
        elif action == "refresh":
            self._dispatch(kind, self._refresh_flow(kind))
        else:
            self._dispatch(kind, self._action_flow(kind, action))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        list_id = event.list_view.id or ""
        kind = list_id.rsplit("-", 1)[0]
        if kind in self.panels and event.list_view.index is not None:
            self.panels[kind].select(event.list_view.index)

    def action_refresh_all(self) -> None:
        for kind in KINDS:
            self._dispatch(kind, self._refresh_flow(kind))

    def action_cancel(self) -> None:
        cancelled = []
        for kind in KINDS + ["settings"]:
            cancelled.extend(self.workers.cancel_group(self, f"engine-{kind}"))
        if cancelled:
            self.notify("Cancelled; the engine may still complete the call", severity="warning")


def run() -> None:
    config_manager = ConfigManager()
    log_cfg = config_manager.get_config().logging
    configure_logging(log_cfg.level, log_cfg.file_path, log_cfg.max_size_mb, log_cfg.backup_count)

    registry = ClientRegistry()
    connection = config_manager.get_connection_config()
    try:
        registry.connect(connection)
    except ConnectionSetupError as e:
        logger.critical(f"Error creating Docker client: {e}")
        print(f"Error creating Docker client: {e}", file=sys.stderr)
        sys.exit(1)

    app = DockPanelApp(DockerBackend(registry), config_manager)
    try:
        app.run()
    finally:
        registry.close()
