# barmods

The logic behind a set of status bar modules for Wayland desktops, kept
apart from any widget toolkit. Each module takes the data a compositor or
system service reports and turns it into the text, style classes and
commands a bar would show or send.

The package needs nothing beyond the Python standard library, on Python
3.10 or later.

## Modules

| Module | Purpose |
| --- | --- |
| `barmods.ipc` | Talk to sway over its Unix socket (`SwayIpc`, `IpcType`, `IpcResponse`, `encode_message`, `decode_header`, `get_socket_path`) |
| `barmods.sway_bar` | Decide when a bar in `hide` mode is shown (`BarVisibility`, `SwaybarConfig`, `parse_config`, `is_module_enabled`, `subscription_events`) |
| `barmods.mode` | Show the current binding mode (`ModeLabel`) |
| `barmods.scratchpad` | Count and list scratchpad windows (`Scratchpad`) |
| `barmods.workspaces` | Order and label sway workspaces, including persistent ones, and build switch commands (`SwayWorkspaces`, `convert_workspace_name_to_num`, `trim_workspace_name`) |
| `barmods.language` | Keyboard layout names, numbered short names and flags (`LanguageLabel`, `Layout`, `load_layouts`) |
| `barmods.temperature` | Read thermal sensor files and format readings (`Temperature`, `resolve_sensor_path`, `read_temperature`) |
| `barmods.workspace_manager` | Workspace groups and ordering for the ext-workspace protocol (`WorkspaceManager`, `WorkspaceGroup`, `Workspace`, `WorkspaceState`) |
| `barmods.sni_watcher` | StatusNotifier watcher registry (`StatusNotifierWatcher`, `WatcherError`, `is_bus_name`) |
| `barmods.sni_host` | StatusNotifier host and tray layout bookkeeping (`TrayHost`, `TrayItem`, `Tray`, `split_service`) |

## Examples

Talking to a running sway session:

```python
from barmods.ipc import IpcType, SwayIpc

with SwayIpc() as ipc:
    response = ipc.send_cmd(IpcType.GET_WORKSPACES)
    print(response.json())
```

`SwayIpc` finds the socket through the `SWAYSOCK` environment variable and
otherwise runs `sway --get-socketpath`. Handlers appended to
`cmd_handlers` receive every reply to `send_cmd`; handlers appended to
`event_handlers` receive each event read by `handle_event` after
`subscribe(["workspace"])` or similar.

Workspace names follow sway's numbering rules:

```python
from barmods.workspaces import convert_workspace_name_to_num, trim_workspace_name

convert_workspace_name_to_num("3:mail")   # 3
convert_workspace_name_to_num("web")      # -1
trim_workspace_name("3:mail")             # "mail"
```

`SwayWorkspaces.on_workspaces` takes a `GET_WORKSPACES` reply (a JSON
string or the decoded list), adds configured `persistent_workspaces` and
sorts the result; `labels()` gives the text, style classes and visibility
of each button, and `click_command` / `scroll_command` give the command to
send.

Keyboard layout flags:

```python
from barmods.language import Layout

Layout(short_name="de").country_flag()   # "🇩🇪"
```

Tray items are registered by service string, with or without an object path:

```python
from barmods.sni_host import split_service
from barmods.sni_watcher import StatusNotifierWatcher

split_service(":1.42/org/ayatana/NotificationItem")
# (":1.42", "/org/ayatana/NotificationItem")

watcher = StatusNotifierWatcher()
watcher.register_item(":1.42")
watcher.registered_items()   # [":1.42/StatusNotifierItem"]
```

## Errors

- Failures on the IPC socket, an empty socket path, a failed subscription
  and an unsuccessful initial bar config raise `barmods.ipc.IpcError`.
- Invalid bus names and duplicate host registrations on the watcher raise
  `barmods.sni_watcher.WatcherError`.
- A temperature sensor file or hwmon directory that cannot be opened raises
  `RuntimeError` ("Can't open ...").

Malformed event payloads given to the label classes are logged through the
`logging` module rather than raised.

## What it does not do

- It draws nothing: there are no widgets, windows or icons, only the text,
  classes and commands a bar would use.
- It has no command to run and no long-running service; the caller drives
  `SwayIpc.handle_event` and feeds replies to the modules.
- It does not connect to D-Bus or to a Wayland display itself; the watcher,
  tray host and workspace manager keep bookkeeping for events the caller
  passes in.
- It does not show the focused window's title, the logged-in user and
  uptime, or battery and power device status.