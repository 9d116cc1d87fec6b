"""Status bar module logic for sway and other Wayland compositors: IPC, workspaces, layouts, temperature and tray bookkeeping."""

__version__ = "0.1.0"