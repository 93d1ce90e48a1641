"""Entry point for the connectivity-check desktop window."""
import os
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1]
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

try:
    import tkinter as tk
except ImportError:  # pragma: no cover - makes it obvious on headless environments
    print("Tkinter is not installed. On Debian/Raspberry Pi run: sudo apt-get install python3-tk", file=sys.stderr)
    sys.exit(1)

from conncheck.logic.connectivity_check import ConnectivityCheckController
from conncheck.logic.device import adb_from_config, gate_from_config, revision_from_config
from conncheck.logic.runtime_paths import build_default_config, load_or_create_config, resolve_config_path
from conncheck.logic.settings_store import AdbSettingsStore
from conncheck.ui.main_window import MainWindow


def _has_display() -> bool:
    """Determine if a display server is available (useful when SSHing in)."""
    return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def main() -> None:
    if not _has_display() and sys.platform.startswith("linux"):
        print(
            "No display detected. Reconnect with X forwarding (ssh -Y) or use the `conncheck` command line.",
            file=sys.stderr,
        )
        return

    cfg = load_or_create_config(resolve_config_path(), build_default_config())
    conn_cfg = cfg.get("connectivity", {}) or {}
    adb = adb_from_config(cfg)
    connectivity = ConnectivityCheckController(
        AdbSettingsStore(adb, namespace=str(conn_cfg.get("namespace", "global"))),
        is_restricted=gate_from_config(adb, cfg),
    )

    root = tk.Tk()
    root.title("Connectivity check")
    root.geometry("800x480")
    root.minsize(640, 420)
    MainWindow(root, connectivity=connectivity, revision=revision_from_config(adb, cfg))
    root.mainloop()


if __name__ == "__main__":
    main()
