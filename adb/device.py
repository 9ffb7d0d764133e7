import logging
import re
import subprocess
import time
from pathlib import Path
from typing import Optional, Tuple

# Name of the adb executable (assumes adb is on PATH)
ADB = "adb"

ADB_TEXT_KW = dict(text=True, encoding="utf-8", errors="ignore")

KEYCODE_BACK = 4


class AndroidDevice:
    """Small wrapper around adb.

    It only performs gestures and reads the accessibility dump. Anything that
    interprets the dump (finding entries, deciding what to tap) lives in the
    picker package.
    """

    def __init__(self, serial: Optional[str] = None):
        self.serial = serial
        self._size: Optional[Tuple[int, int]] = None

    def _adb(self, *args: str) -> list[str]:
        if self.serial:
            return [ADB, "-s", self.serial, *args]
        return [ADB, *args]

    def _run(self, cmd: list[str], check: bool = True):
        logging.debug(f"[ADB] {' '.join(cmd)}")
        return subprocess.run(cmd, check=check)

    def _run_capture(self, cmd: list[str], check: bool = True, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        """Run a command and capture stdout/stderr for parsing."""
        logging.debug(f"[ADB] {' '.join(cmd)}")
        return subprocess.run(cmd, check=check, capture_output=True, timeout=timeout, **ADB_TEXT_KW)

    # App lifecycle

    def launch_app(self, package: str):
        """Start the launcher activity of `package` via monkey."""
        proc = self._run_capture(self._adb(
            "shell", "monkey",
            "-p", package,
            "-c", "android.intent.category.LAUNCHER",
            "1",
        ), check=False)
        out = (proc.stdout or "") + (proc.stderr or "")
        if proc.returncode != 0 or "No activities found" in out:
            raise RuntimeError(f"Failed to launch {package}: {out.strip()[-300:]}")
        time.sleep(2)

    # Basic input

    def tap(self, x: int, y: int):
        self._run(self._adb("shell", "input", "tap", str(x), str(y)))
        time.sleep(0.4)

    def swipe(self, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 350):
        self._run(self._adb("shell", "input", "swipe", str(x1), str(y1), str(x2), str(y2), str(duration_ms)))
        time.sleep(0.5)

    def key(self, keycode: int):
        self._run(self._adb("shell", "input", "keyevent", str(keycode)))
        time.sleep(0.3)

    def back(self):
        self.key(KEYCODE_BACK)

    # Screens + UI hierarchy

    def screenshot(self, path_or_name: str) -> Path:
        """Take a screenshot.

        "something.png" is saved exactly there, "something" goes to
        runs/screenshots/something.png.
        """
        p = Path(path_or_name)
        if p.suffix.lower() != ".png":
            p = Path("runs") / "screenshots" / f"{path_or_name}.png"

        p.parent.mkdir(parents=True, exist_ok=True)

        # exec-out avoids line ending corruption
        with open(p, "wb") as f:
            subprocess.run(self._adb("exec-out", "screencap", "-p"), stdout=f, check=True)

        return p

    def wm_size(self) -> str:
        p = subprocess.run(self._adb("shell", "wm", "size"), capture_output=True, **ADB_TEXT_KW)
        return (p.stdout or p.stderr or "").strip()

    def screen_size(self) -> Tuple[int, int]:
        """(width, height) in pixels, cached; falls back to 1080x2400."""
        if self._size is None:
            m = re.search(r"(\d+)\s*x\s*(\d+)", self.wm_size() or "")
            self._size = (int(m.group(1)), int(m.group(2))) if m else (1080, 2400)
        return self._size

    def ui_dump(self) -> str:
        """Return the uiautomator XML dump, or "" when the dump failed."""
        remote = "/sdcard/window_dump.xml"
        try:
            self._run_capture(self._adb("shell", "uiautomator", "dump", remote), check=False, timeout=5)
            p = self._run_capture(self._adb("shell", "cat", remote), check=False, timeout=5)
            return (p.stdout or "").strip()
        except subprocess.TimeoutExpired:
            logging.debug("[ADB] uiautomator dump timed out")
            return ""
