"""Launch a local Chrome with remote debugging enabled.

PUBLIC API:
  - find_chrome: Locate a Chrome or Chromium executable on PATH
  - run_chrome: Start Chrome on a debugging port with a throwaway profile
"""

import logging
import shutil
import socket
import subprocess
from pathlib import Path

from pagetap.errors import PagetapError

logger = logging.getLogger(__name__)

CHROME_EXECUTABLES = (
    "google-chrome-stable",
    "google-chrome",
    "chromium-browser",
    "chromium",
)


def _is_port_in_use(port: int) -> bool:
    """Check if port is already bound."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(("localhost", port)) == 0


def find_chrome() -> str | None:
    """First Chrome or Chromium executable found on PATH."""
    for name in CHROME_EXECUTABLES:
        if shutil.which(name):
            return name
    return None


def build_command(chrome_exe: str, port: int, profile_dir: Path, headless: bool = True) -> list[str]:
    """Chrome command line for a debugging session."""
    cmd = [
        chrome_exe,
        f"--remote-debugging-port={port}",
        "--remote-allow-origins=*",
        f"--user-data-dir={profile_dir}",
        "--no-first-run",
        "--no-default-browser-check",
    ]
    if headless:
        cmd.append("--headless=new")
    return cmd


def run_chrome(port: int = 9222, headless: bool = True) -> subprocess.Popen:
    """Start Chrome with debugging on port.

    Args:
        port: Remote-debugging port.
        headless: Run without a window. PDF generation needs headless.

    Returns:
        The running Chrome process.

    Raises:
        PagetapError: If the port is taken or no Chrome executable is found.
    """
    if _is_port_in_use(port):
        raise PagetapError(f"Port {port} already in use (kill existing: pkill -f 'remote-debugging-port={port}')")

    chrome_exe = find_chrome()
    if not chrome_exe:
        raise PagetapError("Chrome not found. Install google-chrome-stable or chromium.")

    # Clean temp profile so the session never touches a real one
    profile_dir = Path(f"/tmp/pagetap-chrome-{port}")
    profile_dir.mkdir(parents=True, exist_ok=True)

    cmd = build_command(chrome_exe, port, profile_dir, headless=headless)
    logger.info(f"Launching {' '.join(cmd)}")
    return subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, start_new_session=True)
