"""Launch the web server in a subprocess and play one round over HTTP.

Usage:
    python scripts/check_web.py
"""

from __future__ import annotations

import contextlib
import json
import os
import socket
import subprocess
import sys
import time
import urllib.error
import urllib.request


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _post(url: str, payload: dict[str, object]) -> dict[str, object]:
    request = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(request, timeout=5) as resp:
        return json.loads(resp.read().decode("utf-8"))


def main() -> int:
    port = int(os.environ.get("PORT", str(free_port())))
    proc = subprocess.Popen(
        [sys.executable, "-m", "rpsgame", "serve", "--host", "127.0.0.1", "--port", str(port), "--no-store", "--delay", "0"],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )

    base = f"http://127.0.0.1:{port}"
    try:
        for _ in range(100):
            if proc.poll() is not None:
                break
            time.sleep(0.1)
            try:
                with urllib.request.urlopen(f"{base}/healthz", timeout=1) as resp:
                    if resp.status == 200:
                        break
            except (urllib.error.URLError, OSError):
                continue

        if proc.returncode is not None:
            output = proc.stdout.read() if proc.stdout else ""
            sys.stderr.write(output[-2000:])
            return 2

        session = _post(f"{base}/api/v1/session", {"restore": False})
        sid = session["session"]
        played = _post(f"{base}/api/v1/session/{sid}/play", {"choice": "rock"})
        stats = played["stats"]
        print(f"{played['player_choice']} vs {played['computer_choice']}: {played['outcome']} ({stats['win_rate']}% win rate)")
        return 0 if stats["games_played"] == 1 else 1
    except (urllib.error.URLError, OSError, KeyError, ValueError) as exc:
        print(f"web check failed: {exc}", file=sys.stderr)
        return 2
    finally:
        proc.terminate()
        with contextlib.suppress(Exception):
            proc.wait(timeout=2)
        if proc.poll() is None:
            proc.kill()
            with contextlib.suppress(Exception):
                proc.wait(timeout=2)


if __name__ == "__main__":
    raise SystemExit(main())
