import json
import os
import sys
import hashlib
import uuid
import subprocess
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ARTIFACT_DIR = "data/_artifacts"


def sha256_of_file(path: str) -> Optional[str]:
    try:
        h = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
        return h.hexdigest()
    except OSError:
        return None


def git_commit_hash() -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL, text=True
        )
        return out.strip()
    except (OSError, subprocess.CalledProcessError):
        return None


def environment_manifest() -> Dict[str, Any]:
    import platform

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "git_commit": git_commit_hash(),
        "python_executable": sys.executable if hasattr(sys, "executable") else None,
        "cwd": os.getcwd(),
    }


def write_manifest(
    manifest: Dict[str, Any],
    outputs: Optional[Dict[str, str]] = None,
    artifact_dir: str = ARTIFACT_DIR,
    prefix: str = "manifest",
) -> str:
    """Write a run manifest JSON and augment it with environment info and output hashes.

    Arguments:
      manifest: base manifest dict (will not be mutated)
      outputs: optional mapping of output logical name -> file path to hash
      artifact_dir: directory the manifest is written to
      prefix: filename prefix

    Returns path to manifest file.
    """
    os.makedirs(artifact_dir, exist_ok=True)
    m = dict(manifest)  # shallow copy
    m.setdefault("run_timestamp_utc", datetime.now(timezone.utc).isoformat())
    m["environment"] = environment_manifest()

    out_hashes = {}
    if outputs:
        for k, p in outputs.items():
            out_hashes[k] = {"path": p, "sha256": sha256_of_file(p)}
    m["outputs"] = out_hashes
    m.setdefault("run_id", str(uuid.uuid4()))

    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = os.path.join(artifact_dir, f"{prefix}_{ts}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(m, f, ensure_ascii=False, indent=2, default=str)
    return path
