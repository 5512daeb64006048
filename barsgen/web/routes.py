"""JSON API routes for previewing and running test pattern jobs."""

import shlex
import threading
import uuid
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request, send_file

from barsgen import engine, ffutil
from barsgen.config import PatternConfig, check_values
from barsgen.profiles import BUILTIN_PROFILES, ProfileNotFoundError

bp = Blueprint("web", __name__)

# In-memory job store: job_id -> job dict
_jobs: dict[str, dict] = {}

# Server-side paths (logo, fontfile, ffmpeg) are not settable over HTTP
_ALLOWED_KEYS = {
    "output_format",
    "output_target",
    "duration",
    "framerate",
    "header",
    "profile",
    "size",
    "beep_frequency",
    "beep_length",
    "realtime",
}


def _is_url(target: str) -> bool:
    return "://" in target


def _config_from_json(data: dict, job_dir: Path | None = None) -> PatternConfig:
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    unknown = sorted(set(data) - _ALLOWED_KEYS)
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(unknown)}")
    if "output_format" not in data or "output_target" not in data:
        raise ValueError("Request must contain 'output_format' and 'output_target'")

    values = check_values(data)
    if not values["output_format"] or not values["output_target"]:
        raise ValueError("'output_format' and 'output_target' must not be empty")

    target = values["output_target"]
    if job_dir is not None and not _is_url(target):
        # File outputs stay inside the job directory
        name = Path(target).name
        if not name or name in (".", ".."):
            raise ValueError(f"Invalid output target {target!r}")
        target = str(job_dir / name)
    values["output_target"] = target
    values["overwrite"] = True
    return PatternConfig(**values)


def _public(job: dict) -> dict:
    resp = {
        "status": job["status"],
        "output_target": job["config"].output_target,
    }
    if job.get("returncode") is not None:
        resp["returncode"] = job["returncode"]
    if job.get("error"):
        resp["error"] = job["error"]
    return resp


@bp.route("/")
def index():
    return jsonify({"name": "barsgen", "profiles": sorted(BUILTIN_PROFILES)})


@bp.route("/api/profiles")
def list_profiles():
    return jsonify([
        {
            "name": p.name,
            "description": p.description,
            "video": p.video,
            "audio": p.audio,
        }
        for p in BUILTIN_PROFILES.values()
    ])


@bp.route("/api/command", methods=["POST"])
def preview_command():
    data = request.get_json(silent=True) or {}
    try:
        cmd = engine.prepare(_config_from_json(data))
    except (ProfileNotFoundError, ValueError, TypeError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"command": cmd, "shell": shlex.join(cmd)})


@bp.route("/api/jobs", methods=["POST"])
def start_job():
    data = request.get_json(silent=True) or {}

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id

    try:
        config = _config_from_json(data, job_dir=job_dir)
        cmd = engine.prepare(config)
        ffutil.check_ffmpeg(config.ffmpeg)
    except ffutil.FFmpegNotFoundError as e:
        return jsonify({"error": str(e)}), 503
    except (ProfileNotFoundError, ValueError, TypeError) as e:
        return jsonify({"error": str(e)}), 400

    job_dir.mkdir(parents=True, exist_ok=True)
    proc = ffutil.spawn(cmd)
    job = {
        "dir": job_dir,
        "config": config,
        "command": cmd,
        "process": proc,
        "status": "running",
        "returncode": None,
        "error": None,
    }
    _jobs[job_id] = job

    def wait():
        returncode = proc.wait()
        job["returncode"] = returncode
        if job["status"] == "stopping":
            job["status"] = "stopped"
        elif returncode == 0:
            job["status"] = "done"
        else:
            job["status"] = "error"
            job["error"] = f"ffmpeg exited with code {returncode}"

    threading.Thread(target=wait, daemon=True).start()
    return jsonify({"job_id": job_id, "command": cmd})


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(_public(_jobs[job_id]))


@bp.route("/api/jobs/<job_id>/stop", methods=["POST"])
def stop_job(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    if job["status"] != "running":
        return jsonify({"error": f"Job is {job['status']}"}), 409

    job["status"] = "stopping"
    job["process"].terminate()
    return jsonify({"status": "stopping"})


@bp.route("/api/jobs/<job_id>/result")
def download_result(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    if job["status"] != "done":
        return jsonify({"error": "Job not complete"}), 409

    target = job["config"].output_target
    if _is_url(target):
        return jsonify({"error": "Job output is a stream, not a file"}), 409

    return send_file(Path(target), as_attachment=True)
