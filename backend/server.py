import os
import sys
import threading
import time

# Ensure backend/ is on sys.path so sibling imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from config import DATA_PATH, PROJECT_ROOT
from data_loader import load_catalog
from data_source import CatalogDataSource, direct_prereqs_lookup, prereq_tree_lookup
from eligibility import check_can_take, get_eligible_courses, sort_courses
from normalizer import normalize_code, normalize_completed

app = Flask(__name__)

BUNDLED_DATA_PATH = os.path.join(PROJECT_ROOT, "data")
SLOW_REQUEST_MS = 750.0
SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "same-origin",
}


def course_data_mtime(path: str) -> float | None:
    """Newest modification time of the course data (CSV directory or workbook)."""
    try:
        if not os.path.isdir(path):
            return os.path.getmtime(path)
        stamps = [
            os.path.getmtime(os.path.join(path, name))
            for name in os.listdir(path)
            if name.endswith(".csv")
        ]
    except OSError:
        return None
    return max(stamps, default=None)


class CatalogHolder:
    """
    The catalog the API serves, swapped in whole when the data on disk
    changes. A failed reload keeps the previous catalog.
    """

    def __init__(self, path: str, catalog: dict):
        self.path = path
        self.catalog = catalog
        self.source = CatalogDataSource(catalog)
        self.mtime = course_data_mtime(path)
        self._lock = threading.Lock()

    def _is_stale(self, mtime: float | None) -> bool:
        return mtime is not None and (self.mtime is None or mtime > self.mtime)

    def reload_if_changed(self, force: bool = False) -> bool:
        if not force and not self._is_stale(course_data_mtime(self.path)):
            return False

        with self._lock:
            mtime = course_data_mtime(self.path)
            if not force and not self._is_stale(mtime):
                return False
            try:
                catalog = load_catalog(self.path)
            except Exception as exc:
                print(f"[WARN] Course data reload failed; serving previous catalog: {exc}", file=sys.stderr)
                return False

            self.catalog = catalog
            self.source = CatalogDataSource(catalog)
            self.mtime = mtime
            print(f"[OK] Reloaded {len(catalog['catalog_codes'])} courses from {self.path}")
            return True


def _open_catalog(path: str) -> CatalogHolder:
    if not os.path.exists(path) and path != BUNDLED_DATA_PATH and os.path.exists(BUNDLED_DATA_PATH):
        print(
            f"[WARN] DATA_PATH not found ({path}); using bundled course data ({BUNDLED_DATA_PATH}).",
            file=sys.stderr,
        )
        path = BUNDLED_DATA_PATH
    try:
        holder = CatalogHolder(path, load_catalog(path))
    except FileNotFoundError:
        print(f"[FATAL] Course data not found: {path}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"[FATAL] Could not load course data from {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[OK] Loaded {len(holder.catalog['catalog_codes'])} courses from {path}")
    return holder


_catalog = _open_catalog(DATA_PATH)


def _source() -> CatalogDataSource:
    try:
        _catalog.reload_if_changed()
    except Exception as exc:
        print(f"[WARN] Course data freshness check failed: {exc}", file=sys.stderr)
    return _catalog.source


def _error(error_code: str, message: str, status: int):
    return jsonify({"mode": "error", "error": {"error_code": error_code, "message": message}}), status


def _course_code_arg(raw: str) -> str:
    return normalize_code(raw) or raw.strip()


def _json_body():
    body = request.get_json(force=True, silent=True)
    return body if isinstance(body, dict) else None


# -- Request timing / security headers -------------------------------------
@app.before_request
def _start_request_timer():
    g.request_started = time.perf_counter()


@app.after_request
def _finish_request(response):
    response.headers.update(SECURITY_HEADERS)
    started = getattr(g, "request_started", None)
    if started is not None:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if elapsed_ms >= SLOW_REQUEST_MS:
            print(
                f"[SLOW] {request.method} {request.path} status={response.status_code} "
                f"duration_ms={elapsed_ms:.1f}"
            )
    return response


@app.errorhandler(Exception)
def handle_error(e):
    if isinstance(e, HTTPException):
        return _error(e.name.upper().replace(" ", "_"), e.description or e.name, e.code)
    print(f"[WARN] Unhandled error: {e}", file=sys.stderr)
    return _error("SERVER_ERROR", "An unexpected server error occurred.", 500)


# -- Routes ----------------------------------------------------------------
@app.route("/health", methods=["GET"])
@app.route("/api/health", endpoint="api_health", methods=["GET"])
def health_endpoint():
    return jsonify({"status": "ok", "courses_loaded": len(_catalog.catalog["catalog_codes"])})


@app.route("/api/courses/get-all-courses", methods=["GET"])
def get_all_courses():
    return jsonify([c.to_dict() for c in _source().get_all_courses()])


@app.route("/api/courses/prerequisite-relationships", methods=["GET"])
def get_prerequisite_relationships():
    return jsonify(_source().get_prerequisite_relationships())


@app.route("/api/courses/<course_code>", methods=["GET"])
def get_course(course_code):
    course = _source().get_course(_course_code_arg(course_code))
    if course is None:
        return _error("UNKNOWN_COURSE", f"{course_code} is not in the course catalog.", 404)
    return jsonify(course.to_dict())


@app.route("/api/courses/<course_code>/prerequisites", methods=["GET"])
def get_course_prerequisites(course_code):
    return jsonify(_source().get_course_prerequisites(_course_code_arg(course_code)))


@app.route("/api/courses/<course_code>/prerequisite-tree", methods=["GET"])
def get_course_prerequisite_tree(course_code):
    return jsonify(_source().get_course_prerequisite_tree(_course_code_arg(course_code)))


@app.route("/api/courses/eligible", methods=["POST"])
def eligible_endpoint():
    """Courses the student may take next, in department/number order."""
    source = _source()
    body = _json_body()
    if body is None:
        return _error("INVALID_INPUT", "Request body must be valid JSON.", 400)

    completed = normalize_completed(body.get("completedCourses"), source.catalog_codes)["valid"]
    eligible = get_eligible_courses(
        source.get_all_courses(),
        completed,
        prereq_tree_lookup(source),
        direct_prereqs_lookup(source),
    )
    completed_set = set(completed)
    return jsonify([
        c.to_dict() for c in sort_courses(eligible) if c.course_code not in completed_set
    ])


@app.route("/api/courses/can-take", methods=["POST"])
def can_take_endpoint():
    source = _source()
    body = _json_body()
    if body is None:
        return _error("INVALID_INPUT", "Request body must be valid JSON.", 400)

    requested = normalize_code(str(body.get("courseCode") or ""))
    if not requested:
        return _error("INVALID_INPUT", "courseCode is required.", 400)

    completed = normalize_completed(body.get("completedCourses"), source.catalog_codes)["valid"]
    result = check_can_take(
        requested,
        source.get_all_courses(),
        completed,
        prereq_tree_lookup(source),
        direct_prereqs_lookup(source),
    )
    return jsonify({"mode": "can_take", "courseCode": requested, **result})


@app.route("/api/<path:rest>", methods=["GET", "POST", "PUT", "DELETE", "PATCH"])
def api_catch_all(rest):
    return _error("NOT_FOUND", f"/api/{rest} not found", 404)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    debug = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(host="0.0.0.0", port=port, debug=debug)
