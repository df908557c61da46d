from __future__ import annotations
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from flask import Flask, request, jsonify

import logging
import time
import json
from collections import deque, defaultdict

from services.complexity.scorer import ComplexityInput, ComplexityLevel
from services.config.cache import ConfigCache, ConfigUnavailable
from services.config.env import get_api_config, get_cache_config, get_storage_config
from services.config.settings import default_settings_view, derive_baselines, normalize_member
from services.costing.inputs import InvalidInput
from services.estimates.fleet import FleetInputs, estimate_fleet_cost
from services.planning.delivery import delivery_plan, total_days
from services.projects.service import ProjectNotFound, ProjectService, parse_payload
from services.roi.engine import ROIEngine
from services.roi.projection import breakeven_projection
from services.storage.documents import DocumentStore
from services.storage.settings_repo import SettingsRepository

logger = logging.getLogger(__name__)

app = Flask(__name__)

OPENAPI_PATH = Path(__file__).with_name("openapi.json")


@dataclass
class Services:
    store: DocumentStore
    settings: SettingsRepository
    cache: ConfigCache
    engine: ROIEngine
    projects: ProjectService


def init_services(data_root: str | Path | None = None, ttl_seconds: float | None = None) -> Services:
    """(Re)wire persistence, cache and engine; tests point this at a temp dir."""
    global SERVICES
    cache_cfg = get_cache_config()
    store = DocumentStore(data_root or get_storage_config().data_root)
    settings = SettingsRepository(store)
    cache = ConfigCache(settings, ttl_seconds=cache_cfg.ttl_seconds if ttl_seconds is None else ttl_seconds)
    settings.attach_cache(cache)
    engine = ROIEngine(cache)
    SERVICES = Services(store=store, settings=settings, cache=cache, engine=engine,
                        projects=ProjectService(store, engine))
    return SERVICES


SERVICES = init_services()


def invalidate_config_cache() -> None:
    SERVICES.cache.invalidate()


# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return get_api_config().api_key


def _get_rate_limit() -> tuple[int, float]:
    n = app.config.get('RATE_LIMIT_N')
    w = app.config.get('RATE_LIMIT_WINDOW_SEC')
    if n is None or w is None:
        cfg = get_api_config()
        n = cfg.rate_limit_n if n is None else n
        w = cfg.rate_limit_window_sec if w is None else w
    return int(n), float(w)


def _fetch_timeout() -> float | None:
    return get_cache_config().fetch_timeout_seconds


_recent: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=100))

RATE_LIMITED_PATHS = ('/api/projects', '/api/calculate')


def _client_ip() -> str:
    xff = request.headers.get('X-Forwarded-For')
    if xff:
        return xff.split(',')[0].strip()
    return request.remote_addr or 'anon'


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return _fail('unauthorized', 401)
    return None


def _check_rate_limit(ip: str):
    # Allow if rate limiting disabled or N <= 0
    n, window = _get_rate_limit()
    if n <= 0:
        return None
    now = time.time()
    dq = _recent[ip]
    # Drop old entries outside window
    while dq and now - dq[0] > window:
        dq.popleft()
    if len(dq) >= n:
        retry = max(0.0, window - (now - dq[0]))
        resp = jsonify({'success': False, 'error': 'rate_limited'})
        resp.status_code = 429
        resp.headers['Retry-After'] = f"{retry:.2f}"
        return resp
    dq.append(now)
    return None


def _ok(data: Any, status: int = 200):
    return jsonify({'success': True, 'data': data}), status


def _fail(error: str, status: int):
    return jsonify({'success': False, 'error': error}), status


def _payload() -> dict:
    body = request.get_json(force=True, silent=True)
    return body if isinstance(body, dict) else {}


@app.before_request
def _auth_and_rate_limit():
    if request.path.startswith('/api') and request.path != '/api/health':
        unauthorized = _check_api_key()
        if unauthorized is not None:
            return unauthorized
        if request.method == 'POST' and request.path in RATE_LIMITED_PATHS:
            rl = _check_rate_limit(_client_ip())
            if rl is not None:
                return rl
    return None


@app.errorhandler(ConfigUnavailable)
def _config_unavailable(e):
    logger.error("Calculation aborted: %s", e)
    return _fail('config_unavailable', 503)


@app.errorhandler(InvalidInput)
def _invalid_input(e):
    return _fail(str(e), 400)


@app.errorhandler(ProjectNotFound)
def _project_not_found(e):
    return _fail('not_found', 404)


@app.get('/')
def index():
    return jsonify({
        'message': 'RPA ROI Navigator API',
        'version': '1.0.0',
        'endpoints': {
            'health': '/api/health',
            'projects': '/api/projects',
            'settings': '/api/settings',
            'calculate': '/api/calculate',
        },
    })


@app.get('/api/health')
def health():
    return jsonify({'status': 'ok', 'timestamp': time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())})


@app.get('/openapi.json')
def get_openapi():
    try:
        spec = json.loads(OPENAPI_PATH.read_text())
    except (OSError, ValueError):
        return jsonify({'error': 'openapi_not_found'}), 404
    return jsonify(spec)


# --- Settings ---

@app.get('/api/settings')
def get_settings():
    doc = SERVICES.settings.fetch_global_configuration()
    if doc is None:
        return _ok(default_settings_view())
    members = doc.get('team_composition')
    team = [normalize_member(m) for m in members if isinstance(m, dict)] if isinstance(members, list) else []
    return _ok({**doc, 'calculated_costs': {k: v['cost'] for k, v in derive_baselines(team).items()}})


@app.put('/api/settings')
def put_settings():
    updates = _payload()
    if not updates:
        return _fail('settings payload is required', 400)
    # the repository invalidates the calculation cache after writing
    doc = SERVICES.settings.update_settings(updates)
    return _ok(doc)


# --- Calculations (no persistence) ---

@app.post('/api/complexity/score')
def post_complexity_score():
    cx = ComplexityInput.from_dict(_payload())
    result = SERVICES.engine.preview_complexity(cx)
    data = {'totalPoints': result.total_points, 'classification': result.classification.value}
    if request.args.get('withDevelopment') in ('1', 'true'):
        dev = SERVICES.engine.preview_development(cx, timeout=_fetch_timeout())
        data['development'] = {'cost': dev.cost, 'hours': dev.hours}
    return _ok(data)


@app.post('/api/calculate')
def post_calculate():
    op, cx, st = parse_payload(_payload())
    result = SERVICES.engine.calculate_full_roi(op, cx, st, timeout=_fetch_timeout())
    return _ok(result.to_dict())


@app.post('/api/projection')
def post_projection():
    payload = _payload()
    try:
        months = int(payload.get('months') or 36)
    except (TypeError, ValueError):
        raise InvalidInput('months must be an integer')
    if not 1 <= months <= 120:
        raise InvalidInput('months must be between 1 and 120')
    op, cx, st = parse_payload(payload)
    result = SERVICES.engine.calculate_full_roi(op, cx, st, timeout=_fetch_timeout())
    proj = breakeven_projection(result, months=months,
                                opex_exempt_after_year1=bool(payload.get('opexExemptAfterYear1')))
    return _ok({'breakevenMonth': proj.breakeven_month, 'rows': [asdict(r) for r in proj.rows]})


@app.post('/api/estimates/fleet')
def post_fleet_estimate():
    stored = (SERVICES.settings.fetch_global_configuration() or {}).get('annual_cost_estimate') or {}
    inputs = FleetInputs.from_dict({**stored, **_payload()})
    return _ok({'inputs': asdict(inputs), 'estimate': estimate_fleet_cost(inputs)})


# --- Projects ---

@app.post('/api/projects')
def post_project():
    project = SERVICES.projects.create_project(_payload())
    return _ok(project, 201)


@app.get('/api/projects')
def list_projects():
    owner = request.args.get('ownerUid')
    try:
        limit = int(request.args.get('limit', '50'))
    except ValueError:
        return _fail('limit must be an integer', 400)
    return _ok(SERVICES.projects.list_projects(owner, limit=limit))


@app.get('/api/projects/<pid>')
def get_project(pid: str):
    return _ok(SERVICES.projects.get_project(pid))


@app.put('/api/projects/<pid>')
def put_project(pid: str):
    return _ok(SERVICES.projects.update_project(pid, _payload()))


@app.delete('/api/projects/<pid>')
def delete_project(pid: str):
    SERVICES.projects.delete_project(pid)
    return jsonify({'success': True, 'message': 'Project deleted successfully'})


@app.get('/api/projects/<pid>/delivery-plan')
def get_delivery_plan(pid: str):
    project = SERVICES.projects.get_project(pid)
    classification = (project.get('complexity_score') or {}).get('classification')
    try:
        level = ComplexityLevel(classification)
    except ValueError:
        level = ComplexityLevel.SIMPLE
    config = SERVICES.engine.configuration(timeout=_fetch_timeout())
    plan = delivery_plan(config.team_composition, level)
    return _ok({'classification': level.value, 'totalDays': total_days(plan), 'phases': [asdict(p) for p in plan]})


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host='0.0.0.0', port=get_api_config().port)
