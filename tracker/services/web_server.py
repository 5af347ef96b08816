import logging
import multiprocessing

from flask import Flask, jsonify
from flask_cors import CORS

from tracker import __version__
from tracker.core.config import default_config
from tracker.services.session_client import build_session_source
from tracker.services.snapshot import build_agents_snapshot, build_projects_snapshot

logger = logging.getLogger(__name__)

NO_STORE = 'no-store, must-revalidate'


def create_app(config=None):
    """
    config: 覆盖 default_config() 中的任意键 (测试时注入 CLOCK、AGENT_NAMES、SESSION_SOURCE_OBJ 等)
    """
    app = Flask(__name__)
    CORS(app)
    app.json.sort_keys = False

    app.config.update(default_config())
    if config:
        app.config.update(config)
    if app.config.get('SESSION_SOURCE_OBJ') is None:
        app.config['SESSION_SOURCE_OBJ'] = build_session_source(app.config)

    def _agents_snapshot():
        return build_agents_snapshot(
            app.config['SESSION_SOURCE_OBJ'],
            clock=app.config['CLOCK'],
            agent_names=app.config['AGENT_NAMES'],
            threshold_minutes=app.config['WORKING_THRESHOLD_MINUTES'],
            active_minutes=app.config['SESSIONS_ACTIVE_MINUTES'],
            limit=app.config['SESSIONS_LIMIT'],
            message_limit=app.config['SESSIONS_MESSAGE_LIMIT'],
        )

    def _projects_snapshot():
        return build_projects_snapshot(app.config['PROJECTS_FILE'], clock=app.config['CLOCK'])

    @app.route("/")
    def index():
        return "<h1>Project Tracker Server Ok</h1>"

    @app.route("/api/health")
    def health_check():
        return jsonify({'status': 'ok', 'message': 'Project Tracker server is running', 'version': __version__})

    @app.route("/api/config")
    def get_client_config():
        """前端轮询参数，客户端据此设置刷新间隔"""
        return jsonify({
            'pollIntervalMs': app.config['POLL_INTERVAL_MS'],
            'workingThresholdMinutes': app.config['WORKING_THRESHOLD_MINUTES'],
        })

    @app.route("/api/agents")
    def get_agents():
        """
        GET /api/agents
        {"agents": [...], "lastUpdated": ISO-8601, "timestamp": ms, "source": "openclaw-sessions"|"fallback"}
        Always 200; a failed read comes back as the fallback snapshot.
        """
        snapshot = _agents_snapshot()
        if snapshot.degraded:
            logger.warning("Serving fallback agent snapshot: %s", snapshot.error)
        resp = jsonify(snapshot.payload)
        resp.headers['Cache-Control'] = NO_STORE
        return resp

    @app.route("/api/projects")
    def get_projects():
        snapshot = _projects_snapshot()
        if snapshot.degraded:
            logger.warning("Serving empty project snapshot: %s", snapshot.error)
        resp = jsonify(snapshot.payload)
        resp.headers['Cache-Control'] = NO_STORE
        return resp

    @app.route("/api/projects/metrics")
    def get_project_metrics():
        snapshot = _projects_snapshot()
        resp = jsonify({
            'dashboard': snapshot.payload['dashboard'],
            'timestamp': snapshot.payload['timestamp'],
            'source': snapshot.source,
        })
        resp.headers['Cache-Control'] = NO_STORE
        return resp

    return app


def run_server(host=None, port=None):
    app = create_app()
    if host is None:
        host = app.config['HOST']
    if port is None:
        port = app.config['PORT']
    logger.info("[Web Server Process] Started (PID: %s) http://%s:%s",
                multiprocessing.current_process().pid, host, port)
    app.run(host=host, port=port, debug=False, use_reloader=False)


if __name__ == '__main__':
    run_server()
