"""
Flask API server for the Slot Finder scheduling assistant
"""
import logging
import random
import signal
import sys
import threading
import time
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS

from config.settings import Config
from slot_finder.ai_agent.llm_client import create_transport
from slot_finder.scheduler.orchestrator import SchedulingOrchestrator
from utils.validators import RequestValidator, DataSanitizer

logger = logging.getLogger(__name__)


class SlotFinderAPI:
    """
    Flask API server exposing the scheduling orchestrator
    """

    def __init__(self, orchestrator: SchedulingOrchestrator = None, transport_name: str = None):
        self.config = Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for cross-origin requests

        if orchestrator is None:
            try:
                orchestrator = SchedulingOrchestrator(transport=create_transport(transport_name))
                logger.info("SchedulingOrchestrator initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize SchedulingOrchestrator: {e}")
                orchestrator = None
        self.orchestrator = orchestrator

        self.requests_processed = 0
        self.outcome_counts = {"slots": 0, "clarification": 0, "error": 0}
        self._stats_lock = threading.Lock()  # handlers run on several threads
        self.start_time = time.time()

        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "scheduler_available": self.orchestrator is not None
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            with self._stats_lock:
                requests_processed = self.requests_processed
                outcomes = dict(self.outcome_counts)
            return jsonify({
                "status": "running",
                "requests_processed": requests_processed,
                "outcomes": outcomes,
                "uptime": time.time() - self.start_time,
                "scheduler_available": self.orchestrator is not None
            })

        @self.app.route('/schedule', methods=['POST'])
        def schedule():
            """Main endpoint: free-text scheduling request in, ranked slots out"""
            start_time = time.time()

            data = request.get_json(silent=True)
            if not data:
                logger.error("No JSON data received")
                return jsonify({"error": "No JSON data provided"}), 400

            errors = RequestValidator.validate_schedule_request(data)
            if errors:
                logger.warning(f"Rejected /schedule request: {errors}")
                return jsonify({"error": "Invalid request", "details": errors}), 400

            if self.orchestrator is None:
                logger.error("Scheduler not available")
                return jsonify({"error": "Scheduler not initialized"}), 500

            data = DataSanitizer.sanitize_request(data)
            logger.info(f"🚀 RECEIVED SCHEDULING REQUEST: {data['message'][:100]}")

            now = None
            if data.get("now"):
                now = datetime.fromisoformat(str(data["now"]).replace('Z', '+00:00')).replace(tzinfo=None)
            rng = random.Random(data["seed"]) if data.get("seed") is not None else None

            outcome = self.orchestrator.schedule(data["message"], now=now, rng=rng)

            processing_time = time.time() - start_time
            self._record_outcome(outcome.kind)

            logger.info(f"✅ REQUEST COMPLETED: {outcome.kind}")
            logger.info(f"   ⏱️  Processing time: {processing_time:.2f} seconds")
            logger.info(f"   📅 Slots returned: {len(outcome.slots)}")

            response = outcome.to_dict()
            response["processing_time"] = round(processing_time, 3)
            return jsonify(response)

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({"error": "Method not allowed"}), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _record_outcome(self, kind: str):
        with self._stats_lock:
            self.requests_processed += 1
            self.outcome_counts[kind] = self.outcome_counts.get(kind, 0) + 1

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._setup_signal_handlers()
        self.start_time = time.time()

        logger.info(f"Starting Slot Finder API server on {host}:{port}")
        logger.info(f"Scheduler status: {'Available' if self.orchestrator else 'Not Available'}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,
                use_reloader=False
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down Slot Finder API server...")
        if self.orchestrator is not None:
            for component in (self.orchestrator.gateway, self.orchestrator.formatter):
                transport = getattr(component, "transport", None)
                if transport is not None:
                    transport.close()


def create_app(orchestrator: SchedulingOrchestrator = None, transport_name: str = None) -> Flask:
    """Factory function to create Flask app"""
    api = SlotFinderAPI(orchestrator, transport_name)
    return api.app
