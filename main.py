#!/usr/bin/env python3
"""
Main entry point for the Slot Finder scheduling assistant

It can be used as a standalone API server, as a one-shot CLI, or as a library
through find_meeting_slots().
"""

import sys
import json
import logging
import random
from datetime import datetime
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config, validate_scheduling_settings
from slot_finder.ai_agent.llm_client import create_transport
from slot_finder.scheduler.orchestrator import SchedulingOrchestrator
from utils.logger import SlotFinderLogger
from utils.validators import RequestValidator, DataSanitizer

logger = logging.getLogger(__name__)


def build_orchestrator(transport_name: str = None) -> SchedulingOrchestrator:
    """Wire settings, transport and pipeline components together"""
    settings = Config.get_scheduling_settings()
    for problem in validate_scheduling_settings(settings):
        logger.warning(f"⚠️  Configuration problem: {problem}")

    transport = create_transport(transport_name)
    logger.info(f"Using '{transport.name}' LLM transport with model {Config.DEFAULT_MODEL}")
    return SchedulingOrchestrator(settings=settings, transport=transport)


def find_meeting_slots(message: str, now: datetime = None, seed: int = None,
                       orchestrator: SchedulingOrchestrator = None) -> dict:
    """
    Library entry point

    Args:
        message (str): Free-text scheduling request
        now (datetime): Reference time for relative dates, defaults to now
        seed (int): Seed for score jitter, for reproducible rankings

    Returns:
        dict: {"kind", "response", "slots"}
    """
    orchestrator = orchestrator or build_orchestrator()
    rng = random.Random(seed) if seed is not None else None
    return orchestrator.schedule(message, now=now, rng=rng).to_dict()


def run_server(host=None, port=None, transport_name=None):
    """Run the Flask API server"""
    from slot_finder.api.flask_server import SlotFinderAPI

    SlotFinderLogger.setup_logging(log_level="INFO")
    logger.info("Starting Slot Finder...")

    try:
        api = SlotFinderAPI(build_orchestrator(transport_name))
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


def run_tests(api_url="http://localhost:5000", test_data=None):
    """Run smoke tests against a live server"""
    from tests.test_client import SlotFinderTestClient

    SlotFinderLogger.setup_logging(log_level="INFO")
    logger.info(f"Running tests against {api_url}")

    client = SlotFinderTestClient(api_url)
    results = client.run_test_suite(test_data)

    summary = results["summary"]
    print(f"\nTest Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Success rate: {(summary['passed']/summary['total']*100) if summary['total'] > 0 else 0:.1f}%")
    print(f"  Avg response time: {summary['avg_response_time']:.2f}s")

    return results


def _parse_now(value):
    if not value:
        return None
    return datetime.fromisoformat(value.replace('Z', '+00:00')).replace(tzinfo=None)


def process_requests(requests_list, orchestrator: SchedulingOrchestrator) -> list:
    """
    Run a batch of /schedule-style request bodies

    Entries that fail validation get an error result with details instead of
    stopping the batch, mirroring the API's 400 responses.
    """
    results = []
    for index, item in enumerate(requests_list):
        errors = RequestValidator.validate_schedule_request(item)
        if errors:
            logger.warning(f"⚠️  Skipping request #{index}: {errors}")
            results.append({"error": "Invalid request", "details": errors})
            continue

        item = DataSanitizer.sanitize_request(item)
        results.append(find_meeting_slots(item["message"], now=_parse_now(item.get("now")),
                                          seed=item.get("seed"), orchestrator=orchestrator))
    return results


def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Slot Finder scheduling assistant')
    parser.add_argument('--transport', choices=['http', 'openai', 'mock'],
                        help=f'LLM transport (default: {Config.LLM_TRANSPORT})')
    parser.add_argument('--log-level', default='INFO', help='Logging level')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')

    # Ask command (single free-text request)
    ask_parser = subparsers.add_parser('ask', help='Find slots for one request')
    ask_parser.add_argument('message', help='Scheduling request text')
    ask_parser.add_argument('--now', help='Reference time (ISO-8601)')
    ask_parser.add_argument('--seed', type=int, help='Seed for score jitter')
    ask_parser.add_argument('--json', action='store_true', help='Print the full JSON outcome')

    # Process command (batch of requests from a file)
    process_parser = subparsers.add_parser('process', help='Process requests from a JSON file')
    process_parser.add_argument('input_file', help='Input JSON file (object or list of objects)')
    process_parser.add_argument('--output', help='Output JSON file')

    # Test command
    test_parser = subparsers.add_parser('test', help='Run smoke tests against a running server')
    test_parser.add_argument('--url', default='http://localhost:5000', help='API URL to test')
    test_parser.add_argument('--test-data', help='Path to test data JSON file')

    args = parser.parse_args()

    if args.command == 'server':
        run_server(host=args.host, port=args.port, transport_name=args.transport)

    elif args.command == 'test':
        run_tests(api_url=args.url, test_data=args.test_data)

    elif args.command == 'ask':
        SlotFinderLogger.setup_logging(log_level=args.log_level)
        result = find_meeting_slots(args.message, now=_parse_now(args.now), seed=args.seed,
                                    orchestrator=build_orchestrator(args.transport))
        if args.json:
            print(json.dumps(result, indent=2))
        else:
            print(result["response"])

    elif args.command == 'process':
        SlotFinderLogger.setup_logging(log_level=args.log_level)
        with open(args.input_file, 'r') as f:
            request_data = json.load(f)

        requests_list = request_data if isinstance(request_data, list) else [request_data]
        orchestrator = build_orchestrator(args.transport)
        results = process_requests(requests_list, orchestrator)
        output = results if isinstance(request_data, list) else results[0]

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(output, f, indent=2)
        else:
            print(json.dumps(output, indent=2))

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
