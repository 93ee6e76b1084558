#!/usr/bin/env python3
"""
Main entry point for the Meeting Scheduling Assistant

Runs the API server, or a single suggestion search / conflict check from a JSON file.
"""

import json
import logging

from config.settings import Config
from src.api.flask_server import SchedulingAPI, build_backends, run_conflict_check, run_suggestion_search
from src.scheduler.errors import InvalidInputError
from utils.logger import SchedulingLogger
from utils.validators import DataSanitizer, RequestValidator

logger = logging.getLogger(__name__)

def run_server(host=Config.API_HOST, port=Config.API_PORT):
    """Run the Flask API server"""
    SchedulingLogger.setup_logging()
    logger.info("Starting Meeting Scheduling Assistant...")

    try:
        api = SchedulingAPI()
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")

def suggest(request_data):
    """Run one suggestion search and return the JSON-ready result"""
    errors = RequestValidator.validate_suggestion_request(request_data)
    if errors:
        raise InvalidInputError(errors)

    repository, provider = build_backends()
    result = run_suggestion_search(DataSanitizer.sanitize_request(request_data), repository, provider)
    return result.to_dict()

def check(request_data):
    """Validate one proposed meeting time and return the JSON-ready result"""
    errors = RequestValidator.validate_conflict_check(request_data)
    if errors:
        raise InvalidInputError(errors)

    repository, _ = build_backends()
    result = run_conflict_check(DataSanitizer.sanitize_request(request_data), repository)
    return result.to_dict()

def _write_output(result, output_file):
    if output_file:
        with open(output_file, 'w') as f:
            json.dump(result, f, indent=2)
    else:
        print(json.dumps(result, indent=2))

def main(argv=None):
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Meeting Scheduling Assistant')
    parser.add_argument('--log-level', default='WARNING', help='Logging level for one-shot commands')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')

    # Suggest command (single search)
    suggest_parser = subparsers.add_parser('suggest', help='Find meeting time suggestions')
    suggest_parser.add_argument('input_file', help='Input JSON file')
    suggest_parser.add_argument('--output', help='Output JSON file')

    # Check command (single conflict check)
    check_parser = subparsers.add_parser('check', help='Check a proposed meeting time for conflicts')
    check_parser.add_argument('input_file', help='Input JSON file')
    check_parser.add_argument('--output', help='Output JSON file')

    args = parser.parse_args(argv)

    if args.command == 'server':
        run_server(host=args.host, port=args.port)
        return 0

    if args.command in ('suggest', 'check'):
        SchedulingLogger.setup_logging(log_level=args.log_level)
        with open(args.input_file, 'r') as f:
            request_data = json.load(f)

        handler = suggest if args.command == 'suggest' else check
        try:
            result = handler(request_data)
        except InvalidInputError as e:
            print(json.dumps({"error": "Invalid input", "details": e.errors}, indent=2))
            return 2

        _write_output(result, args.output)
        return 0

    parser.print_help()
    return 1

if __name__ == '__main__':
    raise SystemExit(main())
