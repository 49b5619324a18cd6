"""API Gateway responses."""

import json
from typing import Any, Dict

HEADERS = {'Content-Type': 'application/json'}


def api_response(status_code: int, message: str) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': dict(HEADERS),
        'body': json.dumps({'message': message}),
    }


def successful_execution() -> Dict[str, Any]:
    return api_response(200, 'Success')


def bad_request() -> Dict[str, Any]:
    return api_response(400, 'Failure to parse JSON successfully')


def unauthorized() -> Dict[str, Any]:
    return api_response(401, 'Credentials are missing or invalid')


def internal_server_error(message: str) -> Dict[str, Any]:
    return api_response(500, message)
