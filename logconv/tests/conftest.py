"""
================================================================================
Fixtures compartilhadas dos testes do logconv
================================================================================

Amostras pequenas dos três dialetos de log e helpers para montar
diretórios de entrada temporários.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Adiciona o diretório logconv ao path para imports
sys.path.insert(0, str(Path(__file__).parent.parent))


NATIVE_LOG = """\
================================================================================
📤 HTTP REQUEST
================================================================================
🧪 Test Case: Login @smoke
📍 Test Step: Submit credentials
🌐 Method: POST
🔗 URL: https://api.example.com/api/v1/auth/login
📋 Request Headers:
{ "content-type": "application/json", "authorization": "Bearer abc123", "content-length": "42" }
📤 Request Body:
{ "username": "ana", "password": "s3cret" }
================================================================================

================================================================================
📥 HTTP RESPONSE
================================================================================
📊 Status: 200 OK
🕐 Response Time: 120ms
📥 Response Body:
{ "token": "jwt-token", "user": { "id": 7 } }
================================================================================
"""

LEGACY_LOG = """\
$ env KEY=st5 node_modules/.bin/mocha -g @iblogin
ABC ==> TC01 success IB Login ==> tags: @iblogin
********************************
Initialization login with valid user
URL : POST https://abc.com/login/
Request Header { 'content-type': 'application/json' }
Request Payload { "username": "ana" }
RESPONSE Http Status Code : 200
Response header: { "x-request-id": "42" }
Response Payload { "token": "abc" }
********************************
"""

# Mesma troca no formato com quebras de linha e JSON indentado
LEGACY_MULTILINE_LOG = """\
$ env KEY=st5 node_modules/.bin/mocha -g @iblogin
ABC ==> TC01 success IB Login ==> tags: @iblogin
********************************
Initialization login with valid user

URL :

POST https://abc.com/login/

Request Header

{
    "content-type": "application/json",
    "accept": "application/json"
}

Request Payload

{
    "username": "ana",
    "password": "secret"
}

RESPONSE

Http Status Code : 200

Response header:
{
    "x-request-id": "42"
}

Response Payload
{
    "token": "abc",
    "user": {
        "id": 7
    }
}
********************************
"""

GENERIC_LOG = """\
2024-01-01 10:00:00 INFO GET /api/users HTTP/1.1
2024-01-01 10:00:01 INFO HTTP/1.1 200 OK
2024-01-01 10:00:02 INFO POST https://shop.example.com/orders -> 201
"""

PLAIN_TEXT = "apenas texto\nsem nenhuma requisição aqui\n"


@pytest.fixture
def native_log() -> str:
    return NATIVE_LOG


@pytest.fixture
def legacy_log() -> str:
    return LEGACY_LOG


@pytest.fixture
def legacy_multiline_log() -> str:
    return LEGACY_MULTILINE_LOG


@pytest.fixture
def generic_log() -> str:
    return GENERIC_LOG


@pytest.fixture
def make_logs(tmp_path: Path):
    """Cria um diretório de entrada com os arquivos informados."""

    def _make(files: dict[str, str | bytes]) -> Path:
        input_dir = tmp_path / "logs"
        input_dir.mkdir(exist_ok=True)
        for name, content in files.items():
            target = input_dir / name
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return input_dir

    return _make
