"""Synthetic container logs.

Lines are chosen by image family (nginx, redis, mysql, postgres, generic)
from a ``random.Random`` seeded with the pod and container name, so the same
container always prints the same history.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

MAX_LINES = 200
DEFAULT_LINES = 50

_STARTUP: dict[str, list[str]] = {
    "nginx": [
        "/docker-entrypoint.sh: Configuration complete; ready for start up",
        "nginx/1.21.6 start worker processes",
        "using the epoll event method",
    ],
    "redis": [
        "Redis server started, Redis version 7.0.11",
        "Server initialized",
        "Ready to accept connections on port 6379",
    ],
    "mysql": [
        "mysqld: ready for connections. Version: 8.0.27  port: 3306",
        "InnoDB: Buffer pool(s) load completed",
        "MySQL Community Server - GPL initialized",
    ],
    "postgres": [
        "database system is ready to accept connections",
        "PostgreSQL 14.8 on x86_64-pc-linux-musl, compiled by gcc",
        'listening on IPv4 address "0.0.0.0", port 5432',
    ],
    "generic": [
        "Application starting...",
        "Initialization complete",
        "Server ready on port 8080",
    ],
}

_STEADY: dict[str, list[str]] = {
    "redis": [
        "Accepted connection from 127.0.0.1:6379",
        "DB 0: 10 keys, 0 expires",
        "Background saving started by pid 42",
        "Background saving terminated with success",
        "100 changes in 300 seconds. Saving...",
    ],
    "mysql": [
        "Connection received from 192.168.1.100:3306",
        "Query execution time: 0.05s",
        "InnoDB: page_cleaner: 1000 pages flushed",
        "Binary log rotated",
    ],
    "postgres": [
        "connection received: host=192.168.1.100 port=54321",
        "connection authorized: user=postgres database=myapp",
        "checkpoint starting: time",
        "checkpoint complete: wrote 123 buffers",
        'autovacuum: processing database "postgres"',
    ],
    "generic": [
        "Processing request",
        "Database connection established",
        "Cache hit for key: user:123",
        "Health check passed",
        "Request handled in 45ms",
    ],
}

_WARN: dict[str, str] = {
    "redis": "Slow query detected: GET key took 120ms",
    "mysql": "Query took longer than long_query_time: 2.5s",
    "postgres": "could not receive data from client: Connection reset by peer",
    "generic": "Retry attempt 2/3 for external API call",
}

_ERROR: dict[str, str] = {
    "redis": "Connection timeout from client 192.168.1.50:45678",
    "mysql": "Access denied for user 'app'@'192.168.1.50'",
    "postgres": 'role "admin" does not exist',
    "generic": "Failed to connect to external service: timeout",
}


def image_family(image: str) -> str:
    repo = image.lower().split(":", 1)[0]
    for family in ("nginx", "redis", "mysql", "postgres"):
        if family in repo:
            return family
    return "generic"


def _level(rng: random.Random, index: int) -> str:
    if index < 3:
        return "INFO"
    roll = rng.random()
    if roll < 0.75:
        return "INFO"
    if roll < 0.90:
        return "WARN"
    if roll < 0.97:
        return "DEBUG"
    return "ERROR"


def _nginx_line(rng: random.Random, ts: str, level: str) -> str:
    if level == "ERROR":
        status = rng.choice(["500", "502", "503"])
    elif level == "WARN":
        status = rng.choice(["404", "403"])
    else:
        status = rng.choice(["200", "201", "304"])
    ip = rng.choice(["192.168.1.100", "10.0.0.5", "172.16.0.42"])
    method = rng.choice(["GET", "POST", "PUT", "DELETE"])
    path = rng.choice(["/", "/api/users", "/api/products", "/health", "/index.html"])
    agent = rng.choice(["Mozilla/5.0", "curl/7.68.0", "Go-http-client/1.1"])
    return f'{ts} {level} {ip} - - [{ts}] "{method} {path} HTTP/1.1" {status} {rng.randint(100, 5000)} "-" "{agent}"'


def generate_logs(image: str, count: int, seed: str, start: datetime) -> list[str]:
    """Return up to ``MAX_LINES`` log lines starting at *start*."""
    count = min(max(count, 0), MAX_LINES)
    family = image_family(image)
    rng = random.Random(seed)
    lines: list[str] = []
    offset = 0
    for i in range(count):
        offset += rng.randint(1, 5)
        ts = (start + timedelta(seconds=offset)).strftime("%Y-%m-%dT%H:%M:%SZ")
        level = _level(rng, i)
        if family == "nginx" and i >= 3:
            lines.append(_nginx_line(rng, ts, level))
        elif i < 3:
            lines.append(f"{ts} INFO {_STARTUP[family][i]}")
        elif level == "WARN":
            lines.append(f"{ts} WARN {_WARN[family]}")
        elif level == "ERROR":
            lines.append(f"{ts} ERROR {_ERROR[family]}")
        else:
            lines.append(f"{ts} {level} {rng.choice(_STEADY[family])}")
    return lines
