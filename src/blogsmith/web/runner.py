"""Uvicorn server runner with custom configuration."""

import copy
from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from blogsmith.app import App
from blogsmith.config import Config
from blogsmith.web.server import create_fastapi_app


def build_log_config() -> dict[str, Any]:
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    return log_config


def run_server(app: App, config: Config) -> None:
    """Run Uvicorn behind a proxy, trusting its forwarded headers for client addresses."""
    fastapi_app = create_fastapi_app(app, config)
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=build_log_config(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips=config.forwarded_allow_ips,
    )
