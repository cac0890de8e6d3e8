"""Coinfolio sidecar entry point.

Communicates with the front end process via stdin/stdout using
newline-delimited JSON messages.

Protocol:
    Request:  {"id": "uuid", "method": "string", "params": {}}
    Response: {"id": "uuid", "result": {}}
    Error:    {"id": "uuid", "error": {"message": "string", "kind": "string"}}
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from typing import Any

from coinfolio import log_config
from coinfolio.config import get_settings
from coinfolio.errors import CoinfolioError
from coinfolio.session import PortfolioSession
from coinfolio.store.connection import init_portfolio_db

logger = logging.getLogger(__name__)


def _portfolio_result(session: PortfolioSession) -> dict[str, Any]:
    return {
        "holdings": [h.to_dict() for h in session.portfolio],
        "total_value": session.total_value(),
    }


def dispatch(session: PortfolioSession, method: str, params: dict[str, Any]) -> Any:
    """Route a method call to the session.

    Args:
        session: The portfolio session serving this sidecar.
        method: The method name (e.g., "portfolio.add").
        params: The parameters for the method.

    Returns:
        The JSON-serializable result of the method call.

    Raises:
        ValueError: If the method is not recognized.

    """
    if method == "portfolio.get":
        return _portfolio_result(session)
    if method == "portfolio.add":
        session.add(params["coin_id"], params["quantity"])
        return _portfolio_result(session)
    if method == "portfolio.refresh":
        session.refresh(params.get("coin_ids"))
        return _portfolio_result(session)
    if method == "portfolio.remove":
        session.remove(params["coin_id"])
        return _portfolio_result(session)
    if method == "portfolio.clear":
        session.clear()
        return _portfolio_result(session)
    if method == "portfolio.total_value":
        return {"total_value": session.total_value()}
    if method == "portfolio.summary":
        return session.summary()
    if method == "market.search":
        return {"coins": session.search(params.get("query", ""))}

    msg = f"Unknown method: {method}"
    raise ValueError(msg)


def _error_response(request: Any, exc: Exception) -> dict[str, Any]:
    request_id = request.get("id", "unknown") if isinstance(request, dict) else "unknown"
    error: dict[str, Any] = {"message": str(exc), "kind": type(exc).__name__}
    if not isinstance(exc, CoinfolioError):
        error["traceback"] = traceback.format_exc()
    return {"id": request_id, "error": error}


def serve(session: PortfolioSession) -> None:
    """Run the sidecar message loop until stdin is closed.

    Reads newline-delimited JSON from stdin, dispatches to the session,
    and writes one JSON response per request to stdout.
    """
    for raw_line in sys.stdin:
        stripped = raw_line.strip()
        if not stripped:
            continue

        request: Any = {}
        try:
            request = json.loads(stripped)
            request_id = request.get("id", "unknown")
            method = request["method"]
            params = request.get("params") or {}
            result = dispatch(session, method, params)
            response: dict[str, Any] = {"id": request_id, "result": result}
        except CoinfolioError as exc:
            response = _error_response(request, exc)
        except Exception as exc:  # noqa: BLE001 - errors go back to the caller as JSON
            logger.exception("Unhandled error serving request")
            response = _error_response(request, exc)
        sys.stdout.write(json.dumps(response) + "\n")
        sys.stdout.flush()


def main(argv: list[str] | None = None) -> None:
    """Configure logging, open the store, load the portfolio, and serve."""
    parser = argparse.ArgumentParser(description="Coinfolio portfolio sidecar")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    log_config.setup(verbose=args.verbose)
    settings = get_settings()
    conn = init_portfolio_db(settings.db_path)
    try:
        session = PortfolioSession(conn, settings)
        session.load()
        serve(session)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
