"""Vercel serverless function for syncing and analyzing song rankings."""

import json
import sys
from pathlib import Path

# Add the project root to the path so we can import songrank modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from songrank.analyze import run_analysis, sync_and_analyze
from songrank.config import Settings
from songrank.errors import AnalysisError, ConfigurationError
from songrank.log import SyncLog
from songrank.remote import load_remote_table
from songrank.store import MemoryTableStore
from songrank.sync import load_groups


def handler(request):
    """Handle incoming requests to sync and analyze rankings.

    Accepts:
    - POST with JSON body:
        {
          "tables": {"Base": [[...], ...], "Sheet Manager": [...], ...},
          "urls": {"Paste Rankings Here": "https://.../pub?output=csv", ...},
          "settings": {"top_n": 10, ...},
          "sync": true
        }
      Tables given by URL are fetched and parsed (CSV or published HTML);
      inline tables win over URLs with the same name. With "sync": false
      the ledgers are analyzed as given.

    Returns JSON with the sync summary, updated ledgers, reports and log.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return create_response(
                {"error": f"Unsupported content type: {content_type}"},
                status=400,
            )

        try:
            data = json.loads(request.body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return create_response({"error": f"Invalid JSON: {e}"}, status=400)

        return create_response(process(data))

    except (AnalysisError, ConfigurationError, ValueError) as e:
        return create_response({"error": str(e)}, status=400)
    except Exception as e:
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def process(data: dict) -> dict:
    """Run a sync and analysis pass over the tables described by ``data``.

    Raises:
        AnalysisError: If a URL can't be fetched or parsed, or the analysis
            pass fails outright
        ConfigurationError: If the catalog table is missing
        ValueError: If the body is malformed or names unknown settings
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")

    settings = Settings.from_dict(data.get("settings"))
    tables = dict(data.get("tables") or {})
    for name, url in (data.get("urls") or {}).items():
        if name not in tables:
            tables[name] = load_remote_table(url)

    if settings.catalog_table not in tables:
        raise ConfigurationError(f"Missing '{settings.catalog_table}' table in request body")

    store = MemoryTableStore(tables)
    log = SyncLog()
    if data.get("sync", True):
        summary, outcome = sync_and_analyze(store, log, settings)
        sync = summary.to_dict()
        groups = summary.groups
    else:
        outcome = run_analysis(store, log, settings)
        sync = None
        groups = [g.name for g in load_groups(store, settings) if g.name in tables]

    return {
        "sync": sync,
        "ledgers": {name: store.read_table(name) for name in groups},
        "analysis": outcome.to_dict() if outcome else None,
        "log": log.to_table(),
    }


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body, default=str)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
