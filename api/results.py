"""Vercel serverless function for the awards results reveal."""

import json
import logging
import os
import sys
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import awardtally
sys.path.insert(0, str(Path(__file__).parent.parent))

from awardtally.analyze import analyze_ballots, AnalysisError  # noqa: E402

logger = logging.getLogger(__name__)

CATALOG_PATH_ENV = "AWARDS_CATALOG_PATH"


def handler(request):
    """Handle incoming requests to tally ballots.

    Accepts POST with a JSON body containing either:
    - {"ballots": [...]}: the stored ballot documents
    - {"url": "https://..."}: where to fetch the ballot documents from
    and optionally {"catalog": {movie_id: title}}.

    Returns JSON with participation stats and the ranked-choice count.
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

        data = json.loads(request.body.decode("utf-8"))
        if not isinstance(data, dict):
            raise AnalysisError("Request body must be a JSON object")

        if "ballots" in data:
            records = data["ballots"]
        elif data.get("url"):
            records = fetch_ballots(data["url"])
        else:
            return create_response(
                {"error": "Missing 'ballots' or 'url' in request body"},
                status=400,
            )

        catalog = data.get("catalog")
        if catalog is None:
            catalog = load_catalog()
        elif not isinstance(catalog, dict):
            raise AnalysisError("'catalog' must map movie IDs to titles")

        result = analyze_ballots(records, catalog=catalog)

        return create_response(result.to_dict())

    except AnalysisError as e:
        return create_response(
            {"error": str(e)},
            status=400,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        logger.exception("Unexpected error tallying ballots")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def fetch_ballots(url: str) -> list:
    """Fetch ballot documents from a URL.

    The response must be a JSON list of ballots, or an object with a
    "ballots" list.
    """
    # Validate URL
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise AnalysisError(f"Invalid URL scheme: {parsed.scheme}")

    try:
        with httpx.Client(follow_redirects=True, timeout=30.0) as client:
            response = client.get(url)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as e:
        raise AnalysisError(f"HTTP error fetching ballots: {e.response.status_code}")
    except httpx.RequestError as e:
        raise AnalysisError(f"Error fetching ballots: {e}")
    except ValueError as e:
        raise AnalysisError(f"Ballot URL did not return JSON: {e}")

    if isinstance(payload, dict):
        payload = payload.get("ballots")
    if not isinstance(payload, list):
        raise AnalysisError("Ballot URL did not return a list of ballots")
    return payload


def load_catalog() -> dict[str, str] | None:
    """Read the movie catalog named by AWARDS_CATALOG_PATH, if set.

    The file is either {movie_id: title} or a list of {"id", "title"}.
    """
    path = os.environ.get(CATALOG_PATH_ENV)
    if not path:
        return None

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, list):
        return {movie["id"]: movie["title"] for movie in data}
    return data


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
