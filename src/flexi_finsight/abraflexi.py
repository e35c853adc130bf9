# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
AbraFlexi REST client.

Only one resource is needed: the trial balance (``stav-uctu``) of an
accounting period, filtered by year and fetched in full:

    GET {company_url}/stav-uctu/(ucetniObdobi = "code:2025")?limit=0&detail=full
    Accept: application/json
    Authorization: Basic ...

The response envelope is ``{"winstrom": {"stav-uctu": [...]}}``.

Failures are reported with dedicated exceptions so that the sync layer can
tell them apart:

- AbraFlexiConnectionError: network error or timeout,
- AbraFlexiAuthError:       HTTP 401 / 403,
- AbraFlexiHTTPError:       any other non-2xx status,
- AbraFlexiResponseError:   body is not JSON or has no ``winstrom`` object.

An empty ``stav-uctu`` list is valid and only logged as a warning.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class AbraFlexiError(Exception):
    """Base class for AbraFlexi client errors."""


class AbraFlexiConnectionError(AbraFlexiError):
    """The AbraFlexi server could not be reached."""


class AbraFlexiHTTPError(AbraFlexiError):
    """AbraFlexi answered with a non-success HTTP status."""

    def __init__(self, status_code: int, reason: str, body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(
            f"AbraFlexi API request failed: {status_code} {reason}. Body: {body}"
        )


class AbraFlexiAuthError(AbraFlexiHTTPError):
    """AbraFlexi rejected the credentials (HTTP 401/403)."""


class AbraFlexiResponseError(AbraFlexiError):
    """AbraFlexi answered with something that is not the expected JSON."""


def build_trial_balance_url(base_url: str, year: int | str) -> str:
    """Return the ``stav-uctu`` URL for a company endpoint and a year."""
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    flt = quote(f'(ucetniObdobi = "code:{year}")', safe="()")
    return f"{base}stav-uctu/{flt}?limit=0&detail=full"


def fetch_trial_balance(
    url: str,
    user: str,
    password: str,
    year: int | str,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> list[dict[str, Any]]:
    """Fetch the raw ``stav-uctu`` records of one company for one year.

    Args:
        url: Company endpoint, e.g. "https://demo.flexibee.eu/c/demo".
        user: API user name.
        password: API password.
        year: Accounting period code (calendar year).
        timeout: Request timeout in seconds.
        session: Optional requests session (used for connection reuse and in
            tests).

    Returns:
        The list of raw records (possibly empty).

    Raises:
        AbraFlexiError subclasses, see module docstring.
    """
    endpoint = build_trial_balance_url(url, year)
    http = session or requests
    logger.debug("GET %s", endpoint)
    try:
        response = http.get(
            endpoint,
            headers={"Accept": "application/json"},
            auth=(user, password),
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise AbraFlexiConnectionError(
            f"Could not reach AbraFlexi at {url}: {exc}"
        ) from exc

    if response.status_code in (401, 403):
        raise AbraFlexiAuthError(response.status_code, response.reason, response.text)
    if not response.ok:
        raise AbraFlexiHTTPError(response.status_code, response.reason, response.text)

    try:
        document = response.json()
    except ValueError as exc:
        raise AbraFlexiResponseError(
            f"AbraFlexi returned a non-JSON response from {endpoint}."
        ) from exc

    winstrom = document.get("winstrom") if isinstance(document, dict) else None
    if not isinstance(winstrom, dict):
        raise AbraFlexiResponseError(
            "AbraFlexi response has no 'winstrom' object."
        )

    records = winstrom.get("stav-uctu") or []
    if not isinstance(records, list):
        raise AbraFlexiResponseError("AbraFlexi 'stav-uctu' is not a list.")
    if not records:
        logger.warning("AbraFlexi returned no trial balance rows for %s (%s)", url, year)
    return records
