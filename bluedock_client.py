"""BlueDock API client.

A thin wrapper around the BlueDock REST API for scripts and for the
dashboard's data layer.  Every call returns a tuple ``(data, error)``:
on success ``error`` is ``None``; on failure ``data`` is ``None`` (or
an empty list for listings) and ``error`` is a dictionary with
``status_code`` and ``message``.  HTTP errors are never raised.

Besides the HTTP calls the module provides the page‑local helpers the
dashboard uses on the rows it already fetched:

* :func:`compute_page_metrics` – revenue and workload counters.
* :func:`filter_services` – free‑text search over the page.
* :func:`contact_details` – the fields a messaging integration needs
  to notify the customer about an order.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]

CONTACT_FIELDS = ("customer_phone", "customer_name", "receipt_number", "item_description", "status")


class BlueDockAPI:
    """Client for the BlueDock service‑order API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:3001``.  The
                ``/api`` prefix is added by the client.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each request.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helper
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path below ``/api`` (e.g. ``/services``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)`` with the parsed JSON body or the
            error description.
        """
        url = f"{self.base_url}/api{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    message = exc.response.json().get("error", "")
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def list_services(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Result:
        """Fetch one page of services.

        Returns:
            ``({"data": [...], "meta": {...}}, None)`` on success.
        """
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        data, error = self._request("GET", "/services", params=params)
        if error:
            return None, error
        return {"data": data.get("data", []), "meta": data.get("meta", {})}, None

    def get_service(self, service_id: int) -> Result:
        data, error = self._request("GET", f"/services/{service_id}")
        if error:
            return None, error
        return data.get("data"), None

    def create_service(self, payload: Dict[str, Any]) -> Result:
        """Create a service; returns the stored record with its receipt number."""
        data, error = self._request("POST", "/services", json_body=payload)
        if error:
            return None, error
        return data.get("data"), None

    def update_service(self, service_id: int, patch: Dict[str, Any]) -> Result:
        """Send a partial update; returns the number of rows changed.

        Note that ``category_id`` is always replaced on the server, so
        callers editing a service should send its current category.
        """
        data, error = self._request("PUT", f"/services/{service_id}", json_body=patch)
        if error:
            return None, error
        return data.get("changes", 0), None

    def delete_service(self, service_id: int) -> Result:
        data, error = self._request("DELETE", f"/services/{service_id}")
        if error:
            return None, error
        return data.get("changes", 0), None

    # ------------------------------------------------------------------
    # Lookups and reports
    # ------------------------------------------------------------------
    def list_categories(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/categories")
        if error:
            return [], error
        return data.get("data", []), None

    def productivity(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/dashboard/productivity")
        if error:
            return [], error
        return data.get("data", []), None

    def summary(self) -> Result:
        data, error = self._request("GET", "/dashboard/summary")
        if error:
            return None, error
        return data.get("data"), None

    def turnaround(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Fetch the deadline table: finished services with their elapsed days."""
        data, error = self._request("GET", "/dashboard/turnaround")
        if error:
            return [], error
        return data.get("data", []), None


# ----------------------------------------------------------------------
# Page-local helpers
# ----------------------------------------------------------------------
def compute_page_metrics(services: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Summarise the services currently shown on a dashboard page.

    ``total_revenue`` adds up the price of ``Concluído`` services;
    ``pending`` and ``in_progress`` count ``Pendente`` and
    ``Em Andamento`` services.
    """
    total_revenue = sum(float(s.get("price") or 0) for s in services if s.get("status") == "Concluído")
    pending = sum(1 for s in services if s.get("status") == "Pendente")
    in_progress = sum(1 for s in services if s.get("status") == "Em Andamento")
    return {"total_revenue": total_revenue, "pending": pending, "in_progress": in_progress}


def filter_services(services: List[Dict[str, Any]], search: str) -> List[Dict[str, Any]]:
    """Return the services whose customer, item, receipt or category contains ``search``."""
    term = search.strip().casefold()
    if not term:
        return list(services)
    fields = ("customer_name", "item_description", "receipt_number", "category_name")
    return [
        s for s in services
        if any(term in (s.get(field) or "").casefold() for field in fields)
    ]


def contact_details(service: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the fields a messaging integration needs to contact the customer."""
    return {field: service.get(field) for field in CONTACT_FIELDS}
