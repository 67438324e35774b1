"""HTTP client for the back-office depreciation endpoints.

Endpoints:
    GET  /api/cars/{car_id}
    GET  /api/current-cost                     current-year categories
    GET  /api/current-cost-with-add            prior-year categories
    GET  /api/nada-depreciation/read           ?carId=&year=
    GET  /api/nada-depreciation-with-add/read  ?carId=&year=
    GET  /api/car-backlog                     edit history, 20 rows per page
    POST /api/nada-depreciation[-with-add]
    PUT  /api/nada-depreciation[-with-add]/{aid}

Responses are wrapped as {"success": bool, "data": ...}.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterator

import requests

from ..common.config import ApiSettings, settings
from ..common.models import (
    CarProfile,
    ChangeLogEntry,
    ChangeLogPage,
    CHANGE_LOG_PAGE_SIZE,
    CostCategory,
    CostCategoryWithAdd,
    DepreciationRecord,
    DepreciationSnapshot,
    DepreciationWithAddRecord,
)
from .categories import DEFAULT_CATEGORIES, DEFAULT_PRIOR_CATEGORIES, find_miles_id

logger = logging.getLogger(__name__)

CHANGE_LOG_PAGE = "nada-depreciation-schedule"


class ApiError(Exception):
    """Raised when the back office rejects a request or returns a failure body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_entry_payload(
    car_id: int,
    category_id: int,
    date: str,
    amount: float,
    year: str,
    category_name: str = "",
    old_amount: float | None = None,
    prior: bool = False,
    miles_id: int | None = None,
) -> dict:
    """Request body for creating or updating one schedule entry.

    The car_backlog_* fields feed the edit-history log; the server resolves
    client and user ids from the car and the session.
    """
    old_value = str(old_amount) if old_amount is not None else "0"
    backlog = {
        "car_backlog_item": f"NADA-depreciation-schedule-{year}",
        "car_backlog_category_name": category_name,
        "car_backlog_old_values": old_value,
    }
    if prior:
        return {
            "nada_depreciation_with_add_car_id": car_id,
            "nada_depreciation_with_add_id": category_id,
            "nada_depreciation_with_add_date": date,
            "nada_depreciation_with_add_amount": amount,
            **backlog,
        }

    payload = {
        "nada_depreciation_car_id": car_id,
        "nada_depreciation_id": category_id,
        "nada_depreciation_date": date,
        "nada_depreciation_amount": amount,
    }
    if miles_id is not None:
        payload["nada_depreciation_with_add_id"] = miles_id
    payload.update(backlog)
    return payload


class DepreciationClient:
    """Thin client for the depreciation REST contract.

    Retries network errors, 429 and 5xx with exponential backoff; other
    4xx responses fail immediately.
    """

    def __init__(
        self,
        api_settings: ApiSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_settings = api_settings or settings.api
        self._session = session or requests.Session()
        self._base_url = self.api_settings.base_url.rstrip("/")

    def build_api_url(self, path: str) -> str:
        """Join path onto the configured base URL. Absolute URLs pass through."""
        if not path:
            return self._base_url
        if path.startswith("http://") or path.startswith("https://"):
            return path
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{normalized}"

    # === Reads ===

    def get_car(self, car_id: int) -> CarProfile:
        data = self._request("GET", f"/api/cars/{car_id}")
        return CarProfile.model_validate(data or {})

    def get_categories(self, prior: bool = False) -> list[CostCategory] | list[CostCategoryWithAdd]:
        """Category list for a series, falling back to the defaults when empty."""
        path = "/api/current-cost-with-add" if prior else "/api/current-cost"
        data = self._request("GET", path) or []
        if not data:
            logger.info("No categories returned from %s, using defaults", path)
            return list(DEFAULT_PRIOR_CATEGORIES if prior else DEFAULT_CATEGORIES)
        model = CostCategoryWithAdd if prior else CostCategory
        return [model.model_validate(item) for item in data]

    def get_records(
        self, car_id: int, year: str, prior: bool = False
    ) -> list[DepreciationRecord] | list[DepreciationWithAddRecord]:
        path = "/api/nada-depreciation-with-add/read" if prior else "/api/nada-depreciation/read"
        data = self._request("GET", path, params={"carId": car_id, "year": year}) or []
        model = DepreciationWithAddRecord if prior else DepreciationRecord
        return [model.model_validate(item) for item in data]

    def get_snapshot(self, car_id: int, year: str) -> DepreciationSnapshot:
        """Fetch everything the detailed export needs for one car-year."""
        snapshot = DepreciationSnapshot(
            year=year,
            car=self.get_car(car_id),
            categories=self.get_categories(),
            prior_categories=self.get_categories(prior=True),
            records=self.get_records(car_id, year),
            prior_records=self.get_records(car_id, year, prior=True),
        )
        logger.info(
            "Fetched snapshot for car %d year %s: %d current, %d prior records",
            car_id, year, len(snapshot.records), len(snapshot.prior_records),
        )
        return snapshot

    def get_change_log(
        self,
        car_id: int,
        page: int = 1,
        item: str | None = None,
        search: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> ChangeLogPage:
        """One page of the schedule's edit history.

        Args:
            car_id: Car whose history to read.
            page: 1-based page number.
            item: Backlog item, e.g. "NADA-depreciation-schedule-2024".
            search: Free-text filter.
            date_from: Lower date bound (YYYY-MM-DD).
            date_to: Upper date bound (YYYY-MM-DD).
        """
        params: dict[str, Any] = {
            "carId": car_id,
            "page": page,
            "car_backlog_page": CHANGE_LOG_PAGE,
        }
        if item:
            params["item"] = item
        if search:
            params["searchValue"] = search
        if date_from:
            params["date_from"] = date_from
        if date_to:
            params["date_to"] = date_to
        if date_from or date_to:
            params["isFilter"] = "true"

        body = self._request("GET", "/api/car-backlog", params=params, unwrap=False)
        if not isinstance(body, dict):
            body = {"data": body or []}
        return ChangeLogPage(
            data=body.get("data") or [],
            page=body.get("page") or page,
            total=body.get("total") or 0,
            count=body.get("count") or 0,
        )

    def iter_change_log(self, car_id: int, **filters: Any) -> Iterator[ChangeLogEntry]:
        """Yield every history entry, following pages until the total is reached."""
        page = 1
        while True:
            log_page = self.get_change_log(car_id, page=page, **filters)
            yield from log_page.data
            if not log_page.data or page * CHANGE_LOG_PAGE_SIZE >= log_page.total:
                return
            page += 1

    # === Writes ===

    def save_entry(
        self,
        car_id: int,
        category_id: int,
        date: str,
        amount: float,
        year: str,
        prior: bool = False,
        edit_aid: int | None = None,
        category_name: str = "",
        old_amount: float | None = None,
    ) -> Any:
        """Create (POST) or update (PUT) one schedule entry."""
        miles_id = None
        if not prior:
            miles_id = find_miles_id(self.get_categories(prior=True))

        payload = build_entry_payload(
            car_id=car_id,
            category_id=category_id,
            date=date,
            amount=amount,
            year=year,
            category_name=category_name,
            old_amount=old_amount,
            prior=prior,
            miles_id=miles_id,
        )
        base = "/api/nada-depreciation-with-add" if prior else "/api/nada-depreciation"
        if edit_aid is not None:
            return self._request("PUT", f"{base}/{edit_aid}", json=payload)
        return self._request("POST", base, json=payload)

    # === Transport ===

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        unwrap: bool = True,
    ) -> Any:
        url = self.build_api_url(path)
        max_retries = max(self.api_settings.max_retries, 1)

        last_exc: Exception | None = None
        for attempt in range(max_retries):
            try:
                logger.debug("%s %s params=%s", method, url, params)
                resp = self._session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    timeout=self.api_settings.request_timeout,
                )
                resp.raise_for_status()
                return self._unwrap(resp, unwrap)

            except requests.RequestException as exc:
                last_exc = exc

                # 4xx other than 429 will not succeed on retry
                if (
                    isinstance(exc, requests.HTTPError)
                    and exc.response is not None
                    and 400 <= exc.response.status_code < 500
                    and exc.response.status_code != 429
                ):
                    logger.warning("%s %s failed (no retry): %s", method, url, exc)
                    raise ApiError(_error_message(exc.response), exc.response.status_code) from exc

                if attempt + 1 < max_retries:
                    wait_time = self.api_settings.backoff_base ** attempt
                    logger.warning(
                        "%s %s failed (attempt %d/%d): %s, retrying in %.1fs",
                        method, url, attempt + 1, max_retries, exc, wait_time,
                    )
                    time.sleep(wait_time)

        status = None
        if isinstance(last_exc, requests.HTTPError) and last_exc.response is not None:
            status = last_exc.response.status_code
        raise ApiError(f"{method} {url} failed after {max_retries} attempts: {last_exc}", status) from last_exc

    @staticmethod
    def _unwrap(resp: requests.Response, unwrap: bool = True) -> Any:
        body = resp.json()
        if isinstance(body, dict):
            if body.get("success") is False:
                raise ApiError(body.get("error") or body.get("message") or "Request failed", resp.status_code)
            if unwrap and "data" in body:
                return body["data"]
        return body

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> DepreciationClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"{resp.status_code}: {resp.text or resp.reason}"
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or f"{resp.status_code}: {resp.reason}"
    return f"{resp.status_code}: {resp.reason}"
