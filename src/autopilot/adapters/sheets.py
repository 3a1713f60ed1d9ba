"""Google Sheets adapter over the Sheets v4 REST API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from autopilot.adapters.base import ProviderAdapter, remote_error, response_payload
from autopilot.models.action import ActionResult, ToolName
from autopilot.models.credential import Tokens

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_READ_RANGE = "Sheet1!A:Z"
DEFAULT_APPEND_RANGE = "Sheet1"


def as_row(values: Any) -> list[Any]:
    return list(values) if isinstance(values, (list, tuple)) else [values]


class SheetsAdapter(ProviderAdapter):
    tool = ToolName.SHEETS.value
    provider_key = "google_sheets"
    display_name = "Google Sheets"
    actions = {
        "read_sheet": ("spreadsheetId",),
        "append_row": ("spreadsheetId", "values"),
    }

    def _values_url(self, spreadsheet_id: str, cell_range: str) -> str:
        return f"{SHEETS_API}/{quote(str(spreadsheet_id), safe='')}/values/{quote(cell_range, safe='')}"

    async def _read_sheet(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        cell_range = params.get("range") or DEFAULT_READ_RANGE
        response = await self._http.get(
            self._values_url(params["spreadsheetId"], cell_range),
            headers=self._bearer(tokens),
        )
        data = response_payload(response)
        if not response.is_success:
            return ActionResult.fail(remote_error(data, "Failed to read sheet"))

        values = data.get("values") or []
        return ActionResult.ok(f"Read {len(values)} rows from sheet", values=values)

    async def _append_row(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        cell_range = params.get("range") or DEFAULT_APPEND_RANGE
        response = await self._http.post(
            self._values_url(params["spreadsheetId"], cell_range) + ":append",
            headers=self._bearer(tokens),
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [as_row(params["values"])]},
        )
        data = response_payload(response)
        if not response.is_success:
            return ActionResult.fail(remote_error(data, "Failed to append row"))

        return ActionResult.ok(
            "Row added successfully",
            updated_range=(data.get("updates") or {}).get("updatedRange"),
        )
