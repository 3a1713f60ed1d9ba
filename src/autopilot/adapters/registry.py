"""Maps tool names to their direct provider adapters."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable

from autopilot.adapters.base import ProviderAdapter


class AdapterRegistry:
    """Routing table built once at startup; read-only afterwards."""

    def __init__(self, adapters: Iterable[ProviderAdapter]) -> None:
        table: dict[str, ProviderAdapter] = {}
        for adapter in adapters:
            if adapter.tool in table:
                raise ValueError(f"Duplicate adapter for tool: {adapter.tool}")
            table[adapter.tool] = adapter
        self._adapters = MappingProxyType(table)

    def get(self, tool: str) -> ProviderAdapter | None:
        return self._adapters.get(tool)

    def tools(self) -> list[str]:
        return list(self._adapters)

    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters.values())

    def __contains__(self, tool: object) -> bool:
        return tool in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)
