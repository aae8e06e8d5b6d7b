"""Antipattern module registry."""

from typing import Dict, List, Optional

from apexlens.antipatterns.domain.enums import AntipatternType
from apexlens.antipatterns.module import AntipatternModule


class AntipatternRegistry:
    """
    One module per antipattern type.

    Registering a type again replaces the previous module. Reads are safe to
    share between concurrent scans; registration is not.
    """

    def __init__(self) -> None:
        self._modules: Dict[AntipatternType, AntipatternModule] = {}

    def register(self, module: AntipatternModule) -> None:
        self._modules[module.get_antipattern_type()] = module

    def get_module(self, antipattern_type: AntipatternType) -> Optional[AntipatternModule]:
        return self._modules.get(antipattern_type)

    def get_all_modules(self) -> List[AntipatternModule]:
        return list(self._modules.values())

    def get_registered_types(self) -> List[AntipatternType]:
        return list(self._modules.keys())
