from __future__ import annotations

from typing import Callable, Dict, TYPE_CHECKING

from validation_harness.exceptions import ModuleNotFound

from .module import Module

if TYPE_CHECKING:
    from validation_harness.harness.context import HarnessContext
    from validation_harness.specs import HarnessSpec, ModuleSpec


ModuleFactory = Callable[..., Module]


class ModuleRegistry:
    def __init__(self) -> None:
        self._factories: Dict[str, ModuleFactory] = {}

    def __contains__(self, name: str):
        return name in self._factories

    def names(self):
        return sorted(self._factories)

    def register(self, name: str, factory: ModuleFactory):
        self._factories[name] = factory
        return factory

    def module(self, name: str | None = None):
        def wrap(factory: type[Module]):
            return self.register(name or factory.__name__, factory)

        return wrap

    def create(
        self,
        module: ModuleSpec | str,
        spec: HarnessSpec,
        context: HarnessContext,
    ) -> Module:
        if isinstance(module, str):
            module_name = module
            options = {}

        else:
            module_name = module.name
            options = dict(module.options)

        factory = self._factories.get(module_name)
        if factory is None:
            raise ModuleNotFound(module_name, self._factories)

        instance = factory(spec, context, options)
        instance.name = module_name

        return instance
