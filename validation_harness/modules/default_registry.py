from .module import Module
from .module_registry import ModuleRegistry


class EndpointCount(Module):
    async def run(self):
        endpoints = await self.bridge.endpoints()

        if len(endpoints) != self.spec.node_count:
            self.signal_failure(
                f"Expected {self.spec.node_count} endpoints, found {len(endpoints)}"
            )

        return endpoints


class NodeToolFlush(Module):
    async def run(self):
        arguments = self.options.get("arguments", "")

        for node in range(self.spec.node_count):
            await self.bridge.node_tool(node, "flush", arguments)


def default_registry() -> ModuleRegistry:
    registry = ModuleRegistry()
    registry.register("EndpointCount", EndpointCount)
    registry.register("NodeToolFlush", NodeToolFlush)

    return registry
