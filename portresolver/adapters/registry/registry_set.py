"""Registry set: selects the registry responsible for each port."""

from collections.abc import Collection, Sequence

from portresolver.core.ports import RegistryPort, RegistrySetPort


class RegistrySet(RegistrySetPort):
    """A default registry plus registries scoped to named packages.

    A scoped registry claims exactly the packages it lists; earlier scoped
    registries take precedence. Every other port belongs to the default
    registry, if there is one.
    """

    def __init__(
        self,
        default: RegistryPort | None,
        scoped: Sequence[tuple[Collection[str], RegistryPort]] = (),
    ):
        self.default = default
        self.scoped = [(frozenset(packages), registry) for packages, registry in scoped]

    def registry_for_port(self, port_name: str) -> RegistryPort | None:
        for packages, registry in self.scoped:
            if port_name in packages:
                return registry
        return self.default

    def registries(self) -> list[RegistryPort]:
        registries = [registry for _, registry in self.scoped]
        if self.default is not None:
            registries.append(self.default)
        return registries
