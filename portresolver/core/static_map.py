"""Static port map: a PortfileProvider over a pre-resolved mapping."""

from collections.abc import Mapping

from .errors import PortNotFoundError
from .models import ControlFileLocation
from .ports import PortfileProvider


class StaticPortMap(PortfileProvider):
    """Lookup over a caller-supplied name → ControlFileLocation mapping.

    Performs no I/O. Used when the full port set is already known, such as
    a pre-scanned snapshot or a test scenario.
    """

    def __init__(self, ports: Mapping[str, ControlFileLocation]):
        self._ports = dict(ports)

    def get(self, port_name: str) -> ControlFileLocation:
        try:
            return self._ports[port_name]
        except KeyError:
            raise PortNotFoundError(port_name, "does not exist in map") from None

    def list_all(self) -> list[ControlFileLocation]:
        return list(self._ports.values())

    def resolve(self, port_name: str) -> ControlFileLocation:
        return self.get(port_name)

    def resolve_all(self) -> list[ControlFileLocation]:
        return self.list_all()
