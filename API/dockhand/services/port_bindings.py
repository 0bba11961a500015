from typing import Dict, Iterable, List, Mapping

PortBindings = Dict[str, List[Dict[str, str]]]


def create_port_bindings(ports: Mapping[int, Iterable[int]]) -> PortBindings:
    """
    Translate {host_port: [container_ports]} into the engine's PortBindings map.

    Every (host, container) pair becomes its own entry under "<container>/tcp",
    bound on all interfaces. A container port reached from several host ports
    keeps all of them; repeating an identical pair yields one entry.
    Port ranges are not checked here, the engine rejects bad values.
    """
    bindings: PortBindings = {}
    for host_port, container_ports in ports.items():
        for container_port in container_ports:
            entry = {"HostIp": "", "HostPort": str(host_port)}
            port_bindings = bindings.setdefault(f"{container_port}/tcp", [])
            if entry not in port_bindings:
                port_bindings.append(entry)
    return bindings


def exposed_ports(bindings: PortBindings) -> Dict[str, dict]:
    return {port: {} for port in bindings}
