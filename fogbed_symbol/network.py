# fogbed_symbol/network.py

"""
Execução local da topologia compilada com Fogbed

Cada serviço do docker-compose.yml vira um Container Fogbed; os comandos
sobem na ordem de dependência depois que o experimento inicia.
"""

import time
from pathlib import Path
from typing import Dict, List, Optional

from fogbed import Container, FogbedExperiment

from fogbed_symbol.models import ComposeService, DockerCompose
from fogbed_symbol.utils import entity_logger, get_logger, read_yaml, validate_ip

logger = get_logger("network")

BASE_IP = "10.0.0."
LOG_DIR = "/var/log/symbol"


def resolve_volume(volume: str, docker_dir: Path) -> str:
    """Converte volume relativo ao compose em caminho absoluto do host"""
    parts = volume.split(":")
    host = (Path(docker_dir) / parts[0]).resolve()
    return ":".join([str(host)] + [p for p in parts[1:] if p])


def parse_port_bindings(ports: List[str]) -> Dict[int, int]:
    """"externa:interna" → {interna: externa}"""
    bindings = {}
    for mapping in ports:
        external, internal = mapping.split(":")
        bindings[int(internal)] = int(external)
    return bindings


def hosts_entries(ips: Dict[str, str]) -> str:
    return "\n".join(f"{ip} {name}" for name, ip in ips.items())


class SymbolServiceContainer(Container):
    """
    Container Fogbed de um serviço da topologia
    """

    def __init__(self, service: ComposeService, ip: str, docker_dir: Path):
        if not validate_ip(ip):
            raise ValueError(f"Invalid IP for {service.name}: {ip}")

        self.service = service
        self.ip_addr = ip
        volumes = [resolve_volume(v, docker_dir) for v in service.volumes or []]
        bindings = parse_port_bindings(service.ports)

        logger.debug(f"Creating container: {service.name} ({service.image}) @ {ip}")

        super().__init__(
            name=service.name,
            dimage=service.image,
            ip=ip,
            volumes=volumes,
            port_bindings=bindings,
            ports=list(bindings),
            privileged=True,
            dcmd="tail -f /dev/null",
        )

    def get_start_command(self) -> str:
        return (
            f"mkdir -p {LOG_DIR}; "
            f"nohup {self.service.command} > {LOG_DIR}/{self.service.name}.log 2>&1 & "
            f"echo $! > {LOG_DIR}/{self.service.name}.pid"
        )


class FogbedNetwork:
    """
    Orquestrador da topologia sobre um FogbedExperiment
    """

    def __init__(self, experiment: FogbedExperiment, compose: DockerCompose, docker_dir: Path):
        self.exp = experiment
        self.compose = compose
        self.docker_dir = Path(docker_dir)
        self.order = compose.start_order()
        self.ips = {name: f"{BASE_IP}{index + 1}" for index, name in enumerate(self.order)}
        self.containers: Dict[str, SymbolServiceContainer] = {}

    @classmethod
    def from_compose_file(cls, experiment: FogbedExperiment, compose_file: Path) -> "FogbedNetwork":
        compose_file = Path(compose_file)
        compose = DockerCompose.from_dict(read_yaml(compose_file))
        return cls(experiment, compose, compose_file.parent)

    def attach_to_experiment(self, datacenter_name: str = "cloud") -> None:
        logger.info(f"Attaching {len(self.order)} services to datacenter: {datacenter_name}")
        cloud = self.exp.add_virtual_instance(datacenter_name)
        for name in self.order:
            container = SymbolServiceContainer(self.compose.services[name], self.ips[name], self.docker_dir)
            self.exp.add_docker(container, datacenter=cloud)
            self.containers[name] = container
            entity_logger(logger, name).debug("✅ Service attached")

    def start(self, delay: float = 1.0) -> None:
        """Inicia os serviços na ordem de dependência (experimento já iniciado)"""
        entries = hosts_entries(self.ips)
        for name in self.order:
            container = self.containers[name]
            container.cmd(f"sh -c \"echo '{entries}' >> /etc/hosts\"")
            entity_logger(logger, name).info(f"Starting service ({self.ips[name]})")
            container.cmd(container.get_start_command())
            time.sleep(delay)
        logger.info("✅ All services started")

    def container(self, name: str) -> Optional[SymbolServiceContainer]:
        return self.containers.get(name)
