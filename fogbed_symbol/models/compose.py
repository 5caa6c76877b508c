# fogbed_symbol/models/compose.py

"""
Modelo da topologia de containers (docker-compose.yml)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fogbed_symbol.exceptions import InvalidPresetError

DEFAULT_SUBNET = "172.20.0.0/24"


@dataclass
class ComposeService:
    """
    Serviço da topologia

    Attributes:
        name: Nome do serviço (chave no compose)
        image: Imagem (local ou referência no registry)
        command: Linha de comando do container
        user: uid:gid do container (None = usuário da imagem)
        container_name: Nome fixo do container (bancos)
        ports: Mapeamentos "externa:interna"
        volumes: Montagens "host:container"; None quando embutidas na imagem
        depends_on: Serviços que precisam subir antes
        ipv4_address: Endereço estático na rede default
    """

    name: str
    image: str
    command: str
    user: Optional[str] = None
    container_name: Optional[str] = None
    stop_signal: str = "SIGINT"
    restart: Optional[str] = None
    ports: List[str] = field(default_factory=list)
    volumes: Optional[List[str]] = None
    depends_on: List[str] = field(default_factory=list)
    ipv4_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.container_name:
            data["container_name"] = self.container_name
        data["image"] = self.image
        if self.user:
            data["user"] = self.user
        data["command"] = self.command
        data["stop_signal"] = self.stop_signal
        if self.restart:
            data["restart"] = self.restart
        if self.ports:
            data["ports"] = list(self.ports)
        if self.volumes:
            data["volumes"] = list(self.volumes)
        if self.depends_on:
            data["depends_on"] = list(self.depends_on)
        if self.ipv4_address:
            data["networks"] = {"default": {"ipv4_address": self.ipv4_address}}
        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "ComposeService":
        networks = data.get("networks") or {}
        return cls(
            name=name,
            image=data["image"],
            command=data.get("command", ""),
            user=data.get("user"),
            container_name=data.get("container_name"),
            stop_signal=data.get("stop_signal", "SIGINT"),
            restart=data.get("restart"),
            ports=list(data.get("ports") or []),
            volumes=list(data["volumes"]) if data.get("volumes") else None,
            depends_on=list(data.get("depends_on") or []),
            ipv4_address=(networks.get("default") or {}).get("ipv4_address"),
        )


@dataclass
class DockerCompose:
    """Documento completo: rede privada fixa + serviços"""

    services: Dict[str, ComposeService] = field(default_factory=dict)
    subnet: str = DEFAULT_SUBNET
    version: str = "3"

    def add(self, service: ComposeService) -> None:
        if service.name in self.services:
            raise InvalidPresetError(f"Duplicate service name: {service.name}")
        self.services[service.name] = service

    def start_order(self) -> List[str]:
        """
        Ordem de inicialização respeitando depends_on

        Entre serviços independentes mantém a ordem de inserção.

        Raises:
            InvalidPresetError: dependência desconhecida ou ciclo
        """
        for service in self.services.values():
            for dependency in service.depends_on:
                if dependency not in self.services:
                    raise InvalidPresetError(
                        f"Service {service.name} depends on unknown service {dependency}"
                    )

        ordered: List[str] = []
        pending = list(self.services)
        while pending:
            ready = [
                name for name in pending
                if all(d in ordered for d in self.services[name].depends_on)
            ]
            if not ready:
                raise InvalidPresetError(f"Dependency cycle between services: {', '.join(pending)}")
            ordered.append(ready[0])
            pending.remove(ready[0])
        return ordered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "networks": {
                "default": {
                    "ipam": {
                        "config": [{"subnet": self.subnet}],
                    },
                },
            },
            "services": {name: s.to_dict() for name, s in self.services.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DockerCompose":
        config = (((data.get("networks") or {}).get("default") or {}).get("ipam") or {}).get("config") or []
        return cls(
            services={
                name: ComposeService.from_dict(name, service)
                for name, service in (data.get("services") or {}).items()
            },
            subnet=config[0]["subnet"] if config else DEFAULT_SUBNET,
            version=str(data.get("version", "3")),
        )
