# fogbed_symbol/compose.py

"""
Compilação da topologia de containers (docker-compose.yml)

Converte bancos, nós e gateways do preset em serviços com portas, volumes,
dependências e rede. No modo push, cada volume é embutido numa nova imagem
publicada em `{registry}/{repository}:{service}`.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, Union

from fogbed_symbol.context import WORKING_DIR, ComposeParams, RunContext
from fogbed_symbol.exceptions import MissingPrerequisiteError
from fogbed_symbol.models import ComposeService, ConfigPreset, DockerCompose
from fogbed_symbol.presets import load_existing_preset_data
from fogbed_symbol.utils import (
    delete_folder,
    docker_user_group,
    entity_logger,
    generate_configuration,
    mkdir,
    run_command,
    write_text,
    write_yaml,
)

DATABASE_PORT = 27017
NODE_PORT = 7900
BROKER_PORT = 7902
GATEWAY_PORT = 3000
GATEWAY_IPV4_ADDRESS = "172.20.0.10"
NODE_RESTART_POLICY = "on-failure:2"
COMPOSE_FILE = "docker-compose.yml"

OpenPort = Optional[Union[bool, int, str]]


def vol(host_folder: str, image_folder: str) -> str:
    return f"{host_folder}:{image_folder}"


def resolve_ports(internal_port: int, open_port: OpenPort) -> List[str]:
    """
    Mapeamento de porta publicada

    true/"true" → mesma porta externa; número/string → porta externa dada;
    falso/ausente → nenhuma porta.
    """
    if not open_port or (isinstance(open_port, str) and open_port.lower() == "false"):
        return []
    if open_port is True or (isinstance(open_port, str) and open_port.lower() == "true"):
        return [f"{internal_port}:{internal_port}"]
    return [f"{open_port}:{internal_port}"]


def node_command(name: str, script: str) -> str:
    """Checa lock/recovery antes de iniciar o processo principal"""
    return (
        f'bash -c "/bin/bash /symbol-commands/runServerRecover.sh {name} '
        f'&& /bin/bash /symbol-commands/{script} {name}"'
    )


class ImageBuilder(Protocol):
    async def build(self, context_dir: Path, dockerfile: Path, image: str) -> None:
        ...

    async def tag(self, source: str, target: str) -> None:
        ...

    async def push(self, image: str) -> None:
        ...


class DockerImageBuilder:
    """ImageBuilder usando o CLI do docker"""

    async def build(self, context_dir: Path, dockerfile: Path, image: str) -> None:
        await run_command(["docker", "build", "-f", str(dockerfile), "-t", image, str(context_dir)])

    async def tag(self, source: str, target: str) -> None:
        await run_command(["docker", "tag", source, target])

    async def push(self, image: str) -> None:
        await run_command(["docker", "push", image])


def dockerfile_content(image: str, volumes: List[str]) -> str:
    """Imagem original + um ADD por volume (caminhos relativos ao target)"""
    lines = [f"FROM docker.io/{image}", ""]
    for volume in volumes:
        host, container = volume.split(":")[:2]
        lines.append(f"ADD {host.replace('../', '').replace('./', 'docker/')} {container}")
    return "\n".join(lines) + "\n"


class ComposeBuilder:
    """
    Gera <target>/docker/docker-compose.yml a partir do preset resolvido

    Se o arquivo já existe e não houve reset, ele é reaproveitado sem recálculo.
    """

    def __init__(
        self,
        context: RunContext,
        params: ComposeParams = ComposeParams(),
        image_builder: Optional[ImageBuilder] = None,
    ):
        self.context = context
        self.params = params
        self.logger = context.logger
        self.image_builder = image_builder or DockerImageBuilder()

    @property
    def compose_file(self) -> Path:
        return self.context.docker_dir / COMPOSE_FILE

    def resolve_user(self) -> Optional[str]:
        if self.params.push:
            return None
        if not self.params.user or not self.params.user.strip():
            return None
        if self.params.user == "current":
            return docker_user_group()
        return self.params.user

    def registry_image(self, service_name: str) -> Tuple[str, str]:
        """(nome local gerado, referência absoluta no registry)"""
        generated = f"{self.params.repository}:{service_name}"
        return generated, f"{self.params.registry}/{generated}"

    async def resolve_image(
        self, service_name: str, image: str, volumes: List[str]
    ) -> Tuple[str, Optional[List[str]]]:
        """
        Imagem e volumes finais de um serviço

        No modo push os volumes viram camadas de uma nova imagem publicada.
        """
        if not self.params.push:
            return image, volumes

        target = self.context.target
        dockerfile = write_text(target / f"Dockerfile-{service_name}", dockerfile_content(image, volumes))
        await asyncio.gather(*[
            asyncio.to_thread(mkdir, self.context.docker_dir / v.split(":")[0]) for v in volumes
        ])

        generated, absolute = self.registry_image(service_name)
        await self.image_builder.build(target, dockerfile, generated)
        await self.image_builder.tag(generated, absolute)
        await self.image_builder.push(absolute)
        entity_logger(self.logger, service_name).info(f"Image {absolute} pushed")
        return absolute, None

    async def database_service(self, database, preset: ConfigPreset, user: Optional[str]) -> ComposeService:
        image, volumes = await self.resolve_image(database.name, preset.mongo_image, [
            vol("./mongo", "/userconfig/:ro"),
            vol("../data/mongo", "/dbdata:rw"),
            vol("../state", "/state"),
        ])
        return ComposeService(
            name=database.name,
            container_name=database.name,
            image=image,
            user=user,
            command=(
                f'bash -c "/bin/bash /userconfig/mongors.sh {database.name} '
                f'& mongod --dbpath=/dbdata --bind_ip={database.name}"'
            ),
            ports=resolve_ports(DATABASE_PORT, database.open_port),
            volumes=volumes,
        )

    async def node_services(self, node, preset: ConfigPreset, user: Optional[str]) -> List[ComposeService]:
        image, volumes = await self.resolve_image(node.name, preset.symbol_server_image, [
            vol(f"../{WORKING_DIR}/{node.name}", "/symbol-workdir"),
            vol("./userconfig", "/symbol-commands"),
            vol("../state", "/state"),
        ])
        node_service = ComposeService(
            name=node.name,
            image=image,
            user=user,
            command=node_command(node.name, "startServer.sh"),
            restart=NODE_RESTART_POLICY,
            ports=resolve_ports(NODE_PORT, node.open_port),
            volumes=volumes,
        )
        services = [node_service]
        if node.database_host:
            node_service.depends_on.append(node.database_host)
        if node.broker_host:
            services.append(ComposeService(
                name=node.broker_host,
                image=node_service.image,
                user=user,
                command=node_command(node.broker_host, "startBroker.sh"),
                restart=NODE_RESTART_POLICY,
                ports=resolve_ports(BROKER_PORT, node.open_broker_port),
                volumes=list(volumes) if volumes else None,
                depends_on=[node.database_host] if node.database_host else [],
            ))
            node_service.depends_on.append(node.broker_host)
        return services

    async def gateway_service(self, gateway, preset: ConfigPreset, user: Optional[str]) -> ComposeService:
        image, volumes = await self.resolve_image(gateway.name, preset.symbol_rest_image, [
            vol(f"../{WORKING_DIR}/{gateway.name}", "/symbol-workdir"),
        ])
        return ComposeService(
            name=gateway.name,
            image=image,
            user=user,
            command='ash -c "cd /symbol-workdir && npm start --prefix /app/catapult-rest/rest /symbol-workdir/rest.json"',
            ports=resolve_ports(GATEWAY_PORT, gateway.open_port),
            volumes=volumes,
            depends_on=[gateway.database_host] if gateway.database_host else [],
            ipv4_address=GATEWAY_IPV4_ADDRESS,
        )

    async def compile(self, preset: ConfigPreset) -> DockerCompose:
        """Grafo de serviços (bancos → nós/brokers → gateways)"""
        user = self.resolve_user()
        for label, image in (
            ("mongoImage", preset.mongo_image if preset.databases else "-"),
            ("symbolServerImage", preset.symbol_server_image if preset.nodes else "-"),
            ("symbolRestImage", preset.symbol_rest_image if preset.gateways else "-"),
        ):
            if not image:
                raise MissingPrerequisiteError(f"{label} must be defined in the preset")

        databases = await asyncio.gather(*[self.database_service(d, preset, user) for d in preset.databases])
        unnamed = [e for e in preset.nodes + preset.gateways if not e.name]
        if unnamed:
            raise MissingPrerequisiteError("Every node and gateway must be named (run the config command first)")

        nodes = await asyncio.gather(*[self.node_services(n, preset, user) for n in preset.nodes])
        gateways = await asyncio.gather(*[self.gateway_service(g, preset, user) for g in preset.gateways])

        compose = DockerCompose()
        for service in databases:
            compose.add(service)
        for services in nodes:
            for service in services:
                compose.add(service)
        for service in gateways:
            compose.add(service)

        compose.start_order()
        return compose

    async def run(self, preset: Optional[ConfigPreset] = None) -> Path:
        preset = preset or load_existing_preset_data(self.context)

        if self.context.reset:
            delete_folder(self.context.docker_dir)

        if self.compose_file.exists():
            self.logger.info(f"{self.compose_file} already exist. Reusing. (run -r to reset)")
            return self.compose_file

        mkdir(self.context.target / "state")
        mkdir(self.context.docker_dir)
        await generate_configuration(preset.to_dict(), self.context.templates("docker"), self.context.docker_dir)

        self.logger.info("creating docker-compose.yml from last used profile.")
        compose = await self.compile(preset)

        write_yaml(self.compose_file, compose.to_dict())
        self.logger.info(f"✅ docker-compose.yml file created {self.compose_file}")
        return self.compose_file
