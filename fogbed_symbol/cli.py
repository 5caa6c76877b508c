#!/usr/bin/env python3
# fogbed_symbol/cli.py

"""
CLI do fogbed-symbol
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from fogbed_symbol.bootstrap import BootstrapService
from fogbed_symbol.context import ComposeParams, ConfigParams, Preset, RunContext
from fogbed_symbol.exceptions import BootstrapError
from fogbed_symbol.utils import get_logger, setup_logging


def _context(args) -> RunContext:
    return RunContext(
        target=Path(args.target),
        reset=getattr(args, "reset", False),
        logger=get_logger("cli"),
    )


def _config_params(args) -> ConfigParams:
    return ConfigParams(
        preset=Preset(args.preset),
        assembly=args.assembly,
        custom_preset=Path(args.custom_preset) if args.custom_preset else None,
    )


def _compose_params(args) -> ComposeParams:
    overrides = {k: v for k, v in (("registry", args.registry), ("repository", args.repository)) if v}
    return replace(ComposeParams(user=args.user, push=args.push), **overrides)


def cmd_config(args):
    """Gera identidades, genesis e configuração dos nós"""
    result = asyncio.run(BootstrapService(_context(args)).config(_config_params(args)))
    print(f"✅ {len(result.addresses.nodes)} nodes configured in {args.target}")


def cmd_compose(args):
    """Gera docker-compose.yml a partir do preset resolvido"""
    compose_file = asyncio.run(BootstrapService(_context(args)).compose(_compose_params(args)))
    print(f"✅ {compose_file}")


def cmd_start(args):
    """config + compose"""
    service = BootstrapService(_context(args))
    compose_file = asyncio.run(service.start(_config_params(args), _compose_params(args)))
    print(f"✅ {compose_file}")


def cmd_deploy(args):
    """Sobe a topologia compilada num FogbedExperiment"""
    from fogbed import FogbedExperiment

    from fogbed_symbol.network import FogbedNetwork

    compose_file = Path(args.target) / "docker" / "docker-compose.yml"
    if not compose_file.exists():
        print(f"❌ {compose_file} not found. Run 'compose' first.")
        sys.exit(1)

    exp = FogbedExperiment()
    network = FogbedNetwork.from_compose_file(exp, compose_file)
    network.attach_to_experiment(datacenter_name=args.datacenter)
    try:
        exp.start()
        network.start()
        input("Network running. Press Enter to stop...")
    finally:
        exp.stop()


def cmd_clean(args):
    """Remove o diretório target"""
    BootstrapService(_context(args)).clean()
    print("✅ Clean completed")


def _add_target(parser, reset=True):
    parser.add_argument('-t', '--target', default='target', help='Diretório de saída')
    if reset:
        parser.add_argument('-r', '--reset', action='store_true', help='Apaga artefatos existentes')


def _add_config_args(parser):
    parser.add_argument('-p', '--preset', default=str(Preset.BOOTSTRAP),
                        choices=[str(p) for p in Preset], help='Preset embarcado')
    parser.add_argument('-a', '--assembly', help='Assembly do preset')
    parser.add_argument('-c', '--custom-preset', help='Arquivo YAML com overrides')


def _add_compose_args(parser):
    parser.add_argument('-u', '--user', default='current',
                        help="Usuário dos containers ('current' = uid:gid atual)")
    parser.add_argument('--push', action='store_true',
                        help='Embute volumes em imagens e publica no registry')
    parser.add_argument('--registry', help='Registry remoto')
    parser.add_argument('--repository', help='Repositório das imagens geradas')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fogbed-symbol',
        description="Gerador de rede Symbol (config, genesis, docker-compose) com Fogbed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Logs em DEBUG')
    parser.add_argument('--log-file', help='Arquivo de log')

    subparsers = parser.add_subparsers(dest='command', help='Comandos')

    config_parser = subparsers.add_parser('config', help='Gera configuração e genesis')
    _add_target(config_parser)
    _add_config_args(config_parser)

    compose_parser = subparsers.add_parser('compose', help='Gera docker-compose.yml')
    _add_target(compose_parser)
    _add_compose_args(compose_parser)

    start_parser = subparsers.add_parser('start', help='config + compose')
    _add_target(start_parser)
    _add_config_args(start_parser)
    _add_compose_args(start_parser)

    deploy_parser = subparsers.add_parser('deploy', help='Executa a topologia no Fogbed')
    _add_target(deploy_parser, reset=False)
    deploy_parser.add_argument('--datacenter', default='cloud', help='Instância virtual do Fogbed')

    clean_parser = subparsers.add_parser('clean', help='Remove o target')
    _add_target(clean_parser, reset=False)

    return parser


COMMANDS = {
    'config': cmd_config,
    'compose': cmd_compose,
    'start': cmd_start,
    'deploy': cmd_deploy,
    'clean': cmd_clean,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(
        level=logging.DEBUG if args.verbose else None,
        log_file=args.log_file,
        target=None if args.command == "clean" else args.target,
    )

    try:
        COMMANDS[args.command](args)
    except BootstrapError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
