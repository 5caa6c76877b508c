# fogbed_symbol/bootstrap.py

"""
Fachada das operações: config, compose, start e clean
"""

from pathlib import Path
from typing import Optional

from fogbed_symbol.compose import ComposeBuilder, ImageBuilder
from fogbed_symbol.config import ConfigResult, ConfigService
from fogbed_symbol.context import ComposeParams, ConfigParams, RunContext
from fogbed_symbol.genesis import GenesisAssembler, GenesisBlockBuilder
from fogbed_symbol.models import ConfigPreset
from fogbed_symbol.utils import delete_folder


class BootstrapService:
    def __init__(
        self,
        context: RunContext,
        image_builder: Optional[ImageBuilder] = None,
        genesis_builder: Optional[GenesisBlockBuilder] = None,
    ):
        self.context = context
        self.image_builder = image_builder
        self.genesis_builder = genesis_builder

    async def config(self, params: ConfigParams = ConfigParams()) -> ConfigResult:
        genesis = GenesisAssembler(self.context, builder=self.genesis_builder)
        return await ConfigService(self.context, params, genesis=genesis).run()

    async def compose(
        self, params: ComposeParams = ComposeParams(), preset: Optional[ConfigPreset] = None
    ) -> Path:
        return await ComposeBuilder(self.context, params, image_builder=self.image_builder).run(preset)

    async def start(
        self,
        config_params: ConfigParams = ConfigParams(),
        compose_params: ComposeParams = ComposeParams(),
    ) -> Path:
        """config seguido de compose (a topologia usa o preset recém-resolvido)"""
        result = await self.config(config_params)
        return await self.compose(compose_params, result.preset)

    def clean(self) -> None:
        self.context.logger.info(f"Cleaning target {self.context.target}")
        delete_folder(self.context.target)
