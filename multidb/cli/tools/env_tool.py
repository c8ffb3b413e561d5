"""Connection variable report."""

from typing import Any

from ...db.urls import mask_url
from ..output import format_table
from ..tool import Tool, ToolConfig


class EnvTool(Tool):
    """Show, per database, which connection variable is in effect."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="env",
            help_text="Show connection variables",
            description=(
                "For each database, show the environment variable its URL is "
                "resolved from. Passwords are masked."
            ),
        )

    def run(self, **kwargs: Any) -> int:
        registry = self.service.registry
        resolver = registry.resolver

        rows = []
        for name in registry.get_all_names():
            config = registry.get_config(name)
            if config.explicit_url:
                rows.append((name, "(config)", mask_url(config.explicit_url)))
                continue
            found = resolver.from_env(name)
            if found is not None:
                var, url = found
                rows.append((name, var, mask_url(url)))
            else:
                rows.append((name, "(default)", config.provider))

        if not rows:
            self.out.write("No databases configured")
            return 0
        for line in format_table(rows):
            self.out.write(line)
        return 0
