"""List known databases."""

from typing import Any

from ..tool import Tool, ToolConfig


class ListTool(Tool):
    """List configured databases, then discovered ones. The first is the default."""

    def _create_config(self) -> ToolConfig:
        return ToolConfig(
            name="list",
            aliases=["ls"],
            help_text="List known databases",
        )

    def run(self, **kwargs: Any) -> int:
        names = self.service.all_names()
        self.out.write("Databases:")
        if not names:
            self.out.write("  No databases configured")
            return 0
        for i, name in enumerate(names):
            self.out.write(f"  {name} (default)" if i == 0 else f"  {name}")
        return 0
