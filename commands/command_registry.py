"""
Command Registry
Centralized command registration and management
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from utils.logger import get_logger

# (interaction, options, command handler cog)
CommandHandler = Callable[[Any, Dict[str, Any], Any], Awaitable[None]]


@dataclass
class CommandDefinition:
    """Metadata describing one slash command."""

    name: str
    description: str = ""
    category: str = "General"
    aliases: List[str] = field(default_factory=list)
    args: List[Dict[str, Any]] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    usage: str = ""
    details: str = ""
    emoji: str = ""
    guild_only: bool = False
    admin_only: bool = False

    def __post_init__(self):
        self.usage = self.usage or f"/{self.name}"
        self.details = self.details or self.description


@dataclass
class Command:
    """Registered command with definition and handler."""

    definition: CommandDefinition
    handler: CommandHandler

    def __getattr__(self, item: str) -> Any:
        # Expose definition fields directly (cmd.name, cmd.usage, ...)
        definition = self.__dict__.get("definition")
        if definition is None:
            raise AttributeError(item)
        return getattr(definition, item)


class CommandRegistry:
    """Centralized command registration and management."""

    def __init__(self):
        self.logger = get_logger("CommandRegistry")
        self.commands: Dict[str, Command] = {}
        self.aliases: Dict[str, str] = {}
        self.categories: Dict[str, List[Command]] = {}

    def register(self, config: Dict[str, Any], handler: CommandHandler) -> "CommandRegistry":
        """
        Register a command.

        Args:
            config: CommandDefinition fields; only ``name`` is required
            handler: Async function to handle the command

        Returns:
            Self for chaining
        """
        command = Command(CommandDefinition(**config), handler)
        key = command.name.lower()

        # Re-registering (extension reload) replaces the old entry
        if key in self.commands:
            self.unregister(key)

        self.commands[key] = command
        for alias in command.aliases:
            self.aliases[alias.lower()] = key
        self.categories.setdefault(command.category, []).append(command)

        self.logger.debug(f"Registered command: {command.name}")
        return self

    def unregister(self, name: str) -> bool:
        """Remove a command and its aliases. Returns True if it existed."""
        command = self.commands.pop(name.lower(), None)
        if not command:
            return False

        for alias in command.aliases:
            self.aliases.pop(alias.lower(), None)

        siblings = self.categories.get(command.category, [])
        if command in siblings:
            siblings.remove(command)
        if not siblings:
            self.categories.pop(command.category, None)
        return True

    def clear(self) -> None:
        self.commands.clear()
        self.aliases.clear()
        self.categories.clear()

    def get(self, name: str) -> Optional[Command]:
        """Look up a command by name or alias, ignoring case."""
        key = name.lower()
        return self.commands.get(key) or self.commands.get(self.aliases.get(key, ""))

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def get_by_category(self, category: str) -> List[Command]:
        return self.categories.get(category, [])

    def get_categories(self) -> List[str]:
        return list(self.categories.keys())

    def get_all(self) -> List[Command]:
        return list(self.commands.values())

    def generate_help(self) -> str:
        """
        Generate help text for all commands.

        Returns:
            Formatted help string
        """
        lines = [
            "📖 **Guild Assistant Commands**",
            "",
        ]

        for category, commands in self.categories.items():
            icon = self._get_category_icon(category)
            lines.append(f"**{icon} {category}:**")

            for cmd in commands:
                aliases_str = f" ({', '.join(cmd.aliases)})" if cmd.aliases else ""
                lines.append(f"• `/{cmd.name}`{aliases_str} - {cmd.description}")

            lines.append("")

        return "\n".join(lines).rstrip()

    def generate_command_help(self, name: str) -> Optional[str]:
        """
        Generate detailed help for a specific command.

        Args:
            name: Command name

        Returns:
            Formatted help string or None if command not found
        """
        cmd = self.get(name)
        if not cmd:
            return None

        lines = [
            f"📖 **Command:** `/{cmd.name}`",
            "",
            f"**Description:** {cmd.description}",
            f"**Usage:** `{cmd.usage}`",
        ]

        if cmd.aliases:
            aliases_formatted = ", ".join(f"`{a}`" for a in cmd.aliases)
            lines.append(f"**Aliases:** {aliases_formatted}")

        if cmd.args:
            lines.append("**Arguments:**")
            for arg in cmd.args:
                required = "*" if arg.get("required") else ""
                lines.append(f"  • `{arg['name']}`{required} - {arg.get('description', '')}")

        if cmd.examples:
            lines.append("**Examples:**")
            for example in cmd.examples:
                lines.append(f"  • `{example}`")

        if cmd.admin_only:
            lines.append("**Requires:** Administrator")

        return "\n".join(lines)

    def _get_category_icon(self, category: str) -> str:
        icons = {
            "General": "📋",
            "Utility": "🛠️",
            "Moderation": "🛡️",
            "Support": "🎫",
            "Community": "💬",
        }
        return icons.get(category, "•")


# Singleton instance
registry = CommandRegistry()
