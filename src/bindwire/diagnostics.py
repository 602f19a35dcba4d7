"""Rich rendering of a registry's bindings for debugging."""

from rich.console import Console
from rich.table import Table

from bindwire.registry import BindingRegistry


def bindings_table(registry: BindingRegistry, title: str = "Bindings") -> Table:
    """Build a table with one row per binding in ``registry``."""
    snapshot = registry.snapshot()

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Owner")
    table.add_column("Member")
    table.add_column("Mode")
    table.add_column("Detail", style="dim")

    for binding in snapshot.listeners:
        table.add_row(
            "listener",
            binding.channel,
            type(binding.owner).__name__,
            binding.slot.name,
            binding.mode.value,
            f"executor={binding.executor}" if binding.executor else "",
        )
    for binding in snapshot.executors:
        table.add_row(
            "executor",
            binding.name,
            type(binding.owner).__name__,
            f"{binding.operation}()",
            binding.mode.value,
            ", ".join(binding.arguments),
        )
    for binding in sorted(snapshot.parameters, key=lambda p: (p.executor, p.position)):
        table.add_row(
            "parameter",
            binding.executor,
            type(binding.owner).__name__,
            binding.slot.name,
            "",
            f"position={binding.position}",
        )

    return table


def print_bindings(registry: BindingRegistry, console: Console | None = None) -> None:
    """Print the bindings table to ``console`` (stdout by default)."""
    console = console or Console()
    console.print(bindings_table(registry))
