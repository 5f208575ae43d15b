"""
Console output helpers shared by the CLI commands.
"""

import json
import logging
from typing import Any, Dict

from rich.console import Console
from rich.json import JSON

logger = logging.getLogger(__name__)

# User-facing output goes through this console; diagnostics go through logging.
console = Console()


def save_or_print_results(data: Dict[str, Any], output_file: str | None) -> None:
    """
    Writes an exported panel to ``output_file`` as JSON, or pretty-prints it.

    Text is written as UTF-8 without escaping, so French labels and
    reliability levels survive the round trip. A failed write is logged and
    reported on the console; it does not raise.

    Args:
        data (Dict[str, Any]): The JSON-ready panel.
        output_file (str | None): Destination path, or None for the console.
    """
    json_str = json.dumps(data, indent=4, ensure_ascii=False, default=str)
    if not output_file:
        console.print(JSON(json_str))
        return

    logger.info("Saving results to %s", output_file)
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(json_str)
    except OSError as e:
        logger.error("Error saving file to %s: %s", output_file, e)
        console.print(f"[bold red]Could not write {output_file}: {e}[/bold red]")
        return
    console.print(f"[bold green]Successfully saved to {output_file}[/bold green]")
