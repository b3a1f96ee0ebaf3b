"""Console output and interactive prompts for the command line."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click


def green(value: Any) -> str:
    return click.style(str(value), fg="green")


def yellow(value: Any) -> str:
    return click.style(str(value), fg="yellow")


def blue(value: Any) -> str:
    return click.style(str(value), fg="blue")


def align_output(label_value_pairs: Sequence[Tuple[str, Any]]) -> None:
    """Print label/value pairs with the values lined up after the longest label."""
    if not label_value_pairs:
        return
    width = max(len(label) for label, _ in label_value_pairs)
    for label, value in label_value_pairs:
        click.echo(f"{label.ljust(width + 1)} {value}")


def colorize_json(data: Any) -> str:
    """Pretty-print JSON with blue keys and green string values."""
    lines: List[str] = []
    for line in json.dumps(data, indent=2).splitlines():
        key, sep, rest = line.partition('": ')
        if sep and key.lstrip().startswith('"'):
            value = rest
            if value.startswith('"'):
                value = click.style(value.rstrip(","), fg="green") + ("," if value.endswith(",") else "")
            lines.append(click.style(key + '"', fg="blue", bold=True) + ": " + value)
        elif line.strip().startswith('"'):
            lines.append(click.style(line, fg="green"))
        else:
            lines.append(line)
    return "\n".join(lines)


def prompt_for_missing(cli_options: Dict[str, Optional[str]], prompts: Dict[str, str]) -> Dict[str, str]:
    """
    Fill in options that were not given on the command line by asking for them.

    Args:
        cli_options: Values parsed from the command line (None when absent)
        prompts: Option name to prompt message
    """
    answers = {}
    for name, message in prompts.items():
        value = cli_options.get(name)
        if not value:
            value = click.prompt(message, default="", show_default=False)
        answers[name] = value
    return answers


def confirm_overwrite(path: Path) -> bool:
    return click.confirm(f"File {path} exists. Overwrite it?", default=False)
