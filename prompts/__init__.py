"""Loading of the assistant's system prompts from text files."""
from pathlib import Path
import typing as t

PROMPTS_DIR = Path(__file__).resolve().parent


def load_prompt(prompt_name: str, prompts_dir: t.Optional[str] = None) -> str:
    """
    Load a prompt from a text file.

    Args:
        prompt_name: Name of the prompt file (without .txt extension)
        prompts_dir: Optional directory to read from instead of this package.

    Returns:
        The content of the prompt file.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist.
    """
    prompt_file = Path(prompts_dir or PROMPTS_DIR) / f"{prompt_name}.txt"

    if not prompt_file.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")

    return prompt_file.read_text(encoding="utf-8")


def render_prompt(prompt_name: str, **values: str) -> str:
    """
    Load a prompt and fill its ``{PLACEHOLDER}`` markers.

    Each keyword replaces the marker of the same name in upper case, so
    ``render_prompt("chat_system_prompt", context="...")`` fills ``{CONTEXT}``.
    Other braces in the prompt are left untouched.
    """
    prompt = load_prompt(prompt_name)
    for name, value in values.items():
        prompt = prompt.replace("{" + name.upper() + "}", value)
    return prompt
