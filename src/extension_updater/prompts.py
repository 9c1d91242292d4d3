"""Interactive terminal prompts."""

from __future__ import annotations

from .ui import BOLD, c, err


def _safe_input(prompt: str) -> str:
    """``input`` that treats a closed stdin as an empty answer."""
    try:
        return input(prompt)
    except EOFError:
        return ""


def prompt_yes_no(question: str, default: bool = True) -> bool:
    """Simple interactive yes/no prompt. Returns True for yes, False for no.

    default controls what happens when user just hits Enter.
    """
    suffix = "[Y/n]" if default else "[y/N]"
    while True:
        s = _safe_input(f"{c(question, BOLD)} {suffix} ").strip().lower()
        if not s:
            return default
        if s in ("y", "yes"):
            return True
        if s in ("n", "no"):
            return False
        err("Please answer y or n.")


def prompt_choice(message: str, accept: str, decline: str) -> bool:
    """Ask a binary question labelled with the two choices; defaults to decline."""
    return prompt_yes_no(f"{message}\n  y = {accept}, n = {decline}.", default=False)


__all__ = ["prompt_choice", "prompt_yes_no"]
