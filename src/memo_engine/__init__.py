"""UI-agnostic memo editor core: autosave scheduling and markdown line commands."""

__all__ = [
    "actions",
    "adapters",
    "autosave",
    "buffer",
    "commands",
    "config",
    "draft",
    "keymaps",
    "runtime",
    "session",
]

__version__ = "0.1.0"
