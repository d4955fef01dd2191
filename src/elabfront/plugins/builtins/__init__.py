"""Built-in plugins shipped with elabfront."""
