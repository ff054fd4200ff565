"""customzsh — repeatable zsh environment setup."""

__version__ = "0.3.0"
