"""
Aura chat client package.

PyQt6 desktop client for the Aura conversational-support service: sign-in,
and a floating chat widget bound to a server-issued chat session.
"""


def main():
    """Convenience entry point; delegates to aura.main_window.main()."""
    from aura.main_window import main as _main
    _main()


__all__ = ["main"]
