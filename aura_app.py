"""
Aura - desktop chat client.

Launches the main window; sign in to start a conversation with Aura.
"""
from aura.main_window import main

if __name__ == "__main__":
    main()
