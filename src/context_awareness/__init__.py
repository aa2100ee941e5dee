"""cc-context-awareness - configurable context window thresholds for Claude Code.

Usage:
    cc-context-awareness install [template] [--global]
    cc-context-awareness remove <template>
    cc-context-awareness uninstall
"""

__version__ = "1.0.0"


def main():
    from context_awareness.cli import app

    app()


if __name__ == "__main__":
    main()
